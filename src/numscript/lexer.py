"""
Lexer for numscript.

Converts source text into a list of tokens for the parser.
Supports:
- Statement terminators inferred from line breaks
- Integer literals (decimal, signed 64-bit range)
- String literals delimited by double quotes (no escape sequences)
- The four keywords: var, if, else, loop
- Comparison (== != > < >= <=) and logical (&& ||) operators
"""

import logging
from typing import List, Optional, Iterator
from .tokens import (
    Token, TokenType, SourceLocation, SourceSpan, KEYWORDS,
    TERMINATOR_TRIGGERS, INT_MAX,
)
from .errors import (
    error_unexpected_character,
    error_unterminated_string,
    error_invalid_number_literal,
)

logger = logging.getLogger(__name__)


class Lexer:
    """
    Tokenizer for numscript.

    A line break ends a statement when the token before it can end an
    expression (identifier, number, string or closing parenthesis). In that
    case the lexer emits a SEMICOLON token in place of the line break, so
    scripts can leave out explicit terminators at line ends while still
    needing ';' between statements on the same line.

    Usage:
        lexer = Lexer(source_code)
        tokens = lexer.tokenize()

    Or for streaming:
        lexer = Lexer(source_code)
        for token in lexer:
            process(token)

    With strict=False, characters the language does not use are dropped
    instead of raising LexerError.
    """

    def __init__(self, source: str, filename: Optional[str] = None, strict: bool = True):
        self.source = source
        self.filename = filename
        self.strict = strict
        self.pos = 0            # Current position in source
        self.line = 1           # Current line (1-indexed)
        self.column = 1         # Current column (1-indexed)
        self._lines: Optional[List[str]] = None  # Cached line list

        self.last_token: Optional[Token] = None
        self._finished = False

    @property
    def lines(self) -> List[str]:
        """Lazy-load line list for error reporting."""
        if self._lines is None:
            self._lines = self.source.splitlines()
        return self._lines

    def get_source_line(self, line_num: int) -> Optional[str]:
        """Get a specific line of source (1-indexed)."""
        if 1 <= line_num <= len(self.lines):
            return self.lines[line_num - 1]
        return None

    def _location(self) -> SourceLocation:
        """Get current source location."""
        return SourceLocation(self.line, self.column, self.pos, self.filename)

    def _span(self, start: SourceLocation) -> SourceSpan:
        """Create a span from start to current position."""
        return SourceSpan(start, self._location())

    def _peek(self, offset: int = 0) -> str:
        """Look at character at current position + offset without consuming."""
        idx = self.pos + offset
        if idx >= len(self.source):
            return '\0'
        return self.source[idx]

    def _advance(self) -> str:
        """Consume and return current character."""
        if self.pos >= len(self.source):
            return '\0'
        ch = self.source[self.pos]
        self.pos += 1
        if ch == '\n':
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        return ch

    def _match(self, expected: str) -> bool:
        """Consume character if it matches expected."""
        if self._peek() == expected:
            self._advance()
            return True
        return False

    def _is_at_end(self) -> bool:
        """Check if we've reached end of source."""
        return self.pos >= len(self.source)

    def _ends_statement(self) -> bool:
        """Does a line break here terminate the current statement?"""
        return self.last_token is not None and self.last_token.type in TERMINATOR_TRIGGERS

    def _skip_whitespace(self) -> Optional[Token]:
        """
        Skip whitespace, including line breaks.

        Returns a synthesized SEMICOLON if a line break was crossed right
        after a token that can end a statement.
        """
        newline_at: Optional[SourceLocation] = None
        while not self._is_at_end() and self._peek().isspace():
            if self._peek() == '\n' and newline_at is None:
                newline_at = self._location()
            self._advance()

        if newline_at is not None and self._ends_statement():
            return Token(TokenType.SEMICOLON, ";", "\\n",
                         SourceSpan(newline_at, newline_at))
        return None

    def _make_token(self, token_type: TokenType, value, start: SourceLocation,
                    lexeme: Optional[str] = None) -> Token:
        """Create a token."""
        span = self._span(start)
        if lexeme is None:
            lexeme = self.source[start.offset:self.pos]
        return Token(token_type, value, lexeme, span)

    def _scan_string(self) -> Token:
        """Scan a string literal. Everything up to the closing quote is kept verbatim."""
        start = self._location()
        self._advance()  # consume opening quote

        chars = []
        while not self._is_at_end() and self._peek() != '"':
            chars.append(self._advance())

        if self._is_at_end():
            raise error_unterminated_string(
                self._span(start),
                self.get_source_line(start.line)
            )

        self._advance()  # consume closing quote
        return self._make_token(TokenType.STRING_LITERAL, ''.join(chars), start)

    def _scan_number(self) -> Token:
        """Scan an integer literal."""
        start = self._location()
        while self._peek().isascii() and self._peek().isdigit():
            self._advance()

        lexeme = self.source[start.offset:self.pos]
        value = int(lexeme)
        if value > INT_MAX:
            raise error_invalid_number_literal(
                lexeme, self._span(start), self.get_source_line(start.line)
            )
        return self._make_token(TokenType.INT_LITERAL, value, start, lexeme)

    def _scan_identifier_or_keyword(self) -> Token:
        """Scan an identifier or keyword."""
        start = self._location()

        while _is_identifier_char(self._peek()):
            self._advance()

        lexeme = self.source[start.offset:self.pos]

        if lexeme in KEYWORDS:
            return self._make_token(KEYWORDS[lexeme], lexeme, start, lexeme)

        return self._make_token(TokenType.IDENTIFIER, lexeme, start, lexeme)

    def _scan_token(self) -> Token:
        """Scan the next token."""
        while True:
            terminator = self._skip_whitespace()
            if terminator:
                return terminator

            if self._is_at_end():
                # The last statement of a file needs no trailing newline
                if self._ends_statement():
                    here = self._location()
                    return Token(TokenType.SEMICOLON, ";", "", SourceSpan(here, here))
                return self._make_token(TokenType.EOF, None, self._location(), "")

            token = self._scan_lexeme()
            if token is not None:
                return token

    def _scan_lexeme(self) -> Optional[Token]:
        """Scan a single non-whitespace token; None when a character was dropped."""
        start = self._location()
        ch = self._peek()

        if ch == '"':
            return self._scan_string()

        if ch.isascii() and ch.isdigit():
            return self._scan_number()

        if ch.isascii() and (ch.isalpha() or ch == '_'):
            return self._scan_identifier_or_keyword()

        self._advance()

        # Two-character operators
        if ch == '=' and self._match('='):
            return self._make_token(TokenType.EQ, "==", start)
        if ch == '!' and self._match('='):
            return self._make_token(TokenType.NE, "!=", start)
        if ch == '<' and self._match('='):
            return self._make_token(TokenType.LE, "<=", start)
        if ch == '>' and self._match('='):
            return self._make_token(TokenType.GE, ">=", start)
        if ch == '&' and self._match('&'):
            return self._make_token(TokenType.AND, "&&", start)
        if ch == '|' and self._match('|'):
            return self._make_token(TokenType.OR, "||", start)

        single_char_tokens = {
            '(': TokenType.LPAREN,
            ')': TokenType.RPAREN,
            '{': TokenType.LBRACE,
            '}': TokenType.RBRACE,
            ',': TokenType.COMMA,
            ';': TokenType.SEMICOLON,
            '<': TokenType.LT,
            '>': TokenType.GT,
            '=': TokenType.ASSIGN,
        }

        if ch in single_char_tokens:
            return self._make_token(single_char_tokens[ch], ch, start)

        if self.strict:
            raise error_unexpected_character(
                ch, self._span(start), self.get_source_line(start.line)
            )
        logger.debug("dropping unexpected character %r at %s", ch, start)
        return None

    def _next(self) -> Token:
        token = self._scan_token()
        self.last_token = token
        return token

    def tokenize(self) -> List[Token]:
        """Tokenize the entire source, returning a list of tokens."""
        return list(self)

    def __iter__(self) -> Iterator[Token]:
        """Iterate over tokens."""
        if self._finished:
            return
        while True:
            token = self._next()
            yield token
            if token.type == TokenType.EOF:
                self._finished = True
                break


def _is_identifier_char(ch: str) -> bool:
    return ch.isascii() and (ch.isalnum() or ch == '_')


def tokenize(source: str, filename: Optional[str] = None, strict: bool = True) -> List[Token]:
    """
    Convenience function to tokenize source code.

    Args:
        source: The source code to tokenize
        filename: Optional filename for error messages
        strict: Raise on characters the language does not use (default) or drop them

    Returns:
        List of tokens, ending with exactly one EOF token

    Raises:
        LexerError: If tokenization fails
    """
    lexer = Lexer(source, filename, strict)
    return lexer.tokenize()
