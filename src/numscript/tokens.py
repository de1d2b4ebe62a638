"""
Token types for the numscript lexer.

Error code ranges:
- E0xx: Lexer errors
- E1xx: Parser errors
- E4xx: Runtime faults
- W4xx: Runtime warnings
"""

from enum import Enum, auto
from dataclasses import dataclass
from typing import Any, Optional


class TokenType(Enum):
    """All token types recognized by the lexer."""

    # --- Literals ---
    INT_LITERAL = auto()        # 42
    STRING_LITERAL = auto()     # "hello"

    # --- Identifiers ---
    IDENTIFIER = auto()         # user-defined names

    # --- Keywords ---
    VAR = auto()                # var
    IF = auto()                 # if
    ELSE = auto()               # else
    LOOP = auto()               # loop

    # --- Comparison operators ---
    EQ = auto()                 # ==
    NE = auto()                 # !=
    GT = auto()                 # >
    LT = auto()                 # <
    GE = auto()                 # >=
    LE = auto()                 # <=

    # --- Logical operators ---
    AND = auto()                # &&
    OR = auto()                 # ||

    # --- Assignment ---
    ASSIGN = auto()             # =

    # --- Delimiters ---
    LPAREN = auto()             # (
    RPAREN = auto()             # )
    LBRACE = auto()             # {
    RBRACE = auto()             # }
    COMMA = auto()              # ,
    SEMICOLON = auto()          # ; (explicit or inferred from a newline)

    # --- Special ---
    EOF = auto()                # end of input


@dataclass(frozen=True)
class SourceLocation:
    """Represents a position in source code."""
    line: int           # 1-indexed line number
    column: int         # 1-indexed column number
    offset: int         # 0-indexed character offset from start
    filename: Optional[str] = None

    def __str__(self) -> str:
        if self.filename:
            return f"{self.filename}:{self.line}:{self.column}"
        return f"{self.line}:{self.column}"


@dataclass(frozen=True)
class SourceSpan:
    """Represents a range in source code."""
    start: SourceLocation
    end: SourceLocation

    def __str__(self) -> str:
        if self.start.filename:
            return f"{self.start.filename}:{self.start.line}:{self.start.column}-{self.end.line}:{self.end.column}"
        return f"{self.start.line}:{self.start.column}-{self.end.line}:{self.end.column}"


@dataclass(frozen=True)
class Token:
    """A single token from the lexer."""
    type: TokenType
    value: Any              # int for numbers, str for names and strings
    lexeme: str             # The original source text ("" when synthesized)
    span: SourceSpan        # Location in source

    @property
    def is_synthesized(self) -> bool:
        """True for a statement terminator inferred from a line break."""
        return self.type == TokenType.SEMICOLON and self.lexeme != ";"

    def __str__(self) -> str:
        if self.type in (TokenType.INT_LITERAL, TokenType.STRING_LITERAL,
                         TokenType.IDENTIFIER):
            return f"{self.type.name}({self.value!r})"
        return self.type.name


# Keyword mapping - maps string to token type
KEYWORDS: dict[str, TokenType] = {
    "var": TokenType.VAR,
    "if": TokenType.IF,
    "else": TokenType.ELSE,
    "loop": TokenType.LOOP,
}

# Tokens after which a line break ends the statement
TERMINATOR_TRIGGERS: frozenset = frozenset({
    TokenType.IDENTIFIER,
    TokenType.INT_LITERAL,
    TokenType.STRING_LITERAL,
    TokenType.RPAREN,
})

# Range of the integer literals the language supports
INT_MIN = -(2 ** 63)
INT_MAX = 2 ** 63 - 1


def describe_token_type(token_type: TokenType) -> str:
    """Human-readable name of a token type for error messages."""
    return _DESCRIPTIONS.get(token_type, token_type.name.lower())


_DESCRIPTIONS: dict[TokenType, str] = {
    TokenType.INT_LITERAL: "number",
    TokenType.STRING_LITERAL: "string",
    TokenType.IDENTIFIER: "identifier",
    TokenType.VAR: "'var'",
    TokenType.IF: "'if'",
    TokenType.ELSE: "'else'",
    TokenType.LOOP: "'loop'",
    TokenType.EQ: "'=='",
    TokenType.NE: "'!='",
    TokenType.GT: "'>'",
    TokenType.LT: "'<'",
    TokenType.GE: "'>='",
    TokenType.LE: "'<='",
    TokenType.AND: "'&&'",
    TokenType.OR: "'||'",
    TokenType.ASSIGN: "'='",
    TokenType.LPAREN: "'('",
    TokenType.RPAREN: "')'",
    TokenType.LBRACE: "'{'",
    TokenType.RBRACE: "'}'",
    TokenType.COMMA: "','",
    TokenType.SEMICOLON: "';'",
    TokenType.EOF: "end of input",
}
