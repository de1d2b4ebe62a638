"""
Recursive descent parser for numscript.

Converts a token stream into a list of statements.
"""

from typing import List, Optional, Callable
from .tokens import Token, TokenType, SourceSpan, describe_token_type
from .ast import (
    # Expressions
    Expression, Literal, Identifier, BinaryOp, Op,
    # Statements
    Statement, Block, VarDecl, Assignment, CallStatement,
    LoopStatement, IfStatement,
)
from .errors import (
    error_unexpected_token,
    error_unexpected_eof,
    error_nesting_too_deep,
)

# Parentheses and blocks opened but not yet closed
MAX_NESTING_DEPTH = 50


class Parser:
    """
    Recursive descent parser for numscript.

    Usage:
        parser = Parser(tokens)
        statements = parser.parse_program()

    One method per precedence level, all binary levels left-associative:
        Lowest:  ||
                 &&
                 == !=
        Highest: < > <= >=

    Parsing stops at the first malformed construct with a ParserError.
    Parentheses and blocks may nest at most MAX_NESTING_DEPTH levels deep.
    """

    EQUALITY_OPERATORS = (TokenType.EQ, TokenType.NE)
    COMPARISON_OPERATORS = (TokenType.GT, TokenType.LT, TokenType.GE, TokenType.LE)

    def __init__(self, tokens: List[Token], source: Optional[str] = None):
        if not tokens or tokens[-1].type != TokenType.EOF:
            raise ValueError("token stream must end with an EOF token")
        self.tokens = tokens
        self._lines = source.splitlines() if source else []  # for error display
        self.pos = 0
        self._depth = 0

    # =========================================================================
    # Token Navigation
    # =========================================================================

    def _current(self) -> Token:
        """Get current token."""
        if self.pos >= len(self.tokens):
            return self.tokens[-1]  # EOF
        return self.tokens[self.pos]

    def _is_at_end(self) -> bool:
        """Check if at end of tokens."""
        return self._current().type == TokenType.EOF

    def _check(self, token_type: TokenType) -> bool:
        """Check if current token is of given type."""
        return self._current().type == token_type

    def _advance(self) -> Token:
        """Consume and return current token."""
        token = self._current()
        if not self._is_at_end():
            self.pos += 1
        return token

    def _consume(self, token_type: TokenType, expected: str) -> Token:
        """Consume token of expected type, or raise error."""
        if self._check(token_type):
            return self._advance()
        self._error(expected)

    def _match(self, *token_types: TokenType) -> Optional[Token]:
        """Consume token if it matches any of the given types."""
        if self._current().type in token_types:
            return self._advance()
        return None

    def _skip_separators(self) -> None:
        """Skip any SEMICOLON tokens between statements."""
        while self._check(TokenType.SEMICOLON):
            self._advance()

    def _expect_terminator(self) -> None:
        """Expect the ';' (explicit or inferred from a line break) ending a statement."""
        self._consume(TokenType.SEMICOLON, "';' or end of line")

    def _source_line(self, line_num: int) -> Optional[str]:
        if 1 <= line_num <= len(self._lines):
            return self._lines[line_num - 1]
        return None

    def _error(self, expected: str) -> None:
        """Raise a parser error."""
        token = self._current()
        if token.type == TokenType.EOF:
            raise error_unexpected_eof(expected, token.span)
        if token.is_synthesized:
            found = "end of line"
        elif token.type in (TokenType.IDENTIFIER, TokenType.INT_LITERAL, TokenType.STRING_LITERAL):
            found = f"{describe_token_type(token.type)} {token.lexeme}"
        else:
            found = describe_token_type(token.type)
        raise error_unexpected_token(expected, found, token.span,
                                     self._source_line(token.span.start.line))

    def _enter(self, opener: Token) -> None:
        """Open a parenthesis or block, enforcing the nesting limit."""
        self._depth += 1
        if self._depth > MAX_NESTING_DEPTH:
            raise error_nesting_too_deep(MAX_NESTING_DEPTH, opener.span,
                                         self._source_line(opener.span.start.line))

    def _leave(self) -> None:
        self._depth -= 1

    def _span_from(self, start: Token) -> SourceSpan:
        """Create a span from start token to current position."""
        prev_pos = max(0, self.pos - 1)
        end_token = self.tokens[prev_pos]
        return SourceSpan(start.span.start, end_token.span.end)

    # =========================================================================
    # Expression Parsing
    # =========================================================================

    def _parse_expression(self) -> Expression:
        """Parse an expression."""
        return self._parse_logical_or()

    def _parse_left_associative(self, operand: Callable[[], Expression],
                                operators: tuple) -> Expression:
        """Parse one precedence level: operand (op operand)*"""
        left = operand()
        while self._current().type in operators:
            op_token = self._advance()
            right = operand()
            left = BinaryOp(
                span=SourceSpan(left.span.start, right.span.end),
                left=left,
                operator=Op.from_token(op_token.type),
                right=right
            )
        return left

    def _parse_logical_or(self) -> Expression:
        return self._parse_left_associative(self._parse_logical_and, (TokenType.OR,))

    def _parse_logical_and(self) -> Expression:
        return self._parse_left_associative(self._parse_equality, (TokenType.AND,))

    def _parse_equality(self) -> Expression:
        return self._parse_left_associative(self._parse_comparison, self.EQUALITY_OPERATORS)

    def _parse_comparison(self) -> Expression:
        return self._parse_left_associative(self._parse_primary, self.COMPARISON_OPERATORS)

    def _parse_primary(self) -> Expression:
        """Parse a literal, a variable reference or a parenthesized expression."""
        token = self._current()

        if token.type in (TokenType.INT_LITERAL, TokenType.STRING_LITERAL):
            self._advance()
            return Literal(span=token.span, value=token.value, literal_type=token.type)

        if token.type == TokenType.IDENTIFIER:
            self._advance()
            return Identifier(span=token.span, name=token.value)

        if token.type == TokenType.LPAREN:
            self._enter(self._advance())
            expr = self._parse_expression()
            self._consume(TokenType.RPAREN, "')'")
            self._leave()
            return expr

        self._error("expression")

    def _parse_arguments(self) -> List[Expression]:
        """Parse a parenthesized, comma-separated argument list."""
        self._consume(TokenType.LPAREN, "'('")

        args = []
        if not self._check(TokenType.RPAREN):
            args.append(self._parse_expression())
            while self._match(TokenType.COMMA):
                args.append(self._parse_expression())

        self._consume(TokenType.RPAREN, "')'")
        return args

    # =========================================================================
    # Statement Parsing
    # =========================================================================

    def _parse_statement(self) -> Statement:
        """Parse a statement, dispatching on its leading token."""
        token = self._current()

        if token.type == TokenType.VAR:
            return self._parse_var_decl()

        if token.type == TokenType.IF:
            return self._parse_if_statement()

        if token.type == TokenType.LOOP:
            return self._parse_loop_statement()

        if token.type == TokenType.IDENTIFIER:
            return self._parse_call_or_assignment()

        self._error("statement")

    def _parse_var_decl(self) -> VarDecl:
        """Parse a variable declaration: var name = value;"""
        start = self._advance()  # consume 'var'
        name = self._consume(TokenType.IDENTIFIER, "variable name").value
        self._consume(TokenType.ASSIGN, "'='")
        initializer = self._parse_expression()
        self._expect_terminator()

        return VarDecl(
            span=self._span_from(start),
            name=name,
            initializer=initializer
        )

    def _parse_call_or_assignment(self) -> Statement:
        """Parse 'name = value;' or 'name(args);', told apart by the second token."""
        start = self._advance()  # consume identifier
        name = start.value

        if self._match(TokenType.ASSIGN):
            value = self._parse_expression()
            self._expect_terminator()
            return Assignment(span=self._span_from(start), name=name, value=value)

        if not self._check(TokenType.LPAREN):
            self._error("'=' or '('")
        arguments = self._parse_arguments()
        self._expect_terminator()
        return CallStatement(span=self._span_from(start), name=name, arguments=arguments)

    def _parse_if_statement(self) -> IfStatement:
        """Parse an if statement."""
        start = self._advance()  # consume 'if'
        self._consume(TokenType.LPAREN, "'('")
        condition = self._parse_expression()
        self._consume(TokenType.RPAREN, "')'")
        then_branch = self._parse_block()

        else_branch = None
        if self._match(TokenType.ELSE):
            else_branch = self._parse_block()

        return IfStatement(
            span=self._span_from(start),
            condition=condition,
            then_branch=then_branch,
            else_branch=else_branch
        )

    def _parse_loop_statement(self) -> LoopStatement:
        """Parse a counted loop."""
        start = self._advance()  # consume 'loop'
        self._consume(TokenType.LPAREN, "'('")
        count = self._parse_expression()
        self._consume(TokenType.RPAREN, "')'")
        body = self._parse_block()

        return LoopStatement(span=self._span_from(start), count=count, body=body)

    def _parse_block(self) -> Block:
        """Parse a brace-delimited block."""
        start = self._consume(TokenType.LBRACE, "'{'")
        self._enter(start)
        statements = []

        while True:
            self._skip_separators()
            if self._check(TokenType.RBRACE) or self._is_at_end():
                break
            statements.append(self._parse_statement())

        self._consume(TokenType.RBRACE, "'}'")
        self._leave()
        return Block(span=self._span_from(start), statements=statements)

    # =========================================================================
    # Program Parsing
    # =========================================================================

    def parse_program(self) -> List[Statement]:
        """Parse a complete program."""
        statements = []
        while True:
            self._skip_separators()
            if self._is_at_end():
                break
            statements.append(self._parse_statement())
        return statements


def parse(tokens: List[Token], source: Optional[str] = None) -> List[Statement]:
    """
    Convenience function to parse tokens into a program.

    Args:
        tokens: List of tokens from the lexer
        source: Optional original source code for error display

    Returns:
        The program's statements, in order

    Raises:
        ParserError: If parsing fails
    """
    parser = Parser(tokens, source)
    return parser.parse_program()
