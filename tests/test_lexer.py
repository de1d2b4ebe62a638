"""
Unit tests for the numscript lexer.
"""

import pytest
from numscript import tokenize, Lexer, TokenType, LexerError


def types_of(source, **kwargs):
    return [t.type for t in tokenize(source, **kwargs)]


class TestLexerBasics:
    """Test basic lexer functionality."""

    def test_empty_source(self):
        """Empty source produces only EOF."""
        tokens = tokenize("")
        assert len(tokens) == 1
        assert tokens[0].type == TokenType.EOF

    def test_whitespace_only(self):
        """Whitespace, newlines included, produces only EOF."""
        assert types_of("  \t\n\n  ") == [TokenType.EOF]

    def test_simple_var_declaration(self):
        """Basic var statement tokenization."""
        assert types_of("var x = 42;") == [
            TokenType.VAR,
            TokenType.IDENTIFIER,
            TokenType.ASSIGN,
            TokenType.INT_LITERAL,
            TokenType.SEMICOLON,
            TokenType.EOF,
        ]

    def test_identifier_value(self):
        """Identifier token has correct value."""
        tokens = tokenize("foo_bar123")
        assert tokens[0].type == TokenType.IDENTIFIER
        assert tokens[0].value == "foo_bar123"

    def test_identifier_may_start_with_underscore(self):
        tokens = tokenize("_tmp")
        assert tokens[0].type == TokenType.IDENTIFIER
        assert tokens[0].value == "_tmp"

    def test_position_tracking(self):
        """Token positions are tracked correctly."""
        tokens = tokenize("var x = 5;")
        assert tokens[0].span.start.line == 1
        assert tokens[0].span.start.column == 1
        # 'x' starts at column 5
        assert tokens[1].span.start.column == 5

    def test_multiline_position_tracking(self):
        """Position tracking across multiple lines."""
        tokens = tokenize("var x = 5;\nvar y = 10;")
        var_tokens = [t for t in tokens if t.type == TokenType.VAR]
        assert var_tokens[0].span.start.line == 1
        assert var_tokens[1].span.start.line == 2

    def test_filename_in_locations(self):
        tokens = tokenize("x", filename="macro.num")
        assert str(tokens[0].span.start) == "macro.num:1:1"

    def test_ends_with_single_eof(self):
        """Every token stream ends with exactly one EOF."""
        tokens = tokenize("var a = 1\nprint(a)\n")
        assert tokens[-1].type == TokenType.EOF
        assert sum(1 for t in tokens if t.type == TokenType.EOF) == 1

    def test_iterating_lexer(self):
        """The lexer can be consumed as a stream."""
        assert [t.type for t in Lexer("x;")] == [
            TokenType.IDENTIFIER, TokenType.SEMICOLON, TokenType.EOF,
        ]


class TestKeywords:
    """Keyword recognition."""

    def test_all_keywords(self):
        assert types_of("var if else loop") == [
            TokenType.VAR, TokenType.IF, TokenType.ELSE, TokenType.LOOP, TokenType.EOF,
        ]

    def test_keyword_prefix_is_identifier(self):
        """Keywords only match whole words."""
        tokens = tokenize("variable looper iffy")
        assert [t.type for t in tokens[:3]] == [TokenType.IDENTIFIER] * 3
        assert tokens[0].value == "variable"

    def test_keywords_are_case_sensitive(self):
        assert tokenize("VAR")[0].type == TokenType.IDENTIFIER


class TestLiterals:
    """Number and string literals."""

    def test_integer(self):
        token = tokenize("12345")[0]
        assert token.type == TokenType.INT_LITERAL
        assert token.value == 12345
        assert token.lexeme == "12345"

    def test_largest_integer(self):
        assert tokenize("9223372036854775807")[0].value == 2 ** 63 - 1

    def test_integer_overflow(self):
        """Literals beyond the signed 64-bit range are rejected."""
        with pytest.raises(LexerError) as exc_info:
            tokenize("9223372036854775808")
        assert exc_info.value.code == "E006"

    def test_string(self):
        token = tokenize('"hello world"')[0]
        assert token.type == TokenType.STRING_LITERAL
        assert token.value == "hello world"

    def test_empty_string(self):
        assert tokenize('""')[0].value == ""

    def test_string_has_no_escapes(self):
        """Backslashes are kept verbatim."""
        assert tokenize(r'"a\n"')[0].value == "a\\n"

    def test_string_spanning_lines(self):
        tokens = tokenize('"first\nsecond"')
        assert tokens[0].value == "first\nsecond"
        assert tokens[1].type == TokenType.SEMICOLON

    def test_unterminated_string(self):
        with pytest.raises(LexerError) as exc_info:
            tokenize('print("oops)')
        assert exc_info.value.code == "E002"
        assert "unterminated" in exc_info.value.diagnostic.message

    def test_non_ascii_digit_is_not_a_number(self):
        with pytest.raises(LexerError) as exc_info:
            tokenize("٣")
        assert exc_info.value.code == "E001"


class TestOperators:
    """Operator and punctuation tokens."""

    def test_comparison_operators(self):
        assert types_of("== != > < >= <=") == [
            TokenType.EQ, TokenType.NE, TokenType.GT,
            TokenType.LT, TokenType.GE, TokenType.LE, TokenType.EOF,
        ]

    def test_logical_operators(self):
        assert types_of("&& ||") == [TokenType.AND, TokenType.OR, TokenType.EOF]

    def test_assign_versus_equal(self):
        assert types_of("= ==") == [TokenType.ASSIGN, TokenType.EQ, TokenType.EOF]

    def test_adjacent_operators(self):
        """Two-character operators are matched greedily."""
        assert types_of("<=<") == [TokenType.LE, TokenType.LT, TokenType.EOF]

    def test_punctuation(self):
        assert types_of("{ } , ;") == [
            TokenType.LBRACE, TokenType.RBRACE, TokenType.COMMA,
            TokenType.SEMICOLON, TokenType.EOF,
        ]

    @pytest.mark.parametrize("source", ["!", "&", "|", "@", "+", "x = 1 + 2"])
    def test_unexpected_character_strict(self, source):
        with pytest.raises(LexerError) as exc_info:
            tokenize(source)
        assert exc_info.value.code == "E001"

    def test_unexpected_character_reports_location(self):
        with pytest.raises(LexerError) as exc_info:
            tokenize("var x = 1;\nvar y = @;")
        span = exc_info.value.span
        assert span.start.line == 2
        assert span.start.column == 9

    def test_unexpected_character_dropped_when_not_strict(self):
        tokens = tokenize("a ! b", strict=False)
        assert [t.type for t in tokens] == [
            TokenType.IDENTIFIER, TokenType.IDENTIFIER,
            TokenType.SEMICOLON, TokenType.EOF,
        ]
        assert tokens[1].value == "b"


class TestTerminators:
    """Statement terminators inferred from line breaks."""

    def test_newline_after_number(self):
        assert types_of("var x = 1\nprint(x);") == [
            TokenType.VAR, TokenType.IDENTIFIER, TokenType.ASSIGN,
            TokenType.INT_LITERAL, TokenType.SEMICOLON,
            TokenType.IDENTIFIER, TokenType.LPAREN, TokenType.IDENTIFIER,
            TokenType.RPAREN, TokenType.SEMICOLON, TokenType.EOF,
        ]

    def test_inferred_terminator_is_marked(self):
        tokens = tokenize("x\ny;")
        assert tokens[1].type == TokenType.SEMICOLON
        assert tokens[1].is_synthesized
        assert not tokens[3].is_synthesized

    @pytest.mark.parametrize("source", ["x\n", "5\n", '"s"\n', ")\n"])
    def test_trigger_tokens(self, source):
        assert types_of(source)[-2:] == [TokenType.SEMICOLON, TokenType.EOF]

    @pytest.mark.parametrize("source", ["{\n}", "=\n", "var\n", "&&\n", ",\n", "(\n"])
    def test_non_trigger_tokens(self, source):
        assert TokenType.SEMICOLON not in types_of(source)

    def test_blank_lines_give_one_terminator(self):
        assert types_of("x\n\n\n\ny") == [
            TokenType.IDENTIFIER, TokenType.SEMICOLON,
            TokenType.IDENTIFIER, TokenType.SEMICOLON, TokenType.EOF,
        ]

    def test_terminator_at_end_of_input(self):
        """The last line needs no newline or semicolon."""
        tokens = tokenize("print(1)")
        assert [t.type for t in tokens][-3:] == [
            TokenType.RPAREN, TokenType.SEMICOLON, TokenType.EOF,
        ]

    def test_explicit_semicolon_suppresses_inference(self):
        assert types_of("print(1);\n") == [
            TokenType.IDENTIFIER, TokenType.LPAREN, TokenType.INT_LITERAL,
            TokenType.RPAREN, TokenType.SEMICOLON, TokenType.EOF,
        ]

    def test_same_line_statements_need_semicolons(self):
        """Without a line break nothing is inferred between tokens."""
        assert TokenType.SEMICOLON not in types_of("a b")[:-2]

    def test_newline_after_closing_brace(self):
        assert types_of("}\nx") == [
            TokenType.RBRACE, TokenType.IDENTIFIER, TokenType.SEMICOLON, TokenType.EOF,
        ]
