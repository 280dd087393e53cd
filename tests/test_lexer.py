"""
Tests for the template lexer.
"""

import pytest

from liquidprompt.errors import ParseError
from liquidprompt.template.lexer import TemplateLexer, line_column, tokenize
from liquidprompt.template.tokens import TokenType


def types(text):
    return [t.type for t in tokenize(text)]


class TestTemplateLexer:

    def test_plain_text(self):
        tokens = tokenize("Hello, world")
        assert [t.type for t in tokens] == [TokenType.TEXT, TokenType.EOF]
        assert tokens[0].value == "Hello, world"

    def test_empty_template(self):
        assert types("") == [TokenType.EOF]

    def test_output_expression(self):
        assert types("Hi {{ name }}!") == [
            TokenType.TEXT,
            TokenType.OUTPUT_START,
            TokenType.IDENTIFIER,
            TokenType.OUTPUT_END,
            TokenType.TEXT,
            TokenType.EOF,
        ]

    def test_tag_expression(self):
        tokens = tokenize("{% if a >= 1 %}")
        assert [t.type for t in tokens] == [
            TokenType.TAG_START,
            TokenType.IDENTIFIER,
            TokenType.IDENTIFIER,
            TokenType.OPERATOR,
            TokenType.NUMBER,
            TokenType.TAG_END,
            TokenType.EOF,
        ]
        assert tokens[3].value == ">="

    def test_filter_punctuation(self):
        assert types("{{ a.b[0] | f: 'x', 2 }}")[1:-2] == [
            TokenType.IDENTIFIER,
            TokenType.DOT,
            TokenType.IDENTIFIER,
            TokenType.LBRACKET,
            TokenType.NUMBER,
            TokenType.RBRACKET,
            TokenType.PIPE,
            TokenType.IDENTIFIER,
            TokenType.COLON,
            TokenType.STRING,
            TokenType.COMMA,
            TokenType.NUMBER,
        ]

    def test_assignment_equals(self):
        assert TokenType.EQUALS in types("{% assign x = 1 %}")

    def test_strings_and_escapes(self):
        tokens = tokenize('{{ "say \\"hi\\"" }}{{ \'it\\\'s\' }}')
        strings = [t.value for t in tokens if t.type == TokenType.STRING]
        assert strings == ['say "hi"', "it's"]

    def test_numbers(self):
        tokens = tokenize("{{ -3.5 }}{{ 42 }}")
        numbers = [t.value for t in tokens if t.type == TokenType.NUMBER]
        assert numbers == ["-3.5", "42"]

    def test_whitespace_control_flags(self):
        tokens = tokenize("{{- x -}}{% y %}")
        assert tokens[0].value == "{{-" and tokens[0].trim is True
        assert tokens[2].value == "-}}" and tokens[2].trim is True
        assert tokens[3].trim is False
        assert tokens[5].trim is False

    def test_line_and_column_tracking(self):
        tokens = tokenize("line one\n  {{ value }}")
        start = tokens[1]
        ident = tokens[2]
        assert (start.line, start.column) == (2, 3)
        assert (ident.line, ident.column) == (2, 6)

    def test_lexer_is_reusable(self):
        lexer = TemplateLexer()
        lexer.tokenize("a\nb\n{{ x }}")
        tokens = lexer.tokenize("{{ y }}")
        assert (tokens[0].line, tokens[0].column) == (1, 1)

    def test_comment_body_is_raw_text(self):
        tokens = tokenize("{% comment %}{{ @ }}{% endcomment %}")
        assert [t.type for t in tokens] == [
            TokenType.TAG_START, TokenType.IDENTIFIER, TokenType.TAG_END,
            TokenType.TEXT,
            TokenType.TAG_START, TokenType.IDENTIFIER, TokenType.TAG_END,
            TokenType.EOF,
        ]
        assert tokens[3].value == "{{ @ }}"

    def test_empty_comment(self):
        assert types("{% comment %}{% endcomment %}") == [
            TokenType.TAG_START, TokenType.IDENTIFIER, TokenType.TAG_END,
            TokenType.TAG_START, TokenType.IDENTIFIER, TokenType.TAG_END,
            TokenType.EOF,
        ]


class TestLexerErrors:

    def test_unclosed_output(self):
        with pytest.raises(ParseError) as exc:
            tokenize("{{ invalid")
        assert "Unclosed" in exc.value.message
        assert (exc.value.line, exc.value.column) == (1, 1)

    def test_unclosed_tag(self):
        with pytest.raises(ParseError):
            tokenize("text {% if x ")

    def test_unterminated_string(self):
        with pytest.raises(ParseError) as exc:
            tokenize("{{ 'abc }}")
        assert "Unterminated string" in exc.value.message

    def test_unexpected_character(self):
        with pytest.raises(ParseError) as exc:
            tokenize("{{ a # b }}")
        assert "Unexpected character" in exc.value.message
        assert exc.value.position == 5


class TestLineColumn:

    def test_offsets(self):
        assert line_column("abc", 0) == (1, 1)
        assert line_column("abc", 2) == (1, 3)
        assert line_column("ab\ncd", 4) == (2, 2)
        assert line_column("a\n\nb", 3) == (3, 1)
