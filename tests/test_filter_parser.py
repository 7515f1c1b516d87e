"""Tests for the filter expression lexer and parser."""

import uuid

import pytest

from schemejs.parsing import FilterLexer, FilterParser
from schemejs.query import And, Condition, Or
from schemejs.types import DataValue


class TestFilterLexer:
    """Tests for the filter lexer."""

    def test_tokenize_comparison(self):
        lexer = FilterLexer()
        lexer.build()

        tokens = lexer.tokenize("age >= 18")
        assert [t.type for t in tokens] == ["IDENTIFIER", "GTE", "INTEGER"]

    def test_tokenize_keywords(self):
        lexer = FilterLexer()
        lexer.build()

        tokens = lexer.tokenize("a = true AND b != null or c = FALSE")
        assert [t.type for t in tokens] == [
            "IDENTIFIER", "EQ", "TRUE", "AND",
            "IDENTIFIER", "NEQ", "NULL", "OR",
            "IDENTIFIER", "EQ", "FALSE",
        ]

    def test_tokenize_literals(self):
        lexer = FilterLexer()
        lexer.build()

        tokens = lexer.tokenize('"hi\\n" -3 2.5 uuid("12345678-1234-5678-1234-567812345678")')
        assert [t.value for t in tokens] == [
            "hi\n",
            -3,
            2.5,
            uuid.UUID("12345678-1234-5678-1234-567812345678"),
        ]

    def test_non_ascii_strings(self):
        """Non-ASCII text survives lexing unchanged."""
        lexer = FilterLexer()
        lexer.build()

        tokens = lexer.tokenize('"José" "東京" "naïve\\tcafé" "\\u00e9"')
        assert [t.value for t in tokens] == ["José", "東京", "naïve\tcafé", "é"]

    def test_escaped_quote(self):
        lexer = FilterLexer()
        lexer.build()

        tokens = lexer.tokenize('"say \\"hi\\""')
        assert tokens[0].value == 'say "hi"'

    def test_escape_before_non_ascii(self):
        lexer = FilterLexer()
        lexer.build()

        tokens = lexer.tokenize('"\\東京" "a\\\\b" "\\q"')
        assert [t.value for t in tokens] == ["東京", "a\\b", "q"]

    def test_invalid_escape(self):
        lexer = FilterLexer()
        lexer.build()

        with pytest.raises(SyntaxError, match="Invalid escape"):
            lexer.tokenize('"\\x4"')

    def test_backtick_identifier(self):
        lexer = FilterLexer()
        lexer.build()

        tokens = lexer.tokenize("`and` = 1")
        assert tokens[0].type == "IDENTIFIER"
        assert tokens[0].value == "and"

    def test_illegal_character(self):
        lexer = FilterLexer()
        lexer.build()

        with pytest.raises(SyntaxError, match="Illegal character"):
            lexer.tokenize("a = 1 ; b = 2")

    def test_invalid_uuid(self):
        lexer = FilterLexer()
        lexer.build()

        with pytest.raises(SyntaxError, match="Invalid uuid literal"):
            lexer.tokenize('id = uuid("nope")')


class TestFilterParser:
    """Tests for the filter parser."""

    @pytest.fixture
    def parser(self):
        return FilterParser()

    def test_parse_condition(self, parser):
        tree = parser.parse('username = "Luis"')
        assert tree == Condition(key="username", filter_type="=", value=DataValue.string("Luis"))

    @pytest.mark.parametrize("op", ["=", "!=", "<", "<=", ">", ">="])
    def test_operators(self, parser, op):
        assert parser.parse(f"n {op} 1").filter_type == op

    def test_literal_values(self, parser):
        assert parser.parse("a = true").value == DataValue.boolean(True)
        assert parser.parse("a = false").value == DataValue.boolean(False)
        assert parser.parse("a = null").value == DataValue.null()
        assert parser.parse("a = 1.25").value == DataValue.number(1.25)

    def test_dotted_key(self, parser):
        assert parser.parse('address.city = "Lima"').key == "address.city"

    def test_and_flattens(self, parser):
        tree = parser.parse("a = 1 and b = 2 and c = 3")
        assert isinstance(tree, And)
        assert [c.key for c in tree.children] == ["a", "b", "c"]

    def test_and_binds_tighter_than_or(self, parser):
        tree = parser.parse("a = 1 or b = 2 and c = 3")
        assert isinstance(tree, Or)
        assert tree.children[0].key == "a"
        assert isinstance(tree.children[1], And)

    def test_parentheses(self, parser):
        tree = parser.parse("(a = 1 or b = 2) and c = 3")
        assert isinstance(tree, And)
        assert isinstance(tree.children[0], Or)
        assert tree.children[1].key == "c"

    def test_parser_is_reusable(self, parser):
        assert parser.parse("a = 1").key == "a"
        assert parser.parse("b = 2").key == "b"

    def test_syntax_error(self, parser):
        with pytest.raises(SyntaxError, match="Syntax error"):
            parser.parse("a = ")

    def test_missing_operator(self, parser):
        with pytest.raises(SyntaxError):
            parser.parse("a 1")
