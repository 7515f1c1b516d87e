"""Parser turning filter expressions into condition trees."""

from __future__ import annotations

from typing import Any

import ply.yacc as yacc

from schemejs.parsing.filter_lexer import FilterLexer
from schemejs.query import And, Condition, ConditionTree, Or
from schemejs.types import classify


def _combine(node_type: type, left: ConditionTree, right: ConditionTree) -> ConditionTree:
    """Join two expressions, flattening runs of the same operator."""
    children: list[ConditionTree] = []
    for side in (left, right):
        if isinstance(side, node_type):
            children.extend(side.children)  # type: ignore[union-attr]
        else:
            children.append(side)
    return node_type(children)


class FilterParser:
    """Parser for filter expressions."""

    tokens = FilterLexer.tokens

    # Operator precedence
    precedence = (
        ("left", "OR"),
        ("left", "AND"),
    )

    def __init__(self) -> None:
        self.lexer = FilterLexer()
        self.lexer.build()
        self.parser: yacc.LRParser = None  # type: ignore

    def p_expression_comparison(self, p: yacc.YaccProduction) -> None:
        """expression : IDENTIFIER EQ value
                      | IDENTIFIER NEQ value
                      | IDENTIFIER LT value
                      | IDENTIFIER LTE value
                      | IDENTIFIER GT value
                      | IDENTIFIER GTE value"""
        p[0] = Condition(key=p[1], filter_type=p[2], value=classify(p[3]))

    def p_expression_and(self, p: yacc.YaccProduction) -> None:
        """expression : expression AND expression"""
        p[0] = _combine(And, p[1], p[3])

    def p_expression_or(self, p: yacc.YaccProduction) -> None:
        """expression : expression OR expression"""
        p[0] = _combine(Or, p[1], p[3])

    def p_expression_paren(self, p: yacc.YaccProduction) -> None:
        """expression : LPAREN expression RPAREN"""
        p[0] = p[2]

    def p_value_literal(self, p: yacc.YaccProduction) -> None:
        """value : INTEGER
                 | FLOAT
                 | STRING
                 | UUID"""
        p[0] = p[1]

    def p_value_true(self, p: yacc.YaccProduction) -> None:
        """value : TRUE"""
        p[0] = True

    def p_value_false(self, p: yacc.YaccProduction) -> None:
        """value : FALSE"""
        p[0] = False

    def p_value_null(self, p: yacc.YaccProduction) -> None:
        """value : NULL"""
        p[0] = None

    def p_error(self, p: yacc.YaccProduction) -> None:
        if p:
            raise SyntaxError(f"Syntax error at '{p.value}' (position {p.lexpos})")
        else:
            raise SyntaxError("Syntax error at end of input")

    def build(self, **kwargs: Any) -> None:
        """Build the parser."""
        self.parser = yacc.yacc(module=self, start="expression", **kwargs)

    def parse(self, data: str) -> ConditionTree:
        """Parse a filter expression."""
        if self.parser is None:
            self.build(debug=False, write_tables=False)

        return self.parser.parse(data, lexer=self.lexer.lexer)
