"""Parsing module for textual filter expressions."""

from schemejs.parsing.filter_lexer import FilterLexer
from schemejs.parsing.filter_parser import FilterParser

__all__ = [
    "FilterLexer",
    "FilterParser",
]
