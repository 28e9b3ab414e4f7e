"""Parsing module for the statement markup language."""

from sqlwrap.parsing.markup_lexer import MarkupLexer
from sqlwrap.parsing.markup_parser import (
    Element,
    MarkupParser,
    Node,
    Text,
)

__all__ = [
    "Element",
    "MarkupLexer",
    "MarkupParser",
    "Node",
    "Text",
]
