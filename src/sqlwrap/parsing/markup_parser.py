"""Parser for the statement markup language."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

import ply.yacc as yacc

from sqlwrap.parsing.markup_lexer import MarkupLexer


@dataclass
class Text:
    """A run of literal text."""

    value: str

    @property
    def is_blank(self) -> bool:
        return not self.value.strip()


@dataclass
class Element:
    """A tagged element with attributes and child nodes."""

    tag: str
    attributes: dict[str, str] = field(default_factory=dict)
    children: list[Node] = field(default_factory=list)
    lineno: int = 0

    def get(self, name: str, default: str | None = None) -> str | None:
        """Get an attribute value."""
        return self.attributes.get(name, default)

    @property
    def text(self) -> str:
        """Concatenated text of the direct Text children."""
        return "".join(c.value for c in self.children if isinstance(c, Text))

    @property
    def child_elements(self) -> list[Element]:
        return [c for c in self.children if isinstance(c, Element)]

    @property
    def is_empty(self) -> bool:
        """True if the element has no children other than whitespace."""
        return all(isinstance(c, Text) and c.is_blank for c in self.children)


Node = Union[Text, Element]


class _StructureError(Exception):
    """Raised from grammar actions; yacc would swallow a SyntaxError there."""


class MarkupParser:
    """Parser turning markup into a list of Text and Element nodes."""

    tokens = MarkupLexer.tokens

    def __init__(self) -> None:
        self.lexer = MarkupLexer()
        self.lexer.build()
        self.parser: yacc.LRParser = None  # type: ignore

    def p_document(self, p: yacc.YaccProduction) -> None:
        """document : content"""
        p[0] = p[1]

    def p_content_empty(self, p: yacc.YaccProduction) -> None:
        """content : empty"""
        p[0] = []

    def p_content_item(self, p: yacc.YaccProduction) -> None:
        """content : content item"""
        p[0] = p[1]
        item = p[2]
        # Comments split text runs; join them back
        if isinstance(item, Text) and p[0] and isinstance(p[0][-1], Text):
            p[0][-1] = Text(p[0][-1].value + item.value)
        else:
            p[0].append(item)

    def p_item_text(self, p: yacc.YaccProduction) -> None:
        """item : TEXT"""
        p[0] = Text(p[1])

    def p_item_element(self, p: yacc.YaccProduction) -> None:
        """item : element"""
        p[0] = p[1]

    def p_element_empty(self, p: yacc.YaccProduction) -> None:
        """element : OPEN_TAG attributes SELF_CLOSE"""
        p[0] = Element(tag=p[1], attributes=p[2], lineno=p.lineno(1))

    def p_element(self, p: yacc.YaccProduction) -> None:
        """element : OPEN_TAG attributes TAG_END content CLOSE_TAG"""
        if p[5] != p[1]:
            raise _StructureError(
                f"Expected </{p[1]}> but got </{p[5]}> (line {p.lineno(5)})"
            )
        p[0] = Element(tag=p[1], attributes=p[2], children=p[4], lineno=p.lineno(1))

    def p_attributes_empty(self, p: yacc.YaccProduction) -> None:
        """attributes : empty"""
        p[0] = {}

    def p_attributes(self, p: yacc.YaccProduction) -> None:
        """attributes : attributes attribute"""
        p[0] = p[1]
        name, value = p[2]
        if name in p[0]:
            raise _StructureError(f"Duplicate attribute '{name}' (line {p.lineno(2)})")
        p[0][name] = value

    def p_attribute(self, p: yacc.YaccProduction) -> None:
        """attribute : NAME EQUALS STRING"""
        p[0] = (p[1], p[3])
        p.set_lineno(0, p.lineno(1))

    def p_empty(self, p: yacc.YaccProduction) -> None:
        """empty :"""
        pass

    def p_error(self, p: yacc.YaccProduction) -> None:
        if p:
            raise SyntaxError(f"Syntax error at '{p.value}' (line {p.lineno})")
        else:
            raise SyntaxError("Syntax error at end of input (unclosed element?)")

    def build(self, **kwargs: Any) -> None:
        """Build the parser."""
        self.parser = yacc.yacc(module=self, **kwargs)

    def parse(self, data: str) -> list[Node]:
        """Parse markup and return its top-level nodes in document order."""
        if self.parser is None:
            self.build(debug=False, write_tables=False)

        self.lexer.reset()
        try:
            nodes = self.parser.parse(data, lexer=self.lexer.lexer, tracking=True)
        except _StructureError as e:
            raise SyntaxError(str(e)) from None
        if nodes is None:
            nodes = []
        return nodes
