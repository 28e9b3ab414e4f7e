"""Directive contract, the literal-text directive and the directive registry."""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from sqlwrap.errors import DirectiveError
from sqlwrap.parsing import Element, Node, Text

if TYPE_CHECKING:
    from sqlwrap.catalog import Catalog
    from sqlwrap.statement import ResultColumn, Statement

QuoteFunc = Callable[[str], str]


class Directive:
    """One unit of statement markup.

    A directive contributes a fragment to the probe query (used to learn the
    result columns of a SELECT) and a fragment to the final statement text.
    The two may differ. After the probe query runs, every directive may
    rewrite the result column list in place.
    """

    def initialize(
        self,
        catalog: Catalog,
        statement: Statement,
        node: Node,
        quote: QuoteFunc,
    ) -> None:
        """Read the directive's markup node and register shared state."""
        raise NotImplementedError

    def query_fragment(self) -> str:
        """Return the fragment contributed to the probe query."""
        raise NotImplementedError

    def process_result_columns(self, columns: list[ResultColumn]) -> None:
        """Rewrite probe query result columns in place. Identity by default."""

    def fragment(self) -> str:
        """Return the fragment contributed to the final statement text."""
        raise NotImplementedError


class TextDirective(Directive):
    """Literal text, identical in both passes."""

    def __init__(self) -> None:
        self.data = ""

    def initialize(
        self,
        catalog: Catalog,
        statement: Statement,
        node: Node,
        quote: QuoteFunc,
    ) -> None:
        if not isinstance(node, Text):
            raise TypeError(f"Expected a text node, got {node!r}")
        self.data = node.value

    def query_fragment(self) -> str:
        return self.data

    def fragment(self) -> str:
        return self.data


def as_element(node: Node) -> Element:
    if not isinstance(node, Element):
        raise TypeError(f"Expected an element node, got {node!r}")
    return node


def require_attribute(element: Element, name: str) -> str:
    """Return a required attribute of a directive element.

    Raises:
        DirectiveError: If the attribute is missing or empty.
    """
    value = element.get(name)
    if not value:
        raise DirectiveError(
            f"Missing '{name}' attribute in <{element.tag}> directive (line {element.lineno})"
        )
    return value


def reject_content(element: Element) -> None:
    """Raise DirectiveError if an element that must be empty has content."""
    if not element.is_empty:
        raise DirectiveError(
            f"<{element.tag}> directive must be empty (line {element.lineno})"
        )


DirectiveFactory = Callable[[], Directive]


class DirectiveRegistry:
    """Maps markup tag names to directive factories."""

    def __init__(self) -> None:
        self._factories: dict[str, DirectiveFactory] = {}

    def register(self, factory: DirectiveFactory, *tags: str) -> None:
        """Register a factory under one or more tag names."""
        for tag in tags:
            if tag in self._factories:
                raise ValueError(f"Directive <{tag}> is already registered")
            self._factories[tag] = factory

    def create(self, tag: str) -> Directive:
        """Create a new directive for a tag.

        Raises:
            DirectiveError: If no directive is registered for the tag.
        """
        factory = self._factories.get(tag)
        if factory is None:
            raise DirectiveError(f"Unknown directive <{tag}>")
        return factory()

    def tags(self) -> list[str]:
        """List registered tag names."""
        return list(self._factories.keys())

    def __contains__(self, tag: str) -> bool:
        return tag in self._factories
