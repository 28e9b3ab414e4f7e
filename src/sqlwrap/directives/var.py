"""The <var> and <vars> directives: free-form values for the renderer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from sqlwrap.directives.base import (
    Directive,
    QuoteFunc,
    as_element,
    reject_content,
    require_attribute,
)
from sqlwrap.parsing import Node
from sqlwrap.statement import DirectiveKind

if TYPE_CHECKING:
    from sqlwrap.catalog import Catalog
    from sqlwrap.statement import Statement


@dataclass
class VarsInfo:
    """Custom name/value pairs of a statement. Later values replace earlier ones."""

    values: dict[str, str] = field(default_factory=dict)

    def has(self, name: str) -> bool:
        return name in self.values

    def value(self, name: str) -> str:
        """Return a var's value, or "" if it is not set."""
        return self.values.get(name, "")


class VarDirective(Directive):
    """``<var name="..." value="..."/>``; ``value`` defaults to ""."""

    def initialize(
        self,
        catalog: Catalog,
        statement: Statement,
        node: Node,
        quote: QuoteFunc,
    ) -> None:
        element = as_element(node)
        reject_content(element)
        name = require_attribute(element, "name")
        info = statement.locals.get_or_create(DirectiveKind.VAR, VarsInfo)
        info.values[name] = element.get("value", "")

    def query_fragment(self) -> str:
        return ""

    def fragment(self) -> str:
        return ""


class VarsDirective(Directive):
    """``<vars a="1" b="2"/>``; every attribute is a var."""

    def initialize(
        self,
        catalog: Catalog,
        statement: Statement,
        node: Node,
        quote: QuoteFunc,
    ) -> None:
        element = as_element(node)
        reject_content(element)
        info = statement.locals.get_or_create(DirectiveKind.VAR, VarsInfo)
        info.values.update(element.attributes)

    def query_fragment(self) -> str:
        return ""

    def fragment(self) -> str:
        return ""
