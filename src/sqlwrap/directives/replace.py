"""The <replace> directive: executable SQL for the probe, other text for output."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlwrap.directives.base import Directive, QuoteFunc, as_element
from sqlwrap.errors import DirectiveError
from sqlwrap.parsing import Node

if TYPE_CHECKING:
    from sqlwrap.catalog import Catalog
    from sqlwrap.statement import Statement


class ReplaceDirective(Directive):
    """``<replace with=":id">1</replace>``

    The body (``1``) goes into the probe query so it stays valid SQL; the
    ``with`` value (``:id``) goes into the final statement text.
    """

    def __init__(self) -> None:
        self.origin = ""
        self.with_ = ""

    def initialize(
        self,
        catalog: Catalog,
        statement: Statement,
        node: Node,
        quote: QuoteFunc,
    ) -> None:
        element = as_element(node)
        with_ = element.get("with")
        if with_ is None:
            raise DirectiveError(
                f"Missing 'with' attribute in <replace> directive (line {element.lineno})"
            )
        if element.child_elements:
            raise DirectiveError(
                f"<replace> directive may only contain text (line {element.lineno})"
            )
        self.origin = element.text
        self.with_ = with_

    def query_fragment(self) -> str:
        return self.origin

    def fragment(self) -> str:
        return self.with_
