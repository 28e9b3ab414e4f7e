"""The <arg> directive: declares an argument of the generated wrapper function."""

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
from sqlwrap.errors import DirectiveError
from sqlwrap.parsing import Node
from sqlwrap.statement import DirectiveKind

if TYPE_CHECKING:
    from sqlwrap.catalog import Catalog
    from sqlwrap.statement import Statement


@dataclass(frozen=True)
class ArgInfo:
    """A single wrapper function argument."""

    name: str
    type: str


@dataclass
class ArgsInfo:
    """Wrapper function arguments of a statement, in declaration order."""

    args: list[ArgInfo] = field(default_factory=list)

    def add(self, arg: ArgInfo) -> None:
        if self.get(arg.name) is not None:
            raise DirectiveError(f"Duplicate arg name '{arg.name}'")
        self.args.append(arg)

    def get(self, name: str) -> ArgInfo | None:
        for arg in self.args:
            if arg.name == name:
                return arg
        return None

    @property
    def names(self) -> list[str]:
        return [arg.name for arg in self.args]

    def __len__(self) -> int:
        return len(self.args)


class ArgDirective(Directive):
    """``<arg name="..." type="..."/>``; contributes no text."""

    def __init__(self) -> None:
        self.arg: ArgInfo | None = None

    def initialize(
        self,
        catalog: Catalog,
        statement: Statement,
        node: Node,
        quote: QuoteFunc,
    ) -> None:
        element = as_element(node)
        reject_content(element)
        self.arg = ArgInfo(
            name=require_attribute(element, "name"),
            type=require_attribute(element, "type"),
        )
        statement.locals.get_or_create(DirectiveKind.ARG, ArgsInfo).add(self.arg)

    def query_fragment(self) -> str:
        return ""

    def fragment(self) -> str:
        return ""
