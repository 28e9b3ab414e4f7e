"""Compiled statements and the per-statement state shared by directives."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, TypeVar

from sqlwrap.errors import StatementError
from sqlwrap.parsing import Node
from sqlwrap.types import ColumnType

if TYPE_CHECKING:
    from sqlwrap.catalog import Column, Table
    from sqlwrap.directives.arg import ArgsInfo
    from sqlwrap.directives.var import VarsInfo
    from sqlwrap.directives.wildcard import WildcardResolution

T = TypeVar("T")

_VERB_RE = re.compile(r"^\s*([A-Za-z]+)")


class StatementType(Enum):
    """Kind of SQL statement, derived from its first word."""

    SELECT = "SELECT"
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"

    @classmethod
    def from_text(cls, text: str) -> StatementType:
        """Determine the statement type from the first word of SQL text.

        Raises:
            StatementError: If the first word is missing or not a known verb.
        """
        match = _VERB_RE.match(text)
        if match is None:
            raise StatementError(f"Can't determine statement type of {text!r}")
        verb = match.group(1).upper()
        try:
            return cls(verb)
        except ValueError:
            raise StatementError(f"Unsupported statement type '{verb}'") from None


@dataclass(frozen=True)
class ColumnSource:
    """Where a wildcard-expanded result column came from."""

    table: Table
    column: Column
    alias: str = ""


@dataclass
class ResultColumn:
    """A result column reported by the database for a SELECT statement.

    ``type`` is what the database reported for the *result*, which may be
    nullable even when the source column is not (e.g. through a LEFT JOIN).
    """

    name: str
    type: ColumnType
    source: ColumnSource | None = None


class DirectiveKind(Enum):
    """Directive kinds that keep state across instances in one statement."""

    ARG = "arg"
    VAR = "var"
    WILDCARD = "wildcard"


class StatementLocals:
    """Directive state scoped to one statement.

    Holds at most one object per DirectiveKind, created on first use and
    shared by every directive of that kind in the statement.
    """

    def __init__(self) -> None:
        self._values: dict[DirectiveKind, Any] = {}

    def get_or_create(self, kind: DirectiveKind, factory: Callable[[], T]) -> T:
        """Return the object for a kind, creating it with *factory* if absent."""
        value = self._values.get(kind)
        if value is None:
            value = factory()
            self._values[kind] = value
        return value

    def get(self, kind: DirectiveKind) -> Any:
        return self._values.get(kind)

    def __contains__(self, kind: DirectiveKind) -> bool:
        return kind in self._values

    @property
    def args(self) -> ArgsInfo | None:
        return self._values.get(DirectiveKind.ARG)

    @property
    def vars(self) -> VarsInfo | None:
        return self._values.get(DirectiveKind.VAR)

    @property
    def wildcards(self) -> WildcardResolution | None:
        return self._values.get(DirectiveKind.WILDCARD)


@dataclass
class StatementDefinition:
    """A statement as written in markup, before compilation."""

    name: str
    body: list[Node]
    declared_type: StatementType | None = None


@dataclass
class Statement:
    """A compiled statement.

    ``text`` is the SQL handed to consumers; ``query`` is the probe text
    used to discover result columns. ``result_columns`` is only filled for
    SELECT statements.
    """

    name: str
    type: StatementType | None = None
    text: str = ""
    query: str = ""
    result_columns: list[ResultColumn] = field(default_factory=list)
    locals: StatementLocals = field(default_factory=StatementLocals, repr=False)

    def __str__(self) -> str:
        return self.name

    @property
    def is_select(self) -> bool:
        return self.type is StatementType.SELECT

    @property
    def args(self) -> ArgsInfo | None:
        return self.locals.args

    @property
    def vars(self) -> VarsInfo | None:
        return self.locals.vars

    @property
    def wildcards(self) -> WildcardResolution | None:
        return self.locals.wildcards
