"""The <wildcard> directive and the sentinel protocol that attributes its columns.

``<wildcard table="user" as="u"/>`` expands to every column of ``user``,
qualified by ``u``. To find out afterwards which probe query result columns
came from which wildcard, the probe query brackets each expansion with two
literal sentinel columns::

    SELECT 1 AS wc3f..._0_b, "u"."id", "u"."name", 1 AS wc3f..._0_e FROM user AS u

The sentinel names carry a random per-statement token, the wildcard's index
and begin/end. After the probe runs, the result column list is walked once:
columns between a pair of sentinels are attributed to the wildcard's table
columns in schema order, and the sentinels themselves are dropped.
"""

from __future__ import annotations

import re
import secrets
from dataclasses import dataclass
from typing import TYPE_CHECKING

from sqlwrap.directives.base import (
    Directive,
    QuoteFunc,
    as_element,
    reject_content,
    require_attribute,
)
from sqlwrap.errors import DirectiveError, WildcardProtocolError
from sqlwrap.parsing import Node
from sqlwrap.statement import ColumnSource, DirectiveKind, ResultColumn

if TYPE_CHECKING:
    from sqlwrap.catalog import Catalog, Table
    from sqlwrap.statement import Statement

# Sentinel names must be plain identifiers, so the token starts with a letter
MARKER_TOKEN_PREFIX = "wc"

_TOKEN_RE = re.compile(r"^[A-Za-z][A-Za-z0-9]*$")


def new_marker_token() -> str:
    """Return a fresh random sentinel token such as ``wc9f86d081884c7d65``."""
    return MARKER_TOKEN_PREFIX + secrets.token_hex(8)


@dataclass(frozen=True)
class Marker:
    """A sentinel column: the begin or end of wildcard number ``index``."""

    index: int
    is_begin: bool


class MarkerCodec:
    """Converts between Marker values and sentinel column names for one token."""

    def __init__(self, token: str) -> None:
        if not _TOKEN_RE.match(token):
            raise ValueError(f"Invalid marker token '{token}'")
        self.token = token
        # Some engines fold unquoted identifiers to upper or lower case
        self._pattern = re.compile(
            rf"^{re.escape(token)}_(\d+)_([be])$", re.IGNORECASE
        )

    def encode(self, marker: Marker) -> str:
        suffix = "b" if marker.is_begin else "e"
        return f"{self.token}_{marker.index}_{suffix}"

    def decode(self, name: str) -> Marker | None:
        """Return the Marker a column name encodes, or None for other names."""
        match = self._pattern.match(name)
        if match is None:
            return None
        return Marker(index=int(match.group(1)), is_begin=match.group(2).lower() == "b")


class WildcardResolution:
    """Wildcard state shared by all <wildcard> directives of one statement."""

    def __init__(self, token: str | None = None) -> None:
        self.codec = MarkerCodec(token if token is not None else new_marker_token())
        self.directives: list[WildcardDirective] = []
        self.processed = False

    @property
    def marker_token(self) -> str:
        return self.codec.token

    def register(self, directive: WildcardDirective) -> int:
        """Add a directive and return its zero-based index in the statement."""
        self.directives.append(directive)
        return len(self.directives) - 1

    def query_fragment(self, directive: WildcardDirective) -> str:
        """Return the directive's expansion bracketed by its sentinel columns."""
        parts = [f"1 AS {self.codec.encode(Marker(directive.index, True))}"]
        expansion = directive.expansion()
        if expansion:
            parts.append(expansion)
        parts.append(f"1 AS {self.codec.encode(Marker(directive.index, False))}")
        return ", ".join(parts)

    def process_result_columns(self, columns: list[ResultColumn]) -> None:
        """Attribute wildcard columns and drop sentinels, in place.

        Runs once per statement; every wildcard directive calls this, and
        later calls do nothing.

        Raises:
            WildcardProtocolError: If sentinels are unbalanced, nested or
                unknown, or a wildcard's span does not match its table's
                column count.
        """
        if self.processed:
            return

        processed: list[ResultColumn] = []
        current: WildcardDirective | None = None
        pos = 0

        for column in columns:
            marker = self.codec.decode(column.name)

            if marker is not None:
                if marker.is_begin:
                    if current is not None:
                        raise WildcardProtocolError(
                            f"Begin marker of wildcard #{marker.index} inside "
                            f"wildcard #{current.index}"
                        )
                    if marker.index >= len(self.directives):
                        raise WildcardProtocolError(
                            f"Marker '{column.name}' refers to unknown wildcard #{marker.index}"
                        )
                    current = self.directives[marker.index]
                    pos = 0
                else:
                    if current is None:
                        raise WildcardProtocolError(
                            f"End marker of wildcard #{marker.index} without a begin marker"
                        )
                    if marker.index != current.index:
                        raise WildcardProtocolError(
                            f"End marker of wildcard #{marker.index} inside "
                            f"wildcard #{current.index}"
                        )
                    if pos != current.table.num_columns:
                        raise WildcardProtocolError(
                            f"Wildcard #{current.index} of table '{current.table.name}' "
                            f"expected {current.table.num_columns} columns but got {pos}"
                        )
                    current = None
                    pos = 0
                continue

            if current is None:
                processed.append(column)
                continue

            if pos >= current.table.num_columns:
                raise WildcardProtocolError(
                    f"Wildcard #{current.index} of table '{current.table.name}' "
                    f"expected {current.table.num_columns} columns but got more"
                )
            source = ColumnSource(
                table=current.table,
                column=current.table.column(pos),
                alias=current.alias,
            )
            processed.append(ResultColumn(name=column.name, type=column.type, source=source))
            pos += 1

        if current is not None:
            raise WildcardProtocolError(
                f"Missing end marker of wildcard #{current.index}"
            )

        columns[:] = processed
        self.processed = True


class WildcardDirective(Directive):
    """``<wildcard table="..." as="..."/>``: all columns of a table."""

    def __init__(self) -> None:
        self.resolution: WildcardResolution | None = None
        self.table: Table | None = None
        self.alias = ""
        self.index = -1
        self._quote: QuoteFunc = str

    def initialize(
        self,
        catalog: Catalog,
        statement: Statement,
        node: Node,
        quote: QuoteFunc,
    ) -> None:
        element = as_element(node)
        reject_content(element)

        table_name = require_attribute(element, "table")
        as_ = element.get("as")
        alias = element.get("alias")
        if as_ is not None and alias is not None and as_ != alias:
            raise DirectiveError(
                f"Conflicting 'as' and 'alias' attributes in <wildcard> directive "
                f"(line {element.lineno})"
            )

        table = catalog.table_by_name(table_name)
        if table is None:
            raise DirectiveError(
                f"Table '{table_name}' not found for <wildcard> directive (line {element.lineno})"
            )

        self.table = table
        self.alias = as_ or alias or ""
        self._quote = quote
        self.resolution = statement.locals.get_or_create(
            DirectiveKind.WILDCARD, WildcardResolution
        )
        self.index = self.resolution.register(self)

    @property
    def prefix(self) -> str:
        """Qualifier of the expanded columns: the alias, else the table name."""
        return self.alias or self.table.name

    def expansion(self) -> str:
        """Return the comma-separated, qualified and quoted column list."""
        prefix = self._quote(self.prefix)
        return ", ".join(f"{prefix}.{self._quote(c.name)}" for c in self.table.columns)

    def query_fragment(self) -> str:
        return self.resolution.query_fragment(self)

    def process_result_columns(self, columns: list[ResultColumn]) -> None:
        self.resolution.process_result_columns(columns)

    def fragment(self) -> str:
        return self.expansion()
