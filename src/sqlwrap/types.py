"""Column type descriptors shared by drivers, the catalog and statements."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ColumnType:
    """Type information of a table column or a query result column.

    ``nullable`` is ``None`` when the engine cannot tell (e.g. SQLite query
    results); it is never guessed.
    """

    database_type_name: str
    data_type: str
    nullable: bool | None = None
    length: int | None = None
    precision: int | None = None
    scale: int | None = None

    @property
    def has_nullable(self) -> bool:
        """Return whether the nullability of this type is known."""
        return self.nullable is not None

    @property
    def has_length(self) -> bool:
        return self.length is not None

    @property
    def has_precision_scale(self) -> bool:
        return self.precision is not None


# Descriptor used when an engine reports nothing about a result column
UNKNOWN_TYPE = ColumnType(database_type_name="", data_type="")


@dataclass(frozen=True)
class ColumnDescriptor:
    """A named column as reported by a driver."""

    name: str
    type: ColumnType = UNKNOWN_TYPE
