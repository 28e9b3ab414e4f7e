"""In-memory model of a database schema: tables, columns, indexes and foreign keys."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator

from sqlwrap.driver import Driver
from sqlwrap.errors import SchemaError, UnresolvedReferenceError
from sqlwrap.types import ColumnType

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class Column:
    """A table column. ``pos`` is its zero-based position in the table."""

    table: Table = field(repr=False)
    name: str
    pos: int
    type: ColumnType

    def __str__(self) -> str:
        return self.name


@dataclass(eq=False)
class Index:
    """An index; ``columns`` are in index order, not table order."""

    table: Table = field(repr=False)
    name: str
    columns: tuple[Column, ...]
    is_primary: bool = False
    is_unique: bool = False

    def __str__(self) -> str:
        return self.name


@dataclass(eq=False)
class ForeignKey:
    """A foreign key constraint.

    The referenced table is kept by name and resolved against the catalog
    only when asked for, so a catalog built with a table filter can still
    hold foreign keys pointing at excluded tables.
    """

    table: Table = field(repr=False)
    name: str
    columns: tuple[Column, ...]
    ref_table_name: str
    ref_column_names: tuple[str, ...]

    def __str__(self) -> str:
        return self.name

    @property
    def has_ref_table(self) -> bool:
        """Return whether the referenced table is present in the catalog."""
        return self.ref_table_name in self.table.catalog

    @property
    def ref_table(self) -> Table:
        """Return the referenced table.

        Raises:
            UnresolvedReferenceError: If the table is not in the catalog.
        """
        ref_table = self.table.catalog.table_by_name(self.ref_table_name)
        if ref_table is None:
            raise UnresolvedReferenceError(
                f"Foreign key '{self.name}' of table '{self.table.name}' references "
                f"table '{self.ref_table_name}' which is not in the catalog "
                "(filtered out?)"
            )
        return ref_table

    @property
    def ref_columns(self) -> tuple[Column, ...]:
        """Return the referenced columns, paired positionally with ``columns``."""
        ref_table = self.ref_table
        ref_columns = []
        for name in self.ref_column_names:
            column = ref_table.column_by_name(name)
            if column is None:
                raise UnresolvedReferenceError(
                    f"Foreign key '{self.name}' of table '{self.table.name}' references "
                    f"column '{name}' which is not in table '{ref_table.name}'"
                )
            ref_columns.append(column)
        return tuple(ref_columns)


class Table:
    """A table with its columns, indexes and foreign keys."""

    def __init__(self, catalog: Catalog, name: str) -> None:
        self.catalog = catalog
        self.name = name
        self.primary: Index | None = None
        self.auto_increment_column: Column | None = None
        self._columns: list[Column] = []
        self._column_names: dict[str, int] = {}
        self._indexes: list[Index] = []
        self._index_names: dict[str, int] = {}
        self._foreign_keys: list[ForeignKey] = []
        self._foreign_key_names: dict[str, int] = {}

    def __repr__(self) -> str:
        return f"Table({self.name!r})"

    def __str__(self) -> str:
        return self.name

    @property
    def columns(self) -> tuple[Column, ...]:
        return tuple(self._columns)

    @property
    def indexes(self) -> tuple[Index, ...]:
        return tuple(self._indexes)

    @property
    def foreign_keys(self) -> tuple[ForeignKey, ...]:
        return tuple(self._foreign_keys)

    @property
    def unique_indexes(self) -> tuple[Index, ...]:
        """Return unique indexes other than the primary one."""
        return tuple(i for i in self._indexes if i.is_unique and not i.is_primary)

    @property
    def num_columns(self) -> int:
        return len(self._columns)

    def column(self, pos: int) -> Column:
        """Return the column at a position.

        Raises:
            IndexError: If the position is out of range.
        """
        if pos < 0 or pos >= len(self._columns):
            raise IndexError(f"Column position {pos} out of range for table '{self.name}'")
        return self._columns[pos]

    def column_by_name(self, name: str) -> Column | None:
        pos = self._column_names.get(name)
        if pos is None:
            return None
        return self._columns[pos]

    def index_by_name(self, name: str) -> Index | None:
        i = self._index_names.get(name)
        if i is None:
            return None
        return self._indexes[i]

    def foreign_key_by_name(self, name: str) -> ForeignKey | None:
        i = self._foreign_key_names.get(name)
        if i is None:
            return None
        return self._foreign_keys[i]

    def _column_or_raise(self, name: str, what: str) -> Column:
        column = self.column_by_name(name)
        if column is None:
            raise SchemaError(
                f"{what} refers to column '{name}' not found in table '{self.name}'"
            )
        return column

    def _add_column(self, name: str, column_type: ColumnType) -> Column:
        if name in self._column_names:
            raise SchemaError(f"Duplicate column '{name}' in table '{self.name}'")
        column = Column(table=self, name=name, pos=len(self._columns), type=column_type)
        self._columns.append(column)
        self._column_names[name] = column.pos
        return column

    def _add_index(
        self, name: str, column_names: list[str], is_primary: bool, is_unique: bool
    ) -> Index:
        if name in self._index_names:
            raise SchemaError(f"Duplicate index '{name}' in table '{self.name}'")
        if not column_names:
            raise SchemaError(f"Index '{name}' in table '{self.name}' has no columns")
        columns = tuple(
            self._column_or_raise(c, f"Index '{name}'") for c in column_names
        )
        index = Index(
            table=self,
            name=name,
            columns=columns,
            is_primary=is_primary,
            is_unique=is_unique,
        )
        if is_primary:
            if self.primary is not None:
                raise SchemaError(
                    f"Table '{self.name}' has two primary indexes: "
                    f"'{self.primary.name}' and '{name}'"
                )
            self.primary = index
        self._indexes.append(index)
        self._index_names[name] = len(self._indexes) - 1
        return index

    def _add_foreign_key(
        self,
        name: str,
        column_names: list[str],
        ref_table_name: str,
        ref_column_names: list[str],
    ) -> ForeignKey:
        if name in self._foreign_key_names:
            raise SchemaError(f"Duplicate foreign key '{name}' in table '{self.name}'")
        if len(column_names) != len(ref_column_names):
            raise SchemaError(
                f"Foreign key '{name}' in table '{self.name}' has {len(column_names)} "
                f"columns but {len(ref_column_names)} referenced columns"
            )
        columns = tuple(
            self._column_or_raise(c, f"Foreign key '{name}'") for c in column_names
        )
        fk = ForeignKey(
            table=self,
            name=name,
            columns=columns,
            ref_table_name=ref_table_name,
            ref_column_names=tuple(ref_column_names),
        )
        self._foreign_keys.append(fk)
        self._foreign_key_names[name] = len(self._foreign_keys) - 1
        return fk


class Catalog:
    """All tables of a database, looked up by position or name.

    Built once by :meth:`build` and read-only afterwards, so one catalog can
    be shared by any number of statement compilations.
    """

    def __init__(self) -> None:
        self._tables: list[Table] = []
        self._table_names: dict[str, int] = {}

    @classmethod
    def build(
        cls,
        driver: Driver,
        conn: Any,
        table_filter: Callable[[str], bool] | None = None,
    ) -> Catalog:
        """Load the schema of the connected database through a driver.

        Args:
            driver: Driver for the database engine.
            conn: Open DB-API connection.
            table_filter: Optional predicate; tables it rejects are skipped.

        Returns:
            A populated Catalog.

        Raises:
            SchemaError: If the driver reports an index, foreign key or
                auto-increment column that names a column the table lacks.
        """
        catalog = cls()
        for table_name in driver.list_tables(conn):
            if table_filter is not None and not table_filter(table_name):
                logger.debug("Skipping table %s", table_name)
                continue
            catalog._load_table(driver, conn, table_name)

        logger.info("Loaded %d tables", len(catalog))
        return catalog

    def _load_table(self, driver: Driver, conn: Any, table_name: str) -> Table:
        if table_name in self._table_names:
            raise SchemaError(f"Duplicate table '{table_name}'")
        table = Table(self, table_name)

        for descriptor in driver.list_columns(conn, table_name):
            table._add_column(descriptor.name, descriptor.type)

        if driver.supports_auto_increment:
            column_name = driver.auto_increment_column(conn, table_name)
            if column_name:
                table.auto_increment_column = table._column_or_raise(
                    column_name, "Auto increment column"
                )

        for index_name in driver.list_index_names(conn, table_name):
            column_names, is_primary, is_unique = driver.describe_index(
                conn, table_name, index_name
            )
            table._add_index(index_name, column_names, is_primary, is_unique)

        for fk_name in driver.list_foreign_key_names(conn, table_name):
            column_names, ref_table_name, ref_column_names = driver.describe_foreign_key(
                conn, table_name, fk_name
            )
            table._add_foreign_key(fk_name, column_names, ref_table_name, ref_column_names)

        self._tables.append(table)
        self._table_names[table_name] = len(self._tables) - 1
        logger.debug(
            "Loaded table %s: %d columns, %d indexes, %d foreign keys",
            table_name,
            table.num_columns,
            len(table.indexes),
            len(table.foreign_keys),
        )
        return table

    @property
    def tables(self) -> tuple[Table, ...]:
        return tuple(self._tables)

    def table(self, i: int) -> Table:
        return self._tables[i]

    def table_by_name(self, name: str) -> Table | None:
        """Get a table by name, or None if it is not in the catalog."""
        i = self._table_names.get(name)
        if i is None:
            return None
        return self._tables[i]

    def table_by_name_or_raise(self, name: str) -> Table:
        """Get a table by name, raising if not found."""
        table = self.table_by_name(name)
        if table is None:
            raise KeyError(f"Table '{name}' not found")
        return table

    def list_tables(self) -> list[str]:
        """List all table names in load order."""
        return [t.name for t in self._tables]

    def __len__(self) -> int:
        return len(self._tables)

    def __iter__(self) -> Iterator[Table]:
        return iter(self._tables)

    def __contains__(self, name: str) -> bool:
        return name in self._table_names
