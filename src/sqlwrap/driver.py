"""Driver interface: the per-engine boundary of schema and probe queries."""

from __future__ import annotations

from typing import Any

from sqlwrap.types import ColumnDescriptor


class Driver:
    """Loads metadata from one database engine over a DB-API connection.

    Subclasses implement every method below. Engines able to report a single
    auto-increment column per table set ``supports_auto_increment`` and
    override :meth:`auto_increment_column`.
    """

    name: str = ""
    supports_auto_increment: bool = False

    def connect(self, dsn: str) -> Any:
        """Open a DB-API connection for the given data source name."""
        raise NotImplementedError

    def list_tables(self, conn: Any) -> list[str]:
        """Return all table names in the current database."""
        raise NotImplementedError

    def list_columns(self, conn: Any, table: str) -> list[ColumnDescriptor]:
        """Return columns of a table in position order."""
        raise NotImplementedError

    def list_index_names(self, conn: Any, table: str) -> list[str]:
        raise NotImplementedError

    def describe_index(
        self, conn: Any, table: str, index: str
    ) -> tuple[list[str], bool, bool]:
        """Return (column names in index order, is_primary, is_unique)."""
        raise NotImplementedError

    def list_foreign_key_names(self, conn: Any, table: str) -> list[str]:
        raise NotImplementedError

    def describe_foreign_key(
        self, conn: Any, table: str, fk: str
    ) -> tuple[list[str], str, list[str]]:
        """Return (column names, referenced table name, referenced column names)."""
        raise NotImplementedError

    def auto_increment_column(self, conn: Any, table: str) -> str | None:
        """Return the auto-increment column name of a table, or None."""
        return None

    def quote(self, identifier: str) -> str:
        """Return the quoted form of an identifier."""
        raise NotImplementedError

    def load_query_result_columns(self, conn: Any, sql: str) -> list[ColumnDescriptor]:
        """Execute a query and return its result columns, in order."""
        raise NotImplementedError

    def data_types(self) -> list[str]:
        """Return every ``ColumnType.data_type`` value this driver can report."""
        raise NotImplementedError


def get_driver(name: str) -> Driver:
    """Return a driver instance by engine name."""
    from sqlwrap.drivers import DRIVERS

    driver_cls = DRIVERS.get(name)
    if driver_cls is None:
        raise ValueError(f"Unsupported driver '{name}'")
    return driver_cls()
