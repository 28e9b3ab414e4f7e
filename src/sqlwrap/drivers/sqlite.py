"""SQLite driver built on the standard library ``sqlite3`` module."""

from __future__ import annotations

import logging
import re
import sqlite3

from sqlwrap.driver import Driver
from sqlwrap.types import UNKNOWN_TYPE, ColumnDescriptor, ColumnType

logger = logging.getLogger(__name__)

# Name given to the implicit primary key of a rowid table with an
# INTEGER PRIMARY KEY column (SQLite creates no index for it)
ROWID_PRIMARY_INDEX = "PRIMARY"

FK_NAME_PREFIX = "fk_"

_DECLARED_TYPE_RE = re.compile(
    r"^\s*(?P<name>[^(]*?)\s*(?:\(\s*(?P<first>\d+)\s*(?:,\s*(?P<second>\d+)\s*)?\))?\s*$"
)


def type_affinity(declared_type: str) -> str:
    """Return the SQLite column affinity of a declared type, lowercased.

    Follows the rules of section 3.1 of https://www.sqlite.org/datatype3.html.
    """
    upper = declared_type.upper()
    if "INT" in upper:
        return "integer"
    if "CHAR" in upper or "CLOB" in upper or "TEXT" in upper:
        return "text"
    if "BLOB" in upper or not upper.strip():
        return "blob"
    if "REAL" in upper or "FLOA" in upper or "DOUB" in upper:
        return "real"
    return "numeric"


def parse_declared_type(declared_type: str, nullable: bool | None) -> ColumnType:
    """Build a ColumnType from a declared type such as ``DECIMAL(10, 2)``."""
    data_type = type_affinity(declared_type)
    match = _DECLARED_TYPE_RE.match(declared_type)
    if match is None:
        return ColumnType(
            database_type_name=declared_type.strip().upper(),
            data_type=data_type,
            nullable=nullable,
        )

    first = int(match.group("first")) if match.group("first") else None
    second = int(match.group("second")) if match.group("second") else None
    length = precision = scale = None
    if first is not None:
        if data_type in ("text", "blob"):
            length = first
        else:
            precision = first
            scale = second if second is not None else 0

    return ColumnType(
        database_type_name=match.group("name").upper(),
        data_type=data_type,
        nullable=nullable,
        length=length,
        precision=precision,
        scale=scale,
    )


class SQLiteDriver(Driver):
    """Driver for SQLite databases (requires SQLite 3.16+ pragma functions)."""

    name = "sqlite"
    supports_auto_increment = True

    def connect(self, dsn: str) -> sqlite3.Connection:
        logger.debug("Connecting to sqlite database %s", dsn)
        return sqlite3.connect(dsn)

    def list_tables(self, conn: sqlite3.Connection) -> list[str]:
        rows = conn.execute(
            "SELECT name FROM sqlite_master "
            "WHERE type = 'table' AND name NOT LIKE 'sqlite_%' ORDER BY name"
        ).fetchall()
        return [row[0] for row in rows]

    def _table_info(self, conn: sqlite3.Connection, table: str) -> list[tuple]:
        return conn.execute(
            'SELECT cid, name, type, "notnull", pk FROM pragma_table_info(?) ORDER BY cid',
            (table,),
        ).fetchall()

    def _index_list(self, conn: sqlite3.Connection, table: str) -> list[tuple]:
        return conn.execute(
            'SELECT name, "unique", origin FROM pragma_index_list(?) ORDER BY name',
            (table,),
        ).fetchall()

    def _index_columns(self, conn: sqlite3.Connection, index: str) -> list[str | None]:
        rows = conn.execute(
            "SELECT name FROM pragma_index_info(?) ORDER BY seqno", (index,)
        ).fetchall()
        return [row[0] for row in rows]

    def _rowid_column(self, conn: sqlite3.Connection, table: str) -> str | None:
        """Return the INTEGER PRIMARY KEY column aliasing the rowid, if any."""
        if any(origin == "pk" for _, _, origin in self._index_list(conn, table)):
            # WITHOUT ROWID table, or a primary key backed by a real index
            return None
        pk_columns = [
            (name, declared) for _, name, declared, _, pk in self._table_info(conn, table) if pk
        ]
        if len(pk_columns) == 1 and pk_columns[0][1].strip().upper() == "INTEGER":
            return pk_columns[0][0]
        return None

    def list_columns(self, conn: sqlite3.Connection, table: str) -> list[ColumnDescriptor]:
        rowid_column = self._rowid_column(conn, table)
        columns = []
        for _, name, declared, notnull, _ in self._table_info(conn, table):
            nullable = not (notnull or name == rowid_column)
            columns.append(
                ColumnDescriptor(name=name, type=parse_declared_type(declared, nullable))
            )
        return columns

    def auto_increment_column(self, conn: sqlite3.Connection, table: str) -> str | None:
        return self._rowid_column(conn, table)

    def list_index_names(self, conn: sqlite3.Connection, table: str) -> list[str]:
        names = []
        if self._rowid_column(conn, table) is not None:
            names.append(ROWID_PRIMARY_INDEX)
        for name, _, _ in self._index_list(conn, table):
            if None in self._index_columns(conn, name):
                logger.debug("Skipping expression index %s on %s", name, table)
                continue
            names.append(name)
        return names

    def describe_index(
        self, conn: sqlite3.Connection, table: str, index: str
    ) -> tuple[list[str], bool, bool]:
        if index == ROWID_PRIMARY_INDEX:
            rowid_column = self._rowid_column(conn, table)
            if rowid_column is not None:
                return [rowid_column], True, True

        for name, unique, origin in self._index_list(conn, table):
            if name == index:
                columns = self._index_columns(conn, name)
                return columns, origin == "pk", bool(unique)
        raise ValueError(f"Index '{index}' in table '{table}' not found")

    def _foreign_key_rows(self, conn: sqlite3.Connection, table: str) -> list[tuple]:
        return conn.execute(
            'SELECT id, seq, "table", "from", "to" FROM pragma_foreign_key_list(?) '
            "ORDER BY id, seq",
            (table,),
        ).fetchall()

    def list_foreign_key_names(self, conn: sqlite3.Connection, table: str) -> list[str]:
        ids = sorted({row[0] for row in self._foreign_key_rows(conn, table)})
        return [f"{FK_NAME_PREFIX}{table}_{fk_id}" for fk_id in ids]

    def describe_foreign_key(
        self, conn: sqlite3.Connection, table: str, fk: str
    ) -> tuple[list[str], str, list[str]]:
        prefix = f"{FK_NAME_PREFIX}{table}_"
        suffix = fk[len(prefix):]
        if not fk.startswith(prefix) or not suffix.isdigit():
            raise ValueError(f"Foreign key '{fk}' in table '{table}' not found")
        fk_id = int(suffix)

        rows = [row for row in self._foreign_key_rows(conn, table) if row[0] == fk_id]
        if not rows:
            raise ValueError(f"Foreign key '{fk}' in table '{table}' not found")

        ref_table = rows[0][2]
        columns = [row[3] for row in rows]
        ref_columns = [row[4] for row in rows]
        if None in ref_columns:
            # REFERENCES parent without a column list targets the parent's primary key
            pk_rows = sorted(
                (pk, name) for _, name, _, _, pk in self._table_info(conn, ref_table) if pk
            )
            if len(pk_rows) == len(ref_columns):
                ref_columns = [name for _, name in pk_rows]
            else:
                # Parent table missing; resolution fails later, when dereferenced
                ref_columns = [name or "" for name in ref_columns]
        return columns, ref_table, ref_columns

    def quote(self, identifier: str) -> str:
        return '"' + identifier.replace('"', '""') + '"'

    def load_query_result_columns(
        self, conn: sqlite3.Connection, sql: str
    ) -> list[ColumnDescriptor]:
        cursor = conn.cursor()
        try:
            cursor.execute(sql)
            description = cursor.description or ()
        finally:
            cursor.close()
        # sqlite3 reports result column names only
        return [ColumnDescriptor(name=entry[0], type=UNKNOWN_TYPE) for entry in description]

    def data_types(self) -> list[str]:
        return ["integer", "text", "blob", "real", "numeric"]
