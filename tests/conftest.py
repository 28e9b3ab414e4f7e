"""Shared fixtures: an in-memory SQLite database and a scriptable fake driver."""

import re
import sqlite3

import pytest

from sqlwrap.catalog import Catalog
from sqlwrap.driver import Driver
from sqlwrap.drivers.sqlite import SQLiteDriver
from sqlwrap.types import ColumnDescriptor, ColumnType

BLOG_SCHEMA = """
CREATE TABLE user (
    id INTEGER PRIMARY KEY,
    name VARCHAR(64) NOT NULL,
    email TEXT,
    score DECIMAL(10, 2)
);
CREATE UNIQUE INDEX user_email ON user (email);

CREATE TABLE blog (
    id INTEGER PRIMARY KEY,
    user_id INTEGER NOT NULL REFERENCES user (id),
    title TEXT NOT NULL,
    body BLOB
);
CREATE INDEX blog_user ON blog (user_id);

CREATE TABLE tag (
    blog_id INTEGER NOT NULL,
    name TEXT NOT NULL,
    PRIMARY KEY (blog_id, name),
    FOREIGN KEY (blog_id) REFERENCES blog
);
"""


@pytest.fixture
def sqlite_conn():
    conn = sqlite3.connect(":memory:")
    conn.executescript(BLOG_SCHEMA)
    yield conn
    conn.close()


@pytest.fixture
def db_path(tmp_path):
    path = tmp_path / "blog.db"
    conn = sqlite3.connect(path)
    conn.executescript(BLOG_SCHEMA)
    conn.close()
    return path


@pytest.fixture
def sqlite_driver():
    return SQLiteDriver()


@pytest.fixture
def sqlite_catalog(sqlite_driver, sqlite_conn):
    return Catalog.build(sqlite_driver, sqlite_conn)


def int_type(nullable=False):
    return ColumnType("INTEGER", "integer", nullable=nullable)


def text_type(nullable=False):
    return ColumnType("TEXT", "text", nullable=nullable)


_SELECT_LIST_RE = re.compile(r"^\s*SELECT\s+(.*?)\s+FROM\s", re.IGNORECASE | re.DOTALL)
_TABLE_REF_RE = re.compile(r"(LEFT\s+)?(?:FROM|JOIN)\s+(\w+)(?:\s+AS\s+(\w+))?", re.IGNORECASE)
_QUALIFIED_RE = re.compile(r"^`(\w+)`\.`(\w+)`$")
_ALIASED_RE = re.compile(r"^.+?\s+AS\s+(\w+)$", re.IGNORECASE)


class FakeDriver(Driver):
    """Driver over dictionaries instead of a database.

    Result column queries are answered by reading the select list: ``expr AS name``
    gives a non-null integer, ```alias`.`column``` gives the table column's
    type, made nullable when the alias is on the right of a LEFT JOIN.
    """

    name = "fake"
    supports_auto_increment = True

    def __init__(self, tables=None):
        self.tables = dict(tables or {})
        self.indexes = {}
        self.foreign_keys = {}
        self.auto_increment = {}
        self.queries = []
        self.rewrite = None

    def connect(self, dsn):
        return None

    def list_tables(self, conn):
        return list(self.tables)

    def list_columns(self, conn, table):
        return list(self.tables[table])

    def list_index_names(self, conn, table):
        return list(self.indexes.get(table, {}))

    def describe_index(self, conn, table, index):
        return self.indexes[table][index]

    def list_foreign_key_names(self, conn, table):
        return list(self.foreign_keys.get(table, {}))

    def describe_foreign_key(self, conn, table, fk):
        return self.foreign_keys[table][fk]

    def auto_increment_column(self, conn, table):
        return self.auto_increment.get(table)

    def quote(self, identifier):
        return f"`{identifier}`"

    def load_query_result_columns(self, conn, sql):
        self.queries.append(sql)
        columns = self._describe(sql)
        if self.rewrite is not None:
            columns = self.rewrite(columns)
        return columns

    def data_types(self):
        return ["integer", "text"]

    def _describe(self, sql):
        match = _SELECT_LIST_RE.match(sql)
        if match is None:
            raise sqlite3.OperationalError(f"can't describe {sql!r}")

        aliases = {}
        for left, table, alias in _TABLE_REF_RE.findall(sql):
            aliases[alias or table] = (table, bool(left))

        columns = []
        for item in match.group(1).split(","):
            item = item.strip()
            qualified = _QUALIFIED_RE.match(item)
            if qualified:
                table, outer = aliases[qualified.group(1)]
                for descriptor in self.tables[table]:
                    if descriptor.name == qualified.group(2):
                        column_type = descriptor.type
                        if outer:
                            column_type = ColumnType(
                                column_type.database_type_name,
                                column_type.data_type,
                                nullable=True,
                            )
                        columns.append(ColumnDescriptor(descriptor.name, column_type))
                        break
                continue
            aliased = _ALIASED_RE.match(item)
            name = aliased.group(1) if aliased else item
            columns.append(ColumnDescriptor(name, int_type()))
        return columns


@pytest.fixture
def fake_driver():
    driver = FakeDriver(
        {
            "user": [
                ColumnDescriptor("id", int_type()),
                ColumnDescriptor("name", text_type()),
            ],
            "blog": [
                ColumnDescriptor("id", int_type()),
                ColumnDescriptor("user_id", int_type()),
                ColumnDescriptor("title", text_type()),
            ],
            "empty": [],
        }
    )
    driver.indexes = {
        "user": {"pk_user": (["id"], True, True)},
        "blog": {"pk_blog": (["id"], True, True), "ix_blog_user": (["user_id"], False, False)},
    }
    driver.foreign_keys = {"blog": {"fk_blog_user": (["user_id"], "user", ["id"])}}
    driver.auto_increment = {"user": "id", "blog": "id"}
    return driver


@pytest.fixture
def fake_catalog(fake_driver):
    return Catalog.build(fake_driver, None)
