"""sqlwrap - Compile annotated SQL statements against a live database schema."""

from sqlwrap.catalog import Catalog, Column, ForeignKey, Index, Table
from sqlwrap.compiler import StatementCompiler, parse_statements
from sqlwrap.config import Config
from sqlwrap.context import Context
from sqlwrap.directives import DirectiveRegistry, default_registry
from sqlwrap.driver import Driver, get_driver
from sqlwrap.errors import (
    DirectiveError,
    SchemaError,
    StatementError,
    UnresolvedReferenceError,
    WildcardProtocolError,
)
from sqlwrap.parsing import MarkupParser
from sqlwrap.statement import (
    ColumnSource,
    ResultColumn,
    Statement,
    StatementDefinition,
    StatementType,
)
from sqlwrap.types import ColumnDescriptor, ColumnType

__all__ = [
    # Main API
    "Context",
    "Config",
    "StatementCompiler",
    "parse_statements",
    "MarkupParser",
    # Schema
    "Catalog",
    "Table",
    "Column",
    "Index",
    "ForeignKey",
    "ColumnType",
    "ColumnDescriptor",
    # Drivers
    "Driver",
    "get_driver",
    # Statements
    "Statement",
    "StatementDefinition",
    "StatementType",
    "ResultColumn",
    "ColumnSource",
    "DirectiveRegistry",
    "default_registry",
    # Errors
    "SchemaError",
    "UnresolvedReferenceError",
    "DirectiveError",
    "StatementError",
    "WildcardProtocolError",
]

__version__ = "0.1.0"
