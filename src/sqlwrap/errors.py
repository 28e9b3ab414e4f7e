"""Exceptions raised while loading schema metadata and compiling statements."""

from __future__ import annotations


class SchemaError(ValueError):
    """Driver-reported metadata is internally inconsistent."""


class UnresolvedReferenceError(LookupError):
    """A foreign key points at a table or column missing from the catalog."""


class DirectiveError(ValueError):
    """A directive element is malformed or used incorrectly."""


class StatementError(ValueError):
    """A statement definition cannot be compiled."""


class WildcardProtocolError(RuntimeError):
    """Probe query result columns do not line up with wildcard sentinels.

    Either the schema changed after the catalog was loaded or the probe
    query was generated incorrectly. Never recovered from.
    """


def annotate(error: Exception, statement_name: str) -> Exception:
    """Return a copy of *error* whose message names the statement."""
    return type(error)(f"{error} (in statement '{statement_name}')")
