"""Context: the driver, connection, catalog and compiler of one run."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from sqlwrap.catalog import Catalog
from sqlwrap.compiler import StatementCompiler
from sqlwrap.config import Config
from sqlwrap.directives import DirectiveRegistry
from sqlwrap.driver import Driver, get_driver
from sqlwrap.statement import Statement

logger = logging.getLogger(__name__)


class Context:
    """Everything needed to compile statements against one database."""

    def __init__(
        self,
        driver: Driver,
        conn: Any,
        catalog: Catalog,
        compiler: StatementCompiler,
        statement_dir: Path | None = None,
    ) -> None:
        self.driver = driver
        self.conn = conn
        self.catalog = catalog
        self.compiler = compiler
        self.statement_dir = statement_dir

    @classmethod
    def open(cls, config: Config, registry: DirectiveRegistry | None = None) -> Context:
        """Connect to the configured database and load its catalog.

        Args:
            config: Run configuration.
            registry: Directive registry; the built-in directives if omitted.

        Returns:
            An open Context. Close it with :meth:`close` or use it as a
            context manager.

        Raises:
            ValueError: If the driver name is unknown.
            SchemaError: If the database metadata is inconsistent.
        """
        driver = get_driver(config.driver)
        conn = driver.connect(config.dsn)
        try:
            catalog = Catalog.build(driver, conn, config.table_filter())
        except Exception:
            conn.close()
            raise

        logger.info("Opened %s database %s", driver.name, config.dsn)
        compiler = StatementCompiler(catalog, driver, conn, registry)
        return cls(driver, conn, catalog, compiler, config.statement_dir)

    def compile_statements(self) -> dict[str, list[Statement]]:
        """Compile the configured statement directory.

        Returns:
            Compiled statements keyed by file stem; empty when no statement
            directory is configured.
        """
        if self.statement_dir is None:
            return {}
        return self.compiler.compile_directory(self.statement_dir)

    def close(self) -> None:
        """Close the database connection."""
        if self.conn is not None:
            self.conn.close()
            self.conn = None

    def __enter__(self) -> Context:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
