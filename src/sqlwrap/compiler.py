"""Statement compiler: markup in, resolved SQL and typed result columns out."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from sqlwrap.catalog import Catalog
from sqlwrap.directives import Directive, DirectiveRegistry, TextDirective, default_registry
from sqlwrap.driver import Driver
from sqlwrap.errors import DirectiveError, StatementError, WildcardProtocolError, annotate
from sqlwrap.parsing import Element, MarkupParser, Node, Text
from sqlwrap.statement import ResultColumn, Statement, StatementDefinition, StatementType

logger = logging.getLogger(__name__)

# Top-level elements of a statement file and the type each one declares
STATEMENT_TAGS: dict[str, StatementType | None] = {
    "stmt": None,
    "select": StatementType.SELECT,
    "insert": StatementType.INSERT,
    "update": StatementType.UPDATE,
    "delete": StatementType.DELETE,
}


def parse_statements(source: str, parser: MarkupParser | None = None) -> list[StatementDefinition]:
    """Parse a statement file into definitions, in document order.

    Args:
        source: Markup holding ``<stmt name="...">`` (or ``<select>``,
            ``<insert>``, ``<update>``, ``<delete>``) elements.
        parser: Parser to reuse; a new one is created if omitted.

    Returns:
        The statement definitions.

    Raises:
        SyntaxError: If the markup is malformed.
        StatementError: On text outside statements, an unknown top-level
            element, a missing name or a duplicate name.
    """
    if parser is None:
        parser = MarkupParser()

    definitions: list[StatementDefinition] = []
    names: set[str] = set()

    for node in parser.parse(source):
        if isinstance(node, Text):
            if not node.is_blank:
                raise StatementError(
                    f"Unexpected text outside of statements: {node.value.strip()!r}"
                )
            continue

        if node.tag not in STATEMENT_TAGS:
            raise StatementError(f"Unknown statement element <{node.tag}> (line {node.lineno})")

        name = node.get("name")
        if not name:
            raise StatementError(
                f"Missing 'name' attribute in <{node.tag}> element (line {node.lineno})"
            )
        if name in names:
            raise StatementError(f"Duplicate statement name '{name}' (line {node.lineno})")
        names.add(name)

        definitions.append(
            StatementDefinition(name=name, body=node.children, declared_type=STATEMENT_TAGS[node.tag])
        )

    return definitions


class StatementCompiler:
    """Compiles statement definitions against a catalog and a live connection.

    Compilation runs in two passes over the statement's directives. The probe
    pass concatenates every directive's query fragment; for SELECT statements
    the probe is executed to learn the result columns, which directives may
    then rewrite. The final pass concatenates every directive's fragment into
    the statement text.
    """

    def __init__(
        self,
        catalog: Catalog,
        driver: Driver,
        conn: Any,
        registry: DirectiveRegistry | None = None,
    ) -> None:
        """Initialize a compiler.

        Args:
            catalog: Schema metadata used by directives.
            driver: Driver used for quoting and probe queries.
            conn: Open DB-API connection for probe queries.
            registry: Directive registry; the built-in directives if omitted.
        """
        self.catalog = catalog
        self.driver = driver
        self.conn = conn
        self.registry = registry if registry is not None else default_registry()
        self._parser = MarkupParser()

    def compile(self, definition: StatementDefinition) -> Statement:
        """Compile one statement definition.

        Raises:
            DirectiveError: If a directive is malformed.
            StatementError: If the statement type can't be determined or
                differs from the declared one.
            WildcardProtocolError: If probe result columns don't match the
                wildcard expansions.

        Database errors raised by the probe query propagate unchanged.
        """
        statement = Statement(name=definition.name)
        try:
            directives = self._create_directives(statement, definition.body)

            query = "".join(d.query_fragment() for d in directives).strip()
            statement.query = query
            statement.type = StatementType.from_text(query)
            if definition.declared_type is not None and definition.declared_type != statement.type:
                raise StatementError(
                    f"Declared as {definition.declared_type.value} "
                    f"but is {statement.type.value}"
                )

            if statement.is_select:
                statement.result_columns = self._load_result_columns(statement, directives)

            statement.text = "".join(d.fragment() for d in directives).strip()
        except (DirectiveError, StatementError, WildcardProtocolError) as e:
            raise annotate(e, definition.name) from e

        logger.debug("Compiled statement %s (%s)", statement.name, statement.type.value)
        return statement

    def _create_directives(self, statement: Statement, body: list[Node]) -> list[Directive]:
        directives: list[Directive] = []
        quote = self.driver.quote
        for node in body:
            if isinstance(node, Element):
                directive = self.registry.create(node.tag)
            else:
                directive = TextDirective()
            directive.initialize(self.catalog, statement, node, quote)
            directives.append(directive)
        return directives

    def _load_result_columns(
        self, statement: Statement, directives: list[Directive]
    ) -> list[ResultColumn]:
        logger.debug("Probing statement %s: %s", statement.name, statement.query)
        descriptors = self.driver.load_query_result_columns(self.conn, statement.query)

        columns = [ResultColumn(name=d.name, type=d.type) for d in descriptors]
        for directive in directives:
            directive.process_result_columns(columns)

        if not columns:
            logger.warning("Statement %s has no result columns", statement.name)
        return columns

    def compile_source(self, source: str) -> list[Statement]:
        """Compile every statement of a statement file's contents."""
        return [self.compile(d) for d in parse_statements(source, self._parser)]

    def compile_file(self, path: Path | str) -> list[Statement]:
        """Compile every statement of a statement file.

        Args:
            path: Path to the file.

        Returns:
            Compiled statements in document order.
        """
        path = Path(path)
        statements = self.compile_source(path.read_text(encoding="utf-8"))
        logger.info("Compiled %d statements from %s", len(statements), path)
        return statements

    def compile_directory(self, path: Path | str) -> dict[str, list[Statement]]:
        """Compile every ``*.xml`` file of a directory, in file name order.

        Returns:
            Compiled statements keyed by file stem.
        """
        path = Path(path)
        if not path.is_dir():
            raise NotADirectoryError(f"Statement directory not found: {path}")

        result: dict[str, list[Statement]] = {}
        for file_path in sorted(path.glob("*.xml")):
            result[file_path.stem] = self.compile_file(file_path)
        return result
