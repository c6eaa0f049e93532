#!/usr/bin/env python3
"""
TableExtractor - Main orchestrator for table extraction.

Coordinates the components to pull tables out of one or more inputs,
apply table selection, and render JSON output.
"""

import logging
import sys
import time
from typing import Any, Dict, IO, Iterator, List, Optional, Sequence

from .data_models import (
    ExtractionReport,
    ExtractionResult,
    ExtractionSettings,
    ParseState,
    Row,
    Table,
    TableIndexScope,
)
from .components.line_source import LineSource, STDIN_LABEL
from .components.table_parser import TableParser
from .components.json_renderer import JsonRenderer

logger = logging.getLogger(__name__)

STDIN_ARGUMENT = "-"


class TableExtractor:
    """
    Main orchestrator for table extraction.

    Coordinates all components to:
    1. Open each input in argument order (stdin for '-')
    2. Recognize tables and number them per file or globally
    3. Skip tables that do not match the selector without storing rows
    4. Render selected tables as full documents or compact row streams
    """

    def __init__(
        self,
        inputs: Optional[Sequence[str]] = None,
        settings: Optional[ExtractionSettings] = None,
        stdin: Optional[IO[str]] = None
    ):
        """
        Initialize extractor.

        Args:
            inputs: File paths in processing order ('-' means stdin); empty
                or None reads stdin only
            settings: Extraction options (defaults used if None)
            stdin: Stream used for '-' (defaults to sys.stdin)
        """
        self.inputs = list(inputs) if inputs else [STDIN_ARGUMENT]
        self.settings = settings or ExtractionSettings()
        self.stdin = stdin
        self.renderer = JsonRenderer(omit_null=self.settings.omit_null)
        self.report = ExtractionReport()

        self._parser: Optional[TableParser] = None
        self._result: Optional[ExtractionResult] = None

    def _open_source(self, name: str) -> LineSource:
        if name == STDIN_ARGUMENT:
            return LineSource.from_stream(self.stdin or sys.stdin, label=STDIN_LABEL)
        return LineSource.from_path(name)

    def _record_failure(self, result: ExtractionResult, error: Exception) -> None:
        result.success = False
        result.error_message = str(error)
        logger.error(f"Failed to process {result.source}: {error}")

    def is_selected(self, table: Table) -> bool:
        """Whether a table passes the position/id selector."""
        if self.settings.table_position is not None:
            return table.position == self.settings.table_position
        if self.settings.table_id is not None:
            return table.id == self.settings.table_id
        return True

    def iter_tables(self) -> Iterator[Table]:
        """
        Yield selected tables with their header parsed and no rows read.

        Rows are pulled with rows() or load_rows() before advancing the
        iterator; rows left unread are skipped. Unselected tables are
        skipped row by row without splitting cells. With a selector,
        iteration stops after the first match.

        Unreadable inputs are recorded in `self.report` and do not stop
        the remaining inputs from being processed.
        """
        self.report = ExtractionReport()
        start_time = time.time()
        position = 0

        try:
            for name in self.inputs:
                if self.settings.index_scope == TableIndexScope.PER_FILE:
                    position = 0

                result = ExtractionResult(source=STDIN_LABEL if name == STDIN_ARGUMENT else name)
                self.report.results.append(result)

                try:
                    source = self._open_source(name)
                except OSError as e:
                    self._record_failure(result, e)
                    continue

                found = False
                with source:
                    parser = TableParser(
                        source,
                        delimiter=self.settings.delimiter,
                        legacy_line_consumption=self.settings.legacy_line_consumption,
                        id_max_length=self.settings.table_id_max_length,
                    )
                    self._parser = parser
                    self._result = result

                    try:
                        while True:
                            table = parser.parse_table_header(f"table{position + 1}")
                            if table is None:
                                break
                            position += 1
                            table.position = position
                            result.tables_seen += 1

                            if not self.is_selected(table):
                                parser.skip_table(table)
                                continue

                            result.tables_emitted += 1
                            yield table

                            if not result.success:
                                break
                            if table.is_open:
                                parser.skip_table(table)
                            if self.settings.has_selector:
                                found = True
                                break
                    except OSError as e:
                        self._record_failure(result, e)

                logger.debug(
                    f"{result.source}: {result.tables_seen} tables seen, "
                    f"{result.tables_emitted} selected"
                )
                if found:
                    break
        finally:
            self._parser = None
            self._result = None
            self.report.execution_time_seconds = time.time() - start_time

    def rows(self, table: Table) -> Iterator[Row]:
        """
        Lazily pull the rows of the table most recently yielded by
        iter_tables().

        A read failure ends the table and is recorded against its input.
        """
        if self._parser is None or self._result is None:
            return
        parser, result = self._parser, self._result
        try:
            for row in parser.iter_rows(table):
                result.rows_emitted += 1
                yield row
        except OSError as e:
            table.state = ParseState.END
            self._record_failure(result, e)

    def load_rows(self, table: Table) -> Table:
        """Read all remaining rows of the current table into `table.rows`."""
        for row in self.rows(table):
            table.add_row(row)
        return table

    def iter_full_tables(self) -> Iterator[Table]:
        """Yield selected tables with all rows materialized."""
        for table in self.iter_tables():
            yield self.load_rows(table)

    def extract_documents(self) -> List[Dict[str, Any]]:
        """
        Parse every selected table eagerly and render full documents.

        Returns:
            One document per selected table, in input order
        """
        documents = []
        for table in self.iter_full_tables():
            documents.append(self.renderer.table_document(table))
            table.release()
        return documents

    def write_compact(self, stream: IO[str]) -> ExtractionReport:
        """
        Stream row objects of all selected tables as JSON Lines.

        Rows are written as they are parsed; no table is held in memory.
        """
        for table in self.iter_tables():
            types = self.renderer.projector.plan(table)
            for row in self.rows(table):
                stream.write(self.renderer.dumps_row(self.renderer.row_object(table, row, types)))
                stream.write("\n")
            table.release()
        return self.report

    def write_documents(self, stream: IO[str]) -> ExtractionReport:
        """
        Write full documents.

        Without a selector the output is a JSON array of documents. With a
        selector it is the single matching document, or nothing at all when
        no table matches.
        """
        documents = self.extract_documents()
        if self.settings.has_selector:
            if documents:
                stream.write(self.renderer.dumps_document(documents[0]))
                stream.write("\n")
            else:
                logger.info("No table matched the selection")
        else:
            stream.write(self.renderer.dumps_document(documents))
            stream.write("\n")
        return self.report

    def write(self, stream: IO[str]) -> ExtractionReport:
        """Write output in the mode chosen by the settings."""
        if self.settings.compact:
            return self.write_compact(stream)
        return self.write_documents(stream)
