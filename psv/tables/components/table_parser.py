"""
TableParser Component

Recognizes table blocks in line-oriented text and turns them into Table
objects. Recognition is a small state machine:

    SCANNING -> POTENTIAL_HEADER -> DATA_ROW -> END
    POTENTIAL_HEADER -> SCANNING (rejected header)

`transition()` is a pure function describing what a single line does in a
given state; `TableParser` feeds it lines from a LineSource and applies the
resulting effects. A header line only becomes a table when the next
delimiter-marked line is a separator row with one `---` cell per header
column; other lines in between are skipped.
"""

import logging
from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional, Tuple

from ..data_models import (
    BoundedString,
    Column,
    ParseState,
    Row,
    Table,
    TABLE_ID_MAX_LENGTH,
)
from .attributes import extract_annotations, find_inline_id, parse_attribute_line, synthesize_key
from .line_source import LineSource
from .tokenizer import (
    DEFAULT_DELIMITER,
    ESCAPE_CHAR,
    iter_tokens,
    strip_outer_delimiters,
    trim_whitespace,
)

logger = logging.getLogger(__name__)

SEPARATOR_MARKER = "---"
ATTRIBUTE_OPEN = "{"


class Effect(Enum):
    """What the parser should do with the line just classified."""
    CONTINUE_SCANNING = "continue_scanning"  # not table text; drops a pending id
    IGNORE = "ignore"                        # line with no effect in this state
    CAPTURE_ID = "capture_id"
    PROPOSE_HEADER = "propose_header"
    COMMIT_HEADER = "commit_header"
    REJECT = "reject"
    ACCEPT_ROW = "accept_row"
    END_TABLE = "end_table"


@dataclass(frozen=True)
class Transition:
    """
    Result of feeding one line to the state machine.

    Attributes:
        state: State after the line
        effect: Effect to apply
        table_id: Captured id (CAPTURE_ID)
        columns: Proposed header columns (PROPOSE_HEADER)
        cells: Row cells padded to the column count (ACCEPT_ROW)
        reuse_line: The line does not belong to the current block and may
            be re-evaluated from SCANNING
    """
    state: ParseState
    effect: Effect
    table_id: Optional[BoundedString] = None
    columns: Optional[Tuple[Column, ...]] = None
    cells: Optional[Tuple[Optional[str], ...]] = None
    reuse_line: bool = False


def build_columns(
    line: str,
    delimiter: str = DEFAULT_DELIMITER,
    key_max_length: int = TABLE_ID_MAX_LENGTH
) -> List[Column]:
    """
    Tokenize a header line into column metadata.

    Each cell gets a key from its inline `{#id}` if present, otherwise a
    synthesized one, plus any `[tag]` annotations.
    """
    columns = []
    for token in iter_tokens(strip_outer_delimiters(line, delimiter), delimiter):
        header = trim_whitespace(token)
        explicit = find_inline_id(header, key_max_length)
        if explicit:
            key = explicit.value
        else:
            key = synthesize_key(header, key_max_length)
        columns.append(Column(
            key=key,
            header=header,
            annotations=extract_annotations(header),
            explicit_key=bool(explicit),
        ))
    return columns


def count_separator_cells(line: str, delimiter: str = DEFAULT_DELIMITER) -> int:
    """Count the cells of a line that contain '---'."""
    content = strip_outer_delimiters(line, delimiter)
    return sum(1 for token in iter_tokens(content, delimiter) if SEPARATOR_MARKER in token)


def parse_row_cells(
    line: str,
    num_columns: int,
    delimiter: str = DEFAULT_DELIMITER
) -> Tuple[Optional[str], ...]:
    """
    Split a data row into exactly `num_columns` cells.

    Tokens beyond the column count are ignored; missing trailing cells are
    None.
    """
    content = strip_outer_delimiters(line, delimiter)
    cells: List[Optional[str]] = [
        trim_whitespace(token) for token in iter_tokens(content, delimiter, num_columns)
    ]
    cells.extend([None] * (num_columns - len(cells)))
    return tuple(cells)


def transition(
    state: ParseState,
    line: str,
    num_columns: int = 0,
    delimiter: str = DEFAULT_DELIMITER,
    id_max_length: int = TABLE_ID_MAX_LENGTH,
    parse_cells: bool = True
) -> Transition:
    """
    Classify one line in the given state.

    Args:
        state: Current parse state
        line: Raw input line
        num_columns: Header column count (POTENTIAL_HEADER and DATA_ROW)
        delimiter: Delimiter character marking table lines
        id_max_length: Bound on table ids and column keys
        parse_cells: When False, data rows are recognized without splitting

    Returns:
        The resulting Transition
    """
    is_table_line = line.startswith(delimiter)

    if state == ParseState.SCANNING:
        if line.startswith(ATTRIBUTE_OPEN):
            table_id = parse_attribute_line(line, id_max_length)
            if table_id is None:
                return Transition(ParseState.SCANNING, Effect.IGNORE)
            return Transition(ParseState.SCANNING, Effect.CAPTURE_ID, table_id=table_id)
        if is_table_line:
            columns = build_columns(line, delimiter, id_max_length)
            if not columns:
                return Transition(ParseState.SCANNING, Effect.REJECT)
            return Transition(
                ParseState.POTENTIAL_HEADER, Effect.PROPOSE_HEADER, columns=tuple(columns)
            )
        return Transition(ParseState.SCANNING, Effect.CONTINUE_SCANNING)

    if state == ParseState.POTENTIAL_HEADER:
        if not is_table_line:
            return Transition(ParseState.POTENTIAL_HEADER, Effect.IGNORE)
        if count_separator_cells(line, delimiter) == num_columns:
            return Transition(ParseState.DATA_ROW, Effect.COMMIT_HEADER)
        return Transition(ParseState.SCANNING, Effect.REJECT, reuse_line=True)

    if state == ParseState.DATA_ROW and is_table_line:
        cells = parse_row_cells(line, num_columns, delimiter) if parse_cells else None
        return Transition(ParseState.DATA_ROW, Effect.ACCEPT_ROW, cells=cells)

    return Transition(ParseState.END, Effect.END_TABLE, reuse_line=True)


class TableParser:
    """
    Pulls lines from a LineSource and produces tables.

    Two ways to consume a table:
    - parse_table(): header plus all rows, fully materialized
    - parse_table_header() followed by parse_table_row() / skip_table_row()
      calls, one row at a time
    """

    def __init__(
        self,
        source: LineSource,
        delimiter: str = DEFAULT_DELIMITER,
        legacy_line_consumption: bool = False,
        id_max_length: int = TABLE_ID_MAX_LENGTH
    ):
        """
        Initialize parser over a line source.

        Args:
            source: Where lines come from
            delimiter: Single character marking table lines
            legacy_line_consumption: Discard the line that ends a table or
                rejects a header instead of re-scanning it
            id_max_length: Bound on table ids and column keys

        Raises:
            ValueError: If the delimiter is not a single usable character
        """
        if len(delimiter) != 1 or delimiter in (ESCAPE_CHAR, ATTRIBUTE_OPEN) or delimiter.isspace():
            raise ValueError(f"Invalid delimiter: {delimiter!r}")
        self.source = source
        self.delimiter = delimiter
        self.legacy_line_consumption = legacy_line_consumption
        self.id_max_length = id_max_length

    def _release_line(self, step: Transition, line: str) -> None:
        if step.reuse_line and not self.legacy_line_consumption:
            self.source.push_back(line)

    def parse_table_header(self, default_table_id: str) -> Optional[Table]:
        """
        Scan forward to the next table and return it with no rows.

        The returned table is in DATA_ROW state. Rejected candidates are
        dropped silently and scanning continues.

        Args:
            default_table_id: Id used when no `{#id}` line precedes the table

        Returns:
            The table, or None if input ends before another table is found
        """
        state = ParseState.SCANNING
        pending_id: Optional[BoundedString] = None
        columns: List[Column] = []

        while True:
            line = self.source.read_line()
            if line is None:
                return None

            step = transition(state, line, len(columns), self.delimiter, self.id_max_length)
            state = step.state

            if step.effect == Effect.CAPTURE_ID:
                pending_id = step.table_id
            elif step.effect == Effect.CONTINUE_SCANNING:
                pending_id = None
            elif step.effect == Effect.PROPOSE_HEADER:
                columns = list(step.columns)
            elif step.effect == Effect.REJECT:
                logger.debug(
                    f"{self.source.label}:{self.source.line_number}: "
                    f"rejected table candidate ({len(columns)} header columns)"
                )
                pending_id = None
                columns = []
                self._release_line(step, line)
            elif step.effect == Effect.COMMIT_HEADER:
                identifier = pending_id or BoundedString.create(default_table_id, self.id_max_length)
                table = Table(
                    identifier=identifier,
                    columns=columns,
                    state=ParseState.DATA_ROW,
                    source=self.source.label,
                )
                self._warn_duplicate_keys(table)
                logger.debug(
                    f"{self.source.label}:{self.source.line_number}: "
                    f"table '{table.id}' with {table.num_columns} columns"
                )
                return table

    def parse_table_row(self, table: Table) -> Optional[Row]:
        """
        Read the next data row of an open table.

        The row is returned, not appended. When a non-table line or the end
        of input is reached the table moves to END and None is returned.

        Args:
            table: Table returned by parse_table_header()

        Returns:
            List of `table.num_columns` cells (None for missing cells), or
            None when the table has ended
        """
        if table.state != ParseState.DATA_ROW:
            return None

        line = self.source.read_line()
        if line is None:
            table.state = ParseState.END
            return None

        step = transition(table.state, line, table.num_columns, self.delimiter, self.id_max_length)
        if step.effect == Effect.ACCEPT_ROW:
            return list(step.cells)

        table.state = ParseState.END
        self._release_line(step, line)
        return None

    def skip_table_row(self, table: Table) -> bool:
        """
        Consume the next data row without splitting it into cells.

        Returns:
            True if a row was skipped, False if the table has ended
        """
        if table.state != ParseState.DATA_ROW:
            return False

        line = self.source.read_line()
        if line is None:
            table.state = ParseState.END
            return False

        step = transition(
            table.state, line, table.num_columns, self.delimiter, self.id_max_length,
            parse_cells=False,
        )
        if step.effect == Effect.ACCEPT_ROW:
            return True

        table.state = ParseState.END
        self._release_line(step, line)
        return False

    def skip_table(self, table: Table) -> int:
        """Skip all remaining rows of a table; returns how many were skipped."""
        skipped = 0
        while self.skip_table_row(table):
            skipped += 1
        return skipped

    def iter_rows(self, table: Table) -> Iterator[Row]:
        """Yield remaining rows lazily without storing them on the table."""
        while True:
            row = self.parse_table_row(table)
            if row is None:
                return
            yield row

    def parse_table(self, default_table_id: str) -> Optional[Table]:
        """
        Parse the next table including all of its rows.

        Args:
            default_table_id: Id used when no `{#id}` line precedes the table

        Returns:
            The table in END state, or None if no further table exists
        """
        table = self.parse_table_header(default_table_id)
        if table is None:
            return None
        for row in self.iter_rows(table):
            table.add_row(row)
        return table

    def _warn_duplicate_keys(self, table: Table) -> None:
        duplicates = [key for key, count in Counter(table.keys).items() if count > 1]
        if duplicates:
            logger.warning(
                f"Table '{table.id}' has duplicate column keys {duplicates}; "
                f"later columns overwrite earlier ones in row objects"
            )
