"""
Data models for table extraction.

This module defines the core data structures used throughout the table
extraction pipeline: parsing state, column metadata, annotation tags and
the tables handed to callers.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

TABLE_ID_MAX_LENGTH = 255

# One slot per column; None marks an absent cell (not an empty string)
Row = List[Optional[str]]


class ParseState(Enum):
    """States of the table parser."""
    SCANNING = "scanning"
    POTENTIAL_HEADER = "potential_header"
    DATA_ROW = "data_row"
    END = "end"


class BasicType(Enum):
    """Coercion targets a header annotation tag can resolve to."""
    TEXT = "text"
    INTEGER = "integer"
    FLOAT = "float"
    BOOL = "bool"
    HEX = "hex"
    BASE64 = "base64"
    DATA_URI = "data-uri"
    DATETIME = "datetime"
    UUID = "uuid"
    UNKNOWN = "unknown"


class TableIndexScope(Enum):
    """
    How table positions are counted across multiple input files.

    GLOBAL numbers tables across the whole input stream; PER_FILE restarts
    the count at 1 for every file.
    """
    GLOBAL = "global"
    PER_FILE = "per-file"

    @classmethod
    def parse(cls, value: str) -> "TableIndexScope":
        """Parse a scope name such as 'global', 'per-file' or 'per_file'."""
        normalized = value.strip().lower().replace("_", "-")
        for scope in cls:
            if scope.value == normalized:
                return scope
        raise ValueError(
            f"Unknown table index scope '{value}' (expected 'global' or 'per-file')"
        )


@dataclass(frozen=True)
class BoundedString:
    """
    A string capped at a maximum length.

    Construction never fails: text beyond the bound is silently cut off and
    the `truncated` flag records that it happened.

    Attributes:
        value: The (possibly truncated) text
        max_length: The bound applied
        truncated: Whether the original text exceeded the bound
    """
    value: str
    max_length: int = TABLE_ID_MAX_LENGTH
    truncated: bool = False

    @classmethod
    def create(cls, text: str, max_length: int = TABLE_ID_MAX_LENGTH) -> "BoundedString":
        if max_length < 0:
            raise ValueError(f"max_length must be >= 0, got {max_length}")
        if len(text) > max_length:
            return cls(text[:max_length], max_length, True)
        return cls(text, max_length, False)

    def __str__(self) -> str:
        return self.value

    def __bool__(self) -> bool:
        return bool(self.value)


@dataclass
class AnnotationTag:
    """
    A bracketed `[tag]` hint found in a header cell.

    Attributes:
        raw: Tag text between the brackets
        basic_type: Resolved basic type (UNKNOWN when unrecognized)
        consumed: Set once a later stage has acted on this tag
    """
    raw: str
    basic_type: BasicType = BasicType.UNKNOWN
    consumed: bool = False


@dataclass
class Column:
    """
    Metadata for one table column.

    Attributes:
        key: Stable key (explicit `{#id}` override or synthesized)
        header: Original header text, whitespace-trimmed
        annotations: Tags parsed from the header, in left-to-right order
        explicit_key: Whether the key came from an inline `{#id}` override
    """
    key: str
    header: str
    annotations: List[AnnotationTag] = field(default_factory=list)
    explicit_key: bool = False

    @property
    def annotation_names(self) -> List[str]:
        """Raw tag texts in order."""
        return [tag.raw for tag in self.annotations]


@dataclass
class Table:
    """
    A parsed table block.

    The column list is fixed once the table reaches DATA_ROW; afterwards only
    rows are appended.

    Attributes:
        identifier: Table id (explicit `{#id}` or position-derived `table<N>`)
        columns: Column metadata in header order
        rows: Accepted data rows, each exactly `len(columns)` long
        state: Current parse state
        source: Label of the input the table came from
        position: 1-based position of the table in its index scope
    """
    identifier: BoundedString
    columns: List[Column] = field(default_factory=list)
    rows: List[Row] = field(default_factory=list)
    state: ParseState = ParseState.DATA_ROW
    source: str = ""
    position: int = 0

    @property
    def id(self) -> str:
        return self.identifier.value

    @property
    def num_columns(self) -> int:
        return len(self.columns)

    @property
    def num_rows(self) -> int:
        return len(self.rows)

    @property
    def headers(self) -> List[str]:
        return [column.header for column in self.columns]

    @property
    def keys(self) -> List[str]:
        return [column.key for column in self.columns]

    @property
    def data_annotation(self) -> List[List[str]]:
        return [column.annotation_names for column in self.columns]

    @property
    def is_open(self) -> bool:
        """Whether more rows may still be pulled from the parser."""
        return self.state == ParseState.DATA_ROW

    def add_row(self, row: Row) -> None:
        """
        Append a row after checking it matches the column count.

        Raises:
            ValueError: If the row length differs from the column count
        """
        if len(row) != self.num_columns:
            raise ValueError(
                f"Row has {len(row)} cells, table '{self.id}' has {self.num_columns} columns"
            )
        self.rows.append(row)

    def release(self) -> None:
        """Drop all rows and columns and mark the table finished."""
        self.rows.clear()
        self.columns.clear()
        self.state = ParseState.END


@dataclass
class ExtractionResult:
    """
    Outcome of processing one input.

    Attributes:
        source: Input label (file path or '<stdin>')
        tables_seen: Tables recognized in this input
        tables_emitted: Tables that passed selection and were rendered
        rows_emitted: Rows rendered from emitted tables
        success: Whether the input was read completely
        error_message: Error message if reading failed
    """
    source: str
    tables_seen: int = 0
    tables_emitted: int = 0
    rows_emitted: int = 0
    success: bool = True
    error_message: Optional[str] = None


@dataclass
class ExtractionReport:
    """
    Summary of an extraction run.

    Attributes:
        results: Per-input results, in processing order
        execution_time_seconds: Total execution time
    """
    results: List[ExtractionResult] = field(default_factory=list)
    execution_time_seconds: float = 0.0

    @property
    def files_processed(self) -> int:
        return len(self.results)

    @property
    def tables_seen(self) -> int:
        return sum(r.tables_seen for r in self.results)

    @property
    def tables_emitted(self) -> int:
        return sum(r.tables_emitted for r in self.results)

    @property
    def rows_emitted(self) -> int:
        return sum(r.rows_emitted for r in self.results)

    @property
    def failures(self) -> List[ExtractionResult]:
        return [r for r in self.results if not r.success]

    @property
    def failed(self) -> int:
        return len(self.failures)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "files_processed": self.files_processed,
            "tables_seen": self.tables_seen,
            "tables_emitted": self.tables_emitted,
            "rows_emitted": self.rows_emitted,
            "failed": self.failed,
            "execution_time_seconds": self.execution_time_seconds,
        }

    def __str__(self) -> str:
        """Human-readable summary."""
        return (
            f"Extraction Report:\n"
            f"  Files processed: {self.files_processed}\n"
            f"  Tables seen: {self.tables_seen}\n"
            f"  Tables emitted: {self.tables_emitted}\n"
            f"  Rows emitted: {self.rows_emitted:,}\n"
            f"  Failed inputs: {self.failed}\n"
            f"  Execution time: {self.execution_time_seconds:.2f}s"
        )


@dataclass
class ExtractionSettings:
    """
    Options controlling an extraction run.

    Attributes:
        delimiter: Character marking table lines
        index_scope: Whether table positions count per file or globally
        omit_null: Leave absent cells out of row objects
        compact: Emit row objects only (JSON Lines)
        legacy_line_consumption: Discard the line ending a table instead of
            re-scanning it
        table_id_max_length: Bound on table ids and column keys
        table_position: 1-based position selector (None for all tables)
        table_id: Id selector (None for all tables)
    """
    delimiter: str = "|"
    index_scope: TableIndexScope = TableIndexScope.GLOBAL
    omit_null: bool = False
    compact: bool = False
    legacy_line_consumption: bool = False
    table_id_max_length: int = TABLE_ID_MAX_LENGTH
    table_position: Optional[int] = None
    table_id: Optional[str] = None

    def __post_init__(self):
        """Validate selectors and delimiter."""
        if len(self.delimiter) != 1:
            raise ValueError(f"delimiter must be a single character, got {self.delimiter!r}")
        if self.delimiter in ("\\", "{") or self.delimiter.isspace():
            raise ValueError(f"delimiter cannot be {self.delimiter!r}")
        if self.table_position is not None and self.table_position < 1:
            raise ValueError(f"table_position must be >= 1, got {self.table_position}")
        if self.table_position is not None and self.table_id is not None:
            raise ValueError("Select a table by position or by id, not both")
        if self.table_id_max_length < 1:
            raise ValueError(
                f"table_id_max_length must be >= 1, got {self.table_id_max_length}"
            )

    @property
    def has_selector(self) -> bool:
        return self.table_position is not None or self.table_id is not None
