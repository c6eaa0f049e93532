"""
JsonRenderer Component

Builds the JSON output for parsed tables:
- Full documents with id, headers, keys, annotations and row objects
- Compact output: row objects only, one JSON line per row

Absent cells render as null, or are left out entirely in omit-null mode.
"""

import json
from typing import Any, Dict, Iterable, List, Optional

from ..data_models import BasicType, Row, Table
from .value_projector import ValueProjector


class JsonRenderer:
    """Renders tables and rows as JSON-compatible objects and text."""

    def __init__(
        self,
        omit_null: bool = False,
        projector: Optional[ValueProjector] = None,
        indent: int = 2
    ):
        """
        Initialize renderer.

        Args:
            omit_null: Leave absent cells out of row objects instead of
                emitting null
            projector: Value projector used for typed output
            indent: Indentation for full documents
        """
        self.omit_null = omit_null
        self.projector = projector or ValueProjector()
        self.indent = indent

    def row_object(
        self,
        table: Table,
        row: Row,
        types: Optional[List[BasicType]] = None
    ) -> Dict[str, Any]:
        """
        Build the key/value object for one row.

        Keys are not deduplicated; a later column with the same key
        overwrites an earlier one.

        Args:
            table: Table the row belongs to
            row: Row cells
            types: Column types from ValueProjector.plan() (computed if None)
        """
        if types is None:
            types = self.projector.plan(table)
        obj: Dict[str, Any] = {}
        for key, value in zip(table.keys, self.projector.project_row(row, types)):
            if value is None and self.omit_null:
                continue
            obj[key] = value
        return obj

    def table_document(
        self,
        table: Table,
        rows: Optional[Iterable[Row]] = None
    ) -> Dict[str, Any]:
        """
        Build the full document for a table.

        Args:
            table: Parsed table
            rows: Rows to render (defaults to the rows stored on the table)

        Returns:
            Dict with id, headers, keys, data_annotation and rows
        """
        types = self.projector.plan(table)
        source_rows = table.rows if rows is None else rows
        return {
            "id": table.id,
            "headers": table.headers,
            "keys": table.keys,
            "data_annotation": table.data_annotation,
            "rows": [self.row_object(table, row, types) for row in source_rows],
        }

    def dumps_document(self, document: Any) -> str:
        """Serialize a document (or list of documents) with indentation."""
        return json.dumps(document, indent=self.indent, ensure_ascii=False)

    def dumps_row(self, row_object: Dict[str, Any]) -> str:
        """Serialize one row object as a single JSON line."""
        return json.dumps(row_object, ensure_ascii=False, separators=(",", ":"))
