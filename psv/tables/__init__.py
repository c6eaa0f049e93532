"""
Table Extraction

Parses pipe-delimited tables out of text and renders them as JSON.
"""

from .table_extractor import TableExtractor
from .data_models import (
    AnnotationTag,
    BasicType,
    BoundedString,
    Column,
    ExtractionReport,
    ExtractionResult,
    ExtractionSettings,
    ParseState,
    Table,
    TableIndexScope,
)

__all__ = [
    "TableExtractor",
    "AnnotationTag",
    "BasicType",
    "BoundedString",
    "Column",
    "ExtractionReport",
    "ExtractionResult",
    "ExtractionSettings",
    "ParseState",
    "Table",
    "TableIndexScope",
]
