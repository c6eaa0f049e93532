"""
psv - Pipe-Separated Value table extraction

Finds Markdown-style pipe tables in line-oriented text and converts each one
into a structured JSON document with typed fields.
"""

__version__ = "1.0.0"
__author__ = "psv contributors"

# Main classes available for library use
from .tables.table_extractor import TableExtractor
from .tables.components.table_parser import TableParser
from .tables.components.line_source import LineSource
from .tables.components.value_projector import ValueProjector
from .tables.components.json_renderer import JsonRenderer
from .tables.data_models import ExtractionSettings, Table, Column, TableIndexScope

__all__ = [
    "TableExtractor",
    "TableParser",
    "LineSource",
    "ValueProjector",
    "JsonRenderer",
    "ExtractionSettings",
    "Table",
    "Column",
    "TableIndexScope",
]
