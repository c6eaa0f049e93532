"""
Components for the table extraction pipeline.

This package contains the building blocks that turn delimiter-marked text
into tables: line input, tokenization, header attribute handling, the
parser state machine, value projection, JSON rendering and output files.
"""

from .line_source import LineSource
from .table_parser import TableParser, Effect, Transition, transition
from .value_projector import ValueProjector
from .json_renderer import JsonRenderer
from .file_writer import FileWriter

__all__ = [
    "LineSource",
    "TableParser",
    "Effect",
    "Transition",
    "transition",
    "ValueProjector",
    "JsonRenderer",
    "FileWriter",
]
