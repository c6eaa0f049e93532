"""
ValueProjector Component

Maps raw cell text to typed output values using the column's annotation
tags. The mapping is total: anything that cannot be coerced falls back to
the original string.
"""

import math
import re
from typing import List, Optional, Union

from ..data_models import AnnotationTag, BasicType, Column, Table
from .tokenizer import trim_whitespace

Value = Union[str, int, float, bool, None]

PROJECTED_TYPES = (BasicType.INTEGER, BasicType.FLOAT, BasicType.BOOL, BasicType.TEXT)
TRUE_WORDS = frozenset({"true", "yes", "active", "y"})

INTEGER_PATTERN = re.compile(r"[+-]?\d+")
FLOAT_PATTERN = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


class ValueProjector:
    """Converts cells to str/int/float/bool according to column type hints."""

    def deciding_tag(self, column: Column) -> Optional[AnnotationTag]:
        """First tag, left to right, that resolves to integer, float, bool or text."""
        for tag in column.annotations:
            if tag.basic_type in PROJECTED_TYPES:
                return tag
        return None

    def effective_type(self, column: Column) -> BasicType:
        tag = self.deciding_tag(column)
        return tag.basic_type if tag else BasicType.TEXT

    def plan(self, table: Table) -> List[BasicType]:
        """
        Resolve the output type of every column.

        The tag that decides a column's type is marked consumed.

        Returns:
            One BasicType per column, in column order
        """
        types = []
        for column in table.columns:
            tag = self.deciding_tag(column)
            if tag is not None:
                tag.consumed = True
            types.append(self.effective_type(column))
        return types

    def project(self, cell: Optional[str], basic_type: BasicType) -> Value:
        """
        Convert one cell.

        Args:
            cell: Cell text, or None for an absent cell
            basic_type: Column's effective type

        Returns:
            None for absent cells (and blank numeric cells), a number for
            integer/float cells that parse, a bool for bool cells, otherwise
            the cell text unchanged
        """
        if cell is None:
            return None

        text = trim_whitespace(cell)
        if basic_type == BasicType.INTEGER:
            if not text:
                return None
            if INTEGER_PATTERN.fullmatch(text):
                try:
                    return int(text)
                except ValueError:
                    # digit count over sys.get_int_max_str_digits()
                    return cell
            return cell
        if basic_type == BasicType.FLOAT:
            if not text:
                return None
            if FLOAT_PATTERN.fullmatch(text):
                value = float(text)
                if math.isfinite(value):
                    return value
            return cell
        if basic_type == BasicType.BOOL:
            return text.lower() in TRUE_WORDS
        return cell

    def project_row(self, row: List[Optional[str]], types: List[BasicType]) -> List[Value]:
        """Convert every cell of a row using a plan from plan()."""
        return [self.project(cell, basic_type) for cell, basic_type in zip(row, types)]
