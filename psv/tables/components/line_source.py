"""
LineSource Component

Supplies input lines one at a time to the table parser. End of input is
signalled with None, which is distinct from an empty line. Lines can be
pushed back so the parser can re-evaluate a line that ended a table.
"""

import io
import logging
from pathlib import Path
from typing import IO, Iterable, Iterator, List, Optional

logger = logging.getLogger(__name__)

STDIN_LABEL = "<stdin>"


class LineSource:
    """Reads lines lazily from a file, stream or in-memory text."""

    def __init__(
        self,
        lines: Iterable[str],
        label: str = "<input>",
        stream: Optional[IO[str]] = None
    ):
        """
        Initialize source over any iterable of lines.

        Args:
            lines: Iterable yielding lines (newline characters preserved)
            label: Name used in logs and error messages
            stream: Underlying stream to close when the source is closed
        """
        self.label = label
        self._iterator: Iterator[str] = iter(lines)
        self._stream = stream
        self._pushed_back: List[str] = []
        self._line_number = 0
        self._exhausted = False

    @classmethod
    def from_path(cls, file_path: str | Path) -> "LineSource":
        """
        Open a file for line-by-line reading.

        Args:
            file_path: Path to the input file

        Raises:
            FileNotFoundError: If the file does not exist
            IOError: If the file cannot be opened
        """
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")
        try:
            stream = open(path, "r", encoding="utf-8", newline="")
        except IOError as e:
            raise IOError(f"Failed to read file {path}: {e}")
        return cls(stream, label=str(path), stream=stream)

    @classmethod
    def from_stream(cls, stream: IO[str], label: str = STDIN_LABEL) -> "LineSource":
        """Wrap an already open text stream; the caller keeps ownership of it."""
        return cls(stream, label=label)

    @classmethod
    def from_text(cls, text: str, label: str = "<text>") -> "LineSource":
        """Create a source over an in-memory string."""
        return cls(io.StringIO(text, newline=""), label=label)

    @property
    def line_number(self) -> int:
        """1-indexed number of the line most recently returned."""
        return self._line_number

    def read_line(self) -> Optional[str]:
        """
        Return the next line, or None at end of input.

        Raises:
            IOError: If the underlying input cannot be read or decoded
        """
        if self._pushed_back:
            self._line_number += 1
            return self._pushed_back.pop()
        if self._exhausted:
            return None

        try:
            line = next(self._iterator)
        except StopIteration:
            self._exhausted = True
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise IOError(f"Failed to read file {self.label}: {e}")

        self._line_number += 1
        return line

    def push_back(self, line: str) -> None:
        """Return a line so the next read_line() yields it again."""
        self._pushed_back.append(line)
        self._line_number -= 1

    def close(self) -> None:
        """Close the underlying stream if this source opened it."""
        if self._stream is not None:
            self._stream.close()
            self._stream = None

    def __enter__(self) -> "LineSource":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
