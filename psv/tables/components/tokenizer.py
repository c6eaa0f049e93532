"""
Escaped-delimiter tokenizer.

Splits the content of one delimiter-marked line into cell tokens. A
backslash escapes the delimiter, another backslash, or any ASCII
punctuation character; the backslash is dropped and the next character is
kept literally. Tokenization is resumable through an explicit cursor so a
caller can stop after a fixed number of cells.
"""

import string
from typing import Iterator, Optional, Tuple

DEFAULT_DELIMITER = "|"
ESCAPE_CHAR = "\\"
ASCII_WHITESPACE = " \t\n\r\x0b\x0c"

_ESCAPABLE = frozenset(string.punctuation)


def trim_whitespace(token: str) -> str:
    """Strip leading and trailing ASCII whitespace from a token."""
    return token.strip(ASCII_WHITESPACE)


def strip_line_terminator(line: str) -> str:
    """Remove a trailing LF or CRLF."""
    if line.endswith("\n"):
        line = line[:-1]
    if line.endswith("\r"):
        line = line[:-1]
    return line


def _is_escapable(char: str, delimiter: str) -> bool:
    return char == ESCAPE_CHAR or char == delimiter or char in _ESCAPABLE


def strip_outer_delimiters(line: str, delimiter: str = DEFAULT_DELIMITER) -> str:
    """
    Reduce a delimiter-marked line to its cell content.

    Drops the line terminator and the leading delimiter, then removes the
    closing delimiter: the last unescaped delimiter, provided only
    whitespace follows it. When the line has no closing delimiter the
    remainder is kept as content.

    Example:
        "| a | b\\|c |\\n" -> " a | b\\|c "
        "| a | b" -> " a | b"

    Args:
        line: Raw line starting with the delimiter
        delimiter: Delimiter character

    Returns:
        The content between the outer delimiters
    """
    line = strip_line_terminator(line)
    if line.startswith(delimiter):
        line = line[1:]

    last_delimiter = -1
    i = 0
    while i < len(line):
        char = line[i]
        if char == ESCAPE_CHAR and i + 1 < len(line) and _is_escapable(line[i + 1], delimiter):
            i += 2
            continue
        if char == delimiter:
            last_delimiter = i
        i += 1

    if last_delimiter >= 0 and not trim_whitespace(line[last_delimiter + 1:]):
        return line[:last_delimiter]
    return line


def next_token(
    content: str,
    delimiter: str = DEFAULT_DELIMITER,
    cursor: int = 0
) -> Optional[Tuple[str, int]]:
    """
    Read the token starting at `cursor`.

    Escapes are resolved in the returned token. The returned cursor points
    just past the delimiter that ended the token (or at the end of the
    content), so passing it back resumes tokenization exactly there.

    Args:
        content: Line content with outer delimiters already stripped
        delimiter: Delimiter character
        cursor: Index to resume from (0 for the first token)

    Returns:
        Tuple of (token, next_cursor), or None when no tokens remain
    """
    if cursor >= len(content):
        return None

    chars = []
    i = cursor
    while i < len(content):
        char = content[i]
        if char == ESCAPE_CHAR and i + 1 < len(content) and _is_escapable(content[i + 1], delimiter):
            chars.append(content[i + 1])
            i += 2
            continue
        if char == delimiter:
            return "".join(chars), i + 1
        chars.append(char)
        i += 1

    return "".join(chars), i


def iter_tokens(
    content: str,
    delimiter: str = DEFAULT_DELIMITER,
    limit: Optional[int] = None
) -> Iterator[str]:
    """
    Yield tokens from line content, at most `limit` of them.

    Args:
        content: Line content with outer delimiters already stripped
        delimiter: Delimiter character
        limit: Stop after this many tokens (None for all)

    Yields:
        Un-escaped, untrimmed tokens
    """
    cursor = 0
    count = 0
    while limit is None or count < limit:
        result = next_token(content, delimiter, cursor)
        if result is None:
            return
        token, cursor = result
        count += 1
        yield token


def split_cells(
    line: str,
    delimiter: str = DEFAULT_DELIMITER,
    limit: Optional[int] = None
) -> list:
    """Strip the outer delimiters of a line and return its trimmed cells."""
    content = strip_outer_delimiters(line, delimiter)
    return [trim_whitespace(token) for token in iter_tokens(content, delimiter, limit)]
