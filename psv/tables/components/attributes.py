"""
Header attribute extraction.

Handles the three pieces of metadata carried by table headers:
- `{#id}` attribute blocks, either on their own line before a table or
  inline inside a header cell
- Synthesized column keys for headers without an explicit id
- `[tag]` data annotations that hint at a column's type
"""

import logging
import re
from typing import Dict, List, Optional

from ..data_models import AnnotationTag, BasicType, BoundedString, TABLE_ID_MAX_LENGTH

logger = logging.getLogger(__name__)

KEY_STOP_CHARS = "([{"

TAG_TYPES: Dict[str, BasicType] = {
    "text": BasicType.TEXT,
    "string": BasicType.TEXT,
    "integer": BasicType.INTEGER,
    "int": BasicType.INTEGER,
    "float": BasicType.FLOAT,
    "number": BasicType.FLOAT,
    "bool": BasicType.BOOL,
    "boolean": BasicType.BOOL,
    "hex": BasicType.HEX,
    "base64": BasicType.BASE64,
    "data-uri": BasicType.DATA_URI,
    "datauri": BasicType.DATA_URI,
    "datetime": BasicType.DATETIME,
    "uuid": BasicType.UUID,
}


def parse_attribute_id(
    block: str,
    max_length: int = TABLE_ID_MAX_LENGTH
) -> Optional[BoundedString]:
    """
    Extract the `#id` from the inside of an attribute block.

    The id must come before any other attribute: leading spaces are
    skipped, and if the next character is not `#` there is no id. The id
    runs until a space, a closing brace or the end of the block.

    Example:
        "#people .wide" -> "people"
        ".wide #people" -> None

    Args:
        block: Text after the opening `{` (a closing `}` may be present)
        max_length: Bound on the id length; longer ids are truncated

    Returns:
        The id, or None if the block carries no leading `#id`
    """
    text = block.lstrip(" ")
    if not text.startswith("#"):
        return None

    end = 1
    while end < len(text) and text[end] not in " }":
        end += 1
    return BoundedString.create(text[1:end], max_length)


def parse_attribute_line(
    line: str,
    max_length: int = TABLE_ID_MAX_LENGTH
) -> Optional[BoundedString]:
    """
    Parse a standalone attribute line such as `{#people}`.

    The closing brace must be on the same line; otherwise the line carries
    no id. Multi-line attribute blocks are not supported.

    Args:
        line: Raw line starting with `{`
        max_length: Bound on the id length

    Returns:
        The table id, or None when the line has no usable `#id`
    """
    line = line.rstrip("\r\n")
    if not line.startswith("{"):
        return None
    closing = line.rfind("}")
    if closing <= 0:
        logger.debug(f"Ignoring attribute line without closing brace: {line!r}")
        return None
    return parse_attribute_id(line[1:closing].strip(), max_length)


def find_inline_id(
    header: str,
    max_length: int = TABLE_ID_MAX_LENGTH
) -> Optional[BoundedString]:
    """
    Find an inline `{#id}` override inside a header cell.

    Example:
        "Full Name {#name}" -> "name"

    Args:
        header: Header cell text
        max_length: Bound on the id length

    Returns:
        The explicit id, or None if no `{#...}` block is present
    """
    start = header.find("{")
    while start != -1:
        closing = header.find("}", start + 1)
        if closing == -1:
            return None
        found = parse_attribute_id(header[start + 1:closing], max_length)
        if found:
            return found
        start = header.find("{", closing + 1)
    return None


def synthesize_key(header: str, max_length: Optional[int] = None) -> str:
    """
    Generate a column key from header text.

    Rules:
    - Scanning stops at the first '(', '[' or '{'
    - ASCII letters are lower-cased
    - Any character outside [a-z0-9_] becomes '_'
    - Runs of '_' collapse to one; the key never starts or ends with '_'
    - The key is truncated to `max_length` characters

    Re-running on its own output returns the same key.

    Example:
        "User Name (raw)" -> "user_name"

    Args:
        header: Header cell text
        max_length: Maximum key length (None for unbounded)

    Returns:
        The synthesized key (may be empty)
    """
    chars: List[str] = []
    for char in header:
        if max_length is not None and len(chars) >= max_length:
            break
        if char in KEY_STOP_CHARS:
            break

        if char.isascii():
            char = char.lower()
        if not (char.isascii() and (char.isalnum() or char == "_")):
            char = "_"

        if char == "_" and (not chars or chars[-1] == "_"):
            continue
        chars.append(char)

    if chars and chars[-1] == "_":
        chars.pop()
    return "".join(chars)


def resolve_basic_type(tag: str) -> BasicType:
    """Map tag text to a basic type (case-insensitive)."""
    return TAG_TYPES.get(tag.strip().lower(), BasicType.UNKNOWN)


def extract_annotations(header: str) -> List[AnnotationTag]:
    """
    Collect `[tag]` annotations from header text, left to right.

    A bracketed span immediately followed by '(' is a Markdown link and is
    skipped, as are empty spans.

    Example:
        "Payload [hex][cbor]" -> [hex, cbor]
        "Link [text](http://x)" -> []
        "a [b [integer]" -> [integer]

    Args:
        header: Header cell text

    Returns:
        Annotation tags in the order they appear
    """
    tags: List[AnnotationTag] = []
    pos = 0
    while True:
        start = header.find("[", pos)
        if start == -1:
            break
        end = header.find("]", start + 1)
        if end == -1:
            break
        pos = end + 1
        # an unclosed "[" earlier in the text does not open this tag
        start = header.rfind("[", start, end)

        raw = header[start + 1:end]
        if end + 1 < len(header) and header[end + 1] == "(":
            continue
        if not raw:
            continue
        tags.append(AnnotationTag(raw=raw, basic_type=resolve_basic_type(raw)))
    return tags
