"""Metadata codec: split stored text into frontmatter + body and serialize it back"""

import re
from typing import Optional

import structlog

from mdpost.core.models import MetadataMap, MetadataValue, ParsedDocument


log = structlog.get_logger(__name__)

DELIMITER = "---"
_ITEM_QUOTES_RE = re.compile(r'^["\']|["\']$')
_LINE_BREAK_RE = re.compile(r'\r\n|\r|\n')


def _is_delimiter(line: str) -> bool:
    return line.rstrip() == DELIMITER


def _split_header(text: str) -> Optional[tuple[str, str]]:
    """Return (header_block, body) or None when there is no terminated header block.

    The body starts right after the closing delimiter's line break.
    """
    first_end = text.find("\n")
    if first_end == -1 or not _is_delimiter(text[:first_end]):
        return None

    pos = first_end + 1
    while pos <= len(text):
        end = text.find("\n", pos)
        line = text[pos:] if end == -1 else text[pos:end]
        if _is_delimiter(line):
            body = "" if end == -1 else text[end + 1:]
            return text[first_end + 1:pos], body
        if end == -1:
            break
        pos = end + 1
    return None


def parse_value(raw: str) -> MetadataValue:
    """Parse one header value: unquote, then list, then boolean, else string."""
    value = raw.strip()
    if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
        value = value[1:-1]

    if value.startswith("[") and value.endswith("]"):
        items = (_ITEM_QUOTES_RE.sub("", item.strip()) for item in value[1:-1].split(","))
        return [item for item in items if item]
    if value in ("true", "false"):
        return value == "true"
    return value


def parse_header(header: str) -> MetadataMap:
    """Parse header block lines into an ordered mapping; malformed lines are dropped."""
    metadata: MetadataMap = {}
    for line in header.splitlines():
        if not line.strip():
            continue
        key, sep, raw = line.partition(":")
        key = key.strip()
        if not sep or not key:
            log.debug("header_line_dropped", line=line)
            continue
        metadata[key] = parse_value(raw)
    return metadata


def parse_document(stored_text: str) -> ParsedDocument:
    """Split stored text into (metadata, body). Never raises on malformed input."""
    if not stored_text.startswith(DELIMITER):
        return ParsedDocument(metadata={}, body=stored_text)

    split = _split_header(stored_text)
    if split is None:
        log.debug("header_unterminated", length=len(stored_text))
        return ParsedDocument(metadata={}, body=stored_text)

    header, body = split
    return ParsedDocument(metadata=parse_header(header), body=body)


def _quote(value: str) -> str:
    # A line break inside a value would end the header line early.
    return f'"{_LINE_BREAK_RE.sub(" ", value)}"'


def format_value(value: MetadataValue) -> str:
    """Render a metadata value as a single header token."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return _quote(value)
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(_quote(str(item)) for item in value) + "]"
    raise TypeError(f"Unsupported metadata value type: {type(value).__name__}")


def serialize_document(metadata: MetadataMap, body: str) -> str:
    """Emit the header block in mapping order followed by the body verbatim."""
    lines = [DELIMITER]
    lines.extend(f"{key}: {format_value(value)}" for key, value in metadata.items())
    lines.append(DELIMITER)
    lines.append(body)
    return "\n".join(lines)


def normalize_value(value: MetadataValue) -> MetadataValue:
    """The value as it reads back from a stored header; raises TypeError for unsupported types."""
    return parse_value(format_value(value))
