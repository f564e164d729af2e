"""Tabular reader: CSV text -> header list + typed rows.

Comma-delimited, optional double-quote escaping. The first line is the
header. Data lines whose field count differs from the header's are
dropped silently; the caller sees only the lower row count.

The parsed rows are transient and must not outlive the analysis call.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import anyio
import structlog

from src.models.dqi import RawRow
from src.quality.errors import DatasetReadError
from src.quality.values import coerce_value, strip_field

logger = structlog.get_logger(__name__)


@dataclass
class ParsedTable:
    """Header row plus typed data rows of one file."""

    headers: list[str]
    rows: list[RawRow] = field(default_factory=list)
    dropped_rows: int = 0


def split_line(line: str) -> list[str]:
    """Split one CSV line on commas outside double quotes.

    Quote characters toggle the in-quotes state and are not kept.
    """
    fields: list[str] = []
    current: list[str] = []
    in_quotes = False

    for char in line:
        if char == '"':
            in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            fields.append(strip_field("".join(current)))
            current = []
        else:
            current.append(char)
    fields.append(strip_field("".join(current)))

    return fields


def parse_table(text: str) -> ParsedTable:
    """Parse CSV text into headers and typed rows."""
    lines = text.strip().split("\n")
    headers = split_line(lines[0])
    table = ParsedTable(headers=headers)

    for line in lines[1:]:
        values = split_line(line)
        if len(values) != len(headers):
            table.dropped_rows += 1
            continue
        table.rows.append(
            {header: coerce_value(value) for header, value in zip(headers, values)}
        )

    if table.dropped_rows:
        logger.debug(
            "dqi.rows.dropped",
            dropped=table.dropped_rows,
            expected_fields=len(headers),
        )
    return table


def decode_content(content: bytes) -> str:
    """Decode raw file bytes as UTF-8 text (a leading BOM is dropped)."""
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        msg = f"Failed to read file: {exc}"
        raise DatasetReadError(msg) from exc


async def read_bytes(path: str | Path) -> bytes:
    """Read a whole file without blocking the event loop."""
    try:
        return await anyio.Path(path).read_bytes()
    except OSError as exc:
        msg = f"Failed to read file: {exc}"
        raise DatasetReadError(msg) from exc
