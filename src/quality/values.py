"""Value typer: raw CSV field text -> normalized cell value.

Typing is per cell. Column-level semantics (dates, currency, identifiers)
are decided later by the schema extractor from the aggregate of a column.
"""

from __future__ import annotations

import math
import re

from src.models.dqi import CellValue

NULL_TOKENS = frozenset({"", "null", "na", "-"})

_NUMERIC_RE = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")
_LEADING_ZERO_RE = re.compile(r"^0\d+")


def strip_field(field: str) -> str:
    """Trim whitespace and one pair of wrapping double quotes."""
    text = field.strip()
    if text.startswith('"'):
        text = text[1:]
    if text.endswith('"'):
        text = text[:-1]
    return text


def is_number(value: object) -> bool:
    """True for int/float cell values. Booleans are not numbers."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def coerce_value(field: str) -> CellValue:
    """Convert a raw field to None, a number, a bool, or a string.

    Currency symbols and thousands separators are ignored for the numeric
    attempt. Zero-padded integers ("007") stay strings so that codes are
    not misread as numbers.
    """
    text = strip_field(field)

    if text.lower() in NULL_TOKENS:
        return None

    cleaned = text.replace("$", "").replace(",", "")
    if _NUMERIC_RE.match(cleaned) and not _LEADING_ZERO_RE.match(text):
        number = float(cleaned)
        if math.isfinite(number):
            return int(number) if number.is_integer() else number

    lowered = text.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False

    return text


def to_display(value: CellValue) -> str:
    """Canonical string form of a cell value.

    Used for distinct counting, sample values, and row keys, so that
    ``1`` and ``1.0`` or ``True`` and ``"true"`` compare the same way
    everywhere.
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
