"""Schema extractor: typed column values -> ColumnSchema.

Infers a semantic type per column, computes null/unique ratios, detects
format patterns, derives numeric statistics, and produces at most three
redacted sample values. Also builds the dataset-level statistical summary
(cells, duplicate rows, anomalies).

Sample redaction is a best-effort heuristic (column-name tokens plus value
regexes); it can over- and under-redact.

Deterministic -- no LLM calls.
"""

from __future__ import annotations

import json
import math
import re
from collections.abc import Sequence
from datetime import UTC, datetime

import numpy as np

from src.models.dqi import (
    CellValue,
    ColumnSchema,
    InferredType,
    NumericStatistics,
    RawRow,
    StatisticalSummary,
)
from src.quality.config import DQIScoringConfig
from src.quality.rounding import round_half_up, round_int
from src.quality.values import is_number, to_display

# ---------------------------------------------------------------------------
# Regex signatures
# ---------------------------------------------------------------------------

_CURRENCY_RES = (
    re.compile(r"^\$?[\d,]+\.?\d*$"),
    re.compile(r"^[\d,]+\.?\d*\s*(USD|EUR|GBP|INR)$", re.IGNORECASE),
)
_DATE_RES = (
    re.compile(r"^\d{4}-\d{2}-\d{2}"),
    re.compile(r"^\d{2}/\d{2}/\d{4}"),
    re.compile(r"^\d{2}-\d{2}-\d{4}"),
)
_IDENTIFIER_RE = re.compile(r"^[A-Z0-9\-_]+$", re.IGNORECASE)

# Pattern tag -> signature. Tags are reported, never the matched values.
PATTERN_SIGNATURES: dict[str, re.Pattern[str]] = {
    "YYYY-MM-DD": re.compile(r"^\d{4}-\d{2}-\d{2}"),
    "MM/DD/YYYY": re.compile(r"^\d{2}/\d{2}/\d{4}"),
    "DD-MM-YYYY": re.compile(r"^\d{2}-\d{2}-\d{4}"),
    "$XXX.XX": re.compile(r"^\$[\d,]+\.?\d*$"),
    "COUNTRY/CURRENCY_CODE": re.compile(r"^[A-Z]{2,3}$"),
    "ALPHANUMERIC_ID": re.compile(r"^[A-Z]{3}\d+$"),
}

SENSITIVE_VALUE_PATTERNS: dict[str, re.Pattern[str]] = {
    "PAN": re.compile(r"\b(?:\d{4}[-\s]?){3}\d{4}\b"),
    "SSN": re.compile(r"\b\d{3}-\d{2}-\d{4}\b"),
    "EMAIL": re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Z|a-z]{2,}\b"),
    "PHONE": re.compile(r"\b(?:\+?1[-.\s]?)?\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}\b"),
}

_NAME_SEPARATORS_RE = re.compile(r"[_\-\s]")

_DATE_FORMATS = ("%m/%d/%Y", "%m/%d/%Y %H:%M", "%m/%d/%Y %H:%M:%S", "%d-%m-%Y", "%m-%d-%Y")


# ---------------------------------------------------------------------------
# Helpers shared with the dimension scorers
# ---------------------------------------------------------------------------


def is_date_like(value: str) -> bool:
    """True when the string starts with one of the supported date layouts."""
    return any(pattern.match(value) for pattern in _DATE_RES)


def is_date_column(column: ColumnSchema) -> bool:
    """Date-typed or date-named column."""
    return column.inferred_type == InferredType.DATE or "date" in column.name.lower()


def parse_date(value: str) -> datetime | None:
    """Parse ISO 8601 or a slash or dash day/month layout into an aware datetime.

    Naive values are taken as UTC. Returns None when unparseable.
    """
    text = value.strip()
    parsed: datetime | None = None
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        for fmt in _DATE_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue
    if parsed is None:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def row_key(row: RawRow) -> str:
    """Canonical identity of a row, independent of column order."""
    return json.dumps(row, sort_keys=True)


def numeric_values(values: Sequence[CellValue]) -> list[float]:
    return [v for v in values if is_number(v)]  # type: ignore[misc]


def normalize_column_name(name: str) -> str:
    return _NAME_SEPARATORS_RE.sub("", name.lower())


def is_sensitive_column(name: str, config: DQIScoringConfig) -> bool:
    """Column name contains a sensitive token, ignoring case and separators."""
    normalized = normalize_column_name(name)
    return any(
        normalize_column_name(token) in normalized
        for token in config.sensitive_column_names
    )


def redact_sample(value: str, column_name: str, config: DQIScoringConfig) -> str:
    """Redact a sample if sensitive, else truncate long values."""
    if is_sensitive_column(column_name, config):
        return config.redaction_marker

    for pattern in SENSITIVE_VALUE_PATTERNS.values():
        if pattern.search(value):
            return config.redaction_marker

    limit = config.sample_truncate_length
    if len(value) > limit:
        return value[: limit - 3] + "..."
    return value


# ---------------------------------------------------------------------------
# Column profiling
# ---------------------------------------------------------------------------


def infer_column_type(
    values: Sequence[CellValue],
    column_name: str,
    config: DQIScoringConfig | None = None,
) -> InferredType:
    """Infer the dominant semantic type of a column.

    Falls back to ``mixed`` when the dominant type covers less than
    ``mixed_dominance_ratio`` of non-null values and more than one type
    was seen. All-null columns are ``string``.
    """
    cfg = config or DQIScoringConfig()
    non_null = [v for v in values if v is not None]
    if not non_null:
        return InferredType.STRING

    lowered_name = column_name.lower()
    name_suggests_id = any(hint in lowered_name for hint in cfg.identifier_name_hints)

    tally: dict[InferredType, int] = {}
    for value in non_null:
        if isinstance(value, bool):
            kind = InferredType.BOOLEAN
        elif is_number(value):
            kind = InferredType.NUMBER
        elif any(pattern.match(value) for pattern in _CURRENCY_RES):  # type: ignore[arg-type]
            kind = InferredType.CURRENCY
        elif is_date_like(value):  # type: ignore[arg-type]
            kind = InferredType.DATE
        elif name_suggests_id and _IDENTIFIER_RE.match(value):  # type: ignore[arg-type]
            kind = InferredType.IDENTIFIER
        else:
            kind = InferredType.STRING
        tally[kind] = tally.get(kind, 0) + 1

    # First-seen wins ties.
    dominant = max(tally, key=lambda k: tally[k])
    dominance = tally[dominant] / len(non_null)
    if dominance < cfg.mixed_dominance_ratio and len(tally) > 1:
        return InferredType.MIXED
    return dominant


def detect_patterns(
    values: Sequence[CellValue],
    scan_limit: int = 100,
) -> list[str]:
    """Collect format tags seen in the first ``scan_limit`` string values."""
    strings = [v for v in values if isinstance(v, str)][:scan_limit]
    found: set[str] = set()
    for value in strings:
        for tag, pattern in PATTERN_SIGNATURES.items():
            if pattern.match(value):
                found.add(tag)
    return sorted(found)


def compute_statistics(values: Sequence[float]) -> NumericStatistics | None:
    """Min/max/mean/median/population std-dev, rounded to 2 decimals.

    Returns None when a column is empty or its aggregates overflow float
    range.
    """
    if not values:
        return None
    arr = np.asarray(values, dtype=float)
    with np.errstate(over="ignore", invalid="ignore"):
        aggregates = {
            "min": float(arr.min()),
            "max": float(arr.max()),
            "mean": float(arr.mean()),
            "median": float(np.median(arr)),
            "std_dev": float(arr.std()),
        }
    if not all(math.isfinite(v) for v in aggregates.values()):
        return None
    return NumericStatistics(**{k: round_half_up(v, 2) for k, v in aggregates.items()})


def extract_column_schema(
    name: str,
    values: Sequence[CellValue],
    config: DQIScoringConfig | None = None,
) -> ColumnSchema:
    """Build the ColumnSchema of one column from its typed values."""
    cfg = config or DQIScoringConfig()
    non_null = [v for v in values if v is not None]
    distinct = {to_display(v) for v in non_null}
    inferred_type = infer_column_type(values, name, cfg)

    samples = [
        redact_sample(to_display(v), name, cfg)
        for v in non_null[: cfg.max_sample_values]
    ]

    total = len(values)
    null_ratio = 1 - len(non_null) / total if total else 0.0

    statistics = None
    if inferred_type in (InferredType.NUMBER, InferredType.CURRENCY):
        statistics = compute_statistics(numeric_values(values))

    return ColumnSchema(
        name=name,
        inferred_type=inferred_type,
        null_ratio=round_half_up(null_ratio, 2),
        unique_ratio=round_half_up(len(distinct) / max(len(non_null), 1), 2),
        sample_values=samples,
        patterns=detect_patterns(values, cfg.pattern_scan_limit),
        statistics=statistics,
    )


def extract_schema(
    headers: Sequence[str],
    rows: Sequence[RawRow],
    config: DQIScoringConfig | None = None,
) -> list[ColumnSchema]:
    """One ColumnSchema per header, in header order."""
    return [
        extract_column_schema(header, [row[header] for row in rows], config)
        for header in headers
    ]


# ---------------------------------------------------------------------------
# Dataset summary
# ---------------------------------------------------------------------------


def count_duplicate_rows(rows: Sequence[RawRow]) -> int:
    """Rows whose canonical key was already seen."""
    return len(rows) - len({row_key(row) for row in rows})


def count_outliers(
    values: Sequence[CellValue],
    statistics: NumericStatistics | None,
    sigma: float = 3.0,
) -> int:
    """Numeric values outside mean +/- sigma * std_dev."""
    if statistics is None or statistics.std_dev <= 0:
        return 0
    upper = statistics.mean + sigma * statistics.std_dev
    lower = statistics.mean - sigma * statistics.std_dev
    return sum(1 for v in numeric_values(values) if v > upper or v < lower)


def count_anomalies(
    rows: Sequence[RawRow],
    columns: Sequence[ColumnSchema],
    now: datetime,
    config: DQIScoringConfig | None = None,
) -> int:
    """Negative amounts + future dates + statistical outliers."""
    cfg = config or DQIScoringConfig()
    anomalies = 0

    for col in columns:
        if (
            col.statistics is not None
            and "amount" in col.name.lower()
            and col.statistics.min < 0
        ):
            anomalies += sum(1 for v in numeric_values([r[col.name] for r in rows]) if v < 0)

    for col in columns:
        if not is_date_column(col):
            continue
        for row in rows:
            value = row[col.name]
            if isinstance(value, str) and value:
                parsed = parse_date(value)
                if parsed is not None and parsed > now:
                    anomalies += 1

    for col in columns:
        anomalies += count_outliers(
            [r[col.name] for r in rows], col.statistics, cfg.validity_outlier_sigma
        )

    return anomalies


def build_statistical_summary(
    headers: Sequence[str],
    rows: Sequence[RawRow],
    columns: Sequence[ColumnSchema],
    now: datetime | None = None,
    config: DQIScoringConfig | None = None,
) -> StatisticalSummary:
    """Dataset-wide cell, duplicate and anomaly counts."""
    ref = now or datetime.now(tz=UTC)
    duplicate_rows = count_duplicate_rows(rows)
    return StatisticalSummary(
        total_cells=len(rows) * len(headers),
        null_cells=sum(round_int(col.null_ratio * len(rows)) for col in columns),
        unique_rows=len(rows) - duplicate_rows,
        duplicate_rows=duplicate_rows,
        anomaly_count=count_anomalies(rows, columns, ref, config),
    )
