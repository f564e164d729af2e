"""Dimension scorers: the 7 DQI quality dimensions.

Each dimension is a declarative ``DimensionRule``: an applicability
predicate over the dataset metadata plus a scoring function over the
typed rows and metadata. Every scorer computes a dimension-specific
defect rate and converts it with ``100 - rate * penalty``, clamped at 0
and rounded half up. Penalty factors come from ``DQIScoringConfig``.

Findings are reported in detection order; impacted columns never repeat.

Deterministic -- no LLM calls.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from src.models.dqi import (
    ColumnSchema,
    DatasetMetadata,
    DimensionId,
    InferredType,
    RawRow,
)
from src.quality.config import DQIScoringConfig
from src.quality.rounding import clamp_score, round_int
from src.quality.schema import (
    count_duplicate_rows,
    count_outliers,
    is_date_column,
    numeric_values,
    parse_date,
)
from src.quality.values import is_number

NOT_APPLICABLE_FINDING = "Dimension not applicable for this dataset"


# ---------------------------------------------------------------------------
# Result and context
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DimensionResult:
    """Raw output of one scorer before weighting."""

    score: int
    findings: list[str]
    impacted_columns: list[str]


@dataclass(frozen=True)
class ScoringContext:
    """Inputs shared by every scorer for one analysis run."""

    rows: Sequence[RawRow]
    metadata: DatasetMetadata
    config: DQIScoringConfig
    now: datetime

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def cell_count(self) -> int:
        return len(self.rows) * len(self.metadata.columns)

    def column_values(self, column: ColumnSchema) -> list:
        return [row[column.name] for row in self.rows]


@dataclass
class _Collector:
    findings: list[str] = field(default_factory=list)
    impacted: list[str] = field(default_factory=list)

    def impact(self, column: str) -> None:
        if column not in self.impacted:
            self.impacted.append(column)

    def result(self, score: float) -> DimensionResult:
        return DimensionResult(
            score=clamp_score(score),
            findings=list(self.findings),
            impacted_columns=list(self.impacted),
        )


@dataclass(frozen=True)
class DimensionRule:
    """Declarative scorer: applicability predicate + scoring function."""

    id: DimensionId
    name: str
    is_applicable: Callable[[DatasetMetadata, DQIScoringConfig], bool]
    score: Callable[[ScoringContext], DimensionResult]


def _always(metadata: DatasetMetadata, config: DQIScoringConfig) -> bool:  # noqa: ARG001
    return True


def _name_has(column: ColumnSchema, *tokens: str) -> bool:
    lowered = column.name.lower()
    return any(token in lowered for token in tokens)


def _is_identifier_like(column: ColumnSchema) -> bool:
    return column.inferred_type == InferredType.IDENTIFIER or "id" in column.name.lower()


def _non_numeric_count(values: Sequence) -> int:
    return sum(1 for v in values if v is not None and not is_number(v))


# ---------------------------------------------------------------------------
# Completeness
# ---------------------------------------------------------------------------


def score_completeness(ctx: ScoringContext) -> DimensionResult:
    """Share of filled cells across all columns; 1% missing costs 1.5 points."""
    cfg = ctx.config
    out = _Collector()
    rows = ctx.row_count
    total_cells = 0
    filled_cells = 0.0

    for col in ctx.metadata.columns:
        total_cells += rows
        filled_cells += rows * (1 - col.null_ratio)

        if col.null_ratio > cfg.completeness_column_null_threshold:
            out.impact(col.name)
            out.findings.append(
                f"Column '{col.name}' has {round_int(col.null_ratio * 100)}% missing values"
            )

    ratio = filled_cells / total_cells
    score = clamp_score(100 - (1 - ratio) * cfg.completeness_penalty)

    if score < cfg.completeness_overall_finding_below:
        out.findings.append(
            f"Overall data completeness is {round_int(ratio * 100)}%, "
            f"with {round_int((1 - ratio) * total_cells)} missing cells"
        )

    return out.result(score)


# ---------------------------------------------------------------------------
# Consistency
# ---------------------------------------------------------------------------


def _case_variants(values: Sequence) -> int:
    """Extra spellings per case-folded value ("VISA" vs "visa" counts 1)."""
    variants: dict[str, set[str]] = {}
    for value in values:
        if isinstance(value, str) and value:
            variants.setdefault(value.lower(), set()).add(value)
    return sum(len(spellings) - 1 for spellings in variants.values())


def score_consistency(ctx: ScoringContext) -> DimensionResult:
    """Mixed types, multiple formats, and case variants per column."""
    cfg = ctx.config
    out = _Collector()
    rows = ctx.row_count
    inconsistent = 0

    for col in ctx.metadata.columns:
        if col.inferred_type == InferredType.MIXED:
            inconsistent += round_int(rows * cfg.consistency_mixed_share)
            out.impact(col.name)
            out.findings.append(
                f"Column '{col.name}' has inconsistent data types (mixed string/number/date)"
            )

        if len(col.patterns) > 1:
            inconsistent += round_int(rows * cfg.consistency_multi_pattern_share)
            out.impact(col.name)
            out.findings.append(
                f"Column '{col.name}' has multiple formats: {', '.join(col.patterns)}"
            )

        if col.inferred_type == InferredType.STRING:
            variants = _case_variants(ctx.column_values(col))
            if variants > 0:
                inconsistent += variants * cfg.consistency_case_variant_weight
                out.impact(col.name)
                out.findings.append(
                    f"Column '{col.name}' has {variants} case inconsistencies "
                    f'(e.g., "VISA" vs "visa")'
                )

    rate = inconsistent / ctx.cell_count
    return out.result(100 - rate * cfg.consistency_penalty)


# ---------------------------------------------------------------------------
# Uniqueness
# ---------------------------------------------------------------------------


def score_uniqueness(ctx: ScoringContext) -> DimensionResult:
    """Full-row duplicates plus non-unique identifier columns."""
    cfg = ctx.config
    out = _Collector()
    duplicates = count_duplicate_rows(ctx.rows)
    duplicate_rate = duplicates / ctx.row_count

    if duplicates > 0:
        out.findings.append(
            f"Found {duplicates} duplicate rows "
            f"({round_int(duplicate_rate * 100)}% of dataset)"
        )

    id_issues = 0.0
    for col in ctx.metadata.columns:
        if _is_identifier_like(col) and col.unique_ratio < 1:
            out.impact(col.name)
            out.findings.append(
                f"Identifier column '{col.name}' has "
                f"{round_int((1 - col.unique_ratio) * 100)}% non-unique values"
            )
            id_issues += 1 - col.unique_ratio

    return out.result(
        100
        - duplicate_rate * cfg.uniqueness_duplicate_penalty
        - id_issues * cfg.uniqueness_identifier_penalty
    )


# ---------------------------------------------------------------------------
# Validity
# ---------------------------------------------------------------------------


def score_validity(ctx: ScoringContext) -> DimensionResult:
    """Business-rule violations: negatives, zero amounts, outliers, null-likes."""
    cfg = ctx.config
    out = _Collector()
    invalid = 0
    null_like = set(cfg.null_like_strings)

    for col in ctx.metadata.columns:
        values = ctx.column_values(col)

        if _name_has(col, *cfg.positive_field_names):
            negatives = sum(1 for v in numeric_values(values) if v < 0)
            if negatives > 0:
                invalid += negatives
                out.impact(col.name)
                out.findings.append(
                    f"Column '{col.name}' has {negatives} invalid negative values"
                )

            zeros = sum(1 for v in numeric_values(values) if v == 0)
            if zeros > 0 and _name_has(col, "amount"):
                invalid += zeros
                out.findings.append(
                    f"Column '{col.name}' has {zeros} suspicious zero values"
                )

        outliers = count_outliers(values, col.statistics, cfg.validity_outlier_sigma)
        if outliers > 0:
            invalid += outliers
            out.impact(col.name)
            out.findings.append(
                f"Column '{col.name}' has {outliers} outlier values (outside 3σ range)"
            )

        null_strings = sum(
            1 for v in values if isinstance(v, str) and v.lower().strip() in null_like
        )
        if null_strings > 0:
            invalid += null_strings
            out.impact(col.name)
            out.findings.append(
                f"Column '{col.name}' has {null_strings} invalid null-like strings"
            )

        if _name_has(col, "amount", "price"):
            non_numeric = _non_numeric_count(values)
            if non_numeric > 0:
                invalid += non_numeric
                out.impact(col.name)
                out.findings.append(
                    f"Column '{col.name}' has {non_numeric} non-numeric values in numeric field"
                )

    rate = invalid / ctx.cell_count
    return out.result(100 - rate * cfg.validity_penalty)


# ---------------------------------------------------------------------------
# Timeliness
# ---------------------------------------------------------------------------


def timeliness_applicable(metadata: DatasetMetadata, config: DQIScoringConfig) -> bool:  # noqa: ARG001
    """Only datasets with a date-typed or date-named column."""
    return any(is_date_column(col) for col in metadata.columns)


def score_timeliness(ctx: ScoringContext) -> DimensionResult:
    """Future-dated, unparseable, and stale values in date columns."""
    cfg = ctx.config
    out = _Collector()
    date_columns = [col for col in ctx.metadata.columns if is_date_column(col)]

    if not date_columns:
        return DimensionResult(
            score=100, findings=["No date columns to evaluate"], impacted_columns=[]
        )

    stale_horizon = timedelta(days=cfg.timeliness_stale_days)
    total = future = stale = invalid = 0

    for col in date_columns:
        for value in ctx.column_values(col):
            if value is None or value == "":
                continue
            total += 1
            if not isinstance(value, str):
                continue

            parsed = parse_date(value)
            if parsed is None:
                invalid += 1
                if col.name not in out.impacted:
                    out.impact(col.name)
                    out.findings.append(f"Column '{col.name}' contains invalid date values")
                continue

            if parsed > ctx.now:
                future += 1
                if not any("future dates" in f for f in out.findings):
                    out.impact(col.name)
                    out.findings.append(
                        f"Column '{col.name}' contains future dates (data integrity issue)"
                    )

            if ctx.now - parsed > stale_horizon:
                stale += 1

    if total == 0:
        return DimensionResult(
            score=cfg.timeliness_no_dates_score,
            findings=["No valid dates found to evaluate"],
            impacted_columns=list(out.impacted),
        )

    if future > 0:
        out.findings.append(f"{future} records have future dates")
    if invalid > 0:
        out.findings.append(f"{invalid} records have invalid/unparseable dates")
    if stale > 0:
        out.findings.append(
            f"{stale} records have dates older than {cfg.timeliness_stale_days // 365} years"
        )

    return out.result(
        100
        - future / total * cfg.timeliness_future_penalty
        - invalid / total * cfg.timeliness_invalid_penalty
        - stale / total * cfg.timeliness_stale_penalty
    )


# ---------------------------------------------------------------------------
# Accuracy
# ---------------------------------------------------------------------------


def score_accuracy(ctx: ScoringContext) -> DimensionResult:
    """Type mismatches, duplicate identifiers, and malformed numeric fields."""
    cfg = ctx.config
    out = _Collector()
    rows = ctx.row_count
    inaccurate = 0

    for col in ctx.metadata.columns:
        values = ctx.column_values(col)

        if col.inferred_type == InferredType.MIXED:
            inaccurate += round_int(rows * cfg.accuracy_mixed_share)
            out.impact(col.name)
            out.findings.append(
                f"Column '{col.name}' has mixed data types (data entry errors)"
            )

        if _is_identifier_like(col) and col.unique_ratio < 1:
            duplicates = round_int((1 - col.unique_ratio) * rows)
            inaccurate += duplicates
            out.impact(col.name)
            out.findings.append(
                f"Identifier column '{col.name}' has {duplicates} duplicate values"
            )

        if _name_has(col, "amount", "price", "quantity"):
            non_numeric = _non_numeric_count(values)
            if non_numeric > 0:
                inaccurate += non_numeric
                out.impact(col.name)
                out.findings.append(
                    f"Column '{col.name}' has {non_numeric} non-numeric values"
                )

        empty_strings = sum(1 for v in values if v == "")
        if empty_strings > 0:
            inaccurate += empty_strings
            out.impact(col.name)
            out.findings.append(
                f"Column '{col.name}' has {empty_strings} empty strings (should be null)"
            )

    rate = inaccurate / ctx.cell_count
    return out.result(100 - rate * cfg.accuracy_penalty)


# ---------------------------------------------------------------------------
# Integrity
# ---------------------------------------------------------------------------


def integrity_applicable(metadata: DatasetMetadata, config: DQIScoringConfig) -> bool:
    """Only datasets wider than ``integrity_min_columns``."""
    return metadata.column_count > config.integrity_min_columns


def _is_reference_column(column: ColumnSchema) -> bool:
    lowered = column.name.lower()
    return (
        "_id" in lowered
        or (lowered.endswith("id") and len(column.name) > 2)
        or "merchant" in lowered
        or "customer" in lowered
    )


def score_integrity(ctx: ScoringContext) -> DimensionResult:
    """Orphan references, sparse rows, and missing companion fields."""
    cfg = ctx.config
    out = _Collector()
    rows = ctx.row_count
    columns = ctx.metadata.columns
    issues = 0

    for col in columns:
        if not _is_reference_column(col):
            continue
        nulls = round_int(col.null_ratio * rows)
        if nulls > 0:
            issues += nulls
            out.impact(col.name)
            out.findings.append(
                f"Reference column '{col.name}' has {nulls} null values (orphan records)"
            )

    incomplete = 0
    for row in ctx.rows:
        values = list(row.values())
        empty = sum(1 for v in values if v is None or v == "")
        if empty > len(values) * cfg.integrity_empty_row_ratio:
            incomplete += 1
    if incomplete > 0:
        issues += incomplete * cfg.integrity_empty_row_weight
        out.findings.append(
            f"{incomplete} rows are more than 50% empty (incomplete records)"
        )

    has_amount = any(_name_has(col, "amount") for col in columns)
    has_currency = any(_name_has(col, "currency") for col in columns)
    if has_amount and not has_currency:
        issues += round_int(rows * cfg.integrity_missing_currency_share)
        out.findings.append("Amount field exists without corresponding currency field")

    status_col = next((col for col in columns if _name_has(col, "status")), None)
    if status_col is not None and status_col.null_ratio > 0:
        nulls = round_int(status_col.null_ratio * rows)
        issues += nulls
        out.findings.append(f"Status column has {nulls} missing values")

    rate = issues / rows
    return out.result(100 - rate * cfg.integrity_penalty)


# ---------------------------------------------------------------------------
# Registry (evaluation order)
# ---------------------------------------------------------------------------


DIMENSION_RULES: tuple[DimensionRule, ...] = (
    DimensionRule(DimensionId.COMPLETENESS, "Completeness", _always, score_completeness),
    DimensionRule(DimensionId.CONSISTENCY, "Consistency", _always, score_consistency),
    DimensionRule(DimensionId.UNIQUENESS, "Uniqueness", _always, score_uniqueness),
    DimensionRule(DimensionId.VALIDITY, "Validity", _always, score_validity),
    DimensionRule(DimensionId.TIMELINESS, "Timeliness", timeliness_applicable, score_timeliness),
    DimensionRule(DimensionId.ACCURACY, "Accuracy", _always, score_accuracy),
    DimensionRule(DimensionId.INTEGRITY, "Integrity", integrity_applicable, score_integrity),
)
