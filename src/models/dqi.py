"""Data Quality Intelligence (DQI) domain models.

Defines the column schema, dataset metadata, the 7 quality dimensions,
the composite score, narrative records and the root ``DQIReport``
aggregate produced once per analysed file.

Every model here is built from metadata only. Raw rows never appear in
any field; sample values are capped and redacted before they get here.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import Field

from src.models.common import (
    Count,
    DQIBase,
    Ratio,
    Score,
    UTCTimestamp,
    UUIDv7,
    new_uuid7,
    utc_now,
)

# A normalized cell value produced by the value typer.
CellValue = bool | int | float | str | None

# Column name -> normalized cell value. Transient, never persisted.
RawRow = dict[str, CellValue]


# ---------------------------------------------------------------------------
# Enums (all StrEnum)
# ---------------------------------------------------------------------------


class InferredType(StrEnum):
    """Semantic column type inferred from its values."""

    STRING = "string"
    NUMBER = "number"
    DATE = "date"
    BOOLEAN = "boolean"
    CURRENCY = "currency"
    IDENTIFIER = "identifier"
    MIXED = "mixed"


class DimensionId(StrEnum):
    """The 7 quality dimensions, in evaluation order."""

    COMPLETENESS = "completeness"
    CONSISTENCY = "consistency"
    UNIQUENESS = "uniqueness"
    VALIDITY = "validity"
    TIMELINESS = "timeliness"
    ACCURACY = "accuracy"
    INTEGRITY = "integrity"


class QualityGrade(StrEnum):
    """Composite quality grades from A (best) to F (worst)."""

    A = "A"
    B = "B"
    C = "C"
    D = "D"
    F = "F"


class RecommendationPriority(StrEnum):
    """Remediation priority tiers, most urgent first."""

    CRITICAL = "Critical"
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class ComplianceStatus(StrEnum):
    """Compliance classification of a dataset."""

    COMPLIANT = "COMPLIANT"
    REQUIRES_REMEDIATION = "REQUIRES_REMEDIATION"
    NON_COMPLIANT = "NON_COMPLIANT"


# ---------------------------------------------------------------------------
# Dataset metadata
# ---------------------------------------------------------------------------


class NumericStatistics(DQIBase, frozen=True):
    """Summary statistics of a numeric column, rounded to 2 decimals."""

    min: float
    max: float
    mean: float
    median: float
    std_dev: float


class ColumnSchema(DQIBase, frozen=True):
    """Inferred schema and profile of a single column."""

    name: str
    inferred_type: InferredType
    null_ratio: Ratio
    unique_ratio: Ratio
    sample_values: list[str] = Field(default_factory=list, max_length=3)
    patterns: list[str] = Field(default_factory=list)
    statistics: NumericStatistics | None = None


class StatisticalSummary(DQIBase, frozen=True):
    """Dataset-wide cell, row and anomaly counts."""

    total_cells: Count
    null_cells: Count
    unique_rows: Count
    duplicate_rows: Count
    anomaly_count: Count


class DatasetMetadata(DQIBase, frozen=True):
    """File identity, shape and per-column schema of an analysed dataset."""

    file_name: str
    file_size: Count
    row_count: Count
    column_count: Count
    columns: list[ColumnSchema] = Field(default_factory=list)
    statistical_summary: StatisticalSummary
    data_hash: str
    analyzed_at: UTCTimestamp = Field(default_factory=utc_now)


# ---------------------------------------------------------------------------
# Scoring results
# ---------------------------------------------------------------------------


class DQIDimension(DQIBase, frozen=True):
    """Score and diagnostics for one quality dimension."""

    id: DimensionId
    name: str
    score: Score
    weight: Ratio
    applicable: bool
    findings: list[str] = Field(default_factory=list)
    impacted_columns: list[str] = Field(default_factory=list)


class CompositeDQS(DQIBase, frozen=True):
    """Weighted composite score, letter grade and confidence."""

    score: Score
    grade: QualityGrade
    confidence: Score


class DQIExplanation(DQIBase, frozen=True):
    """Human-readable explanation of one dimension's score."""

    dimension: str
    summary: str
    business_impact: str
    technical_detail: str


class DQIRecommendation(DQIBase, frozen=True):
    """A prioritized remediation action derived from a dimension score."""

    id: str
    priority: RecommendationPriority
    title: str
    description: str
    expected_improvement: Count
    affected_dimensions: list[DimensionId] = Field(default_factory=list)
    remediation: str


class AuditTrail(DQIBase, frozen=True):
    """Audit stamp attached to every report."""

    evaluation_id: UUIDv7 = Field(default_factory=new_uuid7)
    timestamp: UTCTimestamp = Field(default_factory=utc_now)
    engine_version: str
    checksum_verified: bool


class DQIReport(DQIBase, frozen=True):
    """Immutable root aggregate produced once per analysed file.

    The only unit handed to a report store.
    """

    dataset_metadata: DatasetMetadata
    dimensions: list[DQIDimension] = Field(min_length=7, max_length=7)
    composite_dqs: CompositeDQS
    explanations: list[DQIExplanation] = Field(default_factory=list)
    recommendations: list[DQIRecommendation] = Field(default_factory=list)
    overall_risk_summary: str
    compliance_status: ComplianceStatus
    audit_trail: AuditTrail

    def dimension(self, dimension_id: DimensionId) -> DQIDimension:
        """Return the dimension with the given id."""
        for dim in self.dimensions:
            if dim.id == dimension_id:
                return dim
        msg = f"Dimension {dimension_id} not found."
        raise KeyError(msg)
