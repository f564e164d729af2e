"""Flat report summary for dashboards and exports.

Projects a ``DQIReport`` onto the compact shape dashboards consume:
applicable dimension scores with their headline explanation,
severity-mapped recommendations, per-column stats, and an audit block.
Pure function of the report; no rendering here.
"""

from __future__ import annotations

from pydantic import Field

from src.models.common import DQIBase, UTCTimestamp, UUIDv7
from src.models.dqi import (
    ComplianceStatus,
    DQIReport,
    InferredType,
    QualityGrade,
    RecommendationPriority,
)
from src.quality.risk import risk_level
from src.quality.rounding import round_int

DATA_HANDLING_POLICY = "Privacy-preserving: No raw data stored. Metadata-only analysis."

AUDIT_POLICIES: tuple[str, ...] = (
    "Data Completeness Policy",
    "Format Validation Rules",
    "Duplicate Detection Policy",
    "Privacy Protection Policy",
)


class DimensionScore(DQIBase, frozen=True):
    id: str
    name: str
    score: int
    explanation: str


class RecommendationItem(DQIBase, frozen=True):
    id: str
    title: str
    severity: RecommendationPriority
    expected_improvement: int
    action: str


class ColumnStat(DQIBase, frozen=True):
    name: str
    completeness: int
    unique_count: int
    data_type: InferredType


class SummaryMetadata(DQIBase, frozen=True):
    file_name: str
    records: int
    columns: int
    missing_values: int
    anomalies: int
    duplicates: int
    column_stats: list[ColumnStat] = Field(default_factory=list)


class SummaryAudit(DQIBase, frozen=True):
    hash: str
    evaluated_at: UTCTimestamp
    policies: list[str] = Field(default_factory=list)
    model_version: str


class DQSummary(DQIBase, frozen=True):
    """Dashboard-ready summary of one report."""

    score: int
    confidence: int
    timestamp: UTCTimestamp
    dimensions: list[DimensionScore] = Field(default_factory=list)
    recommendations: list[RecommendationItem] = Field(default_factory=list)
    metadata: SummaryMetadata
    audit: SummaryAudit
    quality_grade: QualityGrade
    compliance_status: ComplianceStatus
    evaluation_id: UUIDv7
    risk_level: str
    data_handling: str = DATA_HANDLING_POLICY


def _short_hash(data_hash: str) -> str:
    hex_digest = data_hash.split(":", 1)[-1]
    return "0x" + hex_digest[:40]


def summarize_report(report: DQIReport) -> DQSummary:
    """Project a report onto the flat dashboard summary."""
    meta = report.dataset_metadata
    explanations = {e.dimension: e.summary for e in report.explanations}

    dimensions = [
        DimensionScore(
            id=d.id.value,
            name=d.name,
            score=d.score,
            explanation=explanations.get(d.name, f"{d.name} score: {d.score}%"),
        )
        for d in report.dimensions
        if d.applicable
    ]

    # Critical collapses into High for display.
    recommendations = [
        RecommendationItem(
            id=r.id,
            title=r.title,
            severity=(
                RecommendationPriority.HIGH
                if r.priority == RecommendationPriority.CRITICAL
                else r.priority
            ),
            expected_improvement=r.expected_improvement,
            action=r.remediation.split(".")[0] or "Review",
        )
        for r in report.recommendations
    ]

    column_stats = [
        ColumnStat(
            name=col.name,
            completeness=round_int((1 - col.null_ratio) * 100),
            unique_count=round_int(col.unique_ratio * meta.row_count),
            data_type=col.inferred_type,
        )
        for col in meta.columns
    ]

    return DQSummary(
        score=report.composite_dqs.score,
        confidence=report.composite_dqs.confidence,
        timestamp=meta.analyzed_at,
        dimensions=dimensions,
        recommendations=recommendations,
        metadata=SummaryMetadata(
            file_name=meta.file_name,
            records=meta.row_count,
            columns=meta.column_count,
            missing_values=meta.statistical_summary.null_cells,
            anomalies=meta.statistical_summary.anomaly_count,
            duplicates=meta.statistical_summary.duplicate_rows,
            column_stats=column_stats,
        ),
        audit=SummaryAudit(
            hash=_short_hash(meta.data_hash),
            evaluated_at=report.audit_trail.timestamp,
            policies=list(AUDIT_POLICIES),
            model_version=report.audit_trail.engine_version,
        ),
        quality_grade=report.composite_dqs.grade,
        compliance_status=report.compliance_status,
        evaluation_id=report.audit_trail.evaluation_id,
        risk_level=risk_level(report.overall_risk_summary),
    )
