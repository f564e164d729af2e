"""Risk and compliance classifier.

The risk narrative depends only on the composite grade; the compliance
status is computed independently from the composite and dimension
scores, so a grade does not imply a status.

Deterministic -- no LLM calls.
"""

from __future__ import annotations

from collections.abc import Sequence

from src.models.dqi import (
    ComplianceStatus,
    CompositeDQS,
    DQIDimension,
    QualityGrade,
)
from src.quality.config import DQIScoringConfig


def _names(dimensions: Sequence[DQIDimension]) -> str:
    return ", ".join(d.name for d in dimensions)


def risk_summary(
    composite: CompositeDQS,
    dimensions: Sequence[DQIDimension],
    config: DQIScoringConfig | None = None,
) -> str:
    """Overall risk narrative selected by composite grade.

    Warning band: floor <= score < ceiling. Critical band: score < floor.
    """
    cfg = config or DQIScoringConfig()
    applicable = [d for d in dimensions if d.applicable]
    critical = [d for d in applicable if d.score < cfg.warning_band_floor]
    warning = [
        d
        for d in applicable
        if cfg.warning_band_floor <= d.score < cfg.warning_band_ceiling
    ]

    if composite.grade == QualityGrade.A:
        return (
            "LOW RISK: Dataset meets enterprise quality standards. All dimensions "
            "are within acceptable thresholds. Suitable for production processing "
            "and regulatory reporting."
        )
    if composite.grade == QualityGrade.B:
        return (
            "MODERATE-LOW RISK: Dataset quality is good with minor improvements "
            f"needed. {len(warning)} dimension(s) require attention: "
            f"{_names(warning)}. Safe for most processing with monitoring."
        )
    if composite.grade == QualityGrade.C:
        return (
            "MODERATE RISK: Dataset has quality issues requiring remediation. "
            f"{len(warning) + len(critical)} dimension(s) below threshold. "
            "Review recommendations before production use."
        )
    if composite.grade == QualityGrade.D:
        return (
            "HIGH RISK: Significant data quality issues detected. "
            f"{len(critical)} critical dimension(s): {_names(critical)}. "
            "Remediation required before processing."
        )
    return (
        "CRITICAL RISK: Dataset fails multiple quality checks. "
        f"{len(critical)} dimensions in critical state. Do not use for production. "
        "Immediate data remediation required."
    )


def risk_level(summary: str) -> str:
    """Risk label of a narrative, e.g. "MODERATE-LOW RISK"."""
    return summary.split(":", 1)[0].strip()


def compliance_status(
    composite: CompositeDQS,
    dimensions: Sequence[DQIDimension],
    config: DQIScoringConfig | None = None,
) -> ComplianceStatus:
    """Classify compliance from composite and applicable dimension scores."""
    cfg = config or DQIScoringConfig()
    applicable = [d for d in dimensions if d.applicable]

    if (
        any(d.score < cfg.non_compliant_below for d in applicable)
        or composite.score < cfg.non_compliant_below
    ):
        return ComplianceStatus.NON_COMPLIANT

    if composite.score < cfg.remediation_composite_below or any(
        d.score < cfg.remediation_dimension_below for d in applicable
    ):
        return ComplianceStatus.REQUIRES_REMEDIATION

    return ComplianceStatus.COMPLIANT
