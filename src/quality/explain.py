"""Explainability generator: score bands -> human-readable narrative.

Each dimension has its own summary and business-impact templates with
dimension-specific band thresholds. The technical detail is the
dimension's findings joined with "; ".
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

from src.models.dqi import DimensionId, DQIDimension, DQIExplanation

_Template = Callable[[int], str]


_SUMMARIES: dict[DimensionId, _Template] = {
    DimensionId.COMPLETENESS: lambda s: (
        f"Excellent data completeness at {s}%. Your dataset has minimal missing values."
        if s >= 80
        else f"Data completeness is moderate at {s}%. Some fields require attention."
        if s >= 60
        else f"Critical completeness issues. {100 - s}% of expected data is missing."
    ),
    DimensionId.CONSISTENCY: lambda s: (
        f"Strong data consistency at {s}%. Formats and types are well-standardized."
        if s >= 80
        else f"Consistency issues detected. {100 - s}% of data has format/type inconsistencies."
    ),
    DimensionId.UNIQUENESS: lambda s: (
        f"High uniqueness at {s}%. Very few duplicate records detected."
        if s >= 90
        else f"Duplicate records found. {100 - s}% of data may be redundant."
    ),
    DimensionId.VALIDITY: lambda s: (
        f"{s}% of values pass business rule validation checks."
        if s >= 80
        else f"{100 - s}% of values violate expected business rules or constraints."
    ),
    DimensionId.TIMELINESS: lambda s: (
        "Data freshness is excellent. Timestamps are current and valid."
        if s >= 80
        else "Timeliness concerns detected. Some dates may be stale or invalid."
    ),
    DimensionId.ACCURACY: lambda s: (
        f"High accuracy at {s}%. Values conform to expected formats and ranges."
        if s >= 80
        else f"Accuracy issues in {100 - s}% of data. Review data entry processes."
    ),
    DimensionId.INTEGRITY: lambda s: (
        "Strong referential integrity. Cross-field relationships are maintained."
        if s >= 80
        else "Integrity gaps detected. Some references may be broken or incomplete."
    ),
}

# dimension -> (band floor, below-floor impact, at-or-above impact)
_IMPACTS: dict[DimensionId, tuple[int, str, str]] = {
    DimensionId.COMPLETENESS: (
        70,
        "Missing data may cause transaction failures or compliance gaps.",
        "Current completeness supports reliable transaction processing.",
    ),
    DimensionId.CONSISTENCY: (
        70,
        "Inconsistent formats may cause processing errors and reconciliation issues.",
        "Format standardization supports smooth data integration.",
    ),
    DimensionId.UNIQUENESS: (
        85,
        "Duplicates may inflate metrics and cause double-processing risks.",
        "Low duplication rate ensures accurate transaction counts.",
    ),
    DimensionId.VALIDITY: (
        70,
        "Invalid values may trigger payment rejections or compliance flags.",
        "Valid data supports successful transaction authorization.",
    ),
    DimensionId.TIMELINESS: (
        70,
        "Stale or future-dated records may affect settlement and reporting.",
        "Current timestamps support accurate real-time processing.",
    ),
    DimensionId.ACCURACY: (
        70,
        "Inaccurate data may lead to incorrect billing or fraud detection issues.",
        "Accurate data supports reliable fraud detection and billing.",
    ),
    DimensionId.INTEGRITY: (
        70,
        "Broken references may cause orphan transactions or reconciliation failures.",
        "Strong integrity supports complete audit trails.",
    ),
}


def explain_dimension(dimension: DQIDimension) -> DQIExplanation:
    """Build the narrative for one dimension from its score and findings."""
    s = dimension.score
    summary_fn = _SUMMARIES.get(dimension.id)
    summary = summary_fn(s) if summary_fn else f"{dimension.name} score: {s}%"

    impact_band = _IMPACTS.get(dimension.id)
    if impact_band is None:
        impact = "Monitor this dimension for quality improvements."
    else:
        floor, below, above = impact_band
        impact = below if s < floor else above

    if dimension.findings:
        detail = "; ".join(dimension.findings)
    else:
        detail = f"No specific issues detected in {dimension.name.lower()} dimension."

    return DQIExplanation(
        dimension=dimension.name,
        summary=summary,
        business_impact=impact,
        technical_detail=detail,
    )


def explain_dimensions(dimensions: Sequence[DQIDimension]) -> list[DQIExplanation]:
    """Explanations for applicable dimensions, in evaluation order."""
    return [explain_dimension(d) for d in dimensions if d.applicable]
