"""Recommendation generator: dimension scores -> prioritized actions.

A dimension below its threshold yields one recommendation. Priority
comes from dimension-specific cut points; the expected improvement is
``round((threshold - score) * factor)``. Accuracy has no rule of its own
(its defects are covered by the consistency and uniqueness actions).
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass

from src.models.dqi import (
    DimensionId,
    DQIDimension,
    DQIRecommendation,
    RecommendationPriority,
)
from src.quality.rounding import round_int

_PRIORITY_ORDER: dict[RecommendationPriority, int] = {
    RecommendationPriority.CRITICAL: 0,
    RecommendationPriority.HIGH: 1,
    RecommendationPriority.MEDIUM: 2,
    RecommendationPriority.LOW: 3,
}


@dataclass(frozen=True)
class RecommendationRule:
    """Threshold, priority cut points and text for one dimension."""

    dimension: DimensionId
    threshold: int
    factor: float
    # Ascending (upper bound, priority) pairs; first ``score < bound`` wins.
    tiers: tuple[tuple[int, RecommendationPriority], ...]
    fallback: RecommendationPriority
    title: str
    describe: Callable[[DQIDimension], str]
    affected: tuple[DimensionId, ...]
    remediation: str

    def priority_for(self, score: int) -> RecommendationPriority:
        for bound, priority in self.tiers:
            if score < bound:
                return priority
        return self.fallback


def _top_columns(dim: DQIDimension) -> str:
    return ", ".join(dim.impacted_columns[:3])


def _describe_completeness(dim: DQIDimension) -> str:
    more = "..." if len(dim.impacted_columns) > 3 else ""
    return (
        f"{len(dim.impacted_columns)} columns have significant missing data: "
        f"{_top_columns(dim)}{more}"
    )


_P = RecommendationPriority

RECOMMENDATION_RULES: dict[DimensionId, RecommendationRule] = {
    DimensionId.COMPLETENESS: RecommendationRule(
        dimension=DimensionId.COMPLETENESS,
        threshold=80,
        factor=0.6,
        tiers=((50, _P.CRITICAL), (70, _P.HIGH)),
        fallback=_P.MEDIUM,
        title="Address missing values in critical fields",
        describe=_describe_completeness,
        affected=(DimensionId.COMPLETENESS, DimensionId.VALIDITY),
        remediation=(
            "Implement data validation at source. Add required field constraints. "
            "Review ETL pipelines for data loss."
        ),
    ),
    DimensionId.UNIQUENESS: RecommendationRule(
        dimension=DimensionId.UNIQUENESS,
        threshold=90,
        factor=0.5,
        tiers=((70, _P.HIGH),),
        fallback=_P.MEDIUM,
        title="Implement deduplication strategy",
        describe=lambda dim: (
            "Duplicate records detected affecting data quality. "
            f"{100 - dim.score}% redundancy identified."
        ),
        affected=(DimensionId.UNIQUENESS, DimensionId.ACCURACY),
        remediation=(
            "Add unique constraints on identifier columns. Implement merge/purge "
            "processes. Review data ingestion for duplicate prevention."
        ),
    ),
    DimensionId.CONSISTENCY: RecommendationRule(
        dimension=DimensionId.CONSISTENCY,
        threshold=80,
        factor=0.4,
        tiers=((60, _P.HIGH),),
        fallback=_P.MEDIUM,
        title="Standardize data formats",
        describe=lambda dim: (
            f"Inconsistent data types and formats detected in: {_top_columns(dim)}"
        ),
        affected=(DimensionId.CONSISTENCY, DimensionId.ACCURACY),
        remediation=(
            "Implement format validation rules. Standardize date/currency formats. "
            "Add data type enforcement at ingestion."
        ),
    ),
    DimensionId.VALIDITY: RecommendationRule(
        dimension=DimensionId.VALIDITY,
        threshold=80,
        factor=0.5,
        tiers=((60, _P.CRITICAL),),
        fallback=_P.HIGH,
        title="Add business rule validation",
        describe=lambda dim: (
            f"{100 - dim.score}% of data fails business rule checks. "
            "Invalid values detected."
        ),
        affected=(DimensionId.VALIDITY, DimensionId.INTEGRITY),
        remediation=(
            "Implement range checks for numeric fields. Add lookup validation for "
            "codes. Review outlier detection thresholds."
        ),
    ),
    DimensionId.TIMELINESS: RecommendationRule(
        dimension=DimensionId.TIMELINESS,
        threshold=80,
        factor=0.3,
        tiers=((60, _P.HIGH),),
        fallback=_P.MEDIUM,
        title="Review date/timestamp handling",
        describe=lambda dim: (  # noqa: ARG005
            "Date fields contain future dates or stale records affecting timeliness."
        ),
        affected=(DimensionId.TIMELINESS,),
        remediation=(
            "Add date range validation. Implement data freshness SLAs. Review "
            "timestamp generation in source systems."
        ),
    ),
    DimensionId.INTEGRITY: RecommendationRule(
        dimension=DimensionId.INTEGRITY,
        threshold=80,
        factor=0.4,
        tiers=((60, _P.HIGH),),
        fallback=_P.MEDIUM,
        title="Strengthen referential integrity",
        describe=lambda dim: (
            f"Reference columns have null or orphan values: {_top_columns(dim)}"
        ),
        affected=(DimensionId.INTEGRITY, DimensionId.COMPLETENESS),
        remediation=(
            "Add foreign key constraints where applicable. Implement cascading "
            "updates. Review data relationships."
        ),
    ),
}


def generate_recommendations(
    dimensions: Sequence[DQIDimension],
) -> list[DQIRecommendation]:
    """One recommendation per applicable dimension below its threshold.

    Ids are assigned in dimension evaluation order, then the list is
    stably sorted by priority.
    """
    recommendations: list[DQIRecommendation] = []

    for dim in dimensions:
        if not dim.applicable:
            continue
        rule = RECOMMENDATION_RULES.get(dim.id)
        if rule is None or dim.score >= rule.threshold:
            continue

        recommendations.append(
            DQIRecommendation(
                id=f"REC-{len(recommendations) + 1}",
                priority=rule.priority_for(dim.score),
                title=rule.title,
                description=rule.describe(dim),
                expected_improvement=round_int((rule.threshold - dim.score) * rule.factor),
                affected_dimensions=list(rule.affected),
                remediation=rule.remediation,
            )
        )

    return sorted(recommendations, key=lambda r: _PRIORITY_ORDER[r.priority])
