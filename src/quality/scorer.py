"""Composite scorer: weights, grade and confidence over the 7 dimensions.

Runs every ``DimensionRule`` from the registry, re-normalizes the base
weights of the applicable dimensions so they sum to 1, and derives the
composite score, letter grade and confidence.

Deterministic -- no LLM calls.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from datetime import UTC, datetime

from src.models.dqi import (
    CompositeDQS,
    DatasetMetadata,
    DQIDimension,
    QualityGrade,
    RawRow,
)
from src.quality.config import DQIScoringConfig
from src.quality.dimensions import (
    DIMENSION_RULES,
    NOT_APPLICABLE_FINDING,
    DimensionRule,
    ScoringContext,
)
from src.quality.rounding import round_half_up, round_int


def score_to_grade(
    score: float,
    thresholds: dict[str, int] | None = None,
) -> QualityGrade:
    """Convert a 0-100 score to a letter grade (inclusive lower bounds)."""
    t = thresholds or DQIScoringConfig().grade_thresholds
    if score >= t["A"]:
        return QualityGrade.A
    if score >= t["B"]:
        return QualityGrade.B
    if score >= t["C"]:
        return QualityGrade.C
    if score >= t["D"]:
        return QualityGrade.D
    return QualityGrade.F


class DQIScorer:
    """Scores all 7 quality dimensions and combines them.

    Dimensions are evaluated in registry order. Inapplicable dimensions
    are still reported, with score 0 and weight 0, and never affect the
    composite.
    """

    def __init__(
        self,
        config: DQIScoringConfig | None = None,
        rules: Sequence[DimensionRule] = DIMENSION_RULES,
    ) -> None:
        self._config = config or DQIScoringConfig()
        self._rules = tuple(rules)

    # ---------------------------------------------------------------
    # Dimensions
    # ---------------------------------------------------------------

    def score_dimensions(
        self,
        rows: Sequence[RawRow],
        metadata: DatasetMetadata,
        now: datetime | None = None,
    ) -> list[DQIDimension]:
        """Evaluate every rule and return weight-normalized dimensions."""
        ctx = ScoringContext(
            rows=rows,
            metadata=metadata,
            config=self._config,
            now=now or datetime.now(tz=UTC),
        )

        applicable = {
            rule.id: rule.is_applicable(metadata, self._config) for rule in self._rules
        }
        total_weight = sum(
            self._base_weight(rule) for rule in self._rules if applicable[rule.id]
        )

        dimensions: list[DQIDimension] = []
        for rule in self._rules:
            if not applicable[rule.id]:
                dimensions.append(
                    DQIDimension(
                        id=rule.id,
                        name=rule.name,
                        score=0,
                        weight=0.0,
                        applicable=False,
                        findings=[NOT_APPLICABLE_FINDING],
                        impacted_columns=[],
                    )
                )
                continue

            result = rule.score(ctx)
            weight = (
                round_half_up(self._base_weight(rule) / total_weight, 2)
                if total_weight > 0
                else 0.0
            )
            dimensions.append(
                DQIDimension(
                    id=rule.id,
                    name=rule.name,
                    score=result.score,
                    weight=weight,
                    applicable=True,
                    findings=result.findings,
                    impacted_columns=result.impacted_columns,
                )
            )

        return dimensions

    def _base_weight(self, rule: DimensionRule) -> float:
        return self._config.dimension_weights.get(rule.id.value, 0.0)

    # ---------------------------------------------------------------
    # Composite
    # ---------------------------------------------------------------

    def compute_confidence(self, row_count: int) -> int:
        """Grows with log10(row_count); ~70 for tiny datasets, capped."""
        cfg = self._config
        raw = cfg.confidence_base + math.log10(max(row_count, 1)) * cfg.confidence_log_factor
        return min(cfg.confidence_cap, round_int(raw))

    def composite_score(
        self,
        dimensions: Sequence[DQIDimension],
        row_count: int,
    ) -> CompositeDQS:
        """Weighted composite of applicable dimensions with grade and confidence."""
        weighted = sum(d.score * d.weight for d in dimensions if d.applicable)
        score = max(0, min(100, round_int(weighted)))
        return CompositeDQS(
            score=score,
            grade=score_to_grade(score, self._config.grade_thresholds),
            confidence=self.compute_confidence(row_count),
        )
