"""DQI scoring configuration.

Holds the policy constants of the DQI engine: base dimension weights,
grade thresholds, penalty factors, recommendation thresholds, and the
redaction heuristics. The penalty factors are empirical tuning values;
defaults reproduce the reference scoring exactly and can be overridden
per deployment.

Deterministic -- no LLM calls.
"""

from __future__ import annotations

from pydantic import Field

from src.config.settings import Settings
from src.models.common import DQIBase

ENGINE_VERSION = "1.0.0"
REDACTION_MARKER = "***REDACTED***"


class DQIScoringConfig(DQIBase):
    """Configuration for the DQI engine.

    Controls schema profiling limits, per-dimension penalty factors,
    composite weighting and grading, and recommendation cut points.
    """

    # --- Composite ---

    dimension_weights: dict[str, float] = Field(
        default_factory=lambda: {
            "completeness": 0.20,
            "consistency": 0.15,
            "uniqueness": 0.15,
            "validity": 0.15,
            "timeliness": 0.10,
            "accuracy": 0.15,
            "integrity": 0.10,
        },
    )

    grade_thresholds: dict[str, int] = Field(
        default_factory=lambda: {
            "A": 90,
            "B": 80,
            "C": 70,
            "D": 60,
        },
    )

    confidence_base: float = 70.0
    confidence_log_factor: float = 10.0
    confidence_cap: int = 95

    # --- Schema extraction ---

    max_sample_values: int = 3
    pattern_scan_limit: int = 100
    sample_truncate_length: int = 50
    mixed_dominance_ratio: float = 0.8
    hash_char_limit: int = 10_000
    redaction_marker: str = REDACTION_MARKER

    identifier_name_hints: list[str] = Field(
        default_factory=lambda: ["id", "key", "code", "ref", "num", "no"],
    )

    sensitive_column_names: list[str] = Field(
        default_factory=lambda: [
            "pan", "card_number", "cardnumber", "card_no", "cc_number",
            "cvv", "cvc", "security_code", "ssn", "social_security",
            "password", "pin", "secret", "token", "auth_code",
        ],
    )

    # --- Dimension penalties ---

    completeness_penalty: float = 150.0
    completeness_column_null_threshold: float = 0.05
    completeness_overall_finding_below: int = 90

    consistency_penalty: float = 500.0
    consistency_mixed_share: float = 0.3
    consistency_multi_pattern_share: float = 0.1
    consistency_case_variant_weight: int = 5

    uniqueness_duplicate_penalty: float = 300.0
    uniqueness_identifier_penalty: float = 20.0

    validity_penalty: float = 300.0
    validity_outlier_sigma: float = 3.0
    positive_field_names: list[str] = Field(
        default_factory=lambda: [
            "amount", "price", "quantity", "count",
            "total", "balance", "fee", "cost",
        ],
    )
    null_like_strings: list[str] = Field(
        default_factory=lambda: ["null", "na", "n/a", "none", "undefined", "-", ""],
    )

    timeliness_future_penalty: float = 150.0
    timeliness_invalid_penalty: float = 100.0
    timeliness_stale_penalty: float = 30.0
    timeliness_stale_days: int = 2 * 365
    timeliness_no_dates_score: int = 80

    accuracy_penalty: float = 300.0
    accuracy_mixed_share: float = 0.2

    integrity_penalty: float = 100.0
    integrity_min_columns: int = 3
    integrity_empty_row_ratio: float = 0.5
    integrity_empty_row_weight: int = 2
    integrity_missing_currency_share: float = 0.1

    # --- Risk and compliance ---

    warning_band_floor: int = 60
    warning_band_ceiling: int = 80
    non_compliant_below: int = 50
    remediation_composite_below: int = 70
    remediation_dimension_below: int = 60

    @classmethod
    def from_settings(cls, settings: Settings) -> DQIScoringConfig:
        """Default policy with the deployment overrides from ``Settings``."""
        return cls(
            hash_char_limit=settings.DQI_HASH_CHAR_LIMIT,
            max_sample_values=settings.DQI_MAX_SAMPLE_VALUES,
        )
