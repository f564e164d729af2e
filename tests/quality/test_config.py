"""Tests for DQI scoring configuration.

Covers: default weights, grade thresholds, penalty factors, and the
deployment overrides taken from Settings.
"""

from src.config.settings import Settings
from src.quality.config import ENGINE_VERSION, REDACTION_MARKER, DQIScoringConfig


# ===================================================================
# Defaults
# ===================================================================


class TestDQIScoringConfigDefaults:
    def test_default_weights_sum_to_one(self) -> None:
        config = DQIScoringConfig()
        assert abs(sum(config.dimension_weights.values()) - 1.0) < 1e-9

    def test_default_weight_values(self) -> None:
        weights = DQIScoringConfig().dimension_weights
        assert weights == {
            "completeness": 0.20,
            "consistency": 0.15,
            "uniqueness": 0.15,
            "validity": 0.15,
            "timeliness": 0.10,
            "accuracy": 0.15,
            "integrity": 0.10,
        }

    def test_default_grade_thresholds(self) -> None:
        assert DQIScoringConfig().grade_thresholds == {"A": 90, "B": 80, "C": 70, "D": 60}

    def test_penalty_factors(self) -> None:
        config = DQIScoringConfig()
        assert config.completeness_penalty == 150
        assert config.consistency_penalty == 500
        assert config.uniqueness_duplicate_penalty == 300
        assert config.uniqueness_identifier_penalty == 20
        assert config.validity_penalty == 300
        assert config.accuracy_penalty == 300
        assert config.integrity_penalty == 100

    def test_profiling_limits(self) -> None:
        config = DQIScoringConfig()
        assert config.max_sample_values == 3
        assert config.hash_char_limit == 10_000
        assert config.redaction_marker == REDACTION_MARKER

    def test_engine_version(self) -> None:
        assert ENGINE_VERSION == "1.0.0"


# ===================================================================
# Overrides
# ===================================================================


class TestDQIScoringConfigOverrides:
    def test_custom_weights(self) -> None:
        config = DQIScoringConfig(dimension_weights={"completeness": 1.0})
        assert config.dimension_weights == {"completeness": 1.0}

    def test_from_settings(self) -> None:
        settings = Settings(DQI_HASH_CHAR_LIMIT=500, DQI_MAX_SAMPLE_VALUES=1)
        config = DQIScoringConfig.from_settings(settings)
        assert config.hash_char_limit == 500
        assert config.max_sample_values == 1
        assert config.completeness_penalty == 150
