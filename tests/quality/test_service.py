"""Tests for DQIEngine: the end-to-end analysis pipeline.

Covers: report shape, duplicate and identifier scoring, dimension
applicability, failure modes, sample redaction, determinism, row-order
invariance, content hashing, file input, and structured log events.
"""

from __future__ import annotations

import hashlib
from datetime import datetime
from pathlib import Path

import pytest
from structlog.testing import capture_logs

from src.models.dqi import ComplianceStatus, DimensionId, QualityGrade
from src.quality.config import ENGINE_VERSION, REDACTION_MARKER, DQIScoringConfig
from src.quality.errors import DatasetReadError, EmptyDatasetError
from src.quality.service import DQIEngine, compute_content_hash

pytestmark = pytest.mark.anyio

DUPLICATE_CSV = (
    "id,amount,date\n"
    "1,100,2024-01-01\n"
    "2,200,2024-01-02\n"
    "3,300,2024-01-03\n"
    "4,400,2024-01-04\n"
    "4,400,2024-01-04\n"
)

TRANSACTIONS_CSV = (
    "transaction_id,customer,amount,currency,txn_date,status\n"
    "T-001,alice,120.50,USD,2026-01-15,settled\n"
    "T-002,bob,75.00,USD,2026-02-01,settled\n"
    "T-003,,-20.00,EUR,2026-03-10,refunded\n"
    "T-004,dave,0,usd,2027-01-01,\n"
    "T-004,dave,0,usd,2027-01-01,\n"
    "T-005,erin,n/a,GBP,bad-date,settled\n"
    "T-006,frank,310.25,USD,03/04/2026,Settled\n"
)


def _reversed_rows(text: str) -> str:
    header, *rows = text.strip().split("\n")
    return "\n".join([header, *reversed(rows)])


# ===================================================================
# Report shape
# ===================================================================


class TestReportShape:
    async def test_duplicate_dataset(self, dqi_engine: DQIEngine, fixed_now) -> None:
        report = await dqi_engine.analyze(
            DUPLICATE_CSV.encode(), file_name="txns.csv", now=fixed_now
        )

        meta = report.dataset_metadata
        assert meta.file_name == "txns.csv"
        assert meta.file_size == len(DUPLICATE_CSV.encode())
        assert meta.row_count == 5
        assert meta.column_count == 3
        assert [c.name for c in meta.columns] == ["id", "amount", "date"]
        assert meta.statistical_summary.duplicate_rows == 1
        assert meta.statistical_summary.unique_rows == 4

        assert report.dimension(DimensionId.UNIQUENESS).score == 36
        integrity = report.dimension(DimensionId.INTEGRITY)
        assert not integrity.applicable
        assert integrity.weight == 0.0

    async def test_seven_dimensions_in_order(self, dqi_engine: DQIEngine, fixed_now) -> None:
        report = await dqi_engine.analyze(
            TRANSACTIONS_CSV.encode(), file_name="t.csv", now=fixed_now
        )
        assert [d.id for d in report.dimensions] == list(DimensionId)

    async def test_weights_and_bounds(self, dqi_engine: DQIEngine, fixed_now) -> None:
        report = await dqi_engine.analyze(
            TRANSACTIONS_CSV.encode(), file_name="t.csv", now=fixed_now
        )
        applicable = [d for d in report.dimensions if d.applicable]
        assert abs(sum(d.weight for d in applicable) - 1.0) <= 0.02
        for dim in report.dimensions:
            assert 0 <= dim.score <= 100
            assert len(set(dim.impacted_columns)) == len(dim.impacted_columns)
        assert 0 <= report.composite_dqs.score <= 100
        assert 70 <= report.composite_dqs.confidence <= 95

    async def test_explanations_cover_applicable_dimensions(
        self, dqi_engine: DQIEngine, fixed_now
    ) -> None:
        report = await dqi_engine.analyze(b"a,b\n1,x\n2,y\n", file_name="t.csv", now=fixed_now)
        assert [e.dimension for e in report.explanations] == [
            d.name for d in report.dimensions if d.applicable
        ]

    async def test_timeliness_not_applicable_without_dates(
        self, dqi_engine: DQIEngine, fixed_now
    ) -> None:
        report = await dqi_engine.analyze(b"a,b\n1,x\n2,y\n", file_name="t.csv", now=fixed_now)
        timeliness = report.dimension(DimensionId.TIMELINESS)
        assert not timeliness.applicable
        assert timeliness.score == 0
        assert timeliness.findings == ["Dimension not applicable for this dataset"]

    async def test_clean_dataset_is_compliant(self, dqi_engine: DQIEngine, fixed_now) -> None:
        report = await dqi_engine.analyze(
            b"a,b\n1,x\n2,y\n3,z\n", file_name="clean.csv", now=fixed_now
        )
        assert report.composite_dqs.score == 100
        assert report.composite_dqs.grade == QualityGrade.A
        assert report.compliance_status == ComplianceStatus.COMPLIANT
        assert report.recommendations == []
        assert report.overall_risk_summary.startswith("LOW RISK")

    async def test_audit_trail(self, dqi_engine: DQIEngine, fixed_now) -> None:
        report = await dqi_engine.analyze(b"a\n1\n", file_name="t.csv", now=fixed_now)
        audit = report.audit_trail
        assert audit.evaluation_id.version == 7
        assert audit.engine_version == ENGINE_VERSION
        assert audit.checksum_verified is True
        assert audit.timestamp.tzinfo is not None


# ===================================================================
# Score bounds
# ===================================================================


class TestScoreBounds:
    @pytest.mark.parametrize(
        "content",
        [
            pytest.param(b"id,amount,date\n1,100,2024-01-01\n", id="single-row"),
            pytest.param(b"id,note,amount\n1,,10\n2,null,20\n3,NA,30\n", id="all-null-column"),
            pytest.param(b"id,amount\n1,5\n1,5\n1,5\n", id="all-duplicate"),
            pytest.param(b"a,b,c,d,e\n,,,,\n", id="single-all-null-row"),
            pytest.param(b"id,amount\n1,1e307\n2,5\n", id="huge-amount"),
        ],
    )
    async def test_scores_and_weights_stay_in_range(
        self, dqi_engine: DQIEngine, fixed_now, content: bytes
    ) -> None:
        report = await dqi_engine.analyze(content, file_name="edge.csv", now=fixed_now)

        for dim in report.dimensions:
            assert 0 <= dim.score <= 100
        assert 0 <= report.composite_dqs.score <= 100
        applicable = [d for d in report.dimensions if d.applicable]
        assert abs(sum(d.weight for d in applicable) - 1.0) <= 0.02

    async def test_all_duplicate_rows_floor_uniqueness(
        self, dqi_engine: DQIEngine, fixed_now
    ) -> None:
        report = await dqi_engine.analyze(
            b"id,amount\n1,5\n1,5\n1,5\n", file_name="dup.csv", now=fixed_now
        )
        assert report.dataset_metadata.statistical_summary.duplicate_rows == 2
        assert report.dimension(DimensionId.UNIQUENESS).score == 0

    async def test_huge_amount_profiles_without_statistics(
        self, dqi_engine: DQIEngine, fixed_now
    ) -> None:
        with capture_logs() as logs:
            report = await dqi_engine.analyze(
                b"id,amount\n1,1e307\n2,5\n", file_name="big.csv", now=fixed_now
            )

        amount = report.dataset_metadata.columns[1]
        assert amount.statistics is None
        assert logs[-1]["event"] == "dqi.analysis.completed"
        assert "Infinity" not in report.model_dump_json()


# ===================================================================
# Failure modes
# ===================================================================


class TestFailures:
    @pytest.mark.parametrize("content", [b"", b"   \n", b"id,amount\n", b"a,b\n1\n2,3,4\n"])
    async def test_no_rows_is_empty_dataset(self, dqi_engine: DQIEngine, content: bytes) -> None:
        with pytest.raises(EmptyDatasetError, match="No data found in file"):
            await dqi_engine.analyze(content, file_name="empty.csv")

    async def test_undecodable_content(self, dqi_engine: DQIEngine) -> None:
        with pytest.raises(DatasetReadError):
            await dqi_engine.analyze(b"a,b\n\xff\xfe,1\n", file_name="bad.csv")

    async def test_missing_file(self, dqi_engine: DQIEngine, tmp_path: Path) -> None:
        with pytest.raises(DatasetReadError):
            await dqi_engine.analyze_file(tmp_path / "nope.csv")


# ===================================================================
# Reference time and settings
# ===================================================================


class TestReferenceTime:
    async def test_naive_now_taken_as_utc(self, dqi_engine: DQIEngine, fixed_now) -> None:
        content = b"id,order_date\n1,2024-01-01\n2,2027-01-01\n"
        naive = datetime(2026, 6, 1)

        from_naive = await dqi_engine.analyze(content, file_name="t.csv", now=naive)
        from_aware = await dqi_engine.analyze(content, file_name="t.csv", now=fixed_now)

        assert [d.score for d in from_naive.dimensions] == [
            d.score for d in from_aware.dimensions
        ]
        assert (
            from_naive.dataset_metadata.statistical_summary.anomaly_count
            == from_aware.dataset_metadata.statistical_summary.anomaly_count
        )


class TestSettingsWiring:
    async def test_default_config_reads_settings(self, monkeypatch) -> None:
        monkeypatch.setenv("DQI_MAX_SAMPLE_VALUES", "1")
        monkeypatch.setenv("DQI_HASH_CHAR_LIMIT", "2048")

        engine = DQIEngine()

        assert engine.config.max_sample_values == 1
        assert engine.config.hash_char_limit == 2048

    async def test_explicit_config_wins(self, monkeypatch) -> None:
        monkeypatch.setenv("DQI_MAX_SAMPLE_VALUES", "1")
        engine = DQIEngine(DQIScoringConfig(max_sample_values=2))
        assert engine.config.max_sample_values == 2


# ===================================================================
# Privacy
# ===================================================================


class TestRedaction:
    async def test_card_numbers_never_leak(self, dqi_engine: DQIEngine, fixed_now) -> None:
        content = (
            "card_number,amount\n"
            "4111-1111-1111-1111,10\n"
            "5500-0000-0000-0004,20\n"
        ).encode()
        report = await dqi_engine.analyze(content, file_name="cards.csv", now=fixed_now)

        card = report.dataset_metadata.columns[0]
        assert card.sample_values == [REDACTION_MARKER, REDACTION_MARKER]
        dumped = report.model_dump_json()
        assert "4111-1111-1111-1111" not in dumped
        assert "5500-0000-0000-0004" not in dumped

    async def test_sample_limit_from_config(self, fixed_now) -> None:
        engine = DQIEngine(DQIScoringConfig(max_sample_values=1))
        report = await engine.analyze(b"city\nOslo\nLima\n", file_name="c.csv", now=fixed_now)
        assert report.dataset_metadata.columns[0].sample_values == ["Oslo"]


# ===================================================================
# Determinism
# ===================================================================


class TestDeterminism:
    async def test_same_input_same_report(self, dqi_engine: DQIEngine, fixed_now) -> None:
        content = TRANSACTIONS_CSV.encode()
        first = await dqi_engine.analyze(content, file_name="t.csv", now=fixed_now)
        second = await dqi_engine.analyze(content, file_name="t.csv", now=fixed_now)

        exclude = {"audit_trail": True, "dataset_metadata": {"analyzed_at": True}}
        assert first.model_dump(exclude=exclude) == second.model_dump(exclude=exclude)
        assert first.audit_trail.evaluation_id != second.audit_trail.evaluation_id

    async def test_row_order_does_not_change_scores(
        self, dqi_engine: DQIEngine, fixed_now
    ) -> None:
        original = await dqi_engine.analyze(
            TRANSACTIONS_CSV.encode(), file_name="t.csv", now=fixed_now
        )
        shuffled = await dqi_engine.analyze(
            _reversed_rows(TRANSACTIONS_CSV).encode(), file_name="t.csv", now=fixed_now
        )

        assert [d.score for d in original.dimensions] == [d.score for d in shuffled.dimensions]
        assert original.composite_dqs == shuffled.composite_dqs
        assert (
            original.dataset_metadata.statistical_summary
            == shuffled.dataset_metadata.statistical_summary
        )
        assert original.compliance_status == shuffled.compliance_status


# ===================================================================
# Hashing
# ===================================================================


class TestContentHash:
    async def test_sha256_prefixed(self) -> None:
        expected = "sha256:" + hashlib.sha256(b"a,b\n1,2").hexdigest()
        assert await compute_content_hash("a,b\n1,2") == expected

    async def test_only_leading_characters_hashed(self) -> None:
        prefix = "a" * 10_000
        assert await compute_content_hash(prefix + "x") == await compute_content_hash(
            prefix + "y"
        )

    async def test_report_hash(self, dqi_engine: DQIEngine, fixed_now) -> None:
        text = "a,b\n1,2\n"
        report = await dqi_engine.analyze(text.encode(), file_name="t.csv", now=fixed_now)
        expected = "sha256:" + hashlib.sha256(text.encode()).hexdigest()
        assert report.dataset_metadata.data_hash == expected


# ===================================================================
# File input and logging
# ===================================================================


class TestAnalyzeFile:
    async def test_reads_file(self, dqi_engine: DQIEngine, tmp_path: Path, fixed_now) -> None:
        path = tmp_path / "orders.csv"
        path.write_bytes(DUPLICATE_CSV.encode())

        report = await dqi_engine.analyze_file(path, now=fixed_now)

        assert report.dataset_metadata.file_name == "orders.csv"
        assert report.dataset_metadata.row_count == 5

    async def test_accepts_str_path(self, dqi_engine: DQIEngine, tmp_path: Path) -> None:
        path = tmp_path / "orders.csv"
        path.write_bytes(b"a\n1\n")
        report = await dqi_engine.analyze_file(str(path))
        assert report.dataset_metadata.file_name == "orders.csv"


class TestLogging:
    async def test_completed_event(self, dqi_engine: DQIEngine, fixed_now) -> None:
        with capture_logs() as logs:
            report = await dqi_engine.analyze(b"a\n1\n", file_name="t.csv", now=fixed_now)

        events = [entry["event"] for entry in logs]
        assert events == ["dqi.analysis.started", "dqi.analysis.completed"]
        completed = logs[-1]
        assert completed["evaluation_id"] == str(report.audit_trail.evaluation_id)
        assert completed["score"] == report.composite_dqs.score

    async def test_failed_event_then_reraise(self, dqi_engine: DQIEngine) -> None:
        with capture_logs() as logs, pytest.raises(EmptyDatasetError):
            await dqi_engine.analyze(b"", file_name="empty.csv")

        failed = logs[-1]
        assert failed["event"] == "dqi.analysis.failed"
        assert failed["log_level"] == "warning"
        assert failed["error_type"] == "EmptyDatasetError"
