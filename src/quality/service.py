"""DQI engine: report assembler and public entry point.

Runs the pipeline strictly forward:

1. Decode and parse the CSV into typed rows (transient).
2. Extract the per-column schema and the dataset summary.
3. Hash the first ``hash_char_limit`` characters of the content.
4. Score the 7 dimensions and the composite.
5. Derive explanations, recommendations, risk and compliance.
6. Stamp the audit trail and return the immutable ``DQIReport``.

Raw rows never leave this module; once ``analyze`` returns, nothing
references them. The engine holds no per-call state, so one instance
can serve concurrent analyses.
"""

from __future__ import annotations

import hashlib
from datetime import UTC, datetime
from pathlib import Path

import anyio
import structlog

from src.config.settings import get_settings
from src.models.common import new_uuid7, utc_now
from src.models.dqi import AuditTrail, DatasetMetadata, DQIReport
from src.quality.config import ENGINE_VERSION, DQIScoringConfig
from src.quality.errors import DQIError, EmptyDatasetError, HashComputationError
from src.quality.explain import explain_dimensions
from src.quality.reader import decode_content, parse_table, read_bytes
from src.quality.recommendations import generate_recommendations
from src.quality.risk import compliance_status, risk_summary
from src.quality.schema import build_statistical_summary, extract_schema
from src.quality.scorer import DQIScorer

logger = structlog.get_logger(__name__)


def _sha256(text: str) -> str:
    """Compute SHA-256 and return in canonical 'sha256:<hex>' format."""
    digest = hashlib.sha256(text.encode("utf-8")).hexdigest()
    return f"sha256:{digest}"


async def compute_content_hash(text: str, char_limit: int = 10_000) -> str:
    """Hash the leading ``char_limit`` characters off the event loop."""
    try:
        return await anyio.to_thread.run_sync(_sha256, text[:char_limit])
    except (UnicodeEncodeError, ValueError) as exc:
        msg = f"Failed to compute dataset hash: {exc}"
        raise HashComputationError(msg) from exc


def _reference_time(now: datetime | None) -> datetime:
    if now is None:
        return datetime.now(tz=UTC)
    if now.tzinfo is None:
        return now.replace(tzinfo=UTC)
    return now


class DQIEngine:
    """Stateless Data Quality Intelligence engine.

    Without an explicit ``config`` the engine applies the deployment
    overrides from ``Settings`` (``DQI_HASH_CHAR_LIMIT``,
    ``DQI_MAX_SAMPLE_VALUES``) on top of the default scoring policy.

    Usage::

        engine = DQIEngine()
        report = await engine.analyze_file("transactions.csv")
    """

    def __init__(self, config: DQIScoringConfig | None = None) -> None:
        self._config = config or DQIScoringConfig.from_settings(get_settings())
        self._scorer = DQIScorer(config=self._config)

    @property
    def config(self) -> DQIScoringConfig:
        return self._config

    async def analyze_file(
        self,
        path: str | Path,
        *,
        now: datetime | None = None,
    ) -> DQIReport:
        """Read a CSV file and analyse it."""
        content = await read_bytes(path)
        return await self.analyze(content, file_name=Path(path).name, now=now)

    async def analyze(
        self,
        content: bytes,
        *,
        file_name: str,
        now: datetime | None = None,
    ) -> DQIReport:
        """Analyse raw CSV bytes and assemble the report.

        Args:
            content: Raw file bytes (UTF-8 CSV).
            file_name: Original file name, kept for display only.
            now: Reference time for date checks; defaults to the current
                UTC time. A naive value is taken as UTC.

        Raises:
            DatasetReadError: The content is not valid UTF-8.
            EmptyDatasetError: No data row survived parsing.
            HashComputationError: The audit hash could not be computed.
        """
        log = logger.bind(file_name=file_name, file_size=len(content))
        log.info("dqi.analysis.started")
        try:
            report = await self._analyze(content, file_name, _reference_time(now))
        except DQIError as exc:
            log.warning("dqi.analysis.failed", error=str(exc), error_type=type(exc).__name__)
            raise

        log.info(
            "dqi.analysis.completed",
            evaluation_id=str(report.audit_trail.evaluation_id),
            rows=report.dataset_metadata.row_count,
            columns=report.dataset_metadata.column_count,
            score=report.composite_dqs.score,
            grade=report.composite_dqs.grade.value,
            compliance=report.compliance_status.value,
        )
        return report

    async def _analyze(self, content: bytes, file_name: str, now: datetime) -> DQIReport:
        cfg = self._config

        text = decode_content(content)
        table = parse_table(text)
        if not table.rows:
            raise EmptyDatasetError()

        columns = extract_schema(table.headers, table.rows, cfg)
        summary = build_statistical_summary(table.headers, table.rows, columns, now, cfg)
        data_hash = await compute_content_hash(text, cfg.hash_char_limit)

        metadata = DatasetMetadata(
            file_name=file_name,
            file_size=len(content),
            row_count=len(table.rows),
            column_count=len(table.headers),
            columns=columns,
            statistical_summary=summary,
            data_hash=data_hash,
            analyzed_at=utc_now(),
        )

        dimensions = self._scorer.score_dimensions(table.rows, metadata, now)
        composite = self._scorer.composite_score(dimensions, metadata.row_count)

        # Rows are not needed past scoring.
        del table

        return DQIReport(
            dataset_metadata=metadata,
            dimensions=dimensions,
            composite_dqs=composite,
            explanations=explain_dimensions(dimensions),
            recommendations=generate_recommendations(dimensions),
            overall_risk_summary=risk_summary(composite, dimensions, cfg),
            compliance_status=compliance_status(composite, dimensions, cfg),
            audit_trail=AuditTrail(
                evaluation_id=new_uuid7(),
                timestamp=utc_now(),
                engine_version=ENGINE_VERSION,
                checksum_verified=bool(data_hash),
            ),
        )
