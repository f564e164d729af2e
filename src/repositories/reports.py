"""DQI report repository: durable key -> report blob storage.

Repos take AsyncSession, call add()/flush() only, never commit().
The session provider handles commit/rollback (Unit-of-Work).

One report per key. ``put`` is idempotent: it deletes any existing row
for the same key before inserting.
"""

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.tables import DQIReportRow
from src.models.common import utc_now
from src.models.dqi import DQIReport


class DQIReportRepository:
    """Async put/get/delete of serialized DQI reports."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def put(self, key: str, report: DQIReport) -> DQIReportRow:
        """Save (or replace) the report stored under ``key``."""
        await self._session.execute(
            delete(DQIReportRow).where(DQIReportRow.report_key == key)
        )
        await self._session.flush()

        row = DQIReportRow(
            report_key=key,
            evaluation_id=report.audit_trail.evaluation_id,
            file_name=report.dataset_metadata.file_name,
            composite_score=report.composite_dqs.score,
            grade=report.composite_dqs.grade.value,
            compliance_status=report.compliance_status.value,
            engine_version=report.audit_trail.engine_version,
            payload=report.model_dump(mode="json"),
            created_at=utc_now(),
        )
        self._session.add(row)
        await self._session.flush()
        await self._session.refresh(row)
        return row

    async def get(self, key: str) -> DQIReport | None:
        """Deserialize the report stored under ``key``, if any."""
        result = await self._session.execute(
            select(DQIReportRow).where(DQIReportRow.report_key == key)
        )
        row = result.scalar_one_or_none()
        if row is None:
            return None
        return DQIReport.model_validate(row.payload)

    async def delete(self, key: str) -> bool:
        """Remove the report under ``key``. Returns True if one existed."""
        result = await self._session.execute(
            delete(DQIReportRow).where(DQIReportRow.report_key == key)
        )
        await self._session.flush()
        return result.rowcount > 0

    async def list_keys(self) -> list[str]:
        """All stored keys, newest first."""
        result = await self._session.execute(
            select(DQIReportRow.report_key).order_by(DQIReportRow.created_at.desc())
        )
        return list(result.scalars().all())
