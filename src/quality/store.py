"""Report store contract and in-memory implementation.

A report store keeps one opaque serialized ``DQIReport`` per string key
with put/get/delete semantics. The engine never touches a store; the
caller decides where a report goes after ``DQIEngine.analyze`` returns.

The in-memory store is for tests and single-process use. Durable
deployments use ``src.repositories.reports.DQIReportRepository``, the
async counterpart of this contract: the same put/get/delete semantics
over an ``AsyncSession``, awaited instead of called, with ``put``
returning the stored row and an extra ``list_keys``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from src.models.dqi import DQIReport


class ReportStore(ABC):
    """ABC for key -> report blob storage."""

    @abstractmethod
    def put(self, key: str, report: DQIReport) -> None: ...

    @abstractmethod
    def get(self, key: str) -> DQIReport | None: ...

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Remove the report under ``key``. Returns True if one existed."""


class InMemoryReportStore(ReportStore):
    """In-memory implementation for tests.

    Reports are held as JSON strings, exactly as a blob store would see
    them, and deserialized on every ``get``.
    """

    def __init__(self) -> None:
        self._blobs: dict[str, str] = {}

    def put(self, key: str, report: DQIReport) -> None:
        self._blobs[key] = report.model_dump_json()

    def get(self, key: str) -> DQIReport | None:
        blob = self._blobs.get(key)
        if blob is None:
            return None
        return DQIReport.model_validate_json(blob)

    def delete(self, key: str) -> bool:
        return self._blobs.pop(key, None) is not None

    def keys(self) -> list[str]:
        return list(self._blobs)
