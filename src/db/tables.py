"""SQLAlchemy ORM table models for the DQI report store.

Reports are stored as one opaque JSON payload per key. The score, grade
and evaluation id columns are copies for listing and filtering only;
the payload is the source of truth.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import JSON

from src.db.session import Base

# JSONB on PostgreSQL, plain JSON on SQLite (for tests)
FlexJSON = JSONB().with_variant(JSON(), "sqlite")


class DQIReportRow(Base):
    __tablename__ = "dqi_reports"

    report_key: Mapped[str] = mapped_column(String(255), primary_key=True)
    evaluation_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    file_name: Mapped[str] = mapped_column(String(512), nullable=False)
    composite_score: Mapped[int] = mapped_column(Integer, nullable=False)
    grade: Mapped[str] = mapped_column(String(5), nullable=False)
    compliance_status: Mapped[str] = mapped_column(String(30), nullable=False)
    engine_version: Mapped[str] = mapped_column(String(20), nullable=False)
    payload: Mapped[dict] = mapped_column(FlexJSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
