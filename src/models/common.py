"""Shared types and the base model used across DQI domain models."""

from datetime import UTC, datetime
from typing import Annotated
from uuid import UUID

from pydantic import BaseModel, Field
from uuid_extensions import uuid7


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(tz=UTC)


def new_uuid7() -> UUID:
    """Time-sortable evaluation identifier."""
    return uuid7()


# --- Reusable annotated types ---

UUIDv7 = Annotated[UUID, Field(description="Time-sortable UUID v7.")]
UTCTimestamp = Annotated[
    datetime, Field(description="UTC timezone-aware timestamp.")
]
Ratio = Annotated[float, Field(ge=0.0, le=1.0, description="Share in [0, 1].")]
Score = Annotated[int, Field(ge=0, le=100, description="Integer score in [0, 100].")]
Count = Annotated[int, Field(ge=0)]


# --- Base model ---


class DQIBase(BaseModel):
    """Base model with common configuration for all DQI Pydantic models."""

    model_config = {
        "populate_by_name": True,
        "protected_namespaces": (),
    }
