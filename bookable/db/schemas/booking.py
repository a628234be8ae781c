from datetime import datetime
from enum import Enum as PyEnum
from pydantic import BaseModel, ConfigDict, field_validator

from ...core.instants import as_utc, parse_instant
from .owner import OwnerRef


class BookingState(str, PyEnum):
    past = "past"
    current = "current"
    future = "future"
    cancelled = "cancelled"
    unscheduled = "unscheduled"


class Booking(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int | None = None
    owner: OwnerRef
    starts_at: datetime | None = None
    ends_at: datetime | None = None
    canceled_at: datetime | None = None

    @field_validator("starts_at", "ends_at", "canceled_at", mode="before")
    @classmethod
    def _normalise_instant(cls, value):
        if value is None:
            return None
        return parse_instant(value)

    @classmethod
    def from_row(cls, row) -> "Booking":
        """Build a snapshot from an ORM row; naive stored values are UTC."""
        return cls(
            id=row.id,
            owner=row.owner,
            starts_at=as_utc(row.starts_at),
            ends_at=as_utc(row.ends_at),
            canceled_at=as_utc(row.canceled_at),
        )
