"""Errors raised by the booking query engine."""

from datetime import datetime
from typing import Any


class BookingQueryError(Exception):
    pass


class InvalidIntervalError(BookingQueryError, ValueError):
    """Raised when a candidate interval does not end after it starts."""

    def __init__(self, starts_at: datetime, ends_at: datetime) -> None:
        self.starts_at = starts_at
        self.ends_at = ends_at
        super().__init__(
            "Booking end must be after start "
            f"(starts_at={starts_at.isoformat()}, ends_at={ends_at.isoformat()})"
        )


class UnparsableInstantError(BookingQueryError, ValueError):
    """Raised when a date/time parameter cannot be turned into an instant."""

    def __init__(self, value: Any) -> None:
        self.value = value
        super().__init__(f"Cannot parse {value!r} as an instant")


__all__ = [
    "BookingQueryError",
    "InvalidIntervalError",
    "UnparsableInstantError",
]
