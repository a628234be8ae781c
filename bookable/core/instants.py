"""Normalisation of caller-supplied instants onto a single UTC scale."""

from __future__ import annotations

from datetime import date, datetime, timezone

from pydantic import TypeAdapter, ValidationError

from ..config import get_settings
from .exceptions import UnparsableInstantError

Instant = datetime | date | str

_DATETIME_ADAPTER = TypeAdapter(datetime)


def _is_number(text: str) -> bool:
    try:
        float(text)
    except ValueError:
        return False
    return True


def as_utc(value: datetime | None) -> datetime | None:
    """Return ``value`` as an aware UTC datetime.

    Only for values read back from storage: the bookings columns always
    write UTC, and SQLite drops the offset on the way back.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_instant(value: Instant) -> datetime:
    """Parse a caller-supplied instant.

    Accepts datetimes, dates (taken as midnight) and ISO-8601 strings. Naive
    values are read in the configured reference zone, never the host's local
    zone. The result is always an aware UTC datetime.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        # pydantic reads bare numbers as Unix timestamps; only ISO-8601 text is an instant
        if _is_number(text):
            raise UnparsableInstantError(value)
        try:
            parsed = _DATETIME_ADAPTER.validate_python(text)
        except ValidationError as exc:
            raise UnparsableInstantError(value) from exc
    else:
        raise UnparsableInstantError(value)

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=get_settings().zone)
    return parsed.astimezone(timezone.utc)
