"""In-memory booking classification, range filtering and overlap resolution.

Every function works on any iterable of booking-shaped objects (ORM rows,
``schemas.Booking`` snapshots, plain dataclasses): only ``starts_at``,
``ends_at`` and ``canceled_at`` are read, and naive values are taken in
the configured reference zone, the same as query parameters. Results keep
the input order.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Iterable, Protocol, TypeVar

from ..config import get_settings
from ..core.constants import CANCELED_AT, ENDS_AT, STARTS_AT
from ..core.exceptions import InvalidIntervalError
from ..core.instants import Instant, parse_instant
from ..db.schemas import BookingState, OwnerRef

logger = logging.getLogger(__name__)


class BookingLike(Protocol):
    starts_at: datetime | None
    ends_at: datetime | None
    canceled_at: datetime | None


B = TypeVar("B", bound=BookingLike)


def _bound(booking: BookingLike, field: str) -> datetime | None:
    value = getattr(booking, field)
    if value is None:
        return None
    return parse_instant(value)


def resolve_interval(starts_at: Instant, ends_at: Instant) -> tuple[datetime, datetime]:
    """Parse a candidate interval and reject it unless it ends after it starts."""
    start = parse_instant(starts_at)
    end = parse_instant(ends_at)
    if start >= end:
        logger.warning(
            "Rejected candidate interval",
            extra={"starts_at": start.isoformat(), "ends_at": end.isoformat()},
        )
        raise InvalidIntervalError(start, end)
    return start, end


def _resolution(resolution: timedelta | None) -> timedelta:
    if resolution is None:
        return get_settings().overlap_resolution
    return resolution


def overlap_step(starts_at: datetime, ends_at: datetime, resolution: timedelta) -> timedelta:
    """The resolution, capped at the candidate's length.

    A step longer than the candidate would leave an existing booking that
    starts together with it matching none of the conflict cases.
    """
    return min(resolution, ends_at - starts_at)


# Predicates

def is_cancelled(booking: BookingLike) -> bool:
    return booking.canceled_at is not None


def is_past(booking: BookingLike, now: datetime) -> bool:
    ends_at = _bound(booking, ENDS_AT)
    return not is_cancelled(booking) and ends_at is not None and ends_at < now


def is_future(booking: BookingLike, now: datetime) -> bool:
    starts_at = _bound(booking, STARTS_AT)
    return not is_cancelled(booking) and starts_at is not None and starts_at > now


def is_current(booking: BookingLike, now: datetime) -> bool:
    starts_at = _bound(booking, STARTS_AT)
    ends_at = _bound(booking, ENDS_AT)
    if is_cancelled(booking) or starts_at is None or ends_at is None:
        return False
    return starts_at < now < ends_at


def state_of(booking: BookingLike, now: Instant) -> BookingState:
    now = parse_instant(now)
    if is_cancelled(booking):
        return BookingState.cancelled
    if is_current(booking, now):
        return BookingState.current
    if is_past(booking, now):
        return BookingState.past
    if is_future(booking, now):
        return BookingState.future
    return BookingState.unscheduled


def overlaps(
    booking: BookingLike,
    starts_at: datetime,
    ends_at: datetime,
    resolution: timedelta,
) -> bool:
    """Whether an existing booking conflicts with the candidate ``[starts_at, ends_at)``.

    The existing booking conflicts when it starts inside the window, ends
    inside it, or strictly contains it. ``resolution`` is the step that keeps
    a booking ending exactly at ``starts_at`` (or starting exactly at
    ``ends_at``) out of the result.
    """
    if is_cancelled(booking):
        return False
    resolution = overlap_step(starts_at, ends_at, resolution)
    existing_start = _bound(booking, STARTS_AT)
    existing_end = _bound(booking, ENDS_AT)

    if existing_start is not None and starts_at <= existing_start <= ends_at - resolution:
        return True
    if existing_end is not None and starts_at + resolution <= existing_end <= ends_at:
        return True
    return (
        existing_start is not None
        and existing_end is not None
        and existing_start < starts_at
        and existing_end > ends_at
    )


# Classifier

def past(bookings: Iterable[B], now: Instant) -> list[B]:
    now = parse_instant(now)
    return [booking for booking in bookings if is_past(booking, now)]


def future(bookings: Iterable[B], now: Instant) -> list[B]:
    now = parse_instant(now)
    return [booking for booking in bookings if is_future(booking, now)]


def current(bookings: Iterable[B], now: Instant) -> list[B]:
    now = parse_instant(now)
    return [booking for booking in bookings if is_current(booking, now)]


def cancelled(bookings: Iterable[B]) -> list[B]:
    return [booking for booking in bookings if is_cancelled(booking)]


def partition(bookings: Iterable[B], now: Instant) -> dict[BookingState, list[B]]:
    now = parse_instant(now)
    buckets: dict[BookingState, list[B]] = {state: [] for state in BookingState}
    for booking in bookings:
        buckets[state_of(booking, now)].append(booking)
    return buckets


# Range filter

def _in_range(
    booking: BookingLike,
    field: str,
    lower: datetime | None,
    upper: datetime | None,
) -> bool:
    if field == CANCELED_AT:
        if not is_cancelled(booking):
            return False
    elif is_cancelled(booking):
        return False
    value = _bound(booking, field)
    if value is None:
        return False
    if lower is not None and not value > lower:
        return False
    if upper is not None and not value < upper:
        return False
    return True


def _filter_range(
    bookings: Iterable[B],
    field: str,
    lower: Instant | None = None,
    upper: Instant | None = None,
) -> list[B]:
    lower = parse_instant(lower) if lower is not None else None
    upper = parse_instant(upper) if upper is not None else None
    return [booking for booking in bookings if _in_range(booking, field, lower, upper)]


def starts_before(bookings: Iterable[B], date: Instant) -> list[B]:
    return _filter_range(bookings, STARTS_AT, upper=date)


def starts_after(bookings: Iterable[B], date: Instant) -> list[B]:
    return _filter_range(bookings, STARTS_AT, lower=date)


def starts_between(bookings: Iterable[B], starts_at: Instant, ends_at: Instant) -> list[B]:
    return _filter_range(bookings, STARTS_AT, lower=starts_at, upper=ends_at)


def ends_before(bookings: Iterable[B], date: Instant) -> list[B]:
    return _filter_range(bookings, ENDS_AT, upper=date)


def ends_after(bookings: Iterable[B], date: Instant) -> list[B]:
    return _filter_range(bookings, ENDS_AT, lower=date)


def ends_between(bookings: Iterable[B], starts_at: Instant, ends_at: Instant) -> list[B]:
    return _filter_range(bookings, ENDS_AT, lower=starts_at, upper=ends_at)


def cancelled_before(bookings: Iterable[B], date: Instant) -> list[B]:
    return _filter_range(bookings, CANCELED_AT, upper=date)


def cancelled_after(bookings: Iterable[B], date: Instant) -> list[B]:
    return _filter_range(bookings, CANCELED_AT, lower=date)


def cancelled_between(bookings: Iterable[B], starts_at: Instant, ends_at: Instant) -> list[B]:
    return _filter_range(bookings, CANCELED_AT, lower=starts_at, upper=ends_at)


# Overlap resolver

def conflicting(
    bookings: Iterable[B],
    starts_at: Instant,
    ends_at: Instant,
    *,
    resolution: timedelta | None = None,
    owner: OwnerRef | None = None,
) -> list[B]:
    """Return the non-cancelled bookings that conflict with ``[starts_at, ends_at)``.

    Raises ``InvalidIntervalError`` when the candidate does not end after it
    starts. An empty result means the interval is free.
    """
    start, end = resolve_interval(starts_at, ends_at)
    step = _resolution(resolution)
    conflicts = [booking for booking in bookings if overlaps(booking, start, end, step)]
    if conflicts:
        logger.info(
            "Found conflicting bookings",
            extra={
                "owner": str(owner) if owner is not None else None,
                "starts_at": start.isoformat(),
                "ends_at": end.isoformat(),
                "count": len(conflicts),
            },
        )
    else:
        logger.debug(
            "Interval is free",
            extra={
                "owner": str(owner) if owner is not None else None,
                "starts_at": start.isoformat(),
                "ends_at": end.isoformat(),
            },
        )
    return conflicts


def is_available(
    bookings: Iterable[BookingLike],
    starts_at: Instant,
    ends_at: Instant,
    *,
    resolution: timedelta | None = None,
) -> bool:
    return not conflicting(bookings, starts_at, ends_at, resolution=resolution)
