"""SQL rendition of the booking filters.

The clause builders express the same predicates as ``booking_filters`` as
SQLAlchemy expressions so they can be composed into larger statements. The
``*_bookings`` functions scope them to one owner and run them.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from sqlalchemy import Select, and_, or_, select
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement

from ..config import get_settings
from ..core.constants import BOUND_FIELDS, CANCELED_AT, ENDS_AT, STARTS_AT
from ..core.instants import Instant, parse_instant
from ..db import models
from ..db.schemas import BookingState, OwnerRef
from . import booking_filters
from .booking_filters import overlap_step, resolve_interval

logger = logging.getLogger(__name__)

Booking = models.Booking


def owned_by(owner: OwnerRef) -> ColumnElement[bool]:
    return and_(Booking.bookable_type == owner.type, Booking.bookable_id == owner.id)


def not_cancelled() -> ColumnElement[bool]:
    return Booking.canceled_at.is_(None)


def past_clause(now: datetime) -> ColumnElement[bool]:
    return and_(not_cancelled(), Booking.ends_at.isnot(None), Booking.ends_at < now)


def future_clause(now: datetime) -> ColumnElement[bool]:
    return and_(not_cancelled(), Booking.starts_at.isnot(None), Booking.starts_at > now)


def current_clause(now: datetime) -> ColumnElement[bool]:
    return and_(
        not_cancelled(),
        Booking.starts_at.isnot(None),
        Booking.ends_at.isnot(None),
        Booking.starts_at < now,
        Booking.ends_at > now,
    )


def cancelled_clause() -> ColumnElement[bool]:
    return Booking.canceled_at.isnot(None)


def range_clause(
    field: str,
    lower: datetime | None = None,
    upper: datetime | None = None,
) -> ColumnElement[bool]:
    """Strict ``lower < field < upper``; either bound may be omitted."""
    if field not in BOUND_FIELDS:
        raise ValueError(f"Cannot filter bookings by {field!r}")
    column = getattr(Booking, field)
    if field == CANCELED_AT:
        conditions = [cancelled_clause()]
    else:
        conditions = [not_cancelled(), column.isnot(None)]
    if lower is not None:
        conditions.append(column > lower)
    if upper is not None:
        conditions.append(column < upper)
    return and_(*conditions)


def overlap_clause(
    starts_at: datetime,
    ends_at: datetime,
    resolution: timedelta,
) -> ColumnElement[bool]:
    resolution = overlap_step(starts_at, ends_at, resolution)
    # Check for three things: the existing booking starts inside the window,
    # ends inside it, or starts before and ends after it (a 10:00-11:00
    # booking blocks a new 09:00-14:00 one and vice versa).
    return and_(
        not_cancelled(),
        or_(
            Booking.starts_at.between(starts_at, ends_at - resolution),
            Booking.ends_at.between(starts_at + resolution, ends_at),
            and_(Booking.starts_at < starts_at, Booking.ends_at > ends_at),
        ),
    )


def _owner_select(owner: OwnerRef, *clauses: ColumnElement[bool]) -> Select:
    return (
        select(Booking)
        .where(owned_by(owner), *clauses)
        .order_by(Booking.starts_at, Booking.id)
    )


def _fetch(db: Session, stmt: Select) -> list[models.Booking]:
    return list(db.execute(stmt).scalars().all())


def list_bookings(db: Session, owner: OwnerRef) -> list[models.Booking]:
    return _fetch(db, _owner_select(owner))


def past_bookings(db: Session, owner: OwnerRef, now: Instant) -> list[models.Booking]:
    return _fetch(db, _owner_select(owner, past_clause(parse_instant(now))))


def future_bookings(db: Session, owner: OwnerRef, now: Instant) -> list[models.Booking]:
    return _fetch(db, _owner_select(owner, future_clause(parse_instant(now))))


def current_bookings(db: Session, owner: OwnerRef, now: Instant) -> list[models.Booking]:
    return _fetch(db, _owner_select(owner, current_clause(parse_instant(now))))


def cancelled_bookings(db: Session, owner: OwnerRef) -> list[models.Booking]:
    return _fetch(db, _owner_select(owner, cancelled_clause()))


def _range(
    db: Session,
    owner: OwnerRef,
    field: str,
    lower: Instant | None = None,
    upper: Instant | None = None,
) -> list[models.Booking]:
    lower = parse_instant(lower) if lower is not None else None
    upper = parse_instant(upper) if upper is not None else None
    return _fetch(db, _owner_select(owner, range_clause(field, lower, upper)))


def bookings_starts_before(db: Session, owner: OwnerRef, date: Instant) -> list[models.Booking]:
    return _range(db, owner, STARTS_AT, upper=date)


def bookings_starts_after(db: Session, owner: OwnerRef, date: Instant) -> list[models.Booking]:
    return _range(db, owner, STARTS_AT, lower=date)


def bookings_starts_between(
    db: Session, owner: OwnerRef, starts_at: Instant, ends_at: Instant
) -> list[models.Booking]:
    return _range(db, owner, STARTS_AT, lower=starts_at, upper=ends_at)


def bookings_ends_before(db: Session, owner: OwnerRef, date: Instant) -> list[models.Booking]:
    return _range(db, owner, ENDS_AT, upper=date)


def bookings_ends_after(db: Session, owner: OwnerRef, date: Instant) -> list[models.Booking]:
    return _range(db, owner, ENDS_AT, lower=date)


def bookings_ends_between(
    db: Session, owner: OwnerRef, starts_at: Instant, ends_at: Instant
) -> list[models.Booking]:
    return _range(db, owner, ENDS_AT, lower=starts_at, upper=ends_at)


def bookings_cancelled_before(db: Session, owner: OwnerRef, date: Instant) -> list[models.Booking]:
    return _range(db, owner, CANCELED_AT, upper=date)


def bookings_cancelled_after(db: Session, owner: OwnerRef, date: Instant) -> list[models.Booking]:
    return _range(db, owner, CANCELED_AT, lower=date)


def bookings_cancelled_between(
    db: Session, owner: OwnerRef, starts_at: Instant, ends_at: Instant
) -> list[models.Booking]:
    return _range(db, owner, CANCELED_AT, lower=starts_at, upper=ends_at)


def bookings_between(
    db: Session,
    owner: OwnerRef,
    starts_at: Instant,
    ends_at: Instant,
    *,
    resolution: timedelta | None = None,
) -> list[models.Booking]:
    """Bookings of ``owner`` that conflict with the candidate ``[starts_at, ends_at)``."""
    start, end = resolve_interval(starts_at, ends_at)
    if resolution is None:
        resolution = get_settings().overlap_resolution
    conflicts = _fetch(db, _owner_select(owner, overlap_clause(start, end, resolution)))
    if conflicts:
        logger.info(
            "Found conflicting bookings",
            extra={
                "owner": str(owner),
                "starts_at": start.isoformat(),
                "ends_at": end.isoformat(),
                "count": len(conflicts),
            },
        )
    return conflicts


def is_available(
    db: Session,
    owner: OwnerRef,
    starts_at: Instant,
    ends_at: Instant,
    *,
    resolution: timedelta | None = None,
) -> bool:
    return not bookings_between(db, owner, starts_at, ends_at, resolution=resolution)


def partition(db: Session, owner: OwnerRef, now: Instant) -> dict[BookingState, list[models.Booking]]:
    return booking_filters.partition(list_bookings(db, owner), now)
