from __future__ import annotations

import logging
from datetime import timedelta
from typing import Callable, Sequence

from ..core.instants import Instant
from ..db.schemas import BookingState, OwnerRef
from . import booking_filters
from .booking_filters import BookingLike

logger = logging.getLogger(__name__)

BookingAccessor = Callable[[OwnerRef], Sequence[BookingLike]]


class BookingQueryEngine:
    """Booking queries for the owner-scoped collections returned by an accessor.

    Every call fetches a fresh snapshot through ``list_bookings`` and filters
    it in memory, so the engine itself holds no state between calls.
    """

    def __init__(
        self,
        list_bookings: BookingAccessor,
        *,
        resolution: timedelta | None = None,
    ) -> None:
        self._list_bookings = list_bookings
        self.resolution = resolution

    def _snapshot(self, owner: OwnerRef) -> list[BookingLike]:
        bookings = list(self._list_bookings(owner))
        logger.debug("Loaded bookings", extra={"owner": str(owner), "count": len(bookings)})
        return bookings

    def past_bookings(self, owner: OwnerRef, now: Instant) -> list[BookingLike]:
        return booking_filters.past(self._snapshot(owner), now)

    def future_bookings(self, owner: OwnerRef, now: Instant) -> list[BookingLike]:
        return booking_filters.future(self._snapshot(owner), now)

    def current_bookings(self, owner: OwnerRef, now: Instant) -> list[BookingLike]:
        return booking_filters.current(self._snapshot(owner), now)

    def cancelled_bookings(self, owner: OwnerRef) -> list[BookingLike]:
        return booking_filters.cancelled(self._snapshot(owner))

    def partition(self, owner: OwnerRef, now: Instant) -> dict[BookingState, list[BookingLike]]:
        return booking_filters.partition(self._snapshot(owner), now)

    def bookings_starts_before(self, owner: OwnerRef, date: Instant) -> list[BookingLike]:
        return booking_filters.starts_before(self._snapshot(owner), date)

    def bookings_starts_after(self, owner: OwnerRef, date: Instant) -> list[BookingLike]:
        return booking_filters.starts_after(self._snapshot(owner), date)

    def bookings_starts_between(
        self, owner: OwnerRef, starts_at: Instant, ends_at: Instant
    ) -> list[BookingLike]:
        return booking_filters.starts_between(self._snapshot(owner), starts_at, ends_at)

    def bookings_ends_before(self, owner: OwnerRef, date: Instant) -> list[BookingLike]:
        return booking_filters.ends_before(self._snapshot(owner), date)

    def bookings_ends_after(self, owner: OwnerRef, date: Instant) -> list[BookingLike]:
        return booking_filters.ends_after(self._snapshot(owner), date)

    def bookings_ends_between(
        self, owner: OwnerRef, starts_at: Instant, ends_at: Instant
    ) -> list[BookingLike]:
        return booking_filters.ends_between(self._snapshot(owner), starts_at, ends_at)

    def bookings_cancelled_before(self, owner: OwnerRef, date: Instant) -> list[BookingLike]:
        return booking_filters.cancelled_before(self._snapshot(owner), date)

    def bookings_cancelled_after(self, owner: OwnerRef, date: Instant) -> list[BookingLike]:
        return booking_filters.cancelled_after(self._snapshot(owner), date)

    def bookings_cancelled_between(
        self, owner: OwnerRef, starts_at: Instant, ends_at: Instant
    ) -> list[BookingLike]:
        return booking_filters.cancelled_between(self._snapshot(owner), starts_at, ends_at)

    def bookings_between(
        self, owner: OwnerRef, starts_at: Instant, ends_at: Instant
    ) -> list[BookingLike]:
        """Non-cancelled bookings of ``owner`` that conflict with ``[starts_at, ends_at)``."""
        # Validate before touching storage
        booking_filters.resolve_interval(starts_at, ends_at)
        return booking_filters.conflicting(
            self._snapshot(owner), starts_at, ends_at, resolution=self.resolution, owner=owner
        )

    def is_available(self, owner: OwnerRef, starts_at: Instant, ends_at: Instant) -> bool:
        return not self.bookings_between(owner, starts_at, ends_at)
