import logging
from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest

from bookable.core.exceptions import InvalidIntervalError
from bookable.services import booking_filters

from conftest import ROOM, at, make_booking


def test_back_to_back_bookings_do_not_conflict():
    existing = make_booking(at(10), at(11))

    assert booking_filters.conflicting([existing], at(9), at(10)) == []
    assert booking_filters.conflicting([existing], at(11), at(12)) == []


def test_existing_starting_inside_candidate_conflicts():
    existing = make_booking(at(10), at(11))

    assert booking_filters.conflicting([existing], at(9), at(14)) == [existing]
    assert booking_filters.conflicting([existing], at(9), at(10, 30)) == [existing]


def test_existing_ending_inside_candidate_conflicts():
    existing = make_booking(at(10), at(11))

    assert booking_filters.conflicting([existing], at(10, 30), at(12)) == [existing]


def test_candidate_nested_in_existing_conflicts():
    existing = make_booking(at(9), at(14))

    assert booking_filters.conflicting([existing], at(10), at(11)) == [existing]


def test_identical_interval_conflicts():
    existing = make_booking(at(10), at(11))

    assert booking_filters.conflicting([existing], at(10), at(11)) == [existing]


def test_disjoint_interval_is_free():
    existing = make_booking(at(10), at(11))

    assert booking_filters.conflicting([existing], at(13), at(14)) == []
    assert booking_filters.is_available([existing], at(13), at(14))


def test_cancelled_bookings_are_ignored():
    existing = make_booking(at(10), at(11), canceled_at=at(8))

    assert booking_filters.conflicting([existing], at(9), at(14)) == []
    assert booking_filters.conflicting([existing], at(10, 15), at(10, 45)) == []
    assert booking_filters.is_available([existing], at(10), at(11))


def test_half_open_bookings_match_through_present_bound():
    open_end = make_booking(starts_at=at(10))
    open_start = make_booking(ends_at=at(11))

    assert booking_filters.conflicting([open_end], at(9), at(12)) == [open_end]
    assert booking_filters.conflicting([open_end], at(11), at(12)) == []
    assert booking_filters.conflicting([open_start], at(10), at(12)) == [open_start]
    assert booking_filters.conflicting([open_start], at(11), at(12)) == []


def test_only_conflicting_bookings_are_returned():
    first = make_booking(at(8), at(9))
    second = make_booking(at(10), at(11))
    third = make_booking(at(12), at(13))

    assert booking_filters.conflicting([first, second, third], at(9), at(12)) == [second]
    assert booking_filters.conflicting([first, second, third], at(8, 30), at(12, 30)) == [first, second, third]


def test_sub_second_overlap_detected_with_default_resolution():
    existing = make_booking(at(10), at(11))

    assert booking_filters.conflicting([existing], at(9), at(10) + timedelta(microseconds=1)) == [existing]


def test_coarse_resolution_lets_sub_second_touches_through():
    existing = make_booking(at(10), at(11))
    candidate_end = at(10) + timedelta(milliseconds=500)

    assert booking_filters.conflicting(
        [existing], at(9), candidate_end, resolution=timedelta(seconds=1)
    ) == []
    assert booking_filters.conflicting(
        [existing], at(9), at(10, 0, 1), resolution=timedelta(seconds=1)
    ) == [existing]


def test_resolution_from_settings(monkeypatch):
    from bookable.config import get_settings

    monkeypatch.setenv("OVERLAP_RESOLUTION_US", "1000000")
    get_settings.cache_clear()
    existing = make_booking(at(10), at(11))

    assert booking_filters.conflicting([existing], at(9), at(10) + timedelta(milliseconds=500)) == []


@pytest.mark.parametrize(
    "starts_at, ends_at",
    [(at(11), at(10)), (at(10), at(10))],
)
def test_inverted_interval_is_rejected(starts_at, ends_at):
    existing = make_booking(at(10), at(11))

    with pytest.raises(InvalidIntervalError) as exc_info:
        booking_filters.conflicting([existing], starts_at, ends_at)
    assert exc_info.value.starts_at == starts_at
    assert exc_info.value.ends_at == ends_at
    assert "end must be after start" in str(exc_info.value)


def test_candidate_accepts_iso_strings():
    existing = make_booking(at(10), at(11))

    assert booking_filters.conflicting(
        [existing], "2026-03-02T09:00:00Z", "2026-03-02T10:30:00Z"
    ) == [existing]


def test_repeated_resolution_is_stable():
    bookings = [make_booking(at(8), at(9)), make_booking(at(10), at(11))]
    first = booking_filters.conflicting(bookings, at(8, 30), at(10, 30))
    second = booking_filters.conflicting(bookings, at(8, 30), at(10, 30))
    assert first == second == bookings


def test_coarse_resolution_still_catches_shared_start():
    existing = make_booking(at(10), at(11))
    candidate_end = at(10) + timedelta(milliseconds=500)

    assert booking_filters.conflicting(
        [existing], at(10), candidate_end, resolution=timedelta(seconds=1)
    ) == [existing]
    assert booking_filters.conflicting(
        [existing], at(9, 59, 59), at(10), resolution=timedelta(seconds=5)
    ) == []


def test_naive_booking_values_conflict_in_reference_zone(monkeypatch):
    from bookable.config import get_settings

    monkeypatch.setenv("TIMEZONE", "Europe/Moscow")
    get_settings.cache_clear()
    existing = SimpleNamespace(
        starts_at=datetime(2026, 3, 2, 10), ends_at=datetime(2026, 3, 2, 11), canceled_at=None
    )

    assert booking_filters.conflicting(
        [existing], datetime(2026, 3, 2, 10, 15), datetime(2026, 3, 2, 10, 45)
    ) == [existing]
    assert booking_filters.conflicting([existing], "2026-03-02T07:15:00Z", "2026-03-02T07:45:00Z") == [existing]
    assert booking_filters.conflicting([existing], "2026-03-02T10:15:00Z", "2026-03-02T10:45:00Z") == []


def test_conflict_log_names_owner(caplog):
    existing = make_booking(at(10), at(11))

    with caplog.at_level(logging.INFO, logger="bookable.services.booking_filters"):
        booking_filters.conflicting([existing], at(9), at(14), owner=ROOM)

    record = next(r for r in caplog.records if r.getMessage() == "Found conflicting bookings")
    assert record.owner == "room:1"
    assert record.count == 1
