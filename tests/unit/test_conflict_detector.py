"""Test buffered overlap detection against existing bookings."""

from datetime import date, datetime

import pytest

from salon_booking.models.booking import BookingStatus
from salon_booking.schemas.scheduling import CandidateBooking
from salon_booking.services.conflict_detector import (
    BUFFER_MINUTES,
    booking_span,
    find_conflicts,
    has_conflict,
)
from tests.fixtures.fake_stores import make_booking

DAY = date(2025, 6, 4)


def candidate(time: str, duration: int = 30) -> CandidateBooking:
    return CandidateBooking(date=DAY, time=time, duration_minutes=duration)


def test_buffer_is_twenty_minutes():
    assert BUFFER_MINUTES == 20


def test_candidate_inside_trailing_buffer_conflicts():
    existing = [make_booking(DAY, "10:00", 30)]
    assert has_conflict(candidate("10:45"), existing) is True


def test_candidate_after_trailing_buffer_is_free():
    existing = [make_booking(DAY, "10:00", 30)]
    assert has_conflict(candidate("10:55"), existing) is False


def test_candidate_starting_exactly_at_buffer_end_is_free():
    existing = [make_booking(DAY, "10:00", 30)]
    assert has_conflict(candidate("10:50"), existing) is False


@pytest.mark.parametrize(
    "time,expected",
    [
        ("09:00", False),  # ends 09:30, before 09:40
        ("09:10", False),  # ends exactly at 09:40
        ("09:15", True),  # ends 09:45, inside leading buffer
        ("10:10", True),  # fully inside
    ],
)
def test_leading_buffer(time, expected):
    existing = [make_booking(DAY, "10:00", 30)]
    assert has_conflict(candidate(time), existing) is expected


def test_cancelled_bookings_never_conflict():
    existing = [make_booking(DAY, "10:00", 30, BookingStatus.CANCELLED)]
    assert has_conflict(candidate("10:00"), existing) is False


@pytest.mark.parametrize(
    "status",
    [
        BookingStatus.PENDING,
        BookingStatus.ACCEPTED,
        BookingStatus.REJECTED,
        BookingStatus.COMPLETED,
        BookingStatus.IN_PROGRESS,
    ],
)
def test_other_statuses_occupy_the_calendar(status):
    existing = [make_booking(DAY, "10:00", 30, status)]
    assert has_conflict(candidate("10:00"), existing) is True


def test_missing_duration_defaults_to_thirty_minutes():
    booking = make_booking(DAY, "10:00", None)
    assert booking_span(booking) == (datetime(2025, 6, 4, 10, 0), datetime(2025, 6, 4, 10, 30))
    assert has_conflict(candidate("10:45"), [booking]) is True
    assert has_conflict(candidate("10:50"), [booking]) is False


def test_find_conflicts_returns_every_overlap():
    existing = [
        make_booking(DAY, "09:00", 60, booking_id=1),
        make_booking(DAY, "11:00", 60, booking_id=2),
        make_booking(DAY, "15:00", 60, booking_id=3),
    ]
    conflicts = find_conflicts(candidate("10:00", 60), existing)
    assert [b.id for b in conflicts] == [1, 2]


def test_custom_buffer():
    existing = [make_booking(DAY, "10:00", 30)]
    assert has_conflict(candidate("10:35"), existing, buffer_minutes=0) is False
    assert has_conflict(candidate("10:35"), existing, buffer_minutes=10) is True


def test_no_existing_bookings():
    assert find_conflicts(candidate("10:00"), []) == []
