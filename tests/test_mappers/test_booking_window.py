from datetime import datetime, timedelta, timezone

from srm_portal.mappers.booking_window import find_overlap
from srm_portal.schemas.srm import BookingWindow

WINDOWS = [
    BookingWindow(
        booking_start_date=datetime(2024, 3, 10, tzinfo=timezone.utc),
        booking_end_date=datetime(2024, 3, 12, tzinfo=timezone.utc),
    ),
]


def test_no_overlap_before():
    assert find_overlap(WINDOWS, datetime(2024, 3, 1), datetime(2024, 3, 10)) is None


def test_no_overlap_after():
    assert find_overlap(WINDOWS, datetime(2024, 3, 12), datetime(2024, 3, 14)) is None


def test_overlap_inside():
    clash = find_overlap(WINDOWS, datetime(2024, 3, 11), datetime(2024, 3, 11, 5))
    assert clash == WINDOWS[0]


def test_overlap_with_offset_timezone():
    dubai = timezone(timedelta(hours=4))
    # 03:00 Dubai on the 12th is 23:00 UTC on the 11th
    clash = find_overlap(
        WINDOWS,
        datetime(2024, 3, 12, 3, tzinfo=dubai),
        datetime(2024, 3, 13, tzinfo=dubai),
    )
    assert clash is not None


def test_empty_windows():
    assert find_overlap([], datetime(2024, 1, 1), datetime(2024, 1, 2)) is None
