from datetime import datetime, timezone

from srm_portal.schemas.srm import BookingWindow


def as_utc(value: datetime) -> datetime:
    # Naive datetimes from the form are taken as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def find_overlap(
    windows: list[BookingWindow],
    start: datetime,
    end: datetime,
) -> BookingWindow | None:
    """Return the first upcoming booking that intersects [start, end)."""
    start, end = as_utc(start), as_utc(end)
    for window in windows:
        if start < as_utc(window.booking_end_date) and end > as_utc(window.booking_start_date):
            return window
    return None
