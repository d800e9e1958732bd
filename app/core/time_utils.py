"""Wall-clock helpers for booking dates and times."""
from datetime import date, datetime, time
import pytz

from app.core.config import settings


def now_local() -> datetime:
    """Current naive datetime in the facility's timezone."""
    facility_tz = pytz.timezone(settings.TIMEZONE)
    return datetime.utcnow().replace(tzinfo=pytz.UTC).astimezone(facility_tz).replace(tzinfo=None)


def booking_start(booking_date: date, start_time: time) -> datetime:
    """Combine a booking date and start time into a naive local datetime."""
    return datetime.combine(booking_date, start_time)


def minutes_between(start_time: time, end_time: time) -> int:
    """Length of a same-day interval in whole minutes."""
    start_minutes = start_time.hour * 60 + start_time.minute
    end_minutes = end_time.hour * 60 + end_time.minute
    return end_minutes - start_minutes
