"""Business-timezone clock helpers."""

from datetime import date, datetime
from zoneinfo import ZoneInfo

from toguna.config import get_settings

settings = get_settings()


def local_now() -> datetime:
    """Current wall-clock time in the business timezone, as a naive datetime."""
    return datetime.now(ZoneInfo(settings.timezone)).replace(tzinfo=None)


def local_today() -> date:
    return local_now().date()


def utc_to_local(value: datetime) -> datetime:
    """Convert a naive UTC timestamp to naive business-local time."""
    return value.replace(tzinfo=ZoneInfo("UTC")).astimezone(ZoneInfo(settings.timezone)).replace(tzinfo=None)


def local_day_bounds_utc(day: date) -> tuple[datetime, datetime]:
    """Naive UTC [start, end) bounds of a local calendar day."""
    tz = ZoneInfo(settings.timezone)
    start = datetime(day.year, day.month, day.day, tzinfo=tz)
    end = datetime.fromordinal(day.toordinal() + 1).replace(tzinfo=tz)
    utc = ZoneInfo("UTC")
    return (
        start.astimezone(utc).replace(tzinfo=None),
        end.astimezone(utc).replace(tzinfo=None),
    )


def to_local_naive(value: datetime) -> datetime:
    """Naive business-local wall-clock time. Naive input is taken as already local."""
    if value.tzinfo is None:
        return value
    return value.astimezone(ZoneInfo(settings.timezone)).replace(tzinfo=None)
