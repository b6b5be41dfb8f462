"""Client portal aggregates."""

from datetime import date, datetime, timedelta
from typing import Iterable

PORTAL_WEEKS = 8
RECENT_CALL_LIMIT = 20


def week_start(day: date) -> date:
    """The Sunday on or before `day`."""
    return day - timedelta(days=(day.weekday() + 1) % 7)


def weekly_performance(
    call_times: Iterable[datetime],
    appointment_times: Iterable[datetime],
    today: date,
) -> list[dict]:
    """
    Calls and appointments per Sunday-start week over the last eight weeks.

    Times are business-local. Only weeks with activity are listed, oldest first.
    """
    cutoff = today - timedelta(days=PORTAL_WEEKS * 7)
    weeks: dict[date, dict] = {}

    def bucket(moment: datetime) -> dict | None:
        if moment.date() < cutoff:
            return None
        key = week_start(moment.date())
        return weeks.setdefault(key, {"week": key, "calls": 0, "appointments": 0})

    for moment in call_times:
        entry = bucket(moment)
        if entry is not None:
            entry["calls"] += 1
    for moment in appointment_times:
        entry = bucket(moment)
        if entry is not None:
            entry["appointments"] += 1

    return [weeks[key] for key in sorted(weeks)]


def appointment_rate(calls: int, appointments: int) -> float:
    return round(appointments / calls * 100, 1) if calls else 0.0
