"""Appointment board: date ranges, grouping and summary counts."""

import calendar
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Iterable, Protocol, Sequence

from toguna.models.appointment import AppointmentStatus


class DateRange(str, Enum):
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    CUSTOM = "custom"


class _Scheduled(Protocol):
    scheduled_at: datetime
    status: AppointmentStatus
    project_id: int | None


def _end_of_day(day: date) -> datetime:
    return datetime.combine(day, time(23, 59, 59, 999000))


def compute_range(
    range_type: DateRange,
    now: datetime,
    date_from: date | None = None,
    date_to: date | None = None,
) -> tuple[datetime, datetime]:
    """Return the inclusive [start, end] window for a board filter.

    All windows start at local midnight today, except custom ranges with an
    explicit start. "week" runs to the end of the coming Sunday (a full week
    ahead when today is Sunday); "month" runs to the last day of this month.
    """
    today = now.date()
    start = datetime.combine(today, time.min)

    if range_type == DateRange.TODAY:
        return start, _end_of_day(today)

    if range_type == DateRange.WEEK:
        js_weekday = (today.weekday() + 1) % 7  # Sunday = 0
        days_until_sunday = (7 - js_weekday) % 7 or 7
        return start, _end_of_day(today + timedelta(days=days_until_sunday))

    if range_type == DateRange.MONTH:
        last_day = calendar.monthrange(today.year, today.month)[1]
        return start, _end_of_day(today.replace(day=last_day))

    if date_from:
        start = datetime.combine(date_from, time.min)
    end = _end_of_day(date_to) if date_to else _end_of_day(today)
    return start, end


def filter_appointments(
    appointments: Iterable[_Scheduled],
    start: datetime,
    end: datetime,
    project_id: int | None = None,
    status: AppointmentStatus | None = None,
) -> list:
    """Apply the project, status and date-window predicates."""
    result = []
    for appointment in appointments:
        if project_id is not None and appointment.project_id != project_id:
            continue
        if status is not None and appointment.status != status:
            continue
        if appointment.scheduled_at < start or appointment.scheduled_at > end:
            continue
        result.append(appointment)
    return result


def group_by_date(appointments: Iterable[_Scheduled]) -> list[tuple[str, list]]:
    """Group appointments by local date label (YYYY/MM/DD), chronologically."""
    groups: dict[str, list] = {}
    for appointment in sorted(appointments, key=lambda a: a.scheduled_at):
        key = appointment.scheduled_at.strftime("%Y/%m/%d")
        groups.setdefault(key, []).append(appointment)
    return list(groups.items())


def summarize(appointments: Sequence[_Scheduled], now: datetime) -> dict[str, int]:
    """Header counts. Computed over every appointment, not the filtered set."""
    today = now.date()
    return {
        "today": sum(1 for a in appointments if a.scheduled_at.date() == today),
        "confirmed": sum(1 for a in appointments if a.status == AppointmentStatus.CONFIRMED),
        "completed": sum(1 for a in appointments if a.status == AppointmentStatus.COMPLETED),
        "cancelled": sum(
            1 for a in appointments
            if a.status in (AppointmentStatus.CANCELLED, AppointmentStatus.NO_SHOW)
        ),
    }
