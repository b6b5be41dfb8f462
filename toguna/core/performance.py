"""Operator self-performance figures."""

from datetime import date, timedelta
from typing import Iterable

from toguna.models.call import CallResult

CONNECTED_RESULTS = {CallResult.APPOINTMENT, CallResult.DOCUMENT_SENT, CallResult.CALLBACK}
REJECTED_RESULTS = {CallResult.REJECTED, CallResult.NG}
WEEKDAY_LABELS = "月火水木金土日"
QUALITY_TREND_LENGTH = 10
LEADERBOARD_SIZE = 10


def percent(part: int, whole: int) -> float:
    return round(part / whole * 100, 1) if whole else 0.0


def day_summary(results: list[CallResult]) -> dict:
    rejections = sum(1 for r in results if r in REJECTED_RESULTS)
    return {
        "calls": len(results),
        "connections": sum(1 for r in results if r in CONNECTED_RESULTS),
        "appointments": sum(1 for r in results if r == CallResult.APPOINTMENT),
        "rejections": rejections,
        "rejection_rate": percent(rejections, len(results)),
    }


def daily_calls(call_days: Iterable[date], today: date, days: int = 7) -> list[dict]:
    """Calls per local day for the last `days` days, oldest first, labelled like 14(火)."""
    counts: dict[date, int] = {}
    for day in call_days:
        counts[day] = counts.get(day, 0) + 1

    series = []
    for offset in range(days - 1, -1, -1):
        day = today - timedelta(days=offset)
        series.append({
            "date": day,
            "label": f"{day.day:02d}({WEEKDAY_LABELS[day.weekday()]})",
            "calls": counts.get(day, 0),
        })
    return series


def monthly_progress(calls: int, appointments: int, target: int) -> dict:
    return {
        "calls": calls,
        "appointments": appointments,
        "target": target,
        "progress": percent(appointments, target),
    }


def rank_operators(stats: list[dict]) -> list[dict]:
    """
    Order operators by appointment rate, best first.

    Each entry needs operator_id, calls and appointments; rate and rank are
    added. Ties keep the incoming order.
    """
    ranked = [dict(entry, rate=percent(entry["appointments"], entry["calls"])) for entry in stats]
    ranked.sort(key=lambda entry: entry["rate"], reverse=True)
    for position, entry in enumerate(ranked, start=1):
        entry["rank"] = position
    return ranked
