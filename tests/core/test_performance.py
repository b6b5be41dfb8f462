"""Tests for operator self-performance figures."""

from datetime import date

from toguna.core.performance import daily_calls, day_summary, monthly_progress, rank_operators
from toguna.models.call import CallResult


def test_day_summary():
    summary = day_summary([
        CallResult.APPOINTMENT, CallResult.CALLBACK, CallResult.REJECTED, CallResult.NG, CallResult.ABSENT,
    ])

    assert summary == {
        "calls": 5,
        "connections": 2,
        "appointments": 1,
        "rejections": 2,
        "rejection_rate": 40.0,
    }


def test_empty_day():
    assert day_summary([])["rejection_rate"] == 0.0


def test_daily_calls_fills_the_week():
    today = date(2026, 10, 18)
    series = daily_calls([date(2026, 10, 18), date(2026, 10, 18), date(2026, 10, 12), date(2026, 10, 1)], today)

    assert len(series) == 7
    assert series[0] == {"date": date(2026, 10, 12), "label": "12(月)", "calls": 1}
    assert series[-1] == {"date": today, "label": "18(日)", "calls": 2}
    assert sum(point["calls"] for point in series) == 3


def test_monthly_progress():
    assert monthly_progress(40, 3, 12)["progress"] == 25.0
    assert monthly_progress(0, 0, 0)["progress"] == 0.0


def test_ranking_by_rate_with_stable_ties():
    ranked = rank_operators([
        {"operator_id": 1, "calls": 10, "appointments": 1},
        {"operator_id": 2, "calls": 4, "appointments": 2},
        {"operator_id": 3, "calls": 0, "appointments": 0},
        {"operator_id": 4, "calls": 20, "appointments": 2},
    ])

    assert [(e["operator_id"], e["rank"], e["rate"]) for e in ranked] == [
        (2, 1, 50.0), (1, 2, 10.0), (4, 3, 10.0), (3, 4, 0.0),
    ]
