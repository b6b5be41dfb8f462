"""Tests for sentiment aggregation."""

from datetime import date, datetime

from toguna.core.sentiment import build_dashboard, sample_from_analysis, week_start


def test_sample_normalizes_label_and_score():
    sample = sample_from_analysis(1, datetime(2026, 10, 14, 10), {"overall": "mixed", "score": 1})
    assert sample.overall == "neutral"
    assert sample.score == 1.0

    empty = sample_from_analysis(2, datetime(2026, 10, 14, 10), None)
    assert empty.overall == "neutral"
    assert empty.score is None


def test_week_starts_on_sunday():
    assert week_start(date(2026, 10, 14)) == date(2026, 10, 11)
    assert week_start(date(2026, 10, 18)) == date(2026, 10, 18)


def test_dashboard_distribution_and_daily_trend():
    samples = [
        sample_from_analysis(1, datetime(2026, 10, 13, 10), {"overall": "positive", "score": 0.8}, "アルファ"),
        sample_from_analysis(2, datetime(2026, 10, 13, 15), {"overall": "negative", "score": -0.4}),
        sample_from_analysis(3, datetime(2026, 10, 14, 11), {"overall": "positive", "score": 0.6}),
        sample_from_analysis(4, datetime(2026, 10, 14, 12), {"overall": "neutral"}),
    ]

    dashboard = build_dashboard(samples, "day", project_id=7)

    assert dashboard["project_id"] == 7
    assert dashboard["total"] == 4
    assert dashboard["average_score"] == round((0.8 - 0.4 + 0.6) / 3, 3)
    assert dashboard["distribution"]["positive"] == 2
    assert dashboard["distribution"]["positive_pct"] == 50.0
    assert [row["period"] for row in dashboard["trend"]] == ["2026-10-13", "2026-10-14"]
    assert dashboard["trend"][0]["negative"] == 1
    assert dashboard["trend"][1]["average_score"] == 0.6
    assert dashboard["recent"][0]["call_log_id"] == 4


def test_weekly_trend_buckets_by_sunday():
    samples = [
        sample_from_analysis(1, datetime(2026, 10, 12, 10), {"overall": "positive"}),
        sample_from_analysis(2, datetime(2026, 10, 17, 10), {"overall": "positive"}),
        sample_from_analysis(3, datetime(2026, 10, 18, 10), {"overall": "negative"}),
    ]

    trend = build_dashboard(samples, "week")["trend"]

    assert [(row["period"], row["positive"], row["negative"]) for row in trend] == [
        ("2026-10-11", 2, 0),
        ("2026-10-18", 0, 1),
    ]


def test_empty_dashboard():
    dashboard = build_dashboard([], "day")
    assert dashboard["total"] == 0
    assert dashboard["average_score"] is None
    assert dashboard["distribution"]["neutral_pct"] == 0.0
