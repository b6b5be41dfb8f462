"""Sentiment aggregation over stored call recordings."""

from collections import defaultdict
from datetime import date, datetime, timedelta
from typing import Iterable, NamedTuple

LABELS = ("positive", "neutral", "negative")


class SentimentSample(NamedTuple):
    """One analysed call, flattened for aggregation."""

    call_log_id: int
    called_at: datetime
    overall: str
    score: float | None
    company_name: str | None = None


def normalize_label(label: str | None) -> str:
    """Anything that is not clearly positive or negative counts as neutral."""
    if label in ("positive", "negative"):
        return label
    return "neutral"


def sample_from_analysis(
    call_log_id: int,
    called_at: datetime,
    analysis: dict | None,
    company_name: str | None = None,
) -> SentimentSample:
    analysis = analysis or {}
    score = analysis.get("score")
    return SentimentSample(
        call_log_id=call_log_id,
        called_at=called_at,
        overall=normalize_label(analysis.get("overall")),
        score=float(score) if isinstance(score, (int, float)) else None,
        company_name=company_name,
    )


def distribution(samples: list[SentimentSample]) -> dict:
    counts = {label: 0 for label in LABELS}
    for sample in samples:
        counts[sample.overall] += 1
    total = len(samples) or 1
    return {
        **counts,
        **{f"{label}_pct": round(counts[label] / total * 100, 1) for label in LABELS},
    }


def week_start(day: date) -> date:
    """Sunday on or before the given day."""
    return day - timedelta(days=(day.weekday() + 1) % 7)


def _average(values: list[float]) -> float | None:
    if not values:
        return None
    return round(sum(values) / len(values), 3)


def trend(samples: Iterable[SentimentSample], granularity: str = "day") -> list[dict]:
    buckets: dict[date, dict] = defaultdict(lambda: {"counts": defaultdict(int), "scores": []})
    for sample in samples:
        day = sample.called_at.date()
        key = week_start(day) if granularity == "week" else day
        buckets[key]["counts"][sample.overall] += 1
        if sample.score is not None:
            buckets[key]["scores"].append(sample.score)

    return [
        {
            "period": key.isoformat(),
            "positive": buckets[key]["counts"]["positive"],
            "neutral": buckets[key]["counts"]["neutral"],
            "negative": buckets[key]["counts"]["negative"],
            "average_score": _average(buckets[key]["scores"]),
        }
        for key in sorted(buckets)
    ]


def build_dashboard(
    samples: list[SentimentSample],
    granularity: str = "day",
    project_id: int | None = None,
    recent_limit: int = 10,
) -> dict:
    recent = sorted(samples, key=lambda s: s.called_at, reverse=True)[:recent_limit]
    return {
        "project_id": project_id,
        "total": len(samples),
        "average_score": _average([s.score for s in samples if s.score is not None]),
        "distribution": distribution(samples),
        "trend": trend(samples, granularity),
        "recent": [
            {
                "call_log_id": s.call_log_id,
                "company_name": s.company_name,
                "overall": s.overall,
                "score": s.score,
                "called_at": s.called_at,
            }
            for s in recent
        ],
    }
