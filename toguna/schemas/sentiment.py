"""Sentiment dashboard schemas."""

from datetime import datetime

from pydantic import BaseModel


class SentimentDistribution(BaseModel):
    positive: int
    neutral: int
    negative: int
    positive_pct: float
    neutral_pct: float
    negative_pct: float


class SentimentTrendPoint(BaseModel):
    period: str  # YYYY-MM-DD (day or week start)
    positive: int
    neutral: int
    negative: int
    average_score: float | None = None


class RecentRecording(BaseModel):
    call_log_id: int
    company_name: str | None = None
    overall: str
    score: float | None = None
    called_at: datetime


class SentimentDashboard(BaseModel):
    """Aggregated stored sentiment for a project."""

    project_id: int | None = None
    total: int
    average_score: float | None = None
    distribution: SentimentDistribution
    trend: list[SentimentTrendPoint]
    recent: list[RecentRecording]
