"""Operator self-performance schemas."""

from datetime import date

from pydantic import BaseModel


class TodayPerformance(BaseModel):
    calls: int
    connections: int
    appointments: int
    rejections: int
    rejection_rate: float


class DailyCalls(BaseModel):
    date: date
    label: str
    calls: int


class MonthlyProgress(BaseModel):
    calls: int
    appointments: int
    target: int
    progress: float


class QualityPoint(BaseModel):
    idx: int
    score: int
    label: str


class RankingEntry(BaseModel):
    rank: int
    operator_id: int
    operator_name: str
    calls: int
    appointments: int
    rate: float


class MyRanking(BaseModel):
    rank: int | None = None
    rate: float
    total_calls: int
    operators_count: int
    leaderboard: list[RankingEntry]


class MyPerformance(BaseModel):
    """The signed-in operator's own numbers."""

    today: TodayPerformance
    weekly: list[DailyCalls]
    monthly: MonthlyProgress
    quality_trend: list[QualityPoint]
    ranking: MyRanking
