"""Rejection insight analytics schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from toguna.models.incubation import RejectionCategory, CrossSellStatus


class RejectionInsightCreate(BaseModel):
    """Schema for capturing why a prospect said no."""

    call_log_id: int | None = None
    company_id: int | None = None
    project_id: int | None = None
    category: RejectionCategory = RejectionCategory.OTHER
    detail: str | None = None
    pain_point: str | None = None
    unmet_need: str | None = None
    sentiment_score: float | None = Field(default=None, ge=-1, le=1)


class RejectionInsightUpdate(BaseModel):
    category: RejectionCategory | None = None
    detail: str | None = None
    pain_point: str | None = None
    unmet_need: str | None = None
    sentiment_score: float | None = Field(default=None, ge=-1, le=1)


class RejectionInsightResponse(BaseModel):
    id: int
    call_log_id: int | None = None
    company_id: int | None = None
    project_id: int | None = None
    category: str
    detail: str | None = None
    pain_point: str | None = None
    unmet_need: str | None = None
    sentiment_score: float | None = None
    created_at: datetime

    class Config:
        from_attributes = True


class ProductOpportunity(BaseModel):
    kind: str
    title: str
    description: str
    evidence_count: int
    examples: list[str] = []


class IncubationSummary(BaseModel):
    total_insights: int
    by_category: dict[str, int]
    pain_points: list[str]
    opportunities: list[ProductOpportunity]


class CategoryShare(BaseModel):
    category: str
    count: int
    percentage: float


class PainPointCluster(BaseModel):
    pain_point: str
    count: int


class UnmetNeedOpportunity(BaseModel):
    need: str
    frequency: int
    uniqueness: int  # distinct projects
    opportunity_score: float


class MonthlyTrend(BaseModel):
    month: str  # YYYY-MM
    total: int
    by_category: dict[str, int]


class DeepAnalysis(BaseModel):
    """Deep rejection analysis over a time window."""

    time_range: str
    total_insights: int
    category_distribution: list[CategoryShare]
    pain_point_clusters: list[PainPointCluster]
    unmet_needs: list[UnmetNeedOpportunity]
    monthly_trend: list[MonthlyTrend]
    cross_project_matrix: dict[str, dict[str, int]]


class CrossSellResponse(BaseModel):
    id: int
    company_id: int
    source_project_id: int | None = None
    target_project_id: int
    call_log_id: int | None = None
    match_score: int
    reasons: list[str] | None = None
    rejection_category: str | None = None
    status: CrossSellStatus
    created_at: datetime

    company_name: str | None = None

    class Config:
        from_attributes = True


class CrossSellStatusUpdate(BaseModel):
    status: CrossSellStatus
