"""Quality, golden call and pivot alert schemas."""

from datetime import datetime

from pydantic import BaseModel

from toguna.models.quality import PivotAlertType, PivotAlertSeverity, PivotAlertStatus


class QualityScoreResponse(BaseModel):
    """Six-KPI score of one call."""

    id: int
    call_log_id: int
    operator_id: int
    project_id: int | None = None
    greeting_score: int
    hearing_score: int
    proposal_score: int
    closing_score: int
    pace_score: int
    tone_score: int
    total_score: int
    positive_points: list[str] | None = None
    improvement_points: list[str] | None = None
    coaching_tip: str | None = None
    scored_at: datetime

    operator_name: str | None = None

    class Config:
        from_attributes = True


class KpiAverages(BaseModel):
    greeting: float
    hearing: float
    proposal: float
    closing: float
    pace: float
    tone: float


class OperatorQualityRank(BaseModel):
    operator_id: int
    operator_name: str | None = None
    average_score: float
    scored_calls: int


class QualityDashboard(BaseModel):
    """Quality commander overview."""

    this_week_average: float
    last_week_average: float
    week_over_week: float
    scored_calls: int
    kpi_averages: KpiAverages
    top_calls: list[QualityScoreResponse]
    needs_coaching: list[QualityScoreResponse]
    operator_ranking: list[OperatorQualityRank]


class GoldenCallBase(BaseModel):
    title: str
    call_log_id: int | None = None
    operator_id: int | None = None
    project_id: int | None = None
    description: str | None = None
    tags: list[str] | None = None
    recording_url: str | None = None
    is_client_visible: bool = False


class GoldenCallCreate(GoldenCallBase):
    """Schema for curating a golden call."""


class GoldenCallUpdate(BaseModel):
    title: str | None = None
    description: str | None = None
    tags: list[str] | None = None
    recording_url: str | None = None
    is_client_visible: bool | None = None


class GoldenCallPromote(BaseModel):
    """Promote a scored call to a golden call."""

    title: str | None = None
    description: str | None = None
    tags: list[str] | None = None


class GoldenCallResponse(GoldenCallBase):
    id: int
    total_score: int | None = None
    curated_by: int | None = None
    created_at: datetime

    class Config:
        from_attributes = True


class PivotAlertResponse(BaseModel):
    id: int
    project_id: int
    alert_type: PivotAlertType
    severity: PivotAlertSeverity
    message: str
    metrics: dict | None = None
    suggestions: list[str] | None = None
    status: PivotAlertStatus
    acknowledged_by: int | None = None
    acknowledged_at: datetime | None = None
    resolved_at: datetime | None = None
    created_at: datetime

    class Config:
        from_attributes = True


class PivotCheckResponse(BaseModel):
    projects_checked: int
    alerts_created: list[PivotAlertResponse]
