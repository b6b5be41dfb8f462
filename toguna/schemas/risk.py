"""Company risk flag schemas."""

from datetime import datetime

from pydantic import BaseModel, Field, model_validator

from toguna.models.risk import RiskFlagType, RiskSeverity


class RiskFlagCreate(BaseModel):
    company_id: int
    title: str = Field(min_length=1, max_length=255)
    flag_type: RiskFlagType = RiskFlagType.OTHER
    severity: RiskSeverity = RiskSeverity.MEDIUM
    description: str | None = None
    source_url: str | None = None

    @model_validator(mode="after")
    def check_title(self) -> "RiskFlagCreate":
        self.title = self.title.strip()
        if not self.title:
            raise ValueError("title must not be blank")
        return self


class RiskFlagResponse(BaseModel):
    id: int
    company_id: int
    company_name: str | None = None
    flag_type: RiskFlagType
    flag_type_label: str | None = None
    severity: RiskSeverity
    title: str
    description: str | None = None
    source_url: str | None = None
    is_active: bool
    detected_at: datetime
    resolved_at: datetime | None = None
    resolved_by: int | None = None

    class Config:
        from_attributes = True


class RiskFlagSummary(BaseModel):
    total: int
    critical: int
    unresolved: int


class RiskFlagListResponse(BaseModel):
    """Flags after filtering; the summary always covers the whole project."""

    flags: list[RiskFlagResponse]
    summary: RiskFlagSummary
