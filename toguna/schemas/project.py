"""Project schemas."""

from datetime import date, datetime

from pydantic import BaseModel, Field

from toguna.models.project import ProjectStatus, MemberRole


class ProjectBase(BaseModel):
    """Base project schema."""

    name: str
    client_id: int | None = None
    description: str | None = None
    product_name: str | None = None
    target_industries: list[str] | None = None
    daily_call_target: int | None = None
    min_appointment_rate: float | None = Field(default=50.0, ge=0, le=100)
    withdrawal_threshold_days: int | None = None
    start_date: date | None = None
    end_date: date | None = None


class ProjectCreate(ProjectBase):
    """Schema for creating a project."""

    status: ProjectStatus = ProjectStatus.DRAFT


class ProjectUpdate(BaseModel):
    """Schema for updating a project."""

    name: str | None = None
    client_id: int | None = None
    description: str | None = None
    product_name: str | None = None
    target_industries: list[str] | None = None
    status: ProjectStatus | None = None
    daily_call_target: int | None = None
    min_appointment_rate: float | None = Field(default=None, ge=0, le=100)
    withdrawal_threshold_days: int | None = None
    start_date: date | None = None
    end_date: date | None = None


class ProjectResponse(ProjectBase):
    """Schema for project response."""

    id: int
    status: ProjectStatus
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ProjectMemberCreate(BaseModel):
    operator_id: int
    role: MemberRole = MemberRole.APPOINTER


class ProjectMemberResponse(BaseModel):
    id: int
    project_id: int
    operator_id: int
    role: MemberRole
    is_active: bool
    joined_at: datetime

    class Config:
        from_attributes = True


class ProjectStats(BaseModel):
    """Progress numbers of one project."""

    project_id: int
    total_calls: int
    total_appointments: int
    appointment_rate: float
    today_calls: int
    today_appointments: int
    remaining_companies: int
    active_operators: int
