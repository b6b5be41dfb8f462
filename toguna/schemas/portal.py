"""Client portal schemas."""

from datetime import date, datetime

from pydantic import BaseModel, Field

from toguna.models.appointment import MeetingType
from toguna.models.call import CallResult


class PortalTokenCreate(BaseModel):
    client_id: int
    project_id: int | None = None
    expires_in_days: int | None = Field(default=30, ge=1, le=365)
    can_view_calls: bool = True
    can_view_appointments: bool = True
    can_view_golden_calls: bool = True


class PortalTokenResponse(BaseModel):
    id: int
    client_id: int
    project_id: int | None = None
    token: str
    url: str | None = None
    can_view_calls: bool
    can_view_appointments: bool
    can_view_golden_calls: bool
    is_active: bool
    expires_at: datetime | None = None
    last_accessed_at: datetime | None = None
    created_at: datetime

    class Config:
        from_attributes = True


class PortalCall(BaseModel):
    called_at: datetime
    result: CallResult
    duration: int


class PortalAppointment(BaseModel):
    company_name: str | None = None
    scheduled_at: datetime
    meeting_type: MeetingType


class PortalGoldenCall(BaseModel):
    title: str
    description: str | None = None
    recording_url: str | None = None
    total_score: int | None = None
    created_at: datetime


class PortalWeek(BaseModel):
    week: date
    calls: int
    appointments: int


class PortalTotals(BaseModel):
    calls: int
    appointments: int
    appointment_rate: float


class PortalView(BaseModel):
    """What a client sees through its portal link. Hidden sections are null."""

    client_name: str
    project_names: list[str]
    totals: PortalTotals
    weekly: list[PortalWeek]
    recent_calls: list[PortalCall] | None = None
    upcoming_appointments: list[PortalAppointment] | None = None
    golden_calls: list[PortalGoldenCall] | None = None
