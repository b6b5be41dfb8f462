"""Appointment schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from toguna.models.appointment import AppointmentStatus, MeetingType


class AppointmentCreate(BaseModel):
    """Schema for booking an appointment."""

    company_id: int
    scheduled_at: datetime
    project_id: int | None = None
    operator_id: int | None = None
    call_log_id: int | None = None
    duration_minutes: int = Field(default=30, gt=0, le=480)
    meeting_type: MeetingType = MeetingType.ONLINE
    notes: str | None = None


class AppointmentUpdate(BaseModel):
    """Schema for editing an appointment."""

    scheduled_at: datetime | None = None
    operator_id: int | None = None
    duration_minutes: int | None = Field(default=None, gt=0, le=480)
    meeting_type: MeetingType | None = None
    notes: str | None = None


class AppointmentResponse(BaseModel):
    """Schema for appointment response."""

    id: int
    company_id: int
    project_id: int | None = None
    operator_id: int | None = None
    call_log_id: int | None = None
    scheduled_at: datetime
    duration_minutes: int
    meeting_type: MeetingType
    status: AppointmentStatus
    notes: str | None = None
    google_calendar_event_id: str | None = None
    cancel_reason: str | None = None
    completed_at: datetime | None = None
    cancelled_at: datetime | None = None
    created_at: datetime

    # Joined for display
    company_name: str | None = None
    operator_name: str | None = None

    class Config:
        from_attributes = True


class AppointmentGroup(BaseModel):
    """Appointments on one local date."""

    date: str  # YYYY/MM/DD
    appointments: list[AppointmentResponse]


class AppointmentSummary(BaseModel):
    today: int
    confirmed: int
    completed: int
    cancelled: int  # cancelled + no_show


class AppointmentBoardResponse(BaseModel):
    """Filtered, date-grouped appointment board."""

    groups: list[AppointmentGroup]
    total: int
    summary: AppointmentSummary
    range_start: datetime
    range_end: datetime
