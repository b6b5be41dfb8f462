"""Appointment model."""

from datetime import datetime
from enum import Enum

from sqlalchemy import String, DateTime, Text, Integer, ForeignKey, Enum as SQLEnum, Index
from sqlalchemy.orm import Mapped, mapped_column

from toguna.services.database import Base


class AppointmentStatus(str, Enum):
    """Appointment state machine."""

    TENTATIVE = "tentative"  # Proposed by a followup rule, not yet agreed
    CONFIRMED = "confirmed"  # Agreed with the prospect
    COMPLETED = "completed"  # Meeting took place
    CANCELLED = "cancelled"  # Called off before the meeting
    NO_SHOW = "no_show"  # Prospect did not attend


OPEN_APPOINTMENT_STATUSES = (AppointmentStatus.TENTATIVE, AppointmentStatus.CONFIRMED)


class MeetingType(str, Enum):
    """How the meeting is held."""

    ONLINE = "online"
    ONSITE = "onsite"
    PHONE = "phone"


class Appointment(Base):
    """A sales meeting booked by an operator."""

    __tablename__ = "appointments"

    id: Mapped[int] = mapped_column(primary_key=True)
    company_id: Mapped[int] = mapped_column(ForeignKey("companies.id"), index=True)
    project_id: Mapped[int | None] = mapped_column(
        ForeignKey("projects.id"), nullable=True, index=True
    )
    operator_id: Mapped[int | None] = mapped_column(
        ForeignKey("operators.id"), nullable=True, index=True
    )
    call_log_id: Mapped[int | None] = mapped_column(ForeignKey("call_logs.id"), nullable=True)

    # Wall-clock time in the business timezone
    scheduled_at: Mapped[datetime] = mapped_column(DateTime, index=True)
    duration_minutes: Mapped[int] = mapped_column(Integer, default=30)
    meeting_type: Mapped[MeetingType] = mapped_column(
        SQLEnum(MeetingType, values_callable=lambda x: [e.value for e in x]),
        default=MeetingType.ONLINE,
    )
    status: Mapped[AppointmentStatus] = mapped_column(
        SQLEnum(AppointmentStatus, values_callable=lambda x: [e.value for e in x]),
        default=AppointmentStatus.CONFIRMED,
        index=True,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    google_calendar_event_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    cancel_reason: Mapped[str | None] = mapped_column(String(255), nullable=True)

    completed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    cancelled_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    __table_args__ = (
        Index("ix_appointments_status_scheduled", "status", "scheduled_at"),
    )

    @property
    def is_open(self) -> bool:
        return self.status in OPEN_APPOINTMENT_STATUSES

    def mark_completed(self) -> None:
        """Mark appointment as held."""
        self.status = AppointmentStatus.COMPLETED
        self.completed_at = datetime.utcnow()

    def mark_cancelled(self, reason: str | None = None) -> None:
        """Mark appointment as cancelled."""
        self.status = AppointmentStatus.CANCELLED
        self.cancelled_at = datetime.utcnow()
        self.cancel_reason = reason

    def mark_no_show(self) -> None:
        """Mark appointment as missed by the prospect."""
        self.status = AppointmentStatus.NO_SHOW
        self.cancelled_at = datetime.utcnow()
