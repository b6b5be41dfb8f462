"""Realtime notification and sales floor models."""

from datetime import datetime
from enum import Enum

from sqlalchemy import String, DateTime, Text, Integer, Boolean, JSON, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from toguna.core.clock import local_today, utc_to_local
from toguna.services.database import Base


class NotificationType(str, Enum):
    APPOINTMENT = "appointment"
    CALL_COMPLETE = "call_complete"
    NEW_COMPANY = "new_company"
    SYSTEM = "system"
    ALERT = "alert"


class FloorStatus(str, Enum):
    """What an operator is doing right now."""

    IDLE = "idle"
    CALLING = "calling"
    ON_CALL = "on_call"
    WRAPPING_UP = "wrapping_up"
    BREAK = "break"
    OFFLINE = "offline"


class Notification(Base):
    """Event pushed to dashboards. A null operator means broadcast."""

    __tablename__ = "notifications"

    id: Mapped[int] = mapped_column(primary_key=True)
    operator_id: Mapped[int | None] = mapped_column(
        ForeignKey("operators.id"), nullable=True, index=True
    )
    notification_type: Mapped[NotificationType] = mapped_column(
        SQLEnum(NotificationType, values_callable=lambda x: [e.value for e in x]),
    )
    title: Mapped[str] = mapped_column(String(255))
    message: Mapped[str] = mapped_column(Text)
    data: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    is_read: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class SalesFloorStatus(Base):
    """Live status board entry, one per operator."""

    __tablename__ = "sales_floor_status"

    id: Mapped[int] = mapped_column(primary_key=True)
    operator_id: Mapped[int] = mapped_column(ForeignKey("operators.id"), unique=True, index=True)
    status: Mapped[FloorStatus] = mapped_column(
        SQLEnum(FloorStatus, values_callable=lambda x: [e.value for e in x]),
        default=FloorStatus.OFFLINE,
    )
    current_company_id: Mapped[int | None] = mapped_column(ForeignKey("companies.id"), nullable=True)
    current_project_id: Mapped[int | None] = mapped_column(ForeignKey("projects.id"), nullable=True)
    call_start_time: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    calls_today: Mapped[int] = mapped_column(Integer, default=0)
    appointments_today: Mapped[int] = mapped_column(Integer, default=0)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    @property
    def is_from_earlier_day(self) -> bool:
        """Whether the counters were last touched before today in business time."""
        return self.updated_at is not None and utc_to_local(self.updated_at).date() != local_today()

    def roll_over_day(self) -> None:
        if self.is_from_earlier_day:
            self.calls_today = 0
            self.appointments_today = 0

    def record_call(self, is_appointment: bool) -> None:
        self.roll_over_day()
        self.calls_today = (self.calls_today or 0) + 1
        if is_appointment:
            self.appointments_today = (self.appointments_today or 0) + 1
        self.updated_at = datetime.utcnow()
