"""Daily operator schedule model."""

from datetime import date, datetime

from sqlalchemy import String, DateTime, Date, Integer, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column

from toguna.services.database import Base


class DailySchedule(Base):
    """A block of time an operator spends calling for one client."""

    __tablename__ = "daily_schedules"

    id: Mapped[int] = mapped_column(primary_key=True)
    operator_id: Mapped[int] = mapped_column(ForeignKey("operators.id"), index=True)
    client_id: Mapped[int] = mapped_column(ForeignKey("clients.id"), index=True)
    schedule_date: Mapped[date] = mapped_column(Date, index=True)
    start_time: Mapped[str] = mapped_column(String(5))  # "HH:MM"
    end_time: Mapped[str] = mapped_column(String(5))
    target_calls: Mapped[int] = mapped_column(Integer, default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        Index("ix_daily_schedules_date_operator", "schedule_date", "operator_id"),
    )
