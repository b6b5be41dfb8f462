"""Prospect company model."""

from datetime import datetime
from enum import Enum

from sqlalchemy import String, DateTime, Text, Integer, ForeignKey, Enum as SQLEnum, Index
from sqlalchemy.orm import Mapped, mapped_column

from toguna.services.database import Base


class CompanyRank(str, Enum):
    """Prospect priority rank."""

    S = "S"
    A = "A"
    B = "B"
    C = "C"


class CompanyStatus(str, Enum):
    """Where a prospect is in the calling funnel."""

    NEW = "new"
    CALLING = "calling"
    APPOINTMENT = "appointment"
    COMPLETED = "completed"
    NG = "ng"


class Company(Base):
    """A prospect on a project's call list."""

    __tablename__ = "companies"

    id: Mapped[int] = mapped_column(primary_key=True)
    project_id: Mapped[int | None] = mapped_column(
        ForeignKey("projects.id"), nullable=True, index=True
    )

    name: Mapped[str] = mapped_column(String(255), index=True)
    industry: Mapped[str | None] = mapped_column(String(100), nullable=True)
    employees: Mapped[int | None] = mapped_column(Integer, nullable=True)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    website: Mapped[str | None] = mapped_column(String(500), nullable=True)

    rank: Mapped[CompanyRank] = mapped_column(
        SQLEnum(CompanyRank, values_callable=lambda x: [e.value for e in x]),
        default=CompanyRank.B,
    )
    status: Mapped[CompanyStatus] = mapped_column(
        SQLEnum(CompanyStatus, values_callable=lambda x: [e.value for e in x]),
        default=CompanyStatus.NEW,
    )
    intent_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    source: Mapped[str | None] = mapped_column(String(100), nullable=True)  # manual, import, crawl

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    __table_args__ = (
        Index("ix_companies_project_status", "project_id", "status"),
    )
