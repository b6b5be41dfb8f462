"""Calling project models."""

from datetime import date, datetime
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import (
    String, DateTime, Date, Text, Integer, Float, Boolean, JSON, ForeignKey,
    Enum as SQLEnum, UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from toguna.services.database import Base

if TYPE_CHECKING:
    from toguna.models.client import Client
    from toguna.models.operator import Operator


class ProjectStatus(str, Enum):
    """Project lifecycle."""

    DRAFT = "draft"
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class MemberRole(str, Enum):
    """Role of an operator inside a project."""

    ADMIN = "admin"
    MANAGER = "manager"
    APPOINTER = "appointer"


class Project(Base):
    """An outbound calling campaign run on behalf of a client."""

    __tablename__ = "projects"

    id: Mapped[int] = mapped_column(primary_key=True)
    client_id: Mapped[int | None] = mapped_column(
        ForeignKey("clients.id"), nullable=True, index=True
    )
    client: Mapped["Client"] = relationship(back_populates="projects")

    name: Mapped[str] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    product_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    target_industries: Mapped[list | None] = mapped_column(JSON, nullable=True)

    status: Mapped[ProjectStatus] = mapped_column(
        SQLEnum(ProjectStatus, values_callable=lambda x: [e.value for e in x]),
        default=ProjectStatus.DRAFT,
        index=True,
    )

    # Targets and thresholds
    daily_call_target: Mapped[int | None] = mapped_column(Integer, nullable=True)
    min_appointment_rate: Mapped[float | None] = mapped_column(Float, nullable=True)
    withdrawal_threshold_days: Mapped[int | None] = mapped_column(Integer, nullable=True)

    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    members: Mapped[list["ProjectMember"]] = relationship(
        back_populates="project", cascade="all, delete-orphan"
    )


class ProjectMember(Base):
    """Assignment of an operator to a project."""

    __tablename__ = "project_members"

    id: Mapped[int] = mapped_column(primary_key=True)
    project_id: Mapped[int] = mapped_column(ForeignKey("projects.id"), index=True)
    project: Mapped["Project"] = relationship(back_populates="members")
    operator_id: Mapped[int] = mapped_column(ForeignKey("operators.id"), index=True)
    operator: Mapped["Operator"] = relationship()

    role: Mapped[MemberRole] = mapped_column(
        SQLEnum(MemberRole, values_callable=lambda x: [e.value for e in x]),
        default=MemberRole.APPOINTER,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    joined_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint("project_id", "operator_id", name="uq_project_members_project_operator"),
    )
