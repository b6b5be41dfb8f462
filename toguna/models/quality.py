"""Call quality, golden call and pivot alert models."""

from datetime import datetime
from enum import Enum

from sqlalchemy import String, DateTime, Text, Integer, Boolean, JSON, ForeignKey, Enum as SQLEnum, Index
from sqlalchemy.orm import Mapped, mapped_column

from toguna.services.database import Base


class CallQualityScore(Base):
    """Six-KPI quality score for a single call."""

    __tablename__ = "call_quality_scores"

    id: Mapped[int] = mapped_column(primary_key=True)
    call_log_id: Mapped[int] = mapped_column(ForeignKey("call_logs.id"), unique=True, index=True)
    operator_id: Mapped[int] = mapped_column(ForeignKey("operators.id"), index=True)
    project_id: Mapped[int | None] = mapped_column(
        ForeignKey("projects.id"), nullable=True, index=True
    )

    greeting_score: Mapped[int] = mapped_column(Integer)
    hearing_score: Mapped[int] = mapped_column(Integer)
    proposal_score: Mapped[int] = mapped_column(Integer)
    closing_score: Mapped[int] = mapped_column(Integer)
    pace_score: Mapped[int] = mapped_column(Integer)
    tone_score: Mapped[int] = mapped_column(Integer)
    total_score: Mapped[int] = mapped_column(Integer, index=True)

    positive_points: Mapped[list | None] = mapped_column(JSON, nullable=True)
    improvement_points: Mapped[list | None] = mapped_column(JSON, nullable=True)
    coaching_tip: Mapped[str | None] = mapped_column(Text, nullable=True)

    scored_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)


class GoldenCall(Base):
    """A curated exemplary call used for training."""

    __tablename__ = "golden_calls"

    id: Mapped[int] = mapped_column(primary_key=True)
    call_log_id: Mapped[int | None] = mapped_column(
        ForeignKey("call_logs.id"), nullable=True, index=True
    )
    operator_id: Mapped[int | None] = mapped_column(ForeignKey("operators.id"), nullable=True)
    project_id: Mapped[int | None] = mapped_column(
        ForeignKey("projects.id"), nullable=True, index=True
    )
    title: Mapped[str] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    tags: Mapped[list | None] = mapped_column(JSON, nullable=True)
    recording_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    total_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    curated_by: Mapped[int | None] = mapped_column(ForeignKey("operators.id"), nullable=True)
    is_client_visible: Mapped[bool] = mapped_column(Boolean, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )


class PivotAlertType(str, Enum):
    LOW_RATE = "low_rate"
    HIGH_REJECTION = "high_rejection"


class PivotAlertSeverity(str, Enum):
    CRITICAL = "critical"
    WARNING = "warning"


class PivotAlertStatus(str, Enum):
    """Pivot alert lifecycle."""

    ACTIVE = "active"
    ACKNOWLEDGED = "acknowledged"
    RESOLVED = "resolved"


class PivotAlert(Base):
    """Warning that a project's numbers call for a change of approach."""

    __tablename__ = "pivot_alerts"

    id: Mapped[int] = mapped_column(primary_key=True)
    project_id: Mapped[int] = mapped_column(ForeignKey("projects.id"), index=True)
    alert_type: Mapped[PivotAlertType] = mapped_column(
        SQLEnum(PivotAlertType, values_callable=lambda x: [e.value for e in x]),
    )
    severity: Mapped[PivotAlertSeverity] = mapped_column(
        SQLEnum(PivotAlertSeverity, values_callable=lambda x: [e.value for e in x]),
    )
    message: Mapped[str] = mapped_column(Text)
    metrics: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    suggestions: Mapped[list | None] = mapped_column(JSON, nullable=True)
    status: Mapped[PivotAlertStatus] = mapped_column(
        SQLEnum(PivotAlertStatus, values_callable=lambda x: [e.value for e in x]),
        default=PivotAlertStatus.ACTIVE,
        index=True,
    )
    acknowledged_by: Mapped[int | None] = mapped_column(ForeignKey("operators.id"), nullable=True)
    acknowledged_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        Index("ix_pivot_alerts_project_status", "project_id", "status"),
    )

    def mark_acknowledged(self, operator_id: int) -> None:
        self.status = PivotAlertStatus.ACKNOWLEDGED
        self.acknowledged_by = operator_id
        self.acknowledged_at = datetime.utcnow()

    def mark_resolved(self) -> None:
        self.status = PivotAlertStatus.RESOLVED
        self.resolved_at = datetime.utcnow()
