"""Compliance models: subsidy reports, retained documents and the audit trail."""

from datetime import date, datetime
from enum import Enum

from sqlalchemy import (
    String, DateTime, Date, Text, Integer, Boolean, JSON, ForeignKey, Enum as SQLEnum, Index,
)
from sqlalchemy.orm import Mapped, mapped_column

from toguna.services.database import Base


class SubsidyReportType(str, Enum):
    PERFORMANCE = "performance"
    EFFECT = "effect"
    PRODUCTIVITY = "productivity"
    WAGE_INCREASE = "wage_increase"


class SubsidyReportStatus(str, Enum):
    """Subsidy application workflow."""

    DRAFT = "draft"
    GENERATED = "generated"
    REVIEWED = "reviewed"
    SUBMITTED = "submitted"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class DocumentType(str, Enum):
    CONTRACT = "contract"
    ORDER = "order"
    DELIVERY = "delivery"
    INVOICE = "invoice"
    DAILY_REPORT = "daily_report"
    OTHER = "other"


class DocumentStatus(str, Enum):
    ACTIVE = "active"
    ARCHIVED = "archived"


class SubsidyReport(Base):
    """Evidence report for a government subsidy application."""

    __tablename__ = "subsidy_reports"

    id: Mapped[int] = mapped_column(primary_key=True)
    client_id: Mapped[int | None] = mapped_column(ForeignKey("clients.id"), nullable=True, index=True)
    project_id: Mapped[int | None] = mapped_column(ForeignKey("projects.id"), nullable=True, index=True)
    report_type: Mapped[SubsidyReportType] = mapped_column(
        SQLEnum(SubsidyReportType, values_callable=lambda x: [e.value for e in x]),
    )
    title: Mapped[str | None] = mapped_column(String(255), nullable=True)
    period_start: Mapped[date] = mapped_column(Date)
    period_end: Mapped[date] = mapped_column(Date)
    status: Mapped[SubsidyReportStatus] = mapped_column(
        SQLEnum(SubsidyReportStatus, values_callable=lambda x: [e.value for e in x]),
        default=SubsidyReportStatus.DRAFT,
        index=True,
    )
    metrics: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    productivity_data: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    generated_by: Mapped[int | None] = mapped_column(ForeignKey("operators.id"), nullable=True)
    generated_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    submitted_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )


class ComplianceDocument(Base):
    """A business record kept for the statutory retention period."""

    __tablename__ = "compliance_documents"

    id: Mapped[int] = mapped_column(primary_key=True)
    client_id: Mapped[int | None] = mapped_column(ForeignKey("clients.id"), nullable=True, index=True)
    project_id: Mapped[int | None] = mapped_column(ForeignKey("projects.id"), nullable=True)
    document_type: Mapped[DocumentType] = mapped_column(
        SQLEnum(DocumentType, values_callable=lambda x: [e.value for e in x]),
    )
    title: Mapped[str] = mapped_column(String(255))
    file_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    file_hash: Mapped[str | None] = mapped_column(String(64), nullable=True)
    retention_start: Mapped[date] = mapped_column(Date)
    retention_end: Mapped[date] = mapped_column(Date, index=True)
    is_immutable: Mapped[bool] = mapped_column(Boolean, default=True)
    status: Mapped[DocumentStatus] = mapped_column(
        SQLEnum(DocumentStatus, values_callable=lambda x: [e.value for e in x]),
        default=DocumentStatus.ACTIVE,
        index=True,
    )
    uploaded_by: Mapped[int | None] = mapped_column(ForeignKey("operators.id"), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )


class AuditLog(Base):
    """Append-only record of a mutating action."""

    __tablename__ = "audit_logs"

    id: Mapped[int] = mapped_column(primary_key=True)
    operator_id: Mapped[int | None] = mapped_column(ForeignKey("operators.id"), nullable=True, index=True)
    action: Mapped[str] = mapped_column(String(100), index=True)
    entity_type: Mapped[str] = mapped_column(String(100), index=True)
    entity_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    changes: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    ip_address: Mapped[str | None] = mapped_column(String(64), nullable=True)
    user_agent: Mapped[str | None] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)

    __table_args__ = (
        Index("ix_audit_logs_entity", "entity_type", "entity_id"),
    )
