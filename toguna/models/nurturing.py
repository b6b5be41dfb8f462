"""Document nurturing models: templates, sends, tracking, engagement and followup rules."""

from datetime import datetime
from enum import Enum

from sqlalchemy import (
    String, DateTime, Text, Integer, Boolean, JSON, ForeignKey, Enum as SQLEnum, Index,
)
from sqlalchemy.orm import Mapped, mapped_column

from toguna.services.database import Base


class TemplateType(str, Enum):
    EMAIL = "email"
    DM = "dm"
    LETTER = "letter"


class SendChannel(str, Enum):
    EMAIL = "email"
    DM = "dm"
    LETTER = "letter"
    FAX = "fax"


class SendStatus(str, Enum):
    """Delivery state of a document send."""

    DRAFT = "draft"
    SENT = "sent"
    DELIVERED = "delivered"
    BOUNCED = "bounced"
    FAILED = "failed"


class TrackingEventType(str, Enum):
    OPEN = "open"
    PAGE_VIEW = "page_view"
    LINK_CLICK = "link_click"
    DOWNLOAD = "download"
    FORWARD = "forward"


class EngagementTrend(str, Enum):
    RISING = "rising"
    STABLE = "stable"
    FALLING = "falling"


class AlertLevel(str, Enum):
    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class DocumentTemplate(Base):
    """Reusable email, DM or letter body with {{variable}} placeholders."""

    __tablename__ = "document_templates"

    id: Mapped[int] = mapped_column(primary_key=True)
    project_id: Mapped[int | None] = mapped_column(
        ForeignKey("projects.id"), nullable=True, index=True
    )
    name: Mapped[str] = mapped_column(String(255))
    template_type: Mapped[TemplateType] = mapped_column(
        SQLEnum(TemplateType, values_callable=lambda x: [e.value for e in x]),
        default=TemplateType.EMAIL,
    )
    subject: Mapped[str | None] = mapped_column(String(500), nullable=True)
    body: Mapped[str] = mapped_column(Text)
    variables: Mapped[list | None] = mapped_column(JSON, nullable=True)
    document_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )


class DocumentSend(Base):
    """A rendered template delivered to one company."""

    __tablename__ = "document_sends"

    id: Mapped[int] = mapped_column(primary_key=True)
    template_id: Mapped[int | None] = mapped_column(
        ForeignKey("document_templates.id"), nullable=True, index=True
    )
    company_id: Mapped[int] = mapped_column(ForeignKey("companies.id"), index=True)
    project_id: Mapped[int | None] = mapped_column(
        ForeignKey("projects.id"), nullable=True, index=True
    )
    operator_id: Mapped[int | None] = mapped_column(ForeignKey("operators.id"), nullable=True)

    channel: Mapped[SendChannel] = mapped_column(
        SQLEnum(SendChannel, values_callable=lambda x: [e.value for e in x]),
        default=SendChannel.EMAIL,
    )
    recipient: Mapped[str | None] = mapped_column(String(255), nullable=True)
    subject: Mapped[str | None] = mapped_column(String(500), nullable=True)
    body: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[SendStatus] = mapped_column(
        SQLEnum(SendStatus, values_callable=lambda x: [e.value for e in x]),
        default=SendStatus.DRAFT,
        index=True,
    )
    provider_message_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    error: Mapped[str | None] = mapped_column(Text, nullable=True)

    sent_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    opened_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    open_count: Mapped[int] = mapped_column(Integer, default=0)
    click_count: Mapped[int] = mapped_column(Integer, default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    def mark_sent(self, message_id: str | None = None) -> None:
        self.status = SendStatus.SENT
        self.sent_at = datetime.utcnow()
        self.provider_message_id = message_id
        self.error = None

    def mark_failed(self, error: str) -> None:
        self.status = SendStatus.FAILED
        self.error = error


class DocumentTracking(Base):
    """A single recipient interaction with a sent document."""

    __tablename__ = "document_tracking"

    id: Mapped[int] = mapped_column(primary_key=True)
    send_id: Mapped[int] = mapped_column(ForeignKey("document_sends.id"), index=True)
    event_type: Mapped[TrackingEventType] = mapped_column(
        SQLEnum(TrackingEventType, values_callable=lambda x: [e.value for e in x]),
    )
    event_metadata: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    user_agent: Mapped[str | None] = mapped_column(String(500), nullable=True)
    ip_address: Mapped[str | None] = mapped_column(String(64), nullable=True)
    tracked_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class EngagementScore(Base):
    """Running engagement score of a company, fed by calls and document events."""

    __tablename__ = "engagement_scores"

    id: Mapped[int] = mapped_column(primary_key=True)
    company_id: Mapped[int] = mapped_column(ForeignKey("companies.id"), unique=True, index=True)
    project_id: Mapped[int | None] = mapped_column(
        ForeignKey("projects.id"), nullable=True, index=True
    )
    score: Mapped[int] = mapped_column(Integer, default=0)
    call_score: Mapped[int] = mapped_column(Integer, default=0)
    document_score: Mapped[int] = mapped_column(Integer, default=0)
    trend: Mapped[EngagementTrend] = mapped_column(
        SQLEnum(EngagementTrend, values_callable=lambda x: [e.value for e in x]),
        default=EngagementTrend.STABLE,
    )
    alert_level: Mapped[AlertLevel] = mapped_column(
        SQLEnum(AlertLevel, values_callable=lambda x: [e.value for e in x]),
        default=AlertLevel.NONE,
    )
    event_counts: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    last_activity_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )


class FollowupTrigger(str, Enum):
    """Events that fire a followup rule."""

    NO_RESPONSE_AFTER_SEND = "no_response_after_send"
    DOCUMENT_OPENED = "document_opened"
    APPOINTMENT_NO_SHOW = "appointment_no_show"
    CALL_REJECTION = "call_rejection"
    ENGAGEMENT_SCORE_THRESHOLD = "engagement_score_threshold"


class FollowupAction(str, Enum):
    """What a followup rule does once triggered."""

    SEND_EMAIL = "send_email"
    SEND_LINE = "send_line"
    CREATE_TASK = "create_task"
    ALERT_MANAGER = "alert_manager"
    SCHEDULE_CALL = "schedule_call"


class ExecutionResult(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


class FollowupRule(Base):
    """Automated nurturing rule evaluated by the scheduler."""

    __tablename__ = "followup_rules"

    id: Mapped[int] = mapped_column(primary_key=True)
    project_id: Mapped[int | None] = mapped_column(
        ForeignKey("projects.id"), nullable=True, index=True
    )
    name: Mapped[str] = mapped_column(String(255))
    trigger_type: Mapped[FollowupTrigger] = mapped_column(
        SQLEnum(FollowupTrigger, values_callable=lambda x: [e.value for e in x]),
    )
    trigger_conditions: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    action_type: Mapped[FollowupAction] = mapped_column(
        SQLEnum(FollowupAction, values_callable=lambda x: [e.value for e in x]),
    )
    action_config: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    delay_minutes: Mapped[int] = mapped_column(Integer, default=0)
    max_executions: Mapped[int | None] = mapped_column(Integer, nullable=True)
    execution_count: Mapped[int] = mapped_column(Integer, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
    last_run_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    @property
    def is_exhausted(self) -> bool:
        return self.max_executions is not None and self.execution_count >= self.max_executions


class FollowupExecution(Base):
    """Record of a followup rule firing for a company."""

    __tablename__ = "followup_executions"

    id: Mapped[int] = mapped_column(primary_key=True)
    rule_id: Mapped[int] = mapped_column(ForeignKey("followup_rules.id"), index=True)
    company_id: Mapped[int] = mapped_column(ForeignKey("companies.id"), index=True)
    result: Mapped[ExecutionResult] = mapped_column(
        SQLEnum(ExecutionResult, values_callable=lambda x: [e.value for e in x]),
    )
    details: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    executed_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)

    __table_args__ = (
        Index("ix_followup_executions_rule_company", "rule_id", "company_id"),
    )
