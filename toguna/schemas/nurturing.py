"""Nurturing schemas: templates, sends, engagement and followup rules."""

from datetime import datetime

from pydantic import BaseModel, Field

from toguna.models.nurturing import (
    TemplateType,
    SendChannel,
    SendStatus,
    EngagementTrend,
    AlertLevel,
    FollowupTrigger,
    FollowupAction,
    ExecutionResult,
)


# Templates

class TemplateBase(BaseModel):
    name: str
    project_id: int | None = None
    template_type: TemplateType = TemplateType.EMAIL
    subject: str | None = None
    body: str
    document_url: str | None = None
    is_active: bool = True


class TemplateCreate(TemplateBase):
    """Schema for creating a template. Variables are detected from the body."""


class TemplateUpdate(BaseModel):
    name: str | None = None
    template_type: TemplateType | None = None
    subject: str | None = None
    body: str | None = None
    document_url: str | None = None
    is_active: bool | None = None


class TemplateResponse(TemplateBase):
    id: int
    variables: list[str] | None = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TemplatePreviewRequest(BaseModel):
    company_id: int | None = None
    values: dict[str, str] = {}


class TemplatePreviewResponse(BaseModel):
    subject: str | None = None
    body: str
    missing_variables: list[str]


# Sends

class SendCreate(BaseModel):
    """Schema for preparing a document send."""

    company_id: int
    template_id: int | None = None
    channel: SendChannel = SendChannel.EMAIL
    recipient: str | None = None
    subject: str | None = None
    body: str | None = None
    values: dict[str, str] = {}
    send_now: bool = False


class SendResponse(BaseModel):
    id: int
    template_id: int | None = None
    company_id: int
    project_id: int | None = None
    operator_id: int | None = None
    channel: SendChannel
    recipient: str | None = None
    subject: str | None = None
    body: str | None = None
    status: SendStatus
    error: str | None = None
    sent_at: datetime | None = None
    opened_at: datetime | None = None
    open_count: int
    click_count: int
    created_at: datetime

    class Config:
        from_attributes = True


class SendListResponse(BaseModel):
    sends: list[SendResponse]
    total: int
    sent_count: int
    opened_count: int
    open_rate: float


# Engagement

class EngagementResponse(BaseModel):
    id: int
    company_id: int
    project_id: int | None = None
    score: int
    call_score: int
    document_score: int
    trend: EngagementTrend
    alert_level: AlertLevel
    event_counts: dict | None = None
    last_activity_at: datetime | None = None

    # Joined for display
    company_name: str | None = None

    class Config:
        from_attributes = True


# Followup rules

class FollowupRuleBase(BaseModel):
    name: str
    project_id: int | None = None
    trigger_type: FollowupTrigger
    trigger_conditions: dict = {}
    action_type: FollowupAction
    action_config: dict = {}
    delay_minutes: int = Field(default=0, ge=0)
    max_executions: int | None = Field(default=None, ge=1)
    is_active: bool = True


class FollowupRuleCreate(FollowupRuleBase):
    """Schema for creating a followup rule."""


class FollowupRuleUpdate(BaseModel):
    name: str | None = None
    trigger_type: FollowupTrigger | None = None
    trigger_conditions: dict | None = None
    action_type: FollowupAction | None = None
    action_config: dict | None = None
    delay_minutes: int | None = Field(default=None, ge=0)
    max_executions: int | None = Field(default=None, ge=1)
    is_active: bool | None = None


class FollowupRuleResponse(FollowupRuleBase):
    id: int
    execution_count: int
    last_run_at: datetime | None = None
    created_at: datetime

    class Config:
        from_attributes = True


class FollowupExecutionResponse(BaseModel):
    id: int
    rule_id: int
    company_id: int
    result: ExecutionResult
    details: dict | None = None
    executed_at: datetime

    class Config:
        from_attributes = True


class RuleEvaluationResponse(BaseModel):
    rules_evaluated: int
    executions: int
    succeeded: int
    failed: int
    skipped: int
