"""Compliance schemas."""

from datetime import date, datetime

from pydantic import BaseModel, model_validator

from toguna.models.compliance import (
    SubsidyReportType,
    SubsidyReportStatus,
    DocumentType,
    DocumentStatus,
)


class SubsidyReportGenerate(BaseModel):
    """Request to generate a subsidy evidence report."""

    report_type: SubsidyReportType
    period_start: date
    period_end: date
    client_id: int | None = None
    project_id: int | None = None
    title: str | None = None

    @model_validator(mode="after")
    def check_period(self) -> "SubsidyReportGenerate":
        if self.period_end < self.period_start:
            raise ValueError("period_end must not be before period_start")
        return self


class SubsidyReportResponse(BaseModel):
    id: int
    client_id: int | None = None
    project_id: int | None = None
    report_type: SubsidyReportType
    title: str | None = None
    period_start: date
    period_end: date
    status: SubsidyReportStatus
    metrics: dict | None = None
    productivity_data: dict | None = None
    generated_by: int | None = None
    generated_at: datetime | None = None
    submitted_at: datetime | None = None
    created_at: datetime

    class Config:
        from_attributes = True


class SubsidyStatusUpdate(BaseModel):
    status: SubsidyReportStatus


class ComplianceDocumentCreate(BaseModel):
    """Register a document for retention. Content is hashed when given."""

    document_type: DocumentType
    title: str
    client_id: int | None = None
    project_id: int | None = None
    file_url: str | None = None
    content: str | None = None
    retention_start: date | None = None
    is_immutable: bool = True


class ComplianceDocumentUpdate(BaseModel):
    title: str | None = None
    file_url: str | None = None
    document_type: DocumentType | None = None


class ComplianceDocumentResponse(BaseModel):
    id: int
    client_id: int | None = None
    project_id: int | None = None
    document_type: DocumentType
    title: str
    file_url: str | None = None
    file_hash: str | None = None
    retention_start: date
    retention_end: date
    is_immutable: bool
    status: DocumentStatus
    uploaded_by: int | None = None
    created_at: datetime

    class Config:
        from_attributes = True


class HashVerifyRequest(BaseModel):
    content: str


class HashVerifyResponse(BaseModel):
    document_id: int
    matches: bool
    stored_hash: str | None = None
    computed_hash: str


class RetentionAlert(BaseModel):
    document: ComplianceDocumentResponse
    days_remaining: int
    bucket: str  # expired, within_30, within_60, within_90


class RetentionAlertsResponse(BaseModel):
    alerts: list[RetentionAlert]
    counts: dict[str, int]


class AuditLogResponse(BaseModel):
    id: int
    operator_id: int | None = None
    action: str
    entity_type: str
    entity_id: int | None = None
    changes: dict | None = None
    ip_address: str | None = None
    user_agent: str | None = None
    created_at: datetime

    class Config:
        from_attributes = True
