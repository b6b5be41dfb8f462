"""Compliance API endpoints: subsidy reports, retained documents and audit logs."""

from datetime import date, datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import HTMLResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from toguna.api.auth import Director
from toguna.core.clock import local_today
from toguna.core.compliance import (
    add_years,
    compute_file_hash,
    count_buckets,
    record_audit,
    retention_alerts,
    retention_end_for,
    subsidy_metrics,
)
from toguna.core.reports import REPORT_TYPE_LABELS, subsidy_report_html
from toguna.services.database import get_db
from toguna.models.compliance import (
    AuditLog,
    ComplianceDocument,
    DocumentStatus,
    SubsidyReport,
    SubsidyReportStatus,
)
from toguna.schemas.compliance import (
    SubsidyReportGenerate,
    SubsidyReportResponse,
    SubsidyStatusUpdate,
    ComplianceDocumentCreate,
    ComplianceDocumentUpdate,
    ComplianceDocumentResponse,
    HashVerifyRequest,
    HashVerifyResponse,
    RetentionAlert,
    RetentionAlertsResponse,
    AuditLogResponse,
)

router = APIRouter()


async def get_report_or_404(db: AsyncSession, report_id: int) -> SubsidyReport:
    report = await db.get(SubsidyReport, report_id)
    if not report:
        raise HTTPException(status_code=404, detail="Subsidy report not found")
    return report


async def get_document_or_404(db: AsyncSession, document_id: int) -> ComplianceDocument:
    document = await db.get(ComplianceDocument, document_id)
    if not document:
        raise HTTPException(status_code=404, detail="Compliance document not found")
    return document


# =============================================================================
# SUBSIDY REPORTS
# =============================================================================

@router.get("/subsidy-reports", response_model=list[SubsidyReportResponse])
async def list_subsidy_reports(
    db: Annotated[AsyncSession, Depends(get_db)],
    client_id: int | None = None,
    status: SubsidyReportStatus | None = None,
) -> list[SubsidyReportResponse]:
    query = select(SubsidyReport).order_by(SubsidyReport.created_at.desc())
    if client_id is not None:
        query = query.where(SubsidyReport.client_id == client_id)
    if status:
        query = query.where(SubsidyReport.status == status)
    result = await db.execute(query)
    return [SubsidyReportResponse.model_validate(r) for r in result.scalars().all()]


@router.post("/subsidy-reports", response_model=SubsidyReportResponse, status_code=201)
async def generate_subsidy_report(
    data: SubsidyReportGenerate,
    request: Request,
    director: Director,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> SubsidyReportResponse:
    """Compute call metrics and per-operator productivity for the period."""
    metrics, productivity = await subsidy_metrics(db, data.period_start, data.period_end, data.project_id)

    report = SubsidyReport(
        client_id=data.client_id,
        project_id=data.project_id,
        report_type=data.report_type,
        title=data.title or REPORT_TYPE_LABELS[data.report_type.value],
        period_start=data.period_start,
        period_end=data.period_end,
        status=SubsidyReportStatus.GENERATED,
        metrics=metrics,
        productivity_data=productivity,
        generated_by=director.id,
        generated_at=datetime.utcnow(),
    )
    db.add(report)
    await db.flush()
    record_audit(db, director, "generate", "subsidy_report", report.id, data.model_dump(mode="json"), request)
    await db.commit()
    await db.refresh(report)
    return SubsidyReportResponse.model_validate(report)


@router.get("/subsidy-reports/{report_id}", response_model=SubsidyReportResponse)
async def get_subsidy_report(
    report_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> SubsidyReportResponse:
    return SubsidyReportResponse.model_validate(await get_report_or_404(db, report_id))


@router.patch("/subsidy-reports/{report_id}/status", response_model=SubsidyReportResponse)
async def update_subsidy_status(
    report_id: int,
    data: SubsidyStatusUpdate,
    request: Request,
    director: Director,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> SubsidyReportResponse:
    report = await get_report_or_404(db, report_id)
    previous = report.status
    report.status = data.status
    if data.status == SubsidyReportStatus.SUBMITTED and report.submitted_at is None:
        report.submitted_at = datetime.utcnow()

    record_audit(
        db, director, "update_status", "subsidy_report", report.id,
        {"status": [previous.value, data.status.value]},
        request,
    )
    await db.commit()
    await db.refresh(report)
    return SubsidyReportResponse.model_validate(report)


@router.get("/subsidy-reports/{report_id}/html", response_class=HTMLResponse)
async def export_subsidy_report(
    report_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> str:
    """Printable HTML version of a report."""
    return subsidy_report_html(await get_report_or_404(db, report_id))


# =============================================================================
# DOCUMENTS
# =============================================================================

@router.get("/documents", response_model=list[ComplianceDocumentResponse])
async def list_documents(
    db: Annotated[AsyncSession, Depends(get_db)],
    client_id: int | None = None,
    status: DocumentStatus | None = None,
) -> list[ComplianceDocumentResponse]:
    query = select(ComplianceDocument).order_by(ComplianceDocument.retention_end)
    if client_id is not None:
        query = query.where(ComplianceDocument.client_id == client_id)
    if status:
        query = query.where(ComplianceDocument.status == status)
    result = await db.execute(query)
    return [ComplianceDocumentResponse.model_validate(d) for d in result.scalars().all()]


@router.post("/documents", response_model=ComplianceDocumentResponse, status_code=201)
async def create_document(
    data: ComplianceDocumentCreate,
    request: Request,
    director: Director,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ComplianceDocumentResponse:
    """Register a document. Retention runs from today unless a start is given."""
    retention_start = data.retention_start or local_today()
    document = ComplianceDocument(
        client_id=data.client_id,
        project_id=data.project_id,
        document_type=data.document_type,
        title=data.title,
        file_url=data.file_url,
        file_hash=compute_file_hash(data.content) if data.content is not None else None,
        retention_start=retention_start,
        retention_end=retention_end_for(retention_start),
        is_immutable=data.is_immutable,
        status=DocumentStatus.ACTIVE,
        uploaded_by=director.id,
    )
    db.add(document)
    await db.flush()
    record_audit(
        db, director, "create", "compliance_document", document.id,
        data.model_dump(mode="json", exclude={"content"}),
        request,
    )
    await db.commit()
    await db.refresh(document)
    return ComplianceDocumentResponse.model_validate(document)


@router.get("/documents/retention-alerts", response_model=RetentionAlertsResponse)
async def get_retention_alerts(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> RetentionAlertsResponse:
    """Active documents expired or expiring within 90 days."""
    result = await db.execute(
        select(ComplianceDocument).where(ComplianceDocument.status == DocumentStatus.ACTIVE)
    )
    alerts = retention_alerts(list(result.scalars().all()), local_today())
    return RetentionAlertsResponse(
        alerts=[
            RetentionAlert(
                document=ComplianceDocumentResponse.model_validate(a["document"]),
                days_remaining=a["days_remaining"],
                bucket=a["bucket"],
            )
            for a in alerts
        ],
        counts=count_buckets(alerts),
    )


@router.get("/documents/{document_id}", response_model=ComplianceDocumentResponse)
async def get_document(
    document_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ComplianceDocumentResponse:
    return ComplianceDocumentResponse.model_validate(await get_document_or_404(db, document_id))


@router.patch("/documents/{document_id}", response_model=ComplianceDocumentResponse)
async def update_document(
    document_id: int,
    data: ComplianceDocumentUpdate,
    request: Request,
    director: Director,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ComplianceDocumentResponse:
    document = await get_document_or_404(db, document_id)
    if document.is_immutable:
        raise HTTPException(status_code=400, detail="Document is immutable")

    changes = data.model_dump(exclude_unset=True)
    for field, value in changes.items():
        setattr(document, field, value)
    record_audit(
        db, director, "update", "compliance_document", document.id,
        data.model_dump(mode="json", exclude_unset=True),
        request,
    )
    await db.commit()
    await db.refresh(document)
    return ComplianceDocumentResponse.model_validate(document)


@router.post("/documents/{document_id}/verify", response_model=HashVerifyResponse)
async def verify_document(
    document_id: int,
    data: HashVerifyRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> HashVerifyResponse:
    """Check content against the hash stored at registration."""
    document = await get_document_or_404(db, document_id)
    computed = compute_file_hash(data.content)
    return HashVerifyResponse(
        document_id=document.id,
        matches=document.file_hash == computed,
        stored_hash=document.file_hash,
        computed_hash=computed,
    )


@router.post("/documents/{document_id}/extend", response_model=ComplianceDocumentResponse)
async def extend_retention(
    document_id: int,
    request: Request,
    director: Director,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ComplianceDocumentResponse:
    """Keep a document one more year."""
    document = await get_document_or_404(db, document_id)
    if document.status != DocumentStatus.ACTIVE:
        raise HTTPException(status_code=400, detail="Only active documents can be extended")

    previous = document.retention_end
    document.retention_end = add_years(previous, 1)
    record_audit(
        db, director, "extend_retention", "compliance_document", document.id,
        {"retention_end": [previous.isoformat(), document.retention_end.isoformat()]},
        request,
    )
    await db.commit()
    await db.refresh(document)
    return ComplianceDocumentResponse.model_validate(document)


@router.post("/documents/{document_id}/archive", response_model=ComplianceDocumentResponse)
async def archive_document(
    document_id: int,
    request: Request,
    director: Director,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ComplianceDocumentResponse:
    document = await get_document_or_404(db, document_id)
    if document.status == DocumentStatus.ARCHIVED:
        raise HTTPException(status_code=400, detail="Document is already archived")

    document.status = DocumentStatus.ARCHIVED
    record_audit(db, director, "archive", "compliance_document", document.id, None, request)
    await db.commit()
    await db.refresh(document)
    return ComplianceDocumentResponse.model_validate(document)


# =============================================================================
# AUDIT LOGS
# =============================================================================

@router.get("/audit-logs", response_model=list[AuditLogResponse])
async def list_audit_logs(
    db: Annotated[AsyncSession, Depends(get_db)],
    start: date | None = None,
    end: date | None = None,
    action: str | None = None,
    entity_type: str | None = None,
    limit: int = Query(100, ge=1, le=1000),
) -> list[AuditLogResponse]:
    """Audit trail, newest first. `action` is a case-insensitive substring match."""
    query = select(AuditLog).order_by(AuditLog.created_at.desc())
    if start:
        query = query.where(AuditLog.created_at >= datetime.combine(start, datetime.min.time()))
    if end:
        query = query.where(AuditLog.created_at <= datetime.combine(end, datetime.max.time()))
    if action:
        query = query.where(AuditLog.action.ilike(f"%{action}%"))
    if entity_type:
        query = query.where(AuditLog.entity_type == entity_type)
    result = await db.execute(query.limit(limit))
    return [AuditLogResponse.model_validate(a) for a in result.scalars().all()]
