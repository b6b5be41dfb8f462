"""Document nurturing API endpoints: templates, sends and engagement."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from toguna.api.auth import Director
from toguna.core.engagement import HIGH_ENGAGEMENT_SCORE
from toguna.core.nurturing import default_values, dispatch_send, find_variables, render
from toguna.services.database import get_db
from toguna.services.email_service import get_email_service
from toguna.models.company import Company
from toguna.models.nurturing import (
    DocumentSend,
    DocumentTemplate,
    EngagementScore,
    SendChannel,
    SendStatus,
)
from toguna.models.project import Project
from toguna.schemas.nurturing import (
    TemplateCreate,
    TemplateUpdate,
    TemplateResponse,
    TemplatePreviewRequest,
    TemplatePreviewResponse,
    SendCreate,
    SendResponse,
    SendListResponse,
    EngagementResponse,
)

router = APIRouter()


async def get_template_or_404(db: AsyncSession, template_id: int) -> DocumentTemplate:
    template = await db.get(DocumentTemplate, template_id)
    if not template:
        raise HTTPException(status_code=404, detail="Template not found")
    return template


async def get_send_or_404(db: AsyncSession, send_id: int) -> DocumentSend:
    send = await db.get(DocumentSend, send_id)
    if not send:
        raise HTTPException(status_code=404, detail="Document send not found")
    return send


# =============================================================================
# TEMPLATES
# =============================================================================

@router.get("/templates", response_model=list[TemplateResponse])
async def list_templates(
    db: Annotated[AsyncSession, Depends(get_db)],
    project_id: int | None = None,
    active_only: bool = False,
) -> list[TemplateResponse]:
    query = select(DocumentTemplate).order_by(DocumentTemplate.name)
    if project_id is not None:
        query = query.where(DocumentTemplate.project_id == project_id)
    if active_only:
        query = query.where(DocumentTemplate.is_active == True)  # noqa: E712
    result = await db.execute(query)
    return [TemplateResponse.model_validate(t) for t in result.scalars().all()]


@router.post("/templates", response_model=TemplateResponse, status_code=201)
async def create_template(
    data: TemplateCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TemplateResponse:
    template = DocumentTemplate(**data.model_dump(), variables=find_variables(data.subject, data.body))
    db.add(template)
    await db.commit()
    await db.refresh(template)
    return TemplateResponse.model_validate(template)


@router.get("/templates/{template_id}", response_model=TemplateResponse)
async def get_template(
    template_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TemplateResponse:
    return TemplateResponse.model_validate(await get_template_or_404(db, template_id))


@router.patch("/templates/{template_id}", response_model=TemplateResponse)
async def update_template(
    template_id: int,
    data: TemplateUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TemplateResponse:
    template = await get_template_or_404(db, template_id)
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(template, field, value)
    template.variables = find_variables(template.subject, template.body)

    await db.commit()
    await db.refresh(template)
    return TemplateResponse.model_validate(template)


@router.delete("/templates/{template_id}")
async def delete_template(
    template_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """Deactivate a template. Past sends keep pointing at it."""
    template = await get_template_or_404(db, template_id)
    template.is_active = False
    await db.commit()
    return {"success": True}


@router.post("/templates/{template_id}/preview", response_model=TemplatePreviewResponse)
async def preview_template(
    template_id: int,
    data: TemplatePreviewRequest,
    director: Director,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TemplatePreviewResponse:
    """Render a template for a company without sending it."""
    template = await get_template_or_404(db, template_id)
    company = None
    if data.company_id is not None:
        company = await db.get(Company, data.company_id)
        if not company:
            raise HTTPException(status_code=404, detail="Company not found")
    project = await db.get(Project, template.project_id) if template.project_id else None

    values = default_values(company, project, director)
    values.update(data.values)
    subject, missing_subject = render(template.subject, values)
    body, missing_body = render(template.body, values)

    return TemplatePreviewResponse(
        subject=subject,
        body=body,
        missing_variables=list(dict.fromkeys(missing_subject + missing_body)),
    )


# =============================================================================
# SENDS
# =============================================================================

@router.get("/sends", response_model=SendListResponse)
async def list_sends(
    db: Annotated[AsyncSession, Depends(get_db)],
    project_id: int | None = None,
    company_id: int | None = None,
    status: SendStatus | None = None,
    channel: SendChannel | None = None,
    limit: int = 100,
) -> SendListResponse:
    query = select(DocumentSend).order_by(DocumentSend.created_at.desc())
    if project_id is not None:
        query = query.where(DocumentSend.project_id == project_id)
    if company_id is not None:
        query = query.where(DocumentSend.company_id == company_id)
    if status:
        query = query.where(DocumentSend.status == status)
    if channel:
        query = query.where(DocumentSend.channel == channel)

    result = await db.execute(query.limit(limit))
    sends = result.scalars().all()

    sent_count = sum(1 for s in sends if s.sent_at is not None)
    opened_count = sum(1 for s in sends if s.opened_at is not None)
    return SendListResponse(
        sends=[SendResponse.model_validate(s) for s in sends],
        total=len(sends),
        sent_count=sent_count,
        opened_count=opened_count,
        open_rate=round(opened_count / sent_count * 100, 1) if sent_count else 0.0,
    )


@router.post("/sends", response_model=SendResponse, status_code=201)
async def create_send(
    data: SendCreate,
    director: Director,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> SendResponse:
    """
    Prepare a send by rendering its template for the company.

    With `send_now` the send is dispatched immediately; a delivery failure
    is stored on the send and reported as 502.
    """
    company = await db.get(Company, data.company_id)
    if not company:
        raise HTTPException(status_code=404, detail="Company not found")

    template = await get_template_or_404(db, data.template_id) if data.template_id else None
    if template is None and not data.body:
        raise HTTPException(status_code=400, detail="Either template_id or body is required")

    project = await db.get(Project, company.project_id) if company.project_id else None
    values = default_values(company, project, director)
    values.update(data.values)
    subject, _ = render(data.subject or (template.subject if template else None), values)
    body, _ = render(data.body or template.body, values)

    recipient = data.recipient
    if recipient is None and data.channel == SendChannel.EMAIL:
        recipient = company.email

    send = DocumentSend(
        template_id=template.id if template else None,
        company_id=company.id,
        project_id=company.project_id,
        operator_id=director.id,
        channel=data.channel,
        recipient=recipient,
        subject=subject,
        body=body,
        status=SendStatus.DRAFT,
        open_count=0,
        click_count=0,
    )
    db.add(send)
    await db.commit()
    await db.refresh(send)

    if data.send_now:
        return await _dispatch(db, send)
    return SendResponse.model_validate(send)


async def _dispatch(db: AsyncSession, send: DocumentSend) -> SendResponse:
    delivered = await dispatch_send(db, send, get_email_service())
    await db.commit()
    await db.refresh(send)
    if not delivered:
        raise HTTPException(status_code=502, detail=f"Document delivery failed: {send.error}")
    return SendResponse.model_validate(send)


@router.get("/sends/{send_id}", response_model=SendResponse)
async def get_send(
    send_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> SendResponse:
    return SendResponse.model_validate(await get_send_or_404(db, send_id))


@router.post("/sends/{send_id}/dispatch", response_model=SendResponse)
async def dispatch(
    send_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> SendResponse:
    """Deliver a draft or retry a failed send."""
    send = await get_send_or_404(db, send_id)
    if send.status not in (SendStatus.DRAFT, SendStatus.FAILED):
        raise HTTPException(status_code=400, detail=f"Send is already {send.status.value}")
    return await _dispatch(db, send)


# =============================================================================
# ENGAGEMENT
# =============================================================================

async def _engagement_responses(db: AsyncSession, scores) -> list[EngagementResponse]:
    company_ids = {s.company_id for s in scores}
    names: dict[int, str] = {}
    if company_ids:
        result = await db.execute(select(Company.id, Company.name).where(Company.id.in_(company_ids)))
        names = dict(result.all())

    responses = []
    for score in scores:
        response = EngagementResponse.model_validate(score)
        response.company_name = names.get(score.company_id)
        responses.append(response)
    return responses


@router.get("/engagement", response_model=list[EngagementResponse])
async def list_engagement(
    db: Annotated[AsyncSession, Depends(get_db)],
    project_id: int | None = None,
    min_score: int = 0,
    limit: int = 100,
) -> list[EngagementResponse]:
    query = (
        select(EngagementScore)
        .where(EngagementScore.score >= min_score)
        .order_by(EngagementScore.score.desc())
    )
    if project_id is not None:
        query = query.where(EngagementScore.project_id == project_id)
    result = await db.execute(query.limit(limit))
    return await _engagement_responses(db, result.scalars().all())


@router.get("/engagement/high", response_model=list[EngagementResponse])
async def list_high_engagement(
    db: Annotated[AsyncSession, Depends(get_db)],
    project_id: int | None = None,
) -> list[EngagementResponse]:
    """Companies hot enough to call now."""
    query = (
        select(EngagementScore)
        .where(EngagementScore.score >= HIGH_ENGAGEMENT_SCORE)
        .order_by(EngagementScore.score.desc())
    )
    if project_id is not None:
        query = query.where(EngagementScore.project_id == project_id)
    result = await db.execute(query)
    return await _engagement_responses(db, result.scalars().all())


@router.get("/engagement/{company_id}", response_model=EngagementResponse)
async def get_engagement(
    company_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> EngagementResponse:
    result = await db.execute(select(EngagementScore).where(EngagementScore.company_id == company_id))
    score = result.scalar_one_or_none()
    if not score:
        raise HTTPException(status_code=404, detail="Engagement score not found")
    return (await _engagement_responses(db, [score]))[0]
