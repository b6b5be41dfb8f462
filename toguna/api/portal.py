"""Client portal: director-issued links and the read-only client view."""

import logging
from datetime import datetime, timedelta
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from toguna.api.auth import Director
from toguna.config import get_settings
from toguna.core import portal
from toguna.core.clock import local_now, local_today, utc_to_local
from toguna.core.compliance import record_audit
from toguna.services.database import get_db
from toguna.models.appointment import Appointment, AppointmentStatus
from toguna.models.call import CallLog, CallResult
from toguna.models.client import Client
from toguna.models.company import Company
from toguna.models.portal import PortalToken
from toguna.models.project import Project
from toguna.models.quality import GoldenCall
from toguna.schemas.portal import (
    PortalTokenCreate,
    PortalTokenResponse,
    PortalView,
    PortalTotals,
    PortalWeek,
    PortalCall,
    PortalAppointment,
    PortalGoldenCall,
)

settings = get_settings()
logger = logging.getLogger(__name__)
router = APIRouter()


def to_token_response(token: PortalToken) -> PortalTokenResponse:
    response = PortalTokenResponse.model_validate(token)
    response.url = f"{settings.frontend_url}/portal/{token.token}"
    return response


# =============================================================================
# LINK MANAGEMENT (directors)
# =============================================================================

@router.post("/tokens", response_model=PortalTokenResponse, status_code=201)
async def create_portal_token(
    data: PortalTokenCreate,
    request: Request,
    director: Director,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> PortalTokenResponse:
    """Issue a portal link for a client, optionally limited to one project."""
    if not await db.get(Client, data.client_id):
        raise HTTPException(status_code=404, detail="Client not found")
    if data.project_id is not None:
        project = await db.get(Project, data.project_id)
        if not project:
            raise HTTPException(status_code=404, detail="Project not found")
        if project.client_id != data.client_id:
            raise HTTPException(status_code=400, detail="Project belongs to another client")

    values = data.model_dump(exclude={"expires_in_days"})
    expires_at = None
    if data.expires_in_days:
        expires_at = datetime.utcnow() + timedelta(days=data.expires_in_days)
    token = PortalToken(**values, expires_at=expires_at, is_active=True, created_by=director.id)
    db.add(token)
    await db.flush()
    record_audit(db, director, "create", "portal_token", token.id, {"client_id": data.client_id}, request)
    await db.commit()
    await db.refresh(token)
    logger.info(f"Portal link {token.id} issued for client {data.client_id}")
    return to_token_response(token)


@router.get("/tokens", response_model=list[PortalTokenResponse])
async def list_portal_tokens(
    director: Director,
    db: Annotated[AsyncSession, Depends(get_db)],
    client_id: int | None = None,
    active_only: bool = False,
) -> list[PortalTokenResponse]:
    query = select(PortalToken).order_by(PortalToken.created_at.desc())
    if client_id is not None:
        query = query.where(PortalToken.client_id == client_id)
    if active_only:
        query = query.where(PortalToken.is_active == True)  # noqa: E712
    result = await db.execute(query)
    return [to_token_response(t) for t in result.scalars().all()]


@router.post("/tokens/{token_id}/revoke", response_model=PortalTokenResponse)
async def revoke_portal_token(
    token_id: int,
    request: Request,
    director: Director,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> PortalTokenResponse:
    token = await db.get(PortalToken, token_id)
    if not token:
        raise HTTPException(status_code=404, detail="Portal token not found")
    if not token.is_active:
        raise HTTPException(status_code=400, detail="Portal token is already revoked")

    token.is_active = False
    record_audit(db, director, "revoke", "portal_token", token.id, None, request)
    await db.commit()
    await db.refresh(token)
    return to_token_response(token)


# =============================================================================
# CLIENT VIEW (public, token-authenticated)
# =============================================================================

@router.get("/view/{token}", response_model=PortalView)
async def view_portal(
    token: str,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> PortalView:
    """
    Read-only results for the client behind a portal link.

    Covers the link's project, or every project of the client. Operator
    names and call notes are never shown.
    """
    result = await db.execute(select(PortalToken).where(PortalToken.token == token))
    access = result.scalar_one_or_none()
    now = datetime.utcnow()
    if access is None or not access.is_usable(now):
        raise HTTPException(status_code=404, detail="Portal link is invalid or expired")

    client = await db.get(Client, access.client_id)
    if client is None:
        raise HTTPException(status_code=404, detail="Portal link is invalid or expired")

    project_query = select(Project).where(Project.client_id == client.id).order_by(Project.id)
    if access.project_id is not None:
        project_query = project_query.where(Project.id == access.project_id)
    projects = (await db.execute(project_query)).scalars().all()
    project_ids = [p.id for p in projects]

    calls = []
    appointments = []
    if project_ids:
        calls = (await db.execute(
            select(CallLog).where(CallLog.project_id.in_(project_ids)).order_by(CallLog.called_at.desc())
        )).scalars().all()
        appointments = (await db.execute(
            select(Appointment)
            .where(Appointment.project_id.in_(project_ids))
            .order_by(Appointment.scheduled_at)
        )).scalars().all()

    appointment_calls = sum(1 for c in calls if c.result == CallResult.APPOINTMENT)
    view = PortalView(
        client_name=client.name,
        project_names=[p.name for p in projects],
        totals=PortalTotals(
            calls=len(calls),
            appointments=appointment_calls,
            appointment_rate=portal.appointment_rate(len(calls), appointment_calls),
        ),
        weekly=[
            PortalWeek(**week)
            for week in portal.weekly_performance(
                [utc_to_local(c.called_at) for c in calls],
                [a.scheduled_at for a in appointments],
                local_today(),
            )
        ],
    )

    if access.can_view_calls:
        view.recent_calls = [
            PortalCall(called_at=utc_to_local(c.called_at), result=c.result, duration=c.duration or 0)
            for c in calls[:portal.RECENT_CALL_LIMIT]
        ]

    if access.can_view_appointments:
        upcoming = [
            a for a in appointments
            if a.status == AppointmentStatus.CONFIRMED and a.scheduled_at >= local_now()
        ]
        names: dict[int, str] = {}
        if upcoming:
            rows = await db.execute(
                select(Company.id, Company.name).where(Company.id.in_({a.company_id for a in upcoming}))
            )
            names = dict(rows.all())
        view.upcoming_appointments = [
            PortalAppointment(
                company_name=names.get(a.company_id),
                scheduled_at=a.scheduled_at,
                meeting_type=a.meeting_type,
            )
            for a in upcoming
        ]

    if access.can_view_golden_calls:
        golden = []
        if project_ids:
            golden = (await db.execute(
                select(GoldenCall)
                .where(GoldenCall.project_id.in_(project_ids), GoldenCall.is_client_visible == True)  # noqa: E712
                .order_by(GoldenCall.created_at.desc())
            )).scalars().all()
        view.golden_calls = [
            PortalGoldenCall(
                title=g.title,
                description=g.description,
                recording_url=g.recording_url,
                total_score=g.total_score,
                created_at=g.created_at,
            )
            for g in golden
        ]

    access.last_accessed_at = now
    await db.commit()
    return view
