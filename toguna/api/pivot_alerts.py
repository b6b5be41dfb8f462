"""Pivot alert API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from toguna.api.auth import Director
from toguna.core.pivot_monitor import PivotMonitor
from toguna.services.database import get_db
from toguna.models.quality import PivotAlert, PivotAlertStatus
from toguna.schemas.quality import PivotAlertResponse, PivotCheckResponse

router = APIRouter()


async def get_alert_or_404(db: AsyncSession, alert_id: int) -> PivotAlert:
    alert = await db.get(PivotAlert, alert_id)
    if not alert:
        raise HTTPException(status_code=404, detail="Pivot alert not found")
    return alert


@router.get("", response_model=list[PivotAlertResponse])
async def list_alerts(
    db: Annotated[AsyncSession, Depends(get_db)],
    status: PivotAlertStatus | None = None,
    project_id: int | None = None,
) -> list[PivotAlertResponse]:
    query = select(PivotAlert).order_by(PivotAlert.created_at.desc())
    if status:
        query = query.where(PivotAlert.status == status)
    if project_id is not None:
        query = query.where(PivotAlert.project_id == project_id)
    result = await db.execute(query)
    return [PivotAlertResponse.model_validate(a) for a in result.scalars().all()]


@router.post("/check", response_model=PivotCheckResponse)
async def check_projects(
    db: Annotated[AsyncSession, Depends(get_db)],
    project_id: int | None = None,
) -> PivotCheckResponse:
    """Run the pivot checks now. Limited to one project when given."""
    checked, created = await PivotMonitor(db).check_all(project_id)
    return PivotCheckResponse(
        projects_checked=checked,
        alerts_created=[PivotAlertResponse.model_validate(a) for a in created],
    )


@router.post("/{alert_id}/acknowledge", response_model=PivotAlertResponse)
async def acknowledge_alert(
    alert_id: int,
    director: Director,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> PivotAlertResponse:
    alert = await get_alert_or_404(db, alert_id)
    if alert.status != PivotAlertStatus.ACTIVE:
        raise HTTPException(status_code=400, detail=f"Alert is already {alert.status.value}")
    alert.mark_acknowledged(director.id)
    await db.commit()
    await db.refresh(alert)
    return PivotAlertResponse.model_validate(alert)


@router.post("/{alert_id}/resolve", response_model=PivotAlertResponse)
async def resolve_alert(
    alert_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> PivotAlertResponse:
    alert = await get_alert_or_404(db, alert_id)
    if alert.status == PivotAlertStatus.RESOLVED:
        raise HTTPException(status_code=400, detail="Alert is already resolved")
    alert.mark_resolved()
    await db.commit()
    await db.refresh(alert)
    return PivotAlertResponse.model_validate(alert)
