"""Sales floor status board API endpoints."""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from toguna.api.auth import CurrentOperator
from toguna.services.database import get_db
from toguna.services.realtime import publish_event
from toguna.models.notification import FloorStatus, SalesFloorStatus
from toguna.models.operator import Operator
from toguna.schemas.notification import FloorStatusUpdate, FloorEntry

router = APIRouter()


@router.put("/me", response_model=FloorEntry)
async def update_my_status(
    data: FloorStatusUpdate,
    operator: CurrentOperator,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> FloorEntry:
    """Set the caller's floor status and push the change to dashboards."""
    result = await db.execute(
        select(SalesFloorStatus).where(SalesFloorStatus.operator_id == operator.id)
    )
    entry = result.scalar_one_or_none()
    if entry is None:
        entry = SalesFloorStatus(operator_id=operator.id, calls_today=0, appointments_today=0)
        db.add(entry)
    else:
        entry.roll_over_day()

    if data.status == FloorStatus.ON_CALL and entry.status != FloorStatus.ON_CALL:
        entry.call_start_time = datetime.utcnow()
    elif data.status != FloorStatus.ON_CALL:
        entry.call_start_time = None
    entry.status = data.status
    entry.current_company_id = data.current_company_id
    entry.current_project_id = data.current_project_id
    entry.updated_at = datetime.utcnow()

    await db.commit()
    await db.refresh(entry)

    response = FloorEntry.model_validate(entry)
    response.operator_name = operator.name
    await publish_event("floor_status", response.model_dump(mode="json"))
    return response


@router.get("", response_model=list[FloorEntry])
async def get_floor(
    operator: CurrentOperator,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[FloorEntry]:
    """Current status of every operator on the floor. Directors only."""
    if not operator.is_director:
        raise HTTPException(status_code=403, detail="Director role required")

    result = await db.execute(
        select(SalesFloorStatus, Operator.name)
        .join(Operator, Operator.id == SalesFloorStatus.operator_id)
        .order_by(Operator.name)
    )
    entries = []
    for entry, name in result.all():
        response = FloorEntry.model_validate(entry)
        response.operator_name = name
        if entry.is_from_earlier_day:
            response.calls_today = 0
            response.appointments_today = 0
        entries.append(response)
    return entries
