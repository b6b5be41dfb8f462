"""Operator management API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from toguna.api.auth import Director
from toguna.core.clock import local_day_bounds_utc, local_today
from toguna.core.compliance import record_audit
from toguna.services.database import get_db
from toguna.models.call import CallLog, CallResult
from toguna.models.operator import Operator, OperatorRole, OperatorStatus
from toguna.schemas.operator import (
    OperatorCreate,
    OperatorUpdate,
    OperatorResponse,
    OperatorStats,
)

router = APIRouter()


async def get_operator_or_404(db: AsyncSession, operator_id: int) -> Operator:
    operator = await db.get(Operator, operator_id)
    if not operator:
        raise HTTPException(status_code=404, detail="Operator not found")
    return operator


@router.get("", response_model=list[OperatorResponse])
async def list_operators(
    db: Annotated[AsyncSession, Depends(get_db)],
    status: OperatorStatus | None = None,
    role: OperatorRole | None = None,
) -> list[OperatorResponse]:
    query = select(Operator).order_by(Operator.name)
    if status:
        query = query.where(Operator.status == status)
    if role:
        query = query.where(Operator.role == role)
    result = await db.execute(query)
    return [OperatorResponse.model_validate(o) for o in result.scalars().all()]


@router.get("/{operator_id}", response_model=OperatorResponse)
async def get_operator(
    operator_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> OperatorResponse:
    return OperatorResponse.model_validate(await get_operator_or_404(db, operator_id))


@router.get("/{operator_id}/stats", response_model=OperatorStats)
async def get_operator_stats(
    operator_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> OperatorStats:
    """Lifetime and today's call numbers for one operator."""
    await get_operator_or_404(db, operator_id)

    result = await db.execute(select(CallLog).where(CallLog.operator_id == operator_id))
    calls = result.scalars().all()

    day_start, day_end = local_day_bounds_utc(local_today())
    total = len(calls)
    appointments = sum(1 for c in calls if c.result == CallResult.APPOINTMENT)

    return OperatorStats(
        operator_id=operator_id,
        total_calls=total,
        total_appointments=appointments,
        appointment_rate=round(appointments / total * 100, 2) if total else 0.0,
        today_calls=sum(1 for c in calls if day_start <= c.called_at < day_end),
        average_duration=round(sum(c.duration or 0 for c in calls) / total, 1) if total else 0.0,
    )


@router.post("", response_model=OperatorResponse, status_code=201)
async def create_operator(
    data: OperatorCreate,
    request: Request,
    director: Director,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> OperatorResponse:
    existing = await db.scalar(
        select(func.count()).select_from(Operator).where(Operator.email == data.email)
    )
    if existing:
        raise HTTPException(status_code=400, detail="Operator email already registered")

    operator = Operator(**data.model_dump())
    db.add(operator)
    await db.flush()
    record_audit(db, director, "create", "operator", operator.id, data.model_dump(mode="json"), request)
    await db.commit()
    await db.refresh(operator)
    return OperatorResponse.model_validate(operator)


@router.patch("/{operator_id}", response_model=OperatorResponse)
async def update_operator(
    operator_id: int,
    data: OperatorUpdate,
    request: Request,
    director: Director,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> OperatorResponse:
    operator = await get_operator_or_404(db, operator_id)
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(operator, field, value)

    record_audit(db, director, "update", "operator", operator.id, data.model_dump(mode="json", exclude_unset=True), request)
    await db.commit()
    await db.refresh(operator)
    return OperatorResponse.model_validate(operator)


@router.delete("/{operator_id}", response_model=OperatorResponse)
async def deactivate_operator(
    operator_id: int,
    request: Request,
    director: Director,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> OperatorResponse:
    """Deactivate instead of deleting; calls and audits keep referencing the row."""
    operator = await get_operator_or_404(db, operator_id)
    if operator.id == director.id:
        raise HTTPException(status_code=400, detail="Cannot deactivate yourself")

    operator.status = OperatorStatus.INACTIVE
    record_audit(db, director, "deactivate", "operator", operator.id, None, request)
    await db.commit()
    await db.refresh(operator)
    return OperatorResponse.model_validate(operator)
