"""Daily schedule grid API endpoints."""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from toguna.core import schedule_optimizer
from toguna.core.clock import local_today
from toguna.services.database import get_db
from toguna.models.client import Client, ClientStatus
from toguna.models.operator import Operator, OperatorStatus
from toguna.models.schedule import DailySchedule
from toguna.schemas.schedule import ScheduleBlock, ScheduleGridResponse, ScheduleRow, OptimizeResponse

router = APIRouter()


async def load_roster(db: AsyncSession) -> tuple[list[Operator], list[Client]]:
    """Active operators and clients in stable id order."""
    operators = await db.execute(
        select(Operator).where(Operator.status == OperatorStatus.ACTIVE).order_by(Operator.id)
    )
    clients = await db.execute(
        select(Client).where(Client.status == ClientStatus.ACTIVE).order_by(Client.id)
    )
    return list(operators.scalars().all()), list(clients.scalars().all())


@router.get("/grid", response_model=ScheduleGridResponse)
async def get_grid(
    db: Annotated[AsyncSession, Depends(get_db)],
    schedule_date: date | None = None,
) -> ScheduleGridResponse:
    """
    Operators by hourly slots for one day.

    Saved blocks are shown when the day has any. Otherwise the optimizer's
    proposal is shown without being saved.
    """
    day = schedule_date or local_today()
    operators, clients = await load_roster(db)

    result = await db.execute(
        select(DailySchedule)
        .where(DailySchedule.schedule_date == day)
        .order_by(DailySchedule.id)
    )
    blocks = list(result.scalars().all())
    is_saved = bool(blocks)
    if not is_saved:
        blocks = schedule_optimizer.optimize(operators, clients, day)

    rows, colors = schedule_optimizer.build_grid(operators, clients, blocks)
    return ScheduleGridResponse(
        schedule_date=day,
        time_slots=schedule_optimizer.TIME_SLOTS,
        rows=[ScheduleRow(**row) for row in rows],
        client_colors=colors,
        is_saved=is_saved,
    )


@router.post("/optimize", response_model=OptimizeResponse)
async def optimize_schedule(
    db: Annotated[AsyncSession, Depends(get_db)],
    schedule_date: date | None = None,
) -> OptimizeResponse:
    """Replace the day's saved blocks with a fresh optimizer run."""
    day = schedule_date or local_today()
    operators, clients = await load_roster(db)

    await db.execute(delete(DailySchedule).where(DailySchedule.schedule_date == day))
    rows = [
        DailySchedule(
            operator_id=block.operator_id,
            client_id=block.client_id,
            schedule_date=block.schedule_date,
            start_time=block.start_time,
            end_time=block.end_time,
            target_calls=block.target_calls,
        )
        for block in schedule_optimizer.optimize(operators, clients, day)
    ]
    db.add_all(rows)
    await db.commit()

    return OptimizeResponse(
        schedule_date=day,
        blocks=[ScheduleBlock.model_validate(row) for row in rows],
    )
