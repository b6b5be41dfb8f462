"""Director dashboard API endpoints."""

from datetime import timedelta
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from toguna.core.clock import local_day_bounds_utc, local_today, utc_to_local
from toguna.core.compliance import retention_alerts
from toguna.services.database import get_db
from toguna.models.call import CallLog, CallResult
from toguna.models.client import Client
from toguna.models.company import Company, CompanyRank
from toguna.models.compliance import ComplianceDocument, DocumentStatus
from toguna.models.fraud import OperatorFraudScore, FraudStatus
from toguna.models.operator import Operator, OperatorStatus
from toguna.models.quality import PivotAlert, PivotAlertStatus
from toguna.scheduler.jobs import get_job_status
from toguna.schemas.dashboard import (
    DashboardSummary,
    CallCounts,
    AppointmentCounts,
    OperatorCounts,
    CompanyCounts,
    DashboardStats,
    DailyCallPoint,
    OperatorRankingItem,
)

router = APIRouter()


async def count(db: AsyncSession, query) -> int:
    result = await db.execute(query)
    return result.scalar() or 0


@router.get("/summary", response_model=DashboardSummary)
async def get_summary(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> DashboardSummary:
    """Headline numbers for the director's landing page."""
    today = local_today()
    day_start, day_end = local_day_bounds_utc(today)
    in_today = (CallLog.called_at >= day_start, CallLog.called_at < day_end)

    calls_total = await count(db, select(func.count(CallLog.id)))
    calls_today = await count(db, select(func.count(CallLog.id)).where(*in_today))
    appointments_total = await count(
        db, select(func.count(CallLog.id)).where(CallLog.result == CallResult.APPOINTMENT)
    )
    appointments_today = await count(
        db,
        select(func.count(CallLog.id)).where(CallLog.result == CallResult.APPOINTMENT, *in_today),
    )

    operators_total = await count(db, select(func.count(Operator.id)))
    operators_active = await count(
        db, select(func.count(Operator.id)).where(Operator.status == OperatorStatus.ACTIVE)
    )

    rank_result = await db.execute(select(Company.rank, func.count(Company.id)).group_by(Company.rank))
    by_rank = {rank.value: 0 for rank in CompanyRank}
    for rank, n in rank_result.all():
        by_rank[rank.value] = n

    documents = await db.execute(
        select(ComplianceDocument).where(ComplianceDocument.status == DocumentStatus.ACTIVE)
    )

    return DashboardSummary(
        calls=CallCounts(today=calls_today, total=calls_total),
        appointments=AppointmentCounts(
            today=appointments_today,
            total=appointments_total,
            rate=round(appointments_total / calls_total * 100, 2) if calls_total else 0.0,
        ),
        operators=OperatorCounts(total=operators_total, active=operators_active),
        companies=CompanyCounts(total=sum(by_rank.values()), by_rank=by_rank),
        clients_total=await count(db, select(func.count(Client.id))),
        active_pivot_alerts=await count(
            db, select(func.count(PivotAlert.id)).where(PivotAlert.status == PivotAlertStatus.ACTIVE)
        ),
        pending_fraud_flags=await count(
            db,
            select(func.count(OperatorFraudScore.id)).where(
                OperatorFraudScore.status == FraudStatus.PENDING
            ),
        ),
        retention_alerts=len(retention_alerts(list(documents.scalars().all()), today)),
    )


@router.get("/stats", response_model=DashboardStats)
async def get_stats(
    db: Annotated[AsyncSession, Depends(get_db)],
    days: int = Query(7, ge=1, le=90),
) -> DashboardStats:
    """Daily call volume, result mix and operator ranking for the last `days` days."""
    today = local_today()
    first_day = today - timedelta(days=days - 1)
    start, _ = local_day_bounds_utc(first_day)
    _, end = local_day_bounds_utc(today)

    result = await db.execute(
        select(CallLog).where(CallLog.called_at >= start, CallLog.called_at < end)
    )
    calls = result.scalars().all()

    daily = {
        (first_day + timedelta(days=offset)).isoformat(): {"calls": 0, "appointments": 0}
        for offset in range(days)
    }
    results = {r.value: 0 for r in CallResult}
    per_operator: dict[int, dict] = {}
    for call in calls:
        is_appointment = call.result == CallResult.APPOINTMENT
        bucket = daily.get(utc_to_local(call.called_at).date().isoformat())
        if bucket is not None:
            bucket["calls"] += 1
            bucket["appointments"] += int(is_appointment)
        results[call.result.value] += 1
        row = per_operator.setdefault(call.operator_id, {"calls": 0, "appointments": 0})
        row["calls"] += 1
        row["appointments"] += int(is_appointment)

    names: dict[int, str] = {}
    if per_operator:
        name_result = await db.execute(
            select(Operator.id, Operator.name).where(Operator.id.in_(per_operator))
        )
        names = dict(name_result.all())

    ranking = [
        OperatorRankingItem(
            operator_id=operator_id,
            operator_name=names.get(operator_id, ""),
            calls=row["calls"],
            appointments=row["appointments"],
            appointment_rate=round(row["appointments"] / row["calls"] * 100, 2),
        )
        for operator_id, row in per_operator.items()
    ]
    ranking.sort(key=lambda item: (-item.appointments, -item.calls, item.operator_id))

    return DashboardStats(
        period_days=days,
        daily=[DailyCallPoint(date=day, **counts) for day, counts in daily.items()],
        results=results,
        operator_ranking=ranking,
    )


@router.get("/scheduler")
async def get_scheduler_status() -> dict:
    """Background job schedule."""
    return {"jobs": get_job_status()}
