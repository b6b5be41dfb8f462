"""Operator self-performance API endpoint."""

from datetime import timedelta
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from toguna.api.auth import CurrentOperator
from toguna.config import get_settings
from toguna.core import performance
from toguna.core.clock import local_day_bounds_utc, local_today, utc_to_local
from toguna.services.database import get_db
from toguna.models.call import CallLog, CallResult
from toguna.models.operator import Operator, OperatorStatus
from toguna.models.quality import CallQualityScore
from toguna.schemas.performance import (
    MyPerformance,
    TodayPerformance,
    DailyCalls,
    MonthlyProgress,
    QualityPoint,
    RankingEntry,
    MyRanking,
)

settings = get_settings()
router = APIRouter()


@router.get("/me", response_model=MyPerformance)
async def get_my_performance(
    operator: CurrentOperator,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> MyPerformance:
    """Today, the last week, the month's target and the caller's place in the ranking."""
    today = local_today()
    month_start = today.replace(day=1)
    start, _ = local_day_bounds_utc(min(month_start, today - timedelta(days=6)))
    _, end = local_day_bounds_utc(today)

    result = await db.execute(
        select(CallLog.called_at, CallLog.result).where(
            CallLog.operator_id == operator.id,
            CallLog.called_at >= start,
            CallLog.called_at < end,
        )
    )
    calls = [(utc_to_local(called_at).date(), call_result) for called_at, call_result in result.all()]

    month_calls = [r for day, r in calls if day >= month_start]
    monthly = performance.monthly_progress(
        len(month_calls),
        sum(1 for r in month_calls if r == CallResult.APPOINTMENT),
        settings.monthly_appointment_target,
    )

    scores = await db.execute(
        select(CallQualityScore)
        .where(CallQualityScore.operator_id == operator.id)
        .order_by(CallQualityScore.scored_at.desc())
        .limit(performance.QUALITY_TREND_LENGTH)
    )
    trend = [
        QualityPoint(
            idx=idx,
            score=score.total_score,
            label=utc_to_local(score.scored_at).strftime("%m/%d"),
        )
        for idx, score in enumerate(reversed(scores.scalars().all()), start=1)
    ]

    return MyPerformance(
        today=TodayPerformance(**performance.day_summary([r for day, r in calls if day == today])),
        weekly=[DailyCalls(**point) for point in performance.daily_calls((day for day, _ in calls), today)],
        monthly=MonthlyProgress(**monthly),
        quality_trend=trend,
        ranking=await my_ranking(db, operator.id),
    )


async def my_ranking(db: AsyncSession, operator_id: int) -> MyRanking:
    """Appointment-rate ranking over every active operator's calls."""
    result = await db.execute(
        select(
            Operator.id,
            Operator.name,
            func.count(CallLog.id),
            func.coalesce(func.sum(case((CallLog.result == CallResult.APPOINTMENT, 1), else_=0)), 0),
        )
        .outerjoin(CallLog, CallLog.operator_id == Operator.id)
        .where(Operator.status == OperatorStatus.ACTIVE)
        .group_by(Operator.id, Operator.name)
        .order_by(Operator.id)
    )
    rows = result.all()
    names = {row[0]: row[1] for row in rows}
    ranked = performance.rank_operators([
        {"operator_id": row[0], "calls": row[2], "appointments": int(row[3])} for row in rows
    ])

    mine = next((entry for entry in ranked if entry["operator_id"] == operator_id), None)
    return MyRanking(
        rank=mine["rank"] if mine else None,
        rate=mine["rate"] if mine else 0.0,
        total_calls=mine["calls"] if mine else 0,
        operators_count=len(ranked),
        leaderboard=[
            RankingEntry(operator_name=names[entry["operator_id"]], **entry)
            for entry in ranked[:performance.LEADERBOARD_SIZE]
        ],
    )
