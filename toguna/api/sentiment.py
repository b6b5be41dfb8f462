"""Sentiment dashboard API endpoint."""

from datetime import datetime, timedelta
from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from toguna.core.sentiment import build_dashboard, sample_from_analysis
from toguna.services.database import get_db
from toguna.models.call import CallLog, CallRecording
from toguna.models.company import Company
from toguna.schemas.sentiment import SentimentDashboard

router = APIRouter()


@router.get("/dashboard", response_model=SentimentDashboard)
async def get_dashboard(
    db: Annotated[AsyncSession, Depends(get_db)],
    project_id: int | None = None,
    granularity: Literal["day", "week"] = "day",
    days: int = Query(30, ge=1, le=365),
) -> SentimentDashboard:
    """Aggregate the stored sentiment of recorded calls."""
    since = datetime.utcnow() - timedelta(days=days)
    query = (
        select(CallRecording.sentiment_analysis, CallLog.id, CallLog.called_at, Company.name)
        .join(CallLog, CallLog.id == CallRecording.call_log_id)
        .outerjoin(Company, Company.id == CallLog.company_id)
        .where(CallLog.called_at >= since)
    )
    if project_id is not None:
        query = query.where(CallLog.project_id == project_id)
    result = await db.execute(query)

    samples = [
        sample_from_analysis(call_id, called_at, analysis, company_name)
        for analysis, call_id, called_at, company_name in result.all()
    ]
    return SentimentDashboard(**build_dashboard(samples, granularity, project_id))
