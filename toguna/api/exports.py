"""CSV export endpoints."""

from datetime import date, datetime, timedelta
from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from toguna.core import reports
from toguna.core.clock import local_day_bounds_utc, local_today
from toguna.services.database import get_db
from toguna.models.call import CallLog
from toguna.models.company import Company
from toguna.models.operator import Operator

router = APIRouter()


def csv_response(content: str, filename: str) -> Response:
    return Response(
        content=content.encode("utf-8"),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


async def load_calls(
    db: AsyncSession,
    date_from: date | None,
    date_to: date | None,
    project_id: int | None = None,
    operator_id: int | None = None,
) -> list[CallLog]:
    """Calls whose local date falls within [date_from, date_to]."""
    query = select(CallLog).order_by(CallLog.called_at)
    if date_from:
        query = query.where(CallLog.called_at >= local_day_bounds_utc(date_from)[0])
    if date_to:
        query = query.where(CallLog.called_at < local_day_bounds_utc(date_to)[1])
    if project_id is not None:
        query = query.where(CallLog.project_id == project_id)
    if operator_id is not None:
        query = query.where(CallLog.operator_id == operator_id)
    result = await db.execute(query)
    return list(result.scalars().all())


async def operator_names(db: AsyncSession) -> dict[int, str]:
    result = await db.execute(select(Operator.id, Operator.name))
    return dict(result.all())


@router.get("/calls")
async def export_calls(
    db: Annotated[AsyncSession, Depends(get_db)],
    date_from: date | None = None,
    date_to: date | None = None,
    project_id: int | None = None,
    operator_id: int | None = None,
) -> Response:
    calls = await load_calls(db, date_from, date_to, project_id, operator_id)
    company_ids = {c.company_id for c in calls}
    companies: dict[int, str] = {}
    if company_ids:
        result = await db.execute(select(Company.id, Company.name).where(Company.id.in_(company_ids)))
        companies = dict(result.all())

    content = reports.call_logs_csv(calls, companies, await operator_names(db))
    stamp = datetime.utcnow().strftime("%Y%m%d")
    return csv_response(content, f"call_logs_{stamp}.csv")


@router.get("/daily-report")
async def export_daily_report(
    db: Annotated[AsyncSession, Depends(get_db)],
    report_date: date | None = None,
) -> Response:
    """Per-operator totals for one local day (today by default)."""
    day = report_date or local_today()
    calls = await load_calls(db, day, day)
    content = reports.daily_report_csv(day.isoformat(), calls, await operator_names(db))
    return csv_response(content, f"daily_report_{day.strftime('%Y%m%d')}.csv")


@router.get("/operator-report")
async def export_operator_report(
    db: Annotated[AsyncSession, Depends(get_db)],
    date_from: date | None = None,
    date_to: date | None = None,
) -> Response:
    """Per-operator totals. Defaults to the last 30 days."""
    end = date_to or local_today()
    start = date_from or end - timedelta(days=29)
    calls = await load_calls(db, start, end)
    content = reports.operator_report_csv(calls, await operator_names(db))
    return csv_response(content, f"operator_report_{start.strftime('%Y%m%d')}_{end.strftime('%Y%m%d')}.csv")


@router.get("/companies")
async def export_companies(
    db: Annotated[AsyncSession, Depends(get_db)],
    project_id: int | None = None,
) -> Response:
    query = select(Company).order_by(Company.id)
    if project_id is not None:
        query = query.where(Company.project_id == project_id)
    result = await db.execute(query)
    content = reports.companies_csv(result.scalars().all())
    return csv_response(content, "companies.csv")
