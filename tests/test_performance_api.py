"""Test the operator self-performance endpoint."""

from datetime import datetime, timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from toguna.models.call import CallLog, CallResult
from toguna.models.company import Company
from toguna.models.operator import Operator, OperatorStatus
from toguna.models.quality import CallQualityScore


async def add_calls(db: AsyncSession, operator_id: int, *results: CallResult) -> list[CallLog]:
    company_id = (await db.execute(select(Company.id).order_by(Company.id))).scalars().first()
    calls = [CallLog(company_id=company_id, operator_id=operator_id, result=r, duration=60) for r in results]
    db.add_all(calls)
    await db.commit()
    return calls


@pytest.mark.asyncio
async def test_my_performance_today(
    operator_client: AsyncClient, db_session: AsyncSession, operator, sample_project
):
    await add_calls(
        db_session, operator.id,
        CallResult.APPOINTMENT, CallResult.CALLBACK, CallResult.REJECTED, CallResult.ABSENT,
    )

    response = await operator_client.get("/api/v1/performance/me")

    assert response.status_code == 200
    data = response.json()
    assert data["today"] == {
        "calls": 4, "connections": 2, "appointments": 1, "rejections": 1, "rejection_rate": 25.0,
    }
    assert len(data["weekly"]) == 7
    assert data["weekly"][-1]["calls"] == 4
    assert data["monthly"]["appointments"] == 1
    assert data["monthly"]["target"] == 12
    assert data["monthly"]["progress"] == 8.3


@pytest.mark.asyncio
async def test_my_ranking(
    operator_client: AsyncClient, db_session: AsyncSession, operator, director, sample_project
):
    rival = Operator(name="鈴木 一郎", email="suzuki@toguna.jp")
    retired = Operator(name="高橋 次郎", email="takahashi@toguna.jp", status=OperatorStatus.INACTIVE)
    db_session.add_all([rival, retired])
    await db_session.commit()
    await add_calls(db_session, operator.id, CallResult.APPOINTMENT, CallResult.ABSENT, CallResult.ABSENT, CallResult.NG)
    await add_calls(db_session, rival.id, CallResult.APPOINTMENT, CallResult.ABSENT)
    await add_calls(db_session, retired.id, CallResult.APPOINTMENT)

    ranking = (await operator_client.get("/api/v1/performance/me")).json()["ranking"]

    assert ranking["rank"] == 2
    assert ranking["rate"] == 25.0
    assert ranking["total_calls"] == 4
    assert ranking["operators_count"] == 3
    assert [e["operator_name"] for e in ranking["leaderboard"]] == ["鈴木 一郎", "佐藤 花子", "山田 太郎"]


@pytest.mark.asyncio
async def test_quality_trend_is_last_ten_oldest_first(
    operator_client: AsyncClient, db_session: AsyncSession, operator, sample_project
):
    calls = await add_calls(db_session, operator.id, *[CallResult.ABSENT] * 12)
    start = datetime.utcnow() - timedelta(days=12)
    db_session.add_all([
        CallQualityScore(
            call_log_id=call.id, operator_id=operator.id,
            greeting_score=50, hearing_score=50, proposal_score=50, closing_score=50, pace_score=50,
            tone_score=50, total_score=40 + i, scored_at=start + timedelta(days=i),
        )
        for i, call in enumerate(calls)
    ])
    await db_session.commit()

    trend = (await operator_client.get("/api/v1/performance/me")).json()["quality_trend"]

    assert [point["score"] for point in trend] == list(range(42, 52))
    assert [point["idx"] for point in trend] == list(range(1, 11))


@pytest.mark.asyncio
async def test_performance_requires_sign_in(anon_client: AsyncClient):
    response = await anon_client.get("/api/v1/performance/me")
    assert response.status_code in (401, 403)
