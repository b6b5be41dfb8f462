"""Tests for the sentiment dashboard endpoint."""

from datetime import datetime, timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from toguna.models.call import CallLog, CallRecording, CallResult
from toguna.models.company import Company
from toguna.models.operator import Operator


async def record(db: AsyncSession, company: Company, operator: Operator, called_at: datetime, analysis):
    call = CallLog(
        company_id=company.id,
        operator_id=operator.id,
        project_id=company.project_id,
        result=CallResult.CALLBACK,
        duration=90,
        called_at=called_at,
    )
    db.add(call)
    await db.flush()
    db.add(CallRecording(call_log_id=call.id, sentiment_analysis=analysis))
    await db.commit()
    return call


@pytest.mark.asyncio
async def test_dashboard_aggregates_recordings(
    client: AsyncClient,
    db_session: AsyncSession,
    sample_project,
    operator: Operator,
):
    alpha = (await db_session.execute(select(Company).where(Company.name == "株式会社アルファ"))).scalar_one()
    now = datetime.utcnow().replace(microsecond=0)
    await record(db_session, alpha, operator, now - timedelta(days=1), {"overall": "positive", "score": 0.8})
    await record(db_session, alpha, operator, now - timedelta(days=1), {"overall": "negative", "score": -0.4})
    latest = await record(db_session, alpha, operator, now, {"overall": "mixed"})
    # Outside the window
    await record(db_session, alpha, operator, now - timedelta(days=60), {"overall": "positive", "score": 1.0})

    response = await client.get("/api/v1/sentiment/dashboard", params={"project_id": sample_project.id})

    assert response.status_code == 200
    data = response.json()
    assert data["project_id"] == sample_project.id
    assert data["total"] == 3
    assert data["average_score"] == 0.2
    assert data["distribution"]["positive"] == 1
    assert data["distribution"]["neutral"] == 1
    assert data["distribution"]["negative_pct"] == 33.3
    assert len(data["trend"]) == 2
    assert data["recent"][0]["call_log_id"] == latest.id
    assert data["recent"][0]["company_name"] == "株式会社アルファ"
    assert data["recent"][0]["score"] is None


@pytest.mark.asyncio
async def test_dashboard_empty(client: AsyncClient):
    response = await client.get("/api/v1/sentiment/dashboard", params={"granularity": "week"})

    data = response.json()
    assert data["total"] == 0
    assert data["average_score"] is None
    assert data["distribution"]["positive_pct"] == 0.0
    assert data["trend"] == []


@pytest.mark.asyncio
async def test_dashboard_validates_params(client: AsyncClient):
    response = await client.get("/api/v1/sentiment/dashboard", params={"granularity": "month"})
    assert response.status_code == 422

    response = await client.get("/api/v1/sentiment/dashboard", params={"days": 0})
    assert response.status_code == 422
