"""Test call logging endpoints."""

import json
from datetime import datetime, timedelta
from unittest.mock import AsyncMock

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from toguna.models.company import Company
from toguna.models.notification import FloorStatus, Notification, NotificationType, SalesFloorStatus
from toguna.models.nurturing import EngagementScore
from toguna.models.quality import CallQualityScore
from toguna.services import realtime


async def first_company(db: AsyncSession) -> Company:
    result = await db.execute(select(Company).where(Company.name == "株式会社アルファ"))
    return result.scalar_one()


@pytest.mark.asyncio
async def test_appointment_call_updates_funnel(
    client: AsyncClient,
    operator_client: AsyncClient,
    db_session: AsyncSession,
    sample_project,
    operator,
):
    company = await first_company(db_session)
    await operator_client.put("/api/v1/sales-floor/me", json={"status": "on_call"})

    response = await operator_client.post(
        "/api/v1/calls",
        json={"company_id": company.id, "result": "appointment", "duration": 180, "notes": "来週訪問"},
    )

    assert response.status_code == 201
    data = response.json()
    assert data["operator_id"] == operator.id
    assert data["project_id"] == sample_project.id

    await db_session.refresh(company)
    assert company.status.value == "appointment"

    engagement = (await db_session.execute(select(EngagementScore))).scalar_one()
    assert engagement.score == 40
    assert engagement.call_score == 40

    notification = (await db_session.execute(select(Notification))).scalar_one()
    assert notification.notification_type == NotificationType.APPOINTMENT
    assert notification.operator_id is None

    score = (await db_session.execute(select(CallQualityScore))).scalar_one()
    assert score.call_log_id == data["id"]
    assert score.total_score == 82

    floor = (await client.get("/api/v1/sales-floor")).json()
    assert [(f["calls_today"], f["appointments_today"]) for f in floor] == [(1, 1)]
    assert floor[0]["operator_name"] == "佐藤 花子"


@pytest.mark.asyncio
async def test_floor_counters_restart_each_day(
    client: AsyncClient,
    operator_client: AsyncClient,
    db_session: AsyncSession,
    sample_project,
    operator,
):
    company = await first_company(db_session)
    db_session.add(SalesFloorStatus(
        operator_id=operator.id,
        status=FloorStatus.CALLING,
        calls_today=5,
        appointments_today=2,
        updated_at=datetime.utcnow() - timedelta(days=2),
    ))
    await db_session.commit()

    floor = (await client.get("/api/v1/sales-floor")).json()
    assert [(f["calls_today"], f["appointments_today"]) for f in floor] == [(0, 0)]

    await operator_client.post(
        "/api/v1/calls", json={"company_id": company.id, "result": "absent", "duration": 20}
    )

    floor = (await client.get("/api/v1/sales-floor")).json()
    assert [(f["calls_today"], f["appointments_today"]) for f in floor] == [(1, 0)]


@pytest.mark.asyncio
async def test_absent_call_adds_no_engagement(
    operator_client: AsyncClient, db_session: AsyncSession, sample_project
):
    company = await first_company(db_session)

    response = await operator_client.post(
        "/api/v1/calls", json={"company_id": company.id, "result": "absent", "duration": 15}
    )

    assert response.status_code == 201
    await db_session.refresh(company)
    assert company.status.value == "calling"
    assert (await db_session.execute(select(EngagementScore))).scalar_one_or_none() is None


@pytest.mark.asyncio
async def test_unknown_company(operator_client: AsyncClient):
    response = await operator_client.post("/api/v1/calls", json={"company_id": 999, "result": "ng"})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_operators_only_see_their_own_calls(
    client: AsyncClient, operator_client: AsyncClient, db_session: AsyncSession, sample_project
):
    company = await first_company(db_session)
    await client.post("/api/v1/calls", json={"company_id": company.id, "result": "callback"})
    mine = (await operator_client.post(
        "/api/v1/calls", json={"company_id": company.id, "result": "rejected"}
    )).json()

    response = await operator_client.get("/api/v1/calls")
    assert [c["id"] for c in response.json()["calls"]] == [mine["id"]]

    response = await client.get("/api/v1/calls")
    assert response.json()["total"] == 2

    response = await client.get("/api/v1/calls", params={"result": "callback"})
    assert response.json()["total"] == 1

    page = (await client.get("/api/v1/calls", params={"limit": 1})).json()
    assert len(page["calls"]) == 1
    assert page["total"] == 2

    director_call_id = next(c["id"] for c in response.json()["calls"])
    response = await operator_client.get(f"/api/v1/calls/{director_call_id}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_attach_recording_sets_sentiment(
    operator_client: AsyncClient, db_session: AsyncSession, sample_project
):
    company = await first_company(db_session)
    call = (await operator_client.post(
        "/api/v1/calls", json={"company_id": company.id, "result": "document_sent", "duration": 90}
    )).json()

    assert (await operator_client.get(f"/api/v1/calls/{call['id']}/recording")).status_code == 404

    response = await operator_client.put(
        f"/api/v1/calls/{call['id']}/recording",
        json={
            "recording_url": "https://recordings.test/1.mp3",
            "sentiment_analysis": {"overall": "positive", "score": 0.6, "segments": []},
        },
    )
    assert response.status_code == 200

    response = await operator_client.get(f"/api/v1/calls/{call['id']}")
    assert response.json()["sentiment_score"] == 0.6


@pytest.mark.asyncio
async def test_appointment_is_published_when_redis_is_connected(
    operator_client: AsyncClient, db_session: AsyncSession, sample_project
):
    fake_redis = AsyncMock()
    realtime.set_redis(fake_redis)
    company = await first_company(db_session)

    await operator_client.post(
        "/api/v1/calls", json={"company_id": company.id, "result": "appointment", "duration": 100}
    )

    channel, message = fake_redis.publish.await_args.args
    assert channel == "toguna:notifications"
    assert json.loads(message)["event"] == "notification"
