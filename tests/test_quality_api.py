"""Test quality scoring, golden calls and pivot alerts."""

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from toguna.models.call import CallLog, CallResult
from toguna.models.company import Company


async def log_calls(api: AsyncClient, db: AsyncSession, *specs: tuple[str, int]) -> list[dict]:
    company_id = (await db.execute(select(Company.id).order_by(Company.id))).scalars().first()
    calls = []
    for result, duration in specs:
        response = await api.post(
            "/api/v1/calls",
            json={"company_id": company_id, "result": result, "duration": duration, "notes": "メモ"},
        )
        calls.append(response.json())
    return calls


@pytest.mark.asyncio
async def test_dashboard_after_logging_calls(
    client: AsyncClient, operator_client: AsyncClient, db_session: AsyncSession, sample_project
):
    await log_calls(operator_client, db_session, ("appointment", 180), ("absent", 10))

    response = await client.get("/api/v1/quality/dashboard")

    assert response.status_code == 200
    data = response.json()
    assert data["scored_calls"] == 2
    assert data["top_calls"][0]["total_score"] > data["top_calls"][1]["total_score"]
    assert len(data["needs_coaching"]) == 1
    assert data["operator_ranking"][0]["operator_name"] == "佐藤 花子"


@pytest.mark.asyncio
async def test_scores_filter_by_max_score(
    client: AsyncClient, operator_client: AsyncClient, db_session: AsyncSession, sample_project
):
    await log_calls(operator_client, db_session, ("appointment", 180), ("absent", 10))

    response = await client.get("/api/v1/quality/scores", params={"max_score": 69})

    assert len(response.json()) == 1
    assert response.json()[0]["coaching_tip"].startswith("次回は")


@pytest.mark.asyncio
async def test_rescore_unknown_call(client: AsyncClient):
    response = await client.post("/api/v1/quality/calls/999/score")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_promote_golden_call(
    client: AsyncClient, operator_client: AsyncClient, db_session: AsyncSession, sample_project
):
    call, = await log_calls(operator_client, db_session, ("appointment", 200))

    response = await client.post(f"/api/v1/golden-calls/promote/{call['id']}", json={"tags": ["決裁者"]})

    assert response.status_code == 201
    golden = response.json()
    assert golden["title"] == "株式会社アルファ の成功事例"
    assert golden["total_score"] is not None

    response = await client.post(f"/api/v1/golden-calls/promote/{call['id']}", json={})
    assert response.status_code == 400

    assert golden["is_client_visible"] is False

    response = await client.get("/api/v1/golden-calls", params={"tag": "決裁者"})
    assert [g["id"] for g in response.json()] == [golden["id"]]

    response = await client.patch(f"/api/v1/golden-calls/{golden['id']}", json={"is_client_visible": True})
    assert response.json()["is_client_visible"] is True


@pytest.mark.asyncio
async def test_promote_unscored_call(
    client: AsyncClient, db_session: AsyncSession, sample_project, operator
):
    company_id = (await db_session.execute(select(Company.id))).scalars().first()
    call = CallLog(company_id=company_id, operator_id=operator.id, result=CallResult.APPOINTMENT)
    db_session.add(call)
    await db_session.commit()

    response = await client.post(f"/api/v1/golden-calls/promote/{call.id}", json={})
    assert response.status_code == 400
    assert response.json()["detail"] == "Call has not been scored yet"


@pytest.mark.asyncio
async def test_pivot_alert_lifecycle(
    client: AsyncClient, db_session: AsyncSession, sample_project, operator
):
    company_id = (await db_session.execute(select(Company.id))).scalars().first()
    db_session.add_all([
        CallLog(
            company_id=company_id,
            operator_id=operator.id,
            project_id=sample_project.id,
            result=CallResult.ABSENT,
        )
        for _ in range(50)
    ])
    await db_session.commit()

    response = await client.post("/api/v1/pivot-alerts/check")
    created = response.json()["alerts_created"]
    assert [a["alert_type"] for a in created] == ["low_rate"]
    alert_id = created[0]["id"]

    response = await client.post(f"/api/v1/pivot-alerts/{alert_id}/acknowledge")
    assert response.json()["status"] == "acknowledged"
    assert response.json()["acknowledged_by"] is not None

    response = await client.post(f"/api/v1/pivot-alerts/{alert_id}/acknowledge")
    assert response.status_code == 400

    response = await client.post(f"/api/v1/pivot-alerts/{alert_id}/resolve")
    assert response.json()["status"] == "resolved"

    response = await client.get("/api/v1/pivot-alerts", params={"status": "active"})
    assert response.json() == []
