"""Tests for operator management endpoints."""

from datetime import datetime, timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from toguna.models.call import CallLog, CallResult
from toguna.models.company import Company
from toguna.models.operator import Operator


@pytest.mark.asyncio
async def test_list_operators(client: AsyncClient, operator: Operator):
    response = await client.get("/api/v1/operators")
    assert response.status_code == 200
    assert len(response.json()) == 2

    directors = await client.get("/api/v1/operators", params={"role": "director"})
    assert [o["email"] for o in directors.json()] == ["director@toguna.jp"]


@pytest.mark.asyncio
async def test_create_operator(client: AsyncClient, director: Operator):
    response = await client.post("/api/v1/operators", json={
        "name": "鈴木 一郎",
        "email": "suzuki@toguna.jp",
        "hourly_rate": 1500,
        "skills": ["IT", "製造"],
    })

    assert response.status_code == 201
    data = response.json()
    assert data["role"] == "operator"
    assert data["status"] == "active"
    assert data["skills"] == ["IT", "製造"]

    duplicate = await client.post("/api/v1/operators", json={"name": "別人", "email": "suzuki@toguna.jp"})
    assert duplicate.status_code == 400
    assert duplicate.json()["detail"] == "Operator email already registered"

    audit = await client.get("/api/v1/compliance/audit-logs", params={"entity_type": "operator"})
    assert audit.json()[0]["entity_id"] == data["id"]
    assert audit.json()[0]["operator_id"] == director.id


@pytest.mark.asyncio
async def test_create_requires_valid_email(client: AsyncClient):
    response = await client.post("/api/v1/operators", json={"name": "鈴木 一郎", "email": "not-an-email"})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_update_operator(client: AsyncClient, operator: Operator):
    response = await client.patch(f"/api/v1/operators/{operator.id}", json={"status": "on_leave"})

    assert response.json()["status"] == "on_leave"
    on_leave = await client.get("/api/v1/operators", params={"status": "on_leave"})
    assert [o["id"] for o in on_leave.json()] == [operator.id]


@pytest.mark.asyncio
async def test_deactivate_operator(
    client: AsyncClient,
    operator_client: AsyncClient,
    operator: Operator,
    director: Operator,
):
    response = await client.delete(f"/api/v1/operators/{operator.id}")
    assert response.status_code == 200
    assert response.json()["status"] == "inactive"

    # Inactive operators can no longer sign in with their token
    me = await operator_client.get("/api/v1/auth/me")
    assert me.status_code == 401

    self_delete = await client.delete(f"/api/v1/operators/{director.id}")
    assert self_delete.status_code == 400
    assert self_delete.json()["detail"] == "Cannot deactivate yourself"


@pytest.mark.asyncio
async def test_operator_stats(
    client: AsyncClient,
    db_session: AsyncSession,
    sample_project,
    operator: Operator,
):
    company = (await db_session.execute(select(Company))).scalars().first()
    for result, duration, called_at in [
        (CallResult.APPOINTMENT, 300, datetime.utcnow()),
        (CallResult.ABSENT, 0, datetime.utcnow()),
        (CallResult.REJECTED, 60, datetime.utcnow() - timedelta(days=5)),
        (CallResult.REJECTED, 40, datetime.utcnow() - timedelta(days=5)),
    ]:
        db_session.add(CallLog(
            company_id=company.id,
            operator_id=operator.id,
            project_id=sample_project.id,
            result=result,
            duration=duration,
            called_at=called_at,
        ))
    await db_session.commit()

    response = await client.get(f"/api/v1/operators/{operator.id}/stats")

    assert response.json() == {
        "operator_id": operator.id,
        "total_calls": 4,
        "total_appointments": 1,
        "appointment_rate": 25.0,
        "today_calls": 2,
        "average_duration": 100.0,
    }


@pytest.mark.asyncio
async def test_unknown_operator(client: AsyncClient):
    response = await client.get("/api/v1/operators/999")
    assert response.status_code == 404
    response = await client.get("/api/v1/operators/999/stats")
    assert response.status_code == 404
