"""Test authentication and role guards."""

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from toguna.models.operator import Operator, OperatorStatus


@pytest.mark.asyncio
async def test_me_returns_signed_in_operator(operator_client: AsyncClient):
    response = await operator_client.get("/api/v1/auth/me")

    assert response.status_code == 200
    data = response.json()
    assert data["email"] == "operator@toguna.jp"
    assert data["role"] == "operator"


@pytest.mark.asyncio
async def test_missing_token_is_rejected(anon_client: AsyncClient):
    response = await anon_client.get("/api/v1/companies")
    assert response.status_code in (401, 403)


@pytest.mark.asyncio
async def test_garbage_token_is_rejected(anon_client: AsyncClient):
    response = await anon_client.get(
        "/api/v1/auth/me", headers={"Authorization": "Bearer not-a-jwt"}
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_inactive_operator_is_rejected(
    operator_client: AsyncClient, db_session: AsyncSession, operator: Operator
):
    operator.status = OperatorStatus.INACTIVE
    await db_session.commit()

    response = await operator_client.get("/api/v1/auth/me")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_operator_cannot_reach_director_routes(operator_client: AsyncClient):
    for path in ("/api/v1/clients", "/api/v1/dashboard/summary", "/api/v1/fraud"):
        response = await operator_client.get(path)
        assert response.status_code == 403, path
        assert response.json()["detail"] == "Director role required"


@pytest.mark.asyncio
async def test_operator_can_reach_shared_routes(operator_client: AsyncClient):
    assert (await operator_client.get("/api/v1/companies")).status_code == 200
    assert (await operator_client.get("/api/v1/appointments")).status_code == 200
    assert (await operator_client.get("/api/v1/calls")).status_code == 200


@pytest.mark.asyncio
async def test_logout(anon_client: AsyncClient):
    response = await anon_client.post("/api/v1/auth/logout")
    assert response.status_code == 200
