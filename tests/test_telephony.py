"""Tests for click-to-call endpoints."""

from unittest.mock import AsyncMock

import httpx
import pytest
from httpx import AsyncClient

from toguna.services import zoom_phone
from toguna.services.zoom_phone import ZoomPhoneService


@pytest.fixture
def zoom(monkeypatch) -> ZoomPhoneService:
    """A configured Zoom client whose API calls are mocked."""
    service = ZoomPhoneService()
    service.account_id = "acct"
    service.client_id = "client"
    service.client_secret = "secret"
    service._request = AsyncMock(return_value={})
    monkeypatch.setattr(zoom_phone, "_zoom", service)
    return service


@pytest.fixture
def no_zoom(monkeypatch) -> ZoomPhoneService:
    service = ZoomPhoneService()
    service.account_id = ""
    monkeypatch.setattr(zoom_phone, "_zoom", service)
    return service


@pytest.mark.asyncio
async def test_unconfigured_returns_503(operator_client: AsyncClient, no_zoom):
    response = await operator_client.post("/api/v1/telephony/calls", json={"phone_number": "03-1234-5678"})
    assert response.status_code == 503
    assert response.json()["detail"] == "Zoom Phone is not configured"


@pytest.mark.asyncio
async def test_dial_as_signed_in_operator(operator_client: AsyncClient, operator, zoom):
    zoom._request.return_value = {"call_id": "c-100"}

    response = await operator_client.post(
        "/api/v1/telephony/calls",
        json={"phone_number": "03-1234-5678", "company_id": 1},
    )

    assert response.status_code == 200
    assert response.json()["call_id"] == "c-100"
    assert response.json()["status"] == "dialing"
    method, endpoint = zoom._request.call_args.args[:2]
    assert method == "POST"
    assert operator.email in endpoint


@pytest.mark.asyncio
async def test_blank_number_rejected(operator_client: AsyncClient, zoom):
    response = await operator_client.post("/api/v1/telephony/calls", json={"phone_number": "  "})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_call_controls(operator_client: AsyncClient, zoom):
    held = await operator_client.post("/api/v1/telephony/calls/c-1/hold")
    resumed = await operator_client.post("/api/v1/telephony/calls/c-1/resume")
    ended = await operator_client.delete("/api/v1/telephony/calls/c-1")

    assert held.json() == {"call_id": "c-1", "status": "held", "detail": None}
    assert resumed.json()["status"] == "active"
    assert ended.json()["status"] == "disconnected"


@pytest.mark.asyncio
async def test_zoom_errors_map_to_502(operator_client: AsyncClient, zoom):
    request = httpx.Request("POST", "https://api.zoom.us/v2/phone/users/x/calls")
    zoom._request.side_effect = httpx.HTTPStatusError(
        "bad", request=request, response=httpx.Response(404, request=request, text="user not found")
    )

    response = await operator_client.post("/api/v1/telephony/calls/c-1/hold")

    assert response.status_code == 502
    assert response.json()["detail"] == "Zoom hold failed: 404"


@pytest.mark.asyncio
async def test_requires_sign_in(anon_client: AsyncClient, zoom):
    response = await anon_client.post("/api/v1/telephony/calls", json={"phone_number": "03-1234-5678"})
    assert response.status_code in (401, 403)
