"""Tests for the daily schedule grid endpoints."""

import pytest
from httpx import AsyncClient

from toguna.models.operator import Operator

DAY = "2026-10-19"


@pytest.mark.asyncio
async def test_grid_previews_without_saving(
    client: AsyncClient,
    director: Operator,
    operator: Operator,
    sample_project,
):
    response = await client.get("/api/v1/schedule/grid", params={"schedule_date": DAY})

    assert response.status_code == 200
    data = response.json()
    assert data["schedule_date"] == DAY
    assert data["is_saved"] is False
    assert data["time_slots"][0] == "09:00"
    assert data["client_colors"] == {str(sample_project.client_id): "blue"}

    first, second = data["rows"]
    assert first["operator_id"] == director.id
    assert first["operator_name"] == "山田 太郎"
    cells = {cell["time"]: cell for cell in first["cells"]}
    assert cells["09:00"]["client_name"] == "株式会社テスト商事"
    assert cells["09:00"]["target_calls"] == 30
    assert cells["12:00"]["client_id"] is None
    assert cells["13:00"]["target_calls"] == 50
    assert cells["18:00"]["client_id"] is None
    # Second operator gets no block with a single client
    assert all(cell["client_id"] is None for cell in second["cells"])


@pytest.mark.asyncio
async def test_optimize_replaces_saved_blocks(
    client: AsyncClient,
    director: Operator,
    operator: Operator,
    sample_project,
):
    first = await client.post("/api/v1/schedule/optimize", params={"schedule_date": DAY})
    second = await client.post("/api/v1/schedule/optimize", params={"schedule_date": DAY})

    assert first.status_code == 200
    blocks = second.json()["blocks"]
    assert len(blocks) == 2
    assert all(block["id"] is not None for block in blocks)
    assert {(b["start_time"], b["end_time"]) for b in blocks} == {("09:00", "12:00"), ("13:00", "18:00")}
    assert {b["operator_id"] for b in blocks} == {director.id}

    grid = await client.get("/api/v1/schedule/grid", params={"schedule_date": DAY})
    assert grid.json()["is_saved"] is True

    other_day = await client.get("/api/v1/schedule/grid", params={"schedule_date": "2026-10-20"})
    assert other_day.json()["is_saved"] is False


@pytest.mark.asyncio
async def test_inactive_clients_are_not_scheduled(client: AsyncClient, sample_project):
    await client.patch(f"/api/v1/clients/{sample_project.client_id}", json={"status": "inactive"})

    response = await client.post("/api/v1/schedule/optimize", params={"schedule_date": DAY})

    assert response.json()["blocks"] == []
