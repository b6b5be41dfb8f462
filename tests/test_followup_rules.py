"""Tests for followup rule endpoints."""

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from toguna.models.call import CallLog, CallResult
from toguna.models.company import Company
from toguna.models.operator import Operator


async def create_rule(client: AsyncClient, project_id: int, **overrides) -> dict:
    payload = {
        "name": "断り後の資料送付",
        "project_id": project_id,
        "trigger_type": "call_rejection",
        "action_type": "send_email",
        "action_config": {"subject": "{{company_name}} 様へのご案内", "body": "資料をお送りします"},
        **overrides,
    }
    response = await client.post("/api/v1/followup-rules", json=payload)
    assert response.status_code == 201
    return response.json()


async def reject_alpha(db: AsyncSession, project, operator: Operator) -> Company:
    alpha = (await db.execute(select(Company).where(Company.name == "株式会社アルファ"))).scalar_one()
    db.add(CallLog(
        company_id=alpha.id,
        operator_id=operator.id,
        project_id=project.id,
        result=CallResult.REJECTED,
        duration=25,
    ))
    await db.commit()
    return alpha


@pytest.mark.asyncio
async def test_create_and_list_rules(client: AsyncClient, sample_project):
    rule = await create_rule(client, sample_project.id)

    assert rule["execution_count"] == 0
    assert rule["is_active"] is True
    assert rule["delay_minutes"] == 0

    await create_rule(client, sample_project.id, name="停止中", is_active=False)
    active = await client.get("/api/v1/followup-rules", params={"active_only": True})
    assert [r["id"] for r in active.json()] == [rule["id"]]


@pytest.mark.asyncio
async def test_rule_validation(client: AsyncClient, sample_project):
    response = await client.post("/api/v1/followup-rules", json={
        "name": "不正",
        "trigger_type": "phase_of_moon",
        "action_type": "send_email",
    })
    assert response.status_code == 422

    response = await client.post("/api/v1/followup-rules", json={
        "name": "上限ゼロ",
        "trigger_type": "call_rejection",
        "action_type": "alert_manager",
        "max_executions": 0,
    })
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_update_and_toggle(client: AsyncClient, sample_project):
    rule = await create_rule(client, sample_project.id)

    updated = await client.patch(f"/api/v1/followup-rules/{rule['id']}", json={"delay_minutes": 60})
    assert updated.json()["delay_minutes"] == 60

    toggled = await client.post(f"/api/v1/followup-rules/{rule['id']}/toggle")
    assert toggled.json()["is_active"] is False
    toggled = await client.post(f"/api/v1/followup-rules/{rule['id']}/toggle")
    assert toggled.json()["is_active"] is True

    missing = await client.get("/api/v1/followup-rules/999")
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_evaluate_now_records_executions(
    client: AsyncClient,
    db_session: AsyncSession,
    sample_project,
    operator: Operator,
):
    alpha = await reject_alpha(db_session, sample_project, operator)
    rule = await create_rule(client, sample_project.id)

    response = await client.post("/api/v1/followup-rules/evaluate")

    assert response.status_code == 200
    assert response.json() == {
        "rules_evaluated": 1,
        "executions": 1,
        "succeeded": 1,
        "failed": 0,
        "skipped": 0,
    }

    executions = await client.get("/api/v1/followup-rules/executions", params={"rule_id": rule["id"]})
    assert len(executions.json()) == 1
    assert executions.json()[0]["company_id"] == alpha.id
    assert executions.json()[0]["result"] == "success"

    refreshed = await client.get(f"/api/v1/followup-rules/{rule['id']}")
    assert refreshed.json()["execution_count"] == 1
    assert refreshed.json()["last_run_at"] is not None

    sends = await client.get("/api/v1/nurturing/sends")
    assert sends.json()["sends"][0]["subject"] == "株式会社アルファ 様へのご案内"


@pytest.mark.asyncio
async def test_delete_removes_executions(
    client: AsyncClient,
    db_session: AsyncSession,
    sample_project,
    operator: Operator,
):
    await reject_alpha(db_session, sample_project, operator)
    rule = await create_rule(client, sample_project.id, action_type="alert_manager", action_config={})
    await client.post("/api/v1/followup-rules/evaluate")

    response = await client.delete(f"/api/v1/followup-rules/{rule['id']}")

    assert response.json() == {"success": True}
    executions = await client.get("/api/v1/followup-rules/executions")
    assert executions.json() == []
    missing = await client.get(f"/api/v1/followup-rules/{rule['id']}")
    assert missing.status_code == 404
