"""Test fraud flag endpoints."""

from datetime import datetime, timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from toguna.models.call import CallLog, CallResult
from toguna.models.company import Company
from toguna.models.compliance import AuditLog


async def seed_ghost_calls(db: AsyncSession, operator_id: int) -> None:
    company_id = (await db.execute(select(Company.id))).scalars().first()
    db.add_all([
        CallLog(
            company_id=company_id,
            operator_id=operator_id,
            result=CallResult.REJECTED,
            duration=2,
            called_at=datetime.utcnow() - timedelta(minutes=5 * i),
        )
        for i in range(10)
    ])
    await db.commit()


@pytest.mark.asyncio
async def test_scan_and_review(
    client: AsyncClient, db_session: AsyncSession, sample_project, operator
):
    await seed_ghost_calls(db_session, operator.id)

    response = await client.post("/api/v1/fraud/scan")
    assert response.status_code == 200
    scan = response.json()
    assert scan["operators_scanned"] == 2
    flag = scan["flags_created"][0]
    assert flag["fraud_type"] == "ghost_call"
    assert flag["risk_score"] == 100
    assert flag["risk_level"] == "high"
    assert flag["operator_name"] == "佐藤 花子"

    response = await client.patch(
        f"/api/v1/fraud/{flag['id']}", json={"status": "confirmed", "notes": "本人確認済み"}
    )
    assert response.json()["status"] == "confirmed"
    assert response.json()["reviewed_by"] is not None

    listing = (await client.get("/api/v1/fraud", params={"status": "pending"})).json()
    assert listing["alerts"] == []
    assert listing["stats"] == {"total": 1, "pending": 0, "confirmed": 1, "high_risk": 1}

    audit = (await db_session.execute(select(AuditLog))).scalar_one()
    assert audit.changes["status"] == ["pending", "confirmed"]


@pytest.mark.asyncio
async def test_unknown_flag(client: AsyncClient):
    response = await client.patch("/api/v1/fraud/999", json={"status": "dismissed"})
    assert response.status_code == 404
