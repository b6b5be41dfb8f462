"""Test company risk flag endpoints."""

from datetime import datetime

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from toguna.models.company import Company
from toguna.models.risk import CompanyRiskFlag, RiskFlagType, RiskSeverity


async def company_ids(db: AsyncSession) -> list[int]:
    return (await db.execute(select(Company.id).order_by(Company.id))).scalars().all()


@pytest.mark.asyncio
async def test_raise_flag(client: AsyncClient, db_session: AsyncSession, sample_project):
    alpha, _ = await company_ids(db_session)

    response = await client.post(
        "/api/v1/risk-flags",
        json={"company_id": alpha, "title": "  訴訟提起の報道  ", "flag_type": "lawsuit", "severity": "high"},
    )

    assert response.status_code == 201
    data = response.json()
    assert data["title"] == "訴訟提起の報道"
    assert data["company_name"] == "株式会社アルファ"
    assert data["flag_type_label"] == "訴訟"
    assert data["is_active"] is True


@pytest.mark.asyncio
async def test_blank_title_rejected(client: AsyncClient, db_session: AsyncSession, sample_project):
    alpha, _ = await company_ids(db_session)

    response = await client.post("/api/v1/risk-flags", json={"company_id": alpha, "title": "   "})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_flag_on_unknown_company(client: AsyncClient):
    response = await client.post("/api/v1/risk-flags", json={"company_id": 999, "title": "x"})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_list_filters_and_summary(client: AsyncClient, db_session: AsyncSession, sample_project):
    alpha, beta = await company_ids(db_session)
    db_session.add_all([
        CompanyRiskFlag(company_id=alpha, title="債務超過", flag_type=RiskFlagType.FINANCIAL_WARNING,
                        severity=RiskSeverity.CRITICAL, is_active=True, detected_at=datetime(2026, 10, 1)),
        CompanyRiskFlag(company_id=beta, title="社長交代", flag_type=RiskFlagType.EXECUTIVE_CHANGE,
                        severity=RiskSeverity.LOW, is_active=False, detected_at=datetime(2026, 10, 5)),
        CompanyRiskFlag(company_id=beta, title="炎上", flag_type=RiskFlagType.NEGATIVE_PRESS,
                        severity=RiskSeverity.MEDIUM, is_active=True, detected_at=datetime(2026, 10, 3)),
    ])
    await db_session.commit()

    response = await client.get("/api/v1/risk-flags", params={"project_id": sample_project.id})
    data = response.json()
    assert [f["title"] for f in data["flags"]] == ["社長交代", "炎上", "債務超過"]
    assert data["summary"] == {"total": 3, "critical": 1, "unresolved": 2}

    response = await client.get(
        "/api/v1/risk-flags", params={"project_id": sample_project.id, "state": "active", "sort": "severity"}
    )
    data = response.json()
    assert [f["title"] for f in data["flags"]] == ["債務超過", "炎上"]
    assert data["summary"]["total"] == 3

    response = await client.get("/api/v1/risk-flags", params={"company_id": beta, "severity": "low"})
    assert [f["title"] for f in response.json()["flags"]] == ["社長交代"]


@pytest.mark.asyncio
async def test_list_unknown_project(client: AsyncClient):
    response = await client.get("/api/v1/risk-flags", params={"project_id": 999})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_toggle_flag(client: AsyncClient, db_session: AsyncSession, director, sample_project):
    alpha, _ = await company_ids(db_session)
    flag_id = (await client.post("/api/v1/risk-flags", json={"company_id": alpha, "title": "行政処分"})).json()["id"]

    resolved = (await client.post(f"/api/v1/risk-flags/{flag_id}/toggle")).json()
    assert resolved["is_active"] is False
    assert resolved["resolved_by"] == director.id

    reopened = (await client.post(f"/api/v1/risk-flags/{flag_id}/toggle")).json()
    assert reopened["is_active"] is True
    assert reopened["resolved_at"] is None

    response = await client.post("/api/v1/risk-flags/999/toggle")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_risk_flags_require_director(operator_client: AsyncClient):
    response = await operator_client.get("/api/v1/risk-flags")
    assert response.status_code == 403
