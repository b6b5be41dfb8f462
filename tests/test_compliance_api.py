"""Tests for compliance endpoints: subsidy reports, documents and audit logs."""

from datetime import datetime, timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from toguna.core.clock import local_today
from toguna.core.compliance import add_years, compute_file_hash
from toguna.models.call import CallLog, CallResult
from toguna.models.company import Company
from toguna.models.operator import Operator


async def register(client: AsyncClient, **overrides) -> dict:
    payload = {
        "document_type": "contract",
        "title": "業務委託契約書",
        "content": "契約本文",
        **overrides,
    }
    response = await client.post("/api/v1/compliance/documents", json=payload)
    assert response.status_code == 201
    return response.json()


# =============================================================================
# SUBSIDY REPORTS
# =============================================================================

@pytest.mark.asyncio
async def test_generate_subsidy_report(
    client: AsyncClient,
    db_session: AsyncSession,
    sample_project,
    operator: Operator,
    director: Operator,
):
    company = (await db_session.execute(select(Company))).scalars().first()
    db_session.add_all([
        CallLog(
            company_id=company.id,
            operator_id=operator.id,
            project_id=sample_project.id,
            result=result,
            duration=600,
            called_at=datetime(2026, 9, 15, 2),
        )
        for result in (CallResult.APPOINTMENT, CallResult.REJECTED)
    ])
    await db_session.commit()

    response = await client.post("/api/v1/compliance/subsidy-reports", json={
        "report_type": "productivity",
        "period_start": "2026-09-01",
        "period_end": "2026-09-30",
        "client_id": sample_project.client_id,
    })

    assert response.status_code == 201
    report = response.json()
    assert report["status"] == "generated"
    assert report["title"] == "生産性向上報告"
    assert report["generated_by"] == director.id
    assert report["metrics"]["total_calls"] == 2
    assert report["metrics"]["appointment_rate"] == 50.0

    page = await client.get(f"/api/v1/compliance/subsidy-reports/{report['id']}/html")
    assert page.status_code == 200
    assert page.headers["content-type"].startswith("text/html")
    assert "生産性向上報告" in page.text
    assert "佐藤 花子" in page.text

    audit = await client.get("/api/v1/compliance/audit-logs", params={"entity_type": "subsidy_report"})
    assert audit.json()[0]["action"] == "generate"
    assert audit.json()[0]["operator_id"] == director.id


@pytest.mark.asyncio
async def test_subsidy_report_period_must_be_ordered(client: AsyncClient):
    response = await client.post("/api/v1/compliance/subsidy-reports", json={
        "report_type": "performance",
        "period_start": "2026-09-30",
        "period_end": "2026-09-01",
    })
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_submit_sets_timestamp(client: AsyncClient):
    created = await client.post("/api/v1/compliance/subsidy-reports", json={
        "report_type": "effect",
        "period_start": "2026-01-01",
        "period_end": "2026-03-31",
        "title": "第1四半期 効果報告",
    })
    report_id = created.json()["id"]
    assert created.json()["metrics"]["total_calls"] == 0

    response = await client.patch(
        f"/api/v1/compliance/subsidy-reports/{report_id}/status",
        json={"status": "submitted"},
    )

    assert response.json()["status"] == "submitted"
    assert response.json()["submitted_at"] is not None

    filtered = await client.get("/api/v1/compliance/subsidy-reports", params={"status": "submitted"})
    assert [r["id"] for r in filtered.json()] == [report_id]

    audit = await client.get("/api/v1/compliance/audit-logs", params={"action": "STATUS"})
    assert audit.json()[0]["changes"] == {"status": ["generated", "submitted"]}

    missing = await client.get("/api/v1/compliance/subsidy-reports/999")
    assert missing.status_code == 404


# =============================================================================
# DOCUMENTS
# =============================================================================

@pytest.mark.asyncio
async def test_register_document_hashes_content(client: AsyncClient):
    document = await register(client, retention_start="2026-04-01")

    assert document["file_hash"] == compute_file_hash("契約本文")
    assert document["retention_end"] == "2031-04-01"
    assert document["is_immutable"] is True
    assert document["status"] == "active"

    audit = await client.get("/api/v1/compliance/audit-logs", params={"entity_type": "compliance_document"})
    assert "content" not in audit.json()[0]["changes"]


@pytest.mark.asyncio
async def test_verify_detects_tampering(client: AsyncClient):
    document = await register(client)

    ok = await client.post(f"/api/v1/compliance/documents/{document['id']}/verify", json={"content": "契約本文"})
    assert ok.json()["matches"] is True

    tampered = await client.post(
        f"/api/v1/compliance/documents/{document['id']}/verify",
        json={"content": "契約本文（改ざん）"},
    )
    assert tampered.json()["matches"] is False
    assert tampered.json()["stored_hash"] == document["file_hash"]


@pytest.mark.asyncio
async def test_immutable_documents_reject_edits(client: AsyncClient):
    locked = await register(client)
    response = await client.patch(f"/api/v1/compliance/documents/{locked['id']}", json={"title": "差し替え"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Document is immutable"

    editable = await register(client, is_immutable=False, document_type="daily_report")
    response = await client.patch(f"/api/v1/compliance/documents/{editable['id']}", json={"title": "日報 10月"})
    assert response.status_code == 200
    assert response.json()["title"] == "日報 10月"


@pytest.mark.asyncio
async def test_extend_and_archive(client: AsyncClient):
    document = await register(client, retention_start="2026-04-01")

    extended = await client.post(f"/api/v1/compliance/documents/{document['id']}/extend")
    assert extended.json()["retention_end"] == "2032-04-01"

    archived = await client.post(f"/api/v1/compliance/documents/{document['id']}/archive")
    assert archived.json()["status"] == "archived"

    again = await client.post(f"/api/v1/compliance/documents/{document['id']}/archive")
    assert again.status_code == 400
    blocked = await client.post(f"/api/v1/compliance/documents/{document['id']}/extend")
    assert blocked.status_code == 400

    audit = await client.get("/api/v1/compliance/audit-logs", params={"action": "extend"})
    assert audit.json()[0]["changes"] == {"retention_end": ["2031-04-01", "2032-04-01"]}


@pytest.mark.asyncio
async def test_retention_alerts(client: AsyncClient):
    today = local_today()
    expiring = await register(client, retention_start=add_years(today + timedelta(days=10), -5).isoformat())
    expired = await register(client, retention_start=add_years(today - timedelta(days=3), -5).isoformat())
    await register(client)

    response = await client.get("/api/v1/compliance/documents/retention-alerts")

    data = response.json()
    assert [a["document"]["id"] for a in data["alerts"]] == [expired["id"], expiring["id"]]
    assert data["alerts"][0]["bucket"] == "expired"
    assert data["alerts"][1]["bucket"] == "within_30"
    assert data["counts"] == {"expired": 1, "within_30": 1, "within_60": 0, "within_90": 0}


@pytest.mark.asyncio
async def test_unknown_document(client: AsyncClient):
    response = await client.get("/api/v1/compliance/documents/999")
    assert response.status_code == 404
    assert response.json()["detail"] == "Compliance document not found"
