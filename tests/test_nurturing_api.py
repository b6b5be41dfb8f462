"""Test nurturing templates, sends and tracking."""

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from toguna.core.nurturing import TRACKING_PIXEL
from toguna.models.company import Company
from toguna.models.nurturing import DocumentTracking


async def alpha_id(db: AsyncSession) -> int:
    result = await db.execute(select(Company.id).where(Company.name == "株式会社アルファ"))
    return result.scalar_one()


async def create_template(api: AsyncClient, project_id: int) -> dict:
    response = await api.post(
        "/api/v1/nurturing/templates",
        json={
            "name": "資料送付",
            "project_id": project_id,
            "subject": "{{company_name}} 様 {{product_name}} のご案内",
            "body": "{{company_name}} 様\n担当: {{operator_name}}\n{{campaign}}",
            "document_url": "https://files.test/catalog.pdf",
        },
    )
    assert response.status_code == 201
    return response.json()


@pytest.mark.asyncio
async def test_template_variables_and_preview(client: AsyncClient, db_session: AsyncSession, sample_project):
    template = await create_template(client, sample_project.id)
    assert template["variables"] == ["company_name", "product_name", "operator_name", "campaign"]

    response = await client.post(
        f"/api/v1/nurturing/templates/{template['id']}/preview",
        json={"company_id": await alpha_id(db_session)},
    )

    preview = response.json()
    assert preview["subject"] == "株式会社アルファ 様 クラウド会計 のご案内"
    assert "担当: 山田 太郎" in preview["body"]
    assert preview["missing_variables"] == ["campaign"]


@pytest.mark.asyncio
async def test_send_now_and_track_open(
    client: AsyncClient, anon_client: AsyncClient, db_session: AsyncSession, sample_project
):
    template = await create_template(client, sample_project.id)
    company_id = await alpha_id(db_session)

    response = await client.post(
        "/api/v1/nurturing/sends",
        json={
            "company_id": company_id,
            "template_id": template["id"],
            "values": {"campaign": "秋の導入キャンペーン"},
            "send_now": True,
        },
    )

    assert response.status_code == 201
    send = response.json()
    assert send["status"] == "sent"
    assert send["recipient"] == "info@alpha.test"
    assert send["body"].endswith("秋の導入キャンペーン")

    response = await anon_client.get(f"/api/v1/track/{send['id']}")
    assert response.status_code == 200
    assert response.content == TRACKING_PIXEL
    assert response.headers["cache-control"].startswith("no-store")

    response = await anon_client.get(
        f"/api/v1/track/{send['id']}",
        params={"type": "redirect", "redirect": "https://files.test/catalog.pdf"},
        follow_redirects=False,
    )
    assert response.status_code == 302
    assert response.headers["location"] == "https://files.test/catalog.pdf"

    send = (await client.get(f"/api/v1/nurturing/sends/{send['id']}")).json()
    assert send["open_count"] == 1
    assert send["click_count"] == 1
    assert send["opened_at"] is not None

    events = (await db_session.execute(select(DocumentTracking))).scalars().all()
    assert [e.event_type.value for e in events] == ["open", "link_click"]

    engagement = (await client.get(f"/api/v1/nurturing/engagement/{company_id}")).json()
    assert engagement["score"] == 5 + 15 + 20
    assert engagement["company_name"] == "株式会社アルファ"

    listing = (await client.get("/api/v1/nurturing/sends")).json()
    assert listing["open_rate"] == 100.0


@pytest.mark.asyncio
async def test_tracking_unknown_send_still_answers(anon_client: AsyncClient):
    response = await anon_client.get("/api/v1/track/999")

    assert response.status_code == 200
    assert response.headers["content-type"] == "image/gif"


@pytest.mark.asyncio
async def test_send_requires_template_or_body(client: AsyncClient, db_session: AsyncSession, sample_project):
    response = await client.post(
        "/api/v1/nurturing/sends", json={"company_id": await alpha_id(db_session)}
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_email_without_recipient_fails_on_dispatch(
    client: AsyncClient, db_session: AsyncSession, sample_project
):
    result = await db_session.execute(select(Company.id).where(Company.name == "ベータ工業株式会社"))
    beta_id = result.scalar_one()

    draft = (await client.post(
        "/api/v1/nurturing/sends", json={"company_id": beta_id, "body": "資料をお送りします"}
    )).json()
    assert draft["status"] == "draft"

    response = await client.post(f"/api/v1/nurturing/sends/{draft['id']}/dispatch")
    assert response.status_code == 502

    send = (await client.get(f"/api/v1/nurturing/sends/{draft['id']}")).json()
    assert send["status"] == "failed"


@pytest.mark.asyncio
async def test_manual_channels_are_recorded_as_sent(
    client: AsyncClient, db_session: AsyncSession, sample_project
):
    response = await client.post(
        "/api/v1/nurturing/sends",
        json={
            "company_id": await alpha_id(db_session),
            "channel": "letter",
            "body": "お手紙",
            "send_now": True,
        },
    )

    assert response.json()["status"] == "sent"
    response = await client.post(f"/api/v1/nurturing/sends/{response.json()['id']}/dispatch")
    assert response.status_code == 400
