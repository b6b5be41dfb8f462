"""Test client portal links and the client view."""

from datetime import datetime, timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from toguna.core.clock import local_now
from toguna.models.appointment import Appointment, AppointmentStatus
from toguna.models.call import CallLog, CallResult
from toguna.models.client import Client
from toguna.models.company import Company
from toguna.models.portal import PortalToken
from toguna.models.project import Project
from toguna.models.quality import GoldenCall


@pytest.fixture
async def project_activity(db_session: AsyncSession, sample_project, operator):
    """Three calls, one upcoming and one past appointment, two golden calls."""
    alpha = (await db_session.execute(select(Company.id).order_by(Company.id))).scalars().first()
    now = datetime.utcnow()
    db_session.add_all([
        CallLog(company_id=alpha, operator_id=operator.id, project_id=sample_project.id,
                result=CallResult.APPOINTMENT, duration=180, notes="社長と直接", called_at=now - timedelta(hours=2)),
        CallLog(company_id=alpha, operator_id=operator.id, project_id=sample_project.id,
                result=CallResult.ABSENT, duration=15, called_at=now - timedelta(hours=1)),
        CallLog(company_id=alpha, operator_id=operator.id, project_id=sample_project.id,
                result=CallResult.REJECTED, duration=40, called_at=now),
        Appointment(company_id=alpha, project_id=sample_project.id, operator_id=operator.id,
                    scheduled_at=local_now() + timedelta(days=2), status=AppointmentStatus.CONFIRMED),
        Appointment(company_id=alpha, project_id=sample_project.id, operator_id=operator.id,
                    scheduled_at=local_now() - timedelta(days=1), status=AppointmentStatus.COMPLETED),
        GoldenCall(project_id=sample_project.id, title="共有する好事例", total_score=90, is_client_visible=True),
        GoldenCall(project_id=sample_project.id, title="社内限定", total_score=95, is_client_visible=False),
    ])
    await db_session.commit()
    return sample_project


async def issue_link(api: AsyncClient, client_id: int, **options) -> dict:
    response = await api.post("/api/v1/portal/tokens", json={"client_id": client_id, **options})
    assert response.status_code == 201
    return response.json()


@pytest.mark.asyncio
async def test_issue_link(client: AsyncClient, sample_project):
    link = await issue_link(client, sample_project.client_id)

    assert link["is_active"] is True
    assert len(link["token"]) >= 32
    assert link["url"].endswith(f"/portal/{link['token']}")
    assert link["expires_at"] is not None


@pytest.mark.asyncio
async def test_link_for_another_clients_project(client: AsyncClient, db_session: AsyncSession, sample_project):
    other = Client(name="別会社")
    db_session.add(other)
    await db_session.commit()

    response = await client.post(
        "/api/v1/portal/tokens", json={"client_id": other.id, "project_id": sample_project.id}
    )
    assert response.status_code == 400

    response = await client.post("/api/v1/portal/tokens", json={"client_id": 999})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_operators_cannot_issue_links(operator_client: AsyncClient, sample_project):
    response = await operator_client.post("/api/v1/portal/tokens", json={"client_id": sample_project.client_id})
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_client_view(client: AsyncClient, anon_client: AsyncClient, db_session: AsyncSession, project_activity):
    link = await issue_link(client, project_activity.client_id)

    response = await anon_client.get(f"/api/v1/portal/view/{link['token']}")

    assert response.status_code == 200
    view = response.json()
    assert view["client_name"] == "株式会社テスト商事"
    assert view["project_names"] == ["クラウド会計 新規開拓"]
    assert view["totals"] == {"calls": 3, "appointments": 1, "appointment_rate": 33.3}
    assert sum(week["calls"] for week in view["weekly"]) == 3
    assert [c["result"] for c in view["recent_calls"]] == ["rejected", "absent", "appointment"]
    assert "notes" not in view["recent_calls"][0]
    assert len(view["upcoming_appointments"]) == 1
    assert view["upcoming_appointments"][0]["company_name"] == "株式会社アルファ"
    assert [g["title"] for g in view["golden_calls"]] == ["共有する好事例"]

    token = (await db_session.execute(select(PortalToken))).scalar_one()
    assert token.last_accessed_at is not None


@pytest.mark.asyncio
async def test_permissions_hide_sections(client: AsyncClient, anon_client: AsyncClient, project_activity):
    link = await issue_link(
        client, project_activity.client_id,
        can_view_calls=False, can_view_appointments=False, can_view_golden_calls=False,
    )

    view = (await anon_client.get(f"/api/v1/portal/view/{link['token']}")).json()

    assert view["totals"]["calls"] == 3
    assert view["recent_calls"] is None
    assert view["upcoming_appointments"] is None
    assert view["golden_calls"] is None


@pytest.mark.asyncio
async def test_link_scoped_to_one_project(
    client: AsyncClient, anon_client: AsyncClient, db_session: AsyncSession, project_activity
):
    second = Project(client_id=project_activity.client_id, name="勤怠管理 拡販")
    db_session.add(second)
    await db_session.commit()

    link = await issue_link(client, project_activity.client_id, project_id=second.id)
    view = (await anon_client.get(f"/api/v1/portal/view/{link['token']}")).json()

    assert view["project_names"] == ["勤怠管理 拡販"]
    assert view["totals"]["calls"] == 0
    assert view["weekly"] == []
    assert view["golden_calls"] == []


@pytest.mark.asyncio
async def test_revoked_and_expired_links(
    client: AsyncClient, anon_client: AsyncClient, db_session: AsyncSession, sample_project
):
    revoked = await issue_link(client, sample_project.client_id)
    response = await client.post(f"/api/v1/portal/tokens/{revoked['id']}/revoke")
    assert response.json()["is_active"] is False
    assert (await client.post(f"/api/v1/portal/tokens/{revoked['id']}/revoke")).status_code == 400

    expired = PortalToken(
        client_id=sample_project.client_id, is_active=True, expires_at=datetime.utcnow() - timedelta(minutes=1)
    )
    db_session.add(expired)
    await db_session.commit()

    for token in (revoked["token"], expired.token, "no-such-token"):
        response = await anon_client.get(f"/api/v1/portal/view/{token}")
        assert response.status_code == 404


@pytest.mark.asyncio
async def test_list_links_per_client(client: AsyncClient, sample_project):
    first = await issue_link(client, sample_project.client_id)
    await issue_link(client, sample_project.client_id)
    await client.post(f"/api/v1/portal/tokens/{first['id']}/revoke")

    everything = (await client.get("/api/v1/portal/tokens", params={"client_id": sample_project.client_id})).json()
    active = (await client.get("/api/v1/portal/tokens", params={"active_only": True})).json()

    assert len(everything) == 2
    assert len(active) == 1
