"""Test notification polling and the sales floor board."""

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from toguna.models.notification import Notification, NotificationType


async def seed(db: AsyncSession, operator_id: int, director_id: int) -> list[Notification]:
    notifications = [
        Notification(notification_type=NotificationType.SYSTEM, title="全体", message="朝会です"),
        Notification(
            operator_id=operator_id,
            notification_type=NotificationType.ALERT,
            title="個別",
            message="折り返し予定があります",
        ),
        Notification(
            operator_id=director_id,
            notification_type=NotificationType.ALERT,
            title="管理者向け",
            message="不正検知",
        ),
    ]
    db.add_all(notifications)
    await db.commit()
    return notifications


@pytest.mark.asyncio
async def test_poll_sees_own_and_broadcast(
    operator_client: AsyncClient, db_session: AsyncSession, operator, director
):
    broadcast, own, _ = await seed(db_session, operator.id, director.id)

    response = await operator_client.get("/api/v1/notifications")

    data = response.json()
    assert [n["id"] for n in data["notifications"]] == [own.id, broadcast.id]
    assert data["unread_count"] == 2
    assert data["last_id"] == own.id

    response = await operator_client.get("/api/v1/notifications", params={"since_id": own.id})
    assert response.json()["notifications"] == []
    assert response.json()["last_id"] == own.id


@pytest.mark.asyncio
async def test_mark_read(operator_client: AsyncClient, db_session: AsyncSession, operator, director):
    _, own, other = await seed(db_session, operator.id, director.id)

    response = await operator_client.post(f"/api/v1/notifications/{own.id}/read")
    assert response.json()["is_read"] is True

    response = await operator_client.post(f"/api/v1/notifications/{other.id}/read")
    assert response.status_code == 404

    response = await operator_client.post("/api/v1/notifications/read-all")
    assert response.json()["updated"] == 1
    response = await operator_client.get("/api/v1/notifications", params={"unread_only": True})
    assert response.json()["unread_count"] == 0


@pytest.mark.asyncio
async def test_floor_status_tracks_call_start(operator_client: AsyncClient, client: AsyncClient):
    response = await operator_client.put("/api/v1/sales-floor/me", json={"status": "on_call"})
    assert response.status_code == 200
    started = response.json()["call_start_time"]
    assert started is not None

    response = await operator_client.put("/api/v1/sales-floor/me", json={"status": "on_call"})
    assert response.json()["call_start_time"] == started

    response = await operator_client.put("/api/v1/sales-floor/me", json={"status": "break"})
    assert response.json()["call_start_time"] is None

    floor = (await client.get("/api/v1/sales-floor")).json()
    assert [(f["operator_name"], f["status"]) for f in floor] == [("佐藤 花子", "break")]


@pytest.mark.asyncio
async def test_operator_cannot_view_floor(operator_client: AsyncClient):
    response = await operator_client.get("/api/v1/sales-floor")
    assert response.status_code == 403
