"""Notification polling API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select, update, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from toguna.api.auth import CurrentOperator
from toguna.services.database import get_db
from toguna.models.notification import Notification
from toguna.models.operator import Operator
from toguna.schemas.notification import NotificationResponse, NotificationListResponse

router = APIRouter()


def visible_to(operator: Operator):
    """Own notifications plus broadcasts."""
    return or_(Notification.operator_id == operator.id, Notification.operator_id.is_(None))


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    operator: CurrentOperator,
    db: Annotated[AsyncSession, Depends(get_db)],
    since_id: int | None = None,
    unread_only: bool = False,
    limit: int = 50,
) -> NotificationListResponse:
    """
    Poll for notifications.

    Pass the `last_id` of the previous response as `since_id` to get only
    newer entries.
    """
    query = select(Notification).where(visible_to(operator)).order_by(Notification.id.desc())
    if since_id is not None:
        query = query.where(Notification.id > since_id)
    if unread_only:
        query = query.where(Notification.is_read == False)  # noqa: E712

    result = await db.execute(query.limit(limit))
    notifications = result.scalars().all()

    unread_count = await db.scalar(
        select(func.count()).select_from(Notification).where(
            visible_to(operator),
            Notification.is_read == False,  # noqa: E712
        )
    )

    return NotificationListResponse(
        notifications=[NotificationResponse.model_validate(n) for n in notifications],
        unread_count=unread_count or 0,
        last_id=notifications[0].id if notifications else since_id,
    )


@router.post("/read-all")
async def mark_all_read(
    operator: CurrentOperator,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    result = await db.execute(
        update(Notification)
        .where(visible_to(operator), Notification.is_read == False)  # noqa: E712
        .values(is_read=True)
    )
    await db.commit()
    return {"success": True, "updated": result.rowcount or 0}


@router.post("/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(
    notification_id: int,
    operator: CurrentOperator,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> NotificationResponse:
    notification = await db.get(Notification, notification_id)
    if not notification or notification.operator_id not in (None, operator.id):
        raise HTTPException(status_code=404, detail="Notification not found")

    notification.is_read = True
    await db.commit()
    await db.refresh(notification)
    return NotificationResponse.model_validate(notification)
