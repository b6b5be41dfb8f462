"""Notification and sales floor schemas."""

from datetime import datetime

from pydantic import BaseModel

from toguna.models.notification import NotificationType, FloorStatus


class NotificationResponse(BaseModel):
    id: int
    operator_id: int | None = None
    notification_type: NotificationType
    title: str
    message: str
    data: dict | None = None
    is_read: bool
    created_at: datetime

    class Config:
        from_attributes = True


class NotificationListResponse(BaseModel):
    notifications: list[NotificationResponse]
    unread_count: int
    last_id: int | None = None


class FloorStatusUpdate(BaseModel):
    status: FloorStatus
    current_company_id: int | None = None
    current_project_id: int | None = None


class FloorEntry(BaseModel):
    id: int
    operator_id: int
    operator_name: str | None = None
    status: FloorStatus
    current_company_id: int | None = None
    current_project_id: int | None = None
    call_start_time: datetime | None = None
    calls_today: int
    appointments_today: int
    updated_at: datetime

    class Config:
        from_attributes = True
