"""Google Calendar sync for booked appointments."""

import logging
import uuid
from datetime import datetime, timedelta
from typing import Any
from zoneinfo import ZoneInfo

from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build

from toguna.config import get_settings
from toguna.models.operator import Operator

settings = get_settings()
logger = logging.getLogger(__name__)

MEETING_TYPE_LABELS = {
    "online": "オンライン商談",
    "onsite": "訪問商談",
    "phone": "電話商談",
}


def _rfc3339(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=ZoneInfo(settings.timezone))
    return value.isoformat()


def build_appointment_event(
    company_name: str,
    scheduled_at: datetime,
    duration_minutes: int,
    meeting_type: str,
    operator_email: str | None = None,
    notes: str | None = None,
) -> dict[str, Any]:
    """Calendar v3 event body. ``scheduled_at`` is wall-clock time in the business timezone."""
    label = MEETING_TYPE_LABELS.get(meeting_type, meeting_type)
    end = scheduled_at + timedelta(minutes=duration_minutes)

    description_lines = [f"会社: {company_name}", f"会議タイプ: {label}"]
    if operator_email:
        description_lines.insert(0, f"営業担当者: {operator_email}")
    if notes:
        description_lines.append(f"備考: {notes}")

    event: dict[str, Any] = {
        "summary": f"{label} - {company_name}",
        "description": "\n".join(description_lines),
        "start": {"dateTime": scheduled_at.isoformat(), "timeZone": settings.timezone},
        "end": {"dateTime": end.isoformat(), "timeZone": settings.timezone},
    }
    if operator_email:
        event["attendees"] = [{"email": operator_email, "displayName": "営業担当者"}]
    if meeting_type == "online":
        event["location"] = "Online"
        event["conferenceData"] = {
            "createRequest": {
                "requestId": f"toguna-{uuid.uuid4().hex}",
                "conferenceSolutionKey": {"type": "hangoutsMeet"},
            }
        }
    return event


class GoogleCalendarService:
    """Calendar operations on behalf of one operator."""

    def __init__(self, operator: Operator):
        self.operator = operator

    @property
    def is_configured(self) -> bool:
        return bool(self.operator.google_access_token)

    def _service(self):
        if not self.is_configured:
            raise ValueError(f"Google Calendar not connected for operator {self.operator.id}")
        credentials = Credentials(
            token=self.operator.google_access_token,
            refresh_token=self.operator.google_refresh_token,
            token_uri="https://oauth2.googleapis.com/token",
            client_id=settings.google_client_id,
            client_secret=settings.google_client_secret,
        )
        return build("calendar", "v3", credentials=credentials)

    def create_event(self, event: dict[str, Any]) -> dict[str, Any]:
        service = self._service()
        created = (
            service.events()
            .insert(
                calendarId="primary",
                body=event,
                conferenceDataVersion=1 if "conferenceData" in event else 0,
            )
            .execute()
        )
        logger.info(f"Created calendar event {created.get('id')} for operator {self.operator.id}")
        return created

    def get_event(self, event_id: str) -> dict[str, Any]:
        return self._service().events().get(calendarId="primary", eventId=event_id).execute()

    def update_event(self, event_id: str, changes: dict[str, Any]) -> dict[str, Any]:
        return (
            self._service()
            .events()
            .patch(calendarId="primary", eventId=event_id, body=changes)
            .execute()
        )

    def delete_event(self, event_id: str) -> None:
        self._service().events().delete(calendarId="primary", eventId=event_id).execute()
        logger.info(f"Deleted calendar event {event_id}")

    def list_events(self, start: datetime, end: datetime, max_results: int = 50) -> list[dict[str, Any]]:
        result = (
            self._service()
            .events()
            .list(
                calendarId="primary",
                timeMin=_rfc3339(start),
                timeMax=_rfc3339(end),
                timeZone=settings.timezone,
                maxResults=max_results,
                singleEvents=True,
                orderBy="startTime",
            )
            .execute()
        )
        return result.get("items", [])
