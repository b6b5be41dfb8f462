"""Tests for Google Calendar sync."""

from datetime import datetime
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from toguna.services.google_calendar import GoogleCalendarService, build_appointment_event


def test_online_event_requests_meet_link():
    event = build_appointment_event(
        company_name="株式会社アルファ",
        scheduled_at=datetime(2026, 10, 20, 14, 0),
        duration_minutes=45,
        meeting_type="online",
        operator_email="operator@toguna.test",
        notes="決裁者同席",
    )

    assert event["summary"] == "オンライン商談 - 株式会社アルファ"
    assert event["start"] == {"dateTime": "2026-10-20T14:00:00", "timeZone": "Asia/Tokyo"}
    assert event["end"]["dateTime"] == "2026-10-20T14:45:00"
    assert event["attendees"] == [{"email": "operator@toguna.test", "displayName": "営業担当者"}]
    assert event["conferenceData"]["createRequest"]["conferenceSolutionKey"] == {"type": "hangoutsMeet"}
    assert event["description"].splitlines()[0] == "営業担当者: operator@toguna.test"


def test_onsite_event_has_no_conference():
    event = build_appointment_event("ベータ工業株式会社", datetime(2026, 10, 21, 10), 60, "onsite")

    assert "conferenceData" not in event
    assert "attendees" not in event


def test_disconnected_operator_cannot_sync():
    service = GoogleCalendarService(SimpleNamespace(id=1, google_access_token=None))

    assert not service.is_configured
    with pytest.raises(ValueError):
        service.create_event({})


def test_create_event_uses_conference_version():
    operator = SimpleNamespace(id=1, google_access_token="token", google_refresh_token="refresh")
    calendar = MagicMock()
    calendar.events.return_value.insert.return_value.execute.return_value = {"id": "evt-1"}

    with patch("toguna.services.google_calendar.build", return_value=calendar):
        created = GoogleCalendarService(operator).create_event({"conferenceData": {}})

    assert created == {"id": "evt-1"}
    kwargs = calendar.events.return_value.insert.call_args.kwargs
    assert kwargs["conferenceDataVersion"] == 1
    assert kwargs["calendarId"] == "primary"
