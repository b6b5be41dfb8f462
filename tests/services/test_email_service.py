"""Tests for email delivery."""

import pytest

from toguna.services.email_service import (
    EmailService,
    appointment_notification_html,
    document_email_html,
)


def test_appointment_notification_html_escapes_input():
    body = appointment_notification_html("<株式会社アルファ>", "2026/10/20 14:00", "online", "決裁者同席")

    assert "&lt;株式会社アルファ&gt;" in body
    assert "オンライン" in body
    assert "決裁者同席" in body


def test_document_email_includes_link_and_pixel():
    body = document_email_html(
        "株式会社アルファ",
        "資料送付のご案内",
        "1行目\n2行目",
        document_url="https://files.test/doc.pdf",
        tracking_pixel_url="https://api.test/api/v1/track/open/1",
    )

    assert "1行目<br />2行目" in body
    assert 'href="https://files.test/doc.pdf"' in body
    assert 'src="https://api.test/api/v1/track/open/1"' in body


@pytest.mark.asyncio
async def test_mock_provider_sends():
    result = await EmailService(provider="mock").send("info@alpha.test", "件名", "<p>本文</p>")

    assert result.provider == "mock"
    assert result.message_id.startswith("mock-")


@pytest.mark.asyncio
async def test_subject_required():
    with pytest.raises(ValueError):
        await EmailService(provider="mock").send("info@alpha.test", "", "<p>本文</p>")


@pytest.mark.asyncio
async def test_resend_without_key_is_not_configured():
    service = EmailService(provider="resend")
    service.api_key = ""

    assert not service.is_configured
    with pytest.raises(ValueError):
        await service.send("info@alpha.test", "件名", "<p>本文</p>")
