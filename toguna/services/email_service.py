"""Outbound email delivery through Resend, with a logging mock for development."""

import html
import logging
import time
from dataclasses import dataclass
from typing import Any

import httpx

from toguna.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"

MEETING_TYPE_LABELS = {
    "online": "オンライン",
    "onsite": "訪問",
    "phone": "電話",
}


@dataclass
class EmailResult:
    message_id: str
    provider: str


def appointment_notification_html(
    company_name: str,
    scheduled_at: str,
    meeting_type: str,
    notes: str | None = None,
) -> str:
    """Body of the mail sent to an operator when a meeting is booked."""
    meeting_label = MEETING_TYPE_LABELS.get(meeting_type, meeting_type)
    notes_item = f"<li><strong>備考:</strong> {html.escape(notes)}</li>" if notes else ""
    return (
        "<h2>新規予約確認</h2>"
        "<p>営業担当者様へ</p>"
        "<p>新しい打ち合わせが予約されました。</p>"
        "<ul>"
        f"<li><strong>会社名:</strong> {html.escape(company_name)}</li>"
        f"<li><strong>日時:</strong> {html.escape(scheduled_at)}</li>"
        f"<li><strong>種類:</strong> {html.escape(meeting_label)}</li>"
        f"{notes_item}"
        "</ul>"
        "<p>予約内容をご確認の上、必要な準備をお願いいたします。</p>"
    )


def document_email_html(
    company_name: str,
    subject: str,
    body: str,
    document_url: str | None = None,
    tracking_pixel_url: str | None = None,
) -> str:
    """Body of a nurturing document mail. Line breaks in the body are kept."""
    paragraphs = html.escape(body).replace("\n", "<br />")
    parts = [
        f"<h2>{html.escape(subject)}</h2>",
        f"<p>{html.escape(company_name)} 様へ</p>",
        f"<p>{paragraphs}</p>",
    ]
    if document_url:
        parts.append(
            f'<p><a href="{html.escape(document_url, quote=True)}" '
            'style="display: inline-block; padding: 10px 20px; background-color: #0066cc; '
            'color: white; text-decoration: none; border-radius: 4px;">資料をダウンロード</a></p>'
        )
    parts.append("<hr />")
    parts.append('<p style="color: #666; font-size: 12px;">このメールはシステムから自動送信されています。</p>')
    if tracking_pixel_url:
        parts.append(
            f'<img src="{html.escape(tracking_pixel_url, quote=True)}" width="1" height="1" alt="" '
            'style="display:none" />'
        )
    return "".join(parts)


class EmailService:
    """Send transactional mail through the configured provider."""

    def __init__(self, provider: str | None = None):
        self.provider = (provider or settings.email_provider).lower()
        self.api_key = settings.resend_api_key
        self.from_header = f"{settings.email_from_name} <{settings.email_from_address}>"

    @property
    def is_configured(self) -> bool:
        if self.provider == "mock":
            return True
        return self.provider == "resend" and bool(self.api_key)

    async def send(
        self,
        to: str | list[str],
        subject: str,
        html_body: str,
        text: str | None = None,
        reply_to: str | None = None,
    ) -> EmailResult:
        if not subject or not html_body:
            raise ValueError("Subject and HTML content are required")
        if not self.is_configured:
            raise ValueError(f"Email provider '{self.provider}' not configured")

        recipients = to if isinstance(to, list) else [to]

        if self.provider == "mock":
            message_id = f"mock-{int(time.time() * 1000)}"
            logger.info(f"Mock email {message_id} to {', '.join(recipients)}: {subject}")
            return EmailResult(message_id=message_id, provider="mock")

        payload: dict[str, Any] = {
            "from": self.from_header,
            "to": recipients,
            "subject": subject,
            "html": html_body,
        }
        if text:
            payload["text"] = text
        if reply_to:
            payload["reply_to"] = reply_to

        async with httpx.AsyncClient() as client:
            response = await client.post(
                RESEND_API_URL,
                json=payload,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                timeout=30.0,
            )
            response.raise_for_status()
            data = response.json()

        logger.info(f"Sent email {data.get('id')} to {', '.join(recipients)}")
        return EmailResult(message_id=data.get("id", ""), provider="resend")

    async def send_appointment_notification(
        self,
        to: str,
        company_name: str,
        scheduled_at: str,
        meeting_type: str,
        notes: str | None = None,
    ) -> EmailResult:
        return await self.send(
            to=to,
            subject=f"新規予約: {company_name} - {scheduled_at}",
            html_body=appointment_notification_html(company_name, scheduled_at, meeting_type, notes),
        )

    async def send_document_email(
        self,
        to: str,
        company_name: str,
        subject: str,
        body: str,
        document_url: str | None = None,
        tracking_pixel_url: str | None = None,
    ) -> EmailResult:
        return await self.send(
            to=to,
            subject=subject,
            html_body=document_email_html(company_name, subject, body, document_url, tracking_pixel_url),
            text=body,
        )


def get_email_service() -> EmailService:
    return EmailService()
