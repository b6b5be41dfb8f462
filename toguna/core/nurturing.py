"""Document nurturing: template rendering, delivery and open/click tracking."""

import logging
import re
from datetime import date, datetime

import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from toguna.config import get_settings
from toguna.core.engagement import add_engagement
from toguna.models.company import Company
from toguna.models.nurturing import (
    DocumentSend,
    DocumentTemplate,
    DocumentTracking,
    SendChannel,
    TrackingEventType,
)
from toguna.models.operator import Operator
from toguna.models.project import Project
from toguna.services.email_service import EmailService

settings = get_settings()
logger = logging.getLogger(__name__)

VARIABLE_RE = re.compile(r"\{\{\s*(\w+)\s*\}\}")

TRACKING_EVENTS = {
    TrackingEventType.OPEN: "document_open",
    TrackingEventType.PAGE_VIEW: "document_page_view",
    TrackingEventType.LINK_CLICK: "document_link_click",
    TrackingEventType.DOWNLOAD: "document_download",
}

# 1x1 transparent GIF
TRACKING_PIXEL = (
    b"GIF89a\x01\x00\x01\x00\x80\x00\x00\x00\x00\x00\xff\xff\xff!\xf9\x04\x01\x00\x00\x00\x00"
    b",\x00\x00\x00\x00\x01\x00\x01\x00\x00\x02\x02D\x01\x00;"
)


def find_variables(*texts: str | None) -> list[str]:
    """Placeholder names in order of first appearance."""
    names: list[str] = []
    for text in texts:
        for name in VARIABLE_RE.findall(text or ""):
            if name not in names:
                names.append(name)
    return names


def render(text: str | None, values: dict[str, str]) -> tuple[str | None, list[str]]:
    """Substitute placeholders. Unknown ones are left in place and reported."""
    if text is None:
        return None, []
    missing: list[str] = []

    def _replace(match: re.Match) -> str:
        name = match.group(1)
        if name in values and values[name] is not None:
            return str(values[name])
        if name not in missing:
            missing.append(name)
        return match.group(0)

    return VARIABLE_RE.sub(_replace, text), missing


def default_values(
    company: Company | None,
    project: Project | None = None,
    operator: Operator | None = None,
    today: date | None = None,
) -> dict[str, str]:
    values = {"date": (today or date.today()).strftime("%Y/%m/%d")}
    if company is not None:
        values["company_name"] = company.name
        if company.industry:
            values["industry"] = company.industry
    if project is not None and project.product_name:
        values["product_name"] = project.product_name
    if operator is not None:
        values["operator_name"] = operator.name
    return values


def tracking_pixel_url(send_id: int) -> str:
    return f"{settings.tracking_base_url.rstrip('/')}/api/v1/track/{send_id}?type=pixel"


async def dispatch_send(
    db: AsyncSession,
    send: DocumentSend,
    email_service: EmailService,
) -> bool:
    """Deliver a prepared send and update its status.

    Email goes out through the email service with a tracking pixel. Other
    channels are delivered by hand, so dispatching only records them as sent.
    Returns False when delivery failed; the caller commits either way.
    """
    company = await db.get(Company, send.company_id)
    document_url = None
    if send.template_id is not None:
        template = await db.get(DocumentTemplate, send.template_id)
        document_url = template.document_url if template else None

    if send.channel == SendChannel.EMAIL:
        if not send.recipient:
            send.mark_failed("Recipient email is required")
            return False
        try:
            result = await email_service.send_document_email(
                to=send.recipient,
                company_name=company.name if company else "",
                subject=send.subject or "",
                body=send.body or "",
                document_url=document_url,
                tracking_pixel_url=tracking_pixel_url(send.id),
            )
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Document send {send.id} failed: {e}")
            send.mark_failed(str(e))
            return False
        send.mark_sent(result.message_id)
    else:
        send.mark_sent()

    try:
        await add_engagement(db, send.company_id, "document_sent")
    except Exception as e:
        logger.warning(f"Engagement update for send {send.id} failed: {e}")
    logger.info(f"Document send {send.id} delivered via {send.channel.value}")
    return True


async def record_tracking(
    db: AsyncSession,
    send: DocumentSend,
    event_type: TrackingEventType,
    user_agent: str | None = None,
    ip_address: str | None = None,
    metadata: dict | None = None,
) -> DocumentTracking:
    """Store a recipient interaction and roll it into the send and engagement score."""
    event = DocumentTracking(
        send_id=send.id,
        event_type=event_type,
        event_metadata=metadata,
        user_agent=user_agent,
        ip_address=ip_address,
        tracked_at=datetime.utcnow(),
    )
    db.add(event)

    if event_type == TrackingEventType.OPEN:
        send.open_count = (send.open_count or 0) + 1
        if send.opened_at is None:
            send.opened_at = datetime.utcnow()
    elif event_type == TrackingEventType.LINK_CLICK:
        send.click_count = (send.click_count or 0) + 1

    engagement_event = TRACKING_EVENTS.get(event_type)
    if engagement_event:
        await add_engagement(db, send.company_id, engagement_event)
    return event
