"""Public document tracking endpoints (pixel and link redirect)."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from toguna.core.nurturing import TRACKING_PIXEL, record_tracking
from toguna.services.database import get_db
from toguna.models.nurturing import DocumentSend, TrackingEventType

logger = logging.getLogger(__name__)
router = APIRouter()

NO_CACHE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate, private",
    "Pragma": "no-cache",
    "Expires": "0",
}


@router.get("/{send_id}")
async def track(
    send_id: int,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    type: str = "pixel",
    redirect: str | None = None,
) -> Response:
    """
    Record an open (pixel) or a click (redirect) for a document send.

    Always answers, even for unknown sends or when recording fails, so
    recipients never see a broken image or a dead link.
    """
    is_redirect = type == "redirect" and bool(redirect)
    event_type = TrackingEventType.LINK_CLICK if is_redirect else TrackingEventType.OPEN

    try:
        send = await db.get(DocumentSend, send_id)
        if send is not None:
            await record_tracking(
                db,
                send,
                event_type,
                user_agent=request.headers.get("user-agent"),
                ip_address=request.client.host if request.client else None,
                metadata={"redirect": redirect} if is_redirect else None,
            )
            await db.commit()
    except Exception as e:
        logger.error(f"Tracking {event_type.value} for send {send_id} failed: {e}")
        await db.rollback()

    if is_redirect:
        return RedirectResponse(url=redirect, status_code=302, headers=NO_CACHE_HEADERS)
    return Response(content=TRACKING_PIXEL, media_type="image/gif", headers=NO_CACHE_HEADERS)
