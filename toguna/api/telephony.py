"""Click-to-call endpoints backed by Zoom Phone.

The signed-in operator's email is their Zoom user id.
"""

import logging
from datetime import date
from typing import Any

import httpx
from fastapi import APIRouter, HTTPException

from toguna.api.auth import CurrentOperator
from toguna.services.zoom_phone import ZoomPhoneService, get_zoom_phone_service
from toguna.schemas.telephony import DialRequest, CallControlResponse

logger = logging.getLogger(__name__)
router = APIRouter()


def get_configured_service() -> ZoomPhoneService:
    service = get_zoom_phone_service()
    if not service.is_configured:
        raise HTTPException(status_code=503, detail="Zoom Phone is not configured")
    return service


async def call_zoom(action: str, coro) -> Any:
    """Await a Zoom call, mapping transport and API errors to 502."""
    try:
        return await coro
    except httpx.HTTPStatusError as e:
        logger.error(f"Zoom {action} failed with {e.response.status_code}: {e.response.text}")
        raise HTTPException(status_code=502, detail=f"Zoom {action} failed: {e.response.status_code}")
    except httpx.HTTPError as e:
        logger.error(f"Zoom {action} failed: {e}")
        raise HTTPException(status_code=502, detail=f"Zoom {action} failed")


@router.post("/calls", response_model=CallControlResponse)
async def dial(data: DialRequest, operator: CurrentOperator) -> CallControlResponse:
    service = get_configured_service()
    if not data.phone_number.strip():
        raise HTTPException(status_code=400, detail="Phone number is required")

    result = await call_zoom(
        "dial",
        service.initiate_call(operator.email, data.phone_number, data.caller_number),
    )
    logger.info(f"Operator {operator.id} dialed company {data.company_id}")
    return CallControlResponse(call_id=result.get("call_id") or result.get("id"), status="dialing", detail=result)


@router.post("/calls/{call_id}/hold", response_model=CallControlResponse)
async def hold(call_id: str, operator: CurrentOperator) -> CallControlResponse:
    service = get_configured_service()
    result = await call_zoom("hold", service.hold_call(operator.email, call_id))
    return CallControlResponse(call_id=call_id, status="held", detail=result or None)


@router.post("/calls/{call_id}/resume", response_model=CallControlResponse)
async def resume(call_id: str, operator: CurrentOperator) -> CallControlResponse:
    service = get_configured_service()
    result = await call_zoom("resume", service.resume_call(operator.email, call_id))
    return CallControlResponse(call_id=call_id, status="active", detail=result or None)


@router.delete("/calls/{call_id}", response_model=CallControlResponse)
async def hang_up(call_id: str, operator: CurrentOperator) -> CallControlResponse:
    service = get_configured_service()
    await call_zoom("disconnect", service.disconnect_call(operator.email, call_id))
    return CallControlResponse(call_id=call_id, status="disconnected")


@router.get("/call-logs")
async def call_logs(
    operator: CurrentOperator,
    date_from: date | None = None,
    date_to: date | None = None,
    log_type: str | None = None,
    page_size: int = 30,
) -> dict:
    """The operator's recent Zoom call history."""
    service = get_configured_service()
    logs = await call_zoom(
        "call log fetch",
        service.get_call_logs(
            operator.email,
            date_from.isoformat() if date_from else None,
            date_to.isoformat() if date_to else None,
            log_type,
            page_size,
        ),
    )
    return {"call_logs": logs, "total": len(logs)}
