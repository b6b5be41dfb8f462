"""Call logging API endpoints."""

import logging
from datetime import date, datetime, time, timedelta
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from toguna.api.auth import CurrentOperator
from toguna.core.engagement import add_engagement
from toguna.core.quality_scoring import score_call
from toguna.services.database import get_db
from toguna.services.realtime import notify, publish_notification
from toguna.models.call import CallLog, CallRecording, CallResult
from toguna.models.company import Company, CompanyStatus
from toguna.models.notification import NotificationType, SalesFloorStatus
from toguna.models.operator import Operator
from toguna.schemas.call import (
    CallLogCreate,
    CallLogResponse,
    CallLogListResponse,
    CallRecordingCreate,
    CallRecordingResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter()

COMPANY_STATUS_BY_RESULT = {
    CallResult.APPOINTMENT: CompanyStatus.APPOINTMENT,
    CallResult.NG: CompanyStatus.NG,
}


async def get_call_or_404(db: AsyncSession, call_id: int, operator: Operator) -> CallLog:
    """Load a call. Operators only see their own; directors see all."""
    call = await db.get(CallLog, call_id)
    if not call or (not operator.is_director and call.operator_id != operator.id):
        raise HTTPException(status_code=404, detail="Call not found")
    return call


@router.post("", response_model=CallLogResponse, status_code=201)
async def log_call(
    data: CallLogCreate,
    operator: CurrentOperator,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> CallLogResponse:
    """
    Record a finished call.

    Besides storing the call this moves the company along the funnel,
    adds engagement points and, for appointments, notifies the floor.
    Quality scoring runs last and never fails the request.
    """
    company = await db.get(Company, data.company_id)
    if not company:
        raise HTTPException(status_code=404, detail="Company not found")

    call = CallLog(
        company_id=company.id,
        operator_id=operator.id,
        project_id=data.project_id if data.project_id is not None else company.project_id,
        result=data.result,
        duration=data.duration,
        notes=data.notes,
        sentiment_score=data.sentiment_score,
        called_at=data.called_at or datetime.utcnow(),
    )
    db.add(call)
    company.status = COMPANY_STATUS_BY_RESULT.get(data.result, CompanyStatus.CALLING)
    await db.flush()

    if data.result != CallResult.ABSENT:
        await add_engagement(db, company.id, "call_connected")
    notification = None
    if data.result == CallResult.APPOINTMENT:
        await add_engagement(db, company.id, "call_appointment")
        notification = await notify(
            db,
            NotificationType.APPOINTMENT,
            title="アポイント獲得",
            message=f"{operator.name} さんが {company.name} のアポイントを獲得しました",
            data={"call_id": call.id, "company_id": company.id, "operator_id": operator.id},
        )

    result = await db.execute(
        select(SalesFloorStatus).where(SalesFloorStatus.operator_id == operator.id)
    )
    floor = result.scalar_one_or_none()
    if floor:
        floor.record_call(data.result == CallResult.APPOINTMENT)

    await db.commit()
    await db.refresh(call)
    if notification is not None:
        await publish_notification(notification)

    try:
        await score_call(db, call)
    except Exception as e:
        logger.error(f"Quality scoring for call {call.id} failed: {e}")
        await db.rollback()
        await db.refresh(call)

    return CallLogResponse.model_validate(call)


@router.get("", response_model=CallLogListResponse)
async def list_calls(
    operator: CurrentOperator,
    db: Annotated[AsyncSession, Depends(get_db)],
    project_id: int | None = None,
    operator_id: int | None = None,
    result: CallResult | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
    limit: int = 100,
    offset: int = 0,
) -> CallLogListResponse:
    """List calls, newest first. Operators are limited to their own calls.

    `total` counts every matching call, not just the returned page.
    """
    query = select(CallLog).order_by(CallLog.called_at.desc())

    if not operator.is_director:
        query = query.where(CallLog.operator_id == operator.id)
    elif operator_id is not None:
        query = query.where(CallLog.operator_id == operator_id)
    if project_id is not None:
        query = query.where(CallLog.project_id == project_id)
    if result:
        query = query.where(CallLog.result == result)
    if date_from:
        query = query.where(CallLog.called_at >= datetime.combine(date_from, time.min))
    if date_to:
        query = query.where(CallLog.called_at < datetime.combine(date_to + timedelta(days=1), time.min))

    total = await db.execute(select(func.count()).select_from(query.order_by(None).subquery()))
    rows = await db.execute(query.offset(offset).limit(limit))
    return CallLogListResponse(
        calls=[CallLogResponse.model_validate(c) for c in rows.scalars().all()],
        total=total.scalar() or 0,
    )


@router.get("/{call_id}", response_model=CallLogResponse)
async def get_call(
    call_id: int,
    operator: CurrentOperator,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> CallLogResponse:
    return CallLogResponse.model_validate(await get_call_or_404(db, call_id, operator))


@router.get("/{call_id}/recording", response_model=CallRecordingResponse)
async def get_recording(
    call_id: int,
    operator: CurrentOperator,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> CallRecordingResponse:
    await get_call_or_404(db, call_id, operator)
    result = await db.execute(select(CallRecording).where(CallRecording.call_log_id == call_id))
    recording = result.scalar_one_or_none()
    if not recording:
        raise HTTPException(status_code=404, detail="Recording not found")
    return CallRecordingResponse.model_validate(recording)


@router.put("/{call_id}/recording", response_model=CallRecordingResponse)
async def attach_recording(
    call_id: int,
    data: CallRecordingCreate,
    operator: CurrentOperator,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> CallRecordingResponse:
    """Attach an analysed recording, replacing any earlier one."""
    call = await get_call_or_404(db, call_id, operator)
    result = await db.execute(select(CallRecording).where(CallRecording.call_log_id == call_id))
    recording = result.scalar_one_or_none()
    if recording is None:
        recording = CallRecording(call_log_id=call_id)
        db.add(recording)

    recording.recording_url = data.recording_url
    recording.transcription = data.transcription
    recording.sentiment_analysis = data.sentiment_analysis

    score = (data.sentiment_analysis or {}).get("score")
    if score is not None:
        call.sentiment_score = float(score)

    await db.commit()
    await db.refresh(recording)
    return CallRecordingResponse.model_validate(recording)
