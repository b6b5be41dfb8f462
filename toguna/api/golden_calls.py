"""Golden call library API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from toguna.api.auth import Director
from toguna.services.database import get_db
from toguna.models.call import CallLog, CallRecording
from toguna.models.company import Company
from toguna.models.quality import CallQualityScore, GoldenCall
from toguna.schemas.quality import (
    GoldenCallCreate,
    GoldenCallUpdate,
    GoldenCallPromote,
    GoldenCallResponse,
)

router = APIRouter()


async def get_golden_call_or_404(db: AsyncSession, golden_call_id: int) -> GoldenCall:
    golden_call = await db.get(GoldenCall, golden_call_id)
    if not golden_call:
        raise HTTPException(status_code=404, detail="Golden call not found")
    return golden_call


@router.get("", response_model=list[GoldenCallResponse])
async def list_golden_calls(
    db: Annotated[AsyncSession, Depends(get_db)],
    project_id: int | None = None,
    tag: str | None = None,
) -> list[GoldenCallResponse]:
    """List golden calls, best first."""
    query = select(GoldenCall).order_by(GoldenCall.total_score.desc().nulls_last(), GoldenCall.created_at.desc())
    if project_id is not None:
        query = query.where(GoldenCall.project_id == project_id)
    result = await db.execute(query)
    golden_calls = result.scalars().all()
    if tag:
        golden_calls = [g for g in golden_calls if tag in (g.tags or [])]
    return [GoldenCallResponse.model_validate(g) for g in golden_calls]


@router.post("", response_model=GoldenCallResponse, status_code=201)
async def create_golden_call(
    data: GoldenCallCreate,
    director: Director,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> GoldenCallResponse:
    golden_call = GoldenCall(**data.model_dump(), curated_by=director.id)
    if data.call_log_id is not None:
        result = await db.execute(
            select(CallQualityScore.total_score).where(CallQualityScore.call_log_id == data.call_log_id)
        )
        golden_call.total_score = result.scalar_one_or_none()
    db.add(golden_call)
    await db.commit()
    await db.refresh(golden_call)
    return GoldenCallResponse.model_validate(golden_call)


@router.post("/promote/{call_id}", response_model=GoldenCallResponse, status_code=201)
async def promote_call(
    call_id: int,
    data: GoldenCallPromote,
    director: Director,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> GoldenCallResponse:
    """Turn a scored call into a golden call. The title defaults to the company name."""
    call = await db.get(CallLog, call_id)
    if not call:
        raise HTTPException(status_code=404, detail="Call not found")

    result = await db.execute(select(CallQualityScore).where(CallQualityScore.call_log_id == call_id))
    score = result.scalar_one_or_none()
    if not score:
        raise HTTPException(status_code=400, detail="Call has not been scored yet")

    existing = await db.execute(select(GoldenCall.id).where(GoldenCall.call_log_id == call_id))
    if existing.scalar_one_or_none() is not None:
        raise HTTPException(status_code=400, detail="Call is already a golden call")

    company = await db.get(Company, call.company_id)
    result = await db.execute(select(CallRecording.recording_url).where(CallRecording.call_log_id == call_id))
    recording_url = result.scalar_one_or_none()

    golden_call = GoldenCall(
        call_log_id=call.id,
        operator_id=call.operator_id,
        project_id=call.project_id,
        title=data.title or f"{company.name if company else '不明な企業'} の成功事例",
        description=data.description,
        tags=data.tags,
        recording_url=recording_url,
        total_score=score.total_score,
        curated_by=director.id,
    )
    db.add(golden_call)
    await db.commit()
    await db.refresh(golden_call)
    return GoldenCallResponse.model_validate(golden_call)


@router.get("/{golden_call_id}", response_model=GoldenCallResponse)
async def get_golden_call(
    golden_call_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> GoldenCallResponse:
    return GoldenCallResponse.model_validate(await get_golden_call_or_404(db, golden_call_id))


@router.patch("/{golden_call_id}", response_model=GoldenCallResponse)
async def update_golden_call(
    golden_call_id: int,
    data: GoldenCallUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> GoldenCallResponse:
    golden_call = await get_golden_call_or_404(db, golden_call_id)
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(golden_call, field, value)
    await db.commit()
    await db.refresh(golden_call)
    return GoldenCallResponse.model_validate(golden_call)


@router.delete("/{golden_call_id}")
async def delete_golden_call(
    golden_call_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    golden_call = await get_golden_call_or_404(db, golden_call_id)
    await db.delete(golden_call)
    await db.commit()
    return {"success": True}
