"""Call quality API endpoints."""

from datetime import datetime
from typing import Annotated, Sequence

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from toguna.core.quality_scoring import build_dashboard, score_call
from toguna.services.database import get_db
from toguna.models.call import CallLog
from toguna.models.operator import Operator
from toguna.models.quality import CallQualityScore
from toguna.schemas.quality import QualityDashboard, QualityScoreResponse

router = APIRouter()


async def operator_names(db: AsyncSession, operator_ids: set[int]) -> dict[int, str]:
    if not operator_ids:
        return {}
    result = await db.execute(select(Operator.id, Operator.name).where(Operator.id.in_(operator_ids)))
    return dict(result.all())


def score_response(score: CallQualityScore, names: dict[int, str]) -> QualityScoreResponse:
    response = QualityScoreResponse.model_validate(score)
    response.operator_name = names.get(score.operator_id)
    return response


@router.get("/dashboard", response_model=QualityDashboard)
async def get_dashboard(
    db: Annotated[AsyncSession, Depends(get_db)],
    project_id: int | None = None,
) -> QualityDashboard:
    """Week-over-week quality, KPI averages, leaders and coaching list."""
    query = select(CallQualityScore)
    if project_id is not None:
        query = query.where(CallQualityScore.project_id == project_id)
    result = await db.execute(query)
    scores: Sequence[CallQualityScore] = result.scalars().all()

    names = await operator_names(db, {s.operator_id for s in scores})
    data = build_dashboard(list(scores), datetime.utcnow(), names)
    data["top_calls"] = [score_response(s, names) for s in data["top_calls"]]
    data["needs_coaching"] = [score_response(s, names) for s in data["needs_coaching"]]
    return QualityDashboard(**data)


@router.get("/scores", response_model=list[QualityScoreResponse])
async def list_scores(
    db: Annotated[AsyncSession, Depends(get_db)],
    project_id: int | None = None,
    operator_id: int | None = None,
    max_score: int | None = None,
    limit: int = 100,
) -> list[QualityScoreResponse]:
    query = select(CallQualityScore).order_by(CallQualityScore.scored_at.desc())
    if project_id is not None:
        query = query.where(CallQualityScore.project_id == project_id)
    if operator_id is not None:
        query = query.where(CallQualityScore.operator_id == operator_id)
    if max_score is not None:
        query = query.where(CallQualityScore.total_score <= max_score)
    result = await db.execute(query.limit(limit))
    scores = result.scalars().all()

    names = await operator_names(db, {s.operator_id for s in scores})
    return [score_response(s, names) for s in scores]


@router.post("/calls/{call_id}/score", response_model=QualityScoreResponse)
async def rescore_call(
    call_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> QualityScoreResponse:
    """Score (or re-score) one call."""
    call = await db.get(CallLog, call_id)
    if not call:
        raise HTTPException(status_code=404, detail="Call not found")
    score = await score_call(db, call)
    names = await operator_names(db, {score.operator_id})
    return score_response(score, names)
