"""Rejection insight and cross-sell API endpoints."""

from datetime import datetime
from typing import Annotated, Literal

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import PlainTextResponse
from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from toguna.core import rejection_analysis
from toguna.core.cross_sell import CrossSellEngine
from toguna.services.database import get_db
from toguna.models.call import CallLog
from toguna.models.company import Company
from toguna.models.incubation import CrossSellRecommendation, RejectionInsight
from toguna.models.project import Project
from toguna.schemas.incubation import (
    RejectionInsightCreate,
    RejectionInsightUpdate,
    RejectionInsightResponse,
    IncubationSummary,
    DeepAnalysis,
    CrossSellResponse,
    CrossSellStatusUpdate,
)

router = APIRouter()

TimeRange = Literal["all", "month", "quarter", "year"]


async def get_insight_or_404(db: AsyncSession, insight_id: int) -> RejectionInsight:
    insight = await db.get(RejectionInsight, insight_id)
    if not insight:
        raise HTTPException(status_code=404, detail="Rejection insight not found")
    return insight


async def load_insights(db: AsyncSession, project_id: int | None = None) -> list[RejectionInsight]:
    query = select(RejectionInsight).order_by(RejectionInsight.created_at.desc())
    if project_id is not None:
        query = query.where(RejectionInsight.project_id == project_id)
    result = await db.execute(query)
    return list(result.scalars().all())


async def build_deep_analysis(db: AsyncSession, time_range: str, project_id: int | None) -> dict:
    insights = await load_insights(db, project_id)
    result = await db.execute(select(Project.id, Project.name))
    project_names = dict(result.all())
    return rejection_analysis.deep_analysis(insights, time_range, datetime.utcnow(), project_names)


# =============================================================================
# INSIGHTS
# =============================================================================

@router.get("/insights", response_model=list[RejectionInsightResponse])
async def list_insights(
    db: Annotated[AsyncSession, Depends(get_db)],
    project_id: int | None = None,
    category: str | None = None,
) -> list[RejectionInsightResponse]:
    insights = await load_insights(db, project_id)
    if category:
        insights = [i for i in insights if rejection_analysis.normalize_category(i.category) == category]
    return [RejectionInsightResponse.model_validate(i) for i in insights]


@router.post("/insights", response_model=RejectionInsightResponse, status_code=201)
async def create_insight(
    data: RejectionInsightCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> RejectionInsightResponse:
    """Capture a rejection reason. Company and project default from the call."""
    values = data.model_dump()
    values["category"] = data.category.value
    if data.call_log_id is not None:
        call = await db.get(CallLog, data.call_log_id)
        if not call:
            raise HTTPException(status_code=404, detail="Call not found")
        values["company_id"] = values["company_id"] or call.company_id
        values["project_id"] = values["project_id"] or call.project_id

    insight = RejectionInsight(**values)
    db.add(insight)
    await db.commit()
    await db.refresh(insight)
    return RejectionInsightResponse.model_validate(insight)


@router.get("/summary", response_model=IncubationSummary)
async def get_summary(
    db: Annotated[AsyncSession, Depends(get_db)],
    project_id: int | None = None,
) -> IncubationSummary:
    """Category tally, top pain points and product opportunities."""
    insights = await load_insights(db, project_id)
    return IncubationSummary(**rejection_analysis.summarize(insights))


@router.get("/analysis", response_model=DeepAnalysis)
async def get_deep_analysis(
    db: Annotated[AsyncSession, Depends(get_db)],
    time_range: TimeRange = "all",
    project_id: int | None = None,
) -> DeepAnalysis:
    return DeepAnalysis(**await build_deep_analysis(db, time_range, project_id))


@router.get("/report", response_class=PlainTextResponse)
async def get_report(
    db: Annotated[AsyncSession, Depends(get_db)],
    time_range: TimeRange = "all",
    project_id: int | None = None,
) -> str:
    """Plain-text rejection analysis report."""
    return rejection_analysis.render_report(await build_deep_analysis(db, time_range, project_id))


@router.get("/insights/{insight_id}", response_model=RejectionInsightResponse)
async def get_insight(
    insight_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> RejectionInsightResponse:
    return RejectionInsightResponse.model_validate(await get_insight_or_404(db, insight_id))


@router.patch("/insights/{insight_id}", response_model=RejectionInsightResponse)
async def update_insight(
    insight_id: int,
    data: RejectionInsightUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> RejectionInsightResponse:
    insight = await get_insight_or_404(db, insight_id)
    changes = data.model_dump(exclude_unset=True)
    if changes.get("category") is not None:
        changes["category"] = changes["category"].value
    for field, value in changes.items():
        setattr(insight, field, value)
    await db.commit()
    await db.refresh(insight)
    return RejectionInsightResponse.model_validate(insight)


@router.delete("/insights/{insight_id}")
async def delete_insight(
    insight_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    insight = await get_insight_or_404(db, insight_id)
    await db.delete(insight)
    await db.commit()
    return {"success": True}


# =============================================================================
# CROSS-SELL
# =============================================================================

async def cross_sell_responses(db: AsyncSession, recommendations) -> list[CrossSellResponse]:
    company_ids = {r.company_id for r in recommendations}
    names: dict[int, str] = {}
    if company_ids:
        result = await db.execute(select(Company.id, Company.name).where(Company.id.in_(company_ids)))
        names = dict(result.all())

    responses = []
    for recommendation in recommendations:
        response = CrossSellResponse.model_validate(recommendation)
        response.company_name = names.get(recommendation.company_id)
        responses.append(response)
    return responses


@router.post("/cross-sell/generate", response_model=list[CrossSellResponse])
async def generate_cross_sell(
    source_project_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[CrossSellResponse]:
    """Match the source project's rejected companies against other active projects."""
    if not await db.get(Project, source_project_id):
        raise HTTPException(status_code=404, detail="Project not found")
    recommendations = await CrossSellEngine(db).generate(source_project_id)
    return await cross_sell_responses(db, recommendations)


@router.get("/cross-sell", response_model=list[CrossSellResponse])
async def list_cross_sell(
    db: Annotated[AsyncSession, Depends(get_db)],
    project_id: int | None = None,
) -> list[CrossSellResponse]:
    """Recommendations where the project is the source or the target, best first."""
    query = select(CrossSellRecommendation).order_by(CrossSellRecommendation.match_score.desc())
    if project_id is not None:
        query = query.where(or_(
            CrossSellRecommendation.source_project_id == project_id,
            CrossSellRecommendation.target_project_id == project_id,
        ))
    result = await db.execute(query)
    return await cross_sell_responses(db, result.scalars().all())


@router.patch("/cross-sell/{recommendation_id}", response_model=CrossSellResponse)
async def update_cross_sell_status(
    recommendation_id: int,
    data: CrossSellStatusUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> CrossSellResponse:
    recommendation = await db.get(CrossSellRecommendation, recommendation_id)
    if not recommendation:
        raise HTTPException(status_code=404, detail="Cross-sell recommendation not found")
    recommendation.status = data.status
    await db.commit()
    await db.refresh(recommendation)
    return (await cross_sell_responses(db, [recommendation]))[0]
