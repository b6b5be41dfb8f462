"""Followup rule API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from toguna.core.followup_engine import FollowupEngine
from toguna.services.database import get_db
from toguna.services.email_service import get_email_service
from toguna.models.nurturing import FollowupExecution, FollowupRule
from toguna.schemas.nurturing import (
    FollowupRuleCreate,
    FollowupRuleUpdate,
    FollowupRuleResponse,
    FollowupExecutionResponse,
    RuleEvaluationResponse,
)

router = APIRouter()


async def get_rule_or_404(db: AsyncSession, rule_id: int) -> FollowupRule:
    rule = await db.get(FollowupRule, rule_id)
    if not rule:
        raise HTTPException(status_code=404, detail="Followup rule not found")
    return rule


@router.get("", response_model=list[FollowupRuleResponse])
async def list_rules(
    db: Annotated[AsyncSession, Depends(get_db)],
    project_id: int | None = None,
    active_only: bool = False,
) -> list[FollowupRuleResponse]:
    query = select(FollowupRule).order_by(FollowupRule.created_at.desc())
    if project_id is not None:
        query = query.where(FollowupRule.project_id == project_id)
    if active_only:
        query = query.where(FollowupRule.is_active == True)  # noqa: E712
    result = await db.execute(query)
    return [FollowupRuleResponse.model_validate(r) for r in result.scalars().all()]


@router.post("", response_model=FollowupRuleResponse, status_code=201)
async def create_rule(
    data: FollowupRuleCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> FollowupRuleResponse:
    rule = FollowupRule(**data.model_dump(), execution_count=0)
    db.add(rule)
    await db.commit()
    await db.refresh(rule)
    return FollowupRuleResponse.model_validate(rule)


@router.post("/evaluate", response_model=RuleEvaluationResponse)
async def evaluate_rules(
    db: Annotated[AsyncSession, Depends(get_db)],
    project_id: int | None = None,
) -> RuleEvaluationResponse:
    """Run every active rule now instead of waiting for the scheduler."""
    engine = FollowupEngine(db, get_email_service())
    return RuleEvaluationResponse(**await engine.evaluate_rules(project_id))


@router.get("/executions", response_model=list[FollowupExecutionResponse])
async def list_executions(
    db: Annotated[AsyncSession, Depends(get_db)],
    rule_id: int | None = None,
    limit: int = 50,
) -> list[FollowupExecutionResponse]:
    """Latest rule executions."""
    query = select(FollowupExecution).order_by(FollowupExecution.executed_at.desc())
    if rule_id is not None:
        query = query.where(FollowupExecution.rule_id == rule_id)
    result = await db.execute(query.limit(limit))
    return [FollowupExecutionResponse.model_validate(e) for e in result.scalars().all()]


@router.get("/{rule_id}", response_model=FollowupRuleResponse)
async def get_rule(
    rule_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> FollowupRuleResponse:
    return FollowupRuleResponse.model_validate(await get_rule_or_404(db, rule_id))


@router.patch("/{rule_id}", response_model=FollowupRuleResponse)
async def update_rule(
    rule_id: int,
    data: FollowupRuleUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> FollowupRuleResponse:
    rule = await get_rule_or_404(db, rule_id)
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(rule, field, value)
    await db.commit()
    await db.refresh(rule)
    return FollowupRuleResponse.model_validate(rule)


@router.post("/{rule_id}/toggle", response_model=FollowupRuleResponse)
async def toggle_rule(
    rule_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> FollowupRuleResponse:
    rule = await get_rule_or_404(db, rule_id)
    rule.is_active = not rule.is_active
    await db.commit()
    await db.refresh(rule)
    return FollowupRuleResponse.model_validate(rule)


@router.delete("/{rule_id}")
async def delete_rule(
    rule_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    rule = await get_rule_or_404(db, rule_id)
    result = await db.execute(select(FollowupExecution).where(FollowupExecution.rule_id == rule_id))
    for execution in result.scalars().all():
        await db.delete(execution)
    await db.delete(rule)
    await db.commit()
    return {"success": True}
