"""Roleplay training API endpoints."""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from toguna.api.auth import CurrentOperator
from toguna.core.claude_agent import SCENARIO_OPENERS, get_claude_agent
from toguna.services.database import get_db
from toguna.models.operator import Operator
from toguna.models.project import Project
from toguna.models.training import RoleplaySession, RoleplayScenario
from toguna.schemas.roleplay import (
    RoleplayStart,
    RoleplayMessage,
    RoleplayTurn,
    RoleplayReply,
    RoleplaySessionResponse,
)

router = APIRouter()


def make_turn(role: str, content: str) -> dict:
    return {"role": role, "content": content, "timestamp": datetime.utcnow().isoformat()}


async def get_session_or_404(db: AsyncSession, session_id: int, operator: Operator) -> RoleplaySession:
    session = await db.get(RoleplaySession, session_id)
    if not session or (not operator.is_director and session.operator_id != operator.id):
        raise HTTPException(status_code=404, detail="Roleplay session not found")
    return session


@router.post("", response_model=RoleplaySessionResponse, status_code=201)
async def start_session(
    data: RoleplayStart,
    operator: CurrentOperator,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> RoleplaySessionResponse:
    """Start a session. The prospect speaks first."""
    if data.project_id is not None and not await db.get(Project, data.project_id):
        raise HTTPException(status_code=404, detail="Project not found")

    session = RoleplaySession(
        operator_id=operator.id,
        project_id=data.project_id,
        scenario=data.scenario,
        difficulty=data.difficulty,
        conversation_log=[make_turn("prospect", SCENARIO_OPENERS[data.scenario.value])],
        started_at=datetime.utcnow(),
    )
    db.add(session)
    await db.commit()
    await db.refresh(session)
    return RoleplaySessionResponse.model_validate(session)


@router.post("/{session_id}/messages", response_model=RoleplayReply)
async def send_message(
    session_id: int,
    data: RoleplayMessage,
    operator: CurrentOperator,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> RoleplayReply:
    """Add the operator's line and get the prospect's answer."""
    session = await get_session_or_404(db, session_id, operator)
    if session.is_completed:
        raise HTTPException(status_code=400, detail="Roleplay session already ended")

    conversation = list(session.conversation_log or [])
    conversation.append(make_turn("operator", data.content))

    product_name = None
    if session.project_id is not None:
        project = await db.get(Project, session.project_id)
        product_name = project.product_name if project else None

    agent = await get_claude_agent()
    reply_text = await agent.prospect_reply(
        session.scenario.value, session.difficulty, conversation, product_name
    )
    reply = make_turn("prospect", reply_text)
    conversation.append(reply)

    # Reassign so the JSON column is flagged dirty
    session.conversation_log = conversation
    await db.commit()

    return RoleplayReply(session_id=session.id, reply=RoleplayTurn(**reply))


@router.post("/{session_id}/end", response_model=RoleplaySessionResponse)
async def end_session(
    session_id: int,
    operator: CurrentOperator,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> RoleplaySessionResponse:
    """Finish the session and store the coach's feedback."""
    session = await get_session_or_404(db, session_id, operator)
    if session.is_completed:
        raise HTTPException(status_code=400, detail="Roleplay session already ended")

    agent = await get_claude_agent()
    feedback = await agent.roleplay_feedback(
        session.scenario.value, session.difficulty, session.conversation_log or []
    )
    session.ai_feedback = feedback
    session.score = feedback["performance_score"]
    session.completed_at = datetime.utcnow()

    await db.commit()
    await db.refresh(session)
    return RoleplaySessionResponse.model_validate(session)


@router.get("", response_model=list[RoleplaySessionResponse])
async def list_sessions(
    operator: CurrentOperator,
    db: Annotated[AsyncSession, Depends(get_db)],
    operator_id: int | None = None,
    scenario: RoleplayScenario | None = None,
    limit: int = 50,
) -> list[RoleplaySessionResponse]:
    """List sessions, newest first. Operators only see their own."""
    query = select(RoleplaySession).order_by(RoleplaySession.started_at.desc())
    if not operator.is_director:
        query = query.where(RoleplaySession.operator_id == operator.id)
    elif operator_id is not None:
        query = query.where(RoleplaySession.operator_id == operator_id)
    if scenario:
        query = query.where(RoleplaySession.scenario == scenario)

    result = await db.execute(query.limit(limit))
    return [RoleplaySessionResponse.model_validate(s) for s in result.scalars().all()]


@router.get("/{session_id}", response_model=RoleplaySessionResponse)
async def get_session(
    session_id: int,
    operator: CurrentOperator,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> RoleplaySessionResponse:
    return RoleplaySessionResponse.model_validate(await get_session_or_404(db, session_id, operator))
