"""Roleplay training schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from toguna.models.training import RoleplayScenario


class RoleplayStart(BaseModel):
    scenario: RoleplayScenario
    project_id: int | None = None
    difficulty: str = Field(default="normal", pattern="^(easy|normal|hard)$")


class RoleplayMessage(BaseModel):
    content: str = Field(min_length=1)


class RoleplayTurn(BaseModel):
    role: str  # operator, prospect
    content: str
    timestamp: str


class RoleplayFeedback(BaseModel):
    performance_score: int
    positive_points: list[str]
    improvement_areas: list[str]


class RoleplaySessionResponse(BaseModel):
    id: int
    operator_id: int
    project_id: int | None = None
    scenario: RoleplayScenario
    difficulty: str
    conversation_log: list[RoleplayTurn] | None = None
    ai_feedback: RoleplayFeedback | None = None
    score: int | None = None
    started_at: datetime
    completed_at: datetime | None = None

    class Config:
        from_attributes = True


class RoleplayReply(BaseModel):
    session_id: int
    reply: RoleplayTurn
