"""Roleplay training session model."""

from datetime import datetime
from enum import Enum

from sqlalchemy import String, DateTime, Integer, JSON, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from toguna.services.database import Base


class RoleplayScenario(str, Enum):
    COLD_CALL = "cold_call"
    FOLLOW_UP = "follow_up"
    OBJECTION_HANDLING = "objection_handling"
    CLOSING = "closing"


class RoleplaySession(Base):
    """Practice conversation between an operator and an AI prospect."""

    __tablename__ = "roleplay_sessions"

    id: Mapped[int] = mapped_column(primary_key=True)
    operator_id: Mapped[int] = mapped_column(ForeignKey("operators.id"), index=True)
    project_id: Mapped[int | None] = mapped_column(ForeignKey("projects.id"), nullable=True, index=True)
    scenario: Mapped[RoleplayScenario] = mapped_column(
        SQLEnum(RoleplayScenario, values_callable=lambda x: [e.value for e in x]),
    )
    difficulty: Mapped[str] = mapped_column(String(20), default="normal")  # easy, normal, hard
    # [{"role": "operator"|"prospect", "content": str, "timestamp": iso}]
    conversation_log: Mapped[list | None] = mapped_column(JSON, nullable=True)
    # {"performance_score": int, "positive_points": [...], "improvement_areas": [...]}
    ai_feedback: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    started_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None
