"""Call log and recording models."""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import String, DateTime, Text, Integer, Float, JSON, ForeignKey, Enum as SQLEnum, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from toguna.services.database import Base

if TYPE_CHECKING:
    from toguna.models.company import Company
    from toguna.models.operator import Operator


class CallResult(str, Enum):
    """Outcome recorded by the operator after a call."""

    APPOINTMENT = "appointment"
    DOCUMENT_SENT = "document_sent"
    CALLBACK = "callback"
    ABSENT = "absent"
    REJECTED = "rejected"
    NG = "ng"


class CallLog(Base):
    """One outbound call."""

    __tablename__ = "call_logs"

    id: Mapped[int] = mapped_column(primary_key=True)
    company_id: Mapped[int] = mapped_column(ForeignKey("companies.id"), index=True)
    company: Mapped["Company"] = relationship()
    operator_id: Mapped[int] = mapped_column(ForeignKey("operators.id"), index=True)
    operator: Mapped["Operator"] = relationship()
    project_id: Mapped[int | None] = mapped_column(
        ForeignKey("projects.id"), nullable=True, index=True
    )

    result: Mapped[CallResult] = mapped_column(
        SQLEnum(CallResult, values_callable=lambda x: [e.value for e in x]),
        index=True,
    )
    duration: Mapped[int] = mapped_column(Integer, default=0)  # seconds
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    sentiment_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    called_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    recording: Mapped["CallRecording"] = relationship(back_populates="call_log", uselist=False)

    __table_args__ = (
        Index("ix_call_logs_project_called", "project_id", "called_at"),
        Index("ix_call_logs_operator_called", "operator_id", "called_at"),
    )


class CallRecording(Base):
    """Recording of a call with its precomputed sentiment analysis."""

    __tablename__ = "call_recordings"

    id: Mapped[int] = mapped_column(primary_key=True)
    call_log_id: Mapped[int] = mapped_column(ForeignKey("call_logs.id"), unique=True, index=True)
    call_log: Mapped["CallLog"] = relationship(back_populates="recording")

    recording_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    transcription: Mapped[str | None] = mapped_column(Text, nullable=True)
    # {"overall": "positive|neutral|negative", "score": float, "segments": [...]}
    sentiment_analysis: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
