"""Operator fraud score model."""

from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, Text, Integer, JSON, ForeignKey, Enum as SQLEnum, Index
from sqlalchemy.orm import Mapped, mapped_column

from toguna.services.database import Base


class FraudType(str, Enum):
    GHOST_CALL = "ghost_call"  # Calls logged without a real conversation
    FAKE_APPOINTMENT = "fake_appointment"  # Appointments that never happen
    DATA_MANIPULATION = "data_manipulation"
    TIME_FRAUD = "time_fraud"  # Call volume impossible for the time worked


class FraudStatus(str, Enum):
    """Review state of a fraud flag."""

    PENDING = "pending"
    INVESTIGATING = "investigating"
    CONFIRMED = "confirmed"
    DISMISSED = "dismissed"


OPEN_FRAUD_STATUSES = (FraudStatus.PENDING, FraudStatus.INVESTIGATING)


class OperatorFraudScore(Base):
    """Risk flag raised against an operator."""

    __tablename__ = "operator_fraud_scores"

    id: Mapped[int] = mapped_column(primary_key=True)
    operator_id: Mapped[int] = mapped_column(ForeignKey("operators.id"), index=True)
    fraud_type: Mapped[FraudType] = mapped_column(
        SQLEnum(FraudType, values_callable=lambda x: [e.value for e in x]),
    )
    risk_score: Mapped[int] = mapped_column(Integer, index=True)
    evidence: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    status: Mapped[FraudStatus] = mapped_column(
        SQLEnum(FraudStatus, values_callable=lambda x: [e.value for e in x]),
        default=FraudStatus.PENDING,
        index=True,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    reviewed_by: Mapped[int | None] = mapped_column(ForeignKey("operators.id"), nullable=True)
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    detected_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        Index("ix_operator_fraud_scores_operator_type", "operator_id", "fraud_type"),
    )

    @property
    def risk_level(self) -> str:
        if self.risk_score > 80:
            return "high"
        if self.risk_score > 50:
            return "medium"
        return "low"
