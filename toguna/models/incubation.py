"""Rejection insight and cross-sell models."""

from datetime import datetime
from enum import Enum

from sqlalchemy import String, DateTime, Text, Integer, Float, JSON, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from toguna.services.database import Base


class RejectionCategory(str, Enum):
    """Why a prospect said no."""

    PRICE = "price"
    TIMING = "timing"
    NO_NEED = "no_need"
    COMPETITOR = "competitor"
    AUTHORITY = "authority"
    BUDGET = "budget"
    SATISFACTION = "satisfaction"
    OTHER = "other"


class CrossSellStatus(str, Enum):
    SUGGESTED = "suggested"
    ACCEPTED = "accepted"
    CONTACTED = "contacted"
    CONVERTED = "converted"
    DISMISSED = "dismissed"


class RejectionInsight(Base):
    """Structured reason captured from a rejected call."""

    __tablename__ = "rejection_insights"

    id: Mapped[int] = mapped_column(primary_key=True)
    call_log_id: Mapped[int | None] = mapped_column(
        ForeignKey("call_logs.id"), nullable=True, index=True
    )
    company_id: Mapped[int | None] = mapped_column(ForeignKey("companies.id"), nullable=True)
    project_id: Mapped[int | None] = mapped_column(
        ForeignKey("projects.id"), nullable=True, index=True
    )

    # Free text so imported rows with unknown labels survive; analysis buckets them
    category: Mapped[str] = mapped_column(String(50), default=RejectionCategory.OTHER.value, index=True)
    detail: Mapped[str | None] = mapped_column(Text, nullable=True)
    pain_point: Mapped[str | None] = mapped_column(String(500), nullable=True)
    unmet_need: Mapped[str | None] = mapped_column(String(500), nullable=True)
    sentiment_score: Mapped[float | None] = mapped_column(Float, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)


class CrossSellRecommendation(Base):
    """Suggestion to pitch another project's product to a company that rejected ours."""

    __tablename__ = "cross_sell_recommendations"

    id: Mapped[int] = mapped_column(primary_key=True)
    company_id: Mapped[int] = mapped_column(ForeignKey("companies.id"), index=True)
    source_project_id: Mapped[int | None] = mapped_column(ForeignKey("projects.id"), nullable=True)
    target_project_id: Mapped[int] = mapped_column(ForeignKey("projects.id"), index=True)
    call_log_id: Mapped[int | None] = mapped_column(ForeignKey("call_logs.id"), nullable=True)
    match_score: Mapped[int] = mapped_column(Integer)
    reasons: Mapped[list | None] = mapped_column(JSON, nullable=True)
    rejection_category: Mapped[str | None] = mapped_column(String(50), nullable=True)
    status: Mapped[CrossSellStatus] = mapped_column(
        SQLEnum(CrossSellStatus, values_callable=lambda x: [e.value for e in x]),
        default=CrossSellStatus.SUGGESTED,
    )

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
