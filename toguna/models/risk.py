"""Company risk flag model."""

from datetime import datetime
from enum import Enum

from sqlalchemy import String, DateTime, Text, Boolean, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from toguna.services.database import Base


class RiskFlagType(str, Enum):
    LAWSUIT = "lawsuit"
    FINANCIAL_WARNING = "financial_warning"
    NEGATIVE_PRESS = "negative_press"
    EXECUTIVE_CHANGE = "executive_change"
    COMPLIANCE_ISSUE = "compliance_issue"
    OTHER = "other"


class RiskSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class CompanyRiskFlag(Base):
    """A warning sign about a prospect that should pause or shape outreach."""

    __tablename__ = "company_risk_flags"

    id: Mapped[int] = mapped_column(primary_key=True)
    company_id: Mapped[int] = mapped_column(ForeignKey("companies.id"), index=True)
    flag_type: Mapped[RiskFlagType] = mapped_column(
        SQLEnum(RiskFlagType, values_callable=lambda x: [e.value for e in x]),
        default=RiskFlagType.OTHER,
    )
    severity: Mapped[RiskSeverity] = mapped_column(
        SQLEnum(RiskSeverity, values_callable=lambda x: [e.value for e in x]),
        default=RiskSeverity.MEDIUM,
    )
    title: Mapped[str] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    source_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
    detected_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    resolved_by: Mapped[int | None] = mapped_column(ForeignKey("operators.id"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    def toggle(self, operator_id: int) -> None:
        """Resolve an open flag, or reopen a resolved one."""
        if self.is_active:
            self.is_active = False
            self.resolved_at = datetime.utcnow()
            self.resolved_by = operator_id
        else:
            self.is_active = True
            self.resolved_at = None
            self.resolved_by = None
