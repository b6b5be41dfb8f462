"""Operator model."""

from datetime import datetime
from enum import Enum

from sqlalchemy import String, DateTime, Text, Integer, JSON, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from toguna.services.database import Base


class OperatorRole(str, Enum):
    """Access role of an operator account."""

    DIRECTOR = "director"
    OPERATOR = "operator"


class OperatorStatus(str, Enum):
    """Employment state of an operator."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    ON_LEAVE = "on_leave"


class Operator(Base):
    """A call-center staff member. Directors manage, operators dial."""

    __tablename__ = "operators"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255))
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    role: Mapped[OperatorRole] = mapped_column(
        SQLEnum(OperatorRole, values_callable=lambda x: [e.value for e in x]),
        default=OperatorRole.OPERATOR,
    )
    status: Mapped[OperatorStatus] = mapped_column(
        SQLEnum(OperatorStatus, values_callable=lambda x: [e.value for e in x]),
        default=OperatorStatus.ACTIVE,
        index=True,
    )
    hourly_rate: Mapped[int | None] = mapped_column(Integer, nullable=True)
    skills: Mapped[list | None] = mapped_column(JSON, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Google OAuth tokens (calendar sync)
    google_access_token: Mapped[str | None] = mapped_column(Text, nullable=True)
    google_refresh_token: Mapped[str | None] = mapped_column(Text, nullable=True)
    google_token_expires_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    @property
    def is_director(self) -> bool:
        return self.role == OperatorRole.DIRECTOR

    @property
    def is_active(self) -> bool:
        return self.status == OperatorStatus.ACTIVE
