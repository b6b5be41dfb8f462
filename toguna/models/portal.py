"""Client portal access model."""

import secrets
from datetime import datetime

from sqlalchemy import String, DateTime, Boolean, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from toguna.services.database import Base


def generate_portal_token() -> str:
    return secrets.token_urlsafe(32)


class PortalToken(Base):
    """A shareable link giving a client read-only access to its results."""

    __tablename__ = "portal_tokens"

    id: Mapped[int] = mapped_column(primary_key=True)
    client_id: Mapped[int] = mapped_column(ForeignKey("clients.id"), index=True)
    project_id: Mapped[int | None] = mapped_column(ForeignKey("projects.id"), nullable=True)
    token: Mapped[str] = mapped_column(String(64), unique=True, index=True, default=generate_portal_token)

    # What the client may see
    can_view_calls: Mapped[bool] = mapped_column(Boolean, default=True)
    can_view_appointments: Mapped[bool] = mapped_column(Boolean, default=True)
    can_view_golden_calls: Mapped[bool] = mapped_column(Boolean, default=True)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    expires_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    last_accessed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    created_by: Mapped[int | None] = mapped_column(ForeignKey("operators.id"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    def is_usable(self, now: datetime) -> bool:
        return self.is_active and (self.expires_at is None or self.expires_at >= now)
