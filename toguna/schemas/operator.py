"""Operator and authentication schemas."""

from datetime import datetime

from pydantic import BaseModel, EmailStr

from toguna.models.operator import OperatorRole, OperatorStatus


class OperatorBase(BaseModel):
    """Base operator schema."""

    name: str
    email: EmailStr
    phone: str | None = None
    hourly_rate: int | None = None
    skills: list[str] | None = None
    notes: str | None = None


class OperatorCreate(OperatorBase):
    """Schema for creating an operator."""

    role: OperatorRole = OperatorRole.OPERATOR
    status: OperatorStatus = OperatorStatus.ACTIVE


class OperatorUpdate(BaseModel):
    """Schema for updating an operator."""

    name: str | None = None
    phone: str | None = None
    role: OperatorRole | None = None
    status: OperatorStatus | None = None
    hourly_rate: int | None = None
    skills: list[str] | None = None
    notes: str | None = None


class OperatorResponse(OperatorBase):
    """Schema for operator response."""

    id: int
    role: OperatorRole
    status: OperatorStatus
    created_at: datetime
    last_login_at: datetime | None = None

    class Config:
        from_attributes = True


class OperatorStats(BaseModel):
    """Call performance of one operator."""

    operator_id: int
    total_calls: int
    total_appointments: int
    appointment_rate: float
    today_calls: int
    average_duration: float


class TokenResponse(BaseModel):
    """Schema for JWT token response."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int
