"""Client schemas."""

from datetime import datetime

from pydantic import BaseModel, EmailStr

from toguna.models.client import ClientStatus


class ClientBase(BaseModel):
    """Base client schema."""

    name: str
    industry: str | None = None
    contact_name: str | None = None
    contact_email: EmailStr | None = None
    phone: str | None = None
    address: str | None = None
    notes: str | None = None


class ClientCreate(ClientBase):
    """Schema for creating a client."""

    status: ClientStatus = ClientStatus.ACTIVE


class ClientUpdate(BaseModel):
    """Schema for updating a client."""

    name: str | None = None
    industry: str | None = None
    contact_name: str | None = None
    contact_email: EmailStr | None = None
    phone: str | None = None
    address: str | None = None
    status: ClientStatus | None = None
    notes: str | None = None


class ClientResponse(ClientBase):
    """Schema for client response."""

    id: int
    status: ClientStatus
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
