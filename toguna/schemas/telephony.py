"""Zoom Phone request schemas."""

from pydantic import BaseModel


class DialRequest(BaseModel):
    phone_number: str
    company_id: int | None = None
    caller_number: str | None = None


class CallControlResponse(BaseModel):
    call_id: str | None = None
    status: str
    detail: dict | None = None
