"""Call log schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from toguna.models.call import CallResult


class CallLogCreate(BaseModel):
    """Schema for logging a finished call."""

    company_id: int
    project_id: int | None = None
    result: CallResult
    duration: int = Field(default=0, ge=0)
    notes: str | None = None
    sentiment_score: float | None = None
    called_at: datetime | None = None


class CallLogResponse(BaseModel):
    """Schema for call log response."""

    id: int
    company_id: int
    operator_id: int
    project_id: int | None = None
    result: CallResult
    duration: int
    notes: str | None = None
    sentiment_score: float | None = None
    called_at: datetime

    class Config:
        from_attributes = True


class CallLogListResponse(BaseModel):
    calls: list[CallLogResponse]
    total: int


class CallRecordingCreate(BaseModel):
    """Attach an analysed recording to a call."""

    recording_url: str | None = None
    transcription: str | None = None
    sentiment_analysis: dict | None = None


class CallRecordingResponse(CallRecordingCreate):
    id: int
    call_log_id: int
    created_at: datetime

    class Config:
        from_attributes = True
