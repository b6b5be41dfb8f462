"""Company schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from toguna.models.company import CompanyRank, CompanyStatus


class CompanyBase(BaseModel):
    """Base company schema."""

    name: str
    project_id: int | None = None
    industry: str | None = None
    employees: int | None = Field(default=None, ge=0)
    location: str | None = None
    phone: str | None = None
    email: str | None = None
    website: str | None = None
    rank: CompanyRank = CompanyRank.B
    intent_score: int | None = Field(default=None, ge=0, le=100)
    notes: str | None = None
    source: str | None = None


class CompanyCreate(CompanyBase):
    """Schema for creating a company."""


class CompanyUpdate(BaseModel):
    """Schema for updating a company."""

    name: str | None = None
    project_id: int | None = None
    industry: str | None = None
    employees: int | None = Field(default=None, ge=0)
    location: str | None = None
    phone: str | None = None
    email: str | None = None
    website: str | None = None
    rank: CompanyRank | None = None
    status: CompanyStatus | None = None
    intent_score: int | None = Field(default=None, ge=0, le=100)
    notes: str | None = None


class CompanyResponse(CompanyBase):
    """Schema for company response."""

    id: int
    status: CompanyStatus
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class CompanyImportRequest(BaseModel):
    """Bulk import of prospects into a project."""

    project_id: int
    companies: list[CompanyCreate]
    skip_duplicates: bool = True


class CompanyImportResponse(BaseModel):
    imported: int
    skipped: int


class CompanyUploadResponse(CompanyImportResponse):
    message: str
