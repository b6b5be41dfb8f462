"""Crawl job and news trigger schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from toguna.models.intelligence import CrawlJobStatus, NewsTriggerType


class CrawlJobCreate(BaseModel):
    project_id: int
    source_urls: list[str] = Field(min_length=1)
    keywords: list[str] | None = None
    run_now: bool = True


class CrawlJobResponse(BaseModel):
    id: int
    project_id: int
    source_urls: list[str]
    keywords: list[str] | None = None
    status: CrawlJobStatus
    companies_found: int
    companies_imported: int
    errors: list | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
    created_at: datetime

    class Config:
        from_attributes = True


class NewsTriggerBase(BaseModel):
    headline: str
    company_id: int | None = None
    project_id: int | None = None
    trigger_type: NewsTriggerType = NewsTriggerType.OTHER
    summary: str | None = None
    source_url: str | None = None
    published_at: datetime | None = None
    priority_score: int = Field(default=50, ge=0, le=100)
    expires_at: datetime | None = None


class NewsTriggerCreate(NewsTriggerBase):
    """Schema for registering a news trigger."""


class NewsTriggerUpdate(BaseModel):
    headline: str | None = None
    trigger_type: NewsTriggerType | None = None
    summary: str | None = None
    suggested_talk: str | None = None
    talk_tone: str | None = None
    priority_score: int | None = Field(default=None, ge=0, le=100)
    expires_at: datetime | None = None


class NewsTriggerResponse(NewsTriggerBase):
    id: int
    suggested_talk: str | None = None
    talk_tone: str | None = None
    is_processed: bool
    processed_at: datetime | None = None
    created_at: datetime

    class Config:
        from_attributes = True


class ScrapeRequest(BaseModel):
    url: str


class ScrapedCompany(BaseModel):
    """Company candidate extracted from a web page."""

    url: str
    name: str | None = None
    description: str | None = None
    phones: list[str] = []
    emails: list[str] = []
    address: str | None = None
