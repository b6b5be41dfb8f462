"""Sales intelligence models: crawl jobs and news triggers."""

from datetime import datetime
from enum import Enum

from sqlalchemy import String, DateTime, Text, Integer, Boolean, JSON, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from toguna.services.database import Base


class CrawlJobStatus(str, Enum):
    """Crawl job lifecycle."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class NewsTriggerType(str, Enum):
    FUNDING = "funding"
    EXECUTIVE_CHANGE = "executive_change"
    EXPANSION = "expansion"
    AWARD = "award"
    PARTNERSHIP = "partnership"
    IPO = "ipo"
    PRODUCT_LAUNCH = "product_launch"
    OTHER = "other"


class CrawlJob(Base):
    """Job that scrapes source pages for new prospect companies."""

    __tablename__ = "crawl_jobs"

    id: Mapped[int] = mapped_column(primary_key=True)
    project_id: Mapped[int] = mapped_column(ForeignKey("projects.id"), index=True)
    source_urls: Mapped[list] = mapped_column(JSON)
    keywords: Mapped[list | None] = mapped_column(JSON, nullable=True)
    status: Mapped[CrawlJobStatus] = mapped_column(
        SQLEnum(CrawlJobStatus, values_callable=lambda x: [e.value for e in x]),
        default=CrawlJobStatus.PENDING,
        index=True,
    )
    companies_found: Mapped[int] = mapped_column(Integer, default=0)
    companies_imported: Mapped[int] = mapped_column(Integer, default=0)
    errors: Mapped[list | None] = mapped_column(JSON, nullable=True)
    created_by: Mapped[int | None] = mapped_column(ForeignKey("operators.id"), nullable=True)
    started_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    def mark_running(self) -> None:
        self.status = CrawlJobStatus.RUNNING
        self.started_at = datetime.utcnow()

    def mark_finished(self, status: CrawlJobStatus) -> None:
        self.status = status
        self.completed_at = datetime.utcnow()


class NewsTrigger(Base):
    """A news event about a prospect that makes a good reason to call."""

    __tablename__ = "news_triggers"

    id: Mapped[int] = mapped_column(primary_key=True)
    company_id: Mapped[int | None] = mapped_column(ForeignKey("companies.id"), nullable=True, index=True)
    project_id: Mapped[int | None] = mapped_column(ForeignKey("projects.id"), nullable=True, index=True)
    trigger_type: Mapped[NewsTriggerType] = mapped_column(
        SQLEnum(NewsTriggerType, values_callable=lambda x: [e.value for e in x]),
        default=NewsTriggerType.OTHER,
    )
    headline: Mapped[str] = mapped_column(String(500))
    summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    source_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    published_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    suggested_talk: Mapped[str | None] = mapped_column(Text, nullable=True)
    talk_tone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    priority_score: Mapped[int] = mapped_column(Integer, default=50, index=True)
    is_processed: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    processed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    expires_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    def mark_processed(self) -> None:
        self.is_processed = True
        self.processed_at = datetime.utcnow()
