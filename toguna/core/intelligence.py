"""Sales intelligence: crawl job execution and news trigger housekeeping."""

import logging
from datetime import datetime

import httpx
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from toguna.models.company import Company, CompanyStatus
from toguna.models.intelligence import CrawlJob, CrawlJobStatus, NewsTrigger
from toguna.services.scraper import ScraperService

logger = logging.getLogger(__name__)

HIGH_PRIORITY_SCORE = 70


def matches_keywords(candidate: dict, keywords: list[str] | None) -> bool:
    if not keywords:
        return True
    haystack = " ".join(filter(None, [candidate.get("name"), candidate.get("description")]))
    return any(keyword in haystack for keyword in keywords)


class CrawlRunner:
    """Scrape a job's source pages and import the companies they describe."""

    def __init__(self, db: AsyncSession, scraper: ScraperService | None = None):
        self.db = db
        self.scraper = scraper or ScraperService()

    async def _existing_names(self, project_id: int) -> set[str]:
        result = await self.db.execute(select(Company.name).where(Company.project_id == project_id))
        return {name.strip() for name in result.scalars().all()}

    async def run(self, job: CrawlJob) -> CrawlJob:
        """Run a pending job. Any unexpected error marks it failed and is re-raised."""
        if job.status not in (CrawlJobStatus.PENDING, CrawlJobStatus.RUNNING):
            raise ValueError(f"Crawl job {job.id} is {job.status.value}")

        job_id = job.id
        job.mark_running()
        await self.db.commit()
        logger.info(f"Crawl job {job_id} started with {len(job.source_urls)} URLs")

        try:
            return await self._crawl(job)
        except Exception as e:
            logger.error(f"Crawl job {job_id} failed: {e}")
            await self._record_failure(job_id, e)
            raise

    async def _record_failure(self, job_id: int, error: Exception) -> None:
        await self.db.rollback()
        job = await self.db.get(CrawlJob, job_id)
        if job is None or job.status != CrawlJobStatus.RUNNING:
            return
        job.errors = [{"error": str(error)}]
        job.mark_finished(CrawlJobStatus.FAILED)
        await self.db.commit()

    async def _crawl(self, job: CrawlJob) -> CrawlJob:
        known = await self._existing_names(job.project_id)
        errors: list[dict] = []
        found = 0
        imported = 0

        for url in job.source_urls:
            try:
                candidate = await self.scraper.scrape(url)
            except (httpx.HTTPError, ValueError) as e:
                logger.warning(f"Crawl job {job.id} failed on {url}: {e}")
                errors.append({"url": url, "error": str(e)})
                continue

            name = (candidate.get("name") or "").strip()
            if not name or not matches_keywords(candidate, job.keywords):
                continue
            found += 1
            if name in known:
                continue

            self.db.add(Company(
                project_id=job.project_id,
                name=name,
                phone=candidate["phones"][0] if candidate.get("phones") else None,
                email=candidate["emails"][0] if candidate.get("emails") else None,
                location=candidate.get("address"),
                website=url,
                notes=candidate.get("description"),
                status=CompanyStatus.NEW,
                source="crawl",
            ))
            known.add(name)
            imported += 1

        # A cancel issued while scraping wins over the outcome
        await self.db.refresh(job, attribute_names=["status"])
        job.companies_found = found
        job.companies_imported = imported
        job.errors = errors or None
        if job.status != CrawlJobStatus.CANCELLED:
            failed = bool(errors) and len(errors) == len(job.source_urls)
            job.mark_finished(CrawlJobStatus.FAILED if failed else CrawlJobStatus.COMPLETED)

        await self.db.commit()
        await self.db.refresh(job)
        logger.info(f"Crawl job {job.id} {job.status.value}: {found} found, {imported} imported")
        return job

    async def run_pending(self) -> int:
        """Run every pending job in creation order. A failing job does not stop the rest."""
        result = await self.db.execute(
            select(CrawlJob.id).where(CrawlJob.status == CrawlJobStatus.PENDING).order_by(CrawlJob.created_at)
        )
        job_ids = result.scalars().all()
        for job_id in job_ids:
            job = await self.db.get(CrawlJob, job_id)
            if job is None or job.status != CrawlJobStatus.PENDING:
                continue
            try:
                await self.run(job)
            except Exception as e:
                logger.error(f"Skipping crawl job {job_id} after failure: {e}")
        return len(job_ids)


async def expire_news_triggers(db: AsyncSession, now: datetime | None = None) -> int:
    """Mark triggers past their expiry as processed so they leave the work queue."""
    now = now or datetime.utcnow()
    result = await db.execute(
        update(NewsTrigger)
        .where(
            NewsTrigger.is_processed == False,  # noqa: E712
            NewsTrigger.expires_at.is_not(None),
            NewsTrigger.expires_at < now,
        )
        .values(is_processed=True, processed_at=now)
    )
    await db.commit()
    return result.rowcount or 0
