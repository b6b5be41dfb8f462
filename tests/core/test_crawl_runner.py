"""Tests for crawl job execution."""

import httpx
import pytest
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from toguna.core.intelligence import CrawlRunner, matches_keywords
from toguna.models.company import Company
from toguna.models.intelligence import CrawlJob, CrawlJobStatus


class FakeScraper:
    """Serves canned candidates keyed by URL."""

    def __init__(self, pages: dict):
        self.pages = pages

    async def scrape(self, url: str) -> dict:
        page = self.pages[url]
        if isinstance(page, Exception):
            raise page
        return {"url": url, "phones": [], "emails": [], "address": None, "description": None, **page}


async def make_job(db: AsyncSession, project, urls: list[str], keywords=None) -> CrawlJob:
    job = CrawlJob(project_id=project.id, source_urls=urls, keywords=keywords)
    db.add(job)
    await db.commit()
    return job


def test_matches_keywords():
    candidate = {"name": "株式会社ガンマ", "description": "クラウド会計の導入支援"}
    assert matches_keywords(candidate, None)
    assert matches_keywords(candidate, ["会計", "人事"])
    assert not matches_keywords(candidate, ["物流"])


@pytest.mark.asyncio
async def test_run_imports_new_companies(db_session: AsyncSession, sample_project):
    scraper = FakeScraper({
        "https://gamma.example.jp": {
            "name": "株式会社ガンマ",
            "phones": ["03-1111-2222"],
            "emails": ["info@gamma.example.jp"],
            "address": "東京都千代田区丸の内1-1",
        },
        "https://alpha.example.jp": {"name": "株式会社アルファ"},
        "https://blank.example.jp": {"name": None},
        "https://down.example.jp": httpx.ConnectError("connection refused"),
    })
    job = await make_job(db_session, sample_project, list(scraper.pages))

    job = await CrawlRunner(db_session, scraper).run(job)

    assert job.status == CrawlJobStatus.COMPLETED
    # Alpha is found but already known
    assert job.companies_found == 2
    assert job.companies_imported == 1
    assert job.errors == [{"url": "https://down.example.jp", "error": "connection refused"}]
    assert job.started_at is not None and job.completed_at is not None

    gamma = (await db_session.execute(select(Company).where(Company.name == "株式会社ガンマ"))).scalar_one()
    assert gamma.project_id == sample_project.id
    assert gamma.phone == "03-1111-2222"
    assert gamma.email == "info@gamma.example.jp"
    assert gamma.location == "東京都千代田区丸の内1-1"
    assert gamma.source == "crawl"


@pytest.mark.asyncio
async def test_keywords_filter_candidates(db_session: AsyncSession, sample_project):
    scraper = FakeScraper({
        "https://a.example.jp": {"name": "会計ソフト株式会社"},
        "https://b.example.jp": {"name": "物流サービス株式会社"},
    })
    job = await make_job(db_session, sample_project, list(scraper.pages), keywords=["会計"])

    job = await CrawlRunner(db_session, scraper).run(job)

    assert (job.companies_found, job.companies_imported) == (1, 1)


@pytest.mark.asyncio
async def test_all_failures_fail_the_job(db_session: AsyncSession, sample_project):
    scraper = FakeScraper({"ftp://example.jp": ValueError("Unsupported URL: ftp://example.jp")})
    job = await make_job(db_session, sample_project, ["ftp://example.jp"])

    job = await CrawlRunner(db_session, scraper).run(job)

    assert job.status == CrawlJobStatus.FAILED


@pytest.mark.asyncio
async def test_finished_jobs_are_not_rerun(db_session: AsyncSession, sample_project):
    job = await make_job(db_session, sample_project, ["https://example.jp"])
    job.mark_finished(CrawlJobStatus.CANCELLED)
    await db_session.commit()

    with pytest.raises(ValueError):
        await CrawlRunner(db_session, FakeScraper({})).run(job)


@pytest.mark.asyncio
async def test_run_pending(db_session: AsyncSession, sample_project):
    scraper = FakeScraper({"https://gamma.example.jp": {"name": "株式会社ガンマ"}})
    await make_job(db_session, sample_project, ["https://gamma.example.jp"])

    assert await CrawlRunner(db_session, scraper).run_pending() == 1
    assert await CrawlRunner(db_session, scraper).run_pending() == 0


@pytest.mark.asyncio
async def test_run_pending_survives_unexpected_errors(db_session: AsyncSession, sample_project):
    scraper = FakeScraper({
        "https://boom.example.jp": RuntimeError("boom"),
        "https://gamma.example.jp": {"name": "株式会社ガンマ"},
    })
    broken = await make_job(db_session, sample_project, ["https://boom.example.jp"])
    healthy = await make_job(db_session, sample_project, ["https://gamma.example.jp"])

    assert await CrawlRunner(db_session, scraper).run_pending() == 2

    await db_session.refresh(broken)
    await db_session.refresh(healthy)
    assert broken.status == CrawlJobStatus.FAILED
    assert broken.errors == [{"error": "boom"}]
    assert broken.completed_at is not None
    assert healthy.status == CrawlJobStatus.COMPLETED


@pytest.mark.asyncio
async def test_run_marks_failure_and_reraises(db_session: AsyncSession, sample_project):
    scraper = FakeScraper({"https://boom.example.jp": RuntimeError("boom")})
    job = await make_job(db_session, sample_project, ["https://boom.example.jp"])

    with pytest.raises(RuntimeError):
        await CrawlRunner(db_session, scraper).run(job)

    await db_session.refresh(job)
    assert job.status == CrawlJobStatus.FAILED


class CancellingScraper(FakeScraper):
    """Cancels the job from underneath the runner while scraping."""

    def __init__(self, pages: dict, db: AsyncSession, job_id: int):
        super().__init__(pages)
        self.db = db
        self.job_id = job_id

    async def scrape(self, url: str) -> dict:
        await self.db.execute(
            update(CrawlJob).where(CrawlJob.id == self.job_id).values(status=CrawlJobStatus.CANCELLED)
        )
        return await super().scrape(url)


@pytest.mark.asyncio
async def test_cancel_during_run_is_kept(db_session: AsyncSession, sample_project):
    job = await make_job(db_session, sample_project, ["https://gamma.example.jp"])
    scraper = CancellingScraper({"https://gamma.example.jp": {"name": "株式会社ガンマ"}}, db_session, job.id)

    job = await CrawlRunner(db_session, scraper).run(job)

    assert job.status == CrawlJobStatus.CANCELLED
    assert job.companies_found == 1
