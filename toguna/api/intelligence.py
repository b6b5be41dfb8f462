"""Sales intelligence API endpoints: crawl jobs, news triggers and page scraping."""

import logging
from datetime import datetime
from typing import Annotated

import httpx
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from toguna.api.auth import Director
from toguna.core.claude_agent import get_claude_agent
from toguna.core.intelligence import HIGH_PRIORITY_SCORE, CrawlRunner, expire_news_triggers
from toguna.services.database import async_session_maker, get_db
from toguna.services.scraper import ScraperService
from toguna.models.company import Company
from toguna.models.intelligence import CrawlJob, CrawlJobStatus, NewsTrigger
from toguna.models.project import Project
from toguna.schemas.intelligence import (
    CrawlJobCreate,
    CrawlJobResponse,
    NewsTriggerCreate,
    NewsTriggerUpdate,
    NewsTriggerResponse,
    ScrapeRequest,
    ScrapedCompany,
)

logger = logging.getLogger(__name__)
router = APIRouter()


async def run_crawl_job(job_id: int) -> None:
    """Run a crawl job outside the request, on its own session."""
    async with async_session_maker() as db:
        job = await db.get(CrawlJob, job_id)
        if job is None or job.status != CrawlJobStatus.PENDING:
            return
        try:
            await CrawlRunner(db).run(job)
        except Exception as e:
            # The runner has already marked the job failed
            logger.error(f"Background crawl job {job_id} stopped: {e}")


async def get_job_or_404(db: AsyncSession, job_id: int) -> CrawlJob:
    job = await db.get(CrawlJob, job_id)
    if not job:
        raise HTTPException(status_code=404, detail="Crawl job not found")
    return job


async def get_trigger_or_404(db: AsyncSession, trigger_id: int) -> NewsTrigger:
    trigger = await db.get(NewsTrigger, trigger_id)
    if not trigger:
        raise HTTPException(status_code=404, detail="News trigger not found")
    return trigger


# =============================================================================
# CRAWL JOBS
# =============================================================================

@router.get("/crawl-jobs", response_model=list[CrawlJobResponse])
async def list_crawl_jobs(
    db: Annotated[AsyncSession, Depends(get_db)],
    project_id: int | None = None,
    status: CrawlJobStatus | None = None,
) -> list[CrawlJobResponse]:
    query = select(CrawlJob).order_by(CrawlJob.created_at.desc())
    if project_id is not None:
        query = query.where(CrawlJob.project_id == project_id)
    if status:
        query = query.where(CrawlJob.status == status)
    result = await db.execute(query)
    return [CrawlJobResponse.model_validate(j) for j in result.scalars().all()]


@router.post("/crawl-jobs", response_model=CrawlJobResponse, status_code=201)
async def create_crawl_job(
    data: CrawlJobCreate,
    background_tasks: BackgroundTasks,
    director: Director,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> CrawlJobResponse:
    """
    Queue a crawl job.

    With `run_now` the job starts right after the response; otherwise the
    crawl runner job picks it up.
    """
    if not await db.get(Project, data.project_id):
        raise HTTPException(status_code=404, detail="Project not found")

    job = CrawlJob(
        project_id=data.project_id,
        source_urls=data.source_urls,
        keywords=data.keywords,
        status=CrawlJobStatus.PENDING,
        created_by=director.id,
    )
    db.add(job)
    await db.commit()
    await db.refresh(job)

    if data.run_now:
        background_tasks.add_task(run_crawl_job, job.id)
    return CrawlJobResponse.model_validate(job)


@router.get("/crawl-jobs/{job_id}", response_model=CrawlJobResponse)
async def get_crawl_job(
    job_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> CrawlJobResponse:
    return CrawlJobResponse.model_validate(await get_job_or_404(db, job_id))


@router.post("/crawl-jobs/{job_id}/cancel", response_model=CrawlJobResponse)
async def cancel_crawl_job(
    job_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> CrawlJobResponse:
    job = await get_job_or_404(db, job_id)
    if job.status not in (CrawlJobStatus.PENDING, CrawlJobStatus.RUNNING):
        raise HTTPException(status_code=400, detail=f"Crawl job is already {job.status.value}")

    job.mark_finished(CrawlJobStatus.CANCELLED)
    await db.commit()
    await db.refresh(job)
    return CrawlJobResponse.model_validate(job)


@router.post("/scrape", response_model=ScrapedCompany)
async def scrape_page(data: ScrapeRequest) -> ScrapedCompany:
    """Extract a company candidate from a single page."""
    try:
        candidate = await ScraperService().scrape(data.url)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except httpx.HTTPError as e:
        logger.warning(f"Scrape of {data.url} failed: {e}")
        raise HTTPException(status_code=502, detail=f"Failed to fetch page: {e}")
    return ScrapedCompany(**candidate)


# =============================================================================
# NEWS TRIGGERS
# =============================================================================

@router.get("/news-triggers", response_model=list[NewsTriggerResponse])
async def list_news_triggers(
    db: Annotated[AsyncSession, Depends(get_db)],
    project_id: int | None = None,
    is_processed: bool | None = None,
    min_priority: int | None = Query(None, ge=0, le=100),
    max_priority: int | None = Query(None, ge=0, le=100),
    limit: int = Query(100, ge=1, le=500),
) -> list[NewsTriggerResponse]:
    query = select(NewsTrigger).order_by(
        NewsTrigger.priority_score.desc(), NewsTrigger.created_at.desc()
    )
    if project_id is not None:
        query = query.where(NewsTrigger.project_id == project_id)
    if is_processed is not None:
        query = query.where(NewsTrigger.is_processed == is_processed)
    if min_priority is not None:
        query = query.where(NewsTrigger.priority_score >= min_priority)
    if max_priority is not None:
        query = query.where(NewsTrigger.priority_score <= max_priority)
    result = await db.execute(query.limit(limit))
    return [NewsTriggerResponse.model_validate(t) for t in result.scalars().all()]


@router.get("/news-triggers/high-priority", response_model=list[NewsTriggerResponse])
async def list_high_priority_triggers(
    db: Annotated[AsyncSession, Depends(get_db)],
    project_id: int | None = None,
) -> list[NewsTriggerResponse]:
    """Unprocessed triggers worth calling on first. Must come before parametric routes."""
    query = select(NewsTrigger).where(
        NewsTrigger.is_processed == False,  # noqa: E712
        NewsTrigger.priority_score > HIGH_PRIORITY_SCORE,
    )
    if project_id is not None:
        query = query.where(NewsTrigger.project_id == project_id)
    result = await db.execute(query.order_by(NewsTrigger.priority_score.desc()))
    return [NewsTriggerResponse.model_validate(t) for t in result.scalars().all()]


@router.post("/news-triggers/expire")
async def expire_triggers(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    expired = await expire_news_triggers(db)
    return {"expired": expired}


@router.post("/news-triggers", response_model=NewsTriggerResponse, status_code=201)
async def create_news_trigger(
    data: NewsTriggerCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> NewsTriggerResponse:
    values = data.model_dump()
    if data.company_id is not None:
        company = await db.get(Company, data.company_id)
        if not company:
            raise HTTPException(status_code=404, detail="Company not found")
        if values["project_id"] is None:
            values["project_id"] = company.project_id

    trigger = NewsTrigger(**values)
    db.add(trigger)
    await db.commit()
    await db.refresh(trigger)
    return NewsTriggerResponse.model_validate(trigger)


@router.get("/news-triggers/{trigger_id}", response_model=NewsTriggerResponse)
async def get_news_trigger(
    trigger_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> NewsTriggerResponse:
    return NewsTriggerResponse.model_validate(await get_trigger_or_404(db, trigger_id))


@router.patch("/news-triggers/{trigger_id}", response_model=NewsTriggerResponse)
async def update_news_trigger(
    trigger_id: int,
    data: NewsTriggerUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> NewsTriggerResponse:
    trigger = await get_trigger_or_404(db, trigger_id)
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(trigger, field, value)
    await db.commit()
    await db.refresh(trigger)
    return NewsTriggerResponse.model_validate(trigger)


@router.delete("/news-triggers/{trigger_id}")
async def delete_news_trigger(
    trigger_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    trigger = await get_trigger_or_404(db, trigger_id)
    await db.delete(trigger)
    await db.commit()
    return {"message": "News trigger deleted"}


@router.post("/news-triggers/{trigger_id}/process", response_model=NewsTriggerResponse)
async def mark_trigger_processed(
    trigger_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> NewsTriggerResponse:
    trigger = await get_trigger_or_404(db, trigger_id)
    if not trigger.is_processed:
        trigger.mark_processed()
        await db.commit()
        await db.refresh(trigger)
    return NewsTriggerResponse.model_validate(trigger)


@router.post("/news-triggers/{trigger_id}/suggest-talk", response_model=NewsTriggerResponse)
async def suggest_talk(
    trigger_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> NewsTriggerResponse:
    """Generate an opening script for calling about this news."""
    trigger = await get_trigger_or_404(db, trigger_id)
    company = await db.get(Company, trigger.company_id) if trigger.company_id else None

    agent = await get_claude_agent()
    talk, tone = await agent.suggest_talk(
        trigger.trigger_type.value,
        trigger.headline,
        trigger.summary,
        company.name if company else None,
    )
    trigger.suggested_talk = talk
    trigger.talk_tone = tone
    await db.commit()
    await db.refresh(trigger)
    return NewsTriggerResponse.model_validate(trigger)
