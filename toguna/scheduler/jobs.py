"""Scheduled background jobs using APScheduler."""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy import select

from toguna.config import get_settings
from toguna.services.database import async_session_maker

settings = get_settings()
logger = logging.getLogger(__name__)

scheduler = AsyncIOScheduler()


async def followup_rules_job():
    """Evaluate active followup rules."""
    logger.info("Starting followup rules job")
    try:
        async with async_session_maker() as db:
            from toguna.core.followup_engine import FollowupEngine

            summary = await FollowupEngine(db).evaluate_rules()
            logger.info(f"Followup rules job completed: {summary}")
    except Exception as e:
        logger.error(f"Followup rules job failed: {e}")


async def pivot_check_job():
    """Raise pivot alerts for projects with weak results (hourly)."""
    logger.info("Starting pivot check job")
    try:
        async with async_session_maker() as db:
            from toguna.core.pivot_monitor import PivotMonitor

            checked, created = await PivotMonitor(db).check_all()
            logger.info(f"Pivot check completed: {checked} projects, {len(created)} new alerts")
    except Exception as e:
        logger.error(f"Pivot check job failed: {e}")


async def fraud_scan_job():
    """Scan the last week of activity for suspicious patterns (nightly)."""
    logger.info("Starting fraud scan job")
    try:
        async with async_session_maker() as db:
            from toguna.core.fraud_detector import FraudDetector

            scanned, created = await FraudDetector(db).scan(days=7)
            logger.info(f"Fraud scan completed: {scanned} operators, {len(created)} new flags")
    except Exception as e:
        logger.error(f"Fraud scan job failed: {e}")


async def retention_check_job():
    """Alert directors about documents whose retention period is ending."""
    logger.info("Starting retention check job")
    try:
        async with async_session_maker() as db:
            from toguna.core.clock import local_today
            from toguna.core.compliance import count_buckets, retention_alerts
            from toguna.models.compliance import ComplianceDocument, DocumentStatus
            from toguna.models.notification import NotificationType
            from toguna.services.realtime import notify, publish_notification

            result = await db.execute(
                select(ComplianceDocument).where(ComplianceDocument.status == DocumentStatus.ACTIVE)
            )
            alerts = retention_alerts(list(result.scalars().all()), local_today())
            counts = count_buckets(alerts)
            urgent = counts["expired"] + counts["within_30"]
            if urgent:
                notification = await notify(
                    db,
                    NotificationType.ALERT,
                    title="保管期限のアラート",
                    message=f"期限切れ {counts['expired']} 件、30日以内 {counts['within_30']} 件の書類があります",
                    data=counts,
                )
                await db.commit()
                await publish_notification(notification)
            logger.info(f"Retention check completed: {counts}")
    except Exception as e:
        logger.error(f"Retention check job failed: {e}")


async def crawl_runner_job():
    """Run crawl jobs left pending."""
    try:
        async with async_session_maker() as db:
            from toguna.core.intelligence import CrawlRunner

            ran = await CrawlRunner(db).run_pending()
            if ran:
                logger.info(f"Crawl runner processed {ran} jobs")
    except Exception as e:
        logger.error(f"Crawl runner job failed: {e}")


async def news_expiry_job():
    """Retire news triggers past their expiry."""
    try:
        async with async_session_maker() as db:
            from toguna.core.intelligence import expire_news_triggers

            expired = await expire_news_triggers(db)
            if expired:
                logger.info(f"Expired {expired} news triggers")
    except Exception as e:
        logger.error(f"News expiry job failed: {e}")


async def start_scheduler():
    """Start the scheduler with all jobs."""
    scheduler.add_job(
        followup_rules_job,
        IntervalTrigger(minutes=settings.followup_rules_interval_minutes),
        id="followup_rules",
        name="Followup Rules",
        replace_existing=True,
    )

    scheduler.add_job(
        pivot_check_job,
        IntervalTrigger(minutes=settings.pivot_check_interval_minutes),
        id="pivot_check",
        name="Pivot Check",
        replace_existing=True,
    )

    # Nightly, after the calling day is over
    scheduler.add_job(
        fraud_scan_job,
        CronTrigger(hour=2, minute=0, timezone=settings.timezone),
        id="fraud_scan",
        name="Fraud Scan",
        replace_existing=True,
    )

    scheduler.add_job(
        retention_check_job,
        CronTrigger(hour=settings.retention_check_hour, minute=0, timezone=settings.timezone),
        id="retention_check",
        name="Retention Check",
        replace_existing=True,
    )

    scheduler.add_job(
        crawl_runner_job,
        IntervalTrigger(minutes=settings.crawl_runner_interval_minutes),
        id="crawl_runner",
        name="Crawl Runner",
        replace_existing=True,
    )

    scheduler.add_job(
        news_expiry_job,
        IntervalTrigger(hours=1),
        id="news_expiry",
        name="News Trigger Expiry",
        replace_existing=True,
    )

    scheduler.start()
    logger.info("Scheduler started with all jobs")


async def stop_scheduler():
    """Stop the scheduler."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
    logger.info("Scheduler stopped")


def get_job_status() -> list[dict]:
    """Get status of all scheduled jobs."""
    jobs = []
    for job in scheduler.get_jobs():
        jobs.append({
            "id": job.id,
            "name": job.name,
            "next_run": job.next_run_time.isoformat() if job.next_run_time else None,
            "trigger": str(job.trigger),
        })
    return jobs
