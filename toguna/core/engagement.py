"""Company engagement scoring from calls and document interactions."""

import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from toguna.models.company import Company
from toguna.models.nurturing import AlertLevel, EngagementScore, EngagementTrend

logger = logging.getLogger(__name__)

EVENT_POINTS = {
    "call_connected": 10,
    "call_appointment": 30,
    "document_sent": 5,
    "document_open": 15,
    "document_page_view": 5,
    "document_link_click": 20,
    "document_download": 25,
}

CALL_EVENTS = {"call_connected", "call_appointment"}

MAX_SCORE = 100
RISING_POINTS = 15
HIGH_ENGAGEMENT_SCORE = 60


def alert_level_for(score: int) -> AlertLevel:
    if score >= 80:
        return AlertLevel.CRITICAL
    if score >= 60:
        return AlertLevel.HIGH
    if score >= 40:
        return AlertLevel.MEDIUM
    if score >= 20:
        return AlertLevel.LOW
    return AlertLevel.NONE


def trend_for(points: int) -> EngagementTrend:
    return EngagementTrend.RISING if points >= RISING_POINTS else EngagementTrend.STABLE


async def add_engagement(db: AsyncSession, company_id: int, event: str) -> EngagementScore | None:
    """Add the points for an event to a company's score.

    The caller owns the transaction; changes are flushed, not committed.
    """
    points = EVENT_POINTS.get(event)
    if points is None:
        logger.warning(f"Unknown engagement event: {event}")
        return None

    result = await db.execute(
        select(EngagementScore).where(EngagementScore.company_id == company_id)
    )
    engagement = result.scalar_one_or_none()
    if engagement is None:
        company = await db.get(Company, company_id)
        engagement = EngagementScore(
            company_id=company_id,
            project_id=company.project_id if company else None,
            score=0,
            call_score=0,
            document_score=0,
            event_counts={},
        )
        db.add(engagement)

    engagement.score = min(MAX_SCORE, (engagement.score or 0) + points)
    if event in CALL_EVENTS:
        engagement.call_score = (engagement.call_score or 0) + points
    else:
        engagement.document_score = (engagement.document_score or 0) + points

    counts = dict(engagement.event_counts or {})
    counts[event] = counts.get(event, 0) + 1
    engagement.event_counts = counts

    engagement.trend = trend_for(points)
    engagement.alert_level = alert_level_for(engagement.score)
    engagement.last_activity_at = datetime.utcnow()

    await db.flush()
    return engagement
