"""Deterministic call quality scoring."""

import logging
from datetime import datetime, timedelta
from dataclasses import dataclass, field

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from toguna.models.call import CallLog, CallResult
from toguna.models.quality import CallQualityScore

logger = logging.getLogger(__name__)

CLOSING_BY_RESULT = {
    CallResult.APPOINTMENT: 95,
    CallResult.DOCUMENT_SENT: 80,
    CallResult.CALLBACK: 70,
    CallResult.ABSENT: 50,
    CallResult.REJECTED: 45,
}

COACHING_WELL_DONE = "素晴らしい通話です。この調子を維持してください！"


@dataclass
class QualityBreakdown:
    greeting: int
    hearing: int
    proposal: int
    closing: int
    pace: int
    tone: int
    positive_points: list[str] = field(default_factory=list)
    improvement_points: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        kpis = (self.greeting, self.hearing, self.proposal, self.closing, self.pace, self.tone)
        # Halves round up
        return (2 * sum(kpis) + len(kpis)) // (2 * len(kpis))

    @property
    def coaching_tip(self) -> str:
        if self.improvement_points:
            return f"次回は「{self.improvement_points[0]}」を意識してみましょう"
        return COACHING_WELL_DONE


def pace_score(duration: int) -> int:
    """Ideal conversations last two to five minutes."""
    if duration < 30:
        return 40
    if duration < 60:
        return 55
    if duration < 120:
        return 70
    if duration < 300:
        return 85
    if duration < 600:
        return 75
    return 60


def evaluate(duration: int, result: CallResult | None, notes: str | None) -> QualityBreakdown:
    """Score a call from its duration, outcome and whether notes were taken."""
    duration = duration or 0
    breakdown = QualityBreakdown(
        greeting=80 if duration > 15 else 50,
        hearing=80 if notes else 55,
        proposal=78 if duration > 60 and result != CallResult.ABSENT else 50,
        closing=CLOSING_BY_RESULT.get(result, 40),
        pace=pace_score(duration),
        tone=75 if duration > 30 else 55,
    )

    positive, improve = breakdown.positive_points, breakdown.improvement_points
    if breakdown.greeting >= 75:
        positive.append("好印象の挨拶")
    else:
        improve.append("挨拶をより丁寧に")
    if breakdown.hearing >= 70:
        positive.append("ヒアリングが的確")
    else:
        improve.append("相手のニーズをもっと深掘りする")
    if breakdown.pace < 65:
        improve.append("話すスピードを調整する")
    else:
        positive.append("適切な話速")
    if breakdown.proposal >= 70:
        positive.append("提案内容が分かりやすい")
    else:
        improve.append("メリットをもっと具体的に")
    if breakdown.closing >= 80:
        positive.append("クロージングが効果的")
    else:
        improve.append("次のアクションを明確に提示する")

    return breakdown


async def score_call(db: AsyncSession, call: CallLog) -> CallQualityScore:
    """Score a call and store the result, replacing any earlier score."""
    breakdown = evaluate(call.duration, call.result, call.notes)

    result = await db.execute(
        select(CallQualityScore).where(CallQualityScore.call_log_id == call.id)
    )
    score = result.scalar_one_or_none()
    if score is None:
        score = CallQualityScore(call_log_id=call.id)
        db.add(score)

    score.operator_id = call.operator_id
    score.project_id = call.project_id
    score.greeting_score = breakdown.greeting
    score.hearing_score = breakdown.hearing
    score.proposal_score = breakdown.proposal
    score.closing_score = breakdown.closing
    score.pace_score = breakdown.pace
    score.tone_score = breakdown.tone
    score.total_score = breakdown.total
    score.positive_points = breakdown.positive_points
    score.improvement_points = breakdown.improvement_points
    score.coaching_tip = breakdown.coaching_tip
    score.scored_at = datetime.utcnow()

    await db.commit()
    await db.refresh(score)
    logger.info(f"Scored call {call.id}: {score.total_score}")
    return score


def _mean(values: list[int]) -> float:
    if not values:
        return 0.0
    return round(sum(values) / len(values), 1)


def build_dashboard(
    scores: list[CallQualityScore],
    now: datetime,
    operator_names: dict[int, str] | None = None,
    coaching_threshold: int = 70,
) -> dict:
    """Week-over-week averages, KPI means, leaders and coaching candidates."""
    operator_names = operator_names or {}
    week_ago = now - timedelta(days=7)
    two_weeks_ago = now - timedelta(days=14)

    this_week = [s.total_score for s in scores if s.scored_at >= week_ago]
    last_week = [s.total_score for s in scores if two_weeks_ago <= s.scored_at < week_ago]
    this_week_average = _mean(this_week)
    last_week_average = _mean(last_week)

    by_operator: dict[int, list[int]] = {}
    for s in scores:
        by_operator.setdefault(s.operator_id, []).append(s.total_score)
    ranking = sorted(
        (
            {
                "operator_id": operator_id,
                "operator_name": operator_names.get(operator_id),
                "average_score": _mean(totals),
                "scored_calls": len(totals),
            }
            for operator_id, totals in by_operator.items()
        ),
        key=lambda row: row["average_score"],
        reverse=True,
    )

    return {
        "this_week_average": this_week_average,
        "last_week_average": last_week_average,
        "week_over_week": round(this_week_average - last_week_average, 1),
        "scored_calls": len(scores),
        "kpi_averages": {
            "greeting": _mean([s.greeting_score for s in scores]),
            "hearing": _mean([s.hearing_score for s in scores]),
            "proposal": _mean([s.proposal_score for s in scores]),
            "closing": _mean([s.closing_score for s in scores]),
            "pace": _mean([s.pace_score for s in scores]),
            "tone": _mean([s.tone_score for s in scores]),
        },
        "top_calls": sorted(scores, key=lambda s: s.total_score, reverse=True)[:10],
        "needs_coaching": sorted(
            (s for s in scores if s.total_score < coaching_threshold),
            key=lambda s: s.total_score,
        )[:10],
        "operator_ranking": ranking,
    }
