"""Tests for deterministic call quality scoring."""

from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from toguna.core.quality_scoring import COACHING_WELL_DONE, build_dashboard, evaluate, pace_score, score_call
from toguna.models.call import CallLog, CallResult
from toguna.models.company import Company
from toguna.models.quality import CallQualityScore


@pytest.mark.parametrize("duration,expected", [
    (0, 40), (29, 40), (30, 55), (60, 70), (120, 85), (299, 85), (300, 75), (600, 60),
])
def test_pace_score_bands(duration, expected):
    assert pace_score(duration) == expected


def test_strong_appointment_call():
    breakdown = evaluate(180, CallResult.APPOINTMENT, "決裁者と日程調整済み")

    assert (breakdown.greeting, breakdown.hearing, breakdown.proposal) == (80, 80, 78)
    assert (breakdown.closing, breakdown.pace, breakdown.tone) == (95, 85, 75)
    assert breakdown.total == 82
    assert breakdown.improvement_points == []
    assert breakdown.coaching_tip == COACHING_WELL_DONE


def test_short_absent_call():
    breakdown = evaluate(10, CallResult.ABSENT, None)

    assert breakdown.total == 50
    assert breakdown.improvement_points[0] == "挨拶をより丁寧に"
    assert breakdown.coaching_tip == "次回は「挨拶をより丁寧に」を意識してみましょう"


def test_total_rounds_half_up():
    breakdown = evaluate(0, CallResult.NG, "memo")

    # 50 + 80 + 50 + 40 + 40 + 55 = 315, an average of 52.5
    assert breakdown.total == 53


def test_ng_result_uses_lowest_closing():
    assert evaluate(200, CallResult.NG, "x").closing == 40


@pytest.mark.asyncio
async def test_score_call_replaces_existing_score(db_session: AsyncSession, sample_project, operator):
    company = (await db_session.execute(select(Company))).scalars().first()
    call = CallLog(
        company_id=company.id,
        operator_id=operator.id,
        project_id=sample_project.id,
        result=CallResult.ABSENT,
        duration=10,
    )
    db_session.add(call)
    await db_session.commit()

    first = await score_call(db_session, call)
    assert first.total_score == 50

    call.result = CallResult.APPOINTMENT
    call.duration = 180
    call.notes = "アポ獲得"
    second = await score_call(db_session, call)

    rows = (await db_session.execute(select(CallQualityScore))).scalars().all()
    assert len(rows) == 1
    assert second.total_score == 82
    assert second.project_id == sample_project.id


def score(operator_id, total, scored_at, **kpis):
    values = {k: kpis.get(k, total) for k in ("greeting", "hearing", "proposal", "closing", "pace", "tone")}
    return SimpleNamespace(
        operator_id=operator_id,
        total_score=total,
        scored_at=scored_at,
        **{f"{k}_score": v for k, v in values.items()},
    )


def test_dashboard_week_over_week_and_coaching():
    now = datetime(2026, 10, 18, 12)
    scores = [
        score(1, 80, now - timedelta(days=1)),
        score(1, 90, now - timedelta(days=2)),
        score(2, 60, now - timedelta(days=3)),
        score(2, 50, now - timedelta(days=9)),
    ]

    dashboard = build_dashboard(scores, now, {1: "佐藤", 2: "鈴木"})

    assert dashboard["this_week_average"] == round((80 + 90 + 60) / 3, 1)
    assert dashboard["last_week_average"] == 50.0
    assert dashboard["week_over_week"] == round(76.7 - 50.0, 1)
    assert dashboard["scored_calls"] == 4
    assert [s.total_score for s in dashboard["needs_coaching"]] == [50, 60]
    assert dashboard["top_calls"][0].total_score == 90
    assert dashboard["operator_ranking"][0] == {
        "operator_id": 1,
        "operator_name": "佐藤",
        "average_score": 85.0,
        "scored_calls": 2,
    }
