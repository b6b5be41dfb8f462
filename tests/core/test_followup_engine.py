"""Tests for followup rule evaluation."""

from datetime import timedelta

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from toguna.core.clock import local_today
from toguna.core.followup_engine import FollowupEngine
from toguna.models.appointment import Appointment, AppointmentStatus
from toguna.models.call import CallLog, CallResult
from toguna.models.company import Company
from toguna.models.notification import Notification
from toguna.models.nurturing import (
    DocumentSend,
    ExecutionResult,
    FollowupAction,
    FollowupExecution,
    FollowupRule,
    FollowupTrigger,
    SendStatus,
)


async def reject_all(db: AsyncSession, project, operator) -> list[Company]:
    companies = (await db.execute(select(Company).order_by(Company.id))).scalars().all()
    for company in companies:
        db.add(CallLog(
            company_id=company.id,
            operator_id=operator.id,
            project_id=project.id,
            result=CallResult.REJECTED,
            duration=40,
        ))
    await db.commit()
    return list(companies)


async def add_rule(db: AsyncSession, project, action: FollowupAction, **kwargs) -> FollowupRule:
    rule = FollowupRule(
        project_id=project.id,
        name="断り後フォロー",
        trigger_type=FollowupTrigger.CALL_REJECTION,
        action_type=action,
        **kwargs,
    )
    db.add(rule)
    await db.commit()
    return rule


@pytest.mark.asyncio
async def test_send_email_skips_companies_without_address(
    db_session: AsyncSession, sample_project, operator
):
    await reject_all(db_session, sample_project, operator)
    rule = await add_rule(
        db_session,
        sample_project,
        FollowupAction.SEND_EMAIL,
        action_config={"subject": "{{company_name}} 様", "body": "ご検討ください"},
    )

    engine = FollowupEngine(db_session)
    summary = await engine.evaluate_rules()

    assert summary == {
        "rules_evaluated": 1,
        "executions": 2,
        "succeeded": 1,
        "failed": 0,
        "skipped": 1,
    }
    send = (await db_session.execute(select(DocumentSend))).scalar_one()
    assert send.status == SendStatus.SENT
    assert send.recipient == "info@alpha.test"
    assert send.subject == "株式会社アルファ 様"
    assert rule.execution_count == 1
    assert rule.last_run_at is not None

    again = await engine.evaluate_rules()
    assert again["executions"] == 0


@pytest.mark.asyncio
async def test_max_executions_caps_rule(db_session: AsyncSession, sample_project, operator):
    await reject_all(db_session, sample_project, operator)
    await add_rule(
        db_session,
        sample_project,
        FollowupAction.ALERT_MANAGER,
        max_executions=1,
    )

    summary = await FollowupEngine(db_session).evaluate_rules()

    assert summary["executions"] == 1
    executions = (await db_session.execute(select(FollowupExecution))).scalars().all()
    assert [e.result for e in executions] == [ExecutionResult.SUCCESS]
    notification = (await db_session.execute(select(Notification))).scalar_one()
    assert notification.operator_id is None
    assert notification.title == "フォローアップ: 断り後フォロー"


@pytest.mark.asyncio
async def test_schedule_call_books_tentative_appointment(
    db_session: AsyncSession, sample_project, operator
):
    companies = await reject_all(db_session, sample_project, operator)
    await add_rule(
        db_session,
        sample_project,
        FollowupAction.SCHEDULE_CALL,
        action_config={"days_ahead": 2, "hour": 14},
        max_executions=1,
    )

    await FollowupEngine(db_session).evaluate_rules()

    appointment = (await db_session.execute(select(Appointment))).scalar_one()
    day = local_today() + timedelta(days=2)
    assert appointment.status == AppointmentStatus.TENTATIVE
    assert appointment.scheduled_at.date() == day
    assert appointment.scheduled_at.hour == 14
    assert appointment.company_id in {c.id for c in companies}


@pytest.mark.asyncio
async def test_line_action_is_skipped(db_session: AsyncSession, sample_project, operator):
    await reject_all(db_session, sample_project, operator)
    rule = await add_rule(db_session, sample_project, FollowupAction.SEND_LINE)

    summary = await FollowupEngine(db_session).evaluate_rules()

    assert summary["skipped"] == 2
    assert rule.execution_count == 0


@pytest.mark.asyncio
async def test_inactive_rules_are_ignored(db_session: AsyncSession, sample_project, operator):
    await reject_all(db_session, sample_project, operator)
    await add_rule(db_session, sample_project, FollowupAction.ALERT_MANAGER, is_active=False)

    summary = await FollowupEngine(db_session).evaluate_rules()
    assert summary["rules_evaluated"] == 0
