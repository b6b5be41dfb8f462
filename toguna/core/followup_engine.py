"""Evaluate followup rules and run their actions."""

import logging
from datetime import datetime, timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from toguna.core.clock import local_today
from toguna.core.nurturing import default_values, dispatch_send, render
from toguna.models.appointment import Appointment, AppointmentStatus, MeetingType
from toguna.models.call import CallLog, CallResult
from toguna.models.company import Company
from toguna.models.notification import Notification, NotificationType
from toguna.models.nurturing import (
    DocumentSend,
    DocumentTemplate,
    EngagementScore,
    ExecutionResult,
    FollowupAction,
    FollowupExecution,
    FollowupRule,
    FollowupTrigger,
    SendChannel,
    SendStatus,
)
from toguna.models.project import Project
from toguna.services.email_service import EmailService
from toguna.services.realtime import notify, publish_notification

logger = logging.getLogger(__name__)

DEFAULT_DAYS_AFTER = 3
DEFAULT_MIN_SCORE = 60
DEFAULT_CALL_HOUR = 10

DEFAULT_EMAIL_SUBJECT = "{{company_name}} 様 先日お送りした資料について"
DEFAULT_EMAIL_BODY = (
    "{{company_name}} 様\n\n"
    "先日お送りした資料はご覧いただけましたでしょうか。\n"
    "ご不明な点がございましたら、お気軽にお問い合わせください。"
)


class FollowupEngine:
    """Match rule triggers against recent activity and execute actions."""

    def __init__(self, db: AsyncSession, email_service: EmailService | None = None):
        self.db = db
        self.email_service = email_service or EmailService()
        self.unpublished: list[Notification] = []

    async def _candidates(self, rule: FollowupRule, now: datetime) -> list[int]:
        """Company ids whose activity matches the rule trigger."""
        conditions = rule.trigger_conditions or {}
        cutoff = now - timedelta(minutes=rule.delay_minutes or 0)

        if rule.trigger_type == FollowupTrigger.NO_RESPONSE_AFTER_SEND:
            days_after = int(conditions.get("days_after", DEFAULT_DAYS_AFTER))
            query = select(DocumentSend.company_id).where(
                DocumentSend.status.in_((SendStatus.SENT, SendStatus.DELIVERED)),
                DocumentSend.opened_at.is_(None),
                DocumentSend.sent_at <= min(cutoff, now - timedelta(days=days_after)),
            )
            project_column = DocumentSend.project_id
        elif rule.trigger_type == FollowupTrigger.DOCUMENT_OPENED:
            query = select(DocumentSend.company_id).where(
                DocumentSend.opened_at.is_not(None),
                DocumentSend.opened_at <= cutoff,
            )
            project_column = DocumentSend.project_id
        elif rule.trigger_type == FollowupTrigger.APPOINTMENT_NO_SHOW:
            query = select(Appointment.company_id).where(
                Appointment.status == AppointmentStatus.NO_SHOW,
                Appointment.updated_at <= cutoff,
            )
            project_column = Appointment.project_id
        elif rule.trigger_type == FollowupTrigger.CALL_REJECTION:
            query = select(CallLog.company_id).where(
                CallLog.result == CallResult.REJECTED,
                CallLog.called_at <= cutoff,
            )
            project_column = CallLog.project_id
        elif rule.trigger_type == FollowupTrigger.ENGAGEMENT_SCORE_THRESHOLD:
            min_score = int(conditions.get("min_score", DEFAULT_MIN_SCORE))
            query = select(EngagementScore.company_id).where(EngagementScore.score >= min_score)
            project_column = EngagementScore.project_id
        else:
            return []

        if rule.project_id is not None:
            query = query.where(project_column == rule.project_id)

        result = await self.db.execute(query)
        ids: list[int] = []
        for company_id in result.scalars().all():
            if company_id not in ids:
                ids.append(company_id)
        return ids

    async def _executed_companies(self, rule: FollowupRule) -> set[int]:
        result = await self.db.execute(
            select(FollowupExecution.company_id).where(FollowupExecution.rule_id == rule.id)
        )
        return set(result.scalars().all())

    async def _send_email(self, rule: FollowupRule, company: Company) -> tuple[ExecutionResult, dict]:
        config = rule.action_config or {}
        if not company.email:
            return ExecutionResult.SKIPPED, {"reason": "Company has no email address"}

        template = None
        if config.get("template_id"):
            template = await self.db.get(DocumentTemplate, int(config["template_id"]))
        project = await self.db.get(Project, company.project_id) if company.project_id else None
        values = default_values(company, project, today=local_today())

        if template is not None:
            subject_source = template.subject or DEFAULT_EMAIL_SUBJECT
            body_source = template.body
        else:
            subject_source = config.get("subject", DEFAULT_EMAIL_SUBJECT)
            body_source = config.get("body", DEFAULT_EMAIL_BODY)
        subject, _ = render(subject_source, values)
        body, _ = render(body_source, values)

        send = DocumentSend(
            template_id=template.id if template else None,
            company_id=company.id,
            project_id=company.project_id,
            channel=SendChannel.EMAIL,
            recipient=company.email,
            subject=subject,
            body=body,
            status=SendStatus.DRAFT,
        )
        self.db.add(send)
        await self.db.flush()

        delivered = await dispatch_send(self.db, send, self.email_service)
        details = {"send_id": send.id}
        if not delivered:
            details["error"] = send.error
            return ExecutionResult.FAILED, details
        return ExecutionResult.SUCCESS, details

    async def _schedule_call(self, rule: FollowupRule, company: Company) -> tuple[ExecutionResult, dict]:
        config = rule.action_config or {}
        days_ahead = int(config.get("days_ahead", 1))
        day = local_today() + timedelta(days=days_ahead)
        scheduled_at = datetime(day.year, day.month, day.day, int(config.get("hour", DEFAULT_CALL_HOUR)))
        appointment = Appointment(
            company_id=company.id,
            project_id=company.project_id,
            operator_id=config.get("operator_id"),
            scheduled_at=scheduled_at,
            duration_minutes=int(config.get("duration_minutes", 30)),
            meeting_type=MeetingType.PHONE,
            status=AppointmentStatus.TENTATIVE,
            notes=f"フォローアップルール「{rule.name}」により自動作成",
        )
        self.db.add(appointment)
        await self.db.flush()
        return ExecutionResult.SUCCESS, {"appointment_id": appointment.id}

    async def _run_action(self, rule: FollowupRule, company: Company) -> tuple[ExecutionResult, dict]:
        config = rule.action_config or {}

        if rule.action_type == FollowupAction.SEND_EMAIL:
            return await self._send_email(rule, company)

        if rule.action_type == FollowupAction.ALERT_MANAGER:
            notification = await notify(
                self.db,
                NotificationType.ALERT,
                title=f"フォローアップ: {rule.name}",
                message=config.get("message") or f"{company.name} へのフォローアップが必要です",
                data={"rule_id": rule.id, "company_id": company.id},
            )
            self.unpublished.append(notification)
            return ExecutionResult.SUCCESS, {"notification_id": notification.id}

        if rule.action_type == FollowupAction.CREATE_TASK:
            notification = await notify(
                self.db,
                NotificationType.SYSTEM,
                title=f"タスク: {company.name}",
                message=config.get("message") or f"{company.name} に連絡してください",
                operator_id=config.get("operator_id"),
                data={"rule_id": rule.id, "company_id": company.id, "task": True},
            )
            self.unpublished.append(notification)
            return ExecutionResult.SUCCESS, {"notification_id": notification.id}

        if rule.action_type == FollowupAction.SCHEDULE_CALL:
            return await self._schedule_call(rule, company)

        return ExecutionResult.SKIPPED, {"reason": "LINE delivery is not configured"}

    async def evaluate_rule(self, rule: FollowupRule, now: datetime | None = None) -> list[FollowupExecution]:
        now = now or datetime.utcnow()
        if rule.is_exhausted:
            return []

        done = await self._executed_companies(rule)
        executions = []
        for company_id in await self._candidates(rule, now):
            if rule.is_exhausted:
                break
            if company_id in done:
                continue
            company = await self.db.get(Company, company_id)
            if company is None:
                continue

            try:
                result, details = await self._run_action(rule, company)
            except Exception as e:
                logger.error(f"Followup rule {rule.id} failed for company {company_id}: {e}")
                result, details = ExecutionResult.FAILED, {"error": str(e)}

            execution = FollowupExecution(
                rule_id=rule.id,
                company_id=company_id,
                result=result,
                details=details,
                executed_at=now,
            )
            self.db.add(execution)
            executions.append(execution)
            if result != ExecutionResult.SKIPPED:
                rule.execution_count = (rule.execution_count or 0) + 1

        rule.last_run_at = now
        return executions

    async def evaluate_rules(self, project_id: int | None = None) -> dict[str, int]:
        query = select(FollowupRule).where(FollowupRule.is_active == True)  # noqa: E712
        if project_id is not None:
            query = query.where(FollowupRule.project_id == project_id)
        result = await self.db.execute(query.order_by(FollowupRule.id))
        rules = result.scalars().all()

        executions: list[FollowupExecution] = []
        for rule in rules:
            executions.extend(await self.evaluate_rule(rule))

        await self.db.commit()
        for notification in self.unpublished:
            await publish_notification(notification)
        self.unpublished.clear()

        summary = {
            "rules_evaluated": len(rules),
            "executions": len(executions),
            "succeeded": sum(1 for e in executions if e.result == ExecutionResult.SUCCESS),
            "failed": sum(1 for e in executions if e.result == ExecutionResult.FAILED),
            "skipped": sum(1 for e in executions if e.result == ExecutionResult.SKIPPED),
        }
        if executions:
            logger.info(f"Followup rules executed: {summary}")
        return summary
