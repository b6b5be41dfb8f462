"""Compliance helpers: document retention, hashing, subsidy metrics and auditing."""

import hashlib
import logging
from datetime import date, datetime, timedelta

from fastapi import Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from toguna.config import get_settings
from toguna.models.call import CallLog, CallResult
from toguna.models.compliance import AuditLog, ComplianceDocument, DocumentStatus
from toguna.models.operator import Operator

settings = get_settings()
logger = logging.getLogger(__name__)

RETENTION_BUCKETS = (
    ("expired", 0),
    ("within_30", 30),
    ("within_60", 60),
    ("within_90", 90),
)


def compute_file_hash(content: str | bytes) -> str:
    if isinstance(content, str):
        content = content.encode("utf-8")
    return hashlib.sha256(content).hexdigest()


def add_years(day: date, years: int) -> date:
    """Shift by whole years; Feb 29 falls back to Feb 28."""
    try:
        return day.replace(year=day.year + years)
    except ValueError:
        return day.replace(year=day.year + years, day=28)


def retention_end_for(start: date) -> date:
    return add_years(start, settings.retention_years)


def retention_bucket(days_remaining: int) -> str | None:
    if days_remaining < 0:
        return "expired"
    for bucket, limit in RETENTION_BUCKETS[1:]:
        if days_remaining <= limit:
            return bucket
    return None


def retention_alerts(documents: list[ComplianceDocument], today: date) -> list[dict]:
    """Active documents expiring within 90 days or already expired."""
    alerts = []
    for document in documents:
        if document.status != DocumentStatus.ACTIVE:
            continue
        days_remaining = (document.retention_end - today).days
        bucket = retention_bucket(days_remaining)
        if bucket is None:
            continue
        alerts.append({
            "document": document,
            "days_remaining": days_remaining,
            "bucket": bucket,
        })
    alerts.sort(key=lambda alert: alert["days_remaining"])
    return alerts


def count_buckets(alerts: list[dict]) -> dict[str, int]:
    counts = {bucket: 0 for bucket, _ in RETENTION_BUCKETS}
    for alert in alerts:
        counts[alert["bucket"]] += 1
    return counts


async def subsidy_metrics(
    db: AsyncSession,
    period_start: date,
    period_end: date,
    project_id: int | None = None,
) -> tuple[dict, dict]:
    """Call metrics and per-operator productivity for a reporting period."""
    start = datetime.combine(period_start, datetime.min.time())
    end = datetime.combine(period_end + timedelta(days=1), datetime.min.time())
    query = select(CallLog).where(CallLog.called_at >= start, CallLog.called_at < end)
    if project_id is not None:
        query = query.where(CallLog.project_id == project_id)
    result = await db.execute(query)
    calls = result.scalars().all()

    total_calls = len(calls)
    appointments = sum(1 for c in calls if c.result == CallResult.APPOINTMENT)
    metrics = {
        "total_calls": total_calls,
        "appointments": appointments,
        "appointment_rate": round(appointments / total_calls * 100, 2) if total_calls else 0.0,
        "period": f"{period_start.isoformat()} - {period_end.isoformat()}",
    }

    per_operator: dict[int, dict] = {}
    for call in calls:
        row = per_operator.setdefault(call.operator_id, {"calls": 0, "appointments": 0, "talk_seconds": 0})
        row["calls"] += 1
        row["talk_seconds"] += call.duration or 0
        if call.result == CallResult.APPOINTMENT:
            row["appointments"] += 1

    names: dict[int, str] = {}
    if per_operator:
        result = await db.execute(select(Operator).where(Operator.id.in_(per_operator)))
        names = {op.id: op.name for op in result.scalars().all()}

    days = (period_end - period_start).days + 1
    operators = []
    for operator_id, row in sorted(per_operator.items()):
        operators.append({
            "operator_id": operator_id,
            "operator_name": names.get(operator_id),
            "calls": row["calls"],
            "appointments": row["appointments"],
            "calls_per_day": round(row["calls"] / days, 2),
            "talk_hours": round(row["talk_seconds"] / 3600, 2),
        })
    productivity = {
        "period_days": days,
        "operator_count": len(operators),
        "calls_per_operator": round(total_calls / len(operators), 2) if operators else 0.0,
        "operators": operators,
    }
    return metrics, productivity


def record_audit(
    db: AsyncSession,
    operator: Operator | None,
    action: str,
    entity_type: str,
    entity_id: int | None = None,
    changes: dict | None = None,
    request: Request | None = None,
) -> AuditLog:
    """Stage an audit entry in the caller's transaction."""
    entry = AuditLog(
        operator_id=operator.id if operator else None,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        changes=changes,
    )
    if request is not None:
        entry.ip_address = request.client.host if request.client else None
        entry.user_agent = request.headers.get("user-agent")
    db.add(entry)
    return entry
