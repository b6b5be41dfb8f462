"""Project health checks that raise pivot alerts."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from toguna.models.call import CallLog, CallResult
from toguna.models.project import Project, ProjectStatus
from toguna.models.quality import (
    PivotAlert,
    PivotAlertType,
    PivotAlertSeverity,
    PivotAlertStatus,
)

logger = logging.getLogger(__name__)

LOW_RATE_MIN_CALLS = 50
HIGH_REJECTION_MIN_CALLS = 30
HIGH_REJECTION_RATIO = 0.7
DEFAULT_MIN_APPOINTMENT_RATE = 50.0

LOW_RATE_SUGGESTIONS = [
    "ターゲット見直し: リスト属性を再検討する",
    "スクリプト改善: 断り理由を分析してスクリプトを修正",
    "時間帯変更: 架電時間帯を変更して接続率を改善",
]
HIGH_REJECTION_SUGGESTIONS = [
    "断り理由の構造化分析: 断り文句をカテゴリ分けして主原因を特定",
    "価格見直し: 価格が主因の場合は料金プランの再検討",
]


def evaluate_metrics(
    total_calls: int,
    appointments: int,
    rejections: int,
    min_appointment_rate: float | None,
) -> list[dict]:
    """Return the alert payloads a project's numbers warrant."""
    alerts = []
    appointment_rate = appointments / total_calls * 100 if total_calls else 0.0
    threshold = min_appointment_rate or DEFAULT_MIN_APPOINTMENT_RATE

    if total_calls >= LOW_RATE_MIN_CALLS and appointment_rate < threshold:
        alerts.append({
            "alert_type": PivotAlertType.LOW_RATE,
            "severity": PivotAlertSeverity.CRITICAL,
            "message": "アポ率が撤退ライン以下です。ターゲットまたはスクリプトの見直しを推奨します。",
            "metrics": {
                "appointment_rate": round(appointment_rate, 1),
                "total_calls": total_calls,
                "appointments": appointments,
                "min_rate": threshold,
            },
            "suggestions": LOW_RATE_SUGGESTIONS,
        })

    if total_calls >= HIGH_REJECTION_MIN_CALLS and rejections / total_calls > HIGH_REJECTION_RATIO:
        alerts.append({
            "alert_type": PivotAlertType.HIGH_REJECTION,
            "severity": PivotAlertSeverity.WARNING,
            "message": "断り率が70%を超えています。断り理由の分析を推奨します。",
            "metrics": {
                "rejection_rate": round(rejections / total_calls * 100, 1),
                "rejections": rejections,
                "total_calls": total_calls,
                "max_rejection_rate": HIGH_REJECTION_RATIO * 100,
            },
            "suggestions": HIGH_REJECTION_SUGGESTIONS,
        })

    return alerts


class PivotMonitor:
    """Check active projects and record new pivot alerts."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def check_project(self, project: Project) -> list[PivotAlert]:
        result = await self.db.execute(
            select(CallLog.result).where(CallLog.project_id == project.id)
        )
        results = result.scalars().all()
        total_calls = len(results)
        appointments = sum(1 for r in results if r == CallResult.APPOINTMENT)
        rejections = sum(1 for r in results if r in (CallResult.REJECTED, CallResult.NG))

        payloads = evaluate_metrics(total_calls, appointments, rejections, project.min_appointment_rate)
        if not payloads:
            return []

        result = await self.db.execute(
            select(PivotAlert.alert_type).where(
                PivotAlert.project_id == project.id,
                PivotAlert.status == PivotAlertStatus.ACTIVE,
            )
        )
        open_types = set(result.scalars().all())

        created = []
        for payload in payloads:
            if payload["alert_type"] in open_types:
                continue
            alert = PivotAlert(project_id=project.id, **payload)
            self.db.add(alert)
            created.append(alert)
        return created

    async def check_all(self, project_id: int | None = None) -> tuple[int, list[PivotAlert]]:
        query = select(Project).where(Project.status == ProjectStatus.ACTIVE)
        if project_id is not None:
            query = select(Project).where(Project.id == project_id)
        result = await self.db.execute(query)
        projects = result.scalars().all()

        created: list[PivotAlert] = []
        for project in projects:
            created.extend(await self.check_project(project))

        if created:
            await self.db.commit()
            for alert in created:
                await self.db.refresh(alert)
            logger.info(f"Created {len(created)} pivot alerts")
        return len(projects), created
