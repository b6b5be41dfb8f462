"""Operator fraud heuristics over recorded call activity."""

import logging
import statistics
from datetime import datetime, timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from toguna.models.appointment import Appointment, AppointmentStatus
from toguna.models.call import CallLog, CallResult
from toguna.models.fraud import OperatorFraudScore, FraudType, OPEN_FRAUD_STATUSES
from toguna.models.operator import Operator, OperatorStatus

logger = logging.getLogger(__name__)

GHOST_MIN_CALLS = 10
GHOST_MAX_SECONDS = 10
GHOST_SHARE = 0.3

FAKE_APPOINTMENT_MIN = 3
FAKE_APPOINTMENT_SHARE = 0.5

TIME_FRAUD_MIN_CALLS = 20
TIME_FRAUD_MEDIAN_GAP_SECONDS = 15


def detect_ghost_calls(calls: list[CallLog]) -> dict | None:
    """Connected calls too short to contain a conversation."""
    if len(calls) < GHOST_MIN_CALLS:
        return None
    short = [c for c in calls if c.result != CallResult.ABSENT and c.duration < GHOST_MAX_SECONDS]
    share = len(short) / len(calls)
    if share < GHOST_SHARE:
        return None
    return {
        "risk_score": min(100, round(share * 100)),
        "evidence": {
            "total_calls": len(calls),
            "short_connected_calls": len(short),
            "share": round(share, 3),
            "sample_call_ids": [c.id for c in short[:10]],
        },
    }


def detect_fake_appointments(appointments: list[Appointment]) -> dict | None:
    """Booked meetings that mostly never take place."""
    if len(appointments) < FAKE_APPOINTMENT_MIN:
        return None
    failed = [
        a for a in appointments
        if a.status in (AppointmentStatus.NO_SHOW, AppointmentStatus.CANCELLED)
    ]
    share = len(failed) / len(appointments)
    if share < FAKE_APPOINTMENT_SHARE:
        return None
    return {
        "risk_score": min(100, round(share * 100)),
        "evidence": {
            "appointments": len(appointments),
            "cancelled_or_no_show": len(failed),
            "share": round(share, 3),
            "sample_appointment_ids": [a.id for a in failed[:10]],
        },
    }


def detect_time_fraud(calls: list[CallLog]) -> dict | None:
    """Call timestamps packed closer together than dialing allows."""
    if len(calls) < TIME_FRAUD_MIN_CALLS:
        return None
    stamps = sorted(c.called_at for c in calls)
    gaps = [(b - a).total_seconds() for a, b in zip(stamps, stamps[1:])]
    median_gap = statistics.median(gaps)
    if median_gap >= TIME_FRAUD_MEDIAN_GAP_SECONDS:
        return None
    risk = round(100 - median_gap / TIME_FRAUD_MEDIAN_GAP_SECONDS * 50)
    return {
        "risk_score": max(0, min(100, risk)),
        "evidence": {
            "total_calls": len(calls),
            "median_gap_seconds": round(median_gap, 1),
        },
    }


class FraudDetector:
    """Scan recent activity per operator and raise pending fraud flags."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _has_open_flag(self, operator_id: int, fraud_type: FraudType) -> bool:
        result = await self.db.execute(
            select(OperatorFraudScore.id).where(
                OperatorFraudScore.operator_id == operator_id,
                OperatorFraudScore.fraud_type == fraud_type,
                OperatorFraudScore.status.in_(OPEN_FRAUD_STATUSES),
            ).limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def scan(self, days: int = 7) -> tuple[int, list[OperatorFraudScore]]:
        since = datetime.utcnow() - timedelta(days=days)
        result = await self.db.execute(
            select(Operator).where(Operator.status == OperatorStatus.ACTIVE)
        )
        operators = result.scalars().all()

        created: list[OperatorFraudScore] = []
        for operator in operators:
            calls_result = await self.db.execute(
                select(CallLog).where(CallLog.operator_id == operator.id, CallLog.called_at >= since)
            )
            calls = list(calls_result.scalars().all())
            appt_result = await self.db.execute(
                select(Appointment).where(
                    Appointment.operator_id == operator.id,
                    Appointment.created_at >= since,
                )
            )
            appointments = list(appt_result.scalars().all())

            findings = {
                FraudType.GHOST_CALL: detect_ghost_calls(calls),
                FraudType.FAKE_APPOINTMENT: detect_fake_appointments(appointments),
                FraudType.TIME_FRAUD: detect_time_fraud(calls),
            }
            for fraud_type, finding in findings.items():
                if finding is None:
                    continue
                if await self._has_open_flag(operator.id, fraud_type):
                    continue
                flag = OperatorFraudScore(
                    operator_id=operator.id,
                    fraud_type=fraud_type,
                    risk_score=finding["risk_score"],
                    evidence=finding["evidence"],
                )
                self.db.add(flag)
                created.append(flag)

        if created:
            await self.db.commit()
            logger.warning(f"Fraud scan raised {len(created)} new flags")
        return len(operators), created
