"""Tests for retention, hashing and subsidy metrics."""

from datetime import date, datetime
from types import SimpleNamespace

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from toguna.core.compliance import (
    add_years,
    compute_file_hash,
    count_buckets,
    retention_alerts,
    retention_bucket,
    retention_end_for,
    subsidy_metrics,
)
from toguna.models.call import CallLog, CallResult
from toguna.models.company import Company
from toguna.models.compliance import DocumentStatus


def test_file_hash_is_sha256_hex():
    digest = compute_file_hash("契約書")
    assert len(digest) == 64
    assert digest == compute_file_hash("契約書".encode("utf-8"))
    assert digest != compute_file_hash("契約書 改")


def test_add_years_handles_leap_day():
    assert add_years(date(2024, 2, 29), 5) == date(2029, 2, 28)
    assert add_years(date(2024, 2, 29), 4) == date(2028, 2, 29)


def test_default_retention_is_five_years():
    assert retention_end_for(date(2026, 4, 1)) == date(2031, 4, 1)


@pytest.mark.parametrize("days,bucket", [
    (-1, "expired"),
    (0, "within_30"),
    (30, "within_30"),
    (31, "within_60"),
    (90, "within_90"),
    (91, None),
])
def test_retention_bucket(days, bucket):
    assert retention_bucket(days) == bucket


def test_retention_alerts_skip_archived_and_sort_by_urgency():
    today = date(2026, 10, 18)
    documents = [
        SimpleNamespace(id=1, status=DocumentStatus.ACTIVE, retention_end=date(2026, 12, 1)),
        SimpleNamespace(id=2, status=DocumentStatus.ACTIVE, retention_end=date(2026, 10, 1)),
        SimpleNamespace(id=3, status=DocumentStatus.ARCHIVED, retention_end=date(2026, 10, 1)),
        SimpleNamespace(id=4, status=DocumentStatus.ACTIVE, retention_end=date(2028, 1, 1)),
    ]

    alerts = retention_alerts(documents, today)

    assert [a["document"].id for a in alerts] == [2, 1]
    assert alerts[0]["bucket"] == "expired"
    assert alerts[1]["bucket"] == "within_60"
    assert count_buckets(alerts) == {"expired": 1, "within_30": 0, "within_60": 1, "within_90": 0}


@pytest.mark.asyncio
async def test_subsidy_metrics(db_session: AsyncSession, sample_project, operator):
    company = (await db_session.execute(select(Company))).scalars().first()
    results = [CallResult.APPOINTMENT, CallResult.REJECTED, CallResult.ABSENT, CallResult.APPOINTMENT]
    db_session.add_all([
        CallLog(
            company_id=company.id,
            operator_id=operator.id,
            project_id=sample_project.id,
            result=result,
            duration=900,
            called_at=datetime(2026, 9, 10 + i, 3),
        )
        for i, result in enumerate(results)
    ])
    db_session.add(CallLog(
        company_id=company.id,
        operator_id=operator.id,
        project_id=sample_project.id,
        result=CallResult.APPOINTMENT,
        duration=60,
        called_at=datetime(2026, 10, 2, 3),
    ))
    await db_session.commit()

    metrics, productivity = await subsidy_metrics(db_session, date(2026, 9, 1), date(2026, 9, 30))

    assert metrics["total_calls"] == 4
    assert metrics["appointments"] == 2
    assert metrics["appointment_rate"] == 50.0
    assert productivity["period_days"] == 30
    assert productivity["operators"] == [{
        "operator_id": operator.id,
        "operator_name": "佐藤 花子",
        "calls": 4,
        "appointments": 2,
        "calls_per_day": 0.13,
        "talk_hours": 1.0,
    }]
