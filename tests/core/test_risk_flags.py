"""Tests for risk flag filtering and ordering."""

from datetime import datetime
from types import SimpleNamespace

from toguna.core.risk_flags import FlagSort, FlagState, filter_flags, sort_flags, summarize
from toguna.models.risk import CompanyRiskFlag, RiskFlagType, RiskSeverity


def flag(title, severity, day, active=True, flag_type=RiskFlagType.OTHER):
    return SimpleNamespace(
        title=title,
        severity=severity,
        flag_type=flag_type,
        is_active=active,
        detected_at=datetime(2026, 10, day),
    )


FLAGS = [
    flag("old-high", RiskSeverity.HIGH, 1),
    flag("new-low", RiskSeverity.LOW, 10, active=False),
    flag("mid-critical", RiskSeverity.CRITICAL, 5, flag_type=RiskFlagType.LAWSUIT),
    flag("new-high", RiskSeverity.HIGH, 8),
]


def test_newest_first():
    assert [f.title for f in sort_flags(FLAGS, FlagSort.DETECTED_AT)] == [
        "new-low", "new-high", "mid-critical", "old-high",
    ]


def test_severity_order_keeps_newest_first_within_a_level():
    assert [f.title for f in sort_flags(FLAGS, FlagSort.SEVERITY)] == [
        "mid-critical", "new-high", "old-high", "new-low",
    ]


def test_filters_combine():
    assert [f.title for f in filter_flags(FLAGS, state=FlagState.RESOLVED)] == ["new-low"]
    assert [f.title for f in filter_flags(FLAGS, severity=RiskSeverity.HIGH, state=FlagState.ACTIVE)] == [
        "old-high", "new-high",
    ]
    assert [f.title for f in filter_flags(FLAGS, flag_type=RiskFlagType.LAWSUIT)] == ["mid-critical"]


def test_summary():
    assert summarize(FLAGS) == {"total": 4, "critical": 1, "unresolved": 3}


def test_toggle_resolves_and_reopens():
    risk = CompanyRiskFlag(company_id=1, title="x", is_active=True)

    risk.toggle(7)
    assert risk.is_active is False
    assert risk.resolved_by == 7
    assert risk.resolved_at is not None

    risk.toggle(7)
    assert risk.is_active is True
    assert risk.resolved_by is None
    assert risk.resolved_at is None
