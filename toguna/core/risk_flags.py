"""Company risk flags: filtering, ordering and summary counts."""

from datetime import datetime
from enum import Enum
from typing import Protocol, Sequence

from toguna.models.risk import RiskFlagType, RiskSeverity

SEVERITY_RANK = {
    RiskSeverity.CRITICAL: 4,
    RiskSeverity.HIGH: 3,
    RiskSeverity.MEDIUM: 2,
    RiskSeverity.LOW: 1,
}

FLAG_TYPE_LABELS = {
    RiskFlagType.LAWSUIT: "訴訟",
    RiskFlagType.FINANCIAL_WARNING: "財務警告",
    RiskFlagType.NEGATIVE_PRESS: "ネガティブ報道",
    RiskFlagType.EXECUTIVE_CHANGE: "経営陣変更",
    RiskFlagType.COMPLIANCE_ISSUE: "コンプライアンス問題",
    RiskFlagType.OTHER: "その他",
}


class FlagState(str, Enum):
    ALL = "all"
    ACTIVE = "active"
    RESOLVED = "resolved"


class FlagSort(str, Enum):
    DETECTED_AT = "detected_at"
    SEVERITY = "severity"


class _Flag(Protocol):
    flag_type: RiskFlagType
    severity: RiskSeverity
    is_active: bool
    detected_at: datetime


def filter_flags(
    flags: Sequence[_Flag],
    flag_type: RiskFlagType | None = None,
    severity: RiskSeverity | None = None,
    state: FlagState = FlagState.ALL,
) -> list:
    kept = []
    for flag in flags:
        if flag_type and flag.flag_type != flag_type:
            continue
        if severity and flag.severity != severity:
            continue
        if state == FlagState.ACTIVE and not flag.is_active:
            continue
        if state == FlagState.RESOLVED and flag.is_active:
            continue
        kept.append(flag)
    return kept


def sort_flags(flags: Sequence[_Flag], sort: FlagSort) -> list:
    """Newest first, or most severe first. Severity ties stay newest first."""
    newest = sorted(flags, key=lambda f: f.detected_at, reverse=True)
    if sort == FlagSort.SEVERITY:
        return sorted(newest, key=lambda f: SEVERITY_RANK[f.severity], reverse=True)
    return newest


def summarize(flags: Sequence[_Flag]) -> dict[str, int]:
    return {
        "total": len(flags),
        "critical": sum(1 for f in flags if f.severity == RiskSeverity.CRITICAL),
        "unresolved": sum(1 for f in flags if f.is_active),
    }
