"""Dashboard schemas."""

from pydantic import BaseModel


class CallCounts(BaseModel):
    today: int
    total: int


class AppointmentCounts(BaseModel):
    today: int
    total: int
    rate: float


class OperatorCounts(BaseModel):
    total: int
    active: int


class CompanyCounts(BaseModel):
    total: int
    by_rank: dict[str, int]


class DashboardSummary(BaseModel):
    """Director dashboard summary."""

    calls: CallCounts
    appointments: AppointmentCounts
    operators: OperatorCounts
    companies: CompanyCounts
    clients_total: int
    active_pivot_alerts: int
    pending_fraud_flags: int
    retention_alerts: int


class OperatorRankingItem(BaseModel):
    operator_id: int
    operator_name: str
    calls: int
    appointments: int
    appointment_rate: float


class DailyCallPoint(BaseModel):
    date: str
    calls: int
    appointments: int


class DashboardStats(BaseModel):
    """Time-series and ranking over a window."""

    period_days: int
    daily: list[DailyCallPoint]
    results: dict[str, int]
    operator_ranking: list[OperatorRankingItem]
