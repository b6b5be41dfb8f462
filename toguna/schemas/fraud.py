"""Fraud detection schemas."""

from datetime import datetime

from pydantic import BaseModel

from toguna.models.fraud import FraudType, FraudStatus


class FraudScoreResponse(BaseModel):
    id: int
    operator_id: int
    fraud_type: FraudType
    risk_score: int
    risk_level: str
    evidence: dict | None = None
    status: FraudStatus
    notes: str | None = None
    reviewed_by: int | None = None
    reviewed_at: datetime | None = None
    detected_at: datetime

    operator_name: str | None = None

    class Config:
        from_attributes = True


class FraudStats(BaseModel):
    total: int
    pending: int
    confirmed: int
    high_risk: int


class FraudListResponse(BaseModel):
    alerts: list[FraudScoreResponse]
    stats: FraudStats


class FraudStatusUpdate(BaseModel):
    status: FraudStatus
    notes: str | None = None


class FraudScanResponse(BaseModel):
    operators_scanned: int
    flags_created: list[FraudScoreResponse]
