"""Operator fraud detection API endpoints."""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from toguna.api.auth import Director
from toguna.core.compliance import record_audit
from toguna.core.fraud_detector import FraudDetector
from toguna.services.database import get_db
from toguna.models.fraud import FraudStatus, OperatorFraudScore
from toguna.models.operator import Operator
from toguna.schemas.fraud import (
    FraudScoreResponse,
    FraudStats,
    FraudListResponse,
    FraudStatusUpdate,
    FraudScanResponse,
)

router = APIRouter()


async def fraud_responses(db: AsyncSession, flags) -> list[FraudScoreResponse]:
    operator_ids = {f.operator_id for f in flags}
    names: dict[int, str] = {}
    if operator_ids:
        result = await db.execute(select(Operator.id, Operator.name).where(Operator.id.in_(operator_ids)))
        names = dict(result.all())

    responses = []
    for flag in flags:
        response = FraudScoreResponse.model_validate(flag)
        response.operator_name = names.get(flag.operator_id)
        responses.append(response)
    return responses


@router.get("", response_model=FraudListResponse)
async def list_fraud_scores(
    db: Annotated[AsyncSession, Depends(get_db)],
    status: FraudStatus | None = None,
) -> FraudListResponse:
    """Fraud flags, riskiest first. Stats always cover every flag."""
    result = await db.execute(
        select(OperatorFraudScore).order_by(OperatorFraudScore.risk_score.desc())
    )
    flags = result.scalars().all()

    stats = FraudStats(
        total=len(flags),
        pending=sum(1 for f in flags if f.status == FraudStatus.PENDING),
        confirmed=sum(1 for f in flags if f.status == FraudStatus.CONFIRMED),
        high_risk=sum(1 for f in flags if f.risk_level == "high"),
    )
    if status:
        flags = [f for f in flags if f.status == status]

    return FraudListResponse(alerts=await fraud_responses(db, flags), stats=stats)


@router.post("/scan", response_model=FraudScanResponse)
async def scan(
    db: Annotated[AsyncSession, Depends(get_db)],
    days: int = Query(7, ge=1, le=90),
) -> FraudScanResponse:
    """Scan recent activity of active operators for suspicious patterns."""
    operators_scanned, created = await FraudDetector(db).scan(days)
    return FraudScanResponse(
        operators_scanned=operators_scanned,
        flags_created=await fraud_responses(db, created),
    )


@router.patch("/{fraud_id}", response_model=FraudScoreResponse)
async def update_status(
    fraud_id: int,
    data: FraudStatusUpdate,
    request: Request,
    director: Director,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> FraudScoreResponse:
    flag = await db.get(OperatorFraudScore, fraud_id)
    if not flag:
        raise HTTPException(status_code=404, detail="Fraud score not found")

    previous = flag.status
    flag.status = data.status
    if data.notes is not None:
        flag.notes = data.notes
    flag.reviewed_by = director.id
    flag.reviewed_at = datetime.utcnow()

    record_audit(
        db, director, "update_status", "fraud_score", flag.id,
        {"status": [previous.value, data.status.value], "notes": data.notes},
        request,
    )
    await db.commit()
    await db.refresh(flag)
    return (await fraud_responses(db, [flag]))[0]
