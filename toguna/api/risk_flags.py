"""Company risk flag API endpoints."""

import logging
from typing import Annotated, Sequence

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from toguna.api.auth import Director
from toguna.core import risk_flags
from toguna.core.risk_flags import FLAG_TYPE_LABELS, FlagSort, FlagState
from toguna.services.database import get_db
from toguna.models.company import Company
from toguna.models.project import Project
from toguna.models.risk import CompanyRiskFlag, RiskFlagType, RiskSeverity
from toguna.schemas.risk import (
    RiskFlagCreate,
    RiskFlagResponse,
    RiskFlagSummary,
    RiskFlagListResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter()


async def to_responses(db: AsyncSession, flags: Sequence[CompanyRiskFlag]) -> list[RiskFlagResponse]:
    company_ids = {f.company_id for f in flags}
    names: dict[int, str] = {}
    if company_ids:
        result = await db.execute(select(Company.id, Company.name).where(Company.id.in_(company_ids)))
        names = dict(result.all())

    responses = []
    for flag in flags:
        response = RiskFlagResponse.model_validate(flag)
        response.company_name = names.get(flag.company_id)
        response.flag_type_label = FLAG_TYPE_LABELS[flag.flag_type]
        responses.append(response)
    return responses


@router.get("", response_model=RiskFlagListResponse)
async def list_risk_flags(
    db: Annotated[AsyncSession, Depends(get_db)],
    project_id: int | None = None,
    company_id: int | None = None,
    flag_type: RiskFlagType | None = None,
    severity: RiskSeverity | None = None,
    state: FlagState = FlagState.ALL,
    sort: FlagSort = FlagSort.DETECTED_AT,
) -> RiskFlagListResponse:
    """Flags on a project's (or one company's) prospects. The summary ignores the filters."""
    query = select(CompanyRiskFlag)
    if project_id is not None:
        if not await db.get(Project, project_id):
            raise HTTPException(status_code=404, detail="Project not found")
        query = query.join(Company, Company.id == CompanyRiskFlag.company_id).where(
            Company.project_id == project_id
        )
    if company_id is not None:
        query = query.where(CompanyRiskFlag.company_id == company_id)

    result = await db.execute(query)
    flags = result.scalars().all()

    shown = risk_flags.sort_flags(risk_flags.filter_flags(flags, flag_type, severity, state), sort)
    return RiskFlagListResponse(
        flags=await to_responses(db, shown),
        summary=RiskFlagSummary(**risk_flags.summarize(flags)),
    )


@router.post("", response_model=RiskFlagResponse, status_code=201)
async def create_risk_flag(
    data: RiskFlagCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> RiskFlagResponse:
    if not await db.get(Company, data.company_id):
        raise HTTPException(status_code=404, detail="Company not found")

    flag = CompanyRiskFlag(**data.model_dump(), is_active=True)
    db.add(flag)
    await db.commit()
    await db.refresh(flag)
    logger.info(f"Risk flag {flag.id} ({flag.severity.value}) raised on company {flag.company_id}")
    return (await to_responses(db, [flag]))[0]


@router.post("/{flag_id}/toggle", response_model=RiskFlagResponse)
async def toggle_risk_flag(
    flag_id: int,
    director: Director,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> RiskFlagResponse:
    """Resolve an open flag, or reopen a resolved one."""
    flag = await db.get(CompanyRiskFlag, flag_id)
    if not flag:
        raise HTTPException(status_code=404, detail="Risk flag not found")

    flag.toggle(director.id)
    await db.commit()
    await db.refresh(flag)
    return (await to_responses(db, [flag]))[0]
