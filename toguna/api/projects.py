"""Project API endpoints: CRUD, members and progress stats."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from toguna.api.auth import Director
from toguna.core.clock import local_day_bounds_utc, local_today
from toguna.core.compliance import record_audit
from toguna.services.database import get_db
from toguna.models.call import CallLog, CallResult
from toguna.models.company import Company, CompanyStatus
from toguna.models.operator import Operator
from toguna.models.project import Project, ProjectMember, ProjectStatus
from toguna.schemas.project import (
    ProjectCreate,
    ProjectUpdate,
    ProjectResponse,
    ProjectMemberCreate,
    ProjectMemberResponse,
    ProjectStats,
)

router = APIRouter()

CLOSED_COMPANY_STATUSES = (CompanyStatus.COMPLETED, CompanyStatus.NG)


async def get_project_or_404(db: AsyncSession, project_id: int) -> Project:
    project = await db.get(Project, project_id)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    return project


async def compute_project_stats(db: AsyncSession, project_id: int) -> ProjectStats:
    """Progress of one project. "Today" is the local business day."""
    result = await db.execute(select(CallLog).where(CallLog.project_id == project_id))
    calls = result.scalars().all()

    day_start, day_end = local_day_bounds_utc(local_today())
    today_calls = [c for c in calls if day_start <= c.called_at < day_end]
    total = len(calls)
    appointments = sum(1 for c in calls if c.result == CallResult.APPOINTMENT)

    remaining = await db.scalar(
        select(func.count()).select_from(Company).where(
            Company.project_id == project_id,
            Company.status.not_in(CLOSED_COMPANY_STATUSES),
        )
    )
    active_operators = await db.scalar(
        select(func.count()).select_from(ProjectMember).where(
            ProjectMember.project_id == project_id,
            ProjectMember.is_active == True,  # noqa: E712
        )
    )

    return ProjectStats(
        project_id=project_id,
        total_calls=total,
        total_appointments=appointments,
        appointment_rate=round(appointments / total * 100, 2) if total else 0.0,
        today_calls=len(today_calls),
        today_appointments=sum(1 for c in today_calls if c.result == CallResult.APPOINTMENT),
        remaining_companies=remaining or 0,
        active_operators=active_operators or 0,
    )


@router.get("", response_model=list[ProjectResponse])
async def list_projects(
    db: Annotated[AsyncSession, Depends(get_db)],
    status: ProjectStatus | None = None,
    client_id: int | None = None,
) -> list[ProjectResponse]:
    query = select(Project).order_by(Project.created_at.desc())
    if status:
        query = query.where(Project.status == status)
    if client_id is not None:
        query = query.where(Project.client_id == client_id)
    result = await db.execute(query)
    return [ProjectResponse.model_validate(p) for p in result.scalars().all()]


# =============================================================================
# STATS ENDPOINTS (must come before parametric routes)
# =============================================================================

@router.get("/stats", response_model=list[ProjectStats])
async def get_multi_project_stats(
    db: Annotated[AsyncSession, Depends(get_db)],
    ids: list[int] = Query(..., description="Project ids"),
) -> list[ProjectStats]:
    """Stats for several projects at once, in the order requested."""
    return [await compute_project_stats(db, project_id) for project_id in ids]


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(
    project_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ProjectResponse:
    return ProjectResponse.model_validate(await get_project_or_404(db, project_id))


@router.get("/{project_id}/stats", response_model=ProjectStats)
async def get_project_stats(
    project_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ProjectStats:
    await get_project_or_404(db, project_id)
    return await compute_project_stats(db, project_id)


@router.post("", response_model=ProjectResponse, status_code=201)
async def create_project(
    data: ProjectCreate,
    request: Request,
    director: Director,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ProjectResponse:
    project = Project(**data.model_dump())
    db.add(project)
    await db.flush()
    record_audit(db, director, "create", "project", project.id, data.model_dump(mode="json"), request)
    await db.commit()
    await db.refresh(project)
    return ProjectResponse.model_validate(project)


@router.patch("/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: int,
    data: ProjectUpdate,
    request: Request,
    director: Director,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ProjectResponse:
    project = await get_project_or_404(db, project_id)
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(project, field, value)

    record_audit(db, director, "update", "project", project.id, data.model_dump(mode="json", exclude_unset=True), request)
    await db.commit()
    await db.refresh(project)
    return ProjectResponse.model_validate(project)


@router.delete("/{project_id}")
async def delete_project(
    project_id: int,
    request: Request,
    director: Director,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """Delete a project that has no companies yet."""
    project = await get_project_or_404(db, project_id)
    company_count = await db.scalar(
        select(func.count()).select_from(Company).where(Company.project_id == project_id)
    )
    if company_count:
        raise HTTPException(status_code=400, detail="Project still has companies; archive it instead")

    await db.delete(project)
    record_audit(db, director, "delete", "project", project_id, None, request)
    await db.commit()
    return {"success": True}


# =============================================================================
# MEMBERS
# =============================================================================

@router.get("/{project_id}/members", response_model=list[ProjectMemberResponse])
async def list_members(
    project_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    include_inactive: bool = False,
) -> list[ProjectMemberResponse]:
    await get_project_or_404(db, project_id)
    query = select(ProjectMember).where(ProjectMember.project_id == project_id)
    if not include_inactive:
        query = query.where(ProjectMember.is_active == True)  # noqa: E712
    result = await db.execute(query.order_by(ProjectMember.joined_at))
    return [ProjectMemberResponse.model_validate(m) for m in result.scalars().all()]


@router.post("/{project_id}/members", response_model=ProjectMemberResponse, status_code=201)
async def add_member(
    project_id: int,
    data: ProjectMemberCreate,
    request: Request,
    director: Director,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ProjectMemberResponse:
    """Assign an operator. Re-adding a removed member reactivates it."""
    await get_project_or_404(db, project_id)
    if not await db.get(Operator, data.operator_id):
        raise HTTPException(status_code=404, detail="Operator not found")

    result = await db.execute(
        select(ProjectMember).where(
            ProjectMember.project_id == project_id,
            ProjectMember.operator_id == data.operator_id,
        )
    )
    member = result.scalar_one_or_none()
    if member and member.is_active:
        raise HTTPException(status_code=400, detail="Operator is already a member")

    if member:
        member.is_active = True
        member.role = data.role
    else:
        member = ProjectMember(project_id=project_id, operator_id=data.operator_id, role=data.role)
        db.add(member)

    await db.flush()
    record_audit(db, director, "add_member", "project", project_id, data.model_dump(mode="json"), request)
    await db.commit()
    await db.refresh(member)
    return ProjectMemberResponse.model_validate(member)


@router.delete("/{project_id}/members/{operator_id}")
async def remove_member(
    project_id: int,
    operator_id: int,
    request: Request,
    director: Director,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    result = await db.execute(
        select(ProjectMember).where(
            ProjectMember.project_id == project_id,
            ProjectMember.operator_id == operator_id,
            ProjectMember.is_active == True,  # noqa: E712
        )
    )
    member = result.scalar_one_or_none()
    if not member:
        raise HTTPException(status_code=404, detail="Member not found")

    member.is_active = False
    record_audit(db, director, "remove_member", "project", project_id, {"operator_id": operator_id}, request)
    await db.commit()
    return {"success": True}
