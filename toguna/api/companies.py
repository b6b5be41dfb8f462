"""Prospect company API endpoints."""

import csv
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, Response, UploadFile
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from toguna.api.auth import Director
from toguna.api.exports import csv_response
from toguna.core.company_csv import decode_upload, parse_company_csv, template_csv
from toguna.core.compliance import record_audit
from toguna.services.database import get_db
from toguna.models.company import Company, CompanyRank, CompanyStatus
from toguna.models.project import Project
from toguna.schemas.company import (
    CompanyCreate,
    CompanyUpdate,
    CompanyResponse,
    CompanyImportRequest,
    CompanyImportResponse,
    CompanyUploadResponse,
)

router = APIRouter()


async def get_company_or_404(db: AsyncSession, company_id: int) -> Company:
    company = await db.get(Company, company_id)
    if not company:
        raise HTTPException(status_code=404, detail="Company not found")
    return company


async def add_companies(
    db: AsyncSession,
    project_id: int,
    rows: list[dict],
    skip_duplicates: bool,
    source: str,
) -> tuple[int, int]:
    """Add prospects to a project. Returns (imported, skipped)."""
    result = await db.execute(select(Company.name).where(Company.project_id == project_id))
    known = {name.strip() for name in result.scalars().all()}

    imported = 0
    skipped = 0
    for values in rows:
        name = (values.get("name") or "").strip()
        if not name or (skip_duplicates and name in known):
            skipped += 1
            continue
        values = {**values, "name": name, "project_id": project_id}
        values["source"] = values.get("source") or source
        db.add(Company(**values))
        known.add(name)
        imported += 1
    return imported, skipped


@router.get("", response_model=list[CompanyResponse])
async def list_companies(
    db: Annotated[AsyncSession, Depends(get_db)],
    project_id: int | None = None,
    rank: CompanyRank | None = None,
    status: CompanyStatus | None = None,
    search: str | None = None,
    limit: int = 200,
    offset: int = 0,
) -> list[CompanyResponse]:
    """List prospects. `search` matches the company name."""
    query = select(Company).order_by(Company.rank, Company.created_at.desc())
    if project_id is not None:
        query = query.where(Company.project_id == project_id)
    if rank:
        query = query.where(Company.rank == rank)
    if status:
        query = query.where(Company.status == status)
    if search:
        query = query.where(Company.name.ilike(f"%{search}%"))

    result = await db.execute(query.offset(offset).limit(limit))
    return [CompanyResponse.model_validate(c) for c in result.scalars().all()]


@router.post("/import", response_model=CompanyImportResponse)
async def import_companies(
    data: CompanyImportRequest,
    request: Request,
    director: Director,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> CompanyImportResponse:
    """Bulk import prospects into a project, optionally skipping known names."""
    if not await db.get(Project, data.project_id):
        raise HTTPException(status_code=404, detail="Project not found")

    imported, skipped = await add_companies(
        db,
        data.project_id,
        [item.model_dump() for item in data.companies],
        data.skip_duplicates,
        source="import",
    )

    record_audit(
        db, director, "import", "company", None,
        {"project_id": data.project_id, "imported": imported, "skipped": skipped},
        request,
    )
    await db.commit()
    return CompanyImportResponse(imported=imported, skipped=skipped)


@router.post("/upload", response_model=CompanyUploadResponse)
async def upload_companies(
    request: Request,
    director: Director,
    db: Annotated[AsyncSession, Depends(get_db)],
    file: UploadFile = File(...),
    project_id: int = Form(...),
    skip_duplicates: bool = Form(True),
) -> CompanyUploadResponse:
    """
    Import prospects from a CSV file.

    Headers may be Japanese or English (see the template). New rows start
    as rank B, status `new`.
    """
    if not await db.get(Project, project_id):
        raise HTTPException(status_code=404, detail="Project not found")

    try:
        rows = parse_company_csv(decode_upload(await file.read()))
    except (ValueError, csv.Error) as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not rows:
        raise HTTPException(status_code=400, detail="CSV has no data rows")

    imported, skipped = await add_companies(db, project_id, rows, skip_duplicates, source="csv")

    record_audit(
        db, director, "upload", "company", None,
        {"project_id": project_id, "filename": file.filename, "imported": imported, "skipped": skipped},
        request,
    )
    await db.commit()
    return CompanyUploadResponse(
        imported=imported,
        skipped=skipped,
        message=f"{imported}件の企業を登録しました",
    )


@router.get("/template")
async def download_template() -> Response:
    """Blank company list CSV with one sample row."""
    return csv_response(template_csv(), "company_template.csv")


@router.get("/{company_id}", response_model=CompanyResponse)
async def get_company(
    company_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> CompanyResponse:
    return CompanyResponse.model_validate(await get_company_or_404(db, company_id))


@router.post("", response_model=CompanyResponse, status_code=201)
async def create_company(
    data: CompanyCreate,
    request: Request,
    director: Director,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> CompanyResponse:
    values = data.model_dump()
    values["source"] = data.source or "manual"
    company = Company(**values)
    db.add(company)
    await db.flush()
    record_audit(db, director, "create", "company", company.id, data.model_dump(mode="json"), request)
    await db.commit()
    await db.refresh(company)
    return CompanyResponse.model_validate(company)


@router.patch("/{company_id}", response_model=CompanyResponse)
async def update_company(
    company_id: int,
    data: CompanyUpdate,
    request: Request,
    director: Director,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> CompanyResponse:
    company = await get_company_or_404(db, company_id)
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(company, field, value)

    record_audit(db, director, "update", "company", company.id, data.model_dump(mode="json", exclude_unset=True), request)
    await db.commit()
    await db.refresh(company)
    return CompanyResponse.model_validate(company)


@router.delete("/{company_id}")
async def delete_company(
    company_id: int,
    request: Request,
    director: Director,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    company = await get_company_or_404(db, company_id)
    await db.delete(company)
    record_audit(db, director, "delete", "company", company_id, None, request)
    await db.commit()
    return {"success": True}
