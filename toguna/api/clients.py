"""Client (tenant) API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from toguna.api.auth import Director
from toguna.core.compliance import record_audit
from toguna.services.database import get_db
from toguna.models.client import Client, ClientStatus
from toguna.models.project import Project
from toguna.schemas.client import ClientCreate, ClientUpdate, ClientResponse

router = APIRouter()


async def get_client_or_404(db: AsyncSession, client_id: int) -> Client:
    client = await db.get(Client, client_id)
    if not client:
        raise HTTPException(status_code=404, detail="Client not found")
    return client


@router.get("", response_model=list[ClientResponse])
async def list_clients(
    db: Annotated[AsyncSession, Depends(get_db)],
    status: ClientStatus | None = None,
) -> list[ClientResponse]:
    """List clients, newest first."""
    query = select(Client).order_by(Client.created_at.desc())
    if status:
        query = query.where(Client.status == status)
    result = await db.execute(query)
    return [ClientResponse.model_validate(c) for c in result.scalars().all()]


@router.get("/{client_id}", response_model=ClientResponse)
async def get_client(
    client_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ClientResponse:
    return ClientResponse.model_validate(await get_client_or_404(db, client_id))


@router.post("", response_model=ClientResponse, status_code=201)
async def create_client(
    data: ClientCreate,
    request: Request,
    director: Director,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ClientResponse:
    client = Client(**data.model_dump())
    db.add(client)
    await db.flush()
    record_audit(db, director, "create", "client", client.id, data.model_dump(mode="json"), request)
    await db.commit()
    await db.refresh(client)
    return ClientResponse.model_validate(client)


@router.patch("/{client_id}", response_model=ClientResponse)
async def update_client(
    client_id: int,
    data: ClientUpdate,
    request: Request,
    director: Director,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ClientResponse:
    client = await get_client_or_404(db, client_id)
    changes = data.model_dump(exclude_unset=True)
    for field, value in changes.items():
        setattr(client, field, value)

    record_audit(db, director, "update", "client", client.id, data.model_dump(mode="json", exclude_unset=True), request)
    await db.commit()
    await db.refresh(client)
    return ClientResponse.model_validate(client)


@router.delete("/{client_id}")
async def delete_client(
    client_id: int,
    request: Request,
    director: Director,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """Delete a client that no longer owns any project."""
    client = await get_client_or_404(db, client_id)
    project_count = await db.scalar(
        select(func.count()).select_from(Project).where(Project.client_id == client_id)
    )
    if project_count:
        raise HTTPException(status_code=400, detail="Client still has projects")

    await db.delete(client)
    record_audit(db, director, "delete", "client", client_id, None, request)
    await db.commit()
    return {"success": True}
