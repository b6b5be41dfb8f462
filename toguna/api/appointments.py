"""Appointment API endpoints: booking, board and status transitions."""

import logging
from datetime import date
from typing import Annotated, Sequence

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from toguna.core import appointment_board
from toguna.core.appointment_board import DateRange
from toguna.api.auth import CurrentOperator, Director
from toguna.core.clock import local_now, to_local_naive
from toguna.services.database import get_db
from toguna.services.email_service import get_email_service
from toguna.services.google_calendar import GoogleCalendarService, build_appointment_event
from toguna.models.appointment import Appointment, AppointmentStatus
from toguna.models.company import Company
from toguna.models.operator import Operator
from toguna.schemas.appointment import (
    AppointmentCreate,
    AppointmentUpdate,
    AppointmentResponse,
    AppointmentBoardResponse,
    AppointmentGroup,
    AppointmentSummary,
)

logger = logging.getLogger(__name__)
router = APIRouter()


async def get_appointment_or_404(db: AsyncSession, appointment_id: int, operator: Operator) -> Appointment:
    """Load an appointment. Operators only reach their own; directors reach all."""
    appointment = await db.get(Appointment, appointment_id)
    if not appointment or (not operator.is_director and appointment.operator_id != operator.id):
        raise HTTPException(status_code=404, detail="Appointment not found")
    return appointment


def ensure_own_booking(operator: Operator, operator_id: int | None) -> None:
    if not operator.is_director and operator_id != operator.id:
        raise HTTPException(status_code=403, detail="Operators can only book their own appointments")


async def to_responses(
    db: AsyncSession,
    appointments: Sequence[Appointment],
) -> list[AppointmentResponse]:
    """Attach company and operator names for display."""
    company_ids = {a.company_id for a in appointments}
    operator_ids = {a.operator_id for a in appointments if a.operator_id}

    companies: dict[int, str] = {}
    if company_ids:
        result = await db.execute(select(Company.id, Company.name).where(Company.id.in_(company_ids)))
        companies = dict(result.all())
    operators: dict[int, str] = {}
    if operator_ids:
        result = await db.execute(select(Operator.id, Operator.name).where(Operator.id.in_(operator_ids)))
        operators = dict(result.all())

    responses = []
    for appointment in appointments:
        response = AppointmentResponse.model_validate(appointment)
        response.company_name = companies.get(appointment.company_id)
        response.operator_name = operators.get(appointment.operator_id)
        responses.append(response)
    return responses


async def sync_new_appointment(db: AsyncSession, appointment: Appointment, company: Company) -> None:
    """Email the operator, then add the meeting to their calendar.

    Both steps are best-effort: a failure is logged and the booking stands.
    """
    if appointment.operator_id is None:
        return
    operator = await db.get(Operator, appointment.operator_id)
    if operator is None:
        return

    scheduled_label = appointment.scheduled_at.strftime("%Y/%m/%d %H:%M")
    try:
        await get_email_service().send_appointment_notification(
            to=operator.email,
            company_name=company.name,
            scheduled_at=scheduled_label,
            meeting_type=appointment.meeting_type.value,
            notes=appointment.notes,
        )
    except Exception as e:
        logger.error(f"Appointment {appointment.id} notification email failed: {e}")

    calendar = GoogleCalendarService(operator)
    if not calendar.is_configured:
        return
    try:
        event = calendar.create_event(build_appointment_event(
            company_name=company.name,
            scheduled_at=appointment.scheduled_at,
            duration_minutes=appointment.duration_minutes,
            meeting_type=appointment.meeting_type.value,
            operator_email=operator.email,
            notes=appointment.notes,
        ))
        appointment.google_calendar_event_id = event.get("id")
        await db.commit()
    except Exception as e:
        logger.error(f"Appointment {appointment.id} calendar sync failed: {e}")


async def remove_calendar_event(db: AsyncSession, appointment: Appointment) -> None:
    if not appointment.google_calendar_event_id or appointment.operator_id is None:
        return
    operator = await db.get(Operator, appointment.operator_id)
    if operator is None:
        return
    try:
        GoogleCalendarService(operator).delete_event(appointment.google_calendar_event_id)
    except Exception as e:
        logger.error(f"Removing calendar event for appointment {appointment.id} failed: {e}")


@router.get("", response_model=list[AppointmentResponse])
async def list_appointments(
    operator: CurrentOperator,
    db: Annotated[AsyncSession, Depends(get_db)],
    project_id: int | None = None,
    company_id: int | None = None,
    operator_id: int | None = None,
    status: AppointmentStatus | None = None,
) -> list[AppointmentResponse]:
    """List appointments by time. Operators are limited to their own."""
    query = select(Appointment).order_by(Appointment.scheduled_at)
    if not operator.is_director:
        query = query.where(Appointment.operator_id == operator.id)
    elif operator_id is not None:
        query = query.where(Appointment.operator_id == operator_id)
    if project_id is not None:
        query = query.where(Appointment.project_id == project_id)
    if company_id is not None:
        query = query.where(Appointment.company_id == company_id)
    if status:
        query = query.where(Appointment.status == status)
    result = await db.execute(query)
    return await to_responses(db, result.scalars().all())


@router.get("/board", response_model=AppointmentBoardResponse)
async def get_board(
    director: Director,
    db: Annotated[AsyncSession, Depends(get_db)],
    project_id: int | None = None,
    status: AppointmentStatus | None = None,
    range_type: DateRange = Query(DateRange.WEEK, alias="range"),
    date_from: date | None = None,
    date_to: date | None = None,
) -> AppointmentBoardResponse:
    """
    Appointments grouped by local date for the selected window.

    The summary header counts every appointment, ignoring the filters.
    """
    now = local_now()
    start, end = appointment_board.compute_range(range_type, now, date_from, date_to)

    result = await db.execute(select(Appointment).order_by(Appointment.scheduled_at))
    appointments = result.scalars().all()

    filtered = appointment_board.filter_appointments(appointments, start, end, project_id, status)
    responses = {r.id: r for r in await to_responses(db, filtered)}
    groups = [
        AppointmentGroup(date=label, appointments=[responses[a.id] for a in items])
        for label, items in appointment_board.group_by_date(filtered)
    ]

    return AppointmentBoardResponse(
        groups=groups,
        total=len(filtered),
        summary=AppointmentSummary(**appointment_board.summarize(appointments, now)),
        range_start=start,
        range_end=end,
    )


@router.get("/{appointment_id}", response_model=AppointmentResponse)
async def get_appointment(
    appointment_id: int,
    operator: CurrentOperator,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AppointmentResponse:
    appointment = await get_appointment_or_404(db, appointment_id, operator)
    return (await to_responses(db, [appointment]))[0]


@router.post("", response_model=AppointmentResponse, status_code=201)
async def create_appointment(
    data: AppointmentCreate,
    operator: CurrentOperator,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AppointmentResponse:
    """
    Book a confirmed appointment.

    `scheduled_at` is wall-clock time in the business timezone; aware values
    are converted to it. The project defaults to the company's project, and
    operators book for themselves.
    """
    company = await db.get(Company, data.company_id)
    if not company:
        raise HTTPException(status_code=404, detail="Company not found")
    if data.operator_id is not None and not await db.get(Operator, data.operator_id):
        raise HTTPException(status_code=404, detail="Operator not found")

    values = data.model_dump()
    if values["project_id"] is None:
        values["project_id"] = company.project_id
    if values["operator_id"] is None and not operator.is_director:
        values["operator_id"] = operator.id
    ensure_own_booking(operator, values["operator_id"])
    values["scheduled_at"] = to_local_naive(data.scheduled_at)

    appointment = Appointment(**values, status=AppointmentStatus.CONFIRMED)
    db.add(appointment)
    await db.commit()
    await db.refresh(appointment)
    logger.info(f"Appointment {appointment.id} booked for company {company.id}")

    await sync_new_appointment(db, appointment, company)
    await db.refresh(appointment)
    return (await to_responses(db, [appointment]))[0]


@router.patch("/{appointment_id}", response_model=AppointmentResponse)
async def update_appointment(
    appointment_id: int,
    data: AppointmentUpdate,
    operator: CurrentOperator,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AppointmentResponse:
    appointment = await get_appointment_or_404(db, appointment_id, operator)
    changes = data.model_dump(exclude_unset=True)
    if "operator_id" in changes:
        ensure_own_booking(operator, changes["operator_id"])
    if changes.get("scheduled_at") is not None:
        changes["scheduled_at"] = to_local_naive(changes["scheduled_at"])
    for field, value in changes.items():
        setattr(appointment, field, value)

    await db.commit()
    await db.refresh(appointment)

    if appointment.google_calendar_event_id and "scheduled_at" in changes and appointment.operator_id:
        owner = await db.get(Operator, appointment.operator_id)
        company = await db.get(Company, appointment.company_id)
        try:
            event = build_appointment_event(
                company_name=company.name if company else "",
                scheduled_at=appointment.scheduled_at,
                duration_minutes=appointment.duration_minutes,
                meeting_type=appointment.meeting_type.value,
            )
            GoogleCalendarService(owner).update_event(
                appointment.google_calendar_event_id,
                {"start": event["start"], "end": event["end"]},
            )
        except Exception as e:
            logger.error(f"Calendar update for appointment {appointment.id} failed: {e}")

    return (await to_responses(db, [appointment]))[0]


def ensure_open(appointment: Appointment) -> None:
    if not appointment.is_open:
        raise HTTPException(
            status_code=400,
            detail=f"Appointment is already {appointment.status.value}",
        )


@router.post("/{appointment_id}/complete", response_model=AppointmentResponse)
async def complete_appointment(
    appointment_id: int,
    operator: CurrentOperator,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AppointmentResponse:
    appointment = await get_appointment_or_404(db, appointment_id, operator)
    ensure_open(appointment)
    appointment.mark_completed()
    await db.commit()
    await db.refresh(appointment)
    return (await to_responses(db, [appointment]))[0]


@router.post("/{appointment_id}/cancel", response_model=AppointmentResponse)
async def cancel_appointment(
    appointment_id: int,
    operator: CurrentOperator,
    db: Annotated[AsyncSession, Depends(get_db)],
    reason: str | None = None,
) -> AppointmentResponse:
    appointment = await get_appointment_or_404(db, appointment_id, operator)
    ensure_open(appointment)
    appointment.mark_cancelled(reason)
    await db.commit()
    await db.refresh(appointment)

    await remove_calendar_event(db, appointment)
    return (await to_responses(db, [appointment]))[0]


@router.post("/{appointment_id}/no-show", response_model=AppointmentResponse)
async def mark_no_show(
    appointment_id: int,
    operator: CurrentOperator,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AppointmentResponse:
    appointment = await get_appointment_or_404(db, appointment_id, operator)
    ensure_open(appointment)
    appointment.mark_no_show()
    await db.commit()
    await db.refresh(appointment)
    return (await to_responses(db, [appointment]))[0]


@router.post("/{appointment_id}/confirm", response_model=AppointmentResponse)
async def confirm_appointment(
    appointment_id: int,
    operator: CurrentOperator,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AppointmentResponse:
    """Confirm a tentative appointment proposed by a followup rule."""
    appointment = await get_appointment_or_404(db, appointment_id, operator)
    if appointment.status != AppointmentStatus.TENTATIVE:
        raise HTTPException(
            status_code=400,
            detail=f"Appointment is already {appointment.status.value}",
        )
    appointment.status = AppointmentStatus.CONFIRMED
    await db.commit()
    await db.refresh(appointment)
    return (await to_responses(db, [appointment]))[0]
