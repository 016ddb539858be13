# -*- coding: utf-8 -*-
"""Appointments — API endpoints."""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Query

from ..docstore import DocumentStore
from ..messages import notification
from ..models import StatusResponse
from ..repository import ScopedRepository
from ..services import get_repository, get_store
from .models import (
    Appointment,
    AppointmentCreateRequest,
    AppointmentListResponse,
    AppointmentResponse,
    AppointmentUpdateRequest,
    CalendarEvent,
    CalendarResponse,
)
from .storage import (
    create_appointment,
    delete_appointment,
    get_appointment,
    list_appointments,
    to_calendar_event,
    update_appointment,
)

router = APIRouter(prefix="/api/appointments", tags=["Appointments"])


@router.get("", response_model=AppointmentListResponse, summary="List my appointments")
def list_my_appointments(
    start: datetime | None = Query(default=None),
    end: datetime | None = Query(default=None),
    status: str | None = Query(default=None),
    store: DocumentStore = Depends(get_store),
    repo: ScopedRepository = Depends(get_repository),
):
    items = [Appointment.model_validate(a) for a in list_appointments(store, repo, start=start, end=end, status=status)]
    return AppointmentListResponse(count=len(items), items=items)


@router.get("/calendar", response_model=CalendarResponse, summary="Appointments as calendar events")
def calendar(
    start: datetime | None = Query(default=None),
    end: datetime | None = Query(default=None),
    store: DocumentStore = Depends(get_store),
    repo: ScopedRepository = Depends(get_repository),
):
    rows = list_appointments(store, repo, start=start, end=end)
    return CalendarResponse(events=[CalendarEvent.model_validate(to_calendar_event(r)) for r in rows])


@router.post("", response_model=AppointmentResponse, summary="Schedule an appointment")
def create_my_appointment(
    request: AppointmentCreateRequest,
    store: DocumentStore = Depends(get_store),
    repo: ScopedRepository = Depends(get_repository),
):
    row = create_appointment(store, repo, request.to_fields())
    return AppointmentResponse(
        appointment=Appointment.model_validate(row),
        notification=notification("appointment_created"),
    )


@router.get("/{appointment_id}", response_model=AppointmentResponse, summary="Get an appointment")
def get_my_appointment(
    appointment_id: str,
    store: DocumentStore = Depends(get_store),
    repo: ScopedRepository = Depends(get_repository),
):
    return AppointmentResponse(appointment=Appointment.model_validate(get_appointment(store, repo, appointment_id)))


@router.patch("/{appointment_id}", response_model=AppointmentResponse, summary="Update an appointment")
def update_my_appointment(
    appointment_id: str,
    request: AppointmentUpdateRequest,
    store: DocumentStore = Depends(get_store),
    repo: ScopedRepository = Depends(get_repository),
):
    row = update_appointment(store, repo, appointment_id, request.to_fields(exclude_unset=True))
    return AppointmentResponse(
        appointment=Appointment.model_validate(row),
        notification=notification("appointment_updated"),
    )


@router.delete("/{appointment_id}", response_model=StatusResponse, summary="Cancel (delete) an appointment")
def delete_my_appointment(
    appointment_id: str,
    store: DocumentStore = Depends(get_store),
    repo: ScopedRepository = Depends(get_repository),
):
    delete_appointment(store, repo, appointment_id)
    return StatusResponse(id=appointment_id, notification=notification("appointment_deleted"))
