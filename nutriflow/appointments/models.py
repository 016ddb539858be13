# -*- coding: utf-8 -*-
"""Appointments — Pydantic models."""

from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field

from ..models import DocumentModel, Notification

AppointmentType = Literal["online", "presencial"]
AppointmentStatus = Literal["scheduled", "completed", "canceled", "no-show"]


class AppointmentCreateRequest(DocumentModel):
    patient_id: str = Field(..., min_length=1)
    date: datetime
    duration: int = Field(60, ge=1, le=24 * 60, description="minutes")
    type: AppointmentType = "presencial"
    status: AppointmentStatus = "scheduled"
    teleconsultation_link: Optional[str] = Field(None, max_length=500)
    notes: Optional[str] = Field(None, max_length=2000)


class AppointmentUpdateRequest(DocumentModel):
    date: Optional[datetime] = None
    duration: Optional[int] = Field(None, ge=1, le=24 * 60)
    type: Optional[AppointmentType] = None
    status: Optional[AppointmentStatus] = None
    teleconsultation_link: Optional[str] = Field(None, max_length=500)
    notes: Optional[str] = Field(None, max_length=2000)


class Appointment(DocumentModel):
    id: str
    nutritionist_id: str
    patient_id: str
    patient_name: str = ""
    date: datetime
    duration: int = 60
    type: AppointmentType = "presencial"
    status: AppointmentStatus = "scheduled"
    teleconsultation_link: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CalendarEvent(DocumentModel):
    id: str
    title: str
    start: datetime
    end: datetime
    resource: Appointment


class AppointmentListResponse(DocumentModel):
    count: int
    items: List[Appointment]


class CalendarResponse(DocumentModel):
    events: List[CalendarEvent]


class AppointmentResponse(DocumentModel):
    appointment: Appointment
    notification: Optional[Notification] = None
