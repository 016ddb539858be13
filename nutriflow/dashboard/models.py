# -*- coding: utf-8 -*-
"""Dashboard — Pydantic models."""

from __future__ import annotations

from typing import List

from ..appointments.models import Appointment
from ..models import DocumentModel
from ..patients.models import Patient


class DashboardStats(DocumentModel):
    total_patients: int = 0
    monthly_patients: int = 0
    today_appointments: int = 0
    monthly_revenue: float = 0.0


class PatientsPerMonth(DocumentModel):
    month: str
    patients: int = 0


class DashboardResponse(DocumentModel):
    stats: DashboardStats
    recent_patients: List[Patient]
    upcoming_appointments: List[Appointment]
    patients_chart: List[PatientsPerMonth]
