# -*- coding: utf-8 -*-
"""Dashboard — overview numbers of the signed-in professional."""

from __future__ import annotations

from datetime import datetime, time, timezone
from typing import Any, Dict, List, Optional

from ..appointments.storage import list_appointments, upcoming_appointments
from ..docstore import DocumentStore
from ..financial.storage import MONTH_LABELS, calculate_stats, list_month_records, month_bounds
from ..patients.storage import list_patients
from ..repository import ScopedRepository
from ..timestamps import to_datetime, utc_now

RECENT_LIMIT = 5
CHART_MONTHS = 6


def _shift_month(year: int, month: int, delta: int) -> tuple:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def patients_per_month(patients: List[Dict[str, Any]], now: datetime, months: int = CHART_MONTHS) -> List[Dict[str, Any]]:
    """Cumulative patient count at the end of each of the last ``months`` months."""
    created = [to_datetime(p.get("createdAt")) for p in patients]
    points = []
    for delta in range(months - 1, -1, -1):
        year, month = _shift_month(now.year, now.month, -delta)
        _, end = month_bounds(year, month)
        count = sum(1 for c in created if c is not None and c <= end)
        points.append({"month": MONTH_LABELS[month - 1], "patients": count})
    return points


def build_dashboard(store: DocumentStore, repo: ScopedRepository, *, now: Optional[datetime] = None) -> Dict[str, Any]:
    now = now or utc_now()
    patients = list_patients(store, repo)
    month_start, month_end = month_bounds(now.year, now.month)
    monthly_patients = 0
    for patient in patients:
        created = to_datetime(patient.get("createdAt"))
        if created is not None and month_start <= created <= month_end:
            monthly_patients += 1

    day_start = datetime.combine(now.date(), time.min, tzinfo=timezone.utc)
    day_end = datetime.combine(now.date(), time.max, tzinfo=timezone.utc)
    today = list_appointments(store, repo, start=day_start, end=day_end, status="scheduled")

    revenue = calculate_stats(list_month_records(store, repo, now.year, now.month))["totalIncome"]

    return {
        "stats": {
            "totalPatients": len(patients),
            "monthlyPatients": monthly_patients,
            "todayAppointments": len(today),
            "monthlyRevenue": revenue,
        },
        "recentPatients": patients[:RECENT_LIMIT],
        "upcomingAppointments": upcoming_appointments(store, repo, limit=RECENT_LIMIT),
        "patientsChart": patients_per_month(patients, now),
    }
