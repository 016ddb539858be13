# -*- coding: utf-8 -*-
"""Appointments — shared ``appointments`` collection filtered by ``nutritionistId``."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from ..docstore import DocumentStore
from ..errors import DocumentNotFoundError, reported_write
from ..patients.storage import require_patient
from ..repository import ScopedRepository
from ..timestamps import SERVER_TIMESTAMP, to_datetime, utc_now


def list_appointments(
    store: DocumentStore,
    repo: ScopedRepository,
    *,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    status: Optional[str] = None,
    limit: Optional[int] = None,
) -> List[Dict[str, Any]]:
    ref = repo.appointments()
    if ref is None:
        return []
    query = ref.query()
    if start is not None:
        query = query.where("date", ">=", start)
    if end is not None:
        query = query.where("date", "<=", end)
    if status:
        query = query.where("status", "==", status)
    query = query.order_by("date", "asc")
    if limit:
        query = query.limit(limit)
    return [d.to_dict() for d in store.get(query)]


def upcoming_appointments(store: DocumentStore, repo: ScopedRepository, *, limit: int = 5) -> List[Dict[str, Any]]:
    return list_appointments(store, repo, start=utc_now(), status="scheduled", limit=limit)


def _require_owned(store: DocumentStore, repo: ScopedRepository, appointment_id: str) -> Dict[str, Any]:
    ref = repo.appointments()
    path = f"appointments/{appointment_id}"
    snap = store.get_document(path)
    if ref is None or snap is None or snap.data.get("nutritionistId") != repo.uid:
        raise DocumentNotFoundError(path)
    return snap.to_dict()


def get_appointment(store: DocumentStore, repo: ScopedRepository, appointment_id: str) -> Dict[str, Any]:
    return _require_owned(store, repo, appointment_id)


def create_appointment(store: DocumentStore, repo: ScopedRepository, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Schedule an appointment with the patient's name copied at creation time."""
    ref = repo.appointments()
    if ref is None:
        return None
    patient = require_patient(store, repo, fields["patientId"])
    data = {
        **fields,
        "nutritionistId": repo.uid,
        "patientName": patient.get("name") or "",
        "createdAt": SERVER_TIMESTAMP,
        "updatedAt": SERVER_TIMESTAMP,
    }
    with reported_write("create", ref.path, "appointment_create_failed"):
        snap = store.add(ref.path, data)
    return snap.to_dict()


def update_appointment(
    store: DocumentStore,
    repo: ScopedRepository,
    appointment_id: str,
    fields: Dict[str, Any],
) -> Dict[str, Any]:
    current = _require_owned(store, repo, appointment_id)
    path = f"appointments/{current['id']}"
    protected = {"id", "nutritionistId", "patientId", "patientName", "createdAt"}
    fields = {k: v for k, v in fields.items() if k not in protected}
    with reported_write("update", path, "appointment_update_failed"):
        snap = store.update(path, {**fields, "updatedAt": SERVER_TIMESTAMP})
    return snap.to_dict()


def delete_appointment(store: DocumentStore, repo: ScopedRepository, appointment_id: str) -> bool:
    current = _require_owned(store, repo, appointment_id)
    path = f"appointments/{current['id']}"
    with reported_write("delete", path, "appointment_delete_failed"):
        return store.delete(path)


def to_calendar_event(appointment: Dict[str, Any]) -> Dict[str, Any]:
    start = to_datetime(appointment.get("date"))
    duration = int(appointment.get("duration") or 0)
    return {
        "id": appointment["id"],
        "title": appointment.get("patientName") or "",
        "start": start,
        "end": start + timedelta(minutes=duration) if start else None,
        "resource": appointment,
    }
