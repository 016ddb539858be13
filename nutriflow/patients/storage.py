# -*- coding: utf-8 -*-
"""Patients — document helpers under ``users/{uid}/patients``."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..docstore import DocumentStore
from ..errors import DocumentNotFoundError, reported_write
from ..repository import ScopedRepository
from ..timestamps import SERVER_TIMESTAMP, to_datetime


def compute_imc(weight: Optional[float], height_cm: Optional[float]) -> Optional[float]:
    if not weight or not height_cm:
        return None
    meters = float(height_cm) / 100.0
    return round(float(weight) / (meters * meters), 2)


def _matches_search(patient: Dict[str, Any], term: str) -> bool:
    needle = term.lower().strip()
    if not needle:
        return True
    for key in ("name", "email", "phone"):
        value = patient.get(key)
        if isinstance(value, str) and needle in value.lower():
            return True
    return False


def list_patients(
    store: DocumentStore,
    repo: ScopedRepository,
    *,
    search: Optional[str] = None,
    limit: Optional[int] = None,
) -> List[Dict[str, Any]]:
    ref = repo.patients()
    if ref is None:
        return []
    query = ref.query().order_by("createdAt", "desc")
    if limit:
        query = query.limit(limit)
    items = [d.to_dict() for d in store.get(query)]
    if search:
        items = [p for p in items if _matches_search(p, search)]
    return items


def get_patient(store: DocumentStore, repo: ScopedRepository, patient_id: str) -> Optional[Dict[str, Any]]:
    ref = repo.patients()
    if ref is None:
        return None
    snap = store.get_document(ref.doc(patient_id).path)
    return snap.to_dict() if snap else None


def require_patient(store: DocumentStore, repo: ScopedRepository, patient_id: str) -> Dict[str, Any]:
    patient = get_patient(store, repo, patient_id)
    if not patient:
        raise DocumentNotFoundError(f"patients/{patient_id}")
    return patient


def create_patient(store: DocumentStore, repo: ScopedRepository, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    ref = repo.patients()
    if ref is None:
        return None
    data = {
        **fields,
        "anthropometricData": list(fields.get("anthropometricData") or []),
        "createdAt": SERVER_TIMESTAMP,
        "updatedAt": SERVER_TIMESTAMP,
    }
    with reported_write("create", ref.path, "write_failed"):
        snap = store.add(ref.path, data)
    return snap.to_dict()


def update_patient(
    store: DocumentStore,
    repo: ScopedRepository,
    patient_id: str,
    fields: Dict[str, Any],
) -> Optional[Dict[str, Any]]:
    """Update in place.

    Appointments and financial records keep the name copied when they were
    created; renaming a patient does not touch them.
    """
    ref = repo.patients()
    if ref is None:
        return None
    path = ref.doc(patient_id).path
    fields = {k: v for k, v in fields.items() if k != "id"}
    with reported_write("update", path, "write_failed"):
        snap = store.update(path, {**fields, "updatedAt": SERVER_TIMESTAMP})
    return snap.to_dict()


def delete_patient(store: DocumentStore, repo: ScopedRepository, patient_id: str) -> bool:
    """Delete the patient document only; references elsewhere are left as they are."""
    ref = repo.patients()
    if ref is None:
        return False
    path = ref.doc(patient_id).path
    with reported_write("delete", path, "write_failed"):
        return store.delete(path)


def add_measurement(
    store: DocumentStore,
    repo: ScopedRepository,
    patient_id: str,
    measurement: Dict[str, Any],
) -> Optional[Dict[str, Any]]:
    """Append an anthropometric snapshot, keeping the history ordered by date."""
    patient = require_patient(store, repo, patient_id)
    entry = dict(measurement)
    if entry.get("imc") is None:
        imc = compute_imc(entry.get("weight"), entry.get("height"))
        if imc is not None:
            entry["imc"] = imc
    history = list(patient.get("anthropometricData") or []) + [entry]
    history.sort(key=lambda m: to_datetime(m.get("date")) or datetime.min.replace(tzinfo=timezone.utc))
    return update_patient(store, repo, patient_id, {"anthropometricData": history})


def set_anamnesis(
    store: DocumentStore,
    repo: ScopedRepository,
    patient_id: str,
    anamnesis: Dict[str, Any],
) -> Optional[Dict[str, Any]]:
    require_patient(store, repo, patient_id)
    return update_patient(store, repo, patient_id, {"anamnesis": anamnesis})
