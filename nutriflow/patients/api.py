# -*- coding: utf-8 -*-
"""Patients — API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from ..docstore import DocumentStore
from ..messages import notification
from ..models import StatusResponse
from ..repository import ScopedRepository
from ..services import get_repository, get_store
from .models import (
    AnthropometricData,
    Anamnesis,
    Patient,
    PatientCreateRequest,
    PatientListResponse,
    PatientResponse,
    PatientUpdateRequest,
)
from .storage import (
    add_measurement,
    create_patient,
    delete_patient,
    get_patient,
    list_patients,
    set_anamnesis,
    update_patient,
)

router = APIRouter(prefix="/api/patients", tags=["Patients"])


@router.get("", response_model=PatientListResponse, summary="List my patients")
def list_my_patients(
    q: str | None = Query(default=None, description="Search by name, email or phone"),
    store: DocumentStore = Depends(get_store),
    repo: ScopedRepository = Depends(get_repository),
):
    items = [Patient.model_validate(p) for p in list_patients(store, repo, search=q)]
    return PatientListResponse(count=len(items), items=items)


@router.post("", response_model=PatientResponse, summary="Create a patient")
def create_my_patient(
    request: PatientCreateRequest,
    store: DocumentStore = Depends(get_store),
    repo: ScopedRepository = Depends(get_repository),
):
    row = create_patient(store, repo, request.to_fields())
    return PatientResponse(patient=Patient.model_validate(row), notification=notification("patient_created"))


@router.get("/{patient_id}", response_model=PatientResponse, summary="Get a patient")
def get_my_patient(
    patient_id: str,
    store: DocumentStore = Depends(get_store),
    repo: ScopedRepository = Depends(get_repository),
):
    row = get_patient(store, repo, patient_id)
    if not row:
        raise HTTPException(status_code=404, detail="Patient not found")
    return PatientResponse(patient=Patient.model_validate(row))


@router.patch("/{patient_id}", response_model=PatientResponse, summary="Update a patient")
def update_my_patient(
    patient_id: str,
    request: PatientUpdateRequest,
    store: DocumentStore = Depends(get_store),
    repo: ScopedRepository = Depends(get_repository),
):
    row = update_patient(store, repo, patient_id, request.to_fields(exclude_unset=True))
    return PatientResponse(patient=Patient.model_validate(row), notification=notification("patient_updated"))


@router.delete("/{patient_id}", response_model=StatusResponse, summary="Delete a patient")
def delete_my_patient(
    patient_id: str,
    store: DocumentStore = Depends(get_store),
    repo: ScopedRepository = Depends(get_repository),
):
    if not delete_patient(store, repo, patient_id):
        raise HTTPException(status_code=404, detail="Patient not found")
    return StatusResponse(id=patient_id, notification=notification("patient_deleted"))


@router.post("/{patient_id}/measurements", response_model=PatientResponse, summary="Add an anthropometric measurement")
def add_patient_measurement(
    patient_id: str,
    request: AnthropometricData,
    store: DocumentStore = Depends(get_store),
    repo: ScopedRepository = Depends(get_repository),
):
    row = add_measurement(store, repo, patient_id, request.to_fields())
    return PatientResponse(patient=Patient.model_validate(row), notification=notification("patient_updated"))


@router.put("/{patient_id}/anamnesis", response_model=PatientResponse, summary="Set the patient's anamnesis")
def put_patient_anamnesis(
    patient_id: str,
    request: Anamnesis,
    store: DocumentStore = Depends(get_store),
    repo: ScopedRepository = Depends(get_repository),
):
    row = set_anamnesis(store, repo, patient_id, request.to_fields())
    return PatientResponse(patient=Patient.model_validate(row), notification=notification("patient_updated"))
