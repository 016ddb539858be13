# -*- coding: utf-8 -*-
"""Financial — API endpoints."""

from __future__ import annotations

from typing import Optional, Tuple

from fastapi import APIRouter, Depends, HTTPException, Query

from ..docstore import DocumentStore
from ..messages import notification
from ..models import StatusResponse
from ..repository import ScopedRepository
from ..services import get_repository, get_store
from ..timestamps import utc_now
from .models import (
    FinancialRecord,
    FinancialRecordCreateRequest,
    FinancialRecordListResponse,
    FinancialRecordResponse,
    FinancialRecordUpdateRequest,
    FinancialSummaryResponse,
)
from .storage import (
    calculate_stats,
    category_breakdown,
    chart_data,
    create_record,
    delete_record,
    list_month_records,
    update_record,
)

router = APIRouter(prefix="/api/financial", tags=["Financial"])


def _selected_month(year: Optional[int], month: Optional[int]) -> Tuple[int, int]:
    now = utc_now()
    return year or now.year, month or now.month


@router.get("", response_model=FinancialRecordListResponse, summary="Records of a month")
def list_records(
    year: Optional[int] = Query(default=None, ge=1970, le=9999),
    month: Optional[int] = Query(default=None, ge=1, le=12),
    store: DocumentStore = Depends(get_store),
    repo: ScopedRepository = Depends(get_repository),
):
    year, month = _selected_month(year, month)
    items = [FinancialRecord.model_validate(r) for r in list_month_records(store, repo, year, month)]
    return FinancialRecordListResponse(year=year, month=month, count=len(items), items=items)


@router.get("/summary", response_model=FinancialSummaryResponse, summary="Stats, chart and categories of a month")
def month_summary(
    year: Optional[int] = Query(default=None, ge=1970, le=9999),
    month: Optional[int] = Query(default=None, ge=1, le=12),
    store: DocumentStore = Depends(get_store),
    repo: ScopedRepository = Depends(get_repository),
):
    year, month = _selected_month(year, month)
    records = list_month_records(store, repo, year, month)
    return FinancialSummaryResponse(
        year=year,
        month=month,
        stats=calculate_stats(records),
        chart=chart_data(records),
        categories=category_breakdown(records),
    )


@router.post("", response_model=FinancialRecordResponse, summary="Create a record")
def create_my_record(
    request: FinancialRecordCreateRequest,
    store: DocumentStore = Depends(get_store),
    repo: ScopedRepository = Depends(get_repository),
):
    row = create_record(store, repo, request.to_fields())
    return FinancialRecordResponse(
        record=FinancialRecord.model_validate(row),
        notification=notification("record_created"),
    )


@router.patch("/{record_id}", response_model=FinancialRecordResponse, summary="Update a record")
def update_my_record(
    record_id: str,
    request: FinancialRecordUpdateRequest,
    store: DocumentStore = Depends(get_store),
    repo: ScopedRepository = Depends(get_repository),
):
    row = update_record(store, repo, record_id, request.to_fields(exclude_unset=True))
    return FinancialRecordResponse(
        record=FinancialRecord.model_validate(row),
        notification=notification("record_updated"),
    )


@router.delete("/{record_id}", response_model=StatusResponse, summary="Delete a record")
def delete_my_record(
    record_id: str,
    store: DocumentStore = Depends(get_store),
    repo: ScopedRepository = Depends(get_repository),
):
    if not delete_record(store, repo, record_id):
        raise HTTPException(status_code=404, detail="Record not found")
    return StatusResponse(id=record_id, notification=notification("record_deleted"))
