# -*- coding: utf-8 -*-
"""Financial — Pydantic models."""

from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field

from ..models import DocumentModel, Notification

RecordType = Literal["income", "expense"]
RecordStatus = Literal["pending", "paid", "canceled"]
PaymentMethod = Literal["cash", "pix", "credit_card", "debit_card", "bank_transfer"]


class FinancialRecordCreateRequest(DocumentModel):
    description: str = Field("", max_length=500)
    value: Optional[float] = Field(None, ge=0)
    date: Optional[datetime] = None
    type: RecordType = "income"
    category: Optional[str] = Field(None, max_length=64)
    patient_id: Optional[str] = None
    payment_method: Optional[PaymentMethod] = None
    status: RecordStatus = "paid"


class FinancialRecordUpdateRequest(DocumentModel):
    description: Optional[str] = Field(None, min_length=1, max_length=500)
    value: Optional[float] = Field(None, ge=0)
    date: Optional[datetime] = None
    type: Optional[RecordType] = None
    category: Optional[str] = Field(None, max_length=64)
    payment_method: Optional[PaymentMethod] = None
    status: Optional[RecordStatus] = None


class FinancialRecord(DocumentModel):
    id: str
    description: str
    value: float
    date: datetime
    type: RecordType
    category: Optional[str] = None
    patient_id: Optional[str] = None
    patient_name: Optional[str] = None
    payment_method: Optional[PaymentMethod] = None
    status: Optional[RecordStatus] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class FinancialStats(DocumentModel):
    total_income: float = 0.0
    total_expenses: float = 0.0
    pending_income: float = 0.0
    balance: float = 0.0


class ChartPoint(DocumentModel):
    month: str
    income: float = 0.0
    expenses: float = 0.0
    profit: float = 0.0


class CategorySlice(DocumentModel):
    category: str
    name: str
    value: float


class FinancialRecordListResponse(DocumentModel):
    year: int
    month: int
    count: int
    items: List[FinancialRecord]


class FinancialSummaryResponse(DocumentModel):
    year: int
    month: int
    stats: FinancialStats
    chart: List[ChartPoint]
    categories: List[CategorySlice]


class FinancialRecordResponse(DocumentModel):
    record: FinancialRecord
    notification: Optional[Notification] = None
