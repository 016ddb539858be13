# -*- coding: utf-8 -*-
"""Financial records under ``users/{uid}/financial`` and their monthly aggregates."""

from __future__ import annotations

import calendar
from collections import OrderedDict
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ..docstore import DocumentStore
from ..errors import DocumentNotFoundError, ValidationFailedError, reported_write
from ..patients.storage import require_patient
from ..repository import ScopedRepository
from ..timestamps import SERVER_TIMESTAMP, to_datetime

MONTH_LABELS = ("jan", "fev", "mar", "abr", "mai", "jun", "jul", "ago", "set", "out", "nov", "dez")

CATEGORY_LABELS = {
    "consultation": "Consultas",
    "followup": "Retorno",
    "subscription": "Assinatura",
    "equipment": "Equipamentos",
    "marketing": "Marketing",
    "office": "Escritório",
    "other": "Outros",
}


def month_bounds(year: int, month: int) -> Tuple[datetime, datetime]:
    """First and last instant (UTC) of a calendar month, both inclusive."""
    last_day = calendar.monthrange(year, month)[1]
    start = datetime(year, month, 1, tzinfo=timezone.utc)
    end = datetime(year, month, last_day, 23, 59, 59, 999999, tzinfo=timezone.utc)
    return start, end


def list_month_records(store: DocumentStore, repo: ScopedRepository, year: int, month: int) -> List[Dict[str, Any]]:
    ref = repo.financial()
    if ref is None:
        return []
    start, end = month_bounds(year, month)
    query = ref.query().where("date", ">=", start).where("date", "<=", end).order_by("date", "desc")
    return [d.to_dict() for d in store.get(query)]


def _require_record(store: DocumentStore, repo: ScopedRepository, record_id: str) -> str:
    ref = repo.financial()
    if ref is None:
        raise DocumentNotFoundError(f"financial/{record_id}")
    path = ref.doc(record_id).path
    if store.get_document(path) is None:
        raise DocumentNotFoundError(path)
    return path


def create_record(store: DocumentStore, repo: ScopedRepository, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    ref = repo.financial()
    if ref is None:
        return None
    if not str(fields.get("description") or "").strip() or not fields.get("value") or not fields.get("date"):
        raise ValidationFailedError("description, value and date are required")
    data = dict(fields)
    if data.get("patientId"):
        patient = require_patient(store, repo, data["patientId"])
        data["patientName"] = patient.get("name") or ""
    data.update({"createdAt": SERVER_TIMESTAMP, "updatedAt": SERVER_TIMESTAMP})
    with reported_write("create", ref.path, "record_create_failed"):
        snap = store.add(ref.path, data)
    return snap.to_dict()


def update_record(
    store: DocumentStore,
    repo: ScopedRepository,
    record_id: str,
    fields: Dict[str, Any],
) -> Dict[str, Any]:
    path = _require_record(store, repo, record_id)
    protected = {"id", "patientId", "patientName", "createdAt"}
    fields = {k: v for k, v in fields.items() if k not in protected}
    with reported_write("update", path, "record_update_failed"):
        snap = store.update(path, {**fields, "updatedAt": SERVER_TIMESTAMP})
    return snap.to_dict()


def delete_record(store: DocumentStore, repo: ScopedRepository, record_id: str) -> bool:
    path = _require_record(store, repo, record_id)
    with reported_write("delete", path, "record_delete_failed"):
        return store.delete(path)


def _value(record: Dict[str, Any]) -> float:
    try:
        return float(record.get("value") or 0)
    except (TypeError, ValueError):
        return 0.0


def calculate_stats(records: Iterable[Dict[str, Any]]) -> Dict[str, float]:
    """Paid income and expenses, pending income and the paid balance.

    Canceled records and pending expenses count nowhere.
    """
    income = expenses = pending = 0.0
    for record in records:
        kind, status = record.get("type"), record.get("status")
        if kind == "income" and status == "paid":
            income += _value(record)
        elif kind == "expense" and status == "paid":
            expenses += _value(record)
        elif kind == "income" and status == "pending":
            pending += _value(record)
    return {
        "totalIncome": income,
        "totalExpenses": expenses,
        "pendingIncome": pending,
        "balance": income - expenses,
    }


def chart_data(records: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Paid income/expenses grouped by month, oldest month first."""
    buckets: Dict[Tuple[int, int], Dict[str, float]] = {}
    for record in records:
        when = to_datetime(record.get("date"))
        if when is None:
            continue
        bucket = buckets.setdefault((when.year, when.month), {"income": 0.0, "expenses": 0.0})
        if record.get("status") != "paid":
            continue
        if record.get("type") == "income":
            bucket["income"] += _value(record)
        else:
            bucket["expenses"] += _value(record)
    points = []
    for (_, month), bucket in sorted(buckets.items()):
        points.append(
            {
                "month": MONTH_LABELS[month - 1],
                "income": bucket["income"],
                "expenses": bucket["expenses"],
                "profit": bucket["income"] - bucket["expenses"],
            }
        )
    return points


def category_breakdown(records: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Totals of paid records per category, in first-seen order."""
    totals: "OrderedDict[str, float]" = OrderedDict()
    for record in records:
        if record.get("status") != "paid":
            continue
        category = record.get("category") or "other"
        totals[category] = totals.get(category, 0.0) + _value(record)
    return [
        {"category": category, "name": CATEGORY_LABELS.get(category, category), "value": value}
        for category, value in totals.items()
    ]
