# -*- coding: utf-8 -*-
"""Collection/document references and query descriptions.

A ``Query`` is only a description (collection path, filters, order, limit).
The store evaluates it for one-shot reads and the subscription manager
re-evaluates it after every write that touches its collection.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .timestamps import Timestamp, to_datetime

FILTER_OPS = {"==", "!=", "<", "<=", ">", ">=", "array-contains", "in"}

_MISSING = object()


def split_path(path: str) -> List[str]:
    parts = [p for p in (path or "").strip("/").split("/") if p]
    if not parts:
        raise ValueError("empty path")
    return parts


def is_collection_path(path: str) -> bool:
    return len(split_path(path)) % 2 == 1


def is_document_path(path: str) -> bool:
    return len(split_path(path)) % 2 == 0


def get_field(data: Dict[str, Any], field_path: str) -> Any:
    current: Any = data
    for part in field_path.split("."):
        if not isinstance(current, dict) or part not in current:
            return _MISSING
        current = current[part]
    return current


def _comparable(value: Any) -> Any:
    if isinstance(value, (Timestamp, datetime, date)):
        return to_datetime(value)
    return value


def _sort_key(value: Any) -> Tuple[int, Any]:
    value = _comparable(value)
    if value is None:
        return (0, 0)
    if isinstance(value, bool):
        return (1, int(value))
    if isinstance(value, (int, float)):
        return (2, value)
    if isinstance(value, datetime):
        return (3, value)
    if isinstance(value, str):
        return (4, value)
    return (5, str(value))


@dataclass(frozen=True)
class Filter:
    field: str
    op: str
    value: Any

    def __post_init__(self) -> None:
        if self.op not in FILTER_OPS:
            raise ValueError(f"unsupported filter operator: {self.op}")

    def matches(self, data: Dict[str, Any]) -> bool:
        actual = get_field(data, self.field)
        if actual is _MISSING:
            return False
        if self.op == "array-contains":
            return isinstance(actual, list) and self.value in actual
        if self.op == "in":
            return actual in (self.value or [])
        left = _comparable(actual)
        right = _comparable(self.value)
        if self.op == "==":
            return left == right
        if self.op == "!=":
            return left != right
        try:
            if self.op == "<":
                return left < right
            if self.op == "<=":
                return left <= right
            if self.op == ">":
                return left > right
            return left >= right
        except TypeError:
            # Values of different types never match a range filter.
            return False


@dataclass(frozen=True)
class Order:
    field: str
    descending: bool = False


@dataclass(frozen=True)
class Query:
    collection: str
    filters: Tuple[Filter, ...] = ()
    order: Optional[Order] = None
    limit_to: Optional[int] = None

    def __post_init__(self) -> None:
        if not is_collection_path(self.collection):
            raise ValueError(f"not a collection path: {self.collection}")

    def where(self, field_path: str, op: str, value: Any) -> "Query":
        return replace(self, filters=self.filters + (Filter(field_path, op, value),))

    def order_by(self, field_path: str, direction: str = "asc") -> "Query":
        return replace(self, order=Order(field_path, descending=direction.lower() == "desc"))

    def limit(self, count: int) -> "Query":
        return replace(self, limit_to=int(count))

    def matches(self, data: Dict[str, Any]) -> bool:
        if not all(f.matches(data) for f in self.filters):
            return False
        # Ordering by a field implies the field exists.
        if self.order is not None and get_field(data, self.order.field) is _MISSING:
            return False
        return True

    def apply(self, docs: Iterable[Any]) -> List[Any]:
        """Filter, sort and cut documents already in native order."""
        selected = [d for d in docs if self.matches(d.data)]
        if self.order is not None:
            order = self.order
            selected.sort(
                key=lambda d: _sort_key(get_field(d.data, order.field)),
                reverse=order.descending,
            )
        if self.limit_to is not None:
            selected = selected[: self.limit_to]
        return selected


@dataclass(frozen=True)
class DocumentRef:
    path: str

    def __post_init__(self) -> None:
        if not is_document_path(self.path):
            raise ValueError(f"not a document path: {self.path}")

    @property
    def id(self) -> str:
        return split_path(self.path)[-1]

    @property
    def parent(self) -> "CollectionRef":
        return CollectionRef("/".join(split_path(self.path)[:-1]))

    def collection(self, name: str) -> "CollectionRef":
        return CollectionRef(f"{self.path}/{name}")


@dataclass(frozen=True)
class CollectionRef:
    path: str
    base_filters: Tuple[Filter, ...] = field(default=())
    base_order: Optional[Order] = None

    def __post_init__(self) -> None:
        if not is_collection_path(self.path):
            raise ValueError(f"not a collection path: {self.path}")

    def doc(self, doc_id: str) -> DocumentRef:
        return DocumentRef(f"{self.path}/{doc_id}")

    def query(self) -> Query:
        return Query(self.path, filters=self.base_filters, order=self.base_order)
