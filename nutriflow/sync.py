# -*- coding: utf-8 -*-
"""Denormalization synchronizer.

Some records cache a summary of related records (a chat keeps a copy of
its latest message, a meal keeps the calorie total of its items). The
detail write and the summary write are two separate store operations: a
failure in between leaves the cached summary stale until the next write
of the same kind. The children stay authoritative; ``reconcile_chat_summary``
recomputes a chat's summary from them.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from .docstore import DocumentSnapshot, DocumentStore
from .errors import DocumentNotFoundError, WriteFailedError
from .query import DocumentRef, Query
from .repository import CHATS, MESSAGES

logger = logging.getLogger(__name__)

SummaryProjection = Callable[[DocumentSnapshot], Dict[str, Any]]


@dataclass(frozen=True)
class DetailWrite:
    """A child write: ``add`` into a collection or ``create``/``merge`` a document."""

    path: str
    fields: Dict[str, Any] = field(default_factory=dict)
    mode: str = "add"

    @property
    def operation(self) -> str:
        return "update" if self.mode == "merge" else "create"

    def apply(self, store: DocumentStore) -> DocumentSnapshot:
        if self.mode == "add":
            return store.add(self.path, self.fields)
        return store.write(self.path, self.fields, mode=self.mode)


def commit_with_summary_update(
    store: DocumentStore,
    detail_write: DetailWrite,
    parent_ref: DocumentRef,
    summary_projection: SummaryProjection,
) -> DocumentSnapshot:
    """Write the detail record, then merge its projection onto the parent."""
    try:
        detail = detail_write.apply(store)
    except Exception as exc:
        logger.error("Detail write to %s failed: %s", detail_write.path, exc)
        raise WriteFailedError(detail_write.operation, detail_write.path) from exc

    summary = summary_projection(detail)
    try:
        store.update(parent_ref.path, summary)
    except Exception as exc:
        logger.warning(
            "Summary of %s is stale: detail %s committed but summary write failed: %s",
            parent_ref.path,
            detail.path,
            exc,
        )
        raise WriteFailedError("update", parent_ref.path) from exc
    return detail


def project_last_message(message: DocumentSnapshot) -> Dict[str, Any]:
    """Chat summary of a just-committed message; ``updatedAt`` follows it."""
    data = message.data
    sent_at = data.get("timestamp")
    return {
        "lastMessage": {
            "text": data.get("text") or "",
            "timestamp": sent_at,
            "senderId": data.get("senderId"),
        },
        "updatedAt": sent_at,
    }


def reconcile_chat_summary(store: DocumentStore, chat_id: str) -> Optional[Dict[str, Any]]:
    """Recompute a chat's cached summary from its messages."""
    chat_path = f"{CHATS}/{chat_id}"
    if store.get_document(chat_path) is None:
        raise DocumentNotFoundError(chat_path)
    messages = store.run_query(Query(f"{chat_path}/{MESSAGES}").order_by("timestamp"))
    if not messages:
        return None
    summary = project_last_message(messages[-1])
    store.update(chat_path, summary)
    logger.info("Reconciled summary of %s from %d messages", chat_path, len(messages))
    return summary


# ---- meals ----


def meal_calories(items: List[Dict[str, Any]]) -> float:
    total = 0.0
    for item in items:
        try:
            total += float(item.get("calories") or 0)
        except (TypeError, ValueError):
            continue
    return total


def add_food_item(meal: Dict[str, Any], item: Dict[str, Any]) -> Dict[str, Any]:
    items = list(meal.get("items") or []) + [dict(item)]
    return {**meal, "items": items, "calories": meal_calories(items)}


def remove_food_item(meal: Dict[str, Any], index: int) -> Dict[str, Any]:
    items = list(meal.get("items") or [])
    if not 0 <= index < len(items):
        raise IndexError(f"food item index out of range: {index}")
    del items[index]
    return {**meal, "items": items, "calories": meal_calories(items)}


def strip_identity(document: Dict[str, Any]) -> Dict[str, Any]:
    """Deep copy without the id so the store assigns a fresh one on insert."""
    copied = copy.deepcopy(document)
    copied.pop("id", None)
    return copied
