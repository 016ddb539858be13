# -*- coding: utf-8 -*-
"""Chat — conversations between a professional and a patient.

A chat is a top-level ``chats/{id}`` document listing its participants and
caching the latest message; messages live under ``chats/{id}/messages``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from ..docstore import DocumentSnapshot, DocumentStore
from ..errors import DocumentNotFoundError, NoSessionError, ValidationFailedError, WriteFailedError, reported_write
from ..repository import CHATS, ScopedRepository
from ..sync import DetailWrite, commit_with_summary_update, project_last_message, reconcile_chat_summary
from ..timestamps import SERVER_TIMESTAMP

logger = logging.getLogger(__name__)

ChatLike = Union[DocumentSnapshot, Dict[str, Any]]


def _as_dict(chat: ChatLike) -> Dict[str, Any]:
    return chat.to_dict() if isinstance(chat, DocumentSnapshot) else dict(chat)


def counterpart_of(chat: Dict[str, Any], uid: str) -> Optional[str]:
    for participant in chat.get("participants") or []:
        if participant != uid:
            return participant
    return None


def _require_uid(repo: ScopedRepository) -> str:
    uid = repo.uid
    if not uid:
        raise NoSessionError("No active session")
    return uid


def list_chats(store: DocumentStore, repo: ScopedRepository) -> List[Dict[str, Any]]:
    """Chats the user takes part in, most recently active first, with the patient's name attached."""
    ref = repo.chats()
    if ref is None:
        return []
    uid = repo.uid
    names: Dict[str, str] = {}
    patients = repo.patients()
    if patients is not None:
        names = {p.id: p.data.get("name") or "" for p in store.list_collection(patients.path)}
    items = []
    for snap in store.get(ref.query()):
        chat = snap.to_dict()
        other = counterpart_of(chat, uid)
        chat["counterpartId"] = other
        chat["counterpartName"] = names.get(other) if other else None
        items.append(chat)
    return items


def resolve_chat(
    store: DocumentStore,
    chats_snapshot: Iterable[ChatLike],
    uid: str,
    counterpart: str,
) -> Tuple[Dict[str, Any], bool]:
    """Return the chat with ``counterpart``, creating it when none is known.

    Only the chats already loaded by the caller are scanned; two callers
    racing on the same pair can each create a chat. Returns ``(chat, created)``.
    """
    for chat in chats_snapshot:
        data = _as_dict(chat)
        if counterpart in (data.get("participants") or []):
            return data, False

    fields = {
        "participants": [uid, counterpart],
        "createdAt": SERVER_TIMESTAMP,
        "updatedAt": SERVER_TIMESTAMP,
    }
    with reported_write("create", CHATS, "chat_create_failed"):
        snap = store.add(CHATS, fields)
    logger.info("Created chat %s between %s and %s", snap.id, uid, counterpart)
    return snap.to_dict(), True


def require_chat(store: DocumentStore, repo: ScopedRepository, chat_id: str) -> Dict[str, Any]:
    """Load a chat the user participates in; any other chat reads as missing."""
    uid = _require_uid(repo)
    ref = repo.chat_doc(chat_id)
    snap = store.get_document(ref.path) if ref else None
    if snap is None or uid not in (snap.data.get("participants") or []):
        raise DocumentNotFoundError(f"{CHATS}/{chat_id}")
    return snap.to_dict()


def list_messages(store: DocumentStore, repo: ScopedRepository, chat_id: str) -> List[Dict[str, Any]]:
    require_chat(store, repo, chat_id)
    ref = repo.messages(chat_id)
    return [d.to_dict() for d in store.get(ref.query())]


def send_message(store: DocumentStore, repo: ScopedRepository, chat_id: str, text: str) -> Dict[str, Any]:
    """Append a message and refresh the chat's ``lastMessage``/``updatedAt``."""
    uid = _require_uid(repo)
    body = (text or "").strip()
    if not body:
        raise ValidationFailedError("Message text is empty")
    require_chat(store, repo, chat_id)

    detail = DetailWrite(
        path=repo.messages(chat_id).path,
        fields={"senderId": uid, "text": body, "timestamp": SERVER_TIMESTAMP, "read": False},
    )
    try:
        snap = commit_with_summary_update(store, detail, repo.chat_doc(chat_id), project_last_message)
    except WriteFailedError as exc:
        exc.message_key = "message_send_failed"
        raise
    return snap.to_dict()


def mark_read(store: DocumentStore, repo: ScopedRepository, chat_id: str) -> int:
    """Flip ``read`` on every unread message sent by the other participant."""
    uid = _require_uid(repo)
    require_chat(store, repo, chat_id)
    updated = 0
    for snap in store.get(repo.messages(chat_id).query().where("read", "==", False)):
        if snap.data.get("senderId") == uid:
            continue
        with reported_write("update", snap.path, "write_failed"):
            store.update(snap.path, {"read": True})
        updated += 1
    return updated


def reconcile(store: DocumentStore, repo: ScopedRepository, chat_id: str) -> Optional[Dict[str, Any]]:
    require_chat(store, repo, chat_id)
    return reconcile_chat_summary(store, chat_id)
