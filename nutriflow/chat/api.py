# -*- coding: utf-8 -*-
"""Chat — API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ..docstore import DocumentStore
from ..patients.storage import require_patient
from ..repository import ScopedRepository
from ..services import get_repository, get_store
from .models import (
    Chat,
    ChatListResponse,
    ChatOpenRequest,
    ChatResponse,
    MarkReadResponse,
    Message,
    MessageCreateRequest,
    MessageListResponse,
    MessageResponse,
    ReconcileResponse,
)
from .storage import counterpart_of, list_chats, list_messages, mark_read, reconcile, resolve_chat, send_message

router = APIRouter(prefix="/api/chats", tags=["Chat"])


@router.get("", response_model=ChatListResponse, summary="List my chats")
def list_my_chats(
    store: DocumentStore = Depends(get_store),
    repo: ScopedRepository = Depends(get_repository),
):
    items = [Chat.model_validate(c) for c in list_chats(store, repo)]
    return ChatListResponse(count=len(items), items=items)


@router.post("", response_model=ChatResponse, summary="Open (find or create) a chat with a patient")
def open_chat(
    request: ChatOpenRequest,
    store: DocumentStore = Depends(get_store),
    repo: ScopedRepository = Depends(get_repository),
):
    patient = require_patient(store, repo, request.patient_id)
    chats = list_chats(store, repo)
    chat, created = resolve_chat(store, chats, repo.uid, patient["id"])
    chat["counterpartId"] = counterpart_of(chat, repo.uid)
    chat["counterpartName"] = patient.get("name")
    return ChatResponse(chat=Chat.model_validate(chat), created=created)


@router.get("/{chat_id}/messages", response_model=MessageListResponse, summary="List messages of a chat")
def list_chat_messages(
    chat_id: str,
    store: DocumentStore = Depends(get_store),
    repo: ScopedRepository = Depends(get_repository),
):
    items = [Message.model_validate(m) for m in list_messages(store, repo, chat_id)]
    return MessageListResponse(count=len(items), items=items)


@router.post("/{chat_id}/messages", response_model=MessageResponse, summary="Send a message")
def post_chat_message(
    chat_id: str,
    request: MessageCreateRequest,
    store: DocumentStore = Depends(get_store),
    repo: ScopedRepository = Depends(get_repository),
):
    row = send_message(store, repo, chat_id, request.text)
    return MessageResponse(message=Message.model_validate(row))


@router.post("/{chat_id}/read", response_model=MarkReadResponse, summary="Mark received messages as read")
def mark_chat_read(
    chat_id: str,
    store: DocumentStore = Depends(get_store),
    repo: ScopedRepository = Depends(get_repository),
):
    return MarkReadResponse(updated=mark_read(store, repo, chat_id))


@router.post("/{chat_id}/reconcile", response_model=ReconcileResponse, summary="Recompute the chat summary")
def reconcile_chat(
    chat_id: str,
    store: DocumentStore = Depends(get_store),
    repo: ScopedRepository = Depends(get_repository),
):
    summary = reconcile(store, repo, chat_id) or {}
    return ReconcileResponse(
        chat_id=chat_id,
        last_message=summary.get("lastMessage"),
        updated_at=summary.get("updatedAt"),
    )
