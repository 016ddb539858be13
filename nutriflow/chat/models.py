# -*- coding: utf-8 -*-
"""Chat — Pydantic models."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from ..models import DocumentModel, Notification


class LastMessage(DocumentModel):
    text: str = ""
    timestamp: Optional[datetime] = None
    sender_id: Optional[str] = None


class Chat(DocumentModel):
    id: str
    participants: List[str] = Field(default_factory=list)
    counterpart_id: Optional[str] = None
    counterpart_name: Optional[str] = None
    last_message: Optional[LastMessage] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ChatListResponse(DocumentModel):
    count: int
    items: List[Chat]


class ChatOpenRequest(DocumentModel):
    patient_id: str = Field(..., min_length=1)


class ChatResponse(DocumentModel):
    chat: Chat
    created: bool = False


class MessageCreateRequest(DocumentModel):
    text: str = Field("", max_length=4000)


class Message(DocumentModel):
    id: str
    sender_id: str
    text: str
    timestamp: Optional[datetime] = None
    read: bool = False


class MessageListResponse(DocumentModel):
    count: int
    items: List[Message]


class MessageResponse(DocumentModel):
    message: Message
    notification: Optional[Notification] = None


class MarkReadResponse(DocumentModel):
    updated: int


class ReconcileResponse(DocumentModel):
    chat_id: str
    last_message: Optional[LastMessage] = None
    updated_at: Optional[datetime] = None
