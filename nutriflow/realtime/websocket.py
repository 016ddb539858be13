# -*- coding: utf-8 -*-
"""
Live WebSocket bridge.

A dashboard client opens ``/api/ws/live`` and asks for live collections by
scope name. Each scope holds a single live query; switching a scope to a
new query (another chat, another month) cancels the previous one first.
Outgoing snapshots are coalesced per scope, so a slow client only ever
receives the latest one.

Client messages::

    {"type": "subscribe", "scope": "list", "collection": "patients"}
    {"type": "subscribe", "scope": "thread", "collection": "messages", "chatId": "..."}
    {"type": "subscribe", "scope": "month", "collection": "financial", "year": 2024, "month": 5}
    {"type": "unsubscribe", "scope": "thread"}
    {"type": "logout"}
    {"type": "ping"}
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Hashable, Optional, Tuple
from uuid import uuid4

from fastapi import WebSocket, WebSocketDisconnect

from ..auth.security import get_token
from ..chat.storage import require_chat
from ..docstore import serialize_document
from ..errors import NutriFlowError
from ..financial.storage import month_bounds
from ..gate import AuthGate, GateState
from ..messages import message
from ..query import Query
from ..repository import MESSAGES, ScopedRepository
from ..services import Services
from ..session import SessionContext
from ..subscriptions import ScopedSubscription, Snapshot

logger = logging.getLogger(__name__)

# Close code sent after redirecting an unauthenticated client.
CLOSE_UNAUTHENTICATED = 4401


class LiveConnection:
    """One connected dashboard client: its session, gate and scoped queries."""

    def __init__(self, websocket: WebSocket, services: Services, session: SessionContext) -> None:
        self.connection_id = str(uuid4())
        self.websocket = websocket
        self.services = services
        self.session = session
        self.repo = ScopedRepository(session)
        self.scopes: Dict[str, ScopedSubscription] = {}
        self.generations: Dict[str, int] = {}
        self.pending: Dict[str, Dict[str, Any]] = {}
        self.redirect_to: Optional[str] = None
        self.loop = asyncio.get_running_loop()
        self.wakeup = asyncio.Event()
        self.gate = AuthGate(session, self._on_redirect, login_path=services.settings.login_path)

    # ---- outgoing queue (latest message per scope) ----

    def _post(self, key: str, payload: Dict[str, Any]) -> None:
        generation = payload.get("generation")
        if generation is not None and generation != self.generations.get(key):
            return
        self.pending[key] = payload
        self.wakeup.set()

    def post(self, key: str, payload: Dict[str, Any]) -> None:
        """Queue ``payload`` under ``key``; safe to call from any thread."""
        self.loop.call_soon_threadsafe(self._post, key, payload)

    async def sender(self) -> None:
        while True:
            await self.wakeup.wait()
            self.wakeup.clear()
            batch, self.pending = self.pending, {}
            for payload in batch.values():
                await self.websocket.send_json(payload)
            if self.redirect_to is not None:
                await self.websocket.close(code=CLOSE_UNAUTHENTICATED)
                return

    # ---- gate ----

    def _on_redirect(self, location: str) -> None:
        self.redirect_to = location
        self.close_scopes()
        self.post("__session__", {"type": "redirect", "location": location})

    # ---- scopes ----

    def _query_for(self, request: Dict[str, Any]) -> Tuple[Hashable, Optional[Query]]:
        collection = str(request.get("collection") or "")
        if collection == MESSAGES:
            chat_id = str(request.get("chatId") or "")
            require_chat(self.services.store, self.repo, chat_id)
            ref = self.repo.messages(chat_id)
            return (collection, chat_id), ref.query() if ref else None
        if collection == "financial" and request.get("year") and request.get("month"):
            year, month = int(request["year"]), int(request["month"])
            ref = self.repo.financial()
            if ref is None:
                return (collection, year, month), None
            start, end = month_bounds(year, month)
            query = ref.query().where("date", ">=", start).where("date", "<=", end).order_by("date", "desc")
            return (collection, year, month), query
        query = self.repo.query(collection)
        if query is None and self.repo.uid:
            raise ValueError(f"unknown collection: {collection}")
        return (collection,), query

    def subscribe(self, request: Dict[str, Any]) -> None:
        scope = str(request.get("scope") or request.get("collection") or "")
        if not scope:
            raise ValueError("scope is required")
        key, query = self._query_for(request)
        scoped = self.scopes.get(scope)
        if scoped is None:
            scoped = self.scopes[scope] = ScopedSubscription(self.services.subscriptions)
        if scoped.active and scoped.scope_key == key:
            return
        generation = self.generations.get(scope, 0) + 1
        self.generations[scope] = generation
        self.pending.pop(scope, None)

        def on_snapshot(snapshot: Snapshot) -> None:
            self.post(
                scope,
                {
                    "type": "snapshot",
                    "scope": scope,
                    "collection": snapshot.query.collection,
                    "version": snapshot.version,
                    "generation": generation,
                    "docs": [serialize_document(d) for d in snapshot],
                },
            )

        def on_error(exc: Exception) -> None:
            self.post(scope, {"type": "error", "scope": scope, "message": message("generic_error"), "detail": str(exc)})

        scoped.rescope(key, query, on_snapshot, on_error)

    def unsubscribe(self, scope: str) -> None:
        scoped = self.scopes.pop(scope, None)
        if scoped is not None:
            scoped.close()
        self.generations[scope] = self.generations.get(scope, 0) + 1
        self.pending.pop(scope, None)

    def close_scopes(self) -> None:
        for scoped in self.scopes.values():
            scoped.close()
        self.scopes.clear()

    def close(self) -> None:
        self.close_scopes()
        self.gate.unmount()

    # ---- incoming ----

    def handle(self, data: Dict[str, Any]) -> None:
        kind = data.get("type")
        if kind == "subscribe":
            self.subscribe(data)
        elif kind == "unsubscribe":
            self.unsubscribe(str(data.get("scope") or ""))
        elif kind == "logout":
            self.session.sign_out()
        elif kind == "ping":
            self._post("__pong__", {"type": "pong"})
        else:
            raise ValueError(f"unknown message type: {kind}")


class LiveManager:
    """Registry of connected live clients."""

    def __init__(self) -> None:
        self.connections: Dict[str, LiveConnection] = {}

    async def connect(self, websocket: WebSocket, services: Services) -> LiveConnection:
        await websocket.accept()
        token = get_token(headers=websocket.headers, cookies=websocket.cookies) or websocket.query_params.get("token")
        connection = LiveConnection(websocket, services, SessionContext(services.identity.resolve(token)))
        self.connections[connection.connection_id] = connection
        state = connection.gate.mount()
        if state is GateState.authenticated:
            current = connection.session.current_session()
            connection._post("__session__", {"type": "connected", "session": current.to_dict()})
        logger.info("Live client connected: %s (%s)", connection.connection_id, state.value)
        return connection

    def disconnect(self, connection: LiveConnection) -> None:
        connection.close()
        self.connections.pop(connection.connection_id, None)
        logger.info("Live client disconnected: %s", connection.connection_id)


live_manager = LiveManager()


async def _receive(connection: LiveConnection) -> None:
    while True:
        data = await connection.websocket.receive_json()
        if not isinstance(data, dict):
            connection._post("__error__", {"type": "error", "message": "expected a JSON object"})
            continue
        try:
            connection.handle(data)
        except (NutriFlowError, ValueError) as exc:
            key = getattr(exc, "message_key", "generic_error")
            connection._post(
                "__error__",
                {"type": "error", "scope": data.get("scope"), "message": message(key), "detail": str(exc)},
            )


async def websocket_endpoint(websocket: WebSocket, services: Services) -> None:
    """WebSocket handler: gate the client, then pump subscriptions both ways."""
    connection = await live_manager.connect(websocket, services)
    sender = asyncio.create_task(connection.sender())
    receiver = asyncio.create_task(_receive(connection))
    try:
        done, _ = await asyncio.wait({sender, receiver}, return_when=asyncio.FIRST_COMPLETED)
        for task in done:
            exc = task.exception()
            if exc is not None and not isinstance(exc, WebSocketDisconnect):
                logger.error("Live connection %s failed: %s", connection.connection_id, exc)
    finally:
        for task in (sender, receiver):
            task.cancel()
        live_manager.disconnect(connection)
