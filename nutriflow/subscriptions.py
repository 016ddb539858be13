# -*- coding: utf-8 -*-
"""Live query subscriptions.

``SubscriptionManager.subscribe`` pushes a full ordered snapshot of a query
to a listener: once right away, then again after every committed write that
changes the query result. Callers never poll. Each subscription returns a
``Subscription`` handle whose ``cancel`` is idempotent; after it returns no
further callback is made.
"""

from __future__ import annotations

import itertools
import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, Hashable, Iterator, List, Optional, Tuple

from .docstore import Change, DocumentSnapshot, DocumentStore
from .query import Query

logger = logging.getLogger(__name__)


class Subscription:
    """Cancellation handle for a listener registration."""

    def __init__(self, on_cancel: Optional[Callable[[], None]] = None) -> None:
        self._on_cancel = on_cancel
        self._active = True
        self._lock = threading.Lock()

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        with self._lock:
            if not self._active:
                return
            self._active = False
            on_cancel, self._on_cancel = self._on_cancel, None
        if on_cancel is not None:
            on_cancel()


@dataclass(frozen=True)
class Snapshot:
    query: Query
    docs: Tuple[DocumentSnapshot, ...]
    version: int

    def __len__(self) -> int:
        return len(self.docs)

    def __iter__(self) -> Iterator[DocumentSnapshot]:
        return iter(self.docs)


SnapshotListener = Callable[[Snapshot], None]
ErrorListener = Callable[[Exception], None]


class _Entry:
    def __init__(
        self,
        entry_id: int,
        query: Query,
        on_snapshot: SnapshotListener,
        on_error: Optional[ErrorListener],
    ) -> None:
        self.entry_id = entry_id
        self.query = query
        self.on_snapshot = on_snapshot
        self.on_error = on_error
        self.lock = threading.RLock()
        self.active = True
        self.version = 0
        self.last_signature: Optional[List[Tuple[str, Dict[str, Any]]]] = None


class SubscriptionManager:
    """Keeps live queries over one ``DocumentStore``."""

    def __init__(self, store: DocumentStore) -> None:
        self.store = store
        self._entries: Dict[int, _Entry] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()
        self._remove_listener: Optional[Callable[[], None]] = store.listen(self._on_change)

    @property
    def active_count(self) -> int:
        with self._lock:
            return len(self._entries)

    def subscribe(
        self,
        query: Query,
        on_snapshot: SnapshotListener,
        on_error: Optional[ErrorListener] = None,
    ) -> Subscription:
        entry = _Entry(next(self._ids), query, on_snapshot, on_error)
        with self._lock:
            self._entries[entry.entry_id] = entry
        logger.debug("Subscribed #%s to %s", entry.entry_id, query.collection)
        subscription = Subscription(on_cancel=lambda: self._drop(entry))
        self._refresh(entry, force=True)
        return subscription

    def close(self) -> None:
        """Tear down every live query and stop listening to the store."""
        with self._lock:
            entries = list(self._entries.values())
            self._entries.clear()
        for entry in entries:
            with entry.lock:
                entry.active = False
        if self._remove_listener is not None:
            self._remove_listener()
            self._remove_listener = None

    def _drop(self, entry: _Entry) -> None:
        with entry.lock:
            entry.active = False
        with self._lock:
            self._entries.pop(entry.entry_id, None)
        logger.debug("Unsubscribed #%s from %s", entry.entry_id, entry.query.collection)

    def _on_change(self, change: Change) -> None:
        with self._lock:
            affected = [e for e in self._entries.values() if e.query.collection == change.collection]
        for entry in affected:
            self._refresh(entry)

    def _refresh(self, entry: _Entry, *, force: bool = False) -> None:
        with entry.lock:
            if not entry.active:
                return
            try:
                docs = self.store.run_query(entry.query)
            except Exception as exc:
                # Surfaced once per failed evaluation; the store owns reconnection.
                logger.error("Snapshot for %s failed: %s", entry.query.collection, exc)
                if entry.on_error is not None:
                    entry.on_error(exc)
                return
            signature = [(d.path, d.data) for d in docs]
            if not force and signature == entry.last_signature:
                return
            entry.last_signature = signature
            entry.version += 1
            snapshot = Snapshot(query=entry.query, docs=tuple(docs), version=entry.version)
            try:
                entry.on_snapshot(snapshot)
            except Exception as exc:
                # One failing consumer must not starve the others on this collection.
                logger.exception("Snapshot listener #%s for %s failed", entry.entry_id, entry.query.collection)
                if entry.on_error is not None:
                    entry.on_error(exc)


class ScopedSubscription:
    """At most one live query per logical scope (selected chat, month, ...)."""

    def __init__(self, manager: SubscriptionManager) -> None:
        self.manager = manager
        self.scope_key: Optional[Hashable] = None
        self._current: Optional[Subscription] = None

    @property
    def active(self) -> bool:
        return self._current is not None and self._current.active

    def rescope(
        self,
        scope_key: Hashable,
        query: Optional[Query],
        on_snapshot: SnapshotListener,
        on_error: Optional[ErrorListener] = None,
    ) -> Optional[Subscription]:
        """Switch to ``scope_key``; the previous subscription is cancelled first.

        Re-scoping to the key already active is a no-op. A ``None`` query
        (no identity to scope by) only tears down the previous subscription.
        """
        if query is not None and self.active and scope_key == self.scope_key:
            return self._current
        self.close()
        if query is None:
            return None
        self.scope_key = scope_key
        self._current = self.manager.subscribe(query, on_snapshot, on_error)
        return self._current

    def close(self) -> None:
        if self._current is not None:
            self._current.cancel()
        self._current = None
        self.scope_key = None
