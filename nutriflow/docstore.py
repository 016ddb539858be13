# -*- coding: utf-8 -*-
"""Document store — path-addressed JSON documents kept in SQLite.

Documents live at slash-separated paths (``users/{uid}/patients/{id}``).
The autoincrement row id is the native document order used to break ties
when sorting. Every committed write is announced to registered change
listeners after the connection is closed.
"""

from __future__ import annotations

import json
import logging
import sqlite3
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional
from uuid import uuid4

from . import timestamps
from .errors import DocumentNotFoundError
from .query import Query, is_collection_path, is_document_path, split_path
from .timestamps import SERVER_TIMESTAMP, Timestamp

logger = logging.getLogger(__name__)

WRITE_MODES = ("create", "merge")


@dataclass(frozen=True)
class DocumentSnapshot:
    id: str
    path: str
    data: Dict[str, Any]
    seq: int

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, **self.data}


@dataclass(frozen=True)
class Change:
    kind: str  # "create" | "update" | "delete"
    path: str

    @property
    def collection(self) -> str:
        return "/".join(split_path(self.path)[:-1])


ChangeListener = Callable[[Change], None]


def connect(db_path: Path) -> sqlite3.Connection:
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(db_path), check_same_thread=False)
    conn.row_factory = sqlite3.Row
    return conn


def init_store(db_path: Path) -> None:
    conn = connect(db_path)
    try:
        cur = conn.cursor()
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS documents (
                seq INTEGER PRIMARY KEY AUTOINCREMENT,
                path TEXT NOT NULL UNIQUE,
                collection TEXT NOT NULL,
                doc_id TEXT NOT NULL,
                data_json TEXT NOT NULL,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            );
            """
        )
        cur.execute(
            "CREATE INDEX IF NOT EXISTS idx_documents_collection_seq ON documents(collection, seq ASC);"
        )
        conn.commit()
    finally:
        conn.close()


@contextmanager
def db_conn(db_path: Path) -> Iterator[sqlite3.Connection]:
    conn = connect(db_path)
    try:
        yield conn
        conn.commit()
    finally:
        conn.close()


def new_document_id() -> str:
    return uuid4().hex[:20]


def _resolve_sentinels(value: Any, now: Timestamp) -> Any:
    if value is SERVER_TIMESTAMP:
        return now
    if isinstance(value, dict):
        return {k: _resolve_sentinels(v, now) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_resolve_sentinels(v, now) for v in value]
    return value


def _deep_merge(base: Dict[str, Any], extra: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(base)
    for key, value in extra.items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key] = _deep_merge(out[key], value)
        else:
            out[key] = value
    return out


def _set_field_path(data: Dict[str, Any], field_path: str, value: Any) -> None:
    parts = field_path.split(".")
    current = data
    for part in parts[:-1]:
        nxt = current.get(part)
        if not isinstance(nxt, dict):
            nxt = {}
            current[part] = nxt
        current = nxt
    current[parts[-1]] = value


def _dumps(data: Dict[str, Any]) -> str:
    return json.dumps(timestamps.encode(data), ensure_ascii=False)


def _loads(raw: str) -> Dict[str, Any]:
    decoded = timestamps.decode(json.loads(raw or "{}"))
    return decoded if isinstance(decoded, dict) else {}


def _row_to_snapshot(row: sqlite3.Row) -> DocumentSnapshot:
    return DocumentSnapshot(
        id=row["doc_id"],
        path=row["path"],
        data=timestamps.normalize(_loads(row["data_json"])),
        seq=int(row["seq"]),
    )


class DocumentStore:
    """Create/merge/update/delete documents and run queries against them."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path
        self._listeners: List[ChangeListener] = []
        self._lock = threading.RLock()
        init_store(db_path)

    # ---- change notification ----

    def listen(self, listener: ChangeListener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def remove() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return remove

    def _notify(self, change: Change) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(change)
            except Exception:
                logger.exception("Change listener failed for %s", change.path)

    # ---- reads ----

    def get_document(self, path: str) -> Optional[DocumentSnapshot]:
        if not is_document_path(path):
            raise ValueError(f"not a document path: {path}")
        with db_conn(self.db_path) as conn:
            row = conn.execute("SELECT * FROM documents WHERE path = ?", (path,)).fetchone()
        return _row_to_snapshot(row) if row else None

    def list_collection(self, collection: str) -> List[DocumentSnapshot]:
        if not is_collection_path(collection):
            raise ValueError(f"not a collection path: {collection}")
        with db_conn(self.db_path) as conn:
            rows = conn.execute(
                "SELECT * FROM documents WHERE collection = ? ORDER BY seq ASC",
                (collection,),
            ).fetchall()
        return [_row_to_snapshot(r) for r in rows]

    def run_query(self, query: Query) -> List[DocumentSnapshot]:
        return query.apply(self.list_collection(query.collection))

    def get(self, query: Query) -> List[DocumentSnapshot]:
        """One-shot read (no subscription)."""
        return self.run_query(query)

    # ---- writes ----

    def add(self, collection: str, fields: Dict[str, Any]) -> DocumentSnapshot:
        """Create a document with a store-assigned id."""
        if not is_collection_path(collection):
            raise ValueError(f"not a collection path: {collection}")
        return self.write(f"{collection}/{new_document_id()}", fields, mode="create")

    def write(self, path: str, fields: Dict[str, Any], *, mode: str = "create") -> DocumentSnapshot:
        """Create/overwrite (``create``) or deep-merge (``merge``) a document."""
        if mode not in WRITE_MODES:
            raise ValueError(f"unsupported write mode: {mode}")
        if not is_document_path(path):
            raise ValueError(f"not a document path: {path}")
        parts = split_path(path)
        now = Timestamp.now()
        resolved = _resolve_sentinels(dict(fields), now)
        stamp = now.isoformat()
        with self._lock:
            with db_conn(self.db_path) as conn:
                row = conn.execute("SELECT * FROM documents WHERE path = ?", (path,)).fetchone()
                if row is None:
                    conn.execute(
                        """
                        INSERT INTO documents (path, collection, doc_id, data_json, created_at, updated_at)
                        VALUES (?, ?, ?, ?, ?, ?)
                        """,
                        (path, "/".join(parts[:-1]), parts[-1], _dumps(resolved), stamp, stamp),
                    )
                    kind = "create"
                else:
                    data = resolved if mode == "create" else _deep_merge(_loads(row["data_json"]), resolved)
                    conn.execute(
                        "UPDATE documents SET data_json = ?, updated_at = ? WHERE path = ?",
                        (_dumps(data), stamp, path),
                    )
                    kind = "update"
                saved = conn.execute("SELECT * FROM documents WHERE path = ?", (path,)).fetchone()
        snapshot = _row_to_snapshot(saved)
        self._notify(Change(kind=kind, path=path))
        return snapshot

    def update(self, path: str, fields: Dict[str, Any]) -> DocumentSnapshot:
        """Update fields of an existing document; dotted keys address nested fields."""
        if not is_document_path(path):
            raise ValueError(f"not a document path: {path}")
        now = Timestamp.now()
        resolved = _resolve_sentinels(dict(fields), now)
        with self._lock:
            with db_conn(self.db_path) as conn:
                row = conn.execute("SELECT * FROM documents WHERE path = ?", (path,)).fetchone()
                if row is None:
                    raise DocumentNotFoundError(path)
                data = _loads(row["data_json"])
                for key, value in resolved.items():
                    _set_field_path(data, key, value)
                conn.execute(
                    "UPDATE documents SET data_json = ?, updated_at = ? WHERE path = ?",
                    (_dumps(data), now.isoformat(), path),
                )
                saved = conn.execute("SELECT * FROM documents WHERE path = ?", (path,)).fetchone()
        snapshot = _row_to_snapshot(saved)
        self._notify(Change(kind="update", path=path))
        return snapshot

    def delete(self, path: str) -> bool:
        """Delete one document; sub-collections are left in place."""
        if not is_document_path(path):
            raise ValueError(f"not a document path: {path}")
        with self._lock:
            with db_conn(self.db_path) as conn:
                cur = conn.execute("DELETE FROM documents WHERE path = ?", (path,))
                deleted = cur.rowcount > 0
        if deleted:
            self._notify(Change(kind="delete", path=path))
        return deleted


def serialize_document(snapshot: DocumentSnapshot) -> Dict[str, Any]:
    """JSON-ready dict of a snapshot (datetimes as ISO strings)."""

    def _convert(value: Any) -> Any:
        if isinstance(value, datetime):
            return value.isoformat().replace("+00:00", "Z")
        if isinstance(value, dict):
            return {k: _convert(v) for k, v in value.items()}
        if isinstance(value, list):
            return [_convert(v) for v in value]
        return value

    return _convert(snapshot.to_dict())
