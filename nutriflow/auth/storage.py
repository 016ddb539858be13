# -*- coding: utf-8 -*-
"""Auth — account storage (identity provider side)."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional
from uuid import uuid4

from ..docstore import db_conn


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def init_accounts(db_path: Path) -> None:
    with db_conn(db_path) as conn:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS accounts (
                id TEXT PRIMARY KEY,
                email TEXT NOT NULL UNIQUE,
                display_name TEXT NOT NULL DEFAULT '',
                password_hash TEXT NOT NULL,
                photo_url TEXT,
                created_at TEXT NOT NULL
            );
            """
        )


def get_account_by_email(db_path: Path, email: str) -> Optional[Dict[str, Any]]:
    with db_conn(db_path) as conn:
        row = conn.execute("SELECT * FROM accounts WHERE email = ?", (email.lower().strip(),)).fetchone()
        return dict(row) if row else None


def get_account_by_id(db_path: Path, account_id: str) -> Optional[Dict[str, Any]]:
    with db_conn(db_path) as conn:
        row = conn.execute("SELECT * FROM accounts WHERE id = ?", (account_id,)).fetchone()
        return dict(row) if row else None


def create_account(db_path: Path, *, email: str, display_name: str, password_hash: str) -> Dict[str, Any]:
    account_id = uuid4().hex[:28]
    now = _utc_now()
    email_norm = email.lower().strip()
    with db_conn(db_path) as conn:
        conn.execute(
            "INSERT INTO accounts (id, email, display_name, password_hash, created_at) VALUES (?, ?, ?, ?, ?)",
            (account_id, email_norm, display_name, password_hash, now),
        )
    return {
        "id": account_id,
        "email": email_norm,
        "display_name": display_name,
        "password_hash": password_hash,
        "photo_url": None,
        "created_at": now,
    }


def update_account(db_path: Path, account_id: str, *, display_name: Optional[str] = None, photo_url: Optional[str] = None) -> None:
    with db_conn(db_path) as conn:
        if display_name is not None:
            conn.execute("UPDATE accounts SET display_name = ? WHERE id = ?", (display_name, account_id))
        if photo_url is not None:
            conn.execute("UPDATE accounts SET photo_url = ? WHERE id = ?", (photo_url, account_id))


def set_password_hash(db_path: Path, account_id: str, password_hash: str) -> None:
    with db_conn(db_path) as conn:
        conn.execute("UPDATE accounts SET password_hash = ? WHERE id = ?", (password_hash, account_id))
