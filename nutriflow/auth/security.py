# -*- coding: utf-8 -*-
"""Auth — password hashing, the identity provider and FastAPI helpers."""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import logging
import os
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import Depends, HTTPException, Request

from ..session import Session
from .storage import get_account_by_id

logger = logging.getLogger(__name__)

TOKEN_COOKIE_NAME = "nutriflow_token"

_HASH_ALGORITHM = "sha256"
_HASH_ROUNDS = 200_000


def _encode_b64(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def _decode_b64(text: str) -> bytes:
    return base64.urlsafe_b64decode(text + "=" * (-len(text) % 4))


def _derive(password: str, salt: bytes, algorithm: str, rounds: int) -> bytes:
    return hashlib.pbkdf2_hmac(algorithm, password.encode("utf-8"), salt, rounds)


def hash_password(password: str) -> str:
    """``pbkdf2_<alg>$<rounds>$<salt>$<digest>`` with a random 16-byte salt."""
    salt = os.urandom(16)
    digest = _derive(password, salt, _HASH_ALGORITHM, _HASH_ROUNDS)
    return "$".join([f"pbkdf2_{_HASH_ALGORITHM}", str(_HASH_ROUNDS), _encode_b64(salt), _encode_b64(digest)])


def verify_password(password: str, password_hash: str) -> bool:
    parts = (password_hash or "").split("$")
    if len(parts) != 4 or not parts[0].startswith("pbkdf2_"):
        return False
    scheme, rounds, salt, digest = parts
    try:
        candidate = _derive(password, _decode_b64(salt), scheme[len("pbkdf2_"):], int(rounds))
        return hmac.compare_digest(candidate, _decode_b64(digest))
    except (ValueError, TypeError):
        return False


class IdentityProvider:
    """Issues signed access tokens (HS256) and maps them back to sessions."""

    def __init__(self, secret: str, *, ttl_days: int, db_path: Path) -> None:
        self._key = secret.encode("utf-8")
        self.ttl = timedelta(days=int(ttl_days))
        self.db_path = db_path

    def _sign(self, signing_input: bytes) -> bytes:
        return hmac.new(self._key, signing_input, hashlib.sha256).digest()

    def issue(self, *, user_id: str, email: str) -> str:
        issued = datetime.now(timezone.utc)
        claims = {
            "sub": user_id,
            "email": email,
            "iat": int(issued.timestamp()),
            "exp": int((issued + self.ttl).timestamp()),
        }
        segments = [
            _encode_b64(json.dumps({"alg": "HS256", "typ": "JWT"}, separators=(",", ":")).encode("utf-8")),
            _encode_b64(json.dumps(claims, separators=(",", ":"), ensure_ascii=False).encode("utf-8")),
        ]
        signature = self._sign(".".join(segments).encode("ascii"))
        return ".".join(segments + [_encode_b64(signature)])

    def claims(self, token: str) -> Dict[str, Any]:
        """Verified claims of ``token``; 401 when malformed, forged or expired."""
        try:
            header, body, signature = token.split(".")
            if not hmac.compare_digest(self._sign(f"{header}.{body}".encode("ascii")), _decode_b64(signature)):
                raise ValueError("signature mismatch")
            claims = json.loads(_decode_b64(body).decode("utf-8"))
        except (ValueError, UnicodeError) as exc:
            raise HTTPException(status_code=401, detail="Invalid token") from exc
        if not isinstance(claims, dict):
            raise HTTPException(status_code=401, detail="Invalid token")
        expires = int(claims.get("exp") or 0)
        if expires and expires < int(datetime.now(timezone.utc).timestamp()):
            raise HTTPException(status_code=401, detail="Token expired")
        return claims

    def account_for(self, token: Optional[str]) -> Dict[str, Any]:
        if not token:
            raise HTTPException(status_code=401, detail="Not authenticated")
        user_id = str(self.claims(token).get("sub") or "")
        account = get_account_by_id(self.db_path, user_id) if user_id else None
        if not account:
            raise HTTPException(status_code=401, detail="User not found")
        return account

    def resolve(self, token: Optional[str]) -> Optional[Session]:
        """Session for ``token``, or ``None`` when signed out or the token is unusable."""
        try:
            return Session.from_user(self.account_for(token))
        except HTTPException as exc:
            if token:
                logger.info("Rejected token: %s", exc.detail)
            return None


def get_token(*, headers: Any, cookies: Any) -> Optional[str]:
    """Bearer header first, then the session cookie."""
    scheme, _, value = (headers.get("authorization") or "").partition(" ")
    if scheme.lower() == "bearer" and value.strip():
        return value.strip()
    return cookies.get(TOKEN_COOKIE_NAME) or None


def get_current_user_from_request(request: Request) -> Dict[str, Any]:
    # Reuse what the auth middleware already resolved.
    user = getattr(request.state, "user", None)
    if user:
        return user
    identity: IdentityProvider = request.app.state.services.identity
    account = identity.account_for(get_token(headers=request.headers, cookies=request.cookies))
    request.state.user = account
    return account


def get_current_user(user: Dict[str, Any] = Depends(get_current_user_from_request)) -> Dict[str, Any]:
    return user
