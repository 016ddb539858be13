# -*- coding: utf-8 -*-
"""Auth — API endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Response

from ..config import settings
from ..docstore import DocumentStore
from ..errors import ValidationFailedError
from ..messages import notification
from ..profile.storage import create_profile
from ..services import Services, get_services, get_store
from .models import AuthResponse, LoginRequest, PasswordChangeRequest, PasswordChangeResponse, RegisterRequest, SessionPublic
from .security import TOKEN_COOKIE_NAME, get_current_user, hash_password, verify_password
from .storage import create_account, get_account_by_email, set_password_hash

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])

MIN_PASSWORD_LENGTH = 6


def _session_public(row: dict) -> SessionPublic:
    return SessionPublic(
        id=row["id"],
        display_name=row.get("display_name") or "",
        email=row["email"],
        photo_url=row.get("photo_url"),
        created_at=row["created_at"],
    )


def _set_auth_cookie(resp: Response, token: str) -> None:
    max_age = int(settings.token_ttl_days) * 24 * 60 * 60
    resp.set_cookie(
        TOKEN_COOKIE_NAME,
        token,
        httponly=True,
        secure=bool(settings.cookie_secure),
        samesite="lax",
        max_age=max_age,
        path="/",
    )


@router.post("/register", response_model=AuthResponse, summary="Register a professional")
def register(
    request: RegisterRequest,
    response: Response,
    store: DocumentStore = Depends(get_store),
    services: Services = Depends(get_services),
):
    if get_account_by_email(store.db_path, request.email):
        raise HTTPException(status_code=400, detail="Email already registered")

    account = create_account(
        store.db_path,
        email=request.email,
        display_name=request.name.strip(),
        password_hash=hash_password(request.password),
    )
    create_profile(store, uid=account["id"], name=account["display_name"], email=account["email"])
    logger.info("Registered account %s", account["id"])

    token = services.identity.issue(user_id=account["id"], email=account["email"])
    _set_auth_cookie(response, token)
    return AuthResponse(user=_session_public(account), token=token)


@router.post("/login", response_model=AuthResponse, summary="Login")
def login(
    request: LoginRequest,
    response: Response,
    store: DocumentStore = Depends(get_store),
    services: Services = Depends(get_services),
):
    account = get_account_by_email(store.db_path, request.email)
    if not account or not verify_password(request.password, account["password_hash"]):
        raise HTTPException(status_code=401, detail="Invalid email or password")

    token = services.identity.issue(user_id=account["id"], email=account["email"])
    _set_auth_cookie(response, token)
    return AuthResponse(user=_session_public(account), token=token)


@router.post("/logout", summary="Logout")
def logout(response: Response):
    response.delete_cookie(TOKEN_COOKIE_NAME, path="/")
    return {"status": "ok"}


@router.get("/me", response_model=SessionPublic, summary="Get current session")
def me(user: dict = Depends(get_current_user)):
    return _session_public(user)


@router.post("/password", response_model=PasswordChangeResponse, summary="Change password")
def change_password(
    request: PasswordChangeRequest,
    user: dict = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    if request.new_password != request.confirm_password:
        raise ValidationFailedError("Passwords do not match", message_key="password_mismatch")
    if len(request.new_password) < MIN_PASSWORD_LENGTH:
        raise ValidationFailedError("Password too short", message_key="password_too_short")
    if not verify_password(request.current_password, user["password_hash"]):
        raise HTTPException(status_code=401, detail="Invalid password")
    set_password_hash(store.db_path, user["id"], hash_password(request.new_password))
    return PasswordChangeResponse(notification=notification("password_updated"))
