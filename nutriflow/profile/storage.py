# -*- coding: utf-8 -*-
"""Profile — ``users/{uid}`` document helpers."""

from __future__ import annotations

import time
from typing import Any, Dict, Optional

from ..auth.storage import update_account
from ..docstore import DocumentStore
from ..errors import DocumentNotFoundError, reported_write
from ..repository import USERS, ScopedRepository
from ..timestamps import SERVER_TIMESTAMP
from ..uploads.storage import ObjectStorage
from .models import DEFAULT_NOTIFICATION_SETTINGS, DEFAULT_PRIVACY_SETTINGS


def create_profile(store: DocumentStore, *, uid: str, name: str, email: str) -> Dict[str, Any]:
    path = f"{USERS}/{uid}"
    with reported_write("create", path, "write_failed"):
        snap = store.write(
            path,
            {
                "name": name,
                "email": email,
                "subscription": {"type": "free", "status": "active"},
                "notificationSettings": dict(DEFAULT_NOTIFICATION_SETTINGS),
                "privacySettings": dict(DEFAULT_PRIVACY_SETTINGS),
                "createdAt": SERVER_TIMESTAMP,
                "updatedAt": SERVER_TIMESTAMP,
            },
            mode="create",
        )
    return {"uid": uid, **snap.data}


def get_profile(store: DocumentStore, repo: ScopedRepository) -> Optional[Dict[str, Any]]:
    ref = repo.user_doc()
    if ref is None:
        return None
    snap = store.get_document(ref.path)
    if snap is None:
        return None
    return {"uid": snap.id, **snap.data}


def _update(store: DocumentStore, repo: ScopedRepository, fields: Dict[str, Any], message_key: str) -> Optional[Dict[str, Any]]:
    ref = repo.user_doc()
    if ref is None:
        return None
    if store.get_document(ref.path) is None:
        raise DocumentNotFoundError(ref.path)
    with reported_write("update", ref.path, message_key):
        snap = store.update(ref.path, {**fields, "updatedAt": SERVER_TIMESTAMP})
    return {"uid": snap.id, **snap.data}


def update_profile(store: DocumentStore, repo: ScopedRepository, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    profile = _update(store, repo, fields, "profile_update_failed")
    if profile is not None and "name" in fields:
        # Keep the identity provider's display name in step with the profile.
        with reported_write("update", f"accounts/{profile['uid']}", "profile_update_failed"):
            update_account(store.db_path, profile["uid"], display_name=fields["name"])
        repo.session.update_profile(display_name=fields["name"])
    return profile


def complete_onboarding(
    store: DocumentStore,
    repo: ScopedRepository,
    *,
    crn: str,
    whatsapp_number: str,
    logo_url: Optional[str] = None,
) -> Optional[Dict[str, Any]]:
    fields: Dict[str, Any] = {"crn": crn, "whatsappNumber": whatsapp_number}
    if logo_url:
        fields["logoUrl"] = logo_url
    return _update(store, repo, fields, "profile_update_failed")


def set_setting(store: DocumentStore, repo: ScopedRepository, *, group: str, key: str, value: bool) -> Optional[Dict[str, Any]]:
    return _update(store, repo, {f"{group}.{key}": bool(value)}, "settings_update_failed")


def upload_avatar(
    store: DocumentStore,
    repo: ScopedRepository,
    storage: ObjectStorage,
    *,
    blob: bytes,
    content_type: Optional[str] = None,
) -> Optional[str]:
    uid = repo.uid
    if not uid:
        return None
    # Size is checked inside upload() before anything is written.
    url = storage.upload(f"avatars/{uid}/{int(time.time() * 1000)}", blob, content_type=content_type)
    with reported_write("update", f"accounts/{uid}", "upload_failed"):
        update_account(store.db_path, uid, photo_url=url)
    _update(store, repo, {"logoUrl": url}, "upload_failed")
    return url


def upload_logo(
    repo: ScopedRepository,
    storage: ObjectStorage,
    *,
    blob: bytes,
    content_type: Optional[str] = None,
) -> Optional[str]:
    uid = repo.uid
    if not uid:
        return None
    return storage.upload(f"logos/{uid}", blob, content_type=content_type)
