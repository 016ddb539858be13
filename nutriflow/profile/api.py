# -*- coding: utf-8 -*-
"""Profile — API endpoints (profile, onboarding, settings, avatar)."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from pydantic import ValidationError

from ..docstore import DocumentStore
from ..errors import ValidationFailedError
from ..messages import notification
from ..repository import ScopedRepository
from ..services import Services, get_repository, get_services, get_store
from ..uploads.storage import ObjectStorage
from .models import (
    ImageUploadResponse,
    NotificationSetting,
    OnboardingRequest,
    PrivacySetting,
    ProfileResponse,
    ProfileUpdateRequest,
    SettingToggleRequest,
    UserProfile,
)
from .storage import complete_onboarding, get_profile, set_setting, update_profile, upload_avatar, upload_logo

router = APIRouter(prefix="/api/profile", tags=["Profile"])


def _read_upload(file: UploadFile, storage: ObjectStorage) -> bytes:
    # Read at most one byte past the limit so oversized files are rejected without buffering them.
    blob = file.file.read(storage.max_bytes + 1)
    storage.check_size(len(blob))
    return blob


def _profile_or_404(profile: Optional[dict]) -> UserProfile:
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found")
    return UserProfile.model_validate(profile)


@router.get("", response_model=ProfileResponse, summary="Get my profile")
def get_my_profile(
    store: DocumentStore = Depends(get_store),
    repo: ScopedRepository = Depends(get_repository),
):
    return ProfileResponse(profile=_profile_or_404(get_profile(store, repo)))


@router.put("", response_model=ProfileResponse, summary="Update my profile")
def update_my_profile(
    request: ProfileUpdateRequest,
    store: DocumentStore = Depends(get_store),
    repo: ScopedRepository = Depends(get_repository),
):
    fields = request.to_fields()
    fields["name"] = request.name.strip()
    profile = update_profile(store, repo, fields)
    return ProfileResponse(profile=_profile_or_404(profile), notification=notification("profile_updated"))


@router.post("/onboarding", response_model=ProfileResponse, summary="Complete onboarding")
def onboarding(
    crn: str = Form(...),
    whatsapp_number: str = Form(...),
    logo: UploadFile | None = File(default=None),
    services: Services = Depends(get_services),
    repo: ScopedRepository = Depends(get_repository),
):
    try:
        request = OnboardingRequest(crn=crn, whatsapp_number=whatsapp_number)
    except ValidationError as exc:
        raise ValidationFailedError(str(exc)) from exc

    logo_url = None
    if logo is not None and logo.filename:
        blob = _read_upload(logo, services.object_storage)
        logo_url = upload_logo(repo, services.object_storage, blob=blob, content_type=logo.content_type)

    profile = complete_onboarding(
        services.store,
        repo,
        crn=request.crn,
        whatsapp_number=request.whatsapp_number,
        logo_url=logo_url,
    )
    return ProfileResponse(profile=_profile_or_404(profile), notification=notification("profile_updated"))


@router.put("/notifications/{key}", response_model=ProfileResponse, summary="Toggle a notification setting")
def toggle_notification(
    key: NotificationSetting,
    request: SettingToggleRequest,
    store: DocumentStore = Depends(get_store),
    repo: ScopedRepository = Depends(get_repository),
):
    profile = set_setting(store, repo, group="notificationSettings", key=key, value=request.value)
    return ProfileResponse(profile=_profile_or_404(profile), notification=notification("notifications_updated"))


@router.put("/privacy/{key}", response_model=ProfileResponse, summary="Toggle a privacy setting")
def toggle_privacy(
    key: PrivacySetting,
    request: SettingToggleRequest,
    store: DocumentStore = Depends(get_store),
    repo: ScopedRepository = Depends(get_repository),
):
    profile = set_setting(store, repo, group="privacySettings", key=key, value=request.value)
    return ProfileResponse(profile=_profile_or_404(profile), notification=notification("privacy_updated"))


@router.post("/avatar", response_model=ImageUploadResponse, summary="Upload profile photo (max 5MB)")
def upload_my_avatar(
    file: UploadFile = File(...),
    services: Services = Depends(get_services),
    repo: ScopedRepository = Depends(get_repository),
):
    blob = _read_upload(file, services.object_storage)
    url = upload_avatar(services.store, repo, services.object_storage, blob=blob, content_type=file.content_type)
    if not url:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return ImageUploadResponse(url=url, notification=notification("avatar_updated"))
