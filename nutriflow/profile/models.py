# -*- coding: utf-8 -*-
"""Profile — Pydantic models (professional profile and settings)."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, Literal, Optional

from pydantic import Field

from ..models import DocumentModel, Notification

NotificationSetting = Literal[
    "emailNotifications",
    "pushNotifications",
    "appointmentReminders",
    "marketingEmails",
    "weeklyReports",
]
PrivacySetting = Literal["profileVisibility", "dataSharing", "analyticsTracking"]

DEFAULT_NOTIFICATION_SETTINGS: Dict[str, bool] = {
    "emailNotifications": True,
    "pushNotifications": True,
    "appointmentReminders": True,
    "marketingEmails": False,
    "weeklyReports": True,
}
DEFAULT_PRIVACY_SETTINGS: Dict[str, bool] = {
    "profileVisibility": True,
    "dataSharing": False,
    "analyticsTracking": True,
}


class Subscription(DocumentModel):
    type: Literal["free", "premium", "enterprise"] = "free"
    status: Literal["active", "inactive", "canceled"] = "active"


class UserProfile(DocumentModel):
    uid: str
    name: str = ""
    email: str = ""
    crn: Optional[str] = None
    logo_url: Optional[str] = None
    whatsapp_number: Optional[str] = None
    subscription: Optional[Subscription] = None
    notification_settings: Dict[str, bool] = Field(default_factory=lambda: dict(DEFAULT_NOTIFICATION_SETTINGS))
    privacy_settings: Dict[str, bool] = Field(default_factory=lambda: dict(DEFAULT_PRIVACY_SETTINGS))
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProfileUpdateRequest(DocumentModel):
    name: str = Field(..., min_length=1, max_length=120)
    crn: Optional[str] = Field(None, max_length=32)
    whatsapp_number: Optional[str] = Field(None, max_length=32)


class OnboardingRequest(DocumentModel):
    crn: str = Field(..., min_length=1, max_length=32)
    whatsapp_number: str = Field(..., min_length=10, max_length=32)


class SettingToggleRequest(DocumentModel):
    value: bool


class ProfileResponse(DocumentModel):
    profile: UserProfile
    notification: Optional[Notification] = None


class ImageUploadResponse(DocumentModel):
    url: str
    notification: Optional[Notification] = None
