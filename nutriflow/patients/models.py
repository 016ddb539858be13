# -*- coding: utf-8 -*-
"""Patients — Pydantic models."""

from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field

from ..models import DocumentModel, Notification


class AnthropometricData(DocumentModel):
    date: datetime
    weight: Optional[float] = Field(None, ge=0, description="kg")
    height: Optional[float] = Field(None, ge=0, description="cm")
    imc: Optional[float] = Field(None, ge=0)
    body_fat: Optional[float] = Field(None, ge=0, le=100, description="percentage")
    muscle_mass: Optional[float] = Field(None, ge=0, description="kg")
    visceral_fat: Optional[float] = Field(None, ge=0)
    waist_circumference: Optional[float] = Field(None, ge=0, description="cm")
    hip_circumference: Optional[float] = Field(None, ge=0, description="cm")
    arm_circumference: Optional[float] = Field(None, ge=0, description="cm")
    thigh_circumference: Optional[float] = Field(None, ge=0, description="cm")
    notes: Optional[str] = Field(None, max_length=2000)


class Lifestyle(DocumentModel):
    physical_activity: Optional[str] = None
    sleep_quality: Optional[str] = None
    stress_level: Optional[str] = None
    smoking: Optional[bool] = None
    alcohol: Optional[str] = None


class EatingHabits(DocumentModel):
    meals_per_day: Optional[int] = Field(None, ge=0)
    water_intake: Optional[str] = None
    food_preferences: List[str] = Field(default_factory=list)
    food_restrictions: List[str] = Field(default_factory=list)
    supplementation: List[str] = Field(default_factory=list)


class Anamnesis(DocumentModel):
    main_complaint: Optional[str] = None
    medical_history: Optional[str] = None
    family_history: Optional[str] = None
    medications: List[str] = Field(default_factory=list)
    allergies: List[str] = Field(default_factory=list)
    lifestyle: Optional[Lifestyle] = None
    eating_habits: Optional[EatingHabits] = None
    objectives: List[str] = Field(default_factory=list)
    observations: Optional[str] = None


Gender = Literal["male", "female", "other"]


class PatientCreateRequest(DocumentModel):
    name: str = Field(..., min_length=1, max_length=120)
    email: str = Field(..., min_length=3, max_length=254)
    phone: str = Field(..., min_length=1, max_length=32)
    birth_date: datetime
    gender: Optional[Gender] = None
    cpf: Optional[str] = Field(None, max_length=14)


class PatientUpdateRequest(DocumentModel):
    name: Optional[str] = Field(None, min_length=1, max_length=120)
    email: Optional[str] = Field(None, min_length=3, max_length=254)
    phone: Optional[str] = Field(None, min_length=1, max_length=32)
    birth_date: Optional[datetime] = None
    gender: Optional[Gender] = None
    cpf: Optional[str] = Field(None, max_length=14)


class Patient(DocumentModel):
    id: str
    name: str
    email: str = ""
    phone: str = ""
    birth_date: Optional[datetime] = None
    gender: Optional[Gender] = None
    cpf: Optional[str] = None
    anthropometric_data: List[AnthropometricData] = Field(default_factory=list)
    anamnesis: Optional[Anamnesis] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PatientListResponse(DocumentModel):
    count: int
    items: List[Patient]


class PatientResponse(DocumentModel):
    patient: Patient
    notification: Optional[Notification] = None
