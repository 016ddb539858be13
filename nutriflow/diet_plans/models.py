# -*- coding: utf-8 -*-
"""Diet plans — Pydantic models."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from ..models import DocumentModel, Notification


class Macros(DocumentModel):
    """Daily macro targets, all in grams."""

    protein: float = Field(0.0, ge=0)
    carbs: float = Field(0.0, ge=0)
    fat: float = Field(0.0, ge=0)
    fiber: float = Field(0.0, ge=0)


class FoodItem(DocumentModel):
    food: str = Field(..., min_length=1, max_length=200)
    quantity: str = Field(..., min_length=1, max_length=64)
    unit: Optional[str] = Field("g", max_length=16)
    calories: Optional[float] = Field(0.0, ge=0)
    protein: Optional[float] = Field(0.0, ge=0)
    carbs: Optional[float] = Field(0.0, ge=0)
    fat: Optional[float] = Field(0.0, ge=0)
    notes: Optional[str] = Field(None, max_length=500)


class Meal(DocumentModel):
    name: str = Field(..., min_length=1, max_length=120)
    time: str = Field(..., min_length=1, max_length=16)
    calories: Optional[float] = Field(0.0, ge=0)
    items: List[FoodItem] = Field(default_factory=list)


class DietPlanCreateRequest(DocumentModel):
    title: str = Field("", max_length=200)
    objective: Optional[str] = Field(None, max_length=500)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    total_calories: Optional[float] = Field(0.0, ge=0)
    macros: Macros = Field(default_factory=Macros)
    meals: List[Meal] = Field(default_factory=list)
    observations: Optional[str] = Field(None, max_length=4000)
    recommendations: List[str] = Field(default_factory=list)


class DietPlanUpdateRequest(DocumentModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    objective: Optional[str] = Field(None, max_length=500)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    total_calories: Optional[float] = Field(None, ge=0)
    macros: Optional[Macros] = None
    meals: Optional[List[Meal]] = None
    observations: Optional[str] = Field(None, max_length=4000)
    recommendations: Optional[List[str]] = None


class DietPlan(DocumentModel):
    id: str
    title: str
    objective: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    total_calories: Optional[float] = None
    macros: Optional[Macros] = None
    meals: List[Meal] = Field(default_factory=list)
    observations: Optional[str] = None
    recommendations: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class DietPlanListResponse(DocumentModel):
    count: int
    items: List[DietPlan]


class DietPlanResponse(DocumentModel):
    plan: DietPlan
    notification: Optional[Notification] = None


class MealCreateRequest(DocumentModel):
    name: str = Field("", max_length=120)
    time: str = Field("", max_length=16)


class FoodItemCreateRequest(DocumentModel):
    food: str = Field("", max_length=200)
    quantity: str = Field("", max_length=64)
    unit: Optional[str] = Field("g", max_length=16)
    calories: Optional[float] = Field(0.0, ge=0)
    protein: Optional[float] = Field(0.0, ge=0)
    carbs: Optional[float] = Field(0.0, ge=0)
    fat: Optional[float] = Field(0.0, ge=0)
    notes: Optional[str] = Field(None, max_length=500)
