# -*- coding: utf-8 -*-
"""Diet plans — API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import PlainTextResponse

from ..docstore import DocumentStore
from ..messages import notification
from ..models import StatusResponse
from ..repository import ScopedRepository
from ..services import get_repository, get_store
from .models import (
    DietPlan,
    DietPlanCreateRequest,
    DietPlanListResponse,
    DietPlanResponse,
    DietPlanUpdateRequest,
    FoodItemCreateRequest,
    MealCreateRequest,
)
from .storage import (
    add_meal,
    add_meal_item,
    create_plan,
    delete_plan,
    duplicate_plan,
    export_lines,
    list_plans,
    remove_meal,
    remove_meal_item,
    require_plan,
    update_plan,
)

router = APIRouter(prefix="/api/diet-plans", tags=["Diet Plans"])


@router.get("", response_model=DietPlanListResponse, summary="List my diet plans")
def list_my_plans(
    store: DocumentStore = Depends(get_store),
    repo: ScopedRepository = Depends(get_repository),
):
    items = [DietPlan.model_validate(p) for p in list_plans(store, repo)]
    return DietPlanListResponse(count=len(items), items=items)


@router.post("", response_model=DietPlanResponse, summary="Create a diet plan")
def create_my_plan(
    request: DietPlanCreateRequest,
    store: DocumentStore = Depends(get_store),
    repo: ScopedRepository = Depends(get_repository),
):
    fields = request.to_fields()
    fields["title"] = request.title.strip()
    row = create_plan(store, repo, fields)
    return DietPlanResponse(plan=DietPlan.model_validate(row), notification=notification("plan_created"))


@router.get("/{plan_id}", response_model=DietPlanResponse, summary="Get a diet plan")
def get_my_plan(
    plan_id: str,
    store: DocumentStore = Depends(get_store),
    repo: ScopedRepository = Depends(get_repository),
):
    return DietPlanResponse(plan=DietPlan.model_validate(require_plan(store, repo, plan_id)))


@router.patch("/{plan_id}", response_model=DietPlanResponse, summary="Update a diet plan")
def update_my_plan(
    plan_id: str,
    request: DietPlanUpdateRequest,
    store: DocumentStore = Depends(get_store),
    repo: ScopedRepository = Depends(get_repository),
):
    row = update_plan(store, repo, plan_id, request.to_fields(exclude_unset=True))
    return DietPlanResponse(plan=DietPlan.model_validate(row), notification=notification("plan_updated"))


@router.delete("/{plan_id}", response_model=StatusResponse, summary="Delete a diet plan")
def delete_my_plan(
    plan_id: str,
    store: DocumentStore = Depends(get_store),
    repo: ScopedRepository = Depends(get_repository),
):
    if not delete_plan(store, repo, plan_id):
        raise HTTPException(status_code=404, detail="Diet plan not found")
    return StatusResponse(id=plan_id, notification=notification("plan_deleted"))


@router.post("/{plan_id}/duplicate", response_model=DietPlanResponse, summary="Duplicate a diet plan")
def duplicate_my_plan(
    plan_id: str,
    store: DocumentStore = Depends(get_store),
    repo: ScopedRepository = Depends(get_repository),
):
    row = duplicate_plan(store, repo, plan_id)
    return DietPlanResponse(plan=DietPlan.model_validate(row), notification=notification("plan_copied"))


@router.post("/{plan_id}/meals", response_model=DietPlanResponse, summary="Add a meal")
def add_plan_meal(
    plan_id: str,
    request: MealCreateRequest,
    store: DocumentStore = Depends(get_store),
    repo: ScopedRepository = Depends(get_repository),
):
    row = add_meal(store, repo, plan_id, {"name": request.name.strip(), "time": request.time.strip()})
    return DietPlanResponse(plan=DietPlan.model_validate(row), notification=notification("plan_updated"))


@router.delete("/{plan_id}/meals/{meal_index}", response_model=DietPlanResponse, summary="Remove a meal")
def remove_plan_meal(
    plan_id: str,
    meal_index: int,
    store: DocumentStore = Depends(get_store),
    repo: ScopedRepository = Depends(get_repository),
):
    row = remove_meal(store, repo, plan_id, meal_index)
    return DietPlanResponse(plan=DietPlan.model_validate(row), notification=notification("plan_updated"))


@router.post("/{plan_id}/meals/{meal_index}/items", response_model=DietPlanResponse, summary="Add a food item to a meal")
def add_plan_meal_item(
    plan_id: str,
    meal_index: int,
    request: FoodItemCreateRequest,
    store: DocumentStore = Depends(get_store),
    repo: ScopedRepository = Depends(get_repository),
):
    row = add_meal_item(store, repo, plan_id, meal_index, request.to_fields())
    return DietPlanResponse(plan=DietPlan.model_validate(row), notification=notification("plan_updated"))


@router.delete(
    "/{plan_id}/meals/{meal_index}/items/{item_index}",
    response_model=DietPlanResponse,
    summary="Remove a food item from a meal",
)
def remove_plan_meal_item(
    plan_id: str,
    meal_index: int,
    item_index: int,
    store: DocumentStore = Depends(get_store),
    repo: ScopedRepository = Depends(get_repository),
):
    row = remove_meal_item(store, repo, plan_id, meal_index, item_index)
    return DietPlanResponse(plan=DietPlan.model_validate(row), notification=notification("plan_updated"))


@router.get("/{plan_id}/export", response_class=PlainTextResponse, summary="Export a plan as plain text")
def export_my_plan(
    plan_id: str,
    store: DocumentStore = Depends(get_store),
    repo: ScopedRepository = Depends(get_repository),
):
    plan = require_plan(store, repo, plan_id)
    return PlainTextResponse("\n".join(export_lines(plan)))
