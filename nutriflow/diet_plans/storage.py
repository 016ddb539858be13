# -*- coding: utf-8 -*-
"""Diet plans — document helpers under ``users/{uid}/dietPlans``."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from ..docstore import DocumentStore
from ..errors import DocumentNotFoundError, ValidationFailedError, reported_write
from ..repository import ScopedRepository
from ..sync import add_food_item, remove_food_item, strip_identity
from ..timestamps import SERVER_TIMESTAMP

COPY_SUFFIX = " - Cópia"


def _require_text(fields: Dict[str, Any], keys: List[str], message_key: str) -> None:
    missing = [k for k in keys if not str(fields.get(k) or "").strip()]
    if missing:
        raise ValidationFailedError(f"Missing fields: {', '.join(missing)}", message_key=message_key)


def list_plans(store: DocumentStore, repo: ScopedRepository) -> List[Dict[str, Any]]:
    ref = repo.diet_plans()
    if ref is None:
        return []
    return [d.to_dict() for d in store.get(ref.query().order_by("createdAt", "desc"))]


def get_plan(store: DocumentStore, repo: ScopedRepository, plan_id: str) -> Optional[Dict[str, Any]]:
    ref = repo.diet_plans()
    if ref is None:
        return None
    snap = store.get_document(ref.doc(plan_id).path)
    return snap.to_dict() if snap else None


def require_plan(store: DocumentStore, repo: ScopedRepository, plan_id: str) -> Dict[str, Any]:
    plan = get_plan(store, repo, plan_id)
    if not plan:
        raise DocumentNotFoundError(f"dietPlans/{plan_id}")
    return plan


def create_plan(store: DocumentStore, repo: ScopedRepository, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    ref = repo.diet_plans()
    if ref is None:
        return None
    _require_text(fields, ["title"], "plan_title_required")
    data = {**fields, "createdAt": SERVER_TIMESTAMP, "updatedAt": SERVER_TIMESTAMP}
    with reported_write("create", ref.path, "plan_create_failed"):
        snap = store.add(ref.path, data)
    return snap.to_dict()


def update_plan(
    store: DocumentStore,
    repo: ScopedRepository,
    plan_id: str,
    fields: Dict[str, Any],
) -> Optional[Dict[str, Any]]:
    ref = repo.diet_plans()
    if ref is None:
        return None
    path = ref.doc(plan_id).path
    fields = {k: v for k, v in fields.items() if k not in {"id", "createdAt"}}
    with reported_write("update", path, "plan_update_failed"):
        snap = store.update(path, {**fields, "updatedAt": SERVER_TIMESTAMP})
    return snap.to_dict()


def delete_plan(store: DocumentStore, repo: ScopedRepository, plan_id: str) -> bool:
    ref = repo.diet_plans()
    if ref is None:
        return False
    path = ref.doc(plan_id).path
    with reported_write("delete", path, "plan_delete_failed"):
        return store.delete(path)


def duplicate_plan(store: DocumentStore, repo: ScopedRepository, plan_id: str) -> Optional[Dict[str, Any]]:
    """Insert a copy of the plan under a fresh store-assigned id."""
    ref = repo.diet_plans()
    if ref is None:
        return None
    source = require_plan(store, repo, plan_id)
    copied = strip_identity(source)
    copied.update(
        {
            "title": f"{source.get('title') or ''}{COPY_SUFFIX}",
            "createdAt": SERVER_TIMESTAMP,
            "updatedAt": SERVER_TIMESTAMP,
        }
    )
    with reported_write("create", ref.path, "plan_copy_failed"):
        snap = store.add(ref.path, copied)
    return snap.to_dict()


def _meals(plan: Dict[str, Any]) -> List[Dict[str, Any]]:
    return [dict(m) for m in (plan.get("meals") or [])]


def _meal_at(meals: List[Dict[str, Any]], index: int) -> Dict[str, Any]:
    if not 0 <= index < len(meals):
        raise DocumentNotFoundError(f"meals/{index}")
    return meals[index]


def add_meal(store: DocumentStore, repo: ScopedRepository, plan_id: str, meal: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    _require_text(meal, ["name", "time"], "meal_fields_required")
    plan = require_plan(store, repo, plan_id)
    meals = _meals(plan)
    meals.append({"name": meal["name"], "time": meal["time"], "calories": 0, "items": []})
    return update_plan(store, repo, plan_id, {"meals": meals})


def remove_meal(store: DocumentStore, repo: ScopedRepository, plan_id: str, meal_index: int) -> Optional[Dict[str, Any]]:
    plan = require_plan(store, repo, plan_id)
    meals = _meals(plan)
    _meal_at(meals, meal_index)
    del meals[meal_index]
    return update_plan(store, repo, plan_id, {"meals": meals})


def add_meal_item(
    store: DocumentStore,
    repo: ScopedRepository,
    plan_id: str,
    meal_index: int,
    item: Dict[str, Any],
) -> Optional[Dict[str, Any]]:
    _require_text(item, ["food", "quantity"], "food_fields_required")
    plan = require_plan(store, repo, plan_id)
    meals = _meals(plan)
    meals[meal_index] = add_food_item(_meal_at(meals, meal_index), item)
    return update_plan(store, repo, plan_id, {"meals": meals})


def remove_meal_item(
    store: DocumentStore,
    repo: ScopedRepository,
    plan_id: str,
    meal_index: int,
    item_index: int,
) -> Optional[Dict[str, Any]]:
    plan = require_plan(store, repo, plan_id)
    meals = _meals(plan)
    meal = _meal_at(meals, meal_index)
    try:
        meals[meal_index] = remove_food_item(meal, item_index)
    except IndexError as exc:
        raise DocumentNotFoundError(f"meals/{meal_index}/items/{item_index}") from exc
    return update_plan(store, repo, plan_id, {"meals": meals})


def _num(value: Any) -> str:
    number = float(value or 0)
    return str(int(number)) if number.is_integer() else f"{number:g}"


def export_lines(plan: Dict[str, Any]) -> List[str]:
    """Plain-text rendition of a plan, section by section."""
    lines = ["Plano Alimentar", plan.get("title") or ""]
    lines.append(f"Objetivo: {plan.get('objective') or 'Não especificado'}")
    lines.append(f"Calorias totais: {_num(plan.get('totalCalories'))} kcal")
    macros = plan.get("macros")
    if macros:
        lines.append(
            f"Proteínas: {_num(macros.get('protein'))}g | Carboidratos: {_num(macros.get('carbs'))}g"
            f" | Gorduras: {_num(macros.get('fat'))}g"
        )
    for meal in plan.get("meals") or []:
        lines.append("")
        lines.append(f"{meal.get('name')} ({meal.get('time')})")
        for item in meal.get("items") or []:
            unit = item.get("unit") or ""
            lines.append(f"• {item.get('food')} - {item.get('quantity')} {unit} ({_num(item.get('calories'))} kcal)")
    recommendations = plan.get("recommendations") or []
    if recommendations:
        lines.append("")
        lines.append("Recomendações:")
        lines.extend(f"• {rec}" for rec in recommendations)
    return lines
