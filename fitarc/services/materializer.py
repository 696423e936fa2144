"""Baseline materialization — project a template onto one plan day.

Nothing here is persisted: the baseline is rebuilt on every read so it always
reflects the current template and pinning.
"""
from __future__ import annotations

from datetime import date

from fitarc.models.meal import MealElement, MealTemplate
from fitarc.models.plan import PlanElement, Template
from fitarc.services.element_ids import TemplateElementRef
from fitarc.services.overrides import normalize_meal_type

DEFAULT_SETS = 4
DEFAULT_REPS = "8-12"


def _order(element) -> int:
    return element.display_order or 0


def materialize(template: Template, plan_id: str, day: date) -> list[PlanElement]:
    """Virtual elements for ``template`` on ``day``, in template display order."""
    return [
        PlanElement(
            id=str(TemplateElementRef(plan_id, day, element.id)),
            template_element_id=element.id,
            exercise_id=element.exercise_id,
            name=element.name,
            movement_pattern=element.movement_pattern,
            body_parts=list(element.body_parts),
            sets=element.sets if element.sets is not None else DEFAULT_SETS,
            reps=element.reps or DEFAULT_REPS,
            display_order=element.display_order if element.display_order is not None else index + 1,
            notes=element.notes,
        )
        for index, element in enumerate(sorted(template.elements, key=_order))
    ]


def materialize_meals(template: MealTemplate, plan_id: str, day: date) -> list[MealElement]:
    return [
        MealElement(
            id=str(TemplateElementRef(plan_id, day, entry.id)),
            template_element_id=entry.id,
            meal_type=normalize_meal_type(entry.meal_type),
            food_id=entry.food_id,
            food_name=entry.food_name,
            quantity=entry.quantity,
            unit=entry.unit,
            calories=entry.calories,
            protein_g=entry.protein_g,
            carbs_g=entry.carbs_g,
            fats_g=entry.fats_g,
            display_order=entry.display_order if entry.display_order is not None else index + 1,
            notes=entry.notes,
        )
        for index, entry in enumerate(sorted(template.entries, key=_order))
    ]
