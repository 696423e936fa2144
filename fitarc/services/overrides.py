"""Per-day overrides — resolution onto a baseline and minimal diff staging.

Workouts and meals share the same machinery; an ``ElementKind`` describes
the element model, its catalog reference and the user-visible fields that
an override row can carry.
"""
from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence

from pydantic import BaseModel

from fitarc.models.meal import MealElement
from fitarc.models.plan import OverrideAction, OverrideRecord, PlanElement, StagedOverride
from fitarc.services.element_ids import OverrideRef, template_element_id_of
from fitarc.services.keys import normalize_key, normalize_keys, normalize_text

_MEAL_TYPES = {
    "breakfast": "Breakfast",
    "lunch": "Lunch",
    "dinner": "Dinner",
    "snack": "Snack",
}


def normalize_meal_type(value: Optional[str]) -> str:
    key = normalize_key(value)
    if not key:
        return "Meal"
    return _MEAL_TYPES.get(key, value.strip())


@dataclass(frozen=True)
class ElementKind:
    name: str
    element_model: type[BaseModel]
    reference_field: str
    payload_fields: tuple[str, ...]
    text_fields: tuple[str, ...] = ()
    key_list_fields: tuple[str, ...] = ()
    canonical: Mapping[str, Callable[[Any], Any]] = field(default_factory=dict)
    addition_defaults: Mapping[str, Any] = field(default_factory=dict)

    def clean(self, payload: Mapping[str, Any]) -> dict[str, Any]:
        """Canonical payload: blank text unset, canonical fields mapped."""
        out: dict[str, Any] = {}
        for name in self.payload_fields:
            value = payload.get(name)
            if name in self.text_fields:
                value = normalize_text(value)
            if value is not None and name in self.canonical:
                value = self.canonical[name](value)
            out[name] = value
        return out

    def comparable(self, payload: Mapping[str, Any]) -> dict[str, Any]:
        cleaned = self.clean(payload)
        for name in self.key_list_fields:
            cleaned[name] = normalize_keys(cleaned.get(name))
        return cleaned

    def same_content(self, payload: Mapping[str, Any], element: BaseModel) -> bool:
        baseline = {name: getattr(element, name) for name in self.payload_fields}
        return self.comparable(payload) == self.comparable(baseline)


WORKOUT = ElementKind(
    name="workout",
    element_model=PlanElement,
    reference_field="exercise_id",
    payload_fields=(
        "exercise_id", "name", "movement_pattern", "body_parts",
        "sets", "reps", "display_order", "notes",
    ),
    text_fields=("exercise_id", "name", "movement_pattern", "reps", "notes"),
    key_list_fields=("body_parts",),
    addition_defaults={"exercise_id": "", "name": "Custom Exercise", "sets": 4, "reps": "8-12"},
)

MEAL = ElementKind(
    name="meal",
    element_model=MealElement,
    reference_field="food_id",
    payload_fields=(
        "meal_type", "food_id", "food_name", "quantity", "unit",
        "calories", "protein_g", "carbs_g", "fats_g", "display_order", "notes",
    ),
    text_fields=("food_id", "food_name", "unit", "notes"),
    canonical={"meal_type": normalize_meal_type},
    addition_defaults={"food_id": "", "food_name": "Meal Item", "meal_type": "Meal"},
)


def _set_fields(kind: ElementKind, payload: Mapping[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in kind.clean(payload).items() if v is not None}


def resolve(
    baseline: Sequence[BaseModel],
    overrides: Iterable[OverrideRecord],
    kind: ElementKind = WORKOUT,
) -> list:
    """Apply a day's overrides to its baseline.

    Keyed overrides replace or remove the baseline element with the same
    template element id (the last one wins); bare additions are appended
    with ``ovr:`` ids. The result is sorted by display order, unset = 0.
    """
    keyed: dict[str, OverrideRecord] = {}
    additions: list[OverrideRecord] = []
    for row in overrides:
        if not row.is_active:
            continue
        if row.template_element_id:
            keyed[row.template_element_id] = row
        elif row.action == OverrideAction.ADD:
            additions.append(row)

    resolved: list = []
    for element in baseline:
        row = keyed.get(element.template_element_id) if element.template_element_id else None
        if row is None:
            resolved.append(element)
        elif row.action != OverrideAction.REMOVE:
            # unset payload fields fall back to the baseline; the id is kept
            resolved.append(element.model_copy(update=_set_fields(kind, row.payload)))

    for row in additions:
        data = dict(kind.addition_defaults)
        data.update(_set_fields(kind, row.payload))
        resolved.append(kind.element_model(
            id=str(OverrideRef(row.id)), template_element_id=None, **data,
        ))

    return sorted(resolved, key=lambda e: e.display_order or 0)


def source_element_id(item: BaseModel) -> Optional[str]:
    """The template element a desired item customizes, if any."""
    return (
        normalize_text(getattr(item, "source_template_element_id", None))
        or template_element_id_of(getattr(item, "id", None))
    )


def stage_overrides(
    baseline: Sequence[BaseModel],
    desired: Sequence[BaseModel],
    kind: ElementKind = WORKOUT,
) -> list[StagedOverride]:
    """Compute the minimal override rows that turn ``baseline`` into ``desired``.

    - sourced and identical to its baseline element: no row
    - sourced and different: ``replace``
    - no source (or a source the baseline no longer has, or a repeated source): ``add``
    - baseline element not referenced by any desired item: ``remove``

    Desired items without a display order take their 1-based list position.
    """
    by_source = {e.template_element_id: e for e in baseline if e.template_element_id}
    claimed: set[str] = set()
    staged: list[StagedOverride] = []

    for index, item in enumerate(desired):
        payload = {name: getattr(item, name, None) for name in kind.payload_fields}
        if payload.get("display_order") is None:
            payload["display_order"] = index + 1
        payload = kind.clean(payload)

        source = source_element_id(item)
        if source and source in by_source and source not in claimed:
            claimed.add(source)
            if kind.same_content(payload, by_source[source]):
                continue
            staged.append(StagedOverride(
                template_element_id=source, action=OverrideAction.REPLACE, payload=payload,
            ))
            continue

        staged.append(StagedOverride(action=OverrideAction.ADD, payload=payload))

    for source in by_source:
        if source not in claimed:
            staged.append(StagedOverride(template_element_id=source, action=OverrideAction.REMOVE))

    return staged


def day_revision(overrides: Iterable[OverrideRecord]) -> str:
    """Digest of a day's active override rows.

    Every commit re-inserts the day's rows under fresh ids, so the digest
    changes whenever the day is written with any customization.
    """
    ids = sorted(row.id for row in overrides if row.is_active)
    return hashlib.sha256("|".join(ids).encode()).hexdigest()[:16]
