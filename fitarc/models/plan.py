"""Plan data models — templates, resolved elements, overrides and plan days."""
from __future__ import annotations

import datetime as dt
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class OverrideAction(str, Enum):
    ADD = "add"
    REMOVE = "remove"
    REPLACE = "replace"


class TrainingSplit(str, Enum):
    FULL_BODY = "full_body"
    UPPER_LOWER = "upper_lower"
    PUSH_PULL_LEGS = "push_pull_legs"
    BRO_SPLIT = "bro_split"


class EatingMode(str, Enum):
    MILD_DEFICIT = "mild_deficit"
    RECOMP = "recomp"
    LEAN_BULK = "lean_bulk"
    MAINTENANCE = "maintenance"


class UserPreferences(BaseModel):
    """Selector inputs supplied by the user's profile."""
    training_split: str = TrainingSplit.FULL_BODY.value
    days_per_week: Optional[int] = None  # overrides the split's usual cadence
    experience_level: Optional[str] = None  # beginner / intermediate / advanced
    equipment_level: Optional[str] = None  # bodyweight / dumbbells / full_gym
    eating_mode: Optional[str] = None  # mild_deficit / recomp / lean_bulk / maintenance


class PlanContext(BaseModel):
    plan_id: str
    user_id: str
    start_date: date
    goal_type: Optional[str] = None
    template_map: Optional[dict[str, str]] = None
    meal_template_map: Optional[dict[str, str]] = None


# ── Workout templates ───────────────────────────────────────────────────────


class TemplateElement(BaseModel):
    """One prescribed exercise inside a workout template."""
    id: str
    exercise_id: str
    name: str
    movement_pattern: Optional[str] = None
    body_parts: list[str] = []
    sets: Optional[int] = None
    reps: Optional[str] = None  # e.g. "8-12", "5"
    display_order: Optional[int] = None
    notes: Optional[str] = None


class Template(BaseModel):
    id: str
    title: str
    difficulty: Optional[str] = None
    equipment_level: Optional[str] = None
    goal_tags: list[str] = []  # goal aliases and split tags, normalised
    elements: list[TemplateElement] = []


# ── Resolved elements ───────────────────────────────────────────────────────


class PlanElement(BaseModel):
    """A workout element as the user sees it for one day."""
    id: str  # tpl:<plan>:<date>:<element> or ovr:<override>
    template_element_id: Optional[str] = None
    exercise_id: str
    name: str
    movement_pattern: Optional[str] = None
    body_parts: list[str] = []
    sets: Optional[int] = None
    reps: Optional[str] = None
    display_order: Optional[int] = None
    notes: Optional[str] = None


class ElementInput(BaseModel):
    """A desired workout element submitted when a user edits a day.

    ``source_template_element_id`` ties the element to the template element it
    customizes; without it the element is a pure addition. A resolved ``id``
    of the ``tpl:`` form is accepted in its place.
    """
    id: Optional[str] = None
    source_template_element_id: Optional[str] = None
    exercise_id: Optional[str] = None
    name: str = ""
    movement_pattern: Optional[str] = None
    body_parts: list[str] = []
    sets: Optional[int] = Field(None, ge=0, le=100)
    reps: Optional[str] = None
    display_order: Optional[int] = None
    notes: Optional[str] = None


# ── Overrides ───────────────────────────────────────────────────────────────


class OverrideRecord(BaseModel):
    """A persisted per-day override, payload columns flattened into ``payload``."""
    id: str
    user_id: str
    plan_id: str
    day: date
    template_element_id: Optional[str] = None
    action: OverrideAction
    payload: dict[str, Any] = {}
    is_active: bool = True
    created_at: Optional[datetime] = None


class StagedOverride(BaseModel):
    """An override row the diff writer intends to insert."""
    template_element_id: Optional[str] = None
    action: OverrideAction
    payload: dict[str, Any] = {}


# ── Plan days ───────────────────────────────────────────────────────────────


class DayResolution(BaseModel):
    """Everything a client needs to render one scheduled workout day."""
    id: str  # virtual:<plan>:<date>
    plan_id: str
    user_id: str
    date: dt.date
    slot_index: Optional[int] = None
    tag: Optional[str] = None
    template_id: Optional[str] = None
    title: Optional[str] = None
    source: str = "template"
    elements: list[PlanElement] = []
    revision: str = ""
