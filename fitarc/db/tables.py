"""SQLAlchemy ORM models for the FitArc plan store."""
from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Column, String, Integer, Float, Text, Date, DateTime, JSON, Boolean,
    ForeignKey, Index,
)
from sqlalchemy.orm import DeclarativeBase, relationship


class Base(DeclarativeBase):
    pass


def _uuid() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


class UserRow(Base):
    """User profile — only the fields the plan engine reads."""
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_uuid)
    display_name = Column(String(100), nullable=True)

    training_split = Column(String(40), nullable=True)  # full_body, upper_lower, push_pull_legs, bro_split
    days_per_week = Column(Integer, nullable=True)  # 3-6, overrides the split's cadence
    experience_level = Column(String(20), nullable=True)  # beginner, intermediate, advanced
    equipment_level = Column(String(20), nullable=True)  # bodyweight, dumbbells, full_gym
    eating_mode = Column(String(20), nullable=True)  # mild_deficit, recomp, lean_bulk, maintenance

    created_at = Column(DateTime, default=_now)


class PlanRow(Base):
    """A user's training/eating arc. ``start_date`` never changes after creation."""
    __tablename__ = "workout_plans"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    start_date = Column(Date, nullable=False)
    goal_type = Column(String(40), nullable=True)

    # Pinned selections: {"push": "<template id>", ...} and {"default": ..., "training_day": ...}
    template_map = Column(JSON, nullable=True)
    meal_template_map = Column(JSON, nullable=True)

    created_at = Column(DateTime, default=_now)


# ── Workout templates ───────────────────────────────────────────────────────


class WorkoutTemplateRow(Base):
    __tablename__ = "workout_templates"

    id = Column(String(36), primary_key=True, default=_uuid)
    title = Column(String(200), nullable=False)
    difficulty = Column(String(20), nullable=True)
    equipment_level = Column(String(20), nullable=True)
    goal_tags = Column(JSON, default=list)  # goal aliases + split tags

    created_by = Column(String(36), nullable=True, index=True)
    is_public = Column(Boolean, default=True, nullable=False)
    is_deprecated = Column(Boolean, default=False, nullable=False)

    exercises = relationship(
        "WorkoutTemplateExerciseRow",
        back_populates="template",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class WorkoutTemplateExerciseRow(Base):
    __tablename__ = "workout_template_exercises"

    id = Column(String(36), primary_key=True, default=_uuid)
    template_id = Column(String(36), ForeignKey("workout_templates.id", ondelete="CASCADE"), nullable=False, index=True)
    exercise_id = Column(String(36), nullable=True)
    exercise_name = Column(String(200), nullable=False)
    movement_pattern = Column(String(40), nullable=True)
    body_parts = Column(JSON, default=list)
    sets = Column(Integer, nullable=True)
    reps = Column(String(20), nullable=True)
    display_order = Column(Integer, nullable=True)
    notes = Column(Text, nullable=True)

    template = relationship("WorkoutTemplateRow", back_populates="exercises")


# ── Meal templates ──────────────────────────────────────────────────────────


class MealTemplateRow(Base):
    __tablename__ = "meal_templates"

    id = Column(String(36), primary_key=True, default=_uuid)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    difficulty = Column(String(20), nullable=True)
    eating_mode = Column(String(20), nullable=True)
    goal_tags = Column(JSON, default=list)
    estimated_calories = Column(Float, nullable=True)

    created_by = Column(String(36), nullable=True, index=True)
    is_public = Column(Boolean, default=True, nullable=False)
    is_deprecated = Column(Boolean, default=False, nullable=False)

    entries = relationship(
        "MealTemplateEntryRow",
        back_populates="template",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class MealTemplateEntryRow(Base):
    __tablename__ = "meal_template_entries"

    id = Column(String(36), primary_key=True, default=_uuid)
    template_id = Column(String(36), ForeignKey("meal_templates.id", ondelete="CASCADE"), nullable=False, index=True)
    meal_type = Column(String(20), nullable=True)  # breakfast, lunch, dinner, snack
    food_id = Column(String(36), nullable=True)
    food_name = Column(String(200), nullable=False)
    quantity = Column(Float, nullable=True)
    unit = Column(String(20), nullable=True)
    calories = Column(Float, nullable=True)
    protein_g = Column(Float, nullable=True)
    carbs_g = Column(Float, nullable=True)
    fats_g = Column(Float, nullable=True)
    display_order = Column(Integer, nullable=True)
    notes = Column(Text, nullable=True)

    template = relationship("MealTemplateRow", back_populates="entries")


# ── Overrides ───────────────────────────────────────────────────────────────


class PlanOverrideRow(Base):
    """One customization of a workout day: add / remove / replace."""
    __tablename__ = "plan_overrides"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), nullable=False)
    plan_id = Column(String(36), ForeignKey("workout_plans.id", ondelete="CASCADE"), nullable=False)
    day_date = Column(Date, nullable=False)
    template_element_id = Column(String(36), nullable=True)  # null for bare additions
    action_type = Column(String(10), nullable=False)

    exercise_id = Column(String(36), nullable=True)
    name = Column(String(200), nullable=True)
    movement_pattern = Column(String(40), nullable=True)
    body_parts = Column(JSON, nullable=True)
    sets = Column(Integer, nullable=True)
    reps = Column(String(20), nullable=True)
    display_order = Column(Integer, nullable=True)
    notes = Column(Text, nullable=True)

    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=_now)

    __table_args__ = (
        Index("ix_plan_overrides_scope", "user_id", "plan_id", "day_date"),
    )


class MealOverrideRow(Base):
    """One customization of a meal day."""
    __tablename__ = "meal_overrides"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), nullable=False)
    plan_id = Column(String(36), ForeignKey("workout_plans.id", ondelete="CASCADE"), nullable=False)
    day_date = Column(Date, nullable=False)
    template_element_id = Column(String(36), nullable=True)
    action_type = Column(String(10), nullable=False)

    meal_type = Column(String(20), nullable=True)
    food_id = Column(String(36), nullable=True)
    food_name = Column(String(200), nullable=True)
    quantity = Column(Float, nullable=True)
    unit = Column(String(20), nullable=True)
    calories = Column(Float, nullable=True)
    protein_g = Column(Float, nullable=True)
    carbs_g = Column(Float, nullable=True)
    fats_g = Column(Float, nullable=True)
    display_order = Column(Integer, nullable=True)
    notes = Column(Text, nullable=True)

    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=_now)

    __table_args__ = (
        Index("ix_meal_overrides_scope", "user_id", "plan_id", "day_date"),
    )
