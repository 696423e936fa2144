"""Meal plan models — the nutrition twin of the workout plan models."""
from __future__ import annotations

import datetime as dt
from typing import Optional

from pydantic import BaseModel, Field


class MealTemplateEntry(BaseModel):
    id: str
    meal_type: str = "Meal"
    food_id: str
    food_name: str
    quantity: Optional[float] = None
    unit: Optional[str] = None
    calories: Optional[float] = None
    protein_g: Optional[float] = None
    carbs_g: Optional[float] = None
    fats_g: Optional[float] = None
    display_order: Optional[int] = None
    notes: Optional[str] = None


class MealTemplate(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    difficulty: Optional[str] = None
    eating_mode: Optional[str] = None
    goal_tags: list[str] = []
    estimated_calories: Optional[float] = None
    entries: list[MealTemplateEntry] = []


class MealElement(BaseModel):
    """A food entry as the user sees it for one day."""
    id: str
    template_element_id: Optional[str] = None
    meal_type: str = "Meal"
    food_id: str
    food_name: str
    quantity: Optional[float] = None
    unit: Optional[str] = None
    calories: Optional[float] = None
    protein_g: Optional[float] = None
    carbs_g: Optional[float] = None
    fats_g: Optional[float] = None
    display_order: Optional[int] = None
    notes: Optional[str] = None


class MealElementInput(BaseModel):
    id: Optional[str] = None
    source_template_element_id: Optional[str] = None
    meal_type: Optional[str] = None
    food_id: Optional[str] = None
    food_name: str = ""
    quantity: Optional[float] = Field(None, ge=0)
    unit: Optional[str] = None
    calories: Optional[float] = Field(None, ge=0)
    protein_g: Optional[float] = Field(None, ge=0)
    carbs_g: Optional[float] = Field(None, ge=0)
    fats_g: Optional[float] = Field(None, ge=0)
    display_order: Optional[int] = None
    notes: Optional[str] = None


class MacroTotals(BaseModel):
    calories: float = 0
    protein_g: float = 0
    carbs_g: float = 0
    fats_g: float = 0


class MealDay(BaseModel):
    id: str
    plan_id: str
    user_id: str
    date: dt.date
    template_id: Optional[str] = None
    title: Optional[str] = None
    elements: list[MealElement] = []
    meals_by_type: dict[str, list[MealElement]] = {}
    totals: MacroTotals = MacroTotals()
    revision: str = ""
