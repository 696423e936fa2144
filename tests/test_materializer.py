"""Tests for baseline materialization."""
from __future__ import annotations

from datetime import date

from fitarc.models.meal import MealTemplate, MealTemplateEntry
from fitarc.models.plan import Template, TemplateElement
from fitarc.services.materializer import DEFAULT_REPS, DEFAULT_SETS, materialize, materialize_meals

DAY = date(2024, 1, 3)


def test_workout_elements_follow_template_order():
    template = Template(id="t1", title="Push", elements=[
        TemplateElement(id="e2", exercise_id="ex-ohp", name="Overhead Press", display_order=2),
        TemplateElement(id="e1", exercise_id="ex-bench", name="Bench Press", display_order=1, sets=5, reps="5"),
    ])
    elements = materialize(template, "p1", DAY)

    assert [e.id for e in elements] == ["tpl:p1:2024-01-03:e1", "tpl:p1:2024-01-03:e2"]
    assert [e.template_element_id for e in elements] == ["e1", "e2"]
    assert (elements[0].sets, elements[0].reps) == (5, "5")
    assert (elements[1].sets, elements[1].reps) == (DEFAULT_SETS, DEFAULT_REPS)


def test_missing_display_order_uses_position():
    template = Template(id="t1", title="Full", elements=[
        TemplateElement(id="a", exercise_id="ex-a", name="A"),
        TemplateElement(id="b", exercise_id="ex-b", name="B"),
    ])
    assert [e.display_order for e in materialize(template, "p1", DAY)] == [1, 2]


def test_meal_types_are_normalised():
    template = MealTemplate(id="m1", title="Maintenance", entries=[
        MealTemplateEntry(id="f1", meal_type="breakfast", food_id="oats", food_name="Oats"),
        MealTemplateEntry(id="f2", meal_type=" ", food_id="bar", food_name="Protein Bar"),
        MealTemplateEntry(id="f3", meal_type="Pre-workout", food_id="banana", food_name="Banana"),
    ])
    elements = materialize_meals(template, "p1", DAY)
    assert [e.meal_type for e in elements] == ["Breakfast", "Meal", "Pre-workout"]
    assert elements[0].id == "tpl:p1:2024-01-03:f1"
