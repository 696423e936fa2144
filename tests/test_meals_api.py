"""Tests for the meal plan routes."""
from __future__ import annotations

import pytest
import pytest_asyncio

from tests.conftest import get_test_session, seed_meal_template, seed_plan, seed_user

BASE = "/api/v1/users/u1"


@pytest_asyncio.fixture
async def meal_plan():
    async with get_test_session() as session:
        await seed_user(session, "u1", eating_mode="lean_bulk")
        await seed_meal_template(session, "mt-bulk", "Bulk Day", "lean_bulk", [
            dict(id="b1", meal_type="breakfast", food_id="eggs", food_name="Whole Eggs",
                 calories=210, protein_g=18, carbs_g=1, fats_g=15, display_order=1),
            dict(id="b2", meal_type="dinner", food_id="salmon", food_name="Salmon",
                 calories=400, protein_g=40, carbs_g=0, fats_g=25, display_order=2),
        ])
        await seed_meal_template(session, "mt-cut", "Cut Day", "mild_deficit", [
            dict(id="c1", meal_type="lunch", food_id="tuna", food_name="Tuna", calories=150, display_order=1),
        ])
        await seed_plan(session, "p1", "u1")
        await session.commit()


@pytest.mark.asyncio
async def test_meal_day(client, meal_plan):
    resp = await client.get(f"{BASE}/plans/p1/meals/2024-01-06")
    assert resp.status_code == 200
    day = resp.json()
    assert day["template_id"] == "mt-bulk"
    assert set(day["meals_by_type"]) == {"Breakfast", "Dinner"}
    assert day["totals"]["calories"] == 610

    resp = await client.get(f"{BASE}/plans/p1/meals/2023-12-01")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_meal_range(client, meal_plan):
    resp = await client.get(f"{BASE}/plans/p1/meals", params={"start": "2024-01-01", "end": "2024-01-07"})
    assert resp.status_code == 200
    assert len(resp.json()["data"]) == 7


@pytest.mark.asyncio
async def test_commit_and_remove(client, meal_plan):
    day = (await client.get(f"{BASE}/plans/p1/meals/2024-01-02")).json()
    eggs = day["elements"][0]
    resp = await client.put(f"{BASE}/plans/p1/meals/2024-01-02", json={
        "elements": [
            {**eggs, "quantity": 3},
            {"meal_type": "snack", "food_id": "yogurt", "food_name": "Greek Yogurt", "calories": 100},
        ],
        "expected_revision": day["revision"],
    })
    assert resp.status_code == 200
    body = resp.json()
    assert body["override_rows"] == 3
    elements = body["day"]["elements"]
    assert [e["food_name"] for e in elements] == ["Whole Eggs", "Greek Yogurt"]

    resp = await client.delete(f"{BASE}/meal-elements/{elements[1]['id']}")
    assert resp.status_code == 204
    day = (await client.get(f"{BASE}/plans/p1/meals/2024-01-02")).json()
    assert [e["food_name"] for e in day["elements"]] == ["Whole Eggs"]


@pytest.mark.asyncio
async def test_commit_before_plan_start_is_404(client, meal_plan):
    resp = await client.put(f"{BASE}/plans/p1/meals/2023-12-31", json={
        "elements": [{"meal_type": "snack", "food_id": "yogurt", "food_name": "Greek Yogurt"}],
    })
    assert resp.status_code == 404
    assert resp.json()["message"] == "No meals planned for this day"


@pytest.mark.asyncio
async def test_apply_template(client, meal_plan):
    resp = await client.post(f"{BASE}/plans/p1/meals/2024-01-02/apply-template", json={"template_id": "mt-cut"})
    assert resp.status_code == 200
    assert resp.json()["template_id"] == "mt-cut"

    # The pin holds for every other day too
    day = (await client.get(f"{BASE}/plans/p1/meals/2024-01-05")).json()
    assert [e["food_name"] for e in day["elements"]] == ["Tuna"]

    resp = await client.post(f"{BASE}/plans/p1/meals/2024-01-02/apply-template", json={"template_id": "nope"})
    assert resp.status_code == 404
