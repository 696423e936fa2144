"""Meal plan API routes — resolved meal days and day edits."""
from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from fitarc.api.plans import check_range
from fitarc.db.engine import get_session
from fitarc.models.meal import MealElementInput
from fitarc.services import meal_runtime

router = APIRouter(prefix="/api/v1/users/{user_id}", tags=["meal-plans"])


class CommitMealDayRequest(BaseModel):
    elements: list[MealElementInput] = []
    expected_revision: Optional[str] = None


class ApplyTemplateRequest(BaseModel):
    template_id: str


@router.get("/plans/{plan_id}/meals")
async def meal_range(
    user_id: str,
    plan_id: str,
    start: date = Query(...),
    end: date = Query(...),
    session: AsyncSession = Depends(get_session),
):
    check_range(start, end)
    days = await meal_runtime.fetch_meal_range(session, user_id, plan_id, start, end)
    return {"data": days}


@router.get("/plans/{plan_id}/meals/{day}")
async def meal_day(user_id: str, plan_id: str, day: date, session: AsyncSession = Depends(get_session)):
    resolved = await meal_runtime.fetch_meals_for_date(session, user_id, plan_id, day)
    if resolved is None:
        raise HTTPException(404, "No meals planned for this day")
    return resolved


@router.put("/plans/{plan_id}/meals/{day}")
async def commit_meal_day(
    user_id: str,
    plan_id: str,
    day: date,
    req: CommitMealDayRequest,
    session: AsyncSession = Depends(get_session),
):
    staged = await meal_runtime.commit_meal_day(
        session, user_id, plan_id, day, req.elements, req.expected_revision,
    )
    if staged is None:
        raise HTTPException(404, "No meals planned for this day")
    resolved = await meal_runtime.fetch_meals_for_date(session, user_id, plan_id, day)
    return {"status": "committed", "override_rows": len(staged), "day": resolved}


@router.post("/plans/{plan_id}/meals/{day}/apply-template")
async def apply_template(
    user_id: str,
    plan_id: str,
    day: date,
    req: ApplyTemplateRequest,
    session: AsyncSession = Depends(get_session),
):
    """Switch the plan to another meal template and reset this day's edits."""
    resolved = await meal_runtime.apply_meal_template(session, user_id, plan_id, day, req.template_id)
    if resolved is None:
        raise HTTPException(404, "Meal template not found")
    return resolved


@router.delete("/meal-elements/{element_id}", status_code=204)
async def remove_meal_element(user_id: str, element_id: str, session: AsyncSession = Depends(get_session)):
    if not await meal_runtime.remove_meal_entry(session, user_id, element_id):
        raise HTTPException(404, "Element not found")
