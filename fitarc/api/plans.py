"""Workout plan API routes — resolved days, day edits, pinning."""
from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from fitarc.db.engine import get_session
from fitarc.db.tables import UserRow
from fitarc.models.plan import ElementInput
from fitarc.services import plan_runtime

router = APIRouter(prefix="/api/v1/users/{user_id}", tags=["plans"])


class PlanCreateRequest(BaseModel):
    start_date: date
    goal_type: Optional[str] = Field(None, max_length=40)
    pin: bool = Field(True, description="Freeze template choices for the split right away")


class CommitDayRequest(BaseModel):
    elements: list[ElementInput] = []
    expected_revision: Optional[str] = Field(
        None, description="Revision from the last read; stale commits are rejected with 409",
    )


def check_range(start: date, end: date) -> None:
    if end < start:
        raise HTTPException(400, "end must not be before start")
    if (end - start).days + 1 > settings.MAX_RANGE_DAYS:
        raise HTTPException(400, f"Range may cover at most {settings.MAX_RANGE_DAYS} days")


def _plan_out(plan) -> dict:
    return {
        "id": plan.plan_id,
        "user_id": plan.user_id,
        "start_date": str(plan.start_date),
        "goal_type": plan.goal_type,
        "template_map": plan.template_map,
        "meal_template_map": plan.meal_template_map,
    }


@router.post("/plans", status_code=201)
async def create_plan(
    user_id: str,
    req: PlanCreateRequest,
    session: AsyncSession = Depends(get_session),
):
    """Start a new training/eating arc."""
    if await session.get(UserRow, user_id) is None:
        raise HTTPException(404, "User not found")
    plan = await plan_runtime.create_plan(session, user_id, req.start_date, req.goal_type, pin=req.pin)
    return _plan_out(plan)


@router.get("/plans/{plan_id}")
async def get_plan(user_id: str, plan_id: str, session: AsyncSession = Depends(get_session)):
    inputs = await plan_runtime.load_inputs(session, user_id, plan_id)
    if inputs is None:
        raise HTTPException(404, "Plan not found")
    return _plan_out(inputs.plan)


@router.post("/plans/{plan_id}/pin")
async def pin_templates(user_id: str, plan_id: str, session: AsyncSession = Depends(get_session)):
    """Freeze the current template choice for every tag of the user's split."""
    mapping = await plan_runtime.pin_templates(session, user_id, plan_id)
    return {"plan_id": plan_id, "template_map": mapping}


@router.get("/plans/{plan_id}/days")
async def plan_range(
    user_id: str,
    plan_id: str,
    start: date = Query(...),
    end: date = Query(...),
    session: AsyncSession = Depends(get_session),
):
    """Resolved workouts for every scheduled day in [start, end]."""
    check_range(start, end)
    days = await plan_runtime.fetch_plan_range(session, user_id, plan_id, start, end)
    return {"data": days}


@router.get("/plans/{plan_id}/days/{day}")
async def plan_day(user_id: str, plan_id: str, day: date, session: AsyncSession = Depends(get_session)):
    resolved = await plan_runtime.fetch_resolved_for_date(session, user_id, plan_id, day)
    if resolved is None:
        raise HTTPException(404, "No workout scheduled for this day")
    return resolved


@router.post("/plans/{plan_id}/days/{day}/ensure")
async def ensure_day(user_id: str, plan_id: str, day: date, session: AsyncSession = Depends(get_session)):
    """Resolved day, or an empty one when nothing is scheduled."""
    if await plan_runtime.load_inputs(session, user_id, plan_id) is None:
        raise HTTPException(404, "Plan not found")
    return await plan_runtime.ensure_day_exists(session, user_id, plan_id, day)


@router.put("/plans/{plan_id}/days/{day}")
async def commit_day(
    user_id: str,
    plan_id: str,
    day: date,
    req: CommitDayRequest,
    session: AsyncSession = Depends(get_session),
):
    """Replace the day's exercises with ``elements``."""
    staged = await plan_runtime.commit_day(
        session, user_id, plan_id, day, req.elements, req.expected_revision,
    )
    resolved = await plan_runtime.ensure_day_exists(session, user_id, plan_id, day)
    return {"status": "committed", "override_rows": len(staged), "day": resolved}


@router.post("/plans/{plan_id}/days/{day}/elements", status_code=201)
async def append_elements(
    user_id: str,
    plan_id: str,
    day: date,
    req: CommitDayRequest,
    session: AsyncSession = Depends(get_session),
):
    """Append exercises after the day's current ones."""
    staged = await plan_runtime.append_to_day(
        session, user_id, plan_id, day, req.elements, req.expected_revision,
    )
    resolved = await plan_runtime.ensure_day_exists(session, user_id, plan_id, day)
    return {"status": "appended", "override_rows": len(staged), "day": resolved}


@router.delete("/plan-elements/{element_id}", status_code=204)
async def remove_element(user_id: str, element_id: str, session: AsyncSession = Depends(get_session)):
    """Remove one exercise by its ``tpl:`` or ``ovr:`` id."""
    if not await plan_runtime.remove_element(session, user_id, element_id):
        raise HTTPException(404, "Element not found")
