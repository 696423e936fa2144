"""Meal runtime — the nutrition twin of the plan runtime.

Meals apply to every day from the plan's start. There is no tag rotation and
no tiered matching: the plan pins at most one template (under
``training_day`` / ``default``), and without a usable pin the first template
matching the user's eating mode wins, else the first template in the pool.
Overrides, diffing and resolution are the same as for workouts.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from fitarc.db.repository import (
    MealTemplateRepository,
    OverrideRepository,
    PlanRepository,
    ProfileRepository,
)
from fitarc.models.meal import MacroTotals, MealDay, MealElement, MealElementInput, MealTemplate
from fitarc.models.plan import OverrideRecord, PlanContext, StagedOverride
from fitarc.services.cadence import iter_dates
from fitarc.services.element_ids import template_element_id_of
from fitarc.services.keys import normalize_key
from fitarc.services.materializer import materialize_meals
from fitarc.services.overrides import MEAL, day_revision, resolve, stage_overrides
from fitarc.services.plan_runtime import check_references, check_revision, remove_with, require_plan

logger = logging.getLogger(__name__)

PIN_KEYS = ("training_day", "default")


def pick_meal_template(
    pool: Sequence[MealTemplate],
    pinned: Optional[dict[str, str]],
    eating_mode: Optional[str],
) -> Optional[MealTemplate]:
    """Pinned id -> eating-mode match -> first template; None for an empty pool."""
    if not pool:
        return None
    for key in PIN_KEYS:
        pinned_id = (pinned or {}).get(key)
        if not pinned_id:
            continue
        for template in pool:
            if template.id == pinned_id:
                return template
    mode = normalize_key(eating_mode)
    for template in pool:
        if mode and normalize_key(template.eating_mode) == mode:
            return template
    return pool[0]


def group_by_meal_type(elements: Sequence[MealElement]) -> dict[str, list[MealElement]]:
    grouped: dict[str, list[MealElement]] = {}
    for element in elements:
        grouped.setdefault(element.meal_type, []).append(element)
    return grouped


def _totals(elements: Sequence[MealElement]) -> MacroTotals:
    return MacroTotals(
        calories=round(sum(e.calories or 0 for e in elements), 1),
        protein_g=round(sum(e.protein_g or 0 for e in elements), 1),
        carbs_g=round(sum(e.carbs_g or 0 for e in elements), 1),
        fats_g=round(sum(e.fats_g or 0 for e in elements), 1),
    )


def _build_meal_day(
    plan: PlanContext, day: date, template: MealTemplate, overrides: list[OverrideRecord]
) -> MealDay:
    elements = resolve(materialize_meals(template, plan.plan_id, day), overrides, MEAL)
    return MealDay(
        id=f"virtual:{plan.plan_id}:{day.isoformat()}",
        plan_id=plan.plan_id,
        user_id=plan.user_id,
        date=day,
        template_id=template.id,
        title=template.title,
        elements=elements,
        meals_by_type=group_by_meal_type(elements),
        totals=_totals(elements),
        revision=day_revision(overrides),
    )


async def _load(
    session: AsyncSession, user_id: str, plan_id: str
) -> tuple[Optional[PlanContext], Optional[MealTemplate]]:
    plan = await PlanRepository(session).get(plan_id)
    if plan is None or plan.user_id != user_id:
        return None, None
    prefs = await ProfileRepository(session).preferences(user_id)
    pool = await MealTemplateRepository(session).visible_to(user_id)
    return plan, pick_meal_template(pool, plan.meal_template_map, prefs.eating_mode)


async def fetch_meals_for_date(
    session: AsyncSession, user_id: str, plan_id: str, day: date
) -> Optional[MealDay]:
    plan, template = await _load(session, user_id, plan_id)
    if plan is None or template is None or day < plan.start_date:
        return None
    overrides = await OverrideRepository.for_meals(session).for_day(user_id, plan_id, day)
    return _build_meal_day(plan, day, template, overrides)


async def fetch_meal_range(
    session: AsyncSession, user_id: str, plan_id: str, start: date, end: date
) -> list[MealDay]:
    plan, template = await _load(session, user_id, plan_id)
    if plan is None or template is None or end < start:
        return []
    first = max(start, plan.start_date)
    if end < first:
        return []
    overrides = await OverrideRepository.for_meals(session).for_range(user_id, plan_id, first, end)
    return [
        _build_meal_day(plan, day, template, overrides.get(day, []))
        for day in iter_dates(first, end)
    ]


def to_meal_inputs(elements: Sequence[MealElement]) -> list[MealElementInput]:
    """Resolved meal entries back to desired inputs, keeping their template source."""
    return [
        MealElementInput(
            id=e.id,
            source_template_element_id=e.template_element_id or template_element_id_of(e.id),
            **e.model_dump(exclude={"id", "template_element_id"}),
        )
        for e in elements
    ]


async def commit_meal_day(
    session: AsyncSession,
    user_id: str,
    plan_id: str,
    day: date,
    desired: Sequence[MealElementInput],
    expected_revision: Optional[str] = None,
) -> Optional[list[StagedOverride]]:
    """Replace the day's meal overrides with the minimal set reproducing ``desired``.

    Returns None, writing nothing, for a day the plan never resolves (before
    the plan starts, or with no meal template visible).
    """
    await require_plan(session, user_id, plan_id)
    check_references(desired, MEAL)

    plan, template = await _load(session, user_id, plan_id)
    if template is None or day < plan.start_date:
        logger.warning("Meal commit for plan %s on %s skipped: day is outside the plan", plan_id, day)
        return None
    baseline = materialize_meals(template, plan_id, day)
    staged = stage_overrides(baseline, desired, MEAL)

    repo = OverrideRepository.for_meals(session)
    await check_revision(repo, user_id, plan_id, day, expected_revision)
    await repo.replace_day(user_id, plan_id, day, staged)
    await session.commit()

    logger.info(
        "Committed meals for plan %s on %s: %d desired, %d override rows",
        plan_id, day, len(desired), len(staged),
    )
    return staged


async def remove_meal_entry(session: AsyncSession, user_id: str, element_id: str) -> bool:
    return await remove_with(session, OverrideRepository.for_meals(session), user_id, element_id)


async def apply_meal_template(
    session: AsyncSession, user_id: str, plan_id: str, day: date, template_id: str
) -> Optional[MealDay]:
    """Pin ``template_id`` for the plan and reset the day's meal customizations.

    Returns None (writing nothing) if the template is not visible to the user.
    """
    plan = await require_plan(session, user_id, plan_id)
    pool = await MealTemplateRepository(session).visible_to(user_id)
    if not any(t.id == template_id for t in pool):
        return None

    mapping = dict(plan.meal_template_map or {})
    mapping.update({key: template_id for key in PIN_KEYS})
    await PlanRepository(session).set_meal_template_map(plan_id, mapping)
    await OverrideRepository.for_meals(session).replace_day(user_id, plan_id, day, [])
    await session.commit()

    logger.info("Applied meal template %s to plan %s from %s", template_id, plan_id, day)
    return await fetch_meals_for_date(session, user_id, plan_id, day)
