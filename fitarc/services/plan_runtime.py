"""Plan runtime — resolve workout days from templates + overrides, and write edits back.

Reads run Scheduler -> Selector -> Materializer -> Resolver on every call;
nothing is cached between calls. Writes recompute the day's baseline, diff the
caller's desired list against it, and replace the day's override rows with the
minimal set that reproduces that list.

Same-day commits are last-writer-wins. Callers that need more can pass the
``revision`` they last read as ``expected_revision``; the commit is then
refused with StaleDayError if the day changed in between.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional, Sequence

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from fitarc.db.repository import (
    OverrideRepository,
    PlanRepository,
    ProfileRepository,
    WorkoutTemplateRepository,
)
from fitarc.errors import MissingReferenceError, PlanOwnershipError, StaleDayError
from fitarc.models.plan import (
    DayResolution,
    ElementInput,
    OverrideRecord,
    PlanContext,
    PlanElement,
    StagedOverride,
    Template,
    UserPreferences,
)
from fitarc.services.cadence import active_dates, resolve_cadence, slot_index, split_tags, tag_for_slot
from fitarc.services.element_ids import OverrideRef, parse_element_id, template_element_id_of
from fitarc.services.keys import normalize_text
from fitarc.services.materializer import materialize
from fitarc.services.overrides import WORKOUT, ElementKind, day_revision, resolve, stage_overrides
from fitarc.services.template_selector import build_template_map, select_template

logger = logging.getLogger(__name__)


@dataclass
class PlanInputs:
    """Everything one resolution needs, loaded once per request."""
    plan: PlanContext
    prefs: UserPreferences
    pool: list[Template]

    @property
    def cadence(self) -> int:
        return resolve_cadence(self.prefs.training_split, self.prefs.days_per_week)


@dataclass
class _Choice:
    slot: int
    tag: str
    template: Template


# ── Shared helpers (also used by the meal runtime) ──────────────────────────


async def require_plan(session: AsyncSession, user_id: str, plan_id: str) -> PlanContext:
    """Load the plan, refusing if it is missing or owned by someone else."""
    plan = await PlanRepository(session).get(plan_id)
    if plan is None or plan.user_id != user_id:
        logger.warning("Plan %s refused for user %s (missing or not owned)", plan_id, user_id)
        raise PlanOwnershipError(plan_id, user_id)
    return plan


def check_references(desired: Sequence[BaseModel], kind: ElementKind) -> None:
    for position, item in enumerate(desired):
        if not normalize_text(getattr(item, kind.reference_field, None)):
            raise MissingReferenceError(position, kind.reference_field)


async def check_revision(
    repo: OverrideRepository, user_id: str, plan_id: str, day: date, expected: Optional[str]
) -> None:
    if expected is None:
        return
    actual = day_revision(await repo.for_day(user_id, plan_id, day))
    if actual != expected:
        logger.warning("Stale commit for plan %s on %s (%s != %s)", plan_id, day, expected, actual)
        raise StaleDayError(expected, actual)


async def remove_with(
    session: AsyncSession, repo: OverrideRepository, user_id: str, element_id: str
) -> bool:
    """Remove one element by id. Returns False when an ``ovr:`` id is unknown."""
    ref = parse_element_id(element_id)

    if isinstance(ref, OverrideRef):
        record = await repo.get(ref.override_id)
        if record is None:
            return False
        if record.user_id != user_id:
            raise PlanOwnershipError(record.plan_id, user_id)
        await repo.deactivate(ref.override_id)
    else:
        await require_plan(session, user_id, ref.plan_id)
        await repo.mark_removed(user_id, ref.plan_id, ref.day, ref.element_id)

    await session.commit()
    logger.info("Removed %s element %s", repo.kind.name, element_id)
    return True


# ── Reads ───────────────────────────────────────────────────────────────────


async def load_inputs(session: AsyncSession, user_id: str, plan_id: str) -> Optional[PlanInputs]:
    """None when the plan is missing or belongs to another user."""
    plan = await PlanRepository(session).get(plan_id)
    if plan is None or plan.user_id != user_id:
        return None
    prefs = await ProfileRepository(session).preferences(user_id)
    pool = await WorkoutTemplateRepository(session).visible_to(user_id)
    return PlanInputs(plan=plan, prefs=prefs, pool=pool)


def _choose(inputs: PlanInputs, day: date) -> Optional[_Choice]:
    slot = slot_index(inputs.plan.start_date, inputs.cadence, day)
    if slot is None:
        return None
    tag = tag_for_slot(inputs.prefs.training_split, slot)
    template = select_template(
        tag,
        inputs.pool,
        inputs.plan.goal_type,
        inputs.prefs.equipment_level,
        inputs.prefs.experience_level,
        slot,
        pinned=inputs.plan.template_map,
    )
    if template is None:
        return None
    return _Choice(slot=slot, tag=tag, template=template)


def _virtual_day_id(plan_id: str, day: date) -> str:
    return f"virtual:{plan_id}:{day.isoformat()}"


def _build_day(
    inputs: PlanInputs, day: date, choice: _Choice, overrides: list[OverrideRecord]
) -> DayResolution:
    baseline = materialize(choice.template, inputs.plan.plan_id, day)
    return DayResolution(
        id=_virtual_day_id(inputs.plan.plan_id, day),
        plan_id=inputs.plan.plan_id,
        user_id=inputs.plan.user_id,
        date=day,
        slot_index=choice.slot,
        tag=choice.tag,
        template_id=choice.template.id,
        title=choice.template.title,
        elements=resolve(baseline, overrides, WORKOUT),
        revision=day_revision(overrides),
    )


async def fetch_plan_range(
    session: AsyncSession, user_id: str, plan_id: str, start: date, end: date
) -> list[DayResolution]:
    """One resolution per active date in [start, end] that has a template."""
    inputs = await load_inputs(session, user_id, plan_id)
    if inputs is None or not inputs.pool or end < start:
        return []

    overrides = await OverrideRepository(session).for_range(user_id, plan_id, start, end)
    days: list[DayResolution] = []
    for day in active_dates(inputs.plan.start_date, inputs.cadence, start, end):
        choice = _choose(inputs, day)
        if choice is not None:
            days.append(_build_day(inputs, day, choice, overrides.get(day, [])))
    return days


async def fetch_resolved_for_date(
    session: AsyncSession, user_id: str, plan_id: str, day: date
) -> Optional[DayResolution]:
    inputs = await load_inputs(session, user_id, plan_id)
    if inputs is None or not inputs.pool:
        return None
    choice = _choose(inputs, day)
    if choice is None:
        return None
    overrides = await OverrideRepository(session).for_day(user_id, plan_id, day)
    return _build_day(inputs, day, choice, overrides)


async def ensure_day_exists(
    session: AsyncSession, user_id: str, plan_id: str, day: date
) -> DayResolution:
    """The resolved day, or an empty virtual day when nothing is scheduled."""
    resolved = await fetch_resolved_for_date(session, user_id, plan_id, day)
    if resolved is not None:
        return resolved
    return DayResolution(
        id=_virtual_day_id(plan_id, day),
        plan_id=plan_id,
        user_id=user_id,
        date=day,
        revision=day_revision([]),
    )


def to_element_inputs(elements: Sequence[PlanElement]) -> list[ElementInput]:
    """Turn resolved elements back into desired inputs, keeping their template source."""
    return [
        ElementInput(
            id=e.id,
            source_template_element_id=e.template_element_id or template_element_id_of(e.id),
            exercise_id=e.exercise_id,
            name=e.name,
            movement_pattern=e.movement_pattern,
            body_parts=list(e.body_parts),
            sets=e.sets,
            reps=e.reps,
            display_order=e.display_order,
            notes=e.notes,
        )
        for e in elements
    ]


# ── Writes ──────────────────────────────────────────────────────────────────


def _baseline(inputs: PlanInputs, day: date) -> list[PlanElement]:
    choice = _choose(inputs, day) if inputs.pool else None
    if choice is None:
        return []
    return materialize(choice.template, inputs.plan.plan_id, day)


async def commit_day(
    session: AsyncSession,
    user_id: str,
    plan_id: str,
    day: date,
    desired: Sequence[ElementInput],
    expected_revision: Optional[str] = None,
) -> list[StagedOverride]:
    """Persist the overrides that turn the day's baseline into ``desired``.

    All of the day's existing overrides are deleted and the staged set is
    inserted in the same transaction. Store errors propagate untouched.
    """
    await require_plan(session, user_id, plan_id)
    check_references(desired, WORKOUT)

    inputs = await load_inputs(session, user_id, plan_id)
    baseline = _baseline(inputs, day)
    staged = stage_overrides(baseline, desired, WORKOUT)

    repo = OverrideRepository(session)
    await check_revision(repo, user_id, plan_id, day, expected_revision)
    await repo.replace_day(user_id, plan_id, day, staged)
    await session.commit()

    logger.info(
        "Committed plan %s on %s: %d desired, %d override rows",
        plan_id, day, len(desired), len(staged),
    )
    return staged


async def append_to_day(
    session: AsyncSession,
    user_id: str,
    plan_id: str,
    day: date,
    additions: Sequence[ElementInput],
    expected_revision: Optional[str] = None,
) -> list[StagedOverride]:
    """Append elements after the day's current ones and commit the result."""
    await require_plan(session, user_id, plan_id)
    existing = await fetch_resolved_for_date(session, user_id, plan_id, day)
    current = to_element_inputs(existing.elements if existing else [])
    next_order = max((e.display_order or 0 for e in current), default=0) + 1
    appended = [
        item if item.display_order is not None
        else item.model_copy(update={"display_order": next_order + offset})
        for offset, item in enumerate(additions)
    ]
    return await commit_day(session, user_id, plan_id, day, current + appended, expected_revision)


async def remove_element(session: AsyncSession, user_id: str, element_id: str) -> bool:
    """Remove one workout element by its ``tpl:`` or ``ovr:`` id."""
    return await remove_with(session, OverrideRepository(session), user_id, element_id)


async def pin_templates(session: AsyncSession, user_id: str, plan_id: str) -> Optional[dict[str, str]]:
    """Freeze a template per tag of the user's split onto the plan.

    Returns None (and writes nothing) when the plan is missing/not owned or no
    template is visible.
    """
    inputs = await load_inputs(session, user_id, plan_id)
    if inputs is None or not inputs.pool:
        return None

    mapping = build_template_map(
        split_tags(inputs.prefs.training_split),
        inputs.pool,
        inputs.plan.goal_type,
        inputs.prefs.equipment_level,
        inputs.prefs.experience_level,
    )
    if not mapping:
        return None

    await PlanRepository(session).set_template_map(plan_id, mapping)
    await session.commit()
    logger.info("Pinned %d templates on plan %s", len(mapping), plan_id)
    return mapping


async def create_plan(
    session: AsyncSession,
    user_id: str,
    start_date: date,
    goal_type: Optional[str] = None,
    pin: bool = False,
) -> PlanContext:
    """Start a new arc for the user, optionally pinning its templates right away."""
    plan = await PlanRepository(session).create(user_id, start_date, goal_type)
    await session.commit()
    logger.info("Created plan %s for user %s starting %s", plan.plan_id, user_id, start_date)
    if pin:
        mapping = await pin_templates(session, user_id, plan.plan_id)
        plan = plan.model_copy(update={"template_map": mapping})
    return plan
