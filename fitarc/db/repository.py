"""Plan store repositories — filtered reads/writes + Pydantic conversion."""
from __future__ import annotations

import uuid
from collections import defaultdict
from datetime import date
from typing import Iterable, Optional

from sqlalchemy import select, delete, or_
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from fitarc.db.tables import (
    MealOverrideRow,
    MealTemplateRow,
    PlanOverrideRow,
    PlanRow,
    UserRow,
    WorkoutTemplateRow,
)
from fitarc.models.meal import MealTemplate, MealTemplateEntry
from fitarc.models.plan import (
    OverrideAction,
    OverrideRecord,
    PlanContext,
    StagedOverride,
    Template,
    TemplateElement,
    UserPreferences,
)
from fitarc.services.keys import normalize_key_map, normalize_keys
from fitarc.services.overrides import MEAL, WORKOUT, ElementKind


def _by_display_order(items: Iterable) -> list:
    return sorted(items, key=lambda i: i.display_order or 0)


def _row_to_plan(row: PlanRow) -> PlanContext:
    return PlanContext(
        plan_id=row.id,
        user_id=row.user_id,
        start_date=row.start_date,
        goal_type=row.goal_type,
        template_map=normalize_key_map(row.template_map),
        meal_template_map=normalize_key_map(row.meal_template_map),
    )


def _row_to_template(row: WorkoutTemplateRow) -> Template:
    """Convert a template row; exercises without a catalog reference are dropped."""
    return Template(
        id=row.id,
        title=row.title,
        difficulty=row.difficulty,
        equipment_level=row.equipment_level,
        goal_tags=normalize_keys(row.goal_tags),
        elements=[
            TemplateElement(
                id=ex.id,
                exercise_id=ex.exercise_id,
                name=ex.exercise_name,
                movement_pattern=ex.movement_pattern,
                body_parts=ex.body_parts or [],
                sets=ex.sets,
                reps=ex.reps,
                display_order=ex.display_order,
                notes=ex.notes,
            )
            for ex in _by_display_order(row.exercises)
            if ex.exercise_id
        ],
    )


def _row_to_meal_template(row: MealTemplateRow) -> MealTemplate:
    return MealTemplate(
        id=row.id,
        title=row.title,
        description=row.description,
        difficulty=row.difficulty,
        eating_mode=row.eating_mode,
        goal_tags=normalize_keys(row.goal_tags),
        estimated_calories=row.estimated_calories,
        entries=[
            MealTemplateEntry(
                id=e.id,
                meal_type=e.meal_type or "Meal",
                food_id=e.food_id,
                food_name=e.food_name,
                quantity=e.quantity,
                unit=e.unit,
                calories=e.calories,
                protein_g=e.protein_g,
                carbs_g=e.carbs_g,
                fats_g=e.fats_g,
                display_order=e.display_order,
                notes=e.notes,
            )
            for e in _by_display_order(row.entries)
            if e.food_id
        ],
    )


class ProfileRepository:
    """Reads the selector inputs from a user's profile."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def preferences(self, user_id: str) -> UserPreferences:
        row = await self.session.get(UserRow, user_id)
        if row is None:
            return UserPreferences(
                training_split=settings.DEFAULT_TRAINING_SPLIT,
                eating_mode=settings.DEFAULT_EATING_MODE,
            )
        return UserPreferences(
            training_split=row.training_split or settings.DEFAULT_TRAINING_SPLIT,
            days_per_week=row.days_per_week,
            experience_level=row.experience_level,
            equipment_level=row.equipment_level,
            eating_mode=row.eating_mode or settings.DEFAULT_EATING_MODE,
        )


class PlanRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, plan_id: str) -> Optional[PlanContext]:
        row = await self.session.get(PlanRow, plan_id)
        return _row_to_plan(row) if row else None

    async def create(self, user_id: str, start_date: date, goal_type: Optional[str]) -> PlanContext:
        row = PlanRow(
            id=str(uuid.uuid4()),
            user_id=user_id,
            start_date=start_date,
            goal_type=goal_type,
        )
        self.session.add(row)
        await self.session.flush()
        return _row_to_plan(row)

    async def set_template_map(self, plan_id: str, mapping: dict[str, str]) -> None:
        row = await self.session.get(PlanRow, plan_id)
        row.template_map = mapping

    async def set_meal_template_map(self, plan_id: str, mapping: dict[str, str]) -> None:
        row = await self.session.get(PlanRow, plan_id)
        row.meal_template_map = mapping


class WorkoutTemplateRepository:
    """Bulk read of every workout template a user can see."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def visible_to(self, user_id: str) -> list[Template]:
        stmt = (
            select(WorkoutTemplateRow)
            .where(
                WorkoutTemplateRow.is_deprecated.is_(False),
                or_(WorkoutTemplateRow.is_public.is_(True), WorkoutTemplateRow.created_by == user_id),
            )
            # Stable pool order keeps slot-based selection repeatable
            .order_by(WorkoutTemplateRow.title, WorkoutTemplateRow.id)
        )
        rows = (await self.session.execute(stmt)).scalars().all()
        return [_row_to_template(r) for r in rows]


class MealTemplateRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def visible_to(self, user_id: str) -> list[MealTemplate]:
        stmt = (
            select(MealTemplateRow)
            .where(
                MealTemplateRow.is_deprecated.is_(False),
                or_(MealTemplateRow.is_public.is_(True), MealTemplateRow.created_by == user_id),
            )
            .order_by(MealTemplateRow.title, MealTemplateRow.id)
        )
        rows = (await self.session.execute(stmt)).scalars().all()
        return [_row_to_meal_template(r) for r in rows]


class OverrideRepository:
    """Per-day override rows for one element kind (workout or meal)."""

    def __init__(self, session: AsyncSession, row_cls=PlanOverrideRow, kind: ElementKind = WORKOUT):
        self.session = session
        self.row_cls = row_cls
        self.kind = kind

    @classmethod
    def for_meals(cls, session: AsyncSession) -> "OverrideRepository":
        return cls(session, MealOverrideRow, MEAL)

    def _to_record(self, row) -> OverrideRecord:
        return OverrideRecord(
            id=row.id,
            user_id=row.user_id,
            plan_id=row.plan_id,
            day=row.day_date,
            template_element_id=row.template_element_id,
            action=OverrideAction(row.action_type),
            payload={name: getattr(row, name) for name in self.kind.payload_fields},
            is_active=row.is_active,
            created_at=row.created_at,
        )

    async def for_range(
        self, user_id: str, plan_id: str, first: date, last: date
    ) -> dict[date, list[OverrideRecord]]:
        """Active overrides grouped by day, in display order then creation order."""
        cls = self.row_cls
        stmt = (
            select(cls)
            .where(
                cls.user_id == user_id,
                cls.plan_id == plan_id,
                cls.is_active.is_(True),
                cls.day_date >= first,
                cls.day_date <= last,
            )
            .order_by(cls.display_order, cls.created_at)
        )
        by_day: dict[date, list[OverrideRecord]] = defaultdict(list)
        for row in (await self.session.execute(stmt)).scalars().all():
            by_day[row.day_date].append(self._to_record(row))
        return dict(by_day)

    async def for_day(self, user_id: str, plan_id: str, day: date) -> list[OverrideRecord]:
        return (await self.for_range(user_id, plan_id, day, day)).get(day, [])

    async def get(self, override_id: str) -> Optional[OverrideRecord]:
        row = await self.session.get(self.row_cls, override_id)
        return self._to_record(row) if row else None

    async def replace_day(
        self, user_id: str, plan_id: str, day: date, staged: list[StagedOverride]
    ) -> int:
        """Delete every override for the day, then insert ``staged``.

        Runs inside the caller's transaction; nothing is committed here.
        """
        cls = self.row_cls
        await self.session.execute(
            delete(cls).where(
                cls.user_id == user_id,
                cls.plan_id == plan_id,
                cls.day_date == day,
            )
        )
        for item in staged:
            self.session.add(cls(
                id=str(uuid.uuid4()),
                user_id=user_id,
                plan_id=plan_id,
                day_date=day,
                template_element_id=item.template_element_id,
                action_type=item.action.value,
                is_active=True,
                **{name: item.payload.get(name) for name in self.kind.payload_fields},
            ))
        await self.session.flush()
        return len(staged)

    async def deactivate(self, override_id: str) -> bool:
        row = await self.session.get(self.row_cls, override_id)
        if row is None:
            return False
        row.is_active = False
        return True

    async def mark_removed(self, user_id: str, plan_id: str, day: date, template_element_id: str) -> None:
        """Replace the element's active overrides with a single fresh removal row.

        The removal always gets a new id so the day's revision changes.
        """
        cls = self.row_cls
        await self.session.execute(
            delete(cls).where(
                cls.user_id == user_id,
                cls.plan_id == plan_id,
                cls.day_date == day,
                cls.template_element_id == template_element_id,
                cls.is_active.is_(True),
            )
        )
        self.session.add(cls(
            id=str(uuid.uuid4()),
            user_id=user_id,
            plan_id=plan_id,
            day_date=day,
            template_element_id=template_element_id,
            action_type=OverrideAction.REMOVE.value,
            is_active=True,
        ))
