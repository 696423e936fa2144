"""Shared test fixtures — single test DB for all test modules."""
from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import date
from typing import Optional

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession

# Use a shared in-memory DB with check_same_thread=False and StaticPool
# This ensures all connections see the same in-memory database.
from sqlalchemy.pool import StaticPool

from fitarc.db.engine import get_session
from fitarc.db.tables import (
    Base,
    MealTemplateEntryRow,
    MealTemplateRow,
    PlanRow,
    UserRow,
    WorkoutTemplateExerciseRow,
    WorkoutTemplateRow,
)

TEST_DB_URL = "sqlite+aiosqlite:///file:test?mode=memory&cache=shared&uri=true"

test_engine = create_async_engine(
    TEST_DB_URL,
    echo=False,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSession = async_sessionmaker(test_engine, expire_on_commit=False, class_=AsyncSession)


async def override_get_session():
    async with TestSession() as session:
        yield session


# Import app and override BEFORE any test module imports app
from fitarc.api.main import app  # noqa: E402

app.dependency_overrides[get_session] = override_get_session

# Patch the module-level engine/session factory to use our test engine
import fitarc.db.engine as _engine_mod  # noqa: E402
_engine_mod.async_session = TestSession
_engine_mod.engine = test_engine


@asynccontextmanager
async def get_test_session():
    """Context manager for seeding data in tests."""
    async with TestSession() as session:
        yield session


# ── Seed helpers ────────────────────────────────────────────────────────────

PLAN_START = date(2024, 1, 1)  # a Monday


async def seed_user(session: AsyncSession, user_id: str = "u1", **profile) -> UserRow:
    row = UserRow(id=user_id, display_name=user_id, **profile)
    session.add(row)
    await session.flush()
    return row


async def seed_workout_template(
    session: AsyncSession,
    template_id: str,
    title: str,
    goal_tags: list[str],
    exercises: list[tuple[str, str, str, Optional[int]]],
    difficulty: Optional[str] = None,
    equipment_level: Optional[str] = None,
    **extra,
) -> WorkoutTemplateRow:
    """``exercises`` are (row id, exercise id, name, display order) tuples."""
    row = WorkoutTemplateRow(
        id=template_id,
        title=title,
        goal_tags=goal_tags,
        difficulty=difficulty,
        equipment_level=equipment_level,
        **extra,
    )
    row.exercises = [
        WorkoutTemplateExerciseRow(
            id=ex_row_id,
            exercise_id=exercise_id,
            exercise_name=name,
            display_order=order,
            body_parts=[],
        )
        for ex_row_id, exercise_id, name, order in exercises
    ]
    session.add(row)
    await session.flush()
    return row


async def seed_meal_template(
    session: AsyncSession,
    template_id: str,
    title: str,
    eating_mode: Optional[str],
    entries: list[dict],
    **extra,
) -> MealTemplateRow:
    row = MealTemplateRow(id=template_id, title=title, eating_mode=eating_mode, goal_tags=[], **extra)
    row.entries = [MealTemplateEntryRow(**entry) for entry in entries]
    session.add(row)
    await session.flush()
    return row


async def seed_plan(
    session: AsyncSession,
    plan_id: str = "p1",
    user_id: str = "u1",
    start_date: date = PLAN_START,
    goal_type: Optional[str] = "hypertrophy",
    template_map: Optional[dict] = None,
) -> PlanRow:
    row = PlanRow(
        id=plan_id, user_id=user_id, start_date=start_date,
        goal_type=goal_type, template_map=template_map,
    )
    session.add(row)
    await session.flush()
    return row


async def seed_ppl(session: AsyncSession) -> None:
    """Push/pull/legs user ``u1`` with plan ``p1`` starting PLAN_START, plus a second user."""
    await seed_user(
        session, "u1", training_split="push_pull_legs",
        equipment_level="full_gym", experience_level="intermediate",
    )
    await seed_user(session, "u2", training_split="full_body")
    await seed_workout_template(
        session, "tpl-push", "Push Day", ["push", "hypertrophy"],
        [("e-bench", "ex-bench", "Bench Press", 1), ("e-ohp", "ex-ohp", "Overhead Press", 2)],
        difficulty="intermediate", equipment_level="full_gym",
    )
    await seed_workout_template(
        session, "tpl-pull", "Pull Day", ["pull", "hypertrophy"],
        [("e-row", "ex-row", "Barbell Row", 1), ("e-chin", "ex-chin", "Chin Up", 2)],
        difficulty="intermediate", equipment_level="full_gym",
    )
    await seed_workout_template(
        session, "tpl-legs", "Leg Day", ["legs", "hypertrophy"],
        [("e-squat", "ex-squat", "Back Squat", 1), ("e-rdl", "ex-rdl", "Romanian Deadlift", 2)],
        difficulty="intermediate", equipment_level="full_gym",
    )
    await seed_plan(session, "p1", "u1")


async def count_rows(session: AsyncSession, row_cls, **filters) -> int:
    stmt = select(func.count()).select_from(row_cls)
    for name, value in filters.items():
        stmt = stmt.where(getattr(row_cls, name) == value)
    return (await session.execute(stmt)).scalar_one()


@pytest_asyncio.fixture(autouse=True)
async def setup_db():
    """Create tables before each test, drop after."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def ppl():
    """Seed the push/pull/legs fixture data."""
    async with get_test_session() as session:
        await seed_ppl(session)
        await session.commit()


@pytest_asyncio.fixture
async def client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
