#!/usr/bin/env python3
"""Seed workout and meal templates (plus a demo user) for local development."""
import asyncio

from sqlalchemy import delete

from fitarc.db.engine import engine, async_session
from fitarc.db.tables import (
    Base,
    MealTemplateEntryRow,
    MealTemplateRow,
    UserRow,
    WorkoutTemplateExerciseRow,
    WorkoutTemplateRow,
)

# (id, title, goal tags, difficulty, equipment, [(exercise id, name, pattern, body parts, sets, reps)])
WORKOUTS = [
    ("wt-push-gym", "Push Day — Barbell", ["push", "hypertrophy", "strength"], "intermediate", "full_gym", [
        ("ex-bench", "Bench Press", "horizontal_push", ["chest", "triceps"], 4, "6-8"),
        ("ex-ohp", "Overhead Press", "vertical_push", ["shoulders"], 3, "8-10"),
        ("ex-dip", "Dips", "vertical_push", ["chest", "triceps"], 3, "10-12"),
    ]),
    ("wt-push-db", "Push Day — Dumbbells", ["push", "hypertrophy"], "beginner", "dumbbells", [
        ("ex-db-press", "Dumbbell Bench Press", "horizontal_push", ["chest"], 3, "10-12"),
        ("ex-db-shoulder", "Seated Dumbbell Press", "vertical_push", ["shoulders"], 3, "10-12"),
    ]),
    ("wt-pull-gym", "Pull Day — Barbell", ["pull", "hypertrophy", "strength"], "intermediate", "full_gym", [
        ("ex-row", "Barbell Row", "horizontal_pull", ["back"], 4, "6-8"),
        ("ex-pullup", "Pull Up", "vertical_pull", ["back", "biceps"], 3, "8-10"),
        ("ex-curl", "Barbell Curl", "elbow_flexion", ["biceps"], 3, "10-12"),
    ]),
    ("wt-legs-gym", "Leg Day — Squat Focus", ["legs", "hypertrophy", "strength"], "intermediate", "full_gym", [
        ("ex-squat", "Back Squat", "squat", ["quads", "glutes"], 4, "5-8"),
        ("ex-rdl", "Romanian Deadlift", "hinge", ["hamstrings", "glutes"], 3, "8-10"),
        ("ex-calf", "Standing Calf Raise", "ankle_extension", ["calves"], 3, "12-15"),
    ]),
    ("wt-upper-bw", "Upper Body — Bodyweight", ["upper", "general_fitness"], "beginner", "bodyweight", [
        ("ex-pushup", "Push Up", "horizontal_push", ["chest", "triceps"], 3, "10-15"),
        ("ex-inv-row", "Inverted Row", "horizontal_pull", ["back"], 3, "8-12"),
    ]),
    ("wt-lower-bw", "Lower Body — Bodyweight", ["lower", "general_fitness"], "beginner", "bodyweight", [
        ("ex-split-squat", "Split Squat", "lunge", ["quads", "glutes"], 3, "10-12"),
        ("ex-glute-bridge", "Glute Bridge", "hinge", ["glutes"], 3, "12-15"),
    ]),
    ("wt-full-body", "Full Body — Foundations", ["full_body", "general", "fat_loss"], "beginner", "dumbbells", [
        ("ex-goblet", "Goblet Squat", "squat", ["quads"], 3, "10-12"),
        ("ex-db-row", "One-Arm Dumbbell Row", "horizontal_pull", ["back"], 3, "10-12"),
        ("ex-pushup", "Push Up", "horizontal_push", ["chest"], 3, "AMRAP"),
    ]),
]

# (id, title, eating mode, kcal, [(meal type, food id, name, qty, unit, kcal, protein, carbs, fats)])
MEALS = [
    ("mt-maintenance", "Balanced Maintenance Day", "maintenance", 2300, [
        ("breakfast", "food-oats", "Rolled Oats", 80, "g", 300, 10.5, 54, 5),
        ("breakfast", "food-whey", "Whey Protein", 30, "g", 120, 24, 3, 1.5),
        ("lunch", "food-chicken", "Chicken Breast", 200, "g", 330, 62, 0, 7.2),
        ("lunch", "food-rice", "Jasmine Rice", 200, "g", 260, 5.4, 57, 0.6),
        ("dinner", "food-salmon", "Salmon Fillet", 180, "g", 370, 40, 0, 22),
        ("snack", "food-yogurt", "Greek Yogurt", 170, "g", 100, 17, 6, 0.7),
    ]),
    ("mt-cut", "Mild Deficit Day", "mild_deficit", 1800, [
        ("breakfast", "food-egg-whites", "Egg Whites", 250, "g", 130, 27, 2, 0.5),
        ("lunch", "food-tuna", "Tuna Salad", 1, "bowl", 350, 38, 12, 14),
        ("dinner", "food-turkey", "Turkey Mince", 200, "g", 300, 44, 0, 14),
    ]),
    ("mt-bulk", "Lean Bulk Day", "lean_bulk", 2900, [
        ("breakfast", "food-eggs", "Whole Eggs", 4, "large", 280, 24, 2, 20),
        ("breakfast", "food-oats", "Rolled Oats", 100, "g", 375, 13, 67, 6.5),
        ("lunch", "food-beef", "Lean Beef", 200, "g", 430, 52, 0, 24),
        ("dinner", "food-pasta", "Whole Wheat Pasta", 150, "g", 520, 20, 100, 4),
    ]),
]


def _workout_rows():
    for tid, title, tags, difficulty, equipment, exercises in WORKOUTS:
        row = WorkoutTemplateRow(
            id=tid, title=title, goal_tags=tags, difficulty=difficulty, equipment_level=equipment,
        )
        row.exercises = [
            WorkoutTemplateExerciseRow(
                id=f"{tid}-{order}", exercise_id=ex_id, exercise_name=name,
                movement_pattern=pattern, body_parts=parts, sets=sets, reps=reps,
                display_order=order,
            )
            for order, (ex_id, name, pattern, parts, sets, reps) in enumerate(exercises, start=1)
        ]
        yield row


def _meal_rows():
    for tid, title, mode, kcal, entries in MEALS:
        row = MealTemplateRow(id=tid, title=title, eating_mode=mode, estimated_calories=kcal, goal_tags=[mode])
        row.entries = [
            MealTemplateEntryRow(
                id=f"{tid}-{order}", meal_type=meal_type, food_id=food_id, food_name=name,
                quantity=qty, unit=unit, calories=cal, protein_g=p, carbs_g=c, fats_g=f,
                display_order=order,
            )
            for order, (meal_type, food_id, name, qty, unit, cal, p, c, f) in enumerate(entries, start=1)
        ]
        yield row


async def seed():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session() as session:
        # Clear
        for table in (WorkoutTemplateExerciseRow, WorkoutTemplateRow, MealTemplateEntryRow, MealTemplateRow):
            await session.execute(delete(table))
        await session.commit()

        session.add_all(list(_workout_rows()))
        session.add_all(list(_meal_rows()))
        if await session.get(UserRow, "demo-user") is None:
            session.add(UserRow(
                id="demo-user", display_name="Demo Lifter", training_split="push_pull_legs",
                experience_level="intermediate", equipment_level="full_gym", eating_mode="maintenance",
            ))
        await session.commit()
        print(f"✅ Seeded {len(WORKOUTS)} workout templates and {len(MEALS)} meal templates")


if __name__ == "__main__":
    asyncio.run(seed())
