"""Create the plan store: profiles, plans, templates and per-day overrides.

Revision ID: 5c0e7a91d2b4
Revises:
Create Date: 2026-10-18
"""
from alembic import op
import sqlalchemy as sa

revision = "5c0e7a91d2b4"
down_revision = None
branch_labels = None
depends_on = None


def _override_scope() -> list:
    return [
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("plan_id", sa.String(36), sa.ForeignKey("workout_plans.id", ondelete="CASCADE"), nullable=False),
        sa.Column("day_date", sa.Date, nullable=False),
        sa.Column("template_element_id", sa.String(36), nullable=True),
        sa.Column("action_type", sa.String(10), nullable=False),
    ]


def _override_state() -> list:
    return [
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime, nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("display_name", sa.String(100), nullable=True),
        sa.Column("training_split", sa.String(40), nullable=True),
        sa.Column("days_per_week", sa.Integer, nullable=True),
        sa.Column("experience_level", sa.String(20), nullable=True),
        sa.Column("equipment_level", sa.String(20), nullable=True),
        sa.Column("eating_mode", sa.String(20), nullable=True),
        sa.Column("created_at", sa.DateTime, nullable=True),
    )
    op.create_table(
        "workout_plans",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("start_date", sa.Date, nullable=False),
        sa.Column("goal_type", sa.String(40), nullable=True),
        sa.Column("template_map", sa.JSON, nullable=True),
        sa.Column("meal_template_map", sa.JSON, nullable=True),
        sa.Column("created_at", sa.DateTime, nullable=True),
    )

    op.create_table(
        "workout_templates",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("difficulty", sa.String(20), nullable=True),
        sa.Column("equipment_level", sa.String(20), nullable=True),
        sa.Column("goal_tags", sa.JSON, nullable=True),
        sa.Column("created_by", sa.String(36), nullable=True, index=True),
        sa.Column("is_public", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("is_deprecated", sa.Boolean, nullable=False, server_default=sa.false()),
    )
    op.create_table(
        "workout_template_exercises",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("template_id", sa.String(36), sa.ForeignKey("workout_templates.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("exercise_id", sa.String(36), nullable=True),
        sa.Column("exercise_name", sa.String(200), nullable=False),
        sa.Column("movement_pattern", sa.String(40), nullable=True),
        sa.Column("body_parts", sa.JSON, nullable=True),
        sa.Column("sets", sa.Integer, nullable=True),
        sa.Column("reps", sa.String(20), nullable=True),
        sa.Column("display_order", sa.Integer, nullable=True),
        sa.Column("notes", sa.Text, nullable=True),
    )

    op.create_table(
        "meal_templates",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("difficulty", sa.String(20), nullable=True),
        sa.Column("eating_mode", sa.String(20), nullable=True),
        sa.Column("goal_tags", sa.JSON, nullable=True),
        sa.Column("estimated_calories", sa.Float, nullable=True),
        sa.Column("created_by", sa.String(36), nullable=True, index=True),
        sa.Column("is_public", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("is_deprecated", sa.Boolean, nullable=False, server_default=sa.false()),
    )
    op.create_table(
        "meal_template_entries",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("template_id", sa.String(36), sa.ForeignKey("meal_templates.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("meal_type", sa.String(20), nullable=True),
        sa.Column("food_id", sa.String(36), nullable=True),
        sa.Column("food_name", sa.String(200), nullable=False),
        sa.Column("quantity", sa.Float, nullable=True),
        sa.Column("unit", sa.String(20), nullable=True),
        sa.Column("calories", sa.Float, nullable=True),
        sa.Column("protein_g", sa.Float, nullable=True),
        sa.Column("carbs_g", sa.Float, nullable=True),
        sa.Column("fats_g", sa.Float, nullable=True),
        sa.Column("display_order", sa.Integer, nullable=True),
        sa.Column("notes", sa.Text, nullable=True),
    )

    op.create_table(
        "plan_overrides",
        *_override_scope(),
        sa.Column("exercise_id", sa.String(36), nullable=True),
        sa.Column("name", sa.String(200), nullable=True),
        sa.Column("movement_pattern", sa.String(40), nullable=True),
        sa.Column("body_parts", sa.JSON, nullable=True),
        sa.Column("sets", sa.Integer, nullable=True),
        sa.Column("reps", sa.String(20), nullable=True),
        sa.Column("display_order", sa.Integer, nullable=True),
        sa.Column("notes", sa.Text, nullable=True),
        *_override_state(),
    )
    op.create_index("ix_plan_overrides_scope", "plan_overrides", ["user_id", "plan_id", "day_date"])

    op.create_table(
        "meal_overrides",
        *_override_scope(),
        sa.Column("meal_type", sa.String(20), nullable=True),
        sa.Column("food_id", sa.String(36), nullable=True),
        sa.Column("food_name", sa.String(200), nullable=True),
        sa.Column("quantity", sa.Float, nullable=True),
        sa.Column("unit", sa.String(20), nullable=True),
        sa.Column("calories", sa.Float, nullable=True),
        sa.Column("protein_g", sa.Float, nullable=True),
        sa.Column("carbs_g", sa.Float, nullable=True),
        sa.Column("fats_g", sa.Float, nullable=True),
        sa.Column("display_order", sa.Integer, nullable=True),
        sa.Column("notes", sa.Text, nullable=True),
        *_override_state(),
    )
    op.create_index("ix_meal_overrides_scope", "meal_overrides", ["user_id", "plan_id", "day_date"])


def downgrade() -> None:
    op.drop_index("ix_meal_overrides_scope", table_name="meal_overrides")
    op.drop_table("meal_overrides")
    op.drop_index("ix_plan_overrides_scope", table_name="plan_overrides")
    op.drop_table("plan_overrides")
    op.drop_table("meal_template_entries")
    op.drop_table("meal_templates")
    op.drop_table("workout_template_exercises")
    op.drop_table("workout_templates")
    op.drop_table("workout_plans")
    op.drop_table("users")
