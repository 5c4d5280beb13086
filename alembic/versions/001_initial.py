"""Initial tables: projects, scenes, scenarios, scenario_attempts.

Revision ID: 001
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "projects",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("tenant_id", sa.String(64), nullable=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("prompt", sa.Text(), nullable=False),
        sa.Column("training_type", sa.String(64), nullable=False, server_default="compliance"),
        sa.Column("project_type", sa.String(32), nullable=False, server_default="linear"),
        sa.Column("scene_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("status", sa.String(32), nullable=False, server_default="draft"),
        sa.Column("thumbnail_url", sa.Text(), nullable=True),
        sa.Column("include_quiz", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("quiz_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_projects_tenant_id"), "projects", ["tenant_id"], unique=False)

    op.create_table(
        "scenes",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("project_id", sa.Integer(), nullable=False),
        sa.Column("scene_number", sa.Integer(), nullable=False),
        sa.Column("scene_type", sa.String(32), nullable=False),
        sa.Column("layout", sa.String(32), nullable=False, server_default="fulltext"),
        sa.Column("eyebrow", sa.String(128), nullable=True),
        sa.Column("title", sa.String(255), nullable=True),
        sa.Column("subtitle", sa.String(255), nullable=True),
        sa.Column("body", sa.Text(), nullable=True),
        sa.Column("narration", sa.Text(), nullable=True),
        sa.Column("bullets_json", sa.Text(), nullable=True),
        sa.Column("cards_json", sa.Text(), nullable=True),
        sa.Column("timeline_json", sa.Text(), nullable=True),
        sa.Column("icon_items_json", sa.Text(), nullable=True),
        sa.Column("stat_value", sa.String(64), nullable=True),
        sa.Column("stat_label", sa.String(255), nullable=True),
        sa.Column("quote", sa.Text(), nullable=True),
        sa.Column("quote_author", sa.String(255), nullable=True),
        sa.Column("split_image", sa.String(255), nullable=True),
        sa.Column("bg_type", sa.String(16), nullable=False, server_default="gradient"),
        sa.Column("gradient", sa.String(255), nullable=True),
        sa.Column("asset_url", sa.Text(), nullable=True),
        sa.Column("asset_type", sa.String(16), nullable=True),
        sa.Column("asset_id", sa.String(64), nullable=True),
        sa.Column("asset_thumbnail", sa.Text(), nullable=True),
        sa.Column("asset_keywords", sa.String(255), nullable=True),
        sa.Column("choices_json", sa.Text(), nullable=True),
        sa.Column("next_scene_id", sa.Integer(), nullable=True),
        sa.Column("choice_quality", sa.String(16), nullable=True),
        sa.Column("points", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("feedback", sa.Text(), nullable=True),
        sa.Column("outcome_tier", sa.String(16), nullable=True),
        sa.Column("quiz_question", sa.Text(), nullable=True),
        sa.Column("quiz_options_json", sa.Text(), nullable=True),
        sa.Column("quiz_correct_index", sa.Integer(), nullable=True),
        sa.Column("quiz_explanation", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("project_id", "scene_number", name="uq_scenes_project_number"),
    )
    op.create_index(op.f("ix_scenes_project_id"), "scenes", ["project_id"], unique=False)

    op.create_table(
        "scenarios",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("project_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("topic", sa.String(255), nullable=False),
        sa.Column("industry", sa.String(128), nullable=False, server_default="General"),
        sa.Column("difficulty", sa.String(32), nullable=False, server_default="beginner"),
        sa.Column("decision_points", sa.Integer(), nullable=False, server_default="3"),
        sa.Column("max_score", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_scenarios_project_id"), "scenarios", ["project_id"], unique=True)

    op.create_table(
        "scenario_attempts",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("scenario_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("score", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("max_score", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("path_json", sa.Text(), nullable=False, server_default="[]"),
        sa.Column("choices_json", sa.Text(), nullable=False, server_default="[]"),
        sa.Column("status", sa.String(16), nullable=False, server_default="in_progress"),
        sa.Column("outcome_tier", sa.String(16), nullable=True),
        sa.Column("started_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["scenario_id"], ["scenarios.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_scenario_attempts_scenario_id"), "scenario_attempts", ["scenario_id"], unique=False)
    op.create_index(op.f("ix_scenario_attempts_user_id"), "scenario_attempts", ["user_id"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_scenario_attempts_user_id"), table_name="scenario_attempts")
    op.drop_index(op.f("ix_scenario_attempts_scenario_id"), table_name="scenario_attempts")
    op.drop_table("scenario_attempts")
    op.drop_index(op.f("ix_scenarios_project_id"), table_name="scenarios")
    op.drop_table("scenarios")
    op.drop_index(op.f("ix_scenes_project_id"), table_name="scenes")
    op.drop_table("scenes")
    op.drop_index(op.f("ix_projects_tenant_id"), table_name="projects")
    op.drop_table("projects")
