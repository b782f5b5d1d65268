"""Initial press kit schema.

Revision ID: 0001_initial_schema
Revises:
Create Date: 2024-03-02
"""

from __future__ import annotations

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# Tables holding press kit children; each gets a press_kit_id FK and index.
# No ON DELETE CASCADE: the application deletes children explicitly.
CHILD_TABLE_NAMES = (
    "media_items",
    "social_links",
    "events",
    "testimonials",
    "contacts",
    "analytics",
)


def _press_kit_fk(table_name: str) -> sa.ForeignKeyConstraint:
    return sa.ForeignKeyConstraint(
        ["press_kit_id"],
        ["press_kits.id"],
        name=f"fk_{table_name}_press_kit_id",
    )


def upgrade() -> None:
    # --- Accounts ---
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )

    op.create_table(
        "musicians",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("stage_name", sa.String(255), nullable=False),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("website", sa.String(1024), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name="fk_musicians_user_id"),
        sa.UniqueConstraint("user_id", name="uq_musicians_user_id"),
    )

    # --- Press kits ---
    op.create_table(
        "press_kits",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("musician_id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("theme", sa.String(64), nullable=False),
        sa.Column("is_public", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["musician_id"], ["musicians.id"], name="fk_press_kits_musician_id"
        ),
    )

    op.create_table(
        "media_items",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("press_kit_id", sa.Uuid(), nullable=False),
        sa.Column("type", sa.String(32), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("file_url", sa.String(1024), nullable=True),
        sa.Column("thumbnail_url", sa.String(1024), nullable=True),
        sa.Column("external_url", sa.String(1024), nullable=True),
        sa.Column("order", sa.Integer(), server_default="0", nullable=False),
        _press_kit_fk("media_items"),
    )

    op.create_table(
        "social_links",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("press_kit_id", sa.Uuid(), nullable=False),
        sa.Column("platform", sa.String(64), nullable=False),
        sa.Column("url", sa.String(1024), nullable=False),
        _press_kit_fk("social_links"),
    )

    op.create_table(
        "events",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("press_kit_id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("venue", sa.String(255), nullable=True),
        sa.Column("city", sa.String(255), nullable=True),
        sa.Column("country", sa.String(255), nullable=True),
        sa.Column("date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("ticket_url", sa.String(1024), nullable=True),
        _press_kit_fk("events"),
    )

    op.create_table(
        "testimonials",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("press_kit_id", sa.Uuid(), nullable=False),
        sa.Column("quote", sa.Text(), nullable=False),
        sa.Column("author", sa.String(255), nullable=False),
        sa.Column("source", sa.String(255), nullable=True),
        sa.Column("date", sa.DateTime(timezone=True), nullable=True),
        _press_kit_fk("testimonials"),
    )

    op.create_table(
        "contacts",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("press_kit_id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("role", sa.String(255), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(64), nullable=True),
        _press_kit_fk("contacts"),
    )

    op.create_table(
        "analytics",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("press_kit_id", sa.Uuid(), nullable=False),
        sa.Column("visitor_ip", sa.String(64), nullable=True),
        sa.Column("referrer", sa.Text(), nullable=False),
        sa.Column("user_agent", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        _press_kit_fk("analytics"),
    )

    # --- Indexes ---
    op.create_index("ix_press_kits_musician_id", "press_kits", ["musician_id"])
    for table_name in CHILD_TABLE_NAMES:
        op.create_index(f"ix_{table_name}_press_kit_id", table_name, ["press_kit_id"])


def downgrade() -> None:
    for table_name in CHILD_TABLE_NAMES:
        op.drop_index(f"ix_{table_name}_press_kit_id", table_name=table_name)
    op.drop_index("ix_press_kits_musician_id", table_name="press_kits")

    for table_name in reversed(CHILD_TABLE_NAMES):
        op.drop_table(table_name)
    op.drop_table("press_kits")
    op.drop_table("musicians")
    op.drop_table("users")
