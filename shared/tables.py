"""
SQLAlchemy Core table definitions for the press kit schema.

These mirror the Alembic-managed schema in migrations/versions and are
used by the repositories for explicit, typed queries. Foreign keys carry
no ON DELETE CASCADE: child rows are removed by the application inside
the press kit delete transaction.
"""

from __future__ import annotations

from datetime import timezone

import sqlalchemy as sa


class UTCDateTime(sa.TypeDecorator):
    """
    Timestamp column that always round-trips as an aware UTC datetime.

    PostgreSQL keeps the offset itself; SQLite stores naive text, so values
    are converted to UTC on the way in and marked as UTC on the way out.
    """

    impl = sa.DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None and value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


metadata = sa.MetaData()

users = sa.Table(
    "users",
    metadata,
    sa.Column("id", sa.Uuid(), primary_key=True),
    sa.Column("email", sa.String(255), nullable=False, unique=True),
    sa.Column("password_hash", sa.String(255), nullable=False),
    sa.Column("name", sa.String(255), nullable=False),
    sa.Column("created_at", UTCDateTime(), nullable=False),
    sa.Column("updated_at", UTCDateTime(), nullable=False),
)

musicians = sa.Table(
    "musicians",
    metadata,
    sa.Column("id", sa.Uuid(), primary_key=True),
    sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False, unique=True),
    sa.Column("stage_name", sa.String(255), nullable=False),
    sa.Column("bio", sa.Text(), nullable=True),
    sa.Column("location", sa.String(255), nullable=True),
    sa.Column("website", sa.String(1024), nullable=True),
    sa.Column("created_at", UTCDateTime(), nullable=False),
    sa.Column("updated_at", UTCDateTime(), nullable=False),
)

press_kits = sa.Table(
    "press_kits",
    metadata,
    sa.Column("id", sa.Uuid(), primary_key=True),
    sa.Column("musician_id", sa.Uuid(), sa.ForeignKey("musicians.id"), nullable=False, index=True),
    sa.Column("title", sa.String(255), nullable=False),
    sa.Column("description", sa.Text(), nullable=True),
    sa.Column("theme", sa.String(64), nullable=False),
    sa.Column("is_public", sa.Boolean(), nullable=False),
    sa.Column("created_at", UTCDateTime(), nullable=False),
    sa.Column("updated_at", UTCDateTime(), nullable=False),
)

media_items = sa.Table(
    "media_items",
    metadata,
    sa.Column("id", sa.Uuid(), primary_key=True),
    sa.Column("press_kit_id", sa.Uuid(), sa.ForeignKey("press_kits.id"), nullable=False, index=True),
    sa.Column("type", sa.String(32), nullable=False),
    sa.Column("title", sa.String(255), nullable=False),
    sa.Column("description", sa.Text(), nullable=True),
    sa.Column("file_url", sa.String(1024), nullable=True),
    sa.Column("thumbnail_url", sa.String(1024), nullable=True),
    sa.Column("external_url", sa.String(1024), nullable=True),
    sa.Column("order", sa.Integer(), nullable=False),
)

social_links = sa.Table(
    "social_links",
    metadata,
    sa.Column("id", sa.Uuid(), primary_key=True),
    sa.Column("press_kit_id", sa.Uuid(), sa.ForeignKey("press_kits.id"), nullable=False, index=True),
    sa.Column("platform", sa.String(64), nullable=False),
    sa.Column("url", sa.String(1024), nullable=False),
)

events = sa.Table(
    "events",
    metadata,
    sa.Column("id", sa.Uuid(), primary_key=True),
    sa.Column("press_kit_id", sa.Uuid(), sa.ForeignKey("press_kits.id"), nullable=False, index=True),
    sa.Column("name", sa.String(255), nullable=False),
    sa.Column("venue", sa.String(255), nullable=True),
    sa.Column("city", sa.String(255), nullable=True),
    sa.Column("country", sa.String(255), nullable=True),
    sa.Column("date", UTCDateTime(), nullable=False),
    sa.Column("description", sa.Text(), nullable=True),
    sa.Column("ticket_url", sa.String(1024), nullable=True),
)

testimonials = sa.Table(
    "testimonials",
    metadata,
    sa.Column("id", sa.Uuid(), primary_key=True),
    sa.Column("press_kit_id", sa.Uuid(), sa.ForeignKey("press_kits.id"), nullable=False, index=True),
    sa.Column("quote", sa.Text(), nullable=False),
    sa.Column("author", sa.String(255), nullable=False),
    sa.Column("source", sa.String(255), nullable=True),
    sa.Column("date", UTCDateTime(), nullable=True),
)

contacts = sa.Table(
    "contacts",
    metadata,
    sa.Column("id", sa.Uuid(), primary_key=True),
    sa.Column("press_kit_id", sa.Uuid(), sa.ForeignKey("press_kits.id"), nullable=False, index=True),
    sa.Column("name", sa.String(255), nullable=False),
    sa.Column("role", sa.String(255), nullable=True),
    sa.Column("email", sa.String(255), nullable=True),
    sa.Column("phone", sa.String(64), nullable=True),
)

analytics = sa.Table(
    "analytics",
    metadata,
    sa.Column("id", sa.Uuid(), primary_key=True),
    sa.Column("press_kit_id", sa.Uuid(), sa.ForeignKey("press_kits.id"), nullable=False, index=True),
    sa.Column("visitor_ip", sa.String(64), nullable=True),
    sa.Column("referrer", sa.Text(), nullable=False),
    sa.Column("user_agent", sa.Text(), nullable=False),
    sa.Column("created_at", UTCDateTime(), nullable=False),
)

# Child collections of a press kit, keyed by aggregate attribute name.
# Analytics are deliberately absent: they are never copied or returned
# with the aggregate.
CHILD_TABLES: dict[str, sa.Table] = {
    "media_items": media_items,
    "social_links": social_links,
    "events": events,
    "testimonials": testimonials,
    "contacts": contacts,
}

# Delete order for the press kit cascade; the parent row goes last.
CASCADE_DELETE_TABLES: tuple[sa.Table, ...] = (
    media_items,
    social_links,
    events,
    testimonials,
    contacts,
    analytics,
)
