"""
Repository for press kit aggregate data access.

This module provides low-level database access using SQLAlchemy Core
Table objects, keeping the service layer free of query building. Every
method returns plain dicts keyed by column name.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional
from uuid import UUID, uuid4

from sqlalchemy import Table, func, select
from sqlalchemy.orm import Session

from shared.tables import CHILD_TABLES, analytics, events, media_items, musicians, press_kits

# Columns a child row carries besides its own identity and parent link.
_IDENTITY_COLUMNS = frozenset({"id", "press_kit_id"})


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PressKitRepository:
    """Repository for press kit, child item and analytics operations."""

    def __init__(self, session: Session):
        self.session = session

    # --- Press kits ---

    def create_press_kit(
        self,
        *,
        musician_id: UUID,
        title: str,
        description: Optional[str],
        theme: str,
        is_public: bool,
    ) -> dict:
        """
        Create a press kit owned by the given musician.

        Returns the created press kit as a dict.
        """
        press_kit_id = uuid4()
        now = _utcnow()

        insert_stmt = press_kits.insert().values(
            id=press_kit_id,
            musician_id=musician_id,
            title=title,
            description=description,
            theme=theme,
            is_public=is_public,
            created_at=now,
            updated_at=now,
        )

        self.session.execute(insert_stmt)
        self.session.flush()

        return self._fetch_one(press_kits, press_kit_id)

    def get_press_kit_by_id(self, press_kit_id: UUID) -> Optional[dict]:
        """Get a press kit by ID, or None if not found."""
        stmt = select(press_kits).where(press_kits.c.id == press_kit_id)
        result = self.session.execute(stmt).first()
        if result is None:
            return None
        return dict(result._mapping)

    def list_press_kits_by_musician(self, musician_id: UUID) -> list[dict]:
        """List a musician's press kits, most recently updated first."""
        stmt = (
            select(press_kits)
            .where(press_kits.c.musician_id == musician_id)
            .order_by(press_kits.c.updated_at.desc(), press_kits.c.created_at.desc())
        )
        results = self.session.execute(stmt).all()
        return [dict(row._mapping) for row in results]

    def update_press_kit(self, press_kit_id: UUID, values: dict[str, Any]) -> dict:
        """
        Apply the given column values and refresh updated_at.

        Returns the updated press kit as a dict.
        """
        update_stmt = (
            press_kits.update()
            .where(press_kits.c.id == press_kit_id)
            .values(**values, updated_at=_utcnow())
        )
        self.session.execute(update_stmt)
        self.session.flush()

        return self._fetch_one(press_kits, press_kit_id)

    def touch_press_kit(self, press_kit_id: UUID) -> None:
        update_stmt = (
            press_kits.update()
            .where(press_kits.c.id == press_kit_id)
            .values(updated_at=_utcnow())
        )
        self.session.execute(update_stmt)
        self.session.flush()

    def delete_press_kit(self, press_kit_id: UUID) -> None:
        self.session.execute(press_kits.delete().where(press_kits.c.id == press_kit_id))
        self.session.flush()

    # --- Child collections ---

    def get_child_rows(self, collection: str, press_kit_id: UUID) -> list[dict]:
        """
        Get all rows of one child collection for a press kit.

        Media items come back in display order, events by date.
        """
        table = CHILD_TABLES[collection]
        stmt = select(table).where(table.c.press_kit_id == press_kit_id)
        if table is media_items:
            stmt = stmt.order_by(media_items.c["order"].asc())
        elif table is events:
            stmt = stmt.order_by(events.c.date.asc())
        results = self.session.execute(stmt).all()
        return [dict(row._mapping) for row in results]

    def get_children(self, press_kit_id: UUID) -> dict[str, list[dict]]:
        """Load all five child collections of a press kit."""
        return {
            collection: self.get_child_rows(collection, press_kit_id)
            for collection in CHILD_TABLES
        }

    def get_upcoming_events(self, press_kit_id: UUID, now: datetime) -> list[dict]:
        """Events dated now or later, earliest first."""
        stmt = (
            select(events)
            .where(events.c.press_kit_id == press_kit_id, events.c.date >= now)
            .order_by(events.c.date.asc())
        )
        results = self.session.execute(stmt).all()
        return [dict(row._mapping) for row in results]

    def delete_child_rows(self, table: Table, press_kit_id: UUID) -> int:
        """Delete every row of `table` that belongs to the press kit."""
        result = self.session.execute(table.delete().where(table.c.press_kit_id == press_kit_id))
        return result.rowcount or 0

    def copy_child_rows(
        self, collection: str, rows: list[dict], new_press_kit_id: UUID
    ) -> int:
        """
        Bulk-insert copies of `rows` under another press kit.

        Every column except id and press_kit_id is carried over as-is.
        """
        if not rows:
            return 0
        table = CHILD_TABLES[collection]
        copies = [
            {
                **{k: v for k, v in row.items() if k not in _IDENTITY_COLUMNS},
                "id": uuid4(),
                "press_kit_id": new_press_kit_id,
            }
            for row in rows
        ]
        self.session.execute(table.insert(), copies)
        self.session.flush()
        return len(copies)

    def create_child(self, collection: str, press_kit_id: UUID, values: dict[str, Any]) -> dict:
        table = CHILD_TABLES[collection]
        item_id = uuid4()
        self.session.execute(
            table.insert().values(**values, id=item_id, press_kit_id=press_kit_id)
        )
        self.session.flush()
        return self._fetch_one(table, item_id)

    def get_child(self, collection: str, item_id: UUID) -> Optional[dict]:
        table = CHILD_TABLES[collection]
        result = self.session.execute(select(table).where(table.c.id == item_id)).first()
        if result is None:
            return None
        return dict(result._mapping)

    def delete_child(self, collection: str, item_id: UUID) -> None:
        table = CHILD_TABLES[collection]
        self.session.execute(table.delete().where(table.c.id == item_id))
        self.session.flush()

    def next_media_order(self, press_kit_id: UUID) -> int:
        """Order value that places a new media item after the existing ones."""
        stmt = select(func.max(media_items.c["order"])).where(
            media_items.c.press_kit_id == press_kit_id
        )
        current = self.session.execute(stmt).scalar()
        return 0 if current is None else current + 1

    # --- Analytics ---

    def create_analytic(
        self,
        *,
        press_kit_id: UUID,
        visitor_ip: Optional[str],
        referrer: str,
        user_agent: str,
    ) -> dict:
        """Append one visit record for a press kit."""
        analytic_id = uuid4()
        self.session.execute(
            analytics.insert().values(
                id=analytic_id,
                press_kit_id=press_kit_id,
                visitor_ip=visitor_ip,
                referrer=referrer,
                user_agent=user_agent,
                created_at=_utcnow(),
            )
        )
        self.session.flush()
        return self._fetch_one(analytics, analytic_id)

    def count_analytics(self, press_kit_id: UUID) -> int:
        stmt = select(func.count()).select_from(analytics).where(
            analytics.c.press_kit_id == press_kit_id
        )
        return self.session.execute(stmt).scalar_one()

    def list_recent_analytics(self, press_kit_id: UUID, limit: int) -> list[dict]:
        stmt = (
            select(analytics)
            .where(analytics.c.press_kit_id == press_kit_id)
            .order_by(analytics.c.created_at.desc())
            .limit(limit)
        )
        results = self.session.execute(stmt).all()
        return [dict(row._mapping) for row in results]

    # --- Musicians ---

    def get_musician_profile(self, musician_id: UUID) -> Optional[dict]:
        """Public profile fields of a musician."""
        stmt = select(
            musicians.c.stage_name,
            musicians.c.bio,
            musicians.c.location,
            musicians.c.website,
        ).where(musicians.c.id == musician_id)
        result = self.session.execute(stmt).first()
        if result is None:
            return None
        return dict(result._mapping)

    def _fetch_one(self, table: Table, row_id: UUID) -> dict:
        row = self.session.execute(select(table).where(table.c.id == row_id)).one()
        return dict(row._mapping)
