"""
Repository for user and musician account data access.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional
from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.orm import Session

from shared.tables import musicians, users


class UserRepository:
    """Repository for user/musician database operations."""

    def __init__(self, session: Session):
        self.session = session

    def get_user_by_email(self, email: str) -> Optional[dict]:
        result = self.session.execute(select(users).where(users.c.email == email)).first()
        if result is None:
            return None
        return dict(result._mapping)

    def get_user_by_id(self, user_id: UUID) -> Optional[dict]:
        result = self.session.execute(select(users).where(users.c.id == user_id)).first()
        if result is None:
            return None
        return dict(result._mapping)

    def get_musician_by_user_id(self, user_id: UUID) -> Optional[dict]:
        result = self.session.execute(
            select(musicians).where(musicians.c.user_id == user_id)
        ).first()
        if result is None:
            return None
        return dict(result._mapping)

    def get_musician_by_id(self, musician_id: UUID) -> Optional[dict]:
        result = self.session.execute(
            select(musicians).where(musicians.c.id == musician_id)
        ).first()
        if result is None:
            return None
        return dict(result._mapping)

    def create_user_with_musician(
        self,
        *,
        email: str,
        password_hash: str,
        name: str,
    ) -> tuple[dict, dict]:
        """
        Create a user together with its musician profile.

        The musician's stage name starts out as the user's name.
        Returns (user, musician) dicts.
        """
        user_id = uuid4()
        musician_id = uuid4()
        now = datetime.now(timezone.utc)

        self.session.execute(
            users.insert().values(
                id=user_id,
                email=email,
                password_hash=password_hash,
                name=name,
                created_at=now,
                updated_at=now,
            )
        )
        self.session.execute(
            musicians.insert().values(
                id=musician_id,
                user_id=user_id,
                stage_name=name,
                bio=None,
                location=None,
                website=None,
                created_at=now,
                updated_at=now,
            )
        )
        self.session.flush()

        user = self.get_user_by_id(user_id)
        musician = self.get_musician_by_id(musician_id)
        return user, musician

    def update_password_hash(self, user_id: UUID, password_hash: str) -> bool:
        """Replace a user's password hash. Returns False if the user does not exist."""
        result = self.session.execute(
            users.update()
            .where(users.c.id == user_id)
            .values(password_hash=password_hash, updated_at=datetime.now(timezone.utc))
        )
        self.session.flush()
        return (result.rowcount or 0) > 0

    def update_musician(self, musician_id: UUID, values: dict[str, Any]) -> Optional[dict]:
        """Apply profile changes; returns the updated musician or None if missing."""
        if values:
            self.session.execute(
                musicians.update()
                .where(musicians.c.id == musician_id)
                .values(**values, updated_at=datetime.now(timezone.utc))
            )
            self.session.flush()
        return self.get_musician_by_id(musician_id)
