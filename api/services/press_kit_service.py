"""
Service layer for the press kit aggregate.

A press kit and its five child collections (media items, social links,
events, testimonials, contacts) are created, read, deleted and duplicated
as a unit. Every owner-facing operation checks existence first and
ownership second, so a missing kit is reported as not found and a kit
owned by someone else as access denied.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from api.exceptions import (
    PressKitAccessDeniedError,
    PressKitItemNotFoundError,
    PressKitNotFoundError,
    PressKitNotPublicError,
)
from api.repositories.press_kit_repository import PressKitRepository
from api.schemas import (
    AnalyticResponse,
    AnalyticsSummaryResponse,
    CreatePressKitRequest,
    DuplicatePressKitResponse,
    ItemCollection,
    MusicianProfileResponse,
    PressKitDetailResponse,
    PressKitResponse,
    PublicPressKitResponse,
    UpdatePressKitRequest,
)
from api.services.ownership import Access, authorize
from shared.config import get_config
from shared.logging import get_logger
from shared.tables import CASCADE_DELETE_TABLES

logger = get_logger(__name__)

DEFAULT_THEME = "default"
COPY_TITLE_SUFFIX = " (Copy)"
RECENT_VIEWS_LIMIT = 50

# Child-item columns holding datetimes; normalized to UTC before storage.
_DATETIME_FIELDS = ("date",)


def to_utc(value: datetime) -> datetime:
    """Interpret naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class PressKitService:
    """Service for press kit aggregate operations."""

    def __init__(self, repository: PressKitRepository):
        self.repository = repository

    def _get_owned_press_kit(self, press_kit_id: UUID, musician_id: UUID) -> dict:
        """
        Load a press kit and verify the requester owns it.

        Raises PressKitNotFoundError before PressKitAccessDeniedError; the
        order of these checks is part of the API contract.
        """
        press_kit = self.repository.get_press_kit_by_id(press_kit_id)
        if press_kit is None:
            raise PressKitNotFoundError()

        if authorize(musician_id, press_kit["musician_id"]) is Access.DENIED:
            logger.warning(
                "press_kit_access_denied",
                press_kit_id=str(press_kit_id),
                owner_musician_id=str(press_kit["musician_id"]),
            )
            raise PressKitAccessDeniedError()

        return press_kit

    def create_press_kit(
        self, musician_id: UUID, request: CreatePressKitRequest
    ) -> PressKitResponse:
        """
        Create a press kit with no children.

        Description defaults to an empty string, theme to "default" and
        visibility to private. Titles are not required to be unique.
        """
        press_kit = self.repository.create_press_kit(
            musician_id=musician_id,
            title=request.title,
            description=request.description or "",
            theme=request.theme or DEFAULT_THEME,
            is_public=bool(request.is_public),
        )
        logger.info(
            "press_kit_created",
            press_kit_id=str(press_kit["id"]),
            is_public=press_kit["is_public"],
        )
        return PressKitResponse.model_validate(press_kit)

    def list_press_kits(self, musician_id: UUID) -> list[PressKitResponse]:
        """List the musician's press kits, most recently updated first."""
        rows = self.repository.list_press_kits_by_musician(musician_id)
        return [PressKitResponse.model_validate(row) for row in rows]

    def get_press_kit(self, press_kit_id: UUID, musician_id: UUID) -> PressKitDetailResponse:
        """Get an owned press kit with all child collections loaded."""
        press_kit = self._get_owned_press_kit(press_kit_id, musician_id)
        children = self.repository.get_children(press_kit_id)
        return PressKitDetailResponse.model_validate({**press_kit, **children})

    def update_press_kit(
        self,
        press_kit_id: UUID,
        musician_id: UUID,
        request: UpdatePressKitRequest,
    ) -> PressKitResponse:
        """
        Apply a partial update.

        Only fields present in the request body are written; absent fields
        keep their stored values.
        """
        self._get_owned_press_kit(press_kit_id, musician_id)

        changes = request.model_dump(exclude_unset=True)
        updated = self.repository.update_press_kit(press_kit_id, changes)
        logger.info(
            "press_kit_updated",
            press_kit_id=str(press_kit_id),
            fields=sorted(changes),
        )
        return PressKitResponse.model_validate(updated)

    def delete_press_kit(self, press_kit_id: UUID, musician_id: UUID) -> None:
        """
        Delete a press kit together with its children and analytics.

        All deletes run inside one SAVEPOINT: if any statement fails the
        whole cascade is rolled back and the error propagates.
        """
        self._get_owned_press_kit(press_kit_id, musician_id)

        session = self.repository.session
        deleted_counts: dict[str, int] = {}
        with session.begin_nested():
            for table in CASCADE_DELETE_TABLES:
                deleted_counts[table.name] = self.repository.delete_child_rows(table, press_kit_id)
            self.repository.delete_press_kit(press_kit_id)

        logger.info(
            "press_kit_deleted",
            press_kit_id=str(press_kit_id),
            deleted_counts=deleted_counts,
        )

    def duplicate_press_kit(
        self, press_kit_id: UUID, musician_id: UUID
    ) -> DuplicatePressKitResponse:
        """
        Deep-copy a press kit for its owner.

        The copy is always private and titled "<source title> (Copy)". All
        child rows are copied with fresh ids (media item order values are
        kept as-is); analytics are never copied.
        """
        source = self._get_owned_press_kit(press_kit_id, musician_id)
        children = self.repository.get_children(press_kit_id)

        duplicate = self.repository.create_press_kit(
            musician_id=musician_id,
            title=f"{source['title']}{COPY_TITLE_SUFFIX}",
            description=source["description"],
            theme=source["theme"],
            is_public=False,
        )

        copied_counts: dict[str, int] = {}
        for collection, rows in children.items():
            if rows:
                copied_counts[collection] = self.repository.copy_child_rows(
                    collection, rows, duplicate["id"]
                )

        logger.info(
            "press_kit_duplicated",
            press_kit_id=str(press_kit_id),
            copy_press_kit_id=str(duplicate["id"]),
            copied_counts=copied_counts,
        )
        return DuplicatePressKitResponse(
            message="Press kit duplicated successfully",
            press_kit=PressKitResponse.model_validate(duplicate),
        )

    def get_public_press_kit(
        self,
        press_kit_id: UUID,
        *,
        visitor_ip: Optional[str],
        referrer: str,
        user_agent: str,
    ) -> PublicPressKitResponse:
        """
        Read a press kit through the public view.

        No ownership check: only the visibility flag gates access. Events
        are limited to upcoming ones (earliest first) and the musician's
        public profile is embedded. Each successful read records a visit.
        """
        press_kit = self.repository.get_press_kit_by_id(press_kit_id)
        if press_kit is None:
            raise PressKitNotFoundError()
        if not press_kit["is_public"]:
            raise PressKitNotPublicError()

        now = datetime.now(timezone.utc)
        children = self.repository.get_children(press_kit_id)
        children["events"] = self.repository.get_upcoming_events(press_kit_id, now)
        profile = self.repository.get_musician_profile(press_kit["musician_id"])

        self._record_visit(
            press_kit_id,
            visitor_ip=visitor_ip,
            referrer=referrer,
            user_agent=user_agent,
        )

        logger.info("public_press_kit_viewed", press_kit_id=str(press_kit_id))
        return PublicPressKitResponse.model_validate(
            {
                **press_kit,
                **children,
                "musician": MusicianProfileResponse.model_validate(profile) if profile else None,
            }
        )

    def _record_visit(
        self,
        press_kit_id: UUID,
        *,
        visitor_ip: Optional[str],
        referrer: str,
        user_agent: str,
    ) -> None:
        """
        Append an analytics row for a public view.

        By default a failure here fails the read. With ANALYTICS_FAIL_OPEN
        the insert runs in a SAVEPOINT and a failure is logged and dropped.
        """
        if not get_config().analytics_fail_open:
            self.repository.create_analytic(
                press_kit_id=press_kit_id,
                visitor_ip=visitor_ip,
                referrer=referrer,
                user_agent=user_agent,
            )
            return

        try:
            with self.repository.session.begin_nested():
                self.repository.create_analytic(
                    press_kit_id=press_kit_id,
                    visitor_ip=visitor_ip,
                    referrer=referrer,
                    user_agent=user_agent,
                )
        except SQLAlchemyError as e:
            logger.error(
                "analytics_record_failed",
                press_kit_id=str(press_kit_id),
                error=str(e),
                error_type=type(e).__name__,
            )

    def add_item(
        self,
        press_kit_id: UUID,
        musician_id: UUID,
        collection: ItemCollection,
        values: dict[str, Any],
    ) -> dict:
        """
        Add a child row to one of the press kit's collections.

        A media item without an explicit order is placed after the existing
        ones. Returns the created row as a dict.
        """
        self._get_owned_press_kit(press_kit_id, musician_id)

        values = dict(values)
        for field in _DATETIME_FIELDS:
            if values.get(field) is not None:
                values[field] = to_utc(values[field])
        if collection is ItemCollection.MEDIA_ITEMS and values.get("order") is None:
            values["order"] = self.repository.next_media_order(press_kit_id)

        item = self.repository.create_child(collection.table_key, press_kit_id, values)
        self.repository.touch_press_kit(press_kit_id)
        logger.info(
            "press_kit_item_added",
            press_kit_id=str(press_kit_id),
            collection=collection.value,
            item_id=str(item["id"]),
        )
        return item

    def remove_item(
        self,
        press_kit_id: UUID,
        musician_id: UUID,
        collection: ItemCollection,
        item_id: UUID,
    ) -> None:
        """Remove a child row; it must belong to the given press kit."""
        self._get_owned_press_kit(press_kit_id, musician_id)

        item = self.repository.get_child(collection.table_key, item_id)
        if item is None or item["press_kit_id"] != press_kit_id:
            raise PressKitItemNotFoundError()

        self.repository.delete_child(collection.table_key, item_id)
        self.repository.touch_press_kit(press_kit_id)
        logger.info(
            "press_kit_item_removed",
            press_kit_id=str(press_kit_id),
            collection=collection.value,
            item_id=str(item_id),
        )

    def get_analytics_summary(
        self, press_kit_id: UUID, musician_id: UUID
    ) -> AnalyticsSummaryResponse:
        """View count and most recent visits for an owned press kit."""
        self._get_owned_press_kit(press_kit_id, musician_id)

        total = self.repository.count_analytics(press_kit_id)
        recent = self.repository.list_recent_analytics(press_kit_id, RECENT_VIEWS_LIMIT)
        return AnalyticsSummaryResponse(
            press_kit_id=press_kit_id,
            total_views=total,
            recent_views=[AnalyticResponse.model_validate(row) for row in recent],
        )
