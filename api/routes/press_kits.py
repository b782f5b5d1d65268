"""
Route handlers for press kit endpoints.

Owner routes require a bearer token; the public view at
/pressKits/public/{id} does not and records a visit instead.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Annotated, Any, Iterator, Union
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from api.db import get_db_session
from api.exceptions import PressKitAccessDeniedError, PressKitNotFoundError
from api.repositories.press_kit_repository import PressKitRepository
from api.schemas import (
    AnalyticsSummaryResponse,
    ContactResponse,
    CreateContactRequest,
    CreateEventRequest,
    CreateMediaItemRequest,
    CreatePressKitRequest,
    CreateSocialLinkRequest,
    CreateTestimonialRequest,
    DuplicatePressKitResponse,
    EventResponse,
    ItemCollection,
    MediaItemResponse,
    MessageResponse,
    PressKitDetailResponse,
    PressKitResponse,
    PublicPressKitResponse,
    SocialLinkResponse,
    TestimonialResponse,
    UpdatePressKitRequest,
)
from api.security import AuthIdentity, CurrentIdentity
from api.services.press_kit_service import PressKitService
from shared.logging import bind_request_context, get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/pressKits", tags=["press-kits"])


def get_press_kit_service(
    session: Annotated[Session, Depends(get_db_session)],
) -> PressKitService:
    """Dependency to get a PressKitService instance."""
    return PressKitService(PressKitRepository(session))


PressKitServiceDep = Annotated[PressKitService, Depends(get_press_kit_service)]


@contextmanager
def _translate_errors(failure_detail: str, **log_context: Any) -> Iterator[None]:
    """
    Map service exceptions onto HTTP responses.

    Not found → 404, access denied → 403, storage failure → 500 with a
    generic message (the underlying error is logged, never returned).
    """
    try:
        yield
    except PressKitNotFoundError as e:
        logger.warning("press_kit_not_found", **log_context)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except PressKitAccessDeniedError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=e.message)
    except SQLAlchemyError as e:
        logger.error(
            "press_kit_storage_error",
            error=str(e),
            error_type=type(e).__name__,
            **log_context,
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=failure_detail,
        )


@router.get(
    "",
    response_model=list[PressKitResponse],
    summary="List the caller's press kits",
)
def list_press_kits(
    identity: CurrentIdentity,
    service: PressKitServiceDep,
) -> list[PressKitResponse]:
    """Return all press kits owned by the caller, most recently updated first."""
    with _translate_errors("Server error fetching press kits"):
        press_kits = service.list_press_kits(identity.musician_id)
    logger.debug("press_kits_listed", count=len(press_kits))
    return press_kits


@router.post(
    "",
    response_model=PressKitResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a press kit",
)
def create_press_kit(
    request: CreatePressKitRequest,
    identity: CurrentIdentity,
    service: PressKitServiceDep,
) -> PressKitResponse:
    with _translate_errors("Server error creating press kit"):
        press_kit = service.create_press_kit(identity.musician_id, request)
    bind_request_context(press_kit_id=str(press_kit.id))
    return press_kit


@router.get(
    "/public/{press_kit_id}",
    response_model=PublicPressKitResponse,
    summary="Public view of a press kit",
)
def get_public_press_kit(
    press_kit_id: UUID,
    http_request: Request,
    service: PressKitServiceDep,
) -> PublicPressKitResponse:
    """
    Read a public press kit without authentication.

    Returns 404 if it does not exist and 403 if it is not public. Only
    upcoming events are included. Each successful read records the
    visitor's IP, referrer and user agent.
    """
    bind_request_context(press_kit_id=str(press_kit_id))
    with _translate_errors("Server error fetching press kit", press_kit_id=str(press_kit_id)):
        return service.get_public_press_kit(
            press_kit_id,
            visitor_ip=http_request.client.host if http_request.client else None,
            referrer=http_request.headers.get("referer", ""),
            user_agent=http_request.headers.get("user-agent", ""),
        )


@router.get(
    "/{press_kit_id}",
    response_model=PressKitDetailResponse,
    summary="Get a press kit with all its items",
)
def get_press_kit(
    press_kit_id: UUID,
    identity: CurrentIdentity,
    service: PressKitServiceDep,
) -> PressKitDetailResponse:
    """Returns 404 if the press kit does not exist, 403 if the caller does not own it."""
    bind_request_context(press_kit_id=str(press_kit_id))
    with _translate_errors("Server error fetching press kit", press_kit_id=str(press_kit_id)):
        return service.get_press_kit(press_kit_id, identity.musician_id)


@router.put(
    "/{press_kit_id}",
    response_model=PressKitResponse,
    summary="Update a press kit",
)
def update_press_kit(
    press_kit_id: UUID,
    request: UpdatePressKitRequest,
    identity: CurrentIdentity,
    service: PressKitServiceDep,
) -> PressKitResponse:
    """
    Update a press kit.

    Updates only the provided fields. Returns 404 if the press kit is not
    found and 403 if the caller does not own it.
    """
    bind_request_context(press_kit_id=str(press_kit_id))
    with _translate_errors("Server error updating press kit", press_kit_id=str(press_kit_id)):
        return service.update_press_kit(press_kit_id, identity.musician_id, request)


@router.delete(
    "/{press_kit_id}",
    response_model=MessageResponse,
    summary="Delete a press kit and everything in it",
)
def delete_press_kit(
    press_kit_id: UUID,
    identity: CurrentIdentity,
    service: PressKitServiceDep,
) -> MessageResponse:
    bind_request_context(press_kit_id=str(press_kit_id))
    with _translate_errors("Server error deleting press kit", press_kit_id=str(press_kit_id)):
        service.delete_press_kit(press_kit_id, identity.musician_id)
    return MessageResponse(message="Press kit deleted successfully")


@router.post(
    "/{press_kit_id}/duplicate",
    response_model=DuplicatePressKitResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Duplicate a press kit",
)
def duplicate_press_kit(
    press_kit_id: UUID,
    identity: CurrentIdentity,
    service: PressKitServiceDep,
) -> DuplicatePressKitResponse:
    """Create a private copy of a press kit and all its items (analytics excluded)."""
    bind_request_context(press_kit_id=str(press_kit_id))
    with _translate_errors("Server error duplicating press kit", press_kit_id=str(press_kit_id)):
        return service.duplicate_press_kit(press_kit_id, identity.musician_id)


@router.get(
    "/{press_kit_id}/analytics",
    response_model=AnalyticsSummaryResponse,
    summary="Visit analytics for a press kit",
)
def get_press_kit_analytics(
    press_kit_id: UUID,
    identity: CurrentIdentity,
    service: PressKitServiceDep,
) -> AnalyticsSummaryResponse:
    bind_request_context(press_kit_id=str(press_kit_id))
    with _translate_errors("Server error fetching analytics", press_kit_id=str(press_kit_id)):
        return service.get_analytics_summary(press_kit_id, identity.musician_id)


# --- Child items ---

ItemRequest = Union[
    CreateMediaItemRequest,
    CreateSocialLinkRequest,
    CreateEventRequest,
    CreateTestimonialRequest,
    CreateContactRequest,
]


def _add_item(
    service: PressKitService,
    press_kit_id: UUID,
    identity: AuthIdentity,
    collection: ItemCollection,
    request: ItemRequest,
) -> dict:
    bind_request_context(press_kit_id=str(press_kit_id))
    with _translate_errors(
        "Server error adding item",
        press_kit_id=str(press_kit_id),
        collection=collection.value,
    ):
        return service.add_item(
            press_kit_id,
            identity.musician_id,
            collection,
            request.model_dump(),
        )


@router.post(
    "/{press_kit_id}/mediaItems",
    response_model=MediaItemResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a media item",
)
def add_media_item(
    press_kit_id: UUID,
    request: CreateMediaItemRequest,
    identity: CurrentIdentity,
    service: PressKitServiceDep,
) -> MediaItemResponse:
    item = _add_item(service, press_kit_id, identity, ItemCollection.MEDIA_ITEMS, request)
    return MediaItemResponse.model_validate(item)


@router.post(
    "/{press_kit_id}/socialLinks",
    response_model=SocialLinkResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a social link",
)
def add_social_link(
    press_kit_id: UUID,
    request: CreateSocialLinkRequest,
    identity: CurrentIdentity,
    service: PressKitServiceDep,
) -> SocialLinkResponse:
    item = _add_item(service, press_kit_id, identity, ItemCollection.SOCIAL_LINKS, request)
    return SocialLinkResponse.model_validate(item)


@router.post(
    "/{press_kit_id}/events",
    response_model=EventResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add an event",
)
def add_event(
    press_kit_id: UUID,
    request: CreateEventRequest,
    identity: CurrentIdentity,
    service: PressKitServiceDep,
) -> EventResponse:
    item = _add_item(service, press_kit_id, identity, ItemCollection.EVENTS, request)
    return EventResponse.model_validate(item)


@router.post(
    "/{press_kit_id}/testimonials",
    response_model=TestimonialResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a testimonial",
)
def add_testimonial(
    press_kit_id: UUID,
    request: CreateTestimonialRequest,
    identity: CurrentIdentity,
    service: PressKitServiceDep,
) -> TestimonialResponse:
    item = _add_item(service, press_kit_id, identity, ItemCollection.TESTIMONIALS, request)
    return TestimonialResponse.model_validate(item)


@router.post(
    "/{press_kit_id}/contacts",
    response_model=ContactResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a contact",
)
def add_contact(
    press_kit_id: UUID,
    request: CreateContactRequest,
    identity: CurrentIdentity,
    service: PressKitServiceDep,
) -> ContactResponse:
    item = _add_item(service, press_kit_id, identity, ItemCollection.CONTACTS, request)
    return ContactResponse.model_validate(item)


@router.delete(
    "/{press_kit_id}/{collection}/{item_id}",
    response_model=MessageResponse,
    summary="Remove an item from a press kit",
)
def remove_item(
    press_kit_id: UUID,
    collection: ItemCollection,
    item_id: UUID,
    identity: CurrentIdentity,
    service: PressKitServiceDep,
) -> MessageResponse:
    """Returns 404 if the press kit or the item does not exist (or the item belongs elsewhere)."""
    bind_request_context(press_kit_id=str(press_kit_id))
    with _translate_errors(
        "Server error removing item",
        press_kit_id=str(press_kit_id),
        collection=collection.value,
        item_id=str(item_id),
    ):
        service.remove_item(press_kit_id, identity.musician_id, collection, item_id)
    return MessageResponse(message="Item removed successfully")
