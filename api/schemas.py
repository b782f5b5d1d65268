"""
Pydantic schemas for API request/response contracts.

JSON payloads use camelCase field names (`isPublic`, `pressKitId`, ...);
the models use snake_case attributes and an alias generator, so services
work with column-shaped dicts and clients see the camelCase contract.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serializing to and accepting camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def _require_text(value: Optional[str], message: str) -> str:
    if value is None or not value.strip():
        raise ValueError(message)
    return value


def _check_email(value: str) -> str:
    try:
        return validate_email(value, check_deliverability=False).normalized
    except EmailNotValidError:
        raise ValueError("Please enter a valid email")


# --- Auth ---


class RegisterRequest(CamelModel):
    """Request schema for POST /auth/register."""

    email: str
    password: str
    name: str

    @field_validator("email")
    @classmethod
    def _valid_email(cls, v: str) -> str:
        return _check_email(v)

    @field_validator("password")
    @classmethod
    def _password_length(cls, v: str) -> str:
        if len(v) < 6:
            raise ValueError("Password must be at least 6 characters")
        return v

    @field_validator("name")
    @classmethod
    def _name_present(cls, v: str) -> str:
        return _require_text(v, "Name is required")


class LoginRequest(CamelModel):
    """Request schema for POST /auth/login."""

    email: str
    password: str

    @field_validator("email")
    @classmethod
    def _valid_email(cls, v: str) -> str:
        return _check_email(v)

    @field_validator("password")
    @classmethod
    def _password_present(cls, v: str) -> str:
        if not v:
            raise ValueError("Password is required")
        return v


class ForgotPasswordRequest(CamelModel):
    email: str

    @field_validator("email")
    @classmethod
    def _valid_email(cls, v: str) -> str:
        return _check_email(v)


class ResetPasswordRequest(CamelModel):
    token: str
    password: str

    @field_validator("token")
    @classmethod
    def _token_present(cls, v: str) -> str:
        return _require_text(v, "Reset token is required")

    @field_validator("password")
    @classmethod
    def _password_length(cls, v: str) -> str:
        if len(v) < 6:
            raise ValueError("Password must be at least 6 characters")
        return v


class MusicianResponse(CamelModel):
    id: UUID
    user_id: UUID
    stage_name: str
    bio: Optional[str] = None
    location: Optional[str] = None
    website: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class UserResponse(CamelModel):
    """A user without its password hash."""

    id: UUID
    email: str
    name: str
    created_at: datetime
    updated_at: datetime
    musician: Optional[MusicianResponse] = None


class AuthResponse(CamelModel):
    """Response schema for register and login."""

    message: str
    user: UserResponse
    token: str


class ForgotPasswordResponse(CamelModel):
    message: str
    # Returned only outside production; e-mail delivery is not part of the service.
    reset_token: Optional[str] = None


class UpdateMusicianRequest(CamelModel):
    """Request schema for PUT /musicians/me. Only provided fields are applied."""

    stage_name: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    website: Optional[str] = None

    @field_validator("stage_name")
    @classmethod
    def _stage_name_present(cls, v: Optional[str]) -> str:
        return _require_text(v, "Stage name cannot be empty")


# --- Press kits ---


class CreatePressKitRequest(CamelModel):
    """Request schema for POST /pressKits."""

    title: str
    description: Optional[str] = None
    theme: Optional[str] = None
    is_public: Optional[bool] = None

    @field_validator("title")
    @classmethod
    def _title_present(cls, v: str) -> str:
        return _require_text(v, "Title is required")


class UpdatePressKitRequest(CamelModel):
    """
    Request schema for PUT /pressKits/{id}.

    This is a partial patch: fields absent from the body are left untouched.
    Explicit nulls are rejected for columns that cannot be empty.
    """

    title: Optional[str] = None
    description: Optional[str] = None
    theme: Optional[str] = None
    is_public: Optional[bool] = None

    @field_validator("title")
    @classmethod
    def _title_present(cls, v: Optional[str]) -> str:
        return _require_text(v, "Title cannot be empty")

    @field_validator("theme")
    @classmethod
    def _theme_present(cls, v: Optional[str]) -> str:
        return _require_text(v, "Theme cannot be empty")

    @field_validator("is_public")
    @classmethod
    def _is_public_present(cls, v: Optional[bool]) -> bool:
        if v is None:
            raise ValueError("isPublic must be a boolean")
        return v


class PressKitResponse(CamelModel):
    id: UUID
    title: str
    description: Optional[str] = None
    theme: str
    is_public: bool
    musician_id: UUID
    created_at: datetime
    updated_at: datetime


class MediaItemResponse(CamelModel):
    id: UUID
    press_kit_id: UUID
    type: str
    title: str
    description: Optional[str] = None
    file_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    external_url: Optional[str] = None
    order: int


class SocialLinkResponse(CamelModel):
    id: UUID
    press_kit_id: UUID
    platform: str
    url: str


class EventResponse(CamelModel):
    id: UUID
    press_kit_id: UUID
    name: str
    venue: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    date: datetime
    description: Optional[str] = None
    ticket_url: Optional[str] = None


class TestimonialResponse(CamelModel):
    id: UUID
    press_kit_id: UUID
    quote: str
    author: str
    source: Optional[str] = None
    date: Optional[datetime] = None


class ContactResponse(CamelModel):
    id: UUID
    press_kit_id: UUID
    name: str
    role: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


class PressKitDetailResponse(PressKitResponse):
    """A press kit with all five child collections."""

    media_items: list[MediaItemResponse] = Field(default_factory=list)
    social_links: list[SocialLinkResponse] = Field(default_factory=list)
    events: list[EventResponse] = Field(default_factory=list)
    testimonials: list[TestimonialResponse] = Field(default_factory=list)
    contacts: list[ContactResponse] = Field(default_factory=list)


class MusicianProfileResponse(CamelModel):
    """Public musician fields embedded in the public press kit view."""

    stage_name: str
    bio: Optional[str] = None
    location: Optional[str] = None
    website: Optional[str] = None


class PublicPressKitResponse(PressKitDetailResponse):
    """Public view: only upcoming events, with the musician profile embedded."""

    musician: Optional[MusicianProfileResponse] = None


class DuplicatePressKitResponse(CamelModel):
    message: str
    press_kit: PressKitResponse


class MessageResponse(CamelModel):
    message: str


# --- Child items ---


class ItemCollection(str, Enum):
    """Child collections addressable under /pressKits/{id}/{collection}."""

    MEDIA_ITEMS = "mediaItems"
    SOCIAL_LINKS = "socialLinks"
    EVENTS = "events"
    TESTIMONIALS = "testimonials"
    CONTACTS = "contacts"

    @property
    def table_key(self) -> str:
        return {
            ItemCollection.MEDIA_ITEMS: "media_items",
            ItemCollection.SOCIAL_LINKS: "social_links",
            ItemCollection.EVENTS: "events",
            ItemCollection.TESTIMONIALS: "testimonials",
            ItemCollection.CONTACTS: "contacts",
        }[self]


class CreateMediaItemRequest(CamelModel):
    type: str
    title: str
    description: Optional[str] = None
    file_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    external_url: Optional[str] = None
    order: Optional[int] = Field(None, ge=0)

    @field_validator("type")
    @classmethod
    def _type_present(cls, v: str) -> str:
        return _require_text(v, "Type is required")

    @field_validator("title")
    @classmethod
    def _title_present(cls, v: str) -> str:
        return _require_text(v, "Title is required")


class CreateSocialLinkRequest(CamelModel):
    platform: str
    url: str

    @field_validator("platform")
    @classmethod
    def _platform_present(cls, v: str) -> str:
        return _require_text(v, "Platform is required")

    @field_validator("url")
    @classmethod
    def _url_present(cls, v: str) -> str:
        return _require_text(v, "URL is required")


class CreateEventRequest(CamelModel):
    name: str
    venue: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    date: datetime
    description: Optional[str] = None
    ticket_url: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _name_present(cls, v: str) -> str:
        return _require_text(v, "Name is required")


class CreateTestimonialRequest(CamelModel):
    quote: str
    author: str
    source: Optional[str] = None
    date: Optional[datetime] = None

    @field_validator("quote")
    @classmethod
    def _quote_present(cls, v: str) -> str:
        return _require_text(v, "Quote is required")

    @field_validator("author")
    @classmethod
    def _author_present(cls, v: str) -> str:
        return _require_text(v, "Author is required")


class CreateContactRequest(CamelModel):
    name: str
    role: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _name_present(cls, v: str) -> str:
        return _require_text(v, "Name is required")


# --- Analytics ---


class AnalyticResponse(CamelModel):
    id: UUID
    press_kit_id: UUID
    visitor_ip: Optional[str] = None
    referrer: str
    user_agent: str
    created_at: datetime


class AnalyticsSummaryResponse(CamelModel):
    press_kit_id: UUID
    total_views: int
    recent_views: list[AnalyticResponse] = Field(default_factory=list)
