"""
Service layer for account registration, login and password resets.
"""

from __future__ import annotations

from typing import Optional
from uuid import UUID

import jwt

from api.exceptions import (
    InvalidCredentialsError,
    InvalidResetTokenError,
    UserAlreadyExistsError,
    UserNotFoundError,
)
from api.repositories.user_repository import UserRepository
from api.schemas import (
    AuthResponse,
    ForgotPasswordResponse,
    LoginRequest,
    MusicianResponse,
    RegisterRequest,
    ResetPasswordRequest,
    UpdateMusicianRequest,
    UserResponse,
)
from api.security import (
    create_access_token,
    create_reset_token,
    decode_reset_token,
    hash_password,
    verify_password,
)
from shared.config import get_config
from shared.logging import get_logger

logger = get_logger(__name__)

FORGOT_PASSWORD_MESSAGE = "If your email is registered, you will receive a password reset link"


def _user_response(user: dict, musician: Optional[dict]) -> UserResponse:
    return UserResponse.model_validate(
        {
            **{k: v for k, v in user.items() if k != "password_hash"},
            "musician": musician,
        }
    )


class AuthService:
    """Service for user accounts and their musician profiles."""

    def __init__(self, repository: UserRepository):
        self.repository = repository

    def register(self, request: RegisterRequest) -> AuthResponse:
        """
        Create a user and its musician profile and issue an access token.

        Raises UserAlreadyExistsError if the email is taken.
        """
        if self.repository.get_user_by_email(request.email) is not None:
            logger.info("registration_rejected_existing_user")
            raise UserAlreadyExistsError()

        user, musician = self.repository.create_user_with_musician(
            email=request.email,
            password_hash=hash_password(request.password),
            name=request.name,
        )
        token = create_access_token(user["id"], musician["id"])

        logger.info(
            "user_registered",
            user_id=str(user["id"]),
            musician_id=str(musician["id"]),
        )
        return AuthResponse(
            message="User registered successfully",
            user=_user_response(user, musician),
            token=token,
        )

    def login(self, request: LoginRequest) -> AuthResponse:
        """
        Verify credentials and issue an access token.

        Unknown email and wrong password fail identically.
        """
        user = self.repository.get_user_by_email(request.email)
        if user is None or not verify_password(request.password, user["password_hash"]):
            logger.info("login_rejected")
            raise InvalidCredentialsError()

        musician = self.repository.get_musician_by_user_id(user["id"])
        if musician is None:
            # Accounts are always created with a musician profile.
            logger.error("login_user_without_musician", user_id=str(user["id"]))
            raise InvalidCredentialsError()

        logger.info("user_logged_in", user_id=str(user["id"]))
        return AuthResponse(
            message="Login successful",
            user=_user_response(user, musician),
            token=create_access_token(user["id"], musician["id"]),
        )

    def get_current_user(self, user_id: UUID) -> UserResponse:
        user = self.repository.get_user_by_id(user_id)
        if user is None:
            raise UserNotFoundError()
        musician = self.repository.get_musician_by_user_id(user_id)
        return _user_response(user, musician)

    def forgot_password(self, email: str) -> ForgotPasswordResponse:
        """
        Issue a password reset token for a registered email.

        The response message is identical whether or not the email exists.
        The token itself is only echoed back outside production.
        """
        user = self.repository.get_user_by_email(email)
        if user is None:
            return ForgotPasswordResponse(message=FORGOT_PASSWORD_MESSAGE)

        config = get_config()
        reset_token = create_reset_token(user["id"], config)
        logger.info("password_reset_requested", user_id=str(user["id"]))

        return ForgotPasswordResponse(
            message=FORGOT_PASSWORD_MESSAGE,
            reset_token=None if config.is_production else reset_token,
        )

    def reset_password(self, request: ResetPasswordRequest) -> None:
        """Replace the password of the user named by a valid reset token."""
        try:
            user_id = decode_reset_token(request.token)
        except jwt.InvalidTokenError as e:
            logger.info("password_reset_token_rejected", reason=type(e).__name__)
            raise InvalidResetTokenError()

        if not self.repository.update_password_hash(user_id, hash_password(request.password)):
            raise InvalidResetTokenError()

        logger.info("password_reset_completed", user_id=str(user_id))

    def get_musician(self, musician_id: UUID) -> MusicianResponse:
        musician = self.repository.get_musician_by_id(musician_id)
        if musician is None:
            raise UserNotFoundError("Musician not found")
        return MusicianResponse.model_validate(musician)

    def update_musician(
        self, musician_id: UUID, request: UpdateMusicianRequest
    ) -> MusicianResponse:
        """Partial update of the caller's musician profile."""
        changes = request.model_dump(exclude_unset=True)
        musician = self.repository.update_musician(musician_id, changes)
        if musician is None:
            raise UserNotFoundError("Musician not found")
        logger.info("musician_profile_updated", fields=sorted(changes))
        return MusicianResponse.model_validate(musician)
