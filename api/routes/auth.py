"""
Route handlers for account endpoints: registration, login, the current
user, password resets, and the caller's musician profile.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from api.db import get_db_session
from api.exceptions import (
    InvalidCredentialsError,
    InvalidResetTokenError,
    UserAlreadyExistsError,
    UserNotFoundError,
)
from api.repositories.user_repository import UserRepository
from api.schemas import (
    AuthResponse,
    ForgotPasswordRequest,
    ForgotPasswordResponse,
    LoginRequest,
    MessageResponse,
    MusicianResponse,
    RegisterRequest,
    ResetPasswordRequest,
    UpdateMusicianRequest,
    UserResponse,
)
from api.security import CurrentIdentity
from api.services.auth_service import AuthService
from shared.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/auth", tags=["auth"])
musicians_router = APIRouter(prefix="/musicians", tags=["musicians"])


def get_auth_service(session: Annotated[Session, Depends(get_db_session)]) -> AuthService:
    """Dependency to get an AuthService instance."""
    return AuthService(UserRepository(session))


AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]


def _server_error(event: str, e: Exception, detail: str) -> HTTPException:
    logger.error(event, error=str(e), error_type=type(e).__name__)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a user and musician profile",
)
def register(request: RegisterRequest, service: AuthServiceDep) -> AuthResponse:
    """Returns 400 "User already exists" if the email is taken."""
    try:
        return service.register(request)
    except UserAlreadyExistsError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except IntegrityError:
        # Lost a race with a concurrent registration for the same email.
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=UserAlreadyExistsError.message,
        )
    except SQLAlchemyError as e:
        raise _server_error("registration_error", e, "Server error during registration")


@router.post("/login", response_model=AuthResponse, summary="Log in")
def login(request: LoginRequest, service: AuthServiceDep) -> AuthResponse:
    try:
        return service.login(request)
    except InvalidCredentialsError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=e.message)
    except SQLAlchemyError as e:
        raise _server_error("login_error", e, "Server error during login")


@router.get("/me", response_model=UserResponse, summary="Get the current user")
def get_me(identity: CurrentIdentity, service: AuthServiceDep) -> UserResponse:
    try:
        return service.get_current_user(identity.user_id)
    except UserNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except SQLAlchemyError as e:
        raise _server_error("get_user_error", e, "Server error getting user details")


@router.post(
    "/forgot-password",
    response_model=ForgotPasswordResponse,
    summary="Request a password reset token",
)
def forgot_password(
    request: ForgotPasswordRequest, service: AuthServiceDep
) -> ForgotPasswordResponse:
    """Always answers 200 so that registered emails cannot be enumerated."""
    try:
        return service.forgot_password(request.email)
    except SQLAlchemyError as e:
        raise _server_error("forgot_password_error", e, "Server error processing password reset")


@router.post(
    "/reset-password",
    response_model=MessageResponse,
    summary="Reset a password with a reset token",
)
def reset_password(request: ResetPasswordRequest, service: AuthServiceDep) -> MessageResponse:
    try:
        service.reset_password(request)
    except InvalidResetTokenError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except SQLAlchemyError as e:
        raise _server_error("reset_password_error", e, "Server error processing password reset")
    return MessageResponse(message="Password reset successful")


@musicians_router.get("/me", response_model=MusicianResponse, summary="Get my musician profile")
def get_my_musician(identity: CurrentIdentity, service: AuthServiceDep) -> MusicianResponse:
    try:
        return service.get_musician(identity.musician_id)
    except UserNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)


@musicians_router.put(
    "/me", response_model=MusicianResponse, summary="Update my musician profile"
)
def update_my_musician(
    request: UpdateMusicianRequest,
    identity: CurrentIdentity,
    service: AuthServiceDep,
) -> MusicianResponse:
    """Partial update: only stageName, bio, location and website present in the body change."""
    try:
        return service.update_musician(identity.musician_id, request)
    except UserNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except SQLAlchemyError as e:
        raise _server_error("update_musician_error", e, "Server error updating profile")
