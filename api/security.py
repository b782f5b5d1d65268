"""
Password hashing, bearer tokens and the authentication dependency.

Access tokens are HS256 JWTs carrying `userId` and `musicianId`; password
reset tokens carry `userId` and a `purpose` claim so that the two can
never be used interchangeably.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Annotated, Optional
from uuid import UUID

import bcrypt
import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from shared.config import AppConfig, get_config
from shared.logging import bind_request_context, get_logger

logger = get_logger(__name__)

RESET_TOKEN_PURPOSE = "password_reset"

_bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AuthIdentity:
    """Identity extracted from a verified access token."""

    user_id: UUID
    musician_id: UUID


def hash_password(password: str, rounds: Optional[int] = None) -> str:
    if rounds is None:
        rounds = get_config().bcrypt_rounds
    hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds))
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


def create_access_token(
    user_id: UUID, musician_id: UUID, config: Optional[AppConfig] = None
) -> str:
    config = config or get_config()
    now = datetime.now(timezone.utc)
    payload = {
        "userId": str(user_id),
        "musicianId": str(musician_id),
        "iat": now,
        "exp": now + timedelta(days=config.jwt_expires_days),
    }
    return jwt.encode(payload, config.jwt_secret, algorithm=config.jwt_algorithm)


def create_reset_token(user_id: UUID, config: Optional[AppConfig] = None) -> str:
    config = config or get_config()
    now = datetime.now(timezone.utc)
    payload = {
        "userId": str(user_id),
        "purpose": RESET_TOKEN_PURPOSE,
        "iat": now,
        "exp": now + timedelta(minutes=config.reset_token_expires_minutes),
    }
    return jwt.encode(payload, config.jwt_secret, algorithm=config.jwt_algorithm)


def decode_token(token: str, config: Optional[AppConfig] = None) -> dict:
    """
    Verify signature and expiry and return the claims.

    Raises jwt.InvalidTokenError (or a subclass) on any failure.
    """
    config = config or get_config()
    return jwt.decode(token, config.jwt_secret, algorithms=[config.jwt_algorithm])


def decode_access_token(token: str, config: Optional[AppConfig] = None) -> AuthIdentity:
    claims = decode_token(token, config)
    try:
        return AuthIdentity(
            user_id=UUID(claims["userId"]),
            musician_id=UUID(claims["musicianId"]),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise jwt.InvalidTokenError("Token is missing identity claims") from e


def decode_reset_token(token: str, config: Optional[AppConfig] = None) -> UUID:
    claims = decode_token(token, config)
    if claims.get("purpose") != RESET_TOKEN_PURPOSE:
        raise jwt.InvalidTokenError("Not a password reset token")
    try:
        return UUID(claims["userId"])
    except (KeyError, TypeError, ValueError) as e:
        raise jwt.InvalidTokenError("Token is missing user claim") from e


async def get_current_identity(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(_bearer_scheme)],
) -> AuthIdentity:
    """
    FastAPI dependency resolving the caller's identity from the bearer token.

    Responds 401 when the header is missing or the token does not verify.
    Declared async so the bound musician_id reaches the handler's thread.
    """
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        identity = decode_access_token(credentials.credentials)
    except jwt.InvalidTokenError as e:
        logger.info("access_token_rejected", reason=type(e).__name__)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    bind_request_context(musician_id=str(identity.musician_id))
    return identity


CurrentIdentity = Annotated[AuthIdentity, Depends(get_current_identity)]
