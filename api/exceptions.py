"""
Domain exceptions raised by the service layer.

Services raise these; route handlers translate them into HTTPException
with the matching status code. Each exception carries the user-facing
message so that routes never need to invent their own wording.
"""

from __future__ import annotations


class ServiceError(Exception):
    """Base class for expected, user-facing service failures."""

    message = "Request failed"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        if message:
            self.message = message


class PressKitNotFoundError(ServiceError):
    message = "Press kit not found"


class PressKitItemNotFoundError(PressKitNotFoundError):
    message = "Item not found"


class PressKitAccessDeniedError(ServiceError):
    message = "Access denied"


class PressKitNotPublicError(PressKitAccessDeniedError):
    message = "This press kit is not publicly available"


class UserAlreadyExistsError(ServiceError):
    message = "User already exists"


class InvalidCredentialsError(ServiceError):
    message = "Invalid credentials"


class UserNotFoundError(ServiceError):
    message = "User not found"


class InvalidResetTokenError(ServiceError):
    message = "Invalid or expired reset token"
