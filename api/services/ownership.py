"""
Ownership guard for press kit access.

Callers must check that the resource exists before asking the guard, so
that a missing press kit surfaces as "not found" and an existing one
owned by someone else surfaces as "forbidden".
"""

from __future__ import annotations

from enum import Enum
from uuid import UUID


class Access(str, Enum):
    ALLOWED = "allowed"
    DENIED = "denied"


def authorize(requester_musician_id: UUID, resource_musician_id: UUID) -> Access:
    """Allow access only when the requester owns the resource."""
    if requester_musician_id == resource_musician_id:
        return Access.ALLOWED
    return Access.DENIED
