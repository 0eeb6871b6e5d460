"""Result values returned by the admin auth service."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class AuthFailureReason(str, Enum):
    INPUT_REJECTED = "input_rejected"
    INVALID_PASSWORD = "invalid_password"
    STORE_UNAVAILABLE = "store_unavailable"
    NO_TOKEN = "no_token"
    SESSION_NOT_FOUND = "session_not_found"
    SESSION_EXPIRED = "session_expired"


@dataclass(frozen=True)
class AuthResult:
    """Outcome of an auth operation: ``success(token)`` or ``failure(reason)``.

    Truthiness follows ``ok`` so callers that only care about pass/fail can write
    ``if await service.validate_session(...)``.
    """

    ok: bool
    token: Optional[str] = None
    reason: Optional[AuthFailureReason] = None

    @classmethod
    def success(cls, token: Optional[str] = None) -> "AuthResult":
        return cls(ok=True, token=token)

    @classmethod
    def failure(cls, reason: AuthFailureReason) -> "AuthResult":
        return cls(ok=False, reason=reason)

    def __bool__(self) -> bool:
        return self.ok
