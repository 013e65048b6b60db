"""Error taxonomy for the access-request core.

Every precondition failure maps to exactly one subclass of ``AccessError``.
Callers switch on the class (or its ``code``) instead of parsing messages.
``StoreError`` is deliberately outside the hierarchy: it signals an
infrastructure failure, not a rejected request.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Optional


@dataclass(eq=False)
class AccessError(Exception):
    """Base error for rejected access-request operations.

    Attributes:
        message: Human-readable error message.
        details: Optional structured context (ids, limits) for logs and clients.
    """

    message: str
    details: Dict[str, Any] = field(default_factory=dict)

    code: ClassVar[str] = "access_error"
    http_status: ClassVar[int] = 400

    def __post_init__(self) -> None:
        super().__init__(self.message)


@dataclass(eq=False)
class RateLimitExceeded(AccessError):
    """Requester issued too many access requests within the trailing window."""

    limit: int = 0
    window_seconds: int = 0
    retry_after_seconds: int = 0

    code: ClassVar[str] = "rate_limit_exceeded"
    http_status: ClassVar[int] = 429


@dataclass(eq=False)
class NotFound(AccessError):
    """Referenced contact or access request does not exist."""

    code: ClassVar[str] = "not_found"
    http_status: ClassVar[int] = 404


@dataclass(eq=False)
class InvalidRequest(AccessError):
    """Contact is not private, requester owns it, or request already processed."""

    code: ClassVar[str] = "invalid_request"
    http_status: ClassVar[int] = 400


@dataclass(eq=False)
class Conflict(AccessError):
    """A pending or approved request already exists for the same pair."""

    code: ClassVar[str] = "conflict"
    http_status: ClassVar[int] = 409


@dataclass(eq=False)
class Forbidden(AccessError):
    """Acting user is not the contact owner."""

    code: ClassVar[str] = "forbidden"
    http_status: ClassVar[int] = 403


@dataclass(eq=False)
class AuthenticationError(AccessError):
    """Session token missing, invalid, expired, or not on the allow-list."""

    code: ClassVar[str] = "unauthorized"
    http_status: ClassVar[int] = 401


class StoreError(Exception):
    """The data store failed while committing or querying."""

    code = "store_error"
    http_status = 503

    def __init__(self, message: str = "Database operation failed", cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause
