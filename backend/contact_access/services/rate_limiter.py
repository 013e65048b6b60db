"""Sliding-window rate limit on access request attempts.

The limiter counts rows already stored in ``contact_access_requests`` rather
than keeping its own counters, so it is shared across workers for free and
needs no cleanup. Every request counts regardless of status: the limit bounds
attempts, not outstanding load.

The count and the subsequent insert are not serialized against concurrent
requests from the same user. A burst may admit slightly more than ``limit``
rows; this is a soft anti-abuse limit, not a security boundary.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from contact_access.core.errors import RateLimitExceeded
from contact_access.models.access_request import AccessRequest
from contact_access.utils.clock import utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitResult:
    """Outcome of an allowed rate limit check.

    Attributes:
        limit: Max requests per window.
        used: Requests already counted in the current window.
        remaining: Requests still allowed after this one.
    """

    limit: int
    used: int
    remaining: int


class AccessRequestRateLimiter:
    def __init__(
        self,
        *,
        limit: int = 10,
        window: timedelta = timedelta(minutes=60),
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        """Initialize the limiter.

        Args:
            limit: Maximum number of requests per requester within ``window``.
            window: Length of the trailing window.
            clock: Returns the current naive-UTC time.

        Raises:
            ValueError: If limit or window are invalid.
        """
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window <= timedelta(0):
            raise ValueError("window must be positive")

        self._limit = limit
        self._window = window
        self._clock = clock

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def window(self) -> timedelta:
        return self._window

    def check_and_record(self, session: Session, requester_id: int) -> RateLimitResult:
        """Check the requester's budget before a new request is inserted.

        The "record" half is the AccessRequest row the caller inserts next in
        the same transaction; this method itself never writes.

        Raises:
            RateLimitExceeded: When ``limit`` or more requests exist in the window.
        """
        now = self._clock()
        window_start = now - self._window

        used, oldest = session.execute(
            select(func.count(AccessRequest.id), func.min(AccessRequest.created_at)).where(
                AccessRequest.requester_id == requester_id,
                AccessRequest.created_at > window_start,
            )
        ).one()
        used = used or 0

        if used < self._limit:
            return RateLimitResult(
                limit=self._limit,
                used=used,
                remaining=self._limit - used - 1,
            )

        # The budget frees up once the oldest counted request leaves the window
        retry_after = 0
        if oldest is not None:
            retry_after = max(0, int(math.ceil((oldest + self._window - now).total_seconds())))

        window_seconds = int(self._window.total_seconds())
        logger.warning(
            "rate_limit.exceeded",
            extra={
                "requester_id": requester_id,
                "limit": self._limit,
                "used": used,
                "window_s": window_seconds,
                "retry_after_s": retry_after,
            },
        )
        raise RateLimitExceeded(
            message=(
                f"Rate limit exceeded. You can only request access to "
                f"{self._limit} contacts per {_describe_window(self._window)}."
            ),
            details={"requester_id": requester_id, "used": used},
            limit=self._limit,
            window_seconds=window_seconds,
            retry_after_seconds=retry_after,
        )


def _describe_window(window: timedelta) -> str:
    minutes = int(window.total_seconds() // 60)
    if minutes == 60:
        return "hour"
    if minutes % 60 == 0:
        return f"{minutes // 60} hours"
    return f"{minutes} minutes"
