"""Creation of access requests for private contacts.

A non-owner asks to see a private contact; the owner is notified and later
approves or denies (see ``decisions``). All checks run before the first
write, and the request row and the owner notification commit together.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from contact_access.core.errors import Conflict, InvalidRequest, NotFound
from contact_access.db.uow import UnitOfWork
from contact_access.models.access_request import AccessRequest
from contact_access.models.contact import Contact
from contact_access.services.notifications import add_access_requested_notification
from contact_access.services.rate_limiter import AccessRequestRateLimiter
from contact_access.utils.clock import utcnow

logger = logging.getLogger(__name__)

DEFAULT_MESSAGE_MAX_LENGTH = 500


def get_contact(session: Session, contact_id: int) -> Optional[Contact]:
    return session.get(Contact, contact_id)


def find_request_with_status(
    session: Session, contact_id: int, requester_id: int, status: str
) -> Optional[AccessRequest]:
    return session.execute(
        select(AccessRequest)
        .where(
            AccessRequest.contact_id == contact_id,
            AccessRequest.requester_id == requester_id,
            AccessRequest.status == status,
        )
        .order_by(AccessRequest.created_at.desc(), AccessRequest.id.desc())
        .limit(1)
    ).scalar_one_or_none()


class AccessRequestService:
    def __init__(
        self,
        session_factory: Callable[[], Session],
        *,
        rate_limiter: Optional[AccessRequestRateLimiter] = None,
        clock: Callable[[], datetime] = utcnow,
        message_max_length: int = DEFAULT_MESSAGE_MAX_LENGTH,
    ):
        self._session_factory = session_factory
        self._clock = clock
        self._rate_limiter = rate_limiter or AccessRequestRateLimiter(
            limit=10, window=timedelta(minutes=60), clock=clock
        )
        self._message_max_length = message_max_length

    def request_access(
        self, requester_id: int, contact_id: int, message: Optional[str] = None
    ) -> int:
        """Create a pending access request and notify the contact owner.

        Returns:
            The new request id.

        Raises:
            RateLimitExceeded: Too many requests in the trailing window.
            NotFound: Contact does not exist.
            InvalidRequest: Contact is public, requester owns it, or message too long.
            Conflict: A pending or approved request already exists for the pair.
        """
        with UnitOfWork(self._session_factory) as uow:
            session = uow.session

            self._rate_limiter.check_and_record(session, requester_id)

            if message is not None and len(message) > self._message_max_length:
                raise InvalidRequest(
                    message=f"Message must be at most {self._message_max_length} characters",
                    details={"max_length": self._message_max_length},
                )

            contact = get_contact(session, contact_id)
            if contact is None:
                raise NotFound(message="Contact not found", details={"contact_id": contact_id})
            if not contact.is_private:
                raise InvalidRequest(message="Contact is not private", details={"contact_id": contact_id})
            if contact.created_by == requester_id:
                raise InvalidRequest(message="You own this contact", details={"contact_id": contact_id})

            # A denied request never blocks a new attempt
            if find_request_with_status(session, contact_id, requester_id, "pending") is not None:
                raise Conflict(
                    message="You already have a pending request",
                    details={"contact_id": contact_id, "requester_id": requester_id},
                )
            if find_request_with_status(session, contact_id, requester_id, "approved") is not None:
                raise Conflict(
                    message="You already have access",
                    details={"contact_id": contact_id, "requester_id": requester_id},
                )

            request = AccessRequest(
                contact_id=contact_id,
                requester_id=requester_id,
                message=message,
                status="pending",
                created_at=self._clock(),
                responded_at=None,
                responded_by=None,
            )
            session.add(request)
            session.flush()

            add_access_requested_notification(session, request, contact)
            request_id = request.id
            owner_id = contact.created_by

        logger.info(
            "access_request.created",
            extra={
                "request_id": request_id,
                "contact_id": contact_id,
                "requester_id": requester_id,
                "owner_id": owner_id,
            },
        )
        return request_id
