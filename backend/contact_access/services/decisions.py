"""Owner decisions on pending access requests.

Approve writes three rows (status change, visibility grant, notification) and
deny writes two (status change, notification), each inside a single unit of
work. The status change is a conditional update on ``status = 'pending'``, so
when two decisions race on the same request only the first to commit wins;
the loser sees zero affected rows and its whole transaction rolls back.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from sqlalchemy import update
from sqlalchemy.orm import Session

from contact_access.core.errors import Forbidden, InvalidRequest, NotFound
from contact_access.db.uow import UnitOfWork
from contact_access.models.access_request import AccessRequest
from contact_access.models.contact import Contact
from contact_access.models.visibility_grant import VisibilityGrant
from contact_access.services.notifications import add_decision_notification
from contact_access.utils.clock import utcnow

logger = logging.getLogger(__name__)


def mark_decided(
    session: Session, request_id: int, status: str, actor_id: int, decided_at: datetime
) -> None:
    """Move a request out of ``pending``.

    Raises:
        InvalidRequest: The request is no longer pending.
    """
    result = session.execute(
        update(AccessRequest)
        .where(AccessRequest.id == request_id, AccessRequest.status == "pending")
        .values(status=status, responded_at=decided_at, responded_by=actor_id)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise InvalidRequest(message="Request already processed", details={"request_id": request_id})


class AccessDecisionService:
    def __init__(
        self,
        session_factory: Callable[[], Session],
        *,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._session_factory = session_factory
        self._clock = clock

    def approve(self, request_id: int, approver_id: int) -> None:
        """Approve a pending request and grant the requester visibility.

        Raises:
            NotFound: Request does not exist.
            InvalidRequest: Request already processed.
            Forbidden: Approver does not own the contact.
        """
        self._decide(request_id, approver_id, approved=True)

    def deny(self, request_id: int, denied_by: int) -> None:
        """Deny a pending request. No grant is created."""
        self._decide(request_id, denied_by, approved=False)

    def _decide(self, request_id: int, actor_id: int, approved: bool) -> None:
        action = "approve" if approved else "deny"
        status = "approved" if approved else "denied"

        with UnitOfWork(self._session_factory) as uow:
            session = uow.session

            request = session.get(AccessRequest, request_id)
            if request is None:
                raise NotFound(message="Request not found", details={"request_id": request_id})
            if request.status != "pending":
                raise InvalidRequest(message="Request already processed", details={"request_id": request_id})

            contact = session.get(Contact, request.contact_id)
            if contact is None or contact.created_by != actor_id:
                raise Forbidden(
                    message=f"Only contact owner can {action} access",
                    details={"request_id": request_id, "actor_id": actor_id},
                )

            decided_at = self._clock()
            mark_decided(session, request_id, status, actor_id, decided_at)

            if approved:
                # The pending guard above means this request never granted before
                session.add(VisibilityGrant(
                    user_id=request.requester_id,
                    contact_id=request.contact_id,
                    created_at=decided_at,
                ))

            add_decision_notification(session, request, contact, approved=approved, decided_at=decided_at)
            requester_id = request.requester_id
            contact_id = request.contact_id

        logger.info(
            f"access_request.{status}",
            extra={
                "request_id": request_id,
                "contact_id": contact_id,
                "requester_id": requester_id,
                "actor_id": actor_id,
            },
        )
