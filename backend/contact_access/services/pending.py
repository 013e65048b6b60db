from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from contact_access.models.access_request import AccessRequest
from contact_access.models.contact import Contact
from contact_access.models.user import User


@dataclass(frozen=True)
class PendingAccessRequest:
    request_id: int
    contact_id: int
    contact_name: str
    requester_id: int
    requester_email: Optional[str]
    requester_name: Optional[str]
    message: Optional[str]
    created_at: datetime


def list_pending_access(session: Session, owner_id: int) -> List[PendingAccessRequest]:
    """Pending requests against contacts owned by ``owner_id``, newest first."""
    rows = session.execute(
        select(AccessRequest, Contact, User)
        .join(Contact, AccessRequest.contact_id == Contact.id)
        .join(User, AccessRequest.requester_id == User.id)
        .where(
            Contact.created_by == owner_id,
            AccessRequest.status == "pending",
        )
        .order_by(AccessRequest.created_at.desc(), AccessRequest.id.desc())
    ).all()

    return [
        PendingAccessRequest(
            request_id=request.id,
            contact_id=contact.id,
            contact_name=contact.name,
            requester_id=requester.id,
            requester_email=requester.email,
            requester_name=requester.name,
            message=request.message,
            created_at=request.created_at,
        )
        for request, contact, requester in rows
    ]
