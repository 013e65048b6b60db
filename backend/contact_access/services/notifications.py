"""Notification rows emitted as a side effect of access decisions.

Functions here only build and add rows to the caller's session. They never
commit, so the notification shares the fate of the transaction that created
it.
"""

from html import escape
from typing import Optional

from sqlalchemy.orm import Session

from contact_access.models.access_request import AccessRequest
from contact_access.models.contact import Contact
from contact_access.models.notification import Notification


def _contact_url(contact_id: int) -> str:
    return f"/contacts/{contact_id}"


def _safe_name(contact: Contact) -> str:
    # Contact names are user-supplied and end up in HTML in the feed
    return escape(contact.name or "", quote=True)


def add_access_requested_notification(
    session: Session, request: AccessRequest, contact: Contact
) -> Notification:
    notification = Notification(
        user_id=contact.created_by,
        type="contact_access_request",
        title="Contact Access Request",
        message=f"A user has requested access to your contact: {_safe_name(contact)}",
        access_request_id=request.id,
        contact_id=contact.id,
        action_url=_contact_url(contact.id),
        is_read=False,
        created_at=request.created_at,
    )
    session.add(notification)
    return notification


def add_decision_notification(
    session: Session,
    request: AccessRequest,
    contact: Contact,
    approved: bool,
    decided_at=None,
) -> Notification:
    """Notify the requester that the owner approved or denied the request.

    Only approvals link back to the contact, since a denied requester still
    cannot open it.
    """
    if approved:
        notification_type = "contact_access_approved"
        title = "Access Request Approved"
        verb = "approved"
        action_url: Optional[str] = _contact_url(contact.id)
    else:
        notification_type = "contact_access_denied"
        title = "Access Request Denied"
        verb = "denied"
        action_url = None

    notification = Notification(
        user_id=request.requester_id,
        type=notification_type,
        title=title,
        message=f"Your request to access {_safe_name(contact)} has been {verb}",
        access_request_id=request.id,
        contact_id=request.contact_id,
        action_url=action_url,
        is_read=False,
    )
    if decided_at is not None:
        notification.created_at = decided_at
    session.add(notification)
    return notification
