"""Visibility checks for private contacts.

A private contact is visible to its owner and to every user holding a
VisibilityGrant for it. Public contacts are visible to everyone. The batch
variants answer for many contacts in a fixed number of queries.
"""

from typing import Dict, Iterable, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from contact_access.models.access_request import AccessRequest
from contact_access.models.contact import Contact
from contact_access.models.visibility_grant import VisibilityGrant


def _has_grant(session: Session, user_id: int, contact_id: int) -> bool:
    return session.execute(
        select(VisibilityGrant.id).where(
            VisibilityGrant.user_id == user_id,
            VisibilityGrant.contact_id == contact_id,
        ).limit(1)
    ).first() is not None


def _latest_request_status(session: Session, user_id: int, contact_id: int) -> Optional[str]:
    return session.execute(
        select(AccessRequest.status)
        .where(
            AccessRequest.contact_id == contact_id,
            AccessRequest.requester_id == user_id,
        )
        .order_by(AccessRequest.created_at.desc(), AccessRequest.id.desc())
        .limit(1)
    ).scalar_one_or_none()


def can_view_contact(session: Session, user_id: int, contact_id: int) -> bool:
    contact = session.get(Contact, contact_id)
    if contact is None:
        return False
    if not contact.is_private:
        return True
    if contact.created_by == user_id:
        return True
    return _has_grant(session, user_id, contact_id)


def batch_can_view_contacts(
    session: Session, user_id: int, contact_ids: Iterable[int]
) -> Dict[int, bool]:
    contact_ids = list(contact_ids)
    if not contact_ids:
        return {}

    contacts = {
        c.id: c
        for c in session.execute(select(Contact).where(Contact.id.in_(contact_ids))).scalars()
    }

    private_ids = [
        c.id for c in contacts.values() if c.is_private and c.created_by != user_id
    ]
    granted = set()
    if private_ids:
        granted = set(
            session.execute(
                select(VisibilityGrant.contact_id).where(
                    VisibilityGrant.user_id == user_id,
                    VisibilityGrant.contact_id.in_(private_ids),
                )
            ).scalars()
        )

    result: Dict[int, bool] = {}
    for contact_id in contact_ids:
        contact = contacts.get(contact_id)
        if contact is None:
            result[contact_id] = False
        elif not contact.is_private or contact.created_by == user_id:
            result[contact_id] = True
        else:
            result[contact_id] = contact_id in granted
    return result


def can_edit_contact(session: Session, user_id: int, contact_id: int) -> bool:
    """Only the owner edits shared contact data."""
    contact = session.get(Contact, contact_id)
    if contact is None:
        return False
    return contact.created_by == user_id


def can_delete_contact(session: Session, user_id: int, contact_id: int) -> bool:
    return can_edit_contact(session, user_id, contact_id)


def get_contact_access_status(session: Session, user_id: int, contact_id: int) -> str:
    """Relationship of ``user_id`` to a contact.

    Returns one of ``owner``, ``approved``, ``pending``, ``denied``, ``none``.
    A grant always reports ``approved``; otherwise the most recent request for
    the pair decides.
    """
    contact = session.get(Contact, contact_id)
    if contact is None:
        return "none"
    if contact.created_by == user_id:
        return "owner"
    if not contact.is_private:
        return "approved"
    if _has_grant(session, user_id, contact_id):
        return "approved"
    return _latest_request_status(session, user_id, contact_id) or "none"


def batch_get_contact_access_status(
    session: Session, user_id: int, contact_ids: Iterable[int]
) -> Dict[int, str]:
    contact_ids = list(contact_ids)
    if not contact_ids:
        return {}

    contacts = {
        c.id: c
        for c in session.execute(select(Contact).where(Contact.id.in_(contact_ids))).scalars()
    }
    granted = set(
        session.execute(
            select(VisibilityGrant.contact_id).where(
                VisibilityGrant.user_id == user_id,
                VisibilityGrant.contact_id.in_(contact_ids),
            )
        ).scalars()
    )

    # Oldest first so later rows overwrite earlier ones per contact
    latest: Dict[int, str] = {}
    for contact_id, status in session.execute(
        select(AccessRequest.contact_id, AccessRequest.status)
        .where(
            AccessRequest.requester_id == user_id,
            AccessRequest.contact_id.in_(contact_ids),
        )
        .order_by(AccessRequest.created_at.asc(), AccessRequest.id.asc())
    ):
        latest[contact_id] = status

    result: Dict[int, str] = {}
    for contact_id in contact_ids:
        contact = contacts.get(contact_id)
        if contact is None:
            result[contact_id] = "none"
        elif contact.created_by == user_id:
            result[contact_id] = "owner"
        elif not contact.is_private or contact_id in granted:
            result[contact_id] = "approved"
        else:
            result[contact_id] = latest.get(contact_id, "none")
    return result
