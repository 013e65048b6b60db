from datetime import datetime, timedelta, timezone

from conftest import PRIVATE_CONTACT_ID, REQUESTER_ID
from contact_access.models.access_request import AccessRequest
from contact_access.utils.clock import utcnow


def test_utcnow_is_naive_utc():
    before = datetime.now(timezone.utc).replace(tzinfo=None)
    now = utcnow()

    assert now.tzinfo is None
    assert before <= now <= before + timedelta(seconds=5)


def test_column_default_uses_naive_utc(db, seeded):
    request = AccessRequest(contact_id=PRIVATE_CONTACT_ID, requester_id=REQUESTER_ID)
    db.add(request)
    db.commit()

    assert request.created_at.tzinfo is None
    assert abs(request.created_at - utcnow()) < timedelta(seconds=5)
