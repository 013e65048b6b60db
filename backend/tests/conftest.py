"""Shared fixtures.

Environment variables are set before anything imports the settings module,
so tests never depend on a developer's ``.env``.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("AUTHORIZED_EMAILS", "")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import datetime, timedelta

import pytest

from contact_access import models  # noqa: F401  (registers tables)
from contact_access.db.session import Base, build_engine, build_session_factory
from contact_access.models.contact import Contact
from contact_access.models.user import User
from contact_access.services.access_requests import AccessRequestService
from contact_access.services.decisions import AccessDecisionService
from contact_access.services.rate_limiter import AccessRequestRateLimiter

OWNER_ID = 1
REQUESTER_ID = 42
OTHER_USER_ID = 99
PRIVATE_CONTACT_ID = 7
PUBLIC_CONTACT_ID = 8


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 5, 1, 12, 0, 0))


@pytest.fixture
def engine():
    engine = build_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


def seed_directory(session_factory):
    session = session_factory()
    session.add_all([
        User(id=OWNER_ID, email="owner@example.com", name="Owner"),
        User(id=REQUESTER_ID, email="requester@example.com", name="Requester"),
        User(id=OTHER_USER_ID, email="other@example.com", name="Other"),
    ])
    session.flush()
    session.add_all([
        Contact(id=PRIVATE_CONTACT_ID, name="Ada Lovelace", created_by=OWNER_ID, is_private=True),
        Contact(id=PUBLIC_CONTACT_ID, name="Grace Hopper", created_by=OWNER_ID, is_private=False),
    ])
    session.commit()
    session.close()


@pytest.fixture
def seeded(session_factory):
    seed_directory(session_factory)
    return session_factory


def add_private_contacts(session_factory, ids, owner_id=OWNER_ID):
    session = session_factory()
    session.add_all([
        Contact(id=contact_id, name=f"Private {contact_id}", created_by=owner_id, is_private=True)
        for contact_id in ids
    ])
    session.commit()
    session.close()


@pytest.fixture
def request_service(seeded, clock) -> AccessRequestService:
    return AccessRequestService(
        seeded,
        rate_limiter=AccessRequestRateLimiter(limit=10, window=timedelta(minutes=60), clock=clock),
        clock=clock,
    )


@pytest.fixture
def decision_service(seeded, clock) -> AccessDecisionService:
    return AccessDecisionService(seeded, clock=clock)
