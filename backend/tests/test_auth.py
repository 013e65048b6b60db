"""Tests for session token resolution and the authorized user stores."""

from datetime import timedelta

import pytest
from jose import jwt

from contact_access.core.auth import (
    SessionTokenService,
    SqlAuthorizedUserStore,
    StaticAuthorizedUserStore,
    normalize_email,
)
from contact_access.core.errors import AuthenticationError, InvalidRequest
from contact_access.utils.clock import utcnow

SECRET = "unit-test-secret"


def _service(store=None) -> SessionTokenService:
    return SessionTokenService(
        secret_key=SECRET,
        algorithm="HS256",
        expire_minutes=60,
        store=store or StaticAuthorizedUserStore(["Requester@Example.com"]),
    )


class TestStaticStore:
    def test_normalizes_emails(self):
        store = StaticAuthorizedUserStore([" Scott@BetterBrand.com ", "", "  "])

        assert store.is_authorized("scott@betterbrand.com")
        assert store.is_authorized("SCOTT@betterbrand.com  ")
        assert not store.is_authorized("someone@else.com")

    def test_normalize_email(self):
        assert normalize_email("  A@B.Com ") == "a@b.com"


class TestSqlStore:
    def test_add_list_remove(self, session_factory):
        store = SqlAuthorizedUserStore(session_factory)

        store.add("Owner@Example.com", notes="first")
        store.add("owner@example.com")
        store.add("zed@example.com")

        assert store.list_emails() == ["owner@example.com", "zed@example.com"]
        assert store.is_authorized("OWNER@example.com")

        assert store.remove("owner@example.com") is True
        assert store.remove("owner@example.com") is False
        assert not store.is_authorized("owner@example.com")

    def test_rejects_invalid_email(self, session_factory):
        with pytest.raises(InvalidRequest):
            SqlAuthorizedUserStore(session_factory).add("not-an-email")


class TestSessionTokens:
    def test_round_trip(self):
        service = _service()
        token = service.create_session_token(42, "requester@example.com")

        assert service.resolve_current_user(token) == 42

    def test_expired_token(self):
        service = _service()
        token = service.create_session_token(42, "requester@example.com", expires_delta=timedelta(seconds=-10))

        with pytest.raises(AuthenticationError, match="expired"):
            service.resolve_current_user(token)

    def test_bad_signature(self):
        token = _service().create_session_token(42, "requester@example.com")
        other = SessionTokenService(
            secret_key="another-secret",
            algorithm="HS256",
            expire_minutes=60,
            store=StaticAuthorizedUserStore(["requester@example.com"]),
        )

        with pytest.raises(AuthenticationError):
            other.resolve_current_user(token)

    def test_wrong_token_type(self):
        token = jwt.encode(
            {
                "sub": "42",
                "email": "requester@example.com",
                "type": "magic-link",
                "exp": utcnow() + timedelta(minutes=5),
            },
            SECRET,
            algorithm="HS256",
        )

        with pytest.raises(AuthenticationError):
            _service().resolve_current_user(token)

    def test_email_no_longer_authorized(self):
        token = _service().create_session_token(42, "requester@example.com")
        revoked = _service(StaticAuthorizedUserStore([]))

        with pytest.raises(AuthenticationError, match="not authorized"):
            revoked.resolve_current_user(token)

    def test_non_integer_subject(self):
        token = jwt.encode(
            {
                "sub": "abc",
                "email": "requester@example.com",
                "type": "session",
                "exp": utcnow() + timedelta(minutes=5),
            },
            SECRET,
            algorithm="HS256",
        )

        with pytest.raises(AuthenticationError):
            _service().resolve_current_user(token)

    def test_garbage_token(self):
        with pytest.raises(AuthenticationError):
            _service().resolve_current_user("not.a.jwt")
