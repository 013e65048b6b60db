"""HTTP-level tests for the access request API."""

import pytest
from fastapi.testclient import TestClient

from conftest import OTHER_USER_ID, OWNER_ID, PRIVATE_CONTACT_ID, PUBLIC_CONTACT_ID, REQUESTER_ID, add_private_contacts
from contact_access.core.auth import StaticAuthorizedUserStore
from contact_access.core.config import Settings
from contact_access.models.notification import Notification
from contact_access.models.visibility_grant import VisibilityGrant
from main import create_app

EMAILS = {
    OWNER_ID: "owner@example.com",
    REQUESTER_ID: "requester@example.com",
    OTHER_USER_ID: "other@example.com",
}


@pytest.fixture
def app(seeded, clock):
    settings = Settings(
        DATABASE_URL="sqlite://",
        SECRET_KEY="route-test-secret",
        ACCESS_REQUEST_RATE_LIMIT=10,
        ACCESS_REQUEST_RATE_WINDOW_MINUTES=60,
        CORS_ORIGINS="http://localhost:5173",
        LOG_LEVEL="WARNING",
    )
    return create_app(
        settings=settings,
        session_factory=seeded,
        authorized_store=StaticAuthorizedUserStore(EMAILS.values()),
        clock=clock,
    )


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def auth(app):
    def headers(user_id):
        token = app.state.token_service.create_session_token(user_id, EMAILS[user_id])
        return {"Authorization": f"Bearer {token}"}

    return headers


def _request(client, auth, user_id=REQUESTER_ID, contact_id=PRIVATE_CONTACT_ID, **body):
    return client.post("/api/access-requests", json={"contact_id": contact_id, **body}, headers=auth(user_id))


def test_health(client):
    assert client.get("/api/health").json() == {"status": "healthy"}


def test_requires_bearer_token(client):
    response = client.post("/api/access-requests", json={"contact_id": PRIVATE_CONTACT_ID})

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "unauthorized"
    assert response.headers["WWW-Authenticate"] == "Bearer"


def test_rejects_invalid_token(client):
    response = client.get("/api/access-requests/pending", headers={"Authorization": "Bearer nope"})

    assert response.status_code == 401


def test_request_then_approve_flow(client, auth, db):
    created = _request(client, auth, message="We met at the conference")
    assert created.status_code == 201
    request_id = created.json()["request_id"]

    pending = client.get("/api/access-requests/pending", headers=auth(OWNER_ID))
    assert pending.status_code == 200
    rows = pending.json()
    assert [r["request_id"] for r in rows] == [request_id]
    assert rows[0]["contact_name"] == "Ada Lovelace"
    assert rows[0]["requester_email"] == "requester@example.com"
    assert rows[0]["message"] == "We met at the conference"

    approved = client.post(f"/api/access-requests/{request_id}/approve", headers=auth(OWNER_ID))
    assert approved.status_code == 204

    assert client.get("/api/access-requests/pending", headers=auth(OWNER_ID)).json() == []
    assert db.query(VisibilityGrant).filter_by(user_id=REQUESTER_ID, contact_id=PRIVATE_CONTACT_ID).count() == 1
    assert db.query(Notification).filter_by(user_id=REQUESTER_ID, type="contact_access_approved").count() == 1

    access = client.get(f"/api/contacts/{PRIVATE_CONTACT_ID}/access", headers=auth(REQUESTER_ID))
    assert access.json() == {
        "contact_id": PRIVATE_CONTACT_ID,
        "status": "approved",
        "can_view": True,
        "can_edit": False,
    }


def test_deny_flow(client, auth, db):
    request_id = _request(client, auth).json()["request_id"]

    response = client.post(f"/api/access-requests/{request_id}/deny", headers=auth(OWNER_ID))

    assert response.status_code == 204
    assert db.query(VisibilityGrant).count() == 0
    assert db.query(Notification).filter_by(user_id=REQUESTER_ID, type="contact_access_denied").count() == 1
    access = client.get(f"/api/contacts/{PRIVATE_CONTACT_ID}/access", headers=auth(REQUESTER_ID)).json()
    assert access["status"] == "denied"
    assert access["can_view"] is False


def test_non_owner_cannot_approve(client, auth, db):
    request_id = _request(client, auth).json()["request_id"]

    response = client.post(f"/api/access-requests/{request_id}/approve", headers=auth(OTHER_USER_ID))

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "forbidden"
    assert db.query(VisibilityGrant).count() == 0


def test_already_processed(client, auth):
    request_id = _request(client, auth).json()["request_id"]
    client.post(f"/api/access-requests/{request_id}/deny", headers=auth(OWNER_ID))

    response = client.post(f"/api/access-requests/{request_id}/approve", headers=auth(OWNER_ID))

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "invalid_request"


def test_unknown_request(client, auth):
    response = client.post("/api/access-requests/31337/deny", headers=auth(OWNER_ID))

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "not_found"


@pytest.mark.parametrize(
    "user_id, contact_id, status_code, code",
    [
        (REQUESTER_ID, 4242, 404, "not_found"),
        (REQUESTER_ID, PUBLIC_CONTACT_ID, 400, "invalid_request"),
        (OWNER_ID, PRIVATE_CONTACT_ID, 400, "invalid_request"),
    ],
)
def test_request_precondition_errors(client, auth, user_id, contact_id, status_code, code):
    response = _request(client, auth, user_id=user_id, contact_id=contact_id)

    assert response.status_code == status_code
    assert response.json()["error"]["code"] == code


def test_duplicate_request_conflicts(client, auth):
    _request(client, auth)

    response = _request(client, auth)

    assert response.status_code == 409
    assert response.json()["error"]["message"] == "You already have a pending request"


def test_message_longer_than_limit(client, auth):
    response = _request(client, auth, message="x" * 501)

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "validation_error"


def test_rate_limited_response(client, auth, seeded):
    add_private_contacts(seeded, range(101, 111))
    for contact_id in range(101, 111):
        assert _request(client, auth, contact_id=contact_id).status_code == 201

    response = _request(client, auth)

    assert response.status_code == 429
    assert response.json()["error"]["code"] == "rate_limit_exceeded"
    assert response.headers["X-RateLimit-Limit"] == "10"
    assert int(response.headers["Retry-After"]) == 3600


def test_error_responses_carry_cors_headers(client, auth):
    response = client.post(
        "/api/access-requests/31337/approve",
        headers={**auth(OWNER_ID), "Origin": "http://localhost:5173"},
    )

    assert response.status_code == 404
    assert response.headers["Access-Control-Allow-Origin"] == "http://localhost:5173"
