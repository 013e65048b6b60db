"""Request-scoped access to the collaborators wired up in ``main.create_app``."""

from fastapi import Request

from contact_access.services.access_requests import AccessRequestService
from contact_access.services.decisions import AccessDecisionService


def get_session_factory(request: Request):
    return request.app.state.session_factory


def get_access_request_service(request: Request) -> AccessRequestService:
    return request.app.state.access_request_service


def get_decision_service(request: Request) -> AccessDecisionService:
    return request.app.state.decision_service
