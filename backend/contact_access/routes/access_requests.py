from fastapi import APIRouter, Depends, Response, status
from typing import List
from contact_access.core.auth import get_current_user_id
from contact_access.core.dependencies import (
    get_access_request_service,
    get_decision_service,
    get_session_factory,
)
from contact_access.db.uow import run_in_transaction
from contact_access.schemas.access_request import (
    AccessRequestCreate,
    AccessRequestCreated,
    PendingAccessRequestResponse,
)
from contact_access.schemas.error import ErrorResponse
from contact_access.services.access_requests import AccessRequestService
from contact_access.services.decisions import AccessDecisionService
from contact_access.services.pending import list_pending_access

router = APIRouter()

_DECISION_ERRORS = {
    400: {"model": ErrorResponse, "description": "Request already processed"},
    403: {"model": ErrorResponse, "description": "Only the contact owner may decide"},
    404: {"model": ErrorResponse, "description": "Request not found"},
}

@router.post(
    "",
    response_model=AccessRequestCreated,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Contact not private or owned by requester"},
        404: {"model": ErrorResponse, "description": "Contact not found"},
        409: {"model": ErrorResponse, "description": "Pending or approved request exists"},
        429: {"model": ErrorResponse, "description": "Too many requests this hour"},
    },
)
async def request_access(
    payload: AccessRequestCreate,
    current_user_id: int = Depends(get_current_user_id),
    service: AccessRequestService = Depends(get_access_request_service),
):
    """
    Ask the owner of a private contact for visibility
    """
    request_id = service.request_access(current_user_id, payload.contact_id, payload.message)
    return {"request_id": request_id}

@router.post("/{request_id}/approve", status_code=status.HTTP_204_NO_CONTENT, responses=_DECISION_ERRORS)
async def approve_access(
    request_id: int,
    current_user_id: int = Depends(get_current_user_id),
    service: AccessDecisionService = Depends(get_decision_service),
):
    """
    Approve a pending request (contact owner only)
    """
    service.approve(request_id, current_user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.post("/{request_id}/deny", status_code=status.HTTP_204_NO_CONTENT, responses=_DECISION_ERRORS)
async def deny_access(
    request_id: int,
    current_user_id: int = Depends(get_current_user_id),
    service: AccessDecisionService = Depends(get_decision_service),
):
    """
    Deny a pending request (contact owner only)
    """
    service.deny(request_id, current_user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.get("/pending", response_model=List[PendingAccessRequestResponse])
async def get_pending_access_requests(
    current_user_id: int = Depends(get_current_user_id),
    session_factory=Depends(get_session_factory),
):
    """
    Get pending access requests for contacts owned by the current user
    """
    return run_in_transaction(session_factory, lambda session: list_pending_access(session, current_user_id))
