from fastapi import APIRouter, Depends
from contact_access.core.auth import get_current_user_id
from contact_access.core.dependencies import get_session_factory
from contact_access.db.uow import run_in_transaction
from contact_access.schemas.access_request import ContactAccessResponse
from contact_access.services.access_control import (
    can_edit_contact,
    can_view_contact,
    get_contact_access_status,
)

router = APIRouter()

@router.get("/{contact_id}/access", response_model=ContactAccessResponse)
async def get_contact_access(
    contact_id: int,
    current_user_id: int = Depends(get_current_user_id),
    session_factory=Depends(get_session_factory),
):
    """
    Describe the current user's access to a contact
    """
    def read(session):
        return {
            "contact_id": contact_id,
            "status": get_contact_access_status(session, current_user_id, contact_id),
            "can_view": can_view_contact(session, current_user_id, contact_id),
            "can_edit": can_edit_contact(session, current_user_id, contact_id),
        }

    return run_in_transaction(session_factory, read)
