from contact_access.models.user import User
from contact_access.models.contact import Contact
from contact_access.models.access_request import AccessRequest
from contact_access.models.visibility_grant import VisibilityGrant
from contact_access.models.notification import Notification
from contact_access.models.authorized_user import AuthorizedUser

__all__ = [
    "User",
    "Contact",
    "AccessRequest",
    "VisibilityGrant",
    "Notification",
    "AuthorizedUser",
]
