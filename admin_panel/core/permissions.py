"""
Permission System (RBAC)

Role checks for the admin panel.

OWNER and ADMIN are administrative. Callers may also carry a legacy
is_admin flag, which on its own is enough to pass the admin guard.
Granting OWNER is reserved for OWNER callers.
"""
from typing import Any, Optional

from admin_panel.models.user import ADMIN_ROLES, UserRole
from admin_panel.core.exceptions import AuthenticationError, PermissionDenied
from admin_panel.utils.logging import get_logger, log_security_event

logger = get_logger(__name__)


def is_admin_user(caller: Optional[Any]) -> bool:
    """
    Check whether caller may use the admin operations.

    caller is any record with optional is_admin and role attributes
    (normally the User loaded from the session). Never raises.
    """
    if caller is None:
        return False
    if getattr(caller, "is_admin", None):
        return True
    role = getattr(caller, "role", None)
    return role in ADMIN_ROLES if role else False


def require_admin_caller(caller: Optional[Any]) -> Any:
    """
    Authentication then authorization, in that order.

    Raises AuthenticationError for a missing caller and PermissionDenied
    when the admin guard fails. Returns the caller otherwise.
    """
    if caller is None:
        raise AuthenticationError()

    if not is_admin_user(caller):
        log_security_event(
            "authorization_denied",
            {"user_id": getattr(caller, "id", None)},
            logger
        )
        raise PermissionDenied()

    return caller


def can_assign_role(caller: Any, role: UserRole) -> bool:
    """Only an OWNER caller may hand out OWNER. Any admin may assign the rest."""
    if role == UserRole.OWNER:
        return getattr(caller, "role", None) == UserRole.OWNER
    return True
