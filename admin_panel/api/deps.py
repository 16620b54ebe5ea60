"""
API Dependencies

Resolves the caller of a request from its bearer token.

The caller is never taken from the request body. A missing, invalid or
expired token, or a token whose user no longer exists, resolves to None;
the operations turn that into a 401 after validating their arguments.
"""
from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from admin_panel.database import get_db
from admin_panel.models.user import User
from admin_panel.core.security import decode_access_token
import logging

logger = logging.getLogger(__name__)

# auto_error=False: the operations decide how an anonymous call fails
security = HTTPBearer(auto_error=False)


def get_current_user_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> Optional[User]:
    """Get current user if the bearer token is valid, None otherwise."""
    if credentials is None:
        return None

    payload = decode_access_token(credentials.credentials)
    if not payload:
        logger.debug("Rejected invalid or expired token")
        return None

    user_id = payload.get("sub")
    if not user_id:
        logger.debug("Token without subject")
        return None

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        logger.warning(f"Token subject does not exist: {user_id}")
        return None

    return user
