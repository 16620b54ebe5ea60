"""
Custom Exceptions

Centralized exception definitions for better error handling.
Each error carries a stable status code and an error_type string;
main.py renders them as {"detail": ..., "type": ...}.
"""
from fastapi import HTTPException, status


class AdminPanelError(HTTPException):
    """Base class for errors surfaced to API callers as-is."""

    error_type = "error"


class InvalidInputError(AdminPanelError):
    """Raised when operation arguments fail schema validation."""

    error_type = "validation_error"

    def __init__(self, detail: str = "Invalid input"):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail
        )


class AuthenticationError(AdminPanelError):
    """Raised when no verified caller is attached to the request."""

    error_type = "authentication_error"

    def __init__(self, detail: str = "Only authenticated users are allowed to perform this operation"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class PermissionDenied(AdminPanelError):
    """Raised when the caller lacks the privilege for an operation."""

    error_type = "authorization_error"

    def __init__(self, detail: str = "Only admins are allowed to perform this operation"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail
        )


class OwnerAssignmentForbidden(PermissionDenied):
    """Raised when a non-OWNER caller tries to grant the OWNER role."""

    def __init__(self):
        super().__init__(detail="Only OWNER users can assign OWNER role.")


class UserNotFoundError(AdminPanelError):
    """Raised when user cannot be found."""

    error_type = "not_found"

    def __init__(self, user_id: str = ""):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User not found: {user_id}" if user_id else "User not found"
        )


class BusinessRuleViolation(AdminPanelError):
    """Raised when a well-formed, authorized request breaks a domain rule."""

    error_type = "business_rule_violation"

    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail
        )


class SoleOwnerError(BusinessRuleViolation):
    """Raised when a role change would leave no OWNER account."""

    def __init__(self):
        super().__init__(detail="At least one OWNER account must remain.")
