"""
User Schemas

Request/response models for the user administration operations.
"""
from pydantic import BaseModel, Field, StrictBool, StrictInt
from typing import Dict, List, Optional
from admin_panel.models.subscription import SubscriptionStatus
from admin_panel.models.user import UserRole

# Fixed listing page size
PAGE_SIZE = 10

# Largest page whose row offset still fits a signed 64-bit integer
MAX_SKIP_PAGES = (2 ** 63 - 1) // PAGE_SIZE


class UserFilter(BaseModel):
    """
    Listing filters. Every given dimension must match (AND).

    subscription_status_in may contain null, meaning "no subscription".
    Empty lists do not restrict anything.
    """
    email_contains: Optional[str] = Field(None, min_length=1)
    is_admin: Optional[StrictBool] = None
    role_in: Optional[List[UserRole]] = None
    subscription_status_in: Optional[List[Optional[SubscriptionStatus]]] = None


class GetPaginatedUsersRequest(BaseModel):
    """Arguments of get_paginated_users. Pages are 0-indexed."""
    skip_pages: StrictInt = Field(..., ge=0, le=MAX_SKIP_PAGES)
    filter: UserFilter = Field(default_factory=UserFilter)

    class Config:
        json_schema_extra = {
            "example": {
                "skip_pages": 0,
                "filter": {
                    "email_contains": "acme",
                    "role_in": ["ADMIN", "EDITOR"],
                    "subscription_status_in": [None, "active"]
                }
            }
        }


class UpdateUserRoleRequest(BaseModel):
    """Arguments of update_user_role_by_id."""
    id: str = Field(..., min_length=1)
    role: UserRole


class UpdateUserAdminRequest(BaseModel):
    """Arguments of the legacy update_is_user_admin_by_id."""
    id: str = Field(..., min_length=1)
    is_admin: StrictBool


class RoleUpdateBody(BaseModel):
    """PATCH /users/{user_id}/role body."""
    role: UserRole


class AdminFlagUpdateBody(BaseModel):
    """PATCH /users/{user_id}/admin body."""
    is_admin: StrictBool


class UserResponse(BaseModel):
    """User row as shown in the admin users table."""
    id: str
    email: str
    username: str
    subscription_status: Optional[SubscriptionStatus] = None
    payment_processor_user_id: Optional[str] = None
    is_admin: bool
    role: UserRole

    class Config:
        from_attributes = True  # Allows creating from ORM models and rows


class PaginatedUsersResponse(BaseModel):
    """One page of users plus the page count for the same filter."""
    users: List[UserResponse]
    total_pages: int


class RoleSummaryResponse(BaseModel):
    """Number of users per role. Every role is present."""
    counts: Dict[UserRole, int]
    total: int
