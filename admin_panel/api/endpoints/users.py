"""
User Management Endpoints

HTTP surface of the admin users screen. All endpoints require an admin
caller (OWNER, ADMIN, or the legacy is_admin flag).

- POST  /users/search          paginated, filtered listing
- GET   /users/role-summary    user count per role
- PATCH /users/{user_id}/role  strict role change
- PATCH /users/{user_id}/admin legacy admin toggle
"""
from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from admin_panel.database import get_db
from admin_panel.models.user import User
from admin_panel.schemas.user import (
    AdminFlagUpdateBody,
    GetPaginatedUsersRequest,
    PaginatedUsersResponse,
    RoleSummaryResponse,
    RoleUpdateBody,
    UserResponse,
)
from admin_panel.api.deps import get_current_user_optional
from admin_panel.services import users as user_service

router = APIRouter(prefix="/users", tags=["users"])


@router.post("/search", response_model=PaginatedUsersResponse)
def search_users(
    search: GetPaginatedUsersRequest,
    current_user: Optional[User] = Depends(get_current_user_optional),
    db: Session = Depends(get_db)
):
    """List users, 10 per page, sorted by username."""
    return user_service.get_paginated_users(db, search, current_user)


@router.get("/role-summary", response_model=RoleSummaryResponse)
def role_summary(
    current_user: Optional[User] = Depends(get_current_user_optional),
    db: Session = Depends(get_db)
):
    """Count users per role."""
    return user_service.get_user_role_summary(db, current_user)


@router.patch("/{user_id}/role", response_model=UserResponse)
def update_user_role(
    user_id: str,
    body: RoleUpdateBody,
    current_user: Optional[User] = Depends(get_current_user_optional),
    db: Session = Depends(get_db)
):
    """
    Change a user's role.

    Fails with 400 when it would demote the last OWNER and with 403 when a
    non-OWNER tries to grant OWNER.
    """
    return user_service.update_user_role_by_id(
        db, {"id": user_id, "role": body.role}, current_user
    )


@router.patch("/{user_id}/admin", response_model=UserResponse)
def update_user_admin_flag(
    user_id: str,
    body: AdminFlagUpdateBody,
    current_user: Optional[User] = Depends(get_current_user_optional),
    db: Session = Depends(get_db)
):
    """
    Legacy admin toggle. Sets the role to ADMIN or VIEWER.

    Prefer PATCH /users/{user_id}/role, which protects OWNER accounts.
    """
    return user_service.update_is_user_admin_by_id(
        db, {"id": user_id, "is_admin": body.is_admin}, current_user
    )
