"""
User Administration Operations

The operations behind the admin "Users & Roles" screen.

Every operation runs the same pipeline:
    validate args -> authenticate -> authorize -> query/mutate

Role rules enforced by update_user_role_by_id:
- at least one OWNER must remain
- only an OWNER may grant OWNER
- is_admin follows the role (True for OWNER and ADMIN)

update_is_user_admin_by_id is the older admin toggle. It collapses the
role to ADMIN or VIEWER and does NOT apply the OWNER rules above.
"""
import math
from typing import Any, List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session
from sqlalchemy.sql import func

from admin_panel.models.user import ADMIN_ROLES, User, UserRole
from admin_panel.schemas.user import (
    PAGE_SIZE,
    GetPaginatedUsersRequest,
    PaginatedUsersResponse,
    RoleSummaryResponse,
    UpdateUserAdminRequest,
    UpdateUserRoleRequest,
    UserFilter,
    UserResponse,
)
from admin_panel.core.exceptions import (
    OwnerAssignmentForbidden,
    SoleOwnerError,
    UserNotFoundError,
)
from admin_panel.core.permissions import can_assign_role, require_admin_caller
from admin_panel.core.validation import ensure_args_schema
from admin_panel.utils.logging import get_logger, log_security_event

logger = get_logger(__name__)

# Columns returned by the listing
LISTED_COLUMNS = (
    User.id,
    User.email,
    User.username,
    User.subscription_status,
    User.payment_processor_user_id,
    User.is_admin,
    User.role,
)


def build_user_filter_conditions(user_filter: UserFilter) -> List[Any]:
    """
    Translate a UserFilter into SQLAlchemy conditions, to be AND-ed.

    Subscription statuses form an OR: a null entry selects users without a
    subscription, the other entries select users whose status is in the list.
    """
    conditions: List[Any] = []

    if user_filter.email_contains:
        conditions.append(
            User.email.icontains(user_filter.email_contains, autoescape=True)
        )

    if user_filter.is_admin is not None:
        conditions.append(User.is_admin == user_filter.is_admin)

    if user_filter.role_in:
        conditions.append(User.role.in_(user_filter.role_in))

    if user_filter.subscription_status_in:
        statuses = [s for s in user_filter.subscription_status_in if s is not None]
        include_unsubscribed = len(statuses) < len(user_filter.subscription_status_in)

        status_conditions = []
        if statuses:
            status_conditions.append(User.subscription_status.in_(statuses))
        if include_unsubscribed:
            status_conditions.append(User.subscription_status.is_(None))
        conditions.append(or_(*status_conditions))

    return conditions


def get_paginated_users(db: Session, raw_args: Any, caller: Optional[Any]) -> PaginatedUsersResponse:
    """
    Return one page (10 users) of the filtered listing and the page count.

    Users are ordered by username, then id. The count and the page are read
    in the same session transaction. Only PostgreSQL, running at the
    configured REPEATABLE READ isolation level, gives both statements one
    snapshot. The sqlite3 driver does not open a transaction for plain
    reads, so on SQLite they are two independent reads.
    """
    args = ensure_args_schema(GetPaginatedUsersRequest, raw_args)
    require_admin_caller(caller)
    caller_id = getattr(caller, "id", None)

    conditions = build_user_filter_conditions(args.filter)

    total_users = db.query(func.count(User.id)).filter(*conditions).scalar() or 0
    page_of_users = (
        db.query(*LISTED_COLUMNS)
        .filter(*conditions)
        .order_by(User.username.asc(), User.id.asc())
        .offset(args.skip_pages * PAGE_SIZE)
        .limit(PAGE_SIZE)
        .all()
    )

    logger.debug(
        f"Listed {len(page_of_users)} of {total_users} users (page {args.skip_pages})",
        extra={"user_id": caller_id}
    )

    return PaginatedUsersResponse(
        users=[UserResponse.model_validate(row) for row in page_of_users],
        total_pages=math.ceil(total_users / PAGE_SIZE),
    )


def _count_owners_for_update(db: Session) -> int:
    """
    Count OWNER accounts, locking their rows until the transaction ends.

    Two concurrent demotions of different owners serialize on these locks,
    so the second one sees the first one's result.
    """
    owner_ids = (
        db.query(User.id)
        .filter(User.role == UserRole.OWNER)
        .with_for_update()
        .all()
    )
    return len(owner_ids)


def update_user_role_by_id(db: Session, raw_args: Any, caller: Optional[Any]) -> User:
    """
    Set a user's role and keep is_admin in sync.

    Checks run in a fixed order so the caller always gets the most
    fundamental error first:
    validation (400), authentication (401), admin guard (403),
    target exists (404), sole owner (400), OWNER escalation (403).
    No check that fails writes anything.
    """
    args = ensure_args_schema(UpdateUserRoleRequest, raw_args)
    require_admin_caller(caller)
    caller_id = getattr(caller, "id", None)

    target = db.query(User).filter(User.id == args.id).first()
    if not target:
        raise UserNotFoundError(args.id)

    if target.role == UserRole.OWNER and args.role != UserRole.OWNER:
        owner_count = _count_owners_for_update(db)
        if owner_count <= 1:
            log_security_event(
                "sole_owner_violation",
                {
                    "user_id": caller_id,
                    "target_user_id": target.id,
                    "requested_role": args.role.value,
                },
                logger
            )
            raise SoleOwnerError()

    if not can_assign_role(caller, args.role):
        log_security_event(
            "privilege_escalation",
            {
                "user_id": caller_id,
                "target_user_id": target.id,
                "requested_role": args.role.value,
            },
            logger
        )
        raise OwnerAssignmentForbidden()

    previous_role = target.role
    target.role = args.role
    target.is_admin = args.role in ADMIN_ROLES
    db.commit()
    db.refresh(target)

    logger.info(
        f"User role updated: {target.id} {previous_role.value} -> {target.role.value} by {caller_id}",
        extra={"user_id": caller_id, "target_user_id": target.id}
    )

    return target


def update_is_user_admin_by_id(db: Session, raw_args: Any, caller: Optional[Any]) -> User:
    """
    Legacy admin toggle: is_admin=True makes the user ADMIN, False makes
    them VIEWER.

    Unlike update_user_role_by_id this does not protect the last OWNER and
    does not check who may grant what. An OWNER or EDITOR passed through
    here loses that role.
    """
    args = ensure_args_schema(UpdateUserAdminRequest, raw_args)
    require_admin_caller(caller)
    caller_id = getattr(caller, "id", None)

    target = db.query(User).filter(User.id == args.id).first()
    if not target:
        raise UserNotFoundError(args.id)

    previous_role = target.role
    target.is_admin = args.is_admin
    target.role = UserRole.ADMIN if args.is_admin else UserRole.VIEWER
    db.commit()
    db.refresh(target)

    if previous_role == UserRole.OWNER:
        log_security_event(
            "legacy_owner_demotion",
            {
                "user_id": caller_id,
                "target_user_id": target.id,
                "current_role": target.role.value,
            },
            logger
        )

    logger.info(
        f"User admin flag set to {target.is_admin}: {target.id} by {caller_id}",
        extra={"user_id": caller_id, "target_user_id": target.id}
    )

    return target


def get_user_role_summary(db: Session, caller: Optional[Any]) -> RoleSummaryResponse:
    """Count users per role across the whole user base."""
    require_admin_caller(caller)

    counts = {role: 0 for role in UserRole}
    rows = db.query(User.role, func.count(User.id)).group_by(User.role).all()
    for role, count in rows:
        counts[role] = count

    return RoleSummaryResponse(counts=counts, total=sum(counts.values()))
