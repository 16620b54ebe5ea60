"""
User Model

Rows are created and removed by the identity subsystem. The admin panel
reads them and only ever writes role and is_admin.

IMPORTANT: is_admin is a denormalized copy of the role. It must be True
exactly when role is OWNER or ADMIN. Write both fields together.
"""
from sqlalchemy import Column, String, Boolean, DateTime, Index, Enum as SQLEnum
from datetime import datetime
from admin_panel.database import Base
from admin_panel.models.subscription import SubscriptionStatus
import uuid
import enum


class UserRole(str, enum.Enum):
    """
    User roles for RBAC.

    OWNER: Administrative, and the only role that may grant OWNER.
           At least one OWNER must always exist.
    ADMIN: Administrative, can manage users and roles
    EDITOR: Can create and edit content
    VIEWER: Read-only access
    """
    OWNER = "OWNER"
    ADMIN = "ADMIN"
    EDITOR = "EDITOR"
    VIEWER = "VIEWER"


# Roles that count as administrative for the admin guard and for is_admin
ADMIN_ROLES = frozenset({UserRole.OWNER, UserRole.ADMIN})


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    email = Column(String(255), nullable=False, index=True)
    username = Column(String(255), nullable=False, unique=True)

    role = Column(
        SQLEnum(UserRole, name="user_role"),
        default=UserRole.VIEWER,
        nullable=False,
        index=True
    )
    # Kept in sync with role (see module docstring)
    is_admin = Column(Boolean, default=False, nullable=False, index=True)

    # Billing, owned by the payment integration
    subscription_status = Column(
        SQLEnum(
            SubscriptionStatus,
            name="subscription_status",
            values_callable=lambda statuses: [s.value for s in statuses],
        ),
        nullable=True,
        index=True
    )
    payment_processor_user_id = Column(String(255), nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        # Listing sorts by username with id as the tie-break
        Index('idx_user_username_id', 'username', 'id'),
    )

    def __repr__(self):
        return f"<User {self.username} ({self.role.value if self.role else None})>"

    @property
    def has_admin_role(self) -> bool:
        """Whether the role itself is administrative, ignoring is_admin."""
        return self.role in ADMIN_ROLES
