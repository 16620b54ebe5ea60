"""
Database Models
"""
from admin_panel.models.subscription import SubscriptionStatus
from admin_panel.models.user import ADMIN_ROLES, User, UserRole

__all__ = ["ADMIN_ROLES", "SubscriptionStatus", "User", "UserRole"]
