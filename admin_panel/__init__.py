"""
SaaS Admin Panel

Backend for the admin dashboard of a multi-tenant SaaS platform:
role-based user management with a paginated, filterable user listing
and guarded role editing.
"""

__version__ = "1.0.0"
