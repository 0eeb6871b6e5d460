"""Database models and session management."""

from petition_admin.models.admin_auth import AdminCredential, AdminSession

__all__ = [
    "AdminCredential",
    "AdminSession",
]
