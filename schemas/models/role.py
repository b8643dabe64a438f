"""
Tenant role document model.

Maps to the `app-users` MongoDB collection, owned by the user-management
subsystem. This service only reads it, always filtering on both app_id and
user_id so a role granted in one tenant never applies to another.
"""

from __future__ import annotations

from typing import Optional

from schemas.models.base import MongoBaseModel

ROLE_ADMIN = "admin"


class RoleRecordDoc(MongoBaseModel):
    """Document model for the `app-users` collection."""

    app_id: str
    user_id: str
    role: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN
