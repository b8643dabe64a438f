"""Admin authorization for a tenant.

Two ordered checks, first match wins:

1. the caller's verified token carries ``admin: true`` (no lookup);
2. otherwise the tenant's role record for the caller says ``role == "admin"``.

Lookup failures propagate; an outage must never read as "not admin".
"""

from __future__ import annotations

from repositories.protocols import RoleStore
from schemas.models.caller import CallerIdentity
from shared.logging import get_logger

log = get_logger(__name__)


class AuthorizationGate:
    def __init__(self, roles: RoleStore) -> None:
        self._roles = roles

    async def is_admin(self, caller: CallerIdentity, app_id: str) -> bool:
        if not caller.is_authenticated:
            return False

        if caller.has_admin_claim:
            return True

        record = await self._roles.find_role(app_id, caller.uid)
        is_admin = record is not None and record.is_admin
        log.debug(
            "admin_role_lookup",
            app_id=app_id,
            caller_uid=caller.uid,
            found=record is not None,
            is_admin=is_admin,
        )
        return is_admin
