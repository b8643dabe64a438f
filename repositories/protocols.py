"""Persistence protocols consumed by the service layer."""

from typing import Callable, Optional, Protocol

from schemas.models.role import RoleRecordDoc

# Receives the stored timestamps (oldest first) and returns the list to
# persist. Raising aborts the update with nothing written.
HitsMutation = Callable[[list[int]], list[int]]


class ThrottleStore(Protocol):
    async def update_hits(
        self, key: str, mutate: HitsMutation, *, ttl_seconds: int
    ) -> list[int]:
        """Apply *mutate* to the record for *key* atomically.

        Concurrent calls for the same key must behave as if run one after
        another. ``ttl_seconds`` is a hint for backends that expire keys
        natively; it is never shorter than the throttle window.
        """
        ...


class RoleStore(Protocol):
    async def find_role(self, app_id: str, user_id: str) -> Optional[RoleRecordDoc]: ...
