"""In-process throttle records guarded by a single asyncio.Lock.

Only correct when a single long-lived process serves every request for a
key; multi-worker deployments must use the Mongo or Redis store.
"""

from __future__ import annotations

import asyncio

from repositories.protocols import HitsMutation


class InMemoryThrottleStore:
    def __init__(self) -> None:
        self._records: dict[str, list[int]] = {}
        # mutations are synchronous, so one lock never waits on I/O
        self._lock = asyncio.Lock()

    async def update_hits(
        self, key: str, mutate: HitsMutation, *, ttl_seconds: int
    ) -> list[int]:
        async with self._lock:
            updated = mutate(list(self._records.get(key, [])))
            self._records[key] = updated
            return list(updated)

    def snapshot(self, key: str) -> list[int]:
        """Return a copy of the stored timestamps for *key*."""
        return list(self._records.get(key, []))
