"""Redis-backed throttle records.

Optimistic transaction per key: WATCH the key, read and mutate, then
MULTI/EXEC the write. A concurrent writer invalidates the WATCH and the
whole read-mutate-write is retried, up to ``max_attempts`` times; the last
WatchError propagates as an infrastructure error.
"""

from __future__ import annotations

import json

import redis.asyncio as aioredis
from redis.exceptions import WatchError

from repositories.protocols import HitsMutation
from schemas.models.throttle import THROTTLE_SCOPE_PASSWORD_RESETS
from shared.logging import get_logger

log = get_logger(__name__)


class RedisThrottleStore:
    def __init__(
        self,
        redis_client: aioredis.Redis,
        scope: str = THROTTLE_SCOPE_PASSWORD_RESETS,
        max_attempts: int = 10,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self._redis = redis_client
        self._scope = scope
        self._max_attempts = max_attempts

    def _key(self, key: str) -> str:
        return f"rate:{self._scope}:{key}"

    async def update_hits(
        self, key: str, mutate: HitsMutation, *, ttl_seconds: int
    ) -> list[int]:
        redis_key = self._key(key)
        async with self._redis.pipeline(transaction=True) as pipe:
            for attempt in range(1, self._max_attempts + 1):
                try:
                    await pipe.watch(redis_key)
                    raw = await pipe.get(redis_key)
                    current = json.loads(raw) if raw else []

                    updated = mutate(current)

                    pipe.multi()
                    pipe.set(redis_key, json.dumps(updated), ex=ttl_seconds)
                    await pipe.execute()
                    return updated
                except WatchError:
                    if attempt == self._max_attempts:
                        log.warning(
                            "throttle_watch_retries_exhausted",
                            scope=self._scope,
                            attempts=attempt,
                        )
                        raise
                    log.debug("throttle_watch_conflict", scope=self._scope, attempt=attempt)
