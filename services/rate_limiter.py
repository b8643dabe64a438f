"""
Sliding-window rate limiting over a ThrottleStore.

The decision logic lives here; the store only guarantees that the
read-decide-write for one key runs atomically with respect to other callers
using the same key.
"""

from __future__ import annotations

import base64
import time
from typing import Callable, Optional

from errors import RateLimitExceededError
from repositories.protocols import ThrottleStore
from shared.logging import get_logger, hash_ip

log = get_logger(__name__)

# Longest storage key we persist; matches the document-id budget of the store
MAX_STORAGE_KEY_LENGTH = 500


def encode_throttle_key(raw_key: str) -> str:
    """Encode *raw_key* into a storage-safe identifier (URL-safe base64)."""
    encoded = base64.urlsafe_b64encode(raw_key.encode("utf-8")).decode("ascii")
    return encoded[:MAX_STORAGE_KEY_LENGTH]


def self_serve_throttle_key(email: str, client_ip: Optional[str]) -> str:
    """Throttle key for self-serve resets: ``self:<email>:<ip or noip>``."""
    return encode_throttle_key(f"self:{email}:{client_ip or 'noip'}")


def prune_and_admit(
    hits: list[int], now_ms: int, window_ms: int, max_count: int
) -> Optional[list[int]]:
    """Drop timestamps outside the window and append *now_ms*.

    Returns the new list, or None when the window is already full.
    """
    fresh = [t for t in hits if now_ms - t < window_ms]
    if len(fresh) >= max_count:
        return None
    fresh.append(now_ms)
    return fresh


class RateLimiter:
    def __init__(
        self, store: ThrottleStore, clock: Callable[[], float] = time.time
    ) -> None:
        self._store = store
        self._clock = clock

    async def check(self, key: str, window_seconds: int, max_count: int) -> None:
        """Admit one attempt for *key* or raise RateLimitExceededError.

        Nothing is written on denial. Backend errors propagate unchanged.
        """
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        if max_count < 1:
            raise ValueError("max_count must be at least 1")

        window_ms = window_seconds * 1000

        def _mutate(hits: list[int]) -> list[int]:
            # Clock is read inside the transaction so retries see a fresh now
            now_ms = int(self._clock() * 1000)
            admitted = prune_and_admit(hits, now_ms, window_ms, max_count)
            if admitted is None:
                raise RateLimitExceededError("Too many requests, try again later.")
            return admitted

        try:
            await self._store.update_hits(key, _mutate, ttl_seconds=window_seconds)
        except RateLimitExceededError:
            log.warning(
                "rate_limit_exceeded",
                throttle_id=hash_ip(key),
                window_seconds=window_seconds,
                max_count=max_count,
            )
            raise
