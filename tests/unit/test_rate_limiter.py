"""Unit tests for RateLimiter and throttle key helpers."""

from __future__ import annotations

import asyncio
import base64

import pytest

from errors import RateLimitExceededError
from services.rate_limiter import (
    MAX_STORAGE_KEY_LENGTH,
    RateLimiter,
    encode_throttle_key,
    prune_and_admit,
    self_serve_throttle_key,
)

WINDOW = 300
MAX = 5


# ── Key helpers ───────────────────────────────────────────────────────────────


class TestThrottleKeys:
    def test_self_serve_key_round_trips_to_raw_form(self):
        key = self_serve_throttle_key("u@x.com", "1.2.3.4")
        assert base64.urlsafe_b64decode(key).decode() == "self:u@x.com:1.2.3.4"

    def test_missing_ip_uses_placeholder(self):
        key = self_serve_throttle_key("u@x.com", None)
        assert base64.urlsafe_b64decode(key).decode() == "self:u@x.com:noip"

    def test_encoded_key_is_storage_safe(self):
        key = encode_throttle_key("self:a/b?c@d.com:::1")
        assert "/" not in key and "+" not in key

    def test_long_keys_truncated(self):
        assert len(encode_throttle_key("x" * 2000)) == MAX_STORAGE_KEY_LENGTH

    def test_deterministic(self):
        assert self_serve_throttle_key("u@x.com", "ip") == self_serve_throttle_key(
            "u@x.com", "ip"
        )


# ── prune_and_admit ───────────────────────────────────────────────────────────


class TestPruneAndAdmit:
    def test_appends_to_empty(self):
        assert prune_and_admit([], 1000, 300_000, 5) == [1000]

    def test_drops_expired_entries(self):
        hits = [0, 100_000, 250_000]
        assert prune_and_admit(hits, 350_000, 300_000, 5) == [100_000, 250_000, 350_000]

    def test_entry_exactly_window_old_is_expired(self):
        assert prune_and_admit([0], 300_000, 300_000, 1) == [300_000]

    def test_full_window_denied(self):
        assert prune_and_admit([1, 2, 3], 4, 300_000, 3) is None


# ── RateLimiter ───────────────────────────────────────────────────────────────


class TestRateLimiter:
    async def test_admits_up_to_max_then_denies(self, throttle_store, clock):
        limiter = RateLimiter(throttle_store, clock=clock)
        for _ in range(MAX):
            await limiter.check("k", WINDOW, MAX)
            clock.advance(1)

        with pytest.raises(RateLimitExceededError):
            await limiter.check("k", WINDOW, MAX)

    async def test_denial_writes_nothing(self, throttle_store, clock):
        limiter = RateLimiter(throttle_store, clock=clock)
        for _ in range(MAX):
            await limiter.check("k", WINDOW, MAX)
        before = throttle_store.snapshot("k")

        clock.advance(10)
        with pytest.raises(RateLimitExceededError):
            await limiter.check("k", WINDOW, MAX)
        assert throttle_store.snapshot("k") == before

    async def test_sixth_attempt_after_window_succeeds(self, throttle_store, clock):
        limiter = RateLimiter(throttle_store, clock=clock)
        for _ in range(MAX):
            await limiter.check("k", WINDOW, MAX)

        clock.advance(WINDOW)
        await limiter.check("k", WINDOW, MAX)
        # Old entries were pruned on the admitted write
        assert throttle_store.snapshot("k") == [int(clock.now * 1000)]

    async def test_sliding_window_frees_one_slot_at_a_time(self, throttle_store, clock):
        limiter = RateLimiter(throttle_store, clock=clock)
        await limiter.check("k", 10, 2)
        clock.advance(5)
        await limiter.check("k", 10, 2)
        clock.advance(5)  # first hit is now exactly 10s old
        await limiter.check("k", 10, 2)
        with pytest.raises(RateLimitExceededError):
            await limiter.check("k", 10, 2)

    async def test_keys_are_independent(self, throttle_store, clock):
        limiter = RateLimiter(throttle_store, clock=clock)
        await limiter.check("a", WINDOW, 1)
        await limiter.check("b", WINDOW, 1)
        with pytest.raises(RateLimitExceededError):
            await limiter.check("a", WINDOW, 1)

    async def test_concurrent_callers_never_exceed_max(self, throttle_store, clock):
        limiter = RateLimiter(throttle_store, clock=clock)

        async def attempt() -> bool:
            try:
                await limiter.check("hot", WINDOW, MAX)
                return True
            except RateLimitExceededError:
                return False

        results = await asyncio.gather(*(attempt() for _ in range(25)))
        assert sum(results) == MAX
        assert len(throttle_store.snapshot("hot")) == MAX

    @pytest.mark.parametrize(
        "window, max_count",
        [(0, 5), (-1, 5), (300, 0)],
        ids=["zero_window", "negative_window", "zero_max"],
    )
    async def test_rejects_invalid_parameters(self, throttle_store, window, max_count):
        with pytest.raises(ValueError):
            await RateLimiter(throttle_store).check("k", window, max_count)

    async def test_backend_errors_propagate(self, mocker):
        store = mocker.AsyncMock()
        store.update_hits.side_effect = ConnectionError("mongo down")
        with pytest.raises(ConnectionError):
            await RateLimiter(store).check("k", WINDOW, MAX)

    async def test_passes_window_as_ttl_hint(self, mocker):
        store = mocker.AsyncMock()
        await RateLimiter(store).check("k", WINDOW, MAX)
        _, kwargs = store.update_hits.call_args
        assert kwargs["ttl_seconds"] == WINDOW
