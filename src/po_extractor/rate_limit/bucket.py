"""Token bucket over a rolling window.

Every grant is recorded with its timestamp. A grant counts against the bucket
until ``interval`` seconds after it was made, so any rolling span of
``interval`` seconds holds at most ``capacity`` granted tokens. That matches
how the service counts its per-minute and per-day quotas.

Tokens come back only as old grants age out. Idle time never builds up more
than ``capacity``.

Requests larger than ``capacity`` are granted in instalments, at most
``capacity`` per interval, so they complete after enough intervals instead of
blocking forever.
"""

from __future__ import annotations

import asyncio
from collections import deque
from collections.abc import Awaitable, Callable
import logging
import time

log = logging.getLogger(__name__)

Clock = Callable[[], float]
Sleep = Callable[[float], Awaitable[None]]

# Float slack for token counts and window boundaries
_EPSILON = 1e-6


class TokenBucket:
    """Async token bucket. Callers suspend until their tokens are available."""

    def __init__(
        self,
        capacity: int,
        interval_seconds: float,
        *,
        name: str = "bucket",
        clock: Clock = time.monotonic,
        sleep: Sleep = asyncio.sleep,
    ):
        if capacity <= 0:
            raise ValueError("capacity must be > 0")
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be > 0")
        self.capacity = capacity
        self.interval = float(interval_seconds)
        self.name = name
        self._clock = clock
        self._sleep = sleep

        # (granted_at, amount), oldest first
        self._grants: deque[tuple[float, float]] = deque()
        self._spent = 0.0
        self.total_waited = 0.0

    @property
    def available(self) -> float:
        """Tokens grantable right now without waiting."""
        self._expire(self._clock())
        return self._room()

    def _room(self) -> float:
        return max(0.0, self.capacity - self._spent)

    def _expire(self, now: float) -> None:
        """Drop grants that have left the rolling window."""
        while self._grants and self._grants[0][0] + self.interval <= now + _EPSILON:
            _, amount = self._grants.popleft()
            self._spent -= amount
        if not self._grants:
            self._spent = 0.0

    def _take(self, now: float, count: float) -> None:
        self._grants.append((now, count))
        self._spent += count

    def try_remove_tokens(self, count: float) -> bool:
        """Remove tokens only if all of them are available now."""
        if count < 0:
            raise ValueError("count must be >= 0")
        if count > self.capacity:
            return False
        now = self._clock()
        self._expire(now)
        if count > self._room() + _EPSILON:
            return False
        if count > 0:
            self._take(now, count)
        return True

    async def remove_tokens(self, count: float) -> float:
        """Remove ``count`` tokens, waiting as long as needed.

        Args:
            count: Tokens to consume. May exceed ``capacity``.

        Returns:
            Tokens still available after the removal (never negative).
        """
        if count < 0:
            raise ValueError("count must be >= 0")

        remaining = float(count)
        while remaining > _EPSILON:
            now = self._clock()
            self._expire(now)

            room = self._room()
            if room > _EPSILON:
                grant = remaining if remaining - room <= _EPSILON else room
                self._take(now, grant)
                remaining -= grant
                continue

            # Full: wait for the oldest grant to age out
            delay = max(self._grants[0][0] + self.interval - now, 0.0)
            log.debug(
                "%s: waiting %.2fs for %.0f token(s)", self.name, delay, remaining
            )
            self.total_waited += delay
            await self._sleep(delay)

        return self._room()

    def __repr__(self) -> str:
        return (
            f"<TokenBucket {self.name} capacity={self.capacity} "
            f"interval={self.interval:g}s>"
        )
