"""Admission gate composing the request, daily and token budgets"""  # noqa: D415

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import logging
import time
from typing import TYPE_CHECKING

from po_extractor.constants import (
    DAY,
    MINUTE,
    REQUESTS_PER_DAY,
    REQUESTS_PER_MINUTE,
    TOKENS_PER_MINUTE,
)
from po_extractor.rate_limit.bucket import TokenBucket
from po_extractor.telemetry import TelemetryContext

if TYPE_CHECKING:
    from po_extractor.rate_limit.bucket import Clock, Sleep
    from po_extractor.telemetry import TelemetryContextProtocol

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RateBudget:
    """Rate limiting parameters for the extraction service"""  # noqa: D415

    requests_per_minute: int = REQUESTS_PER_MINUTE
    tokens_per_minute: int = TOKENS_PER_MINUTE
    requests_per_day: int = REQUESTS_PER_DAY

    def __post_init__(self) -> None:
        for name in ("requests_per_minute", "tokens_per_minute", "requests_per_day"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be > 0")


@dataclass(frozen=True, slots=True)
class Admission:
    """Record of one call passing the gate."""

    estimated_tokens: int
    waited_seconds: float


class RateGate:
    """Holds every call until the request, daily and token budgets allow it.

    Buckets are checked in a fixed order: requests per minute, requests per
    day, then tokens per minute. A call held back by request volume is not
    charged tokens until the volume gates have cleared.
    """

    def __init__(
        self,
        requests_per_minute: TokenBucket,
        requests_per_day: TokenBucket,
        tokens_per_minute: TokenBucket,
        telemetry: TelemetryContextProtocol | None = None,
    ):
        self._requests_per_minute = requests_per_minute
        self._requests_per_day = requests_per_day
        self._tokens_per_minute = tokens_per_minute
        self._tele = telemetry or TelemetryContext()

    @classmethod
    def from_budget(
        cls,
        budget: RateBudget | None = None,
        *,
        clock: Clock = time.monotonic,
        sleep: Sleep = asyncio.sleep,
        telemetry: TelemetryContextProtocol | None = None,
    ) -> RateGate:
        """Build a gate with three fresh buckets sharing one clock."""
        budget = budget or RateBudget()
        return cls(
            requests_per_minute=TokenBucket(
                budget.requests_per_minute,
                MINUTE,
                name="requests_per_minute",
                clock=clock,
                sleep=sleep,
            ),
            requests_per_day=TokenBucket(
                budget.requests_per_day,
                DAY,
                name="requests_per_day",
                clock=clock,
                sleep=sleep,
            ),
            tokens_per_minute=TokenBucket(
                budget.tokens_per_minute,
                MINUTE,
                name="tokens_per_minute",
                clock=clock,
                sleep=sleep,
            ),
            telemetry=telemetry,
        )

    @property
    def buckets(self) -> tuple[TokenBucket, TokenBucket, TokenBucket]:
        """Buckets in admission order."""
        return (
            self._requests_per_minute,
            self._requests_per_day,
            self._tokens_per_minute,
        )

    async def admit(self, estimated_tokens: int) -> Admission:
        """Wait until one call costing ``estimated_tokens`` may proceed."""
        if estimated_tokens < 0:
            raise ValueError("estimated_tokens must be >= 0")

        waited_before = sum(b.total_waited for b in self.buckets)
        with self._tele("gate.admit", estimated_tokens=estimated_tokens):
            await self._requests_per_minute.remove_tokens(1)
            await self._requests_per_day.remove_tokens(1)
            await self._tokens_per_minute.remove_tokens(estimated_tokens)

            waited = sum(b.total_waited for b in self.buckets) - waited_before
            self._tele.gauge("gate.waited_seconds", waited)

        if waited > 0:
            log.info(
                "Rate gate held request for %.2fs (%d estimated tokens)",
                waited,
                estimated_tokens,
            )
        return Admission(estimated_tokens=estimated_tokens, waited_seconds=waited)
