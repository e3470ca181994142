"""Rate-limited extraction with throttle recovery.

Each attempt goes through the full gate before the model call. Only
throttling (HTTP 429) is retried: after a cooldown the same document is
re-admitted from the start. Every other failure ends the file's processing
immediately.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from po_extractor.constants import (
    THROTTLE_BACKOFF_FACTOR,
    THROTTLE_COOLDOWN,
    THROTTLE_MAX_ATTEMPTS,
    THROTTLE_MAX_COOLDOWN,
)
from po_extractor.core.types import ExtractionRequest, FileOutcome, Success
from po_extractor.exceptions import RetryExhaustedError, ThrottledFailure
from po_extractor.sources import LocalDirectorySource
from po_extractor.telemetry import TelemetryContext
from po_extractor.tokens import TokenEstimator

if TYPE_CHECKING:
    from po_extractor.core.schema import ExtractionResult
    from po_extractor.pipeline.invoker import ExtractionInvoker
    from po_extractor.rate_limit.bucket import Sleep
    from po_extractor.rate_limit.gate import RateGate
    from po_extractor.sources import DocumentSource
    from po_extractor.telemetry import TelemetryContextProtocol

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ThrottleRetryPolicy:
    """How long to back off after throttling, and how often to try.

    Attempt ``n`` (1-based) that is throttled waits
    ``min(cooldown * backoff_factor ** (n - 1), max_cooldown)`` seconds, so the
    first retry always waits exactly ``cooldown_seconds``. ``max_attempts=None``
    retries forever.
    """

    cooldown_seconds: float = THROTTLE_COOLDOWN
    backoff_factor: float = THROTTLE_BACKOFF_FACTOR
    max_cooldown_seconds: float = THROTTLE_MAX_COOLDOWN
    max_attempts: int | None = THROTTLE_MAX_ATTEMPTS

    def __post_init__(self) -> None:
        if self.cooldown_seconds < 0:
            raise ValueError("cooldown_seconds must be >= 0")
        if self.backoff_factor < 1:
            raise ValueError("backoff_factor must be >= 1")
        if self.max_cooldown_seconds < self.cooldown_seconds:
            raise ValueError("max_cooldown_seconds must be >= cooldown_seconds")
        if self.max_attempts is not None and self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1 or None")

    @classmethod
    def unbounded(
        cls, cooldown_seconds: float = THROTTLE_COOLDOWN
    ) -> ThrottleRetryPolicy:
        """Fixed cooldown, no ceiling."""
        return cls(
            cooldown_seconds=cooldown_seconds,
            backoff_factor=1.0,
            max_cooldown_seconds=cooldown_seconds,
            max_attempts=None,
        )

    def cooldown_after(self, attempt: int) -> float:
        return min(
            self.cooldown_seconds * self.backoff_factor ** (attempt - 1),
            self.max_cooldown_seconds,
        )

    def allows_retry(self, attempt: int) -> bool:
        return self.max_attempts is None or attempt < self.max_attempts


class RetryingExtractor:
    """Reads, estimates, admits and invokes, retrying on throttling."""

    def __init__(
        self,
        gate: RateGate,
        invoker: ExtractionInvoker,
        *,
        estimator: TokenEstimator | None = None,
        source: DocumentSource | None = None,
        policy: ThrottleRetryPolicy | None = None,
        sleep: Sleep = asyncio.sleep,
        telemetry: TelemetryContextProtocol | None = None,
    ):
        self._gate = gate
        self._invoker = invoker
        self._estimator = estimator or TokenEstimator()
        self._source = source or LocalDirectorySource()
        self.policy = policy or ThrottleRetryPolicy()
        self._sleep = sleep
        self._tele = telemetry or TelemetryContext()

    async def extract(self, file_path: Path) -> ExtractionResult | None:
        """Result for ``file_path``, or None when extraction failed."""
        outcome = await self.extract_outcome(file_path)
        return outcome.result

    async def extract_outcome(self, file_path: Path) -> FileOutcome:
        """Extract one file and report how it went.

        Raises:
            OSError: When the file cannot be read. Read errors are not retried.
        """
        file_path = Path(file_path)
        request = ExtractionRequest(
            file_path=file_path, raw_bytes=await self._source.read_file(file_path)
        )
        estimated = self._estimator.estimate(request.size_bytes)
        log.debug(
            "Read %s (%d bytes, ~%d tokens)", file_path, request.size_bytes, estimated
        )

        attempt = 0
        while True:
            attempt += 1
            with self._tele("extractor.attempt", attempt=attempt):
                await self._gate.admit(estimated)
                result = await self._invoker.invoke(
                    request.raw_bytes, mime_type=request.mime_type
                )

            if isinstance(result, Success):
                log.info("Extracted %s", file_path)
                return FileOutcome(
                    file_path=file_path, result=result.value, attempts=attempt
                )

            error = result.error
            if not isinstance(error, ThrottledFailure):
                log.error(
                    "Extraction failed for %s (%s): %s",
                    file_path,
                    error.kind.value,
                    error.detail,
                )
                return FileOutcome(
                    file_path=file_path,
                    failure_kind=error.kind,
                    detail=error.detail,
                    attempts=attempt,
                )

            if not self.policy.allows_retry(attempt):
                exhausted = RetryExhaustedError(
                    f"Still throttled after {attempt} attempt(s): {error.detail}",
                    attempts=attempt,
                    cause=error,
                )
                log.error("Giving up on %s: %s", file_path, exhausted.detail)
                return FileOutcome(
                    file_path=file_path,
                    failure_kind=exhausted.kind,
                    detail=exhausted.detail,
                    attempts=attempt,
                )

            cooldown = self.policy.cooldown_after(attempt)
            log.warning(
                "Throttled on %s. Retrying in %.0fs (attempt %d/%s)",
                file_path,
                cooldown,
                attempt + 1,
                self.policy.max_attempts or "unbounded",
            )
            self._tele.count("extractor.throttle_retries")
            await self._sleep(cooldown)
