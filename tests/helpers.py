"""Shared test doubles: a virtual clock and scripted model adapters."""

import json
from typing import Any

from po_extractor.adapters.mock import make_text_response


class FakeClock:
    """Monotonic clock advanced only by ``sleep``.

    Passing ``clock`` and ``sleep`` into buckets and extractors lets tests wait
    virtual minutes without real delays. Every sleep is recorded.
    """

    def __init__(self, start: float = 1000.0):
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds

    def advance(self, seconds: float) -> None:
        self.now += seconds

    @property
    def total_slept(self) -> float:
        return sum(self.sleeps)


class ThrottleError(Exception):
    """Looks like a google-genai APIError for HTTP 429."""

    def __init__(self, message: str = "Resource has been exhausted"):
        super().__init__(message)
        self.code = 429
        self.status = "RESOURCE_EXHAUSTED"


def po_reply(
    seller: str | None = "Acme Supplies",
    materials: list[dict[str, Any]] | None = None,
    confidence: str | None = "high",
    *,
    fenced: bool = True,
) -> Any:
    """SDK response carrying a purchase-order extraction."""
    payload = {
        "seller_name": seller,
        "materials": materials
        if materials is not None
        else [{"description": "Steel bolts M8", "cost": "12.50"}],
        "confidence": confidence,
    }
    text = json.dumps(payload)
    return make_text_response(f"```json\n{text}\n```" if fenced else text)


class ScriptedAdapter:
    """Replays a script of responses; exceptions in the script are raised.

    A callable entry is called with the submitted document and its return
    value used, so per-file behaviour can be scripted by content.
    """

    def __init__(self, *script: Any):
        self._script = list(script)
        self.documents: list[bytes] = []
        self.times: list[float] = []
        self.clock: FakeClock | None = None

    async def generate(self, *, document: bytes, mime_type: str, instruction: str):
        self.documents.append(document)
        if self.clock is not None:
            self.times.append(self.clock())
        if not self._script:
            raise AssertionError("ScriptedAdapter ran out of responses")
        entry = self._script.pop(0)
        if callable(entry) and not isinstance(entry, type):
            entry = entry(document)
        if isinstance(entry, BaseException):
            raise entry
        return entry

    @property
    def call_count(self) -> int:
        return len(self.documents)
