"""Single extraction call: submit, parse, classify.

One call produces exactly one of:

- ``Success(ExtractionResult)``
- ``Failure(ThrottledFailure)``: the only kind callers should retry
- ``Failure(ParseFailure | EmptyResponse | SchemaMismatch | OtherFailure)``
"""

from __future__ import annotations

import json
import logging
import re
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from po_extractor.constants import PDF_MIME_TYPE
from po_extractor.core.schema import EXTRACTION_INSTRUCTION, ExtractionResult
from po_extractor.core.types import Failure, Result, Success
from po_extractor.exceptions import (
    EmptyResponse,
    ExtractionFailure,
    OtherFailure,
    ParseFailure,
    SchemaMismatch,
    ThrottledFailure,
)
from po_extractor.telemetry import TelemetryContext

if TYPE_CHECKING:
    from po_extractor.adapters.base import GenerationAdapter
    from po_extractor.telemetry import TelemetryContextProtocol

log = logging.getLogger(__name__)

_FENCED_BLOCK = re.compile(r"```(?:json|JSON)?\s*(.*?)\s*```", re.DOTALL)
_THROTTLE_MARKERS = ("429", "resource exhausted", "resource_exhausted", "rate limit")


def is_throttling_error(error: BaseException) -> bool:
    """True for HTTP 429 / RESOURCE_EXHAUSTED failures.

    A structured ``code`` or ``status`` decides on its own; the message text is
    only consulted for errors that carry neither.
    """
    code = getattr(error, "code", None)
    if isinstance(code, int) and not isinstance(code, bool):
        return code == 429
    status = getattr(error, "status", None)
    if status:
        return str(status).upper() == "RESOURCE_EXHAUSTED"
    text = str(error).lower()
    return any(marker in text for marker in _THROTTLE_MARKERS)


def strip_code_fences(text: str) -> str:
    """Return the JSON payload from a Markdown-fenced model reply."""
    match = _FENCED_BLOCK.search(text)
    if match:
        return match.group(1).strip()
    # Unterminated fence or none at all
    return text.replace("```json", "").replace("```", "").strip()


def first_text(response: Any) -> str | None:
    """Text of the first part of the first candidate, if any."""
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return None
    content = getattr(candidates[0], "content", None)
    parts = getattr(content, "parts", None) or []
    if not parts:
        return None
    return getattr(parts[0], "text", None)


def parse_model_text(text: str | None) -> Result[ExtractionResult, ExtractionFailure]:
    """Turn raw model text into a validated result or a classified failure."""
    if text is None:
        return Failure(EmptyResponse("Response had no candidates or parts."))

    cleaned = strip_code_fences(text)
    if not cleaned:
        return Failure(EmptyResponse("Response text was empty."))

    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        log.debug("Invalid JSON string: %s", cleaned[:500])
        return Failure(ParseFailure(f"Response was not valid JSON: {e}", cause=e))

    if data == {}:
        return Failure(EmptyResponse("Model reported an empty or unreadable document."))
    if not isinstance(data, dict):
        return Failure(
            SchemaMismatch(f"Expected a JSON object, got {type(data).__name__}.")
        )

    try:
        return Success(ExtractionResult.model_validate(data))
    except ValidationError as e:
        return Failure(SchemaMismatch(f"Schema validation failed: {e}", cause=e))


class ExtractionInvoker:
    """Performs one model call for one document."""

    def __init__(
        self,
        adapter: GenerationAdapter,
        *,
        instruction: str = EXTRACTION_INSTRUCTION,
        mime_type: str = PDF_MIME_TYPE,
        telemetry: TelemetryContextProtocol | None = None,
    ):
        self._adapter = adapter
        self.instruction = instruction
        self.mime_type = mime_type
        self._tele = telemetry or TelemetryContext()

    async def invoke(
        self, raw_bytes: bytes, *, mime_type: str | None = None
    ) -> Result[ExtractionResult, ExtractionFailure]:
        """Submit ``raw_bytes`` and classify the outcome.

        Provider errors come back as ``Failure`` values rather than raising.
        """
        with self._tele("invoker.generate", size_bytes=len(raw_bytes)):
            try:
                response = await self._adapter.generate(
                    document=raw_bytes,
                    mime_type=mime_type or self.mime_type,
                    instruction=self.instruction,
                )
            except Exception as e:
                if is_throttling_error(e):
                    self._tele.count("invoker.throttled")
                    return Failure(ThrottledFailure(str(e), cause=e))
                self._tele.count("invoker.errors")
                return Failure(OtherFailure(f"{type(e).__name__}: {e}", cause=e))

        return parse_model_text(first_text(response))
