"""Deterministic adapter used for dry runs and tests (no network)."""

from __future__ import annotations

import json
from typing import Any

from google.genai import types


def make_text_response(text: str) -> types.GenerateContentResponse:
    """Wrap ``text`` in a single-candidate SDK response."""
    return types.GenerateContentResponse(
        candidates=[
            types.Candidate(
                content=types.Content(role="model", parts=[types.Part(text=text)])
            )
        ]
    )


class MockAdapter:
    """Answers every document with an empty, schema-valid extraction.

    The reply is fenced the way Gemini usually fences JSON so the full parsing
    path runs. ``calls`` records the size of every document submitted.
    """

    def __init__(self) -> None:
        self.calls: list[int] = []

    async def generate(
        self,
        *,
        document: bytes,
        mime_type: str,  # noqa: ARG002
        instruction: str,  # noqa: ARG002
    ) -> Any:
        self.calls.append(len(document))
        payload = {"seller_name": None, "materials": [], "confidence": "mock"}
        return make_text_response(f"```json\n{json.dumps(payload)}\n```")
