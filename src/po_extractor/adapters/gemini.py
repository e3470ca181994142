"""Gemini adapter built on the ``google-genai`` SDK.

Works against either the Gemini Developer API (API key) or Vertex AI
(project/location, optionally a service-account key file). Inline document
bytes are base64-encoded by the SDK on the wire.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from google import genai
from google.genai import types

from po_extractor.constants import (
    MAX_OUTPUT_TOKENS,
    SAFETY_CATEGORIES,
    SAFETY_THRESHOLD,
    TEMPERATURE,
    TOP_P,
)
from po_extractor.exceptions import ConfigurationError

if TYPE_CHECKING:
    from po_extractor.config import ExtractorSettings

log = logging.getLogger(__name__)

_CLOUD_PLATFORM_SCOPE = "https://www.googleapis.com/auth/cloud-platform"


def build_generation_config(
    *,
    max_output_tokens: int = MAX_OUTPUT_TOKENS,
    temperature: float = TEMPERATURE,
    top_p: float = TOP_P,
) -> types.GenerateContentConfig:
    """Deterministic decoding with medium-and-above safety blocking."""
    return types.GenerateContentConfig(
        max_output_tokens=max_output_tokens,
        temperature=temperature,
        top_p=top_p,
        safety_settings=[
            types.SafetySetting(category=category, threshold=SAFETY_THRESHOLD)
            for category in SAFETY_CATEGORIES
        ],
    )


def build_client(settings: ExtractorSettings) -> genai.Client:
    """Create a ``genai.Client`` for the configured backend."""
    if settings.use_vertexai:
        credentials = None
        if settings.credentials_file is not None:
            from google.oauth2 import service_account

            try:
                credentials = service_account.Credentials.from_service_account_file(
                    str(settings.credentials_file), scopes=[_CLOUD_PLATFORM_SCOPE]
                )
            except (OSError, ValueError) as e:
                raise ConfigurationError(
                    f"Failed to load service account file {settings.credentials_file}: {e}"
                ) from e
        log.debug(
            "Using Vertex AI backend (project=%s, location=%s)",
            settings.project,
            settings.location,
        )
        return genai.Client(
            vertexai=True,
            project=settings.project,
            location=settings.location,
            credentials=credentials,
        )

    log.debug("Using Gemini Developer API backend")
    return genai.Client(api_key=settings.api_key)


class GoogleGenAIAdapter:
    """Sends one PDF plus the extraction instruction per call."""

    def __init__(
        self,
        client: genai.Client,
        *,
        model: str,
        config: types.GenerateContentConfig | None = None,
    ):
        self._client = client
        self.model = model
        self._config = config or build_generation_config()

    @classmethod
    def from_settings(cls, settings: ExtractorSettings) -> GoogleGenAIAdapter:
        return cls(
            build_client(settings),
            model=settings.model,
            config=build_generation_config(
                max_output_tokens=settings.max_output_tokens,
                temperature=settings.temperature,
                top_p=settings.top_p,
            ),
        )

    def build_contents(
        self, *, document: bytes, mime_type: str, instruction: str
    ) -> list[types.Content]:
        return [
            types.Content(
                role="user",
                parts=[
                    types.Part.from_bytes(data=document, mime_type=mime_type),
                    types.Part.from_text(text=instruction),
                ],
            )
        ]

    async def generate(
        self,
        *,
        document: bytes,
        mime_type: str,
        instruction: str,
    ) -> Any:
        contents = self.build_contents(
            document=document, mime_type=mime_type, instruction=instruction
        )
        return await self._client.aio.models.generate_content(
            model=self.model,
            contents=contents,
            config=self._config,
        )

    def __repr__(self) -> str:
        return f"<GoogleGenAIAdapter model={self.model!r}>"
