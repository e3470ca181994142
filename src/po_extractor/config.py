"""Configuration schema and validation using Pydantic.

Settings come from ``PO_EXTRACT_*`` environment variables, an optional ``.env``
file, and programmatic overrides, in increasing order of precedence. A few
historical variable names (``PURCHASE_ORDERS_FOLDER``,
``SERVICE_ACCOUNT_CONFIG_PATH``, ``GEMINI_API_KEY``) are accepted as aliases.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import AliasChoices, Field, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from po_extractor.constants import (
    BYTES_PER_TOKEN,
    DEFAULT_LOCATION,
    DEFAULT_MODEL,
    MAX_OUTPUT_TOKENS,
    REQUESTS_PER_DAY,
    REQUESTS_PER_MINUTE,
    TEMPERATURE,
    THROTTLE_BACKOFF_FACTOR,
    THROTTLE_COOLDOWN,
    THROTTLE_MAX_ATTEMPTS,
    THROTTLE_MAX_COOLDOWN,
    TOKENS_PER_MINUTE,
    TOP_P,
)
from po_extractor.exceptions import ConfigurationError
from po_extractor.pipeline.extractor import ThrottleRetryPolicy
from po_extractor.rate_limit.gate import RateBudget

_PREFIX = "PO_EXTRACT_"


def _env(name: str, *aliases: str) -> AliasChoices:
    return AliasChoices(f"{_PREFIX}{name.upper()}", *aliases)


class ExtractorSettings(BaseSettings):
    """Pydantic settings schema for the extractor."""

    model_config = SettingsConfigDict(
        env_prefix=_PREFIX,
        env_file=None,  # Only used when explicitly requested
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # --- Input ---

    purchase_orders_folder: Path | None = Field(
        default=None,
        validation_alias=_env("purchase_orders_folder", "PURCHASE_ORDERS_FOLDER"),
        description="Directory of documents to process",
    )

    # --- Provider ---

    use_real_api: bool = Field(
        default=False,
        description="Call Gemini instead of the offline mock adapter",
    )
    api_key: str | None = Field(
        default=None,
        validation_alias=_env("api_key", "GEMINI_API_KEY"),
        description="Gemini Developer API key",
    )
    use_vertexai: bool = Field(default=False, description="Use Vertex AI backend")
    project: str | None = Field(default=None, description="Google Cloud project ID")
    location: str = Field(default=DEFAULT_LOCATION, min_length=1)
    credentials_file: Path | None = Field(
        default=None,
        validation_alias=_env("credentials_file", "SERVICE_ACCOUNT_CONFIG_PATH"),
        description="Service account key file for Vertex AI",
    )
    model: str = Field(default=DEFAULT_MODEL, min_length=1)

    # --- Generation ---

    max_output_tokens: int = Field(default=MAX_OUTPUT_TOKENS, ge=1)
    temperature: float = Field(default=TEMPERATURE, ge=0.0, le=2.0)
    top_p: float = Field(default=TOP_P, ge=0.0, le=1.0)

    # --- Rate budget ---

    requests_per_minute: int = Field(default=REQUESTS_PER_MINUTE, ge=1)
    tokens_per_minute: int = Field(default=TOKENS_PER_MINUTE, ge=1)
    requests_per_day: int = Field(default=REQUESTS_PER_DAY, ge=1)
    bytes_per_token: float = Field(default=BYTES_PER_TOKEN, gt=0)

    # --- Throttle retry ---

    throttle_cooldown_seconds: float = Field(default=THROTTLE_COOLDOWN, ge=0)
    throttle_backoff_factor: float = Field(default=THROTTLE_BACKOFF_FACTOR, ge=1)
    throttle_max_cooldown_seconds: float = Field(default=THROTTLE_MAX_COOLDOWN, ge=0)
    max_throttle_attempts: int | None = Field(
        default=THROTTLE_MAX_ATTEMPTS,
        ge=1,
        description="Attempts per file while throttled; None retries forever",
    )

    # --- Validation Rules ---

    @model_validator(mode="after")
    def validate_provider_requirements(self) -> ExtractorSettings:
        """Real calls need either an API key or a Vertex AI project."""
        if self.use_real_api:
            if self.use_vertexai and not self.project:
                raise ValueError(
                    "project is required when use_vertexai=True. "
                    "Set PO_EXTRACT_PROJECT or pass it programmatically."
                )
            if not self.use_vertexai and not self.api_key:
                raise ValueError(
                    "api_key is required when use_real_api=True. "
                    "Set PO_EXTRACT_API_KEY or GEMINI_API_KEY, or use Vertex AI."
                )
        if self.throttle_max_cooldown_seconds < self.throttle_cooldown_seconds:
            raise ValueError(
                "throttle_max_cooldown_seconds must be >= throttle_cooldown_seconds"
            )
        return self

    # --- Derived policy objects ---

    def rate_budget(self) -> RateBudget:
        return RateBudget(
            requests_per_minute=self.requests_per_minute,
            tokens_per_minute=self.tokens_per_minute,
            requests_per_day=self.requests_per_day,
        )

    def retry_policy(self) -> ThrottleRetryPolicy:
        return ThrottleRetryPolicy(
            cooldown_seconds=self.throttle_cooldown_seconds,
            backoff_factor=self.throttle_backoff_factor,
            max_cooldown_seconds=self.throttle_max_cooldown_seconds,
            max_attempts=self.max_throttle_attempts,
        )

    def redacted(self) -> dict[str, Any]:
        """Settings as a dict with secrets masked, for debug logging."""
        data = self.model_dump(mode="json")
        if data.get("api_key"):
            data["api_key"] = "***"
        return data


def load_settings(
    env_file: str | Path | None = None, **overrides: Any
) -> ExtractorSettings:
    """Resolve settings from the environment, an optional .env file and overrides.

    Raises:
        ConfigurationError: If the resolved values fail validation.
    """
    if env_file is not None and not Path(env_file).exists():
        raise ConfigurationError(f"Environment file not found: {env_file}")
    try:
        return ExtractorSettings(_env_file=env_file, **overrides)  # type: ignore[call-arg]
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e
