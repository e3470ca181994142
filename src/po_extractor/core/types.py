"""Core data types that flow through the extraction pipeline.

Requests and outcomes are immutable; each stage hands a new value to the next
rather than mutating shared state.
"""

from __future__ import annotations

import dataclasses
from pathlib import Path
import typing

from po_extractor.constants import PDF_MIME_TYPE
from po_extractor.core.schema import ExtractionResult
from po_extractor.exceptions import FailureKind

# --- Minimal guard helpers ---


def _require(
    *,
    condition: bool,
    message: str,
    exc: type[Exception] = ValueError,
    field_name: str | None = None,
) -> None:
    """Centralized validation with optional field context for clearer errors."""
    if not condition:
        if field_name:
            raise exc(f"{field_name}: {message}")
        raise exc(message)


# --- Result Monad ---
# Expected failure kinds travel as values; only programming errors and file
# read errors raise.

TSuccess = typing.TypeVar("TSuccess")
TFailure = typing.TypeVar("TFailure", bound=Exception)


@dataclasses.dataclass(frozen=True, slots=True)
class Success(typing.Generic[TSuccess]):
    """A successful stage result."""

    value: TSuccess


@dataclasses.dataclass(frozen=True, slots=True)
class Failure(typing.Generic[TFailure]):
    """A failed stage result, containing the error."""

    error: TFailure


Result = Success[TSuccess] | Failure[TFailure]

# --- Core Data Models ---


@dataclasses.dataclass(frozen=True, slots=True)
class ExtractionRequest:
    """One document, read once and reused across throttle retries."""

    file_path: Path
    raw_bytes: bytes
    mime_type: str = PDF_MIME_TYPE

    def __post_init__(self) -> None:
        """Validate request invariants."""
        _require(
            condition=isinstance(self.raw_bytes, bytes),
            message="must be bytes",
            field_name="raw_bytes",
            exc=TypeError,
        )
        _require(
            condition=bool(self.mime_type.strip()),
            message="cannot be empty",
            field_name="mime_type",
        )

    @property
    def size_bytes(self) -> int:
        return len(self.raw_bytes)


@dataclasses.dataclass(frozen=True, slots=True)
class FileOutcome:
    """Per-file status: either a result or the kind of failure."""

    file_path: Path
    result: ExtractionResult | None = None
    failure_kind: FailureKind | None = None
    detail: str | None = None
    attempts: int = 0

    def __post_init__(self) -> None:
        """Exactly one of result / failure_kind must be set."""
        _require(
            condition=(self.result is None) != (self.failure_kind is None),
            message="exactly one of result or failure_kind must be set",
            field_name="outcome",
        )

    @property
    def ok(self) -> bool:
        return self.result is not None

    def to_dict(self) -> dict[str, typing.Any]:
        return {
            "file": str(self.file_path),
            "status": "success" if self.ok else self.failure_kind.value,  # type: ignore[union-attr]
            "result": self.result.to_dict() if self.result is not None else None,
            "detail": self.detail,
            "attempts": self.attempts,
        }


@dataclasses.dataclass(frozen=True, slots=True)
class BatchOutput:
    """Outcomes of a batch run, in file-iteration order."""

    outcomes: tuple[FileOutcome, ...] = ()

    @property
    def results(self) -> list[ExtractionResult]:
        """Successful results only; failed files leave no placeholder."""
        return [o.result for o in self.outcomes if o.result is not None]

    @property
    def failures(self) -> list[FileOutcome]:
        return [o for o in self.outcomes if not o.ok]

    def __len__(self) -> int:
        return len(self.outcomes)
