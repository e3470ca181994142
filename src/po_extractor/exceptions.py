"""Exceptions for purchase-order extraction"""  # noqa: D415

from enum import Enum


class POExtractorError(Exception):
    """Base exception for purchase-order extraction errors"""  # noqa: D415


class ConfigurationError(POExtractorError):
    """Raised when settings are missing or inconsistent"""  # noqa: D415


class FailureKind(str, Enum):
    """Why a single file produced no result."""

    PARSE = "parse_failure"
    EMPTY_RESPONSE = "empty_response"
    SCHEMA_MISMATCH = "schema_mismatch"
    THROTTLED = "throttled"
    OTHER = "other_failure"
    RETRY_EXHAUSTED = "retry_exhausted"
    READ_ERROR = "read_error"


class ExtractionFailure(POExtractorError):
    """A classified failure from a single extraction attempt."""

    kind: FailureKind = FailureKind.OTHER

    def __init__(self, detail: str, *, cause: BaseException | None = None):
        super().__init__(detail)
        self.detail = detail
        self.cause = cause

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind.value!r}, detail={self.detail!r})"


class ParseFailure(ExtractionFailure):
    """Model text was not valid JSON"""  # noqa: D415

    kind = FailureKind.PARSE


class EmptyResponse(ExtractionFailure):
    """Model returned no candidates, no parts, or an empty object"""  # noqa: D415

    kind = FailureKind.EMPTY_RESPONSE


class SchemaMismatch(ExtractionFailure):
    """Model JSON did not match the purchase-order schema"""  # noqa: D415

    kind = FailureKind.SCHEMA_MISMATCH


class ThrottledFailure(ExtractionFailure):
    """The service rejected the call with a rate-limit error (HTTP 429)"""  # noqa: D415

    kind = FailureKind.THROTTLED


class OtherFailure(ExtractionFailure):
    """Any other transport or service error"""  # noqa: D415

    kind = FailureKind.OTHER


class RetryExhaustedError(ExtractionFailure):
    """Throttling persisted past the retry ceiling"""  # noqa: D415

    kind = FailureKind.RETRY_EXHAUSTED

    def __init__(
        self, detail: str, *, attempts: int, cause: BaseException | None = None
    ):
        super().__init__(detail, cause=cause)
        self.attempts = attempts
