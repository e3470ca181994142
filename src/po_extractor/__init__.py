"""Rate-limited purchase-order extraction with Gemini."""

import importlib.metadata
import logging

from po_extractor.config import ExtractorSettings, load_settings
from po_extractor.core.schema import EXTRACTION_INSTRUCTION, ExtractionResult, Material
from po_extractor.core.types import (
    BatchOutput,
    ExtractionRequest,
    Failure,
    FileOutcome,
    Result,
    Success,
)
from po_extractor.exceptions import (
    ConfigurationError,
    EmptyResponse,
    ExtractionFailure,
    FailureKind,
    OtherFailure,
    ParseFailure,
    POExtractorError,
    RetryExhaustedError,
    SchemaMismatch,
    ThrottledFailure,
)
from po_extractor.executor import (
    create_runner,
    extract_directory,
    render_output,
)
from po_extractor.pipeline.extractor import RetryingExtractor, ThrottleRetryPolicy
from po_extractor.pipeline.invoker import ExtractionInvoker
from po_extractor.pipeline.runner import BatchRunner
from po_extractor.rate_limit.bucket import TokenBucket
from po_extractor.rate_limit.gate import RateBudget, RateGate
from po_extractor.telemetry import TelemetryContext, TelemetryReporter
from po_extractor.tokens import TokenEstimator

# Version handling
try:
    __version__ = importlib.metadata.version("po-extractor")
except importlib.metadata.PackageNotFoundError:
    __version__ = "development"

# Library logger stays silent unless the application configures logging.
logging.getLogger(__name__).addHandler(logging.NullHandler())

# Public API
__all__ = [  # noqa: RUF022
    # Entry points
    "create_runner",
    "extract_directory",
    "render_output",
    # Configuration
    "ExtractorSettings",
    "load_settings",
    # Components
    "TokenBucket",
    "RateBudget",
    "RateGate",
    "TokenEstimator",
    "ExtractionInvoker",
    "RetryingExtractor",
    "ThrottleRetryPolicy",
    "BatchRunner",
    # Telemetry (extension points)
    "TelemetryContext",
    "TelemetryReporter",
    # Core Types & Data Models
    "ExtractionRequest",
    "ExtractionResult",
    "Material",
    "FileOutcome",
    "BatchOutput",
    "Result",
    "Success",
    "Failure",
    "EXTRACTION_INSTRUCTION",
    # Exceptions
    "POExtractorError",
    "ConfigurationError",
    "FailureKind",
    "ExtractionFailure",
    "ParseFailure",
    "EmptyResponse",
    "SchemaMismatch",
    "ThrottledFailure",
    "OtherFailure",
    "RetryExhaustedError",
]
