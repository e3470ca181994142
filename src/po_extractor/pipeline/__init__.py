"""Extraction pipeline: invoker, retrying extractor and batch runner."""

from po_extractor.pipeline.extractor import RetryingExtractor, ThrottleRetryPolicy
from po_extractor.pipeline.invoker import (
    ExtractionInvoker,
    is_throttling_error,
    parse_model_text,
    strip_code_fences,
)
from po_extractor.pipeline.runner import BatchRunner

__all__ = [
    "BatchRunner",
    "ExtractionInvoker",
    "RetryingExtractor",
    "ThrottleRetryPolicy",
    "is_throttling_error",
    "parse_model_text",
    "strip_code_fences",
]
