"""Core types and schema for purchase-order extraction."""

from po_extractor.core.schema import (
    EXTRACTION_INSTRUCTION,
    ExtractionResult,
    Material,
)
from po_extractor.core.types import (
    BatchOutput,
    ExtractionRequest,
    Failure,
    FileOutcome,
    Result,
    Success,
)

__all__ = [
    "EXTRACTION_INSTRUCTION",
    "BatchOutput",
    "ExtractionRequest",
    "ExtractionResult",
    "Failure",
    "FileOutcome",
    "Material",
    "Result",
    "Success",
]
