"""Rate limiting primitives for the extraction service."""

from po_extractor.rate_limit.bucket import TokenBucket
from po_extractor.rate_limit.gate import Admission, RateBudget, RateGate

__all__ = ["Admission", "RateBudget", "RateGate", "TokenBucket"]
