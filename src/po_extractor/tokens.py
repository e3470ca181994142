"""Token cost estimation from raw document size.

A byte-length heuristic, not a tokenizer. It rounds up so the token bucket is
charged at least what a call is likely to use.
"""

from dataclasses import dataclass
import math

from po_extractor.constants import BYTES_PER_TOKEN


@dataclass(frozen=True, slots=True)
class TokenEstimator:
    """Converts document byte length into an estimated token cost."""

    bytes_per_token: float = BYTES_PER_TOKEN

    def __post_init__(self) -> None:
        if self.bytes_per_token <= 0:
            raise ValueError("bytes_per_token must be > 0")

    def estimate(self, byte_length: int) -> int:
        """Return ``ceil(byte_length / bytes_per_token)``.

        Raises:
            ValueError: If ``byte_length`` is negative.
        """
        if byte_length < 0:
            raise ValueError("byte_length must be >= 0")
        return math.ceil(byte_length / self.bytes_per_token)
