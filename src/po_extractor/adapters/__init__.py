"""Model provider adapters."""

from po_extractor.adapters.base import GenerationAdapter
from po_extractor.adapters.mock import MockAdapter, make_text_response

__all__ = ["GenerationAdapter", "MockAdapter", "make_text_response"]
