"""Provider adapter protocol.

The extraction core only needs one capability from a model provider: submit
a document plus an instruction and hand back the raw response. Responses are
read structurally (``candidates[0].content.parts[0].text``), so any object
with that shape works, SDK types included.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class GenerationAdapter(Protocol):
    """Submits one document to a generative model."""

    async def generate(
        self,
        *,
        document: bytes,
        mime_type: str,
        instruction: str,
    ) -> Any:
        """Return the provider's raw response for one document.

        Raises whatever the provider raises; callers classify the error.
        """
        ...
