"""Document sources for batch extraction"""  # noqa: D415

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Protocol, runtime_checkable

log = logging.getLogger(__name__)


@runtime_checkable
class DocumentSource(Protocol):
    """Where documents come from."""

    async def list_files(self, directory: Path) -> list[Path]: ...  # noqa: D102
    async def read_file(self, path: Path) -> bytes: ...  # noqa: D102


class LocalDirectorySource:
    """Reads documents from a local directory.

    Every directory entry is listed; nothing is filtered by extension or type.
    Entries are sorted by name so runs are reproducible. Reads run in a worker
    thread so the event loop is never blocked by disk I/O.
    """

    async def list_files(self, directory: Path) -> list[Path]:
        directory = Path(directory)
        entries = await asyncio.to_thread(lambda: sorted(directory.iterdir()))
        log.debug("Found %d entries under %s", len(entries), directory)
        return entries

    async def read_file(self, path: Path) -> bytes:
        return await asyncio.to_thread(Path(path).read_bytes)
