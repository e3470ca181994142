"""Sequential batch runner over a directory of documents"""  # noqa: D415

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from po_extractor.core.types import BatchOutput, FileOutcome
from po_extractor.exceptions import FailureKind
from po_extractor.sources import LocalDirectorySource
from po_extractor.telemetry import TelemetryContext

if TYPE_CHECKING:
    from po_extractor.pipeline.extractor import RetryingExtractor
    from po_extractor.sources import DocumentSource
    from po_extractor.telemetry import TelemetryContextProtocol

log = logging.getLogger(__name__)


class BatchRunner:
    """Drains a directory through the extractor, one file at a time.

    Files are processed strictly in listing order with a single request in
    flight. A failing file never aborts the batch; it is recorded in the
    outcomes and left out of ``BatchOutput.results``.
    """

    def __init__(
        self,
        extractor: RetryingExtractor,
        *,
        source: DocumentSource | None = None,
        telemetry: TelemetryContextProtocol | None = None,
    ):
        self._extractor = extractor
        self._source = source or LocalDirectorySource()
        self._tele = telemetry or TelemetryContext()

    async def run(self, directory: Path | str) -> BatchOutput:
        """Process every entry in ``directory`` and return all outcomes."""
        directory = Path(directory)
        files = await self._source.list_files(directory)
        log.info("Processing %d file(s) from %s", len(files), directory)

        outcomes: list[FileOutcome] = []
        with self._tele("batch.run", files=len(files)):
            for index, path in enumerate(files, start=1):
                log.info("Processing file %s (%d/%d)...", path.name, index, len(files))
                try:
                    outcome = await self._extractor.extract_outcome(path)
                except OSError as e:
                    log.error("Could not read %s: %s", path, e)
                    outcome = FileOutcome(
                        file_path=path,
                        failure_kind=FailureKind.READ_ERROR,
                        detail=f"{type(e).__name__}: {e}",
                    )
                outcomes.append(outcome)
                self._tele.count("batch.succeeded" if outcome.ok else "batch.failed")

        output = BatchOutput(outcomes=tuple(outcomes))
        log.info(
            "Batch complete: %d succeeded, %d failed",
            len(output.results),
            len(output.failures),
        )
        return output
