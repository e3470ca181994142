"""The primary user-facing entry point.

Wires settings into an explicitly constructed pipeline. Each runner owns its
own ``RateGate``; nothing is shared through module globals, so two runners (or
two tests) never compete for the same buckets.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from po_extractor.adapters.mock import MockAdapter
from po_extractor.config import load_settings
from po_extractor.constants import OUTPUT_INDENT
from po_extractor.exceptions import ConfigurationError
from po_extractor.pipeline.extractor import RetryingExtractor
from po_extractor.pipeline.invoker import ExtractionInvoker
from po_extractor.pipeline.runner import BatchRunner
from po_extractor.rate_limit.gate import RateGate
from po_extractor.sources import LocalDirectorySource
from po_extractor.telemetry import TelemetryContext
from po_extractor.tokens import TokenEstimator

if TYPE_CHECKING:
    from po_extractor.adapters.base import GenerationAdapter
    from po_extractor.config import ExtractorSettings
    from po_extractor.core.types import BatchOutput
    from po_extractor.sources import DocumentSource
    from po_extractor.telemetry import TelemetryReporter

log = logging.getLogger(__name__)


def create_adapter(settings: ExtractorSettings) -> GenerationAdapter:
    """Real Gemini adapter when enabled, otherwise the offline mock."""
    if not settings.use_real_api:
        log.warning(
            "use_real_api is off: results come from the offline mock adapter, "
            "not from the documents. Pass --real-api for real extraction."
        )
        return MockAdapter()
    # Deferred so dry runs never touch provider auth
    from po_extractor.adapters.gemini import GoogleGenAIAdapter

    return GoogleGenAIAdapter.from_settings(settings)


def create_runner(
    settings: ExtractorSettings | None = None,
    *,
    adapter: GenerationAdapter | None = None,
    source: DocumentSource | None = None,
    reporters: tuple[TelemetryReporter, ...] = (),
) -> BatchRunner:
    """Assemble gate, estimator, invoker, extractor and runner."""
    settings = settings or load_settings()
    log.debug("Resolved settings: %s", settings.redacted())

    telemetry = TelemetryContext(*reporters)
    source = source or LocalDirectorySource()
    gate = RateGate.from_budget(settings.rate_budget(), telemetry=telemetry)
    invoker = ExtractionInvoker(
        adapter or create_adapter(settings), telemetry=telemetry
    )
    extractor = RetryingExtractor(
        gate,
        invoker,
        estimator=TokenEstimator(settings.bytes_per_token),
        source=source,
        policy=settings.retry_policy(),
        telemetry=telemetry,
    )
    return BatchRunner(extractor, source=source, telemetry=telemetry)


async def extract_directory(
    directory: Path | str | None = None,
    settings: ExtractorSettings | None = None,
    **kwargs: Any,
) -> BatchOutput:
    """Run a full batch over ``directory`` (or the configured folder)."""
    settings = settings or load_settings()
    target = directory or settings.purchase_orders_folder
    if target is None:
        raise ConfigurationError(
            "No input directory. Pass one or set PURCHASE_ORDERS_FOLDER."
        )
    target = Path(target)
    if not target.is_dir():
        raise ConfigurationError(f"Not a directory: {target}")
    runner = create_runner(settings, **kwargs)
    return await runner.run(target)


def render_output(output: BatchOutput, *, include_failures: bool = False) -> str:
    """Pretty-printed JSON for the batch.

    By default only successful results are emitted, as a plain array. With
    ``include_failures`` every file's outcome is emitted instead, so callers can
    tell "no materials found" apart from "extraction failed".
    """
    if include_failures:
        payload: list[Any] = [o.to_dict() for o in output.outcomes]
    else:
        payload = [r.to_dict() for r in output.results]
    return json.dumps(payload, indent=OUTPUT_INDENT)
