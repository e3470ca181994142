from types import SimpleNamespace

from google.genai import errors
import pytest

from po_extractor.adapters.mock import MockAdapter, make_text_response
from po_extractor.core.schema import EXTRACTION_INSTRUCTION, ExtractionResult
from po_extractor.core.types import Failure, Success
from po_extractor.exceptions import (
    EmptyResponse,
    FailureKind,
    OtherFailure,
    ParseFailure,
    SchemaMismatch,
    ThrottledFailure,
)
from po_extractor.pipeline.invoker import (
    ExtractionInvoker,
    first_text,
    is_throttling_error,
    parse_model_text,
    strip_code_fences,
)
from tests.helpers import ScriptedAdapter, ThrottleError, po_reply

pytestmark = pytest.mark.unit


# --- Fence stripping and parsing ---


@pytest.mark.parametrize(
    "text",
    [
        '```json\n{"a": 1}\n```',
        '```JSON\n{"a": 1}\n```',
        '```\n{"a": 1}\n```',
        'Here you go:\n```json\n{"a": 1}\n```\nThanks',
        '{"a": 1}',
        '```json\n{"a": 1}',
    ],
)
def test_strip_code_fences_returns_bare_json(text):
    assert strip_code_fences(text) == '{"a": 1}'


def test_fenced_and_unfenced_replies_parse_identically():
    fenced = parse_model_text(first_text(po_reply(fenced=True)))
    bare = parse_model_text(first_text(po_reply(fenced=False)))

    assert isinstance(fenced, Success)
    assert isinstance(bare, Success)
    assert fenced.value == bare.value
    assert fenced.value.seller_name == "Acme Supplies"
    assert fenced.value.materials[0].cost == "12.50"


def test_invalid_json_is_parse_failure():
    result = parse_model_text("not json")

    assert isinstance(result, Failure)
    assert isinstance(result.error, ParseFailure)
    assert result.error.kind is FailureKind.PARSE


@pytest.mark.parametrize("text", [None, "", "```json\n```", "{}", "```json\n{}\n```"])
def test_empty_replies_are_empty_response(text):
    result = parse_model_text(text)

    assert isinstance(result, Failure)
    assert isinstance(result.error, EmptyResponse)


@pytest.mark.parametrize(
    "text",
    [
        "[1, 2, 3]",
        '"just a string"',
        '{"seller_name": "Acme"}',
        '{"seller_name": "Acme", "materials": "bolts", "confidence": "high"}',
    ],
)
def test_wrong_shape_is_schema_mismatch(text):
    result = parse_model_text(text)

    assert isinstance(result, Failure)
    assert isinstance(result.error, SchemaMismatch)


def test_nulls_and_numbers_are_accepted():
    result = parse_model_text(
        '{"seller_name": null, "materials": null, "confidence": 0.9}'
    )

    assert isinstance(result, Success)
    assert result.value == ExtractionResult(
        seller_name=None, materials=[], confidence="0.9"
    )


def test_numeric_cost_is_kept_as_text():
    result = parse_model_text(
        '{"seller_name": "A", "materials": [{"description": "x", "cost": 12.5}],'
        ' "confidence": null}'
    )

    assert isinstance(result, Success)
    assert result.value.materials[0].cost == "12.5"


def test_extra_keys_are_ignored_in_output():
    result = parse_model_text(
        '{"seller_name": "A", "materials": [], "confidence": "low", "note": "x"}'
    )

    assert isinstance(result, Success)
    assert result.value.to_dict() == {
        "seller_name": "A",
        "materials": [],
        "confidence": "low",
    }


def test_first_text_handles_missing_candidates_and_parts():
    assert first_text(SimpleNamespace(candidates=None)) is None
    assert first_text(SimpleNamespace(candidates=[])) is None
    empty_parts = SimpleNamespace(content=SimpleNamespace(parts=[]))
    assert first_text(SimpleNamespace(candidates=[empty_parts])) is None
    assert first_text(make_text_response("hi")) == "hi"


# --- Throttle detection ---


def test_throttle_detection_by_code_status_and_text():
    assert is_throttling_error(ThrottleError())
    assert is_throttling_error(RuntimeError("429 Too Many Requests"))
    assert is_throttling_error(RuntimeError("RESOURCE_EXHAUSTED: quota"))
    status_only = RuntimeError("quota")
    status_only.status = "RESOURCE_EXHAUSTED"  # type: ignore[attr-defined]
    assert is_throttling_error(status_only)
    assert not is_throttling_error(RuntimeError("500 Internal error"))
    assert not is_throttling_error(ValueError("bad request"))


def test_structured_code_or_status_overrides_message_text():
    server_error = RuntimeError("500 INTERNAL. Request id 84291f")
    server_error.code = 500  # type: ignore[attr-defined]
    server_error.status = "INTERNAL"  # type: ignore[attr-defined]
    assert not is_throttling_error(server_error)

    limiter_down = RuntimeError("rate limiter crashed")
    limiter_down.status = "UNAVAILABLE"  # type: ignore[attr-defined]
    assert not is_throttling_error(limiter_down)


def test_sdk_errors_are_classified_by_code():
    throttled = errors.ClientError(
        429,
        {
            "error": {
                "code": 429,
                "message": "Quota exceeded",
                "status": "RESOURCE_EXHAUSTED",
            }
        },
    )
    internal = errors.ServerError(
        500,
        {
            "error": {
                "code": 500,
                "message": "Request 84291f: rate limit backend failed",
                "status": "INTERNAL",
            }
        },
    )

    assert is_throttling_error(throttled)
    assert not is_throttling_error(internal)


# --- Invoker ---


@pytest.mark.asyncio
async def test_invoke_submits_document_with_instruction():
    adapter = MockAdapter()
    invoker = ExtractionInvoker(adapter)

    result = await invoker.invoke(b"%PDF-1.4 data")

    assert isinstance(result, Success)
    assert result.value.confidence == "mock"
    assert adapter.calls == [len(b"%PDF-1.4 data")]
    assert invoker.instruction == EXTRACTION_INSTRUCTION


@pytest.mark.asyncio
async def test_invoke_classifies_throttling():
    invoker = ExtractionInvoker(ScriptedAdapter(ThrottleError()))

    result = await invoker.invoke(b"doc")

    assert isinstance(result, Failure)
    assert isinstance(result.error, ThrottledFailure)
    assert isinstance(result.error.cause, ThrottleError)


@pytest.mark.asyncio
async def test_invoke_classifies_other_errors():
    invoker = ExtractionInvoker(ScriptedAdapter(ConnectionError("reset by peer")))

    result = await invoker.invoke(b"doc")

    assert isinstance(result, Failure)
    assert isinstance(result.error, OtherFailure)
    assert "ConnectionError" in result.error.detail


@pytest.mark.asyncio
async def test_invoke_parses_bad_reply_into_parse_failure():
    invoker = ExtractionInvoker(ScriptedAdapter(make_text_response("not json")))

    result = await invoker.invoke(b"doc")

    assert isinstance(result, Failure)
    assert result.error.kind is FailureKind.PARSE


@pytest.mark.asyncio
async def test_invoke_passes_mime_type_override():
    seen = {}

    class RecordingAdapter:
        async def generate(self, *, document, mime_type, instruction):
            seen["mime_type"] = mime_type
            return po_reply()

    await ExtractionInvoker(RecordingAdapter()).invoke(b"doc", mime_type="image/png")

    assert seen["mime_type"] == "image/png"


@pytest.mark.asyncio
async def test_server_error_mentioning_429_is_other_failure():
    error = RuntimeError("500 INTERNAL. Request id 84291f")
    error.code = 500  # type: ignore[attr-defined]
    invoker = ExtractionInvoker(ScriptedAdapter(error))

    result = await invoker.invoke(b"doc")

    assert isinstance(result, Failure)
    assert isinstance(result.error, OtherFailure)
