"""
tests/unit/test_negotiator.py

Request negotiator shape search.

Verifies:
✔ Plain requests make exactly one call with no format parameter
✔ A shape rejection advances to the next candidate, in order
✔ A real failure aborts after one call
✔ Timeouts are real failures, never shape rejections
✔ Every candidate rejected → SHAPES_EXHAUSTED
✔ JSON-only requests use the json_object shapes
✔ Never raises, even when the backend raises something unexpected
"""

import pytest

from inference import (
    Failure,
    FailureKind,
    GenerationRequest,
    ModelBackend,
    RemoteServiceError,
    RequestNegotiator,
    StructuredOutput,
    Success,
)


# ─────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────


class ScriptedBackend(ModelBackend):
    """Returns (or raises) the scripted results in order and records bodies."""

    def __init__(self, *results):
        self.results = list(results)
        self.calls = []
        self.timeouts = []

    async def create(self, body, timeout_s=None):
        self.calls.append(body)
        self.timeouts.append(timeout_s)
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


def shape_rejection(param="text.format.schema"):
    return RemoteServiceError(
        f"Unknown parameter: '{param}'.",
        status_code=400,
        payload={"error": {"message": f"Unknown parameter: '{param}'.", "type": "invalid_request_error"}},
    )


SCHEMA = {"type": "object", "properties": {"ok": {"type": "boolean"}}, "required": ["ok"]}


def structured_request(schema=SCHEMA):
    return GenerationRequest(
        instructions="Reply in JSON",
        user_content="Say ok",
        structured_output=StructuredOutput(required=True, schema=schema),
    )


# ─────────────────────────────────────────────────────
# Plain requests
# ─────────────────────────────────────────────────────


class TestPlainRequest:
    @pytest.mark.asyncio
    async def test_single_call_without_format(self):
        backend = ScriptedBackend({"output_text": "Hello there"})
        negotiator = RequestNegotiator(backend)

        outcome = await negotiator.generate(GenerationRequest(instructions="Be brief", user_content="Hi"))

        assert isinstance(outcome, Success)
        assert outcome.text == "Hello there"
        assert len(backend.calls) == 1
        body = backend.calls[0]
        assert "text" not in body
        assert "response_format" not in body
        assert body["instructions"] == "Be brief"
        assert body["input"] == "Hi"
        assert body["model"] == "gpt-4o-mini"

    @pytest.mark.asyncio
    async def test_plain_400_is_real_failure(self):
        """A plain request has nothing left to negotiate, so a 400 is terminal."""
        backend = ScriptedBackend(shape_rejection())
        negotiator = RequestNegotiator(backend)

        outcome = await negotiator.generate(GenerationRequest(instructions="", user_content="Hi"))

        assert outcome.ok is False
        assert outcome.kind == FailureKind.REAL_FAILURE
        assert outcome.status_code == 400
        assert outcome.detail == "Unknown parameter: 'text.format.schema'."
        assert outcome.attempts == ["plain"]
        assert len(backend.calls) == 1

    @pytest.mark.asyncio
    async def test_schema_without_required_is_plain(self):
        backend = ScriptedBackend({"output_text": "ok"})
        negotiator = RequestNegotiator(backend)

        req = GenerationRequest(
            instructions="",
            user_content="Hi",
            structured_output=StructuredOutput(required=False, schema=SCHEMA),
        )
        await negotiator.generate(req)

        assert len(backend.calls) == 1
        assert "text" not in backend.calls[0]

    @pytest.mark.asyncio
    async def test_empty_instructions_omitted(self):
        backend = ScriptedBackend({"output_text": "ok"})
        await RequestNegotiator(backend).generate(GenerationRequest(instructions="", user_content="Hi"))
        assert "instructions" not in backend.calls[0]


# ─────────────────────────────────────────────────────
# Shape search
# ─────────────────────────────────────────────────────


class TestShapeSearch:
    @pytest.mark.asyncio
    async def test_first_shape_accepted(self):
        backend = ScriptedBackend({"output_text": '{"ok":true}'})
        outcome = await RequestNegotiator(backend).generate(structured_request())

        assert outcome.ok is True
        assert outcome.candidate == "text_format_schema"
        fmt = backend.calls[0]["text"]["format"]
        assert fmt["type"] == "json_schema"
        assert fmt["schema"] == SCHEMA
        assert fmt["strict"] is True

    @pytest.mark.asyncio
    async def test_rejected_first_shape_then_second_succeeds(self):
        backend = ScriptedBackend(shape_rejection(), {"output_text": '{"ok":true}'})
        outcome = await RequestNegotiator(backend).generate(structured_request())

        assert outcome.ok is True
        assert outcome.text == '{"ok":true}'
        assert outcome.attempts == ["text_format_schema", "text_format_nested"]
        assert len(backend.calls) == 2
        nested = backend.calls[1]["text"]["format"]
        assert nested["type"] == "json_schema"
        assert nested["json_schema"]["schema"] == SCHEMA

    @pytest.mark.asyncio
    async def test_third_shape_is_legacy_response_format(self):
        backend = ScriptedBackend(
            shape_rejection(),
            shape_rejection("text.format.json_schema"),
            {"output_text": '{"ok":true}'},
        )
        outcome = await RequestNegotiator(backend).generate(structured_request())

        assert outcome.ok is True
        assert len(backend.calls) == 3
        third = backend.calls[2]
        assert "text" not in third
        assert third["response_format"]["type"] == "json_schema"
        assert third["response_format"]["json_schema"]["schema"] == SCHEMA

    @pytest.mark.asyncio
    async def test_named_schema_wrapper_is_unwrapped(self):
        wrapped = {"name": "weekly_plan", "schema": SCHEMA, "strict": False}
        backend = ScriptedBackend({"output_text": "{}"})
        await RequestNegotiator(backend).generate(structured_request(wrapped))

        fmt = backend.calls[0]["text"]["format"]
        assert fmt["name"] == "weekly_plan"
        assert fmt["schema"] == SCHEMA
        assert fmt["strict"] is False

    @pytest.mark.asyncio
    async def test_all_shapes_rejected(self):
        backend = ScriptedBackend(shape_rejection(), shape_rejection(), shape_rejection("response_format"))
        outcome = await RequestNegotiator(backend).generate(structured_request())

        assert isinstance(outcome, Failure)
        assert outcome.kind == FailureKind.SHAPES_EXHAUSTED
        assert outcome.detail == "Unknown parameter: 'response_format'."
        assert outcome.status_code == 400
        assert outcome.attempts == ["text_format_schema", "text_format_nested", "response_format"]
        assert len(backend.calls) == 3

    @pytest.mark.asyncio
    async def test_json_only_request_uses_json_object_shapes(self):
        backend = ScriptedBackend(shape_rejection("text.format"), {"output_text": '{"a":1}'})
        req = GenerationRequest(
            instructions="",
            user_content="Give JSON",
            structured_output=StructuredOutput(required=True),
        )
        outcome = await RequestNegotiator(backend).generate(req)

        assert outcome.ok is True
        assert backend.calls[0]["text"] == {"format": {"type": "json_object"}}
        assert backend.calls[1]["response_format"] == {"type": "json_object"}


# ─────────────────────────────────────────────────────
# Real failures
# ─────────────────────────────────────────────────────


class TestRealFailures:
    @pytest.mark.asyncio
    async def test_auth_error_aborts_after_one_call(self):
        error = RemoteServiceError(
            "HTTP 401",
            status_code=401,
            payload={"error": {"message": "Incorrect API key provided"}},
        )
        backend = ScriptedBackend(error, {"output_text": "never"})
        outcome = await RequestNegotiator(backend).generate(structured_request())

        assert outcome.ok is False
        assert outcome.kind == FailureKind.REAL_FAILURE
        assert outcome.detail == "Incorrect API key provided"
        assert outcome.status_code == 401
        assert len(backend.calls) == 1

    @pytest.mark.asyncio
    async def test_timeout_is_real_failure(self):
        backend = ScriptedBackend(RemoteServiceError("Request timed out after 25s", timed_out=True))
        outcome = await RequestNegotiator(backend).generate(structured_request())

        assert outcome.kind == FailureKind.REAL_FAILURE
        assert outcome.timed_out is True
        assert len(backend.calls) == 1

    @pytest.mark.asyncio
    async def test_unexpected_exception_is_wrapped(self):
        backend = ScriptedBackend(RuntimeError("boom"))
        outcome = await RequestNegotiator(backend).generate(structured_request())

        assert outcome.kind == FailureKind.REAL_FAILURE
        assert outcome.detail == "boom"

    @pytest.mark.asyncio
    async def test_server_error_after_rejection_keeps_attempts(self):
        backend = ScriptedBackend(shape_rejection(), RemoteServiceError("Internal error", status_code=500))
        outcome = await RequestNegotiator(backend).generate(structured_request())

        assert outcome.kind == FailureKind.REAL_FAILURE
        assert outcome.attempts == ["text_format_schema", "text_format_nested"]


# ─────────────────────────────────────────────────────
# Timeouts and request validation
# ─────────────────────────────────────────────────────


class TestTimeoutsAndValidation:
    @pytest.mark.asyncio
    async def test_negotiator_timeout_passed_to_backend(self):
        backend = ScriptedBackend({"output_text": "ok"})
        await RequestNegotiator(backend, timeout_s=25.0).generate(GenerationRequest(instructions="", user_content="Hi"))
        assert backend.timeouts == [25.0]

    @pytest.mark.asyncio
    async def test_request_timeout_overrides_negotiator(self):
        backend = ScriptedBackend({"output_text": "ok"})
        req = GenerationRequest(instructions="", user_content="Hi", timeout_s=5.0)
        await RequestNegotiator(backend, timeout_s=25.0).generate(req)
        assert backend.timeouts == [5.0]

    def test_temperature_out_of_range_rejected(self):
        with pytest.raises(ValueError):
            GenerationRequest(instructions="", user_content="Hi", temperature=2.5)
