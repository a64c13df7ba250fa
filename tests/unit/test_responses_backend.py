"""
tests/unit/test_responses_backend.py

OpenAIResponsesBackend transport and error mapping.

Verifies:
✔ POSTs to {base_url}/responses with a bearer token
✔ Timeout → RemoteServiceError(timed_out=True)
✔ HTTP error → status and parsed payload attached
✔ Malformed JSON → RemoteServiceError
✔ Stub backend never touches the network
"""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from inference import OpenAIResponsesBackend, RemoteServiceError, StubModelBackend


def mock_async_client(mock_class):
    mock_instance = AsyncMock()
    mock_instance.__aenter__ = AsyncMock(return_value=mock_instance)
    mock_instance.__aexit__ = AsyncMock(return_value=False)
    mock_class.return_value = mock_instance
    return mock_instance


# ─────────────────────────────────────────────────────
# Success
# ─────────────────────────────────────────────────────


class TestResponsesBackendSuccess:
    @pytest.mark.asyncio
    async def test_posts_body_with_bearer_token(self):
        with patch("httpx.AsyncClient") as mock_class:
            mock_instance = mock_async_client(mock_class)
            mock_response = MagicMock()
            mock_response.status_code = 200
            mock_response.raise_for_status = MagicMock()
            mock_response.json.return_value = {"output_text": "hi"}
            mock_instance.post.return_value = mock_response

            backend = OpenAIResponsesBackend(api_key="sk-test", base_url="https://api.example.com/v1/")
            data = await backend.create({"model": "gpt-4o-mini", "input": "Hi"})

        assert data == {"output_text": "hi"}
        args, kwargs = mock_instance.post.call_args
        assert args[0] == "https://api.example.com/v1/responses"
        assert kwargs["json"] == {"model": "gpt-4o-mini", "input": "Hi"}
        assert kwargs["headers"]["Authorization"] == "Bearer sk-test"

    @pytest.mark.asyncio
    async def test_timeout_override_used_for_client(self):
        with patch("httpx.AsyncClient") as mock_class:
            mock_instance = mock_async_client(mock_class)
            mock_response = MagicMock()
            mock_response.raise_for_status = MagicMock()
            mock_response.json.return_value = {}
            mock_instance.post.return_value = mock_response

            backend = OpenAIResponsesBackend(api_key="sk-test", timeout_s=25.0)
            await backend.create({}, timeout_s=3.0)

        assert mock_class.call_args.kwargs["timeout"] == 3.0


# ─────────────────────────────────────────────────────
# Errors
# ─────────────────────────────────────────────────────


class TestResponsesBackendErrors:
    @pytest.mark.asyncio
    async def test_timeout_raises_timed_out_error(self):
        with patch("httpx.AsyncClient") as mock_class:
            mock_instance = mock_async_client(mock_class)
            mock_instance.post.side_effect = httpx.TimeoutException("timed out")

            backend = OpenAIResponsesBackend(api_key="sk-test", timeout_s=0.1)
            with pytest.raises(RemoteServiceError) as exc_info:
                await backend.create({"input": "Hi"})

        assert exc_info.value.timed_out is True
        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_http_400_carries_status_and_payload(self):
        payload = {"error": {"message": "Unknown parameter: 'text.format.schema'.", "param": "text.format.schema"}}

        with patch("httpx.AsyncClient") as mock_class:
            mock_instance = mock_async_client(mock_class)
            mock_response = MagicMock()
            mock_response.status_code = 400
            mock_response.json.return_value = payload
            mock_response.raise_for_status.side_effect = httpx.HTTPStatusError(
                "Bad Request", request=MagicMock(), response=mock_response
            )
            mock_instance.post.return_value = mock_response

            backend = OpenAIResponsesBackend(api_key="sk-test")
            with pytest.raises(RemoteServiceError) as exc_info:
                await backend.create({"input": "Hi"})

        error = exc_info.value
        assert error.status_code == 400
        assert error.payload == payload
        assert error.best_message() == "Unknown parameter: 'text.format.schema'."

    @pytest.mark.asyncio
    async def test_http_error_with_text_body(self):
        with patch("httpx.AsyncClient") as mock_class:
            mock_instance = mock_async_client(mock_class)
            mock_response = MagicMock()
            mock_response.status_code = 502
            mock_response.json.side_effect = ValueError("not json")
            mock_response.text = "Bad gateway"
            mock_response.raise_for_status.side_effect = httpx.HTTPStatusError(
                "Bad Gateway", request=MagicMock(), response=mock_response
            )
            mock_instance.post.return_value = mock_response

            backend = OpenAIResponsesBackend(api_key="sk-test")
            with pytest.raises(RemoteServiceError) as exc_info:
                await backend.create({"input": "Hi"})

        assert exc_info.value.status_code == 502
        assert exc_info.value.best_message() == "Bad gateway"

    @pytest.mark.asyncio
    async def test_malformed_json_raises(self):
        with patch("httpx.AsyncClient") as mock_class:
            mock_instance = mock_async_client(mock_class)
            mock_response = MagicMock()
            mock_response.status_code = 200
            mock_response.raise_for_status = MagicMock()
            mock_response.json.side_effect = ValueError("Bad JSON")
            mock_instance.post.return_value = mock_response

            backend = OpenAIResponsesBackend(api_key="sk-test")
            with pytest.raises(RemoteServiceError) as exc_info:
                await backend.create({"input": "Hi"})

        assert exc_info.value.timed_out is False
        assert "Invalid JSON" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_connection_error_raises(self):
        with patch("httpx.AsyncClient") as mock_class:
            mock_instance = mock_async_client(mock_class)
            mock_instance.post.side_effect = httpx.ConnectError("connection refused")

            backend = OpenAIResponsesBackend(api_key="sk-test")
            with pytest.raises(RemoteServiceError) as exc_info:
                await backend.create({"input": "Hi"})

        assert "ConnectError" in exc_info.value.message


# ─────────────────────────────────────────────────────
# Stub
# ─────────────────────────────────────────────────────


class TestStubBackend:
    @pytest.mark.asyncio
    async def test_plain_body_gets_canned_text(self):
        stub = StubModelBackend()
        data = await stub.create({"model": "m", "input": "Hi"})

        assert "Mock mode" in data["output_text"]
        assert stub.calls == [{"model": "m", "input": "Hi"}]

    @pytest.mark.asyncio
    async def test_named_schema_gets_matching_payload(self):
        stub = StubModelBackend()
        data = await stub.create({"text": {"format": {"type": "json_schema", "name": "target_suggestion"}}})

        assert json.loads(data["output_text"])["label"] == "MAINTAIN"

    @pytest.mark.asyncio
    async def test_unknown_json_request_gets_default(self):
        stub = StubModelBackend()
        data = await stub.create({"response_format": {"type": "json_object"}})

        assert json.loads(data["output_text"]) == {"ok": True, "mock": True}
