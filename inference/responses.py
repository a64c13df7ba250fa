"""
OpenAI Responses backend.

POSTs request bodies to {base_url}/responses and returns the decoded JSON.

Invariants:
- Credentials never logged or put in the request body
- Timeout defaults to 25 s; the in-flight call is abandoned on timeout
- Every failure is raised as RemoteServiceError with the upstream status
  and parsed error payload attached
"""

import logging
from typing import Any, Dict, Optional

import httpx

from .base import ModelBackend
from .types import RemoteServiceError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 25.0


class OpenAIResponsesBackend(ModelBackend):
    """
    httpx-based client for a Responses-style text-generation endpoint.

    Usage:
        backend = OpenAIResponsesBackend(api_key="sk-...")
        data = await backend.create({"model": "gpt-4o-mini", "input": "Hi"})
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.openai.com/v1",
        timeout_s: float = DEFAULT_TIMEOUT_S,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s

    @property
    def url(self) -> str:
        return f"{self.base_url}/responses"

    def _build_headers(self) -> dict:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }

    async def create(self, body: Dict[str, Any], timeout_s: Optional[float] = None) -> Dict[str, Any]:
        timeout = timeout_s or self.timeout_s

        try:
            async with httpx.AsyncClient(timeout=timeout) as client:
                response = await client.post(self.url, json=body, headers=self._build_headers())
                response.raise_for_status()
                return response.json()

        except httpx.TimeoutException:
            logger.warning(f"Remote call timed out after {timeout}s")
            raise RemoteServiceError(f"Request timed out after {timeout}s", timed_out=True)

        except httpx.HTTPStatusError as e:
            payload = _safe_json(e.response)
            raise RemoteServiceError(
                _error_message(payload) or f"HTTP {e.response.status_code}",
                status_code=e.response.status_code,
                payload=payload,
            )

        except httpx.HTTPError as e:
            raise RemoteServiceError(f"{type(e).__name__}: {e}")

        except ValueError as e:
            # 2xx with a body that is not JSON
            raise RemoteServiceError(f"Invalid JSON from remote service: {e}")


def _safe_json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


def _error_message(payload: Any) -> Optional[str]:
    if isinstance(payload, dict):
        err = payload.get("error")
        if isinstance(err, dict):
            return err.get("message")
        if isinstance(err, str):
            return err
        return payload.get("message")
    if isinstance(payload, str) and payload.strip():
        return payload.strip()[:500]
    return None
