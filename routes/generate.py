"""
Text generation endpoint.

POST /generate is the rate-limited proxy in front of the request
negotiator. Every POST response carries X-RateLimit-* headers.

Response contract:
  200 {"text": str}             success
  400 {"error": str}            invalid body
  429 {"error": str}            client bucket exhausted
  500/502/504 {"error": str}    no backend, upstream failure, timeout

Internal classification (which shape failed, why) stays in the logs.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Request, Response, status
from fastapi.responses import JSONResponse
from pydantic import AliasChoices, BaseModel, Field, ValidationError

from inference import Failure, FailureKind, GenerationRequest, StructuredOutput
from routes.deps import CORS_HEADERS, check_rate_limit, get_config, get_negotiator

logger = logging.getLogger(__name__)

router = APIRouter(tags=["generate"])


class GenerateBody(BaseModel):
    """
    Generation request body.

    Field names follow the API contract; the older client names
    (system, prompt, model, expectJson, jsonSchema) are accepted too.
    """

    instructions: str = Field("", validation_alias=AliasChoices("instructions", "system"))
    user_content: str = Field(..., min_length=1, validation_alias=AliasChoices("userContent", "prompt"))
    model_id: Optional[str] = Field(None, validation_alias=AliasChoices("modelId", "model"))
    temperature: float = Field(0.2, ge=0, le=2)
    expect_structured: bool = Field(False, validation_alias=AliasChoices("expectStructured", "expectJson"))
    json_schema: Optional[Dict[str, Any]] = Field(None, validation_alias=AliasChoices("schema", "jsonSchema"))

    class Config:
        protected_namespaces = ()


def failure_status(failure: Failure) -> int:
    if failure.timed_out:
        return status.HTTP_504_GATEWAY_TIMEOUT
    return status.HTTP_502_BAD_GATEWAY


def _json(status_code: int, content: dict, headers: dict) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=content, headers=headers)


@router.options("/generate")
async def generate_preflight() -> Response:
    """Browser preflight: any origin may call /generate."""
    return Response(status_code=status.HTTP_204_NO_CONTENT, headers=CORS_HEADERS)


@router.post("/generate")
async def generate(request: Request) -> JSONResponse:
    """
    Generate text through the request negotiator.

    Flow:
    1. Count the request against the client's bucket (429 if exhausted)
    2. Validate the body (400 if invalid)
    3. Negotiate a request shape with the remote service
    4. Return extracted text, or the best human-readable failure message
    """
    decision = check_rate_limit(request)
    headers = decision.headers()

    if not decision.allowed:
        return _json(
            status.HTTP_429_TOO_MANY_REQUESTS,
            {"error": "Rate limit exceeded. Try again after the window resets."},
            headers,
        )

    try:
        body = GenerateBody.model_validate(await request.json())
    except (ValidationError, ValueError) as e:
        logger.info(f"Invalid /generate body: {e}")
        return _json(status.HTTP_400_BAD_REQUEST, {"error": "Invalid request body"}, headers)

    negotiator = get_negotiator(request)
    if negotiator is None:
        logger.error("No model backend: set OPENAI_API_KEY or MOCK_AI")
        return _json(status.HTTP_500_INTERNAL_SERVER_ERROR, {"error": "Missing OPENAI_API_KEY"}, headers)

    config = get_config(request)
    structured = None
    if body.expect_structured or body.json_schema:
        structured = StructuredOutput(required=body.expect_structured, schema=body.json_schema)

    outcome = await negotiator.generate(
        GenerationRequest(
            instructions=body.instructions,
            user_content=body.user_content,
            model_id=body.model_id or config.openai_model,
            temperature=body.temperature,
            structured_output=structured,
        )
    )

    if outcome.ok:
        return _json(status.HTTP_200_OK, {"text": outcome.text}, headers)

    if outcome.kind == FailureKind.SHAPES_EXHAUSTED:
        logger.error(f"Request shapes exhausted after {outcome.attempts}")
    return _json(failure_status(outcome), {"error": outcome.detail or "Server error"}, headers)
