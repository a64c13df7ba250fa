"""
Model boundary layer for LLM text generation.

This package hides the remote service's request-schema instability behind
a single negotiator, so route handlers stay agnostic of the request shape
the current server version accepts.

Supported backends:
- StubModelBackend: Deterministic canned responses (mock mode, CI)
- OpenAIResponsesBackend: Remote Responses endpoint over httpx

Example usage:
    from inference import GenerationRequest, RequestNegotiator, StubModelBackend

    negotiator = RequestNegotiator(StubModelBackend())
    outcome = await negotiator.generate(
        GenerationRequest(instructions="Be brief.", user_content="Hello")
    )
"""

from .types import (
    Failure,
    FailureKind,
    GenerationRequest,
    NegotiationOutcome,
    RemoteServiceError,
    StructuredOutput,
    Success,
)
from .base import ModelBackend
from .stub import StubModelBackend
from .responses import OpenAIResponsesBackend
from .classifier import OpenAIShapeRejectionClassifier, ShapeRejectionClassifier
from .extract import extract_first_json, extract_text
from .shapes import ShapeCandidate, candidates_for
from .negotiator import RequestNegotiator

__all__ = [
    "GenerationRequest",
    "StructuredOutput",
    "NegotiationOutcome",
    "Success",
    "Failure",
    "FailureKind",
    "RemoteServiceError",
    "ModelBackend",
    "StubModelBackend",
    "OpenAIResponsesBackend",
    "ShapeRejectionClassifier",
    "OpenAIShapeRejectionClassifier",
    "extract_text",
    "extract_first_json",
    "ShapeCandidate",
    "candidates_for",
    "RequestNegotiator",
]
