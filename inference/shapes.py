"""
Request-shape candidates.

Each candidate is a pure function GenerationRequest -> request body. The
remote service has changed where it expects the structured-output schema
between versions, so the negotiator tries these in a fixed priority order.

  Candidate          Body layout
  ─────────────────  ─────────────────────────────────────────────────────
  text_format_schema text.format = {type: json_schema, name, schema, strict}
  text_format_nested text.format = {type: json_schema, json_schema: {...}}
  response_format    response_format = {type: json_schema, json_schema: {...}}
  text_format_json   text.format = {type: json_object}
  response_json      response_format = {type: json_object}
  plain              no format parameter
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Tuple

from .types import GenerationRequest

DEFAULT_SCHEMA_NAME = "response"


@dataclass(frozen=True)
class ShapeCandidate:
    name: str
    build: Callable[[GenerationRequest], Dict[str, Any]]

    def __call__(self, req: GenerationRequest) -> Dict[str, Any]:
        return self.build(req)


def split_schema(schema: Dict[str, Any]) -> Tuple[str, Dict[str, Any], bool]:
    """
    Accept either a bare JSON schema or a {name, schema, strict} wrapper.

    Returns:
        (name, schema_body, strict)
    """
    inner = schema.get("schema")
    if isinstance(inner, dict):
        return schema.get("name") or DEFAULT_SCHEMA_NAME, inner, bool(schema.get("strict", True))
    return DEFAULT_SCHEMA_NAME, schema, True


def base_body(req: GenerationRequest) -> Dict[str, Any]:
    body: Dict[str, Any] = {
        "model": req.model_id,
        "input": req.user_content,
        "temperature": req.temperature,
    }
    if req.instructions:
        body["instructions"] = req.instructions
    return body


def _named_schema(req: GenerationRequest) -> Dict[str, Any]:
    name, schema, strict = split_schema(req.schema or {})
    return {"name": name, "schema": schema, "strict": strict}


def text_format_schema(req: GenerationRequest) -> Dict[str, Any]:
    body = base_body(req)
    body["text"] = {"format": {"type": "json_schema", **_named_schema(req)}}
    return body


def text_format_nested(req: GenerationRequest) -> Dict[str, Any]:
    body = base_body(req)
    body["text"] = {"format": {"type": "json_schema", "json_schema": _named_schema(req)}}
    return body


def legacy_response_format(req: GenerationRequest) -> Dict[str, Any]:
    body = base_body(req)
    body["response_format"] = {"type": "json_schema", "json_schema": _named_schema(req)}
    return body


def text_format_json(req: GenerationRequest) -> Dict[str, Any]:
    body = base_body(req)
    body["text"] = {"format": {"type": "json_object"}}
    return body


def legacy_response_json(req: GenerationRequest) -> Dict[str, Any]:
    body = base_body(req)
    body["response_format"] = {"type": "json_object"}
    return body


def plain(req: GenerationRequest) -> Dict[str, Any]:
    return base_body(req)


SCHEMA_CANDIDATES: List[ShapeCandidate] = [
    ShapeCandidate("text_format_schema", text_format_schema),
    ShapeCandidate("text_format_nested", text_format_nested),
    ShapeCandidate("response_format", legacy_response_format),
]

JSON_CANDIDATES: List[ShapeCandidate] = [
    ShapeCandidate("text_format_json", text_format_json),
    ShapeCandidate("response_json", legacy_response_json),
]

PLAIN_CANDIDATES: List[ShapeCandidate] = [
    ShapeCandidate("plain", plain),
]


def candidates_for(req: GenerationRequest) -> List[ShapeCandidate]:
    """Ordered candidates for a request."""
    if not req.wants_structured:
        return PLAIN_CANDIDATES
    if req.schema:
        return SCHEMA_CANDIDATES
    return JSON_CANDIDATES
