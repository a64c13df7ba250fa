from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union


@dataclass(frozen=True)
class StructuredOutput:
    required: bool = False
    schema: Optional[Dict[str, Any]] = None    # bare JSON schema or {name, schema, strict}


@dataclass(frozen=True)
class GenerationRequest:
    instructions: str
    user_content: str
    model_id: str = "gpt-4o-mini"
    temperature: float = 0.2                  # 0..2
    structured_output: Optional[StructuredOutput] = None
    timeout_s: Optional[float] = None

    def __post_init__(self):
        if not 0 <= self.temperature <= 2:
            raise ValueError(f"temperature must be in [0, 2], got {self.temperature}")

    @property
    def wants_structured(self) -> bool:
        return bool(self.structured_output and self.structured_output.required)

    @property
    def schema(self) -> Optional[Dict[str, Any]]:
        return self.structured_output.schema if self.structured_output else None


class FailureKind(str, Enum):
    SHAPE_REJECTED = "shape_rejected"
    REAL_FAILURE = "real_failure"
    SHAPES_EXHAUSTED = "shapes_exhausted"


@dataclass
class Success:
    text: str
    candidate: str = "plain"
    attempts: List[str] = field(default_factory=list)

    ok = True


@dataclass
class Failure:
    kind: FailureKind
    detail: str = "Server error"
    status_code: Optional[int] = None          # upstream HTTP status, if any
    timed_out: bool = False
    attempts: List[str] = field(default_factory=list)

    ok = False


NegotiationOutcome = Union[Success, Failure]


class RemoteServiceError(Exception):
    """
    Raised by a backend when the remote service call fails.

    Carries the upstream status and the parsed error payload so the
    negotiator can tell a rejected request shape from a real fault.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        payload: Optional[Any] = None,
        timed_out: bool = False,
    ):
        self.message = message
        self.status_code = status_code
        self.payload = payload
        self.timed_out = timed_out
        super().__init__(message)

    @property
    def provider_message(self) -> Optional[str]:
        """Nested provider error message ({"error": {"message": ...}}), if any."""
        payload = self.payload
        if isinstance(payload, dict):
            err = payload.get("error")
            if isinstance(err, dict) and isinstance(err.get("message"), str):
                return err["message"]
            if isinstance(err, str):
                return err
        return None

    def best_message(self) -> str:
        return self.provider_message or self.message or "Server error"
