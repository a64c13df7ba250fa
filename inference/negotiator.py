"""
Request negotiator.

Obtains generated text from a remote service whose structured-output request
schema is unstable across versions.

Flow:
  Idle → Attempting(i) → Success
                       → shape rejected → Attempting(i + 1)
                       → real failure (terminal)
                       → shapes exhausted (terminal)

Rules:
- Candidates are tried strictly in order, one at a time
- A shape rejection advances to the next candidate; on a plain request
  it is a real failure
- Any other failure (auth, server error, timeout) aborts immediately
- No backoff and no repeat of a candidate
- No local fallback here; callers decide what a Failure means for them
- Never raises
"""

import logging
from typing import List, Optional

from .base import ModelBackend
from .classifier import OpenAIShapeRejectionClassifier, ShapeRejectionClassifier
from .extract import extract_text
from .shapes import PLAIN_CANDIDATES, ShapeCandidate, candidates_for
from .types import (
    Failure,
    FailureKind,
    GenerationRequest,
    NegotiationOutcome,
    RemoteServiceError,
    Success,
)

logger = logging.getLogger(__name__)


class RequestNegotiator:
    """
    Shape-search loop over a ModelBackend.

    Usage:
        negotiator = RequestNegotiator(backend)
        outcome = await negotiator.generate(request)
        if outcome.ok:
            use(outcome.text)
    """

    def __init__(
        self,
        backend: ModelBackend,
        classifier: Optional[ShapeRejectionClassifier] = None,
        timeout_s: Optional[float] = None,
    ):
        self.backend = backend
        self.classifier = classifier or OpenAIShapeRejectionClassifier()
        self.timeout_s = timeout_s

    async def generate(self, req: GenerationRequest) -> NegotiationOutcome:
        """
        Try each candidate shape for req in priority order.

        Returns:
            Success with the first extracted text, or Failure with kind
            REAL_FAILURE (first non-shape error) or SHAPES_EXHAUSTED
        """
        candidates = candidates_for(req)
        # A plain request has no alternative shape to fall back to
        negotiable = candidates is not PLAIN_CANDIDATES
        attempts: List[str] = []
        last_error: Optional[RemoteServiceError] = None

        for candidate in candidates:
            attempts.append(candidate.name)
            try:
                data = await self._attempt(candidate, req)
            except RemoteServiceError as e:
                if negotiable and self.classifier.is_shape_rejection(e):
                    logger.info(
                        f"Shape '{candidate.name}' rejected "
                        f"(status={e.status_code}): {e.best_message()}"
                    )
                    last_error = e
                    continue

                logger.error(
                    f"Remote call failed on shape '{candidate.name}' "
                    f"(status={e.status_code}, timed_out={e.timed_out}): {e.best_message()}"
                )
                return Failure(
                    kind=FailureKind.REAL_FAILURE,
                    detail=e.best_message(),
                    status_code=e.status_code,
                    timed_out=e.timed_out,
                    attempts=attempts,
                )

            text = extract_text(data)
            logger.debug(f"Shape '{candidate.name}' accepted after {len(attempts)} attempt(s)")
            return Success(text=text, candidate=candidate.name, attempts=attempts)

        logger.warning(f"All request shapes rejected: {attempts}")
        return Failure(
            kind=FailureKind.SHAPES_EXHAUSTED,
            detail=last_error.best_message() if last_error else "Server error",
            status_code=last_error.status_code if last_error else None,
            attempts=attempts,
        )

    async def _attempt(self, candidate: ShapeCandidate, req: GenerationRequest):
        body = candidate(req)
        timeout = req.timeout_s or self.timeout_s
        try:
            return await self.backend.create(body, timeout_s=timeout)
        except RemoteServiceError:
            raise
        except Exception as e:
            # Backends should only raise RemoteServiceError; anything else is a real fault
            raise RemoteServiceError(str(e) or type(e).__name__) from e
