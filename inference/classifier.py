"""
Shape-rejection classification.

Distinguishes "the server's current schema version cannot parse this request
body" from every other failure. One classifier per remote error convention.
"""

from abc import ABC, abstractmethod

from .types import RemoteServiceError


class ShapeRejectionClassifier(ABC):

    @abstractmethod
    def is_shape_rejection(self, error: RemoteServiceError) -> bool:
        raise NotImplementedError


class OpenAIShapeRejectionClassifier(ShapeRejectionClassifier):
    """
    OpenAI-style errors.

    Shape rejected when the message mentions an unknown or unsupported
    parameter (case-insensitive), or the status is exactly 400.
    Timeouts are never shape rejections.
    """

    MARKERS = ("unknown parameter", "unsupported")
    SHAPE_STATUS = 400

    def is_shape_rejection(self, error: RemoteServiceError) -> bool:
        if error.timed_out:
            return False
        if error.status_code == self.SHAPE_STATUS:
            return True

        haystack = " ".join(
            m for m in (error.provider_message, error.message) if m
        ).lower()
        return any(marker in haystack for marker in self.MARKERS)
