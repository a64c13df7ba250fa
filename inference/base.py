from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class ModelBackend(ABC):
    """
    Abstract remote text-generation boundary.
    The negotiator depends ONLY on this interface.
    """

    @abstractmethod
    async def create(self, body: Dict[str, Any], timeout_s: Optional[float] = None) -> Dict[str, Any]:
        """
        Send one request body and return the decoded response document.

        Raises:
            RemoteServiceError: on any transport, HTTP or decoding failure
        """
        raise NotImplementedError
