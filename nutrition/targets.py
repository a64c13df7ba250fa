"""
Seed macro targets.

Persistence is an external collaborator; the core only ever reads a user's
current target when composing a prompt. Rows are keyed by (user, date);
a user-level default row (date None) applies to any date.
"""

import math
from abc import ABC, abstractmethod
from typing import Dict, Optional, Tuple

from nutrition.schemas import MacroTotals


def _whole(value) -> int:
    """Non-negative whole number; 0 for missing, unparseable or non-finite values."""
    try:
        number = float(value or 0)
    except (TypeError, ValueError):
        return 0
    return max(0, int(round(number))) if math.isfinite(number) else 0


class TargetStore(ABC):
    """Read-only target lookup. Never raises."""

    @abstractmethod
    def get(self, user_id: str, date_key: Optional[str] = None) -> Optional[MacroTotals]:
        raise NotImplementedError


class InMemoryTargetStore(TargetStore):
    """
    Dict-backed store for tests and single-operator deployments.

    Seed format: {user_id: {calories, protein, carbs, fat}} for user defaults.
    """

    def __init__(self, seed: Optional[Dict[str, Dict[str, float]]] = None):
        self._rows: Dict[Tuple[str, Optional[str]], MacroTotals] = {}
        for user_id, macros in (seed or {}).items():
            self.put(user_id, None, macros)

    def put(self, user_id: str, date_key: Optional[str], macros: Dict[str, float]) -> None:
        self._rows[(user_id, date_key)] = MacroTotals(
            **{k: _whole(macros.get(k)) for k in ("calories", "protein", "carbs", "fat")}
        )

    def get(self, user_id: str, date_key: Optional[str] = None) -> Optional[MacroTotals]:
        if not user_id:
            return None
        if date_key is not None and (user_id, date_key) in self._rows:
            return self._rows[(user_id, date_key)]
        return self._rows.get((user_id, None))
