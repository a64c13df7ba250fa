import json
from typing import Any, Dict, Optional

from .base import ModelBackend

CANNED_TEXT = "Mock mode: steady wins. Hit your protein, move a little, sleep well."

# Canned structured payloads by schema name; anything else gets DEFAULT_JSON
CANNED_JSON: Dict[str, Dict[str, Any]] = {
    "macro_estimate": {
        "items": [
            {"name": "mock meal", "quantity": "1 serving", "calories": 450, "protein": 35, "carbs": 40, "fat": 15},
        ],
        "totals": {"calories": 450, "protein": 35, "carbs": 40, "fat": 15},
        "confidence": "medium",
    },
    "target_suggestion": {
        "calories": 2200, "protein": 170, "carbs": 220, "fat": 70,
        "label": "MAINTAIN", "rationale": "Mock targets for local development.",
    },
    "weekly_plan": {
        "plan": [
            {"label": "Mon", "blocks": [{"name": "Strength", "duration_min": 30,
                                         "moves": [{"name": "Goblet Squat", "sets": 3, "reps": 10}]}]},
            {"label": "Wed", "blocks": [{"name": "Conditioning", "duration_min": 20,
                                         "moves": [{"name": "Row", "time_min": 10}]}]},
        ],
        "benefits": "Mock plan for local development.",
    },
    "meal_swap": {
        "swapped_meal": "Mock grilled chicken salad",
        "macros": {"calories": 320, "protein": 35, "carbs": 18, "fat": 12},
    },
}
DEFAULT_JSON: Dict[str, Any] = {"ok": True, "mock": True}


class StubModelBackend(ModelBackend):
    """
    Deterministic fake backend for mock mode and CI.

    Never calls the network. Structured requests (any text.format or
    response_format in the body) get canned JSON text, everything else gets
    a canned sentence, both in the Responses `output_text` field.
    """

    def __init__(self):
        self.calls = []

    async def create(self, body: Dict[str, Any], timeout_s: Optional[float] = None) -> Dict[str, Any]:
        self.calls.append(body)

        fmt = (body.get("text") or {}).get("format") or body.get("response_format")
        if not fmt:
            return {"output_text": CANNED_TEXT, "model": "mock"}

        payload = CANNED_JSON.get(_schema_name(fmt), DEFAULT_JSON)
        return {"output_text": json.dumps(payload), "model": "mock"}


def _schema_name(fmt: Dict[str, Any]) -> Optional[str]:
    if fmt.get("name"):
        return fmt["name"]
    nested = fmt.get("json_schema")
    if isinstance(nested, dict):
        return nested.get("name")
    return None
