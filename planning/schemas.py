"""
Weekly plan schemas.

PlanShape is the canonical document the UI renders. PlanRequest accepts
both request encodings the UI has used over time.
"""

from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

DAY_NAMES = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


# ============================================================================
# PLAN SHAPE (THE CONTRACT)
# ============================================================================

class PlanBlock(BaseModel):
    name: str
    description: str = ""
    duration_minutes: Optional[int] = Field(None, alias="durationMinutes")
    moves: List[str] = Field(default_factory=list)

    class Config:
        populate_by_name = True


class PlanDay(BaseModel):
    label: str
    blocks: List[PlanBlock] = Field(default_factory=list)


class PlanShape(BaseModel):
    days: List[PlanDay] = Field(default_factory=list)
    benefits_summary: str = Field("", alias="benefitsSummary")

    class Config:
        populate_by_name = True

    def is_empty(self) -> bool:
        """No days, or a first day without blocks."""
        return not self.days or not self.days[0].blocks


# ============================================================================
# PLAN REQUEST (INPUT)
# ============================================================================

class PlanRequest(BaseModel):
    """
    Weekly plan request.

    Accepts {days, minutes} or {availableDays, minutesPerSession}.
    """

    goal: str = "recomp"
    style: str = "hybrid"
    experience: str = "intermediate"
    intensity: str = "moderate"
    equipment: List[str] = Field(default_factory=list)
    focus: List[str] = Field(default_factory=list)

    days: Optional[int] = Field(None, ge=1, le=7)
    minutes: Optional[int] = Field(None, ge=10, le=120)
    available_days: Optional[List[str]] = Field(None, alias="availableDays")
    minutes_per_session: Optional[int] = Field(None, ge=10, le=120, alias="minutesPerSession")

    class Config:
        populate_by_name = True

    @model_validator(mode="after")
    def _fill_days_and_minutes(self):
        if self.days is None:
            self.days = max(1, min(7, len(self.available_days))) if self.available_days else 3
        if self.minutes is None:
            self.minutes = self.minutes_per_session or 40
        return self

    @property
    def day_labels(self) -> List[str]:
        if self.available_days:
            return list(self.available_days)[: self.days]
        return [DAY_NAMES[i % 7] for i in range(self.days)]


class PlanResponse(BaseModel):
    success: bool = True
    data: PlanShape


# JSON schema sent to the model for structured output
PLAN_JSON_SCHEMA = {
    "name": "weekly_plan",
    "schema": {
        "type": "object",
        "properties": {
            "plan": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "label": {"type": "string"},
                        "blocks": {
                            "type": "array",
                            "items": {
                                "type": "object",
                                "properties": {
                                    "name": {"type": "string"},
                                    "description": {"type": "string"},
                                    "duration_min": {"type": "number"},
                                    "moves": {
                                        "type": "array",
                                        "items": {
                                            "type": "object",
                                            "properties": {
                                                "name": {"type": "string"},
                                                "sets": {"type": ["number", "null"]},
                                                "reps": {"type": ["number", "string", "null"]},
                                                "time_min": {"type": ["number", "null"]},
                                                "load_lb": {"type": ["number", "null"]},
                                                "per_side": {"type": ["boolean", "null"]},
                                            },
                                            "required": ["name", "sets", "reps", "time_min", "load_lb", "per_side"],
                                            "additionalProperties": False,
                                        },
                                    },
                                },
                                "required": ["name", "description", "duration_min", "moves"],
                                "additionalProperties": False,
                            },
                        },
                    },
                    "required": ["label", "blocks"],
                    "additionalProperties": False,
                },
            },
            "benefits": {"type": "string"},
        },
        "required": ["plan", "benefits"],
        "additionalProperties": False,
    },
    "strict": True,
}
