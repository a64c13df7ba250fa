"""
Nutrition schemas.

Request/response models for meal estimation, meal swaps and target
suggestion, plus the JSON schemas sent to the model for structured output.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

Source = Literal["ai", "fallback"]
Confidence = Literal["high", "medium", "low"]


class MacroTotals(BaseModel):
    calories: int = 0
    protein: int = 0
    carbs: int = 0
    fat: int = 0


class FoodItem(BaseModel):
    name: str
    quantity: str = "1 serving"
    unit: Optional[str] = None
    calories: int = 0
    protein: int = 0
    carbs: int = 0
    fat: int = 0


class MealEstimate(BaseModel):
    items: List[FoodItem] = Field(default_factory=list)
    totals: MacroTotals = Field(default_factory=MacroTotals)
    confidence: Confidence = "low"
    source: Source = "fallback"


class EstimateRequest(BaseModel):
    text: str = Field(..., min_length=1, max_length=500)


class EstimateResponse(BaseModel):
    success: bool = True
    data: MealEstimate


class Profile(BaseModel):
    """Inputs for target suggestion. Missing values use typical adult defaults."""

    sex: Literal["male", "female"] = "male"
    age: int = Field(30, ge=13, le=100)
    height_in: float = Field(68, gt=0, le=120, allow_inf_nan=False, alias="heightIn")
    weight_lbs: float = Field(170, gt=0, le=1500, allow_inf_nan=False, alias="weightLbs")
    activity: str = "sedentary"

    class Config:
        populate_by_name = True


class TargetsRequest(Profile):
    goal: Literal["cut", "maintain", "recomp", "gain", "bulk"] = "maintain"
    goal_text: Optional[str] = Field(None, alias="goalText")
    user_id: Optional[str] = Field(None, alias="userId")
    date_key: Optional[str] = Field(None, alias="dateKey")   # YYYY-MM-DD


class TargetSuggestion(BaseModel):
    calories: int
    protein: int
    carbs: int
    fat: int
    label: str
    rationale: str
    source: Source = "fallback"


class TargetsResponse(BaseModel):
    success: bool = True
    data: TargetSuggestion


class MealSwapRequest(BaseModel):
    description: str = Field(..., min_length=1, max_length=200)
    calories: Optional[float] = Field(None, gt=0, le=10000, allow_inf_nan=False)


class MealSwap(BaseModel):
    swapped_meal: str
    macros: MacroTotals
    source: Source = "fallback"


class MealSwapResponse(BaseModel):
    success: bool = True
    data: MealSwap


MACRO_ESTIMATE_SCHEMA = {
    "name": "macro_estimate",
    "schema": {
        "type": "object",
        "properties": {
            "items": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "name": {"type": "string"},
                        "quantity": {"type": "string"},
                        "calories": {"type": "number"},
                        "protein": {"type": "number"},
                        "carbs": {"type": "number"},
                        "fat": {"type": "number"},
                    },
                    "required": ["name", "quantity", "calories", "protein", "carbs", "fat"],
                    "additionalProperties": False,
                },
            },
            "totals": {
                "type": "object",
                "properties": {
                    "calories": {"type": "number"},
                    "protein": {"type": "number"},
                    "carbs": {"type": "number"},
                    "fat": {"type": "number"},
                },
                "required": ["calories", "protein", "carbs", "fat"],
                "additionalProperties": False,
            },
            "confidence": {"type": "string", "enum": ["high", "medium", "low"]},
        },
        "required": ["items", "totals", "confidence"],
        "additionalProperties": False,
    },
    "strict": True,
}

TARGET_SUGGESTION_SCHEMA = {
    "name": "target_suggestion",
    "schema": {
        "type": "object",
        "properties": {
            "calories": {"type": "number"},
            "protein": {"type": "number"},
            "carbs": {"type": "number"},
            "fat": {"type": "number"},
            "label": {"type": "string"},
            "rationale": {"type": "string"},
        },
        "required": ["calories", "protein", "carbs", "fat", "label", "rationale"],
        "additionalProperties": False,
    },
    "strict": True,
}

MEAL_SWAP_SCHEMA = {
    "name": "meal_swap",
    "schema": {
        "type": "object",
        "properties": {
            "swapped_meal": {"type": "string"},
            "macros": {
                "type": "object",
                "properties": {
                    "calories": {"type": "number"},
                    "protein": {"type": "number"},
                    "carbs": {"type": "number"},
                    "fat": {"type": "number"},
                },
                "required": ["calories", "protein", "carbs", "fat"],
                "additionalProperties": False,
            },
        },
        "required": ["swapped_meal", "macros"],
        "additionalProperties": False,
    },
    "strict": True,
}
