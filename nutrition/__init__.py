"""Meal macro estimation, healthier meal swaps and daily target suggestion."""

from .heuristics import estimate_meal_locally, suggest_targets_locally, swap_meal_locally
from .schemas import (
    EstimateRequest,
    EstimateResponse,
    MacroTotals,
    MealEstimate,
    MealSwap,
    MealSwapRequest,
    MealSwapResponse,
    Profile,
    TargetsRequest,
    TargetsResponse,
    TargetSuggestion,
)
from .service import estimate_meal, suggest_meal_swap, suggest_targets
from .targets import InMemoryTargetStore, TargetStore

__all__ = [
    "EstimateRequest",
    "EstimateResponse",
    "MacroTotals",
    "MealEstimate",
    "MealSwap",
    "MealSwapRequest",
    "MealSwapResponse",
    "Profile",
    "TargetsRequest",
    "TargetsResponse",
    "TargetSuggestion",
    "estimate_meal",
    "estimate_meal_locally",
    "suggest_meal_swap",
    "swap_meal_locally",
    "suggest_targets",
    "suggest_targets_locally",
    "TargetStore",
    "InMemoryTargetStore",
]
