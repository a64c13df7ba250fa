"""
Local heuristic fallbacks.

Deterministic stand-ins used whenever the remote model is unavailable or
its answer cannot be parsed.
"""

import math
import re
from typing import Any, Dict, Optional

from nutrition.schemas import FoodItem, MacroTotals, MealEstimate, MealSwap, Profile, TargetSuggestion

# Per serving: calories, protein, carbs, fat
FALLBACK_FOODS: Dict[str, Dict[str, int]] = {
    "chicken wing": {"calories": 99, "protein": 9, "carbs": 0, "fat": 7},
    "chicken breast": {"calories": 165, "protein": 31, "carbs": 0, "fat": 4},
    "steak": {"calories": 250, "protein": 26, "carbs": 0, "fat": 15},
    "banana": {"calories": 105, "protein": 1, "carbs": 27, "fat": 0},
    "apple": {"calories": 95, "protein": 0, "carbs": 25, "fat": 0},
    "egg": {"calories": 70, "protein": 6, "carbs": 1, "fat": 5},
    "rice": {"calories": 130, "protein": 3, "carbs": 28, "fat": 0},
    "fries": {"calories": 365, "protein": 4, "carbs": 48, "fat": 17},
    "salad": {"calories": 20, "protein": 1, "carbs": 4, "fat": 0},
}
GENERIC_SERVING = {"calories": 200, "protein": 15, "carbs": 20, "fat": 8}

_QUANTITY_RE = re.compile(r"(\d+(?:\.\d+)?)\s*(oz|cups?|pieces?|slices?|servings?)?", re.IGNORECASE)

ACTIVITY_FACTORS = {
    "sedentary": 1.2,
    "light": 1.375,
    "moderate": 1.55,
    "active": 1.55,
    "very": 1.725,
    "very_active": 1.725,
}
GOAL_FACTORS = {
    "cut": 0.85,
    "recomp": 0.95,
    "maintain": 1.0,
    "gain": 1.10,
    "bulk": 1.10,
}
CALORIE_BOUNDS = (1200, 4500)


def _clamp(value: float, lo: float, hi: float) -> int:
    return int(round(max(lo, min(hi, value))))


def _num(value: Any) -> float:
    """float(value), with 0.0 for anything unparseable, NaN or infinite."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


# ──────────────────────────────────────────────────────────────
# MEALS
# ──────────────────────────────────────────────────────────────


def estimate_meal_locally(text: str) -> MealEstimate:
    """
    Keyword-table meal estimate.

    Every known food mentioned is scaled by the first quantity in the text
    (steak by ounces over a 6 oz portion). Unknown meals become one generic
    200 kcal item.
    """
    lowered = text.lower()
    words = lowered.split()
    match = _QUANTITY_RE.search(text)
    quantity = _num(match.group(1)) if match else 1.0
    quantity = quantity if quantity > 0 else 1.0
    unit = (match.group(2) or "").lower() if match else ""

    items = []
    for food, macros in FALLBACK_FOODS.items():
        if " " in food:
            if food not in lowered:
                continue
        elif not any(word.startswith(food) for word in words):
            continue

        multiplier = quantity / 6 if food == "steak" and unit == "oz" else quantity
        portion = "oz" if food == "steak" and unit == "oz" else "serving"
        items.append(FoodItem(
            name=food,
            quantity=f"{quantity:g} {portion}",
            **{k: round(v * multiplier) for k, v in macros.items()},
        ))

    if not items:
        items.append(FoodItem(name=text[:50], quantity="1 serving", **GENERIC_SERVING))

    totals = MacroTotals(
        calories=sum(i.calories for i in items),
        protein=sum(i.protein for i in items),
        carbs=sum(i.carbs for i in items),
        fat=sum(i.fat for i in items),
    )
    return MealEstimate(
        items=items,
        totals=totals,
        confidence="medium" if len(items) > 1 else "low",
        source="fallback",
    )


def clamp_totals(raw: Any) -> MacroTotals:
    """Non-negative whole-number totals from whatever the model returned."""
    raw = raw if isinstance(raw, dict) else {}
    return MacroTotals(**{k: max(0, round(_num(raw.get(k)))) for k in ("calories", "protein", "carbs", "fat")})


def meal_estimate_from_model(doc: Any) -> Optional[MealEstimate]:
    """
    Validate a parsed model answer.

    Returns None when the minimal structure (items list and totals object)
    is missing, so the caller falls back.
    """
    if not isinstance(doc, dict):
        return None
    items_raw, totals_raw = doc.get("items"), doc.get("totals")
    if not isinstance(items_raw, list) or not isinstance(totals_raw, dict):
        return None

    items = []
    for item in items_raw:
        if not isinstance(item, dict) or not item.get("name"):
            continue
        macros = clamp_totals(item)
        items.append(FoodItem(
            name=str(item["name"]),
            quantity=str(item.get("quantity") or "1 serving"),
            unit=item.get("unit"),
            **macros.model_dump(),
        ))

    confidence = doc.get("confidence")
    return MealEstimate(
        items=items,
        totals=clamp_totals(totals_raw),
        confidence=confidence if confidence in ("high", "medium", "low") else "medium",
        source="ai",
    )


# ──────────────────────────────────────────────────────────────
# SWAPS
# ──────────────────────────────────────────────────────────────

# Keyword → healthier alternative, checked in order
FALLBACK_SWAPS: Dict[str, Dict[str, Any]] = {
    "chicken wing": {
        "swapped_meal": "Grilled chicken breast with herbs",
        "macros": {"calories": 165, "protein": 31, "carbs": 0, "fat": 4},
    },
    "fries": {
        "swapped_meal": "Baked sweet potato wedges",
        "macros": {"calories": 112, "protein": 2, "carbs": 26, "fat": 0},
    },
    "burger": {
        "swapped_meal": "Turkey lettuce wrap with avocado",
        "macros": {"calories": 250, "protein": 25, "carbs": 8, "fat": 12},
    },
    "pizza": {
        "swapped_meal": "Cauliflower crust pizza with vegetables",
        "macros": {"calories": 180, "protein": 12, "carbs": 15, "fat": 8},
    },
}
SWAP_CALORIE_RATIO = 0.8
SWAP_DEFAULT_CALORIES = 300


def swap_meal_locally(description: str, calories: Optional[float] = None) -> MealSwap:
    """
    Table lookup, else a generic lighter version.

    The generic swap keeps 80% of the original calories (300 kcal assumed
    when unknown, never below 100) split 20/40/30 protein/carbs/fat.
    """
    lowered = description.lower()
    for keyword, swap in FALLBACK_SWAPS.items():
        if keyword in lowered:
            return MealSwap(swapped_meal=swap["swapped_meal"], macros=MacroTotals(**swap["macros"]), source="fallback")

    base = _num(calories) or SWAP_DEFAULT_CALORIES
    return MealSwap(
        swapped_meal=f"Healthier version of {description}",
        macros=MacroTotals(
            calories=max(100, round(base * SWAP_CALORIE_RATIO)),
            protein=round(base * 0.2 / 4),
            carbs=round(base * 0.4 / 4),
            fat=round(base * 0.3 / 9),
        ),
        source="fallback",
    )


def meal_swap_from_model(doc: Any) -> Optional[MealSwap]:
    """None unless the answer has a non-empty swapped_meal and a macros object."""
    if not isinstance(doc, dict):
        return None
    meal, macros = doc.get("swapped_meal"), doc.get("macros")
    if not isinstance(meal, str) or not meal.strip() or not isinstance(macros, dict):
        return None
    return MealSwap(swapped_meal=meal.strip(), macros=clamp_totals(macros), source="ai")


# ──────────────────────────────────────────────────────────────
# TARGETS
# ──────────────────────────────────────────────────────────────


def mifflin_st_jeor(profile: Profile) -> float:
    kg = profile.weight_lbs * 0.45359237
    cm = profile.height_in * 2.54
    base = 10 * kg + 6.25 * cm - 5 * profile.age
    return base + 5 if profile.sex == "male" else base - 161


def activity_factor(label: Optional[str]) -> float:
    return ACTIVITY_FACTORS.get((label or "").strip().lower(), 1.2)


def suggest_targets_locally(profile: Profile, goal: str = "maintain") -> TargetSuggestion:
    """
    BMR x activity, adjusted per goal.

    Protein 0.9 g/lb, fat 25% of calories, carbs take the remainder.
    """
    tdee = mifflin_st_jeor(profile) * activity_factor(profile.activity)
    calories = _clamp(tdee * GOAL_FACTORS.get(goal, 1.0), *CALORIE_BOUNDS)

    protein = round(0.9 * profile.weight_lbs)
    fat = round(calories * 0.25 / 9)
    carbs = max(0, round((calories - protein * 4 - fat * 9) / 4))

    return TargetSuggestion(
        calories=calories,
        protein=protein,
        carbs=carbs,
        fat=fat,
        label=goal.upper(),
        rationale=(
            f"Mifflin-St Jeor BMR x {activity_factor(profile.activity)} activity, "
            f"adjusted for {goal}. Protein ~0.9 g/lb, fat ~25% of calories, carbs fill the rest."
        ),
        source="fallback",
    )


def clamp_targets(doc: Any, fallback: TargetSuggestion) -> Optional[TargetSuggestion]:
    """Bound a model suggestion; None when it is not an object."""
    if not isinstance(doc, dict):
        return None

    calories = _clamp(_num(doc.get("calories")) or fallback.calories, *CALORIE_BOUNDS)
    protein = _clamp(_num(doc.get("protein")) or fallback.protein, 40, 400)
    fat = _clamp(_num(doc.get("fat")) or fallback.fat, 20, 200)
    carbs_default = (calories - protein * 4 - fat * 9) / 4
    carbs = _clamp(_num(doc.get("carbs")) or carbs_default, 20, 800)

    rationale = doc.get("rationale")
    label = doc.get("label")
    return TargetSuggestion(
        calories=calories,
        protein=protein,
        carbs=carbs,
        fat=fat,
        label=label if isinstance(label, str) and label else fallback.label,
        rationale=rationale if isinstance(rationale, str) and rationale else "Targets generated from inputs and goal.",
        source="ai",
    )
