"""
AI-first nutrition features with local fallbacks.

A negotiator Failure, a missing backend, or an answer without the minimal
structure all mean "use local computation instead". The response says which
path produced it via `source`.
"""

import json
import logging
from typing import Optional

from inference import GenerationRequest, RequestNegotiator, StructuredOutput, extract_first_json
from nutrition.heuristics import (
    clamp_targets,
    estimate_meal_locally,
    meal_estimate_from_model,
    meal_swap_from_model,
    suggest_targets_locally,
    swap_meal_locally,
)
from nutrition.schemas import (
    MACRO_ESTIMATE_SCHEMA,
    MEAL_SWAP_SCHEMA,
    TARGET_SUGGESTION_SCHEMA,
    MealEstimate,
    MealSwap,
    MealSwapRequest,
    TargetsRequest,
    TargetSuggestion,
)
from nutrition.targets import TargetStore

logger = logging.getLogger(__name__)

ESTIMATE_INSTRUCTIONS = (
    "Parse food descriptions into structured JSON with items, totals and confidence. "
    "Use standard nutrition data. Be precise with quantities and realistic with macros."
)

SWAP_INSTRUCTIONS = (
    "Suggest a healthier meal alternative: lower calories, higher protein, more nutrients, "
    "less processed ingredients. Return JSON with swapped_meal and macros "
    "(calories, protein, carbs, fat)."
)

TARGETS_INSTRUCTIONS = (
    "You are a certified sports nutrition assistant. Use Mifflin-St Jeor for BMR, multiply by "
    "the activity factor, adjust per goal (maintain≈TDEE, cut≈-15%, recomp≈-5%, gain≈+10%). "
    "Protein ~0.8-1.0 g per lb, fat 20-30% of calories, remainder carbs. Return JSON only."
)


async def estimate_meal(
    text: str,
    negotiator: Optional[RequestNegotiator],
    model_id: str = "gpt-4o-mini",
) -> MealEstimate:
    if negotiator is None:
        return estimate_meal_locally(text)

    outcome = await negotiator.generate(
        GenerationRequest(
            instructions=ESTIMATE_INSTRUCTIONS,
            user_content=f'Parse this food description: "{text}"',
            model_id=model_id,
            temperature=0.2,
            structured_output=StructuredOutput(required=True, schema=MACRO_ESTIMATE_SCHEMA),
        )
    )
    if not outcome.ok:
        logger.warning(f"Meal estimate failed ({outcome.kind.value}), using local estimate")
        return estimate_meal_locally(text)

    estimate = meal_estimate_from_model(extract_first_json(outcome.text))
    if estimate is None:
        logger.warning("Meal estimate response unusable, using local estimate")
        return estimate_meal_locally(text)
    return estimate


async def suggest_meal_swap(
    req: MealSwapRequest,
    negotiator: Optional[RequestNegotiator],
    model_id: str = "gpt-4o-mini",
) -> MealSwap:
    if negotiator is None:
        return swap_meal_locally(req.description, req.calories)

    calories = f" ({req.calories:g} calories)" if req.calories else ""
    outcome = await negotiator.generate(
        GenerationRequest(
            instructions=SWAP_INSTRUCTIONS,
            user_content=f"Original meal: {req.description}{calories}. Suggest a healthier alternative.",
            model_id=model_id,
            temperature=0.3,
            structured_output=StructuredOutput(required=True, schema=MEAL_SWAP_SCHEMA),
        )
    )
    if not outcome.ok:
        logger.warning(f"Meal swap failed ({outcome.kind.value}), using local swap")
        return swap_meal_locally(req.description, req.calories)

    swap = meal_swap_from_model(extract_first_json(outcome.text))
    if swap is None:
        logger.warning("Meal swap response unusable, using local swap")
        return swap_meal_locally(req.description, req.calories)
    return swap


def build_targets_prompt(req: TargetsRequest, store: Optional[TargetStore]) -> str:
    profile = req.model_dump(include={"sex", "age", "height_in", "weight_lbs", "activity"})
    lines = [
        f"Profile: {json.dumps(profile)}",
        f"Goal: {req.goal}",
    ]
    if req.goal_text:
        lines.append(f"In their words: {req.goal_text}")

    seed = store.get(req.user_id, req.date_key) if (store and req.user_id) else None
    if seed is not None:
        lines.append(f"Current daily target: {json.dumps(seed.model_dump())}")

    lines.append("Return calories, protein, carbs and fat (grams), a short label and a rationale.")
    return "\n".join(lines)


async def suggest_targets(
    req: TargetsRequest,
    negotiator: Optional[RequestNegotiator],
    store: Optional[TargetStore] = None,
    model_id: str = "gpt-4o-mini",
) -> TargetSuggestion:
    local = suggest_targets_locally(req, req.goal)
    if negotiator is None:
        return local

    outcome = await negotiator.generate(
        GenerationRequest(
            instructions=TARGETS_INSTRUCTIONS,
            user_content=build_targets_prompt(req, store),
            model_id=model_id,
            temperature=0.2,
            structured_output=StructuredOutput(required=True, schema=TARGET_SUGGESTION_SCHEMA),
        )
    )
    if not outcome.ok:
        logger.warning(f"Target suggestion failed ({outcome.kind.value}), using local targets")
        return local

    suggestion = clamp_targets(extract_first_json(outcome.text), local)
    return suggestion or local
