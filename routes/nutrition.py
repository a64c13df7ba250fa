"""
Nutrition endpoints.

All are rate limited like /generate and all degrade to local heuristics
instead of failing when the model is unavailable.
"""

import logging

from fastapi import APIRouter, Depends

from config import AppConfig
from nutrition import (
    EstimateRequest,
    EstimateResponse,
    MealSwapRequest,
    MealSwapResponse,
    TargetsRequest,
    TargetsResponse,
    estimate_meal,
    suggest_meal_swap,
    suggest_targets,
)
from routes.deps import enforce_rate_limit, get_config, get_negotiator, get_target_store

logger = logging.getLogger(__name__)

router = APIRouter(tags=["nutrition"], dependencies=[Depends(enforce_rate_limit)])


@router.post("/estimate-macros", response_model=EstimateResponse)
async def estimate_macros(
    req: EstimateRequest,
    negotiator=Depends(get_negotiator),
    config: AppConfig = Depends(get_config),
) -> EstimateResponse:
    """Estimate calories and macros for a free-text meal description."""
    estimate = await estimate_meal(req.text, negotiator, model_id=config.openai_model)
    logger.info(f"Meal estimate ({estimate.source}): {estimate.totals.calories} kcal")
    return EstimateResponse(success=True, data=estimate)


@router.post("/suggest-targets", response_model=TargetsResponse)
async def suggest_daily_targets(
    req: TargetsRequest,
    negotiator=Depends(get_negotiator),
    store=Depends(get_target_store),
    config: AppConfig = Depends(get_config),
) -> TargetsResponse:
    """Suggest daily calorie and macro targets for a profile and goal."""
    suggestion = await suggest_targets(req, negotiator, store, model_id=config.openai_model)
    return TargetsResponse(success=True, data=suggestion)


@router.post("/meal-swap", response_model=MealSwapResponse)
async def meal_swap(
    req: MealSwapRequest,
    negotiator=Depends(get_negotiator),
    config: AppConfig = Depends(get_config),
) -> MealSwapResponse:
    """Suggest a healthier alternative to a meal."""
    swap = await suggest_meal_swap(req, negotiator, model_id=config.openai_model)
    logger.info(f"Meal swap ({swap.source}): {swap.swapped_meal}")
    return MealSwapResponse(success=True, data=swap)
