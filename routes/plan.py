"""
Weekly plan endpoint.

Not rate limited. Never answers a remote-service failure with an HTTP
error: the fallback plan is served with success=true instead.
"""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import Response

from config import AppConfig
from planning import PlanRequest, PlanResponse, generate_weekly_plan
from routes.deps import CORS_HEADERS, get_config, get_negotiator

logger = logging.getLogger(__name__)

router = APIRouter(tags=["plan"])


@router.options("/plan-week")
async def plan_week_preflight() -> Response:
    return Response(status_code=status.HTTP_204_NO_CONTENT, headers=CORS_HEADERS)


@router.post("/plan-week", response_model=PlanResponse)
async def plan_week(
    req: PlanRequest,
    negotiator=Depends(get_negotiator),
    config: AppConfig = Depends(get_config),
) -> PlanResponse:
    """
    Generate a weekly workout plan.

    Accepts {goal, style, experience, equipment, days, minutes} or
    {availableDays, minutesPerSession, ...}.
    """
    logger.info(f"Plan request: {req.days} days x {req.minutes} min, goal={req.goal}")
    plan = await generate_weekly_plan(req, negotiator, model_id=config.openai_model)
    return PlanResponse(success=True, data=plan)
