"""Weekly workout plan generation and normalization."""

from .normalizer import fallback_plan, locate_plan, normalize_plan, render_move, to_pounds
from .schemas import PLAN_JSON_SCHEMA, PlanBlock, PlanDay, PlanRequest, PlanResponse, PlanShape
from .service import build_plan_prompt, generate_weekly_plan

__all__ = [
    "PlanShape",
    "PlanDay",
    "PlanBlock",
    "PlanRequest",
    "PlanResponse",
    "PLAN_JSON_SCHEMA",
    "normalize_plan",
    "locate_plan",
    "render_move",
    "fallback_plan",
    "to_pounds",
    "build_plan_prompt",
    "generate_weekly_plan",
]
