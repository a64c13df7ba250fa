"""
Weekly plan generation.

Runs the request negotiator (without rate limiting) and normalizes the
result. Every failure path, including no backend at all, ends in the
fallback plan: the UI has no empty state for this flow.
"""

import logging
from typing import Optional

from inference import (
    GenerationRequest,
    RequestNegotiator,
    StructuredOutput,
    extract_first_json,
)
from planning.normalizer import fallback_plan, normalize_plan, to_pounds
from planning.schemas import PLAN_JSON_SCHEMA, PlanRequest, PlanShape

logger = logging.getLogger(__name__)

PLAN_INSTRUCTIONS = "You are a pragmatic workout planner. Always return strict JSON; no markdown."
PLAN_TEMPERATURE = 0.3


def equipment_text(equipment) -> str:
    if not equipment:
        return "No equipment listed, bodyweight only."
    return "Available equipment:\n- " + "\n- ".join(to_pounds(str(item)) for item in equipment)


def build_plan_prompt(req: PlanRequest) -> str:
    focus = f"\n- Focus: {', '.join(req.focus)}" if req.focus else ""
    return (
        f"Create a {req.days}-day {req.style} plan for these days: {', '.join(req.day_labels)}.\n"
        f"- Goal: {req.goal}\n"
        f"- Experience: {req.experience}\n"
        f"- Intensity: {req.intensity}\n"
        f"- Duration: {req.minutes} minutes/session{focus}\n"
        f"{equipment_text(req.equipment)}\n\n"
        "Use pounds for loads. Return ONLY a JSON object with a 'plan' array "
        "(one entry per day with 'label' and 'blocks'; each block has 'name', "
        "'description', 'duration_min' and 'moves') and a 'benefits' string."
    )


async def generate_weekly_plan(
    req: PlanRequest,
    negotiator: Optional[RequestNegotiator],
    model_id: str = "gpt-4o-mini",
) -> PlanShape:
    """
    Generate a normalized weekly plan.

    Returns:
        PlanShape from the model when usable, otherwise the fallback plan
    """
    fallback = fallback_plan(days=req.days, minutes=req.minutes, style=req.style, labels=req.day_labels)

    if negotiator is None:
        logger.info("No model backend configured, serving fallback plan")
        return fallback

    outcome = await negotiator.generate(
        GenerationRequest(
            instructions=PLAN_INSTRUCTIONS,
            user_content=build_plan_prompt(req),
            model_id=model_id,
            temperature=PLAN_TEMPERATURE,
            structured_output=StructuredOutput(required=True, schema=PLAN_JSON_SCHEMA),
        )
    )

    if not outcome.ok:
        logger.warning(f"Plan generation failed ({outcome.kind.value}): {outcome.detail}")
        return fallback

    doc = extract_first_json(outcome.text)
    if doc is None:
        logger.warning("Plan response was not valid JSON, serving fallback plan")
        return fallback

    return normalize_plan(doc, fallback=fallback)
