"""
Daily greeting generation.

One plain-text call through the negotiator. No backend, a failed call or
an empty answer all end in a local line picked by time of day.
"""

import logging
import re
from typing import Optional

from coaching.schemas import Greeting, GreetingRequest
from inference import GenerationRequest, RequestNegotiator

logger = logging.getLogger(__name__)

GREETING_INSTRUCTIONS = (
    "You are a concise, uplifting fitness & nutrition coach. "
    "Write ONE short motivational sentence tailored to the user. "
    "Constraints: 6–16 words, no emojis, no hashtags, no quotes, present-tense, "
    "at most one exclamation."
)
GREETING_TEMPERATURE = 0.8

_QUOTES = "\"'“”‘’`"
_WS_RE = re.compile(r"\s+")


def build_greeting_prompt(req: GreetingRequest) -> str:
    hour = "" if req.hour is None else req.hour
    return (
        f"User: {req.name.strip() or 'Athlete'}\n"
        f"Local date: {req.date_key}\n"
        f"Local hour (0-23): {hour}\n\n"
        "Write a single personalized line that motivates the user to stay on track today "
        "(food, movement, recovery).\n"
        "Return ONLY the sentence without quotes or extra text."
    )


def clean_line(text: Optional[str]) -> Optional[str]:
    """First non-empty line with surrounding quotes stripped, or None."""
    for line in (text or "").splitlines():
        line = _WS_RE.sub(" ", line).strip().strip(_QUOTES).strip()
        if line:
            return line
    return None


def local_greeting(name: str, hour: Optional[int]) -> str:
    name = name.strip() or "Athlete"
    if hour is None:
        return f"One good choice at a time, {name}. You've got this today."
    if 5 <= hour < 12:
        return f"Good morning, {name}. Start strong with a protein-packed breakfast."
    if 12 <= hour < 17:
        return f"Keep it rolling, {name}. A short walk after lunch goes a long way."
    if 17 <= hour < 22:
        return f"Finish strong tonight, {name}. Hit your protein and wind down early."
    return f"Rest up, {name}. Recovery tonight sets up a great tomorrow."


async def daily_greeting(
    req: GreetingRequest,
    negotiator: Optional[RequestNegotiator],
    model_id: str = "gpt-4o-mini",
) -> Greeting:
    fallback = Greeting(text=local_greeting(req.name, req.hour), source="fallback")
    if negotiator is None:
        return fallback

    outcome = await negotiator.generate(
        GenerationRequest(
            instructions=GREETING_INSTRUCTIONS,
            user_content=build_greeting_prompt(req),
            model_id=req.model_id or model_id,
            temperature=GREETING_TEMPERATURE,
        )
    )
    if not outcome.ok:
        logger.warning(f"Greeting failed ({outcome.kind.value}): {outcome.detail}")
        return fallback

    text = clean_line(outcome.text)
    if text is None:
        logger.warning("Greeting response empty, using local line")
        return fallback
    return Greeting(text=text, source="ai")
