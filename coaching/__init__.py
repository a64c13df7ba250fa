"""Daily motivational greeting."""

from .schemas import Greeting, GreetingRequest, GreetingResponse
from .service import GREETING_INSTRUCTIONS, build_greeting_prompt, clean_line, daily_greeting, local_greeting

__all__ = [
    "Greeting",
    "GreetingRequest",
    "GreetingResponse",
    "GREETING_INSTRUCTIONS",
    "build_greeting_prompt",
    "clean_line",
    "daily_greeting",
    "local_greeting",
]
