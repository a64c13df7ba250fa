"""
Coaching endpoints.

POST /daily-greeting is rate limited like /generate and answers with a
local line when the model is unavailable.
"""

from fastapi import APIRouter, Depends

from coaching import GreetingRequest, GreetingResponse, daily_greeting
from config import AppConfig
from routes.deps import enforce_rate_limit, get_config, get_negotiator

router = APIRouter(tags=["coaching"], dependencies=[Depends(enforce_rate_limit)])


@router.post("/daily-greeting", response_model=GreetingResponse)
async def greeting(
    req: GreetingRequest,
    negotiator=Depends(get_negotiator),
    config: AppConfig = Depends(get_config),
) -> GreetingResponse:
    """One short motivational sentence for the user's day."""
    result = await daily_greeting(req, negotiator, model_id=config.openai_model)
    return GreetingResponse(success=True, data=result)
