"""
Greeting schemas.

The UI sends the user's local calendar day and hour so the line can fit
the time of day without the server knowing the user's timezone.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field


class GreetingRequest(BaseModel):
    name: str = Field("Athlete", max_length=60)
    date_key: str = Field("", alias="dateKey", max_length=32)
    hour: Optional[int] = Field(None, ge=0, le=23)
    model_id: Optional[str] = Field(None, alias="model")

    class Config:
        populate_by_name = True
        protected_namespaces = ()


class Greeting(BaseModel):
    text: str
    source: Literal["ai", "fallback"] = "fallback"


class GreetingResponse(BaseModel):
    success: bool = True
    data: Greeting
