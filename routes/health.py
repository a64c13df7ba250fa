"""
Health check endpoint.

Reflects local configuration only. The remote text-generation service is
never called.
"""

import time
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Request

from config import AppConfig

router = APIRouter(tags=["health"])


@dataclass
class HealthStatus:
    """Health status response."""

    success: bool
    timestamp: str
    uptime_seconds: float
    mode: str            # "mock", "remote", "fallback-only"
    model: str
    env: Dict[str, bool]
    routes: list


def get_mode(config: AppConfig) -> str:
    if config.mock_ai:
        return "mock"
    if config.credentials_present:
        return "remote"
    return "fallback-only"


def check_health(config: AppConfig, start_time: float) -> HealthStatus:
    return HealthStatus(
        success=True,
        timestamp=datetime.now(timezone.utc).isoformat(),
        uptime_seconds=round(time.time() - start_time, 3),
        mode=get_mode(config),
        model=config.openai_model,
        env={"openai": config.credentials_present, "mock": config.mock_ai},
        routes=["/health", "/generate", "/plan-week", "/estimate-macros", "/suggest-targets",
                "/meal-swap", "/daily-greeting"],
    )


@router.get("/health")
async def health(request: Request) -> Dict[str, Any]:
    """Liveness and configuration summary."""
    status = check_health(request.app.state.config, request.app.state.start_time)
    return asdict(status)
