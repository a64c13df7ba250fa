"""
Shared route dependencies.

Services live on app.state, set up by main.create_app.
"""

import logging
from typing import Dict, Optional

from fastapi import HTTPException, Request, Response, status

from config import AppConfig
from inference import RequestNegotiator
from nutrition.targets import TargetStore
from ratelimit import RateLimitDecision, RateLimiter, resolve_client_key

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization, x-req-id",
    "Access-Control-Max-Age": "86400",
}


def get_config(request: Request) -> AppConfig:
    return request.app.state.config


def get_negotiator(request: Request) -> Optional[RequestNegotiator]:
    """None when neither credentials nor mock mode are configured."""
    return request.app.state.negotiator


def get_limiter(request: Request) -> RateLimiter:
    return request.app.state.limiter


def get_target_store(request: Request) -> TargetStore:
    return request.app.state.target_store


def client_key(request: Request) -> str:
    peer = request.client.host if request.client else None
    return resolve_client_key(request.headers, peer)


def check_rate_limit(request: Request) -> RateLimitDecision:
    """Count the request and remember the decision for later responses."""
    decision = get_limiter(request).check(client_key(request))
    request.state.rate_limit = decision
    return decision


def rate_limit_headers(request: Request) -> Dict[str, str]:
    """X-RateLimit-* headers for a request that was counted, else {}."""
    decision = getattr(request.state, "rate_limit", None)
    return decision.headers() if decision is not None else {}


def rate_limited_error(decision: RateLimitDecision) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        detail="Rate limit exceeded. Try again after the window resets.",
        headers=decision.headers(),
    )


def enforce_rate_limit(request: Request, response: Response) -> RateLimitDecision:
    """
    Dependency: count the request, stamp X-RateLimit-* headers.

    Raises:
        HTTPException(429): bucket exhausted for this client
    """
    decision = check_rate_limit(request)
    if not decision.allowed:
        raise rate_limited_error(decision)
    response.headers.update(decision.headers())
    return decision
