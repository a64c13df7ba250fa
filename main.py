"""
FastAPI Application Entry Point

Integrates:
  - Text generation proxy (rate limited)
  - Weekly plan generation
  - Meal estimate / target suggestion
  - Health check
  - Middleware for logging, CORS & error handling

Run: uvicorn main:app --reload --host 0.0.0.0 --port 8000
"""

import logging
import time
import uuid
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import AppConfig, get_config
from inference import ModelBackend, RequestNegotiator
from nutrition.targets import TargetStore
from ratelimit import RateLimiter
from routes import coaching_router, generate_router, health_router, nutrition_router, plan_router
from routes.deps import CORS_HEADERS, rate_limit_headers

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def create_app(
    config: Optional[AppConfig] = None,
    backend: Optional[ModelBackend] = None,
    limiter: Optional[RateLimiter] = None,
    target_store: Optional[TargetStore] = None,
) -> FastAPI:
    """
    Build the application.

    Anything not passed in is created from config; config itself defaults
    to the environment.
    """
    config = config or get_config()
    backend = backend or config.create_model_backend()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("=" * 60)
        logger.info("Macro Coach API starting up...")
        logger.info(f"Environment: {config.environment}")
        logger.info(f"Model: {config.openai_model} (mock={config.mock_ai}, key={'set' if config.credentials_present else 'missing'})")
        logger.info(f"Rate limit: {config.rate_limit_max} req / {config.rate_limit_window_ms} ms")
        logger.info("=" * 60)

        yield

        logger.info("Macro Coach API shutting down...")

    app = FastAPI(
        title="Macro Coach API",
        description="AI macro estimates, coaching text and weekly plans",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.state.config = config
    app.state.start_time = time.time()
    app.state.negotiator = (
        RequestNegotiator(backend, timeout_s=config.generate_timeout_s) if backend else None
    )
    app.state.limiter = limiter or config.create_rate_limiter()
    app.state.target_store = target_store or config.create_target_store()

    # Middleware for logging, CORS and last-resort error handling
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log all requests and stamp permissive CORS headers."""
        req_id = request.headers.get("x-req-id") or str(uuid.uuid4())
        logger.debug(f"{request.method} {request.url.path} rid={req_id}")
        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(f"Request error rid={req_id}: {str(e)}", exc_info=True)
            response = JSONResponse(
                status_code=500,
                content={"error": "Server error"},
                headers=rate_limit_headers(request),
            )

        for key, value in CORS_HEADERS.items():
            response.headers.setdefault(key, value)
        return response

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers={**rate_limit_headers(request), **(exc.headers or {})},
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        logger.info(f"Invalid body on {request.url.path}: {exc.errors()}")
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request body"},
            headers=rate_limit_headers(request),
        )

    app.include_router(health_router)
    app.include_router(generate_router)
    app.include_router(plan_router)
    app.include_router(nutrition_router)
    app.include_router(coaching_router)

    @app.get("/")
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Macro Coach API",
            "version": "1.0.0",
            "status": "running",
            "endpoints": {
                "health": "GET /health",
                "generate": "POST /generate",
                "plan_week": "POST /plan-week",
                "estimate_macros": "POST /estimate-macros",
                "suggest_targets": "POST /suggest-targets",
                "meal_swap": "POST /meal-swap",
                "daily_greeting": "POST /daily-greeting",
            },
        }

    return app


_config = get_config()
setup_logging(_config.log_level)
app = create_app(_config)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=_config.api_port,
        reload=_config.environment == "development",
    )
