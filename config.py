"""
Configuration management for the Macro Coach API.

Loads environment variables from .env file and provides typed access to configuration.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Dict, Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from inference import ModelBackend
    from nutrition.targets import TargetStore
    from ratelimit import RateLimiter

# Load environment variables from .env file
env_path = Path(__file__).parent / ".env"
load_dotenv(env_path)


_TRUTHY = {"1", "true", "yes", "on"}


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in _TRUTHY


def _env_seed_targets(name: str = "SEED_TARGETS") -> Dict[str, Dict[str, float]]:
    """
    Seed targets from a JSON object: {"user-1": {"calories": 2200, "protein": 160, ...}}.

    Malformed values are logged and ignored.
    """
    raw = os.getenv(name, "").strip()
    if not raw:
        return {}
    try:
        parsed = json.loads(raw)
    except ValueError as e:
        logger.warning(f"Ignoring {name}: not valid JSON ({e})")
        return {}
    if not isinstance(parsed, dict):
        logger.warning(f"Ignoring {name}: expected a JSON object")
        return {}
    return {str(user): macros for user, macros in parsed.items() if isinstance(macros, dict)}


@dataclass
class AppConfig:
    """Runtime configuration from environment."""

    # Remote text-generation service
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    openai_base_url: str = "https://api.openai.com/v1"
    generate_timeout_s: float = 25.0

    # Canned responses instead of remote calls (local UI development)
    mock_ai: bool = False

    # Rate limiting
    rate_limit_max: int = 60
    rate_limit_window_ms: int = 60_000
    rate_limit_sweep_threshold: int = 10_000

    # Server
    api_port: int = 8000
    environment: str = "development"
    log_level: str = "INFO"

    # Seed macro targets keyed by user id (SEED_TARGETS, read-only, see nutrition.targets)
    seed_targets: Dict[str, Dict[str, float]] = field(default_factory=dict)

    @classmethod
    def from_env(cls) -> "AppConfig":
        """
        Load configuration from environment variables.

        Defaults match a single-operator deployment:
        - model: gpt-4o-mini
        - 60 requests per client per minute
        - 25 s timeout per remote call
        """
        return cls(
            openai_api_key=os.getenv("OPENAI_API_KEY", ""),
            openai_model=os.getenv("OPENAI_MODEL", "gpt-4o-mini"),
            openai_base_url=os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1").rstrip("/"),
            generate_timeout_s=float(os.getenv("GENERATE_TIMEOUT_S", "25")),
            mock_ai=_env_flag("MOCK_AI"),
            rate_limit_max=int(os.getenv("RATE_LIMIT_MAX", "60")),
            rate_limit_window_ms=int(os.getenv("RATE_LIMIT_WINDOW_MS", "60000")),
            rate_limit_sweep_threshold=int(os.getenv("RATE_LIMIT_SWEEP_THRESHOLD", "10000")),
            api_port=int(os.getenv("API_PORT", "8000")),
            environment=os.getenv("ENVIRONMENT", "development"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            seed_targets=_env_seed_targets(),
        )

    @property
    def credentials_present(self) -> bool:
        return bool(self.openai_api_key)

    def create_model_backend(self) -> Optional["ModelBackend"]:
        """
        Create the remote backend based on configuration.

        Mock mode wins over credentials. Without either, there is no backend
        and callers must answer with their local fallback (or an error).
        """
        from inference import OpenAIResponsesBackend, StubModelBackend

        if self.mock_ai:
            return StubModelBackend()
        if not self.credentials_present:
            return None
        return OpenAIResponsesBackend(
            api_key=self.openai_api_key,
            base_url=self.openai_base_url,
            timeout_s=self.generate_timeout_s,
        )

    def create_rate_limiter(self) -> "RateLimiter":
        """Create the process-wide rate limiter with an in-memory store."""
        from ratelimit import InMemoryRateLimiterStore, RateLimiter

        store = InMemoryRateLimiterStore(sweep_threshold=self.rate_limit_sweep_threshold)
        return RateLimiter(
            store=store,
            max_per_window=self.rate_limit_max,
            window_ms=self.rate_limit_window_ms,
        )

    def create_target_store(self) -> "TargetStore":
        from nutrition.targets import InMemoryTargetStore

        return InMemoryTargetStore(self.seed_targets)


def get_config() -> AppConfig:
    """Get runtime configuration."""
    return AppConfig.from_env()


if __name__ == "__main__":
    cfg = get_config()
    print("Configuration loaded:")
    print(f"  OpenAI key: {'✓ Set' if cfg.credentials_present else '✗ Missing'}")
    print(f"  Model: {cfg.openai_model}")
    print(f"  Mock mode: {cfg.mock_ai}")
    print(f"  Rate limit: {cfg.rate_limit_max} / {cfg.rate_limit_window_ms} ms")
    print(f"  Environment: {cfg.environment}")
