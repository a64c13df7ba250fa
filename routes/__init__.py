"""HTTP routers - Module Exports"""

from .coaching import router as coaching_router
from .generate import router as generate_router
from .health import router as health_router
from .nutrition import router as nutrition_router
from .plan import router as plan_router

__all__ = [
    "coaching_router",
    "generate_router",
    "health_router",
    "nutrition_router",
    "plan_router",
]
