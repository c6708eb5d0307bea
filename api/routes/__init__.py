"""API route modules."""

from routes.health_routes import router as health_router
from routes.quotations_routes import router as quotations_router

__all__ = [
    "health_router",
    "quotations_router",
]
