"""API routes."""

from labour_cost.api.routes.analytics import router as analytics_router
from labour_cost.api.routes.health import router as health_router

__all__ = ["analytics_router", "health_router"]
