"""API routes."""

from app.api.evaluation import router as evaluation_router
from app.api.internal import router as internal_router

__all__ = ["evaluation_router", "internal_router"]
