"""API routes package."""

from .health_routes import router as health_router
from .inpi_routes import router as inpi_router, get_retrieval_service

__all__ = ["health_router", "inpi_router", "get_retrieval_service"]
