"""API 엔드포인트 패키지 - export only."""

from .routes import health_router, inpi_router, get_retrieval_service

__all__ = ["health_router", "inpi_router", "get_retrieval_service"]
