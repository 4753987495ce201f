"""비즈니스 로직 서비스 - export only."""

from .retrieval_service import InpiRetrievalService

__all__ = ["InpiRetrievalService"]
