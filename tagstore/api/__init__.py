"""API layer - FastAPI endpoints."""

from .hashes import router as hashes_router

__all__ = [
    "hashes_router",
]
