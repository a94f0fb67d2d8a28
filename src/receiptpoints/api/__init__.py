"""API endpoints package."""

from .routes import router as receipts_router

__all__ = ["receipts_router"]
