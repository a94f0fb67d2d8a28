"""Dependency injection for FastAPI."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends

from receiptpoints.core.config import Settings, get_settings
from receiptpoints.services.points import PointsService
from receiptpoints.services.receipt_store import ReceiptStore

# Global instances that will be initialized on startup
_receipt_store: ReceiptStore | None = None
_points_service: PointsService | None = None


def set_receipt_store(store: ReceiptStore | None) -> None:
    """Set the global receipt store instance."""
    global _receipt_store  # noqa: PLW0603
    _receipt_store = store


def set_points_service(service: PointsService | None) -> None:
    """Set the global points service instance."""
    global _points_service  # noqa: PLW0603
    _points_service = service


def get_receipt_store() -> ReceiptStore:
    """Get the receipt store instance."""
    if _receipt_store is None:
        msg = "Receipt store not initialized"
        raise RuntimeError(msg)
    return _receipt_store


def get_points_service() -> PointsService:
    """Get the points service instance."""
    if _points_service is None:
        msg = "Points service not initialized"
        raise RuntimeError(msg)
    return _points_service


# Type aliases for dependency injection
SettingsDep = Annotated[Settings, Depends(get_settings)]
ReceiptStoreDep = Annotated[ReceiptStore, Depends(get_receipt_store)]
PointsServiceDep = Annotated[PointsService, Depends(get_points_service)]
