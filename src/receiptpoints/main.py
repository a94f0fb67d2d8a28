"""Receipt points FastAPI application."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from receiptpoints.api import receipts_router
from receiptpoints.core.config import get_settings
from receiptpoints.core.dependencies import set_points_service, set_receipt_store
from receiptpoints.core.logging_config import LoggingConfig, setup_logging
from receiptpoints.services.points import PointsService
from receiptpoints.services.receipt_store import ReceiptStore

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:  # noqa: ARG001
    """Manage application lifecycle."""
    settings = get_settings()
    setup_logging(
        LoggingConfig(
            log_level=settings.log_level,
            log_format=settings.log_format,
            log_file=Path(settings.log_file) if settings.log_file else None,
        )
    )
    logger.info("Starting %s %s...", settings.app_name, settings.app_version)

    store = ReceiptStore()
    set_receipt_store(store)
    set_points_service(PointsService(store, cache_size=settings.points_cache_size))
    logger.info(
        "Receipt store ready (reject invalid receipts: %s, points cache: %d)",
        settings.reject_invalid_receipts,
        settings.points_cache_size,
    )

    yield

    logger.info("Shutting down with %d receipts in memory", len(store))
    set_points_service(None)
    set_receipt_store(None)


def _describe_validation_error(exc: RequestValidationError) -> str:
    messages = []
    for error in exc.errors():
        location = ".".join(
            str(part) for part in error.get("loc", ()) if part != "body"
        )
        message = error.get("msg", "invalid value")
        messages.append(f"{location}: {message}" if location else message)
    return "; ".join(messages) or "Invalid request body"


async def validation_exception_handler(
    request: Request,  # noqa: ARG001
    exc: RequestValidationError,
) -> JSONResponse:
    """Report malformed request bodies as 400 Bad Request."""
    detail = _describe_validation_error(exc)
    logger.info("Rejected malformed request: %s", detail)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": f"Malformed receipt: {detail}"},
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Receipt Points",
        version=settings.app_version,
        description="Stores purchase receipts and awards loyalty points",
        lifespan=lifespan,
        debug=settings.debug,
    )

    app.add_exception_handler(
        RequestValidationError,
        validation_exception_handler,  # type: ignore[arg-type]
    )
    app.include_router(receipts_router)

    return app


# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "receiptpoints.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
