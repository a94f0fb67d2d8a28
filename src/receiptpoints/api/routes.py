"""Receipt processing routes."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from receiptpoints.core.dependencies import (
    PointsServiceDep,
    ReceiptStoreDep,
    SettingsDep,
)
from receiptpoints.models import Receipt, ReceiptProcessResponse
from receiptpoints.services.parsing import validate_receipt
from receiptpoints.services.receipt_store import ReceiptNotFoundError

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/receipts", tags=["receipts"])

RECEIPT_NOT_FOUND = "Receipt not found"


@router.post("/process")
async def process_receipt(
    receipt: Receipt,
    store: ReceiptStoreDep,
    settings: SettingsDep,
) -> ReceiptProcessResponse:
    """Store a receipt and return its generated id."""
    errors = validate_receipt(receipt)
    if errors:
        if settings.reject_invalid_receipts:
            logger.info(
                "Rejected receipt from %s: %d invalid fields",
                receipt.retailer,
                len(errors),
            )
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid receipt: " + "; ".join(str(e) for e in errors),
            )
        logger.warning(
            "Accepting receipt from %s with %d unparsable fields",
            receipt.retailer,
            len(errors),
        )

    try:
        receipt_id = store.put(receipt)
    except Exception as e:
        logger.exception("Failed to store receipt")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to store receipt",
        ) from e

    return ReceiptProcessResponse(id=receipt_id)


@router.get("/{receipt_id}/points")
async def get_points(receipt_id: str, service: PointsServiceDep) -> int:
    """Return the points awarded for a stored receipt."""
    try:
        return service.points(receipt_id)
    except ReceiptNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=RECEIPT_NOT_FOUND,
        ) from e
    except Exception as e:
        logger.exception("Failed to compute points for %s", receipt_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to compute points",
        ) from e
