"""Services for storing and scoring receipts."""

from .id_generator import ReceiptIDGenerator
from .parsing import ParseError, validate_receipt
from .points import PointsService, compute_points, score_receipt
from .receipt_store import ReceiptNotFoundError, ReceiptStore, ReceiptStoreError

__all__ = [
    "ParseError",
    "PointsService",
    "ReceiptIDGenerator",
    "ReceiptNotFoundError",
    "ReceiptStore",
    "ReceiptStoreError",
    "compute_points",
    "score_receipt",
    "validate_receipt",
]
