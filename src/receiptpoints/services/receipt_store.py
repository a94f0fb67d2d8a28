"""In-memory storage for submitted receipts."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from receiptpoints.services.id_generator import ReceiptIDGenerator

if TYPE_CHECKING:
    from receiptpoints.models.receipt import Receipt

logger = logging.getLogger(__name__)


class ReceiptStoreError(Exception):
    """Base exception for receipt store errors."""


class ReceiptNotFoundError(ReceiptStoreError, KeyError):
    """Raised when no receipt is stored under an id."""

    def __init__(self, receipt_id: str) -> None:
        """Initialize with the id that was looked up."""
        super().__init__(receipt_id)
        self.receipt_id = receipt_id

    def __str__(self) -> str:
        """Readable message instead of KeyError's repr."""
        return f"Receipt not found: {self.receipt_id}"


class ReceiptStore:
    """Thread-safe mapping of generated ids to receipts.

    Receipts can be added and looked up; they are never updated or removed
    and live only as long as the process.
    """

    def __init__(self, id_generator: ReceiptIDGenerator | None = None) -> None:
        """Initialize an empty store.

        Args:
            id_generator: Source of new ids, a UUID4 generator by default
        """
        self.id_generator = id_generator or ReceiptIDGenerator()
        self._receipts: dict[str, Receipt] = {}
        self._lock = threading.Lock()

    def put(self, receipt: Receipt) -> str:
        """Store a receipt under a fresh id and return the id."""
        with self._lock:
            receipt_id = self.id_generator.generate()
            while receipt_id in self._receipts:
                logger.warning("Generated id %s already in use, retrying", receipt_id)
                receipt_id = self.id_generator.generate()
            self._receipts[receipt_id] = receipt
        logger.info("Stored receipt %s from %s", receipt_id, receipt.retailer)
        return receipt_id

    def get(self, receipt_id: str) -> Receipt:
        """Return the receipt stored under an id.

        Raises:
            ReceiptNotFoundError: If the id is unknown
        """
        with self._lock:
            receipt = self._receipts.get(receipt_id)
        if receipt is None:
            raise ReceiptNotFoundError(receipt_id)
        return receipt

    def __contains__(self, receipt_id: object) -> bool:
        with self._lock:
            return receipt_id in self._receipts

    def __len__(self) -> int:
        with self._lock:
            return len(self._receipts)
