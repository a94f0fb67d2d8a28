"""Identifier generation for stored receipts."""

from __future__ import annotations

import uuid


class ReceiptIDGenerator:
    """Generates random 128-bit identifiers in canonical UUID form."""

    def generate(self) -> str:
        """Return a new identifier such as ``7fb1377b-b223-49d9-a31a-5a02701dd310``."""
        return str(uuid.uuid4())
