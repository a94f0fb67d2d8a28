"""Parsers for the text-encoded fields of a receipt."""

from __future__ import annotations

import re
from datetime import date, time
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from receiptpoints.models.points import FieldError

if TYPE_CHECKING:
    from collections.abc import Callable

    from receiptpoints.models.receipt import Receipt

AMOUNT_PATTERN = re.compile(r"[0-9]+(\.[0-9]+)?")
DATE_PATTERN = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")
TIME_PATTERN = re.compile(r"[0-9]{2}:[0-9]{2}")


class ParseError(ValueError):
    """Raised when a receipt field cannot be parsed."""

    def __init__(self, field: str, value: str, reason: str) -> None:
        """Initialize with the offending field and raw value."""
        super().__init__(f"Invalid {field} {value!r}: {reason}")
        self.field = field
        self.value = value
        self.reason = reason

    def to_field_error(self) -> FieldError:
        """Convert to the serializable model."""
        return FieldError(field=self.field, value=self.value, reason=self.reason)


def parse_amount(field: str, text: str) -> Decimal:
    """Parse a decimal amount such as ``"35.35"`` exactly.

    Args:
        field: Wire name of the field, used in the error
        text: Raw amount text

    Returns:
        The amount as a Decimal

    Raises:
        ParseError: If the text is not a plain non-negative decimal number
    """
    if not AMOUNT_PATTERN.fullmatch(text):
        raise ParseError(field, text, "not a plain non-negative decimal number")
    return Decimal(text)


def parse_purchase_date(text: str) -> date:
    """Parse a ``YYYY-MM-DD`` calendar date."""
    if not DATE_PATTERN.fullmatch(text):
        raise ParseError("purchaseDate", text, "expected YYYY-MM-DD")
    try:
        return date.fromisoformat(text)
    except ValueError as e:
        raise ParseError("purchaseDate", text, str(e)) from e


def parse_purchase_time(text: str) -> time:
    """Parse a 24-hour ``HH:MM`` time of day."""
    if not TIME_PATTERN.fullmatch(text):
        raise ParseError("purchaseTime", text, "expected HH:MM")
    hour, minute = (int(part) for part in text.split(":"))
    try:
        return time(hour, minute)
    except ValueError as e:
        raise ParseError("purchaseTime", text, str(e)) from e


def _collect(
    errors: list[ParseError], parser: Callable[..., Any], *args: str
) -> None:
    try:
        parser(*args)
    except ParseError as e:
        errors.append(e)


def validate_receipt(receipt: Receipt) -> list[ParseError]:
    """Run every field parser over a receipt and collect the failures."""
    errors: list[ParseError] = []
    _collect(errors, parse_amount, "total", receipt.total)
    _collect(errors, parse_purchase_date, receipt.purchase_date)
    _collect(errors, parse_purchase_time, receipt.purchase_time)
    for index, item in enumerate(receipt.items):
        _collect(errors, parse_amount, f"items[{index}].price", item.price)
    return errors
