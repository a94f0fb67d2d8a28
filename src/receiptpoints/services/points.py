"""Points rule engine for stored receipts."""

from __future__ import annotations

import logging
import threading
from datetime import time
from decimal import ROUND_CEILING, Decimal, getcontext, localcontext
from typing import TYPE_CHECKING

from cachetools import LRUCache

from receiptpoints.core.logging_config import get_diagnostics_logger
from receiptpoints.models.points import PointsBreakdown, RuleResult
from receiptpoints.services.parsing import (
    ParseError,
    parse_amount,
    parse_purchase_date,
    parse_purchase_time,
)

if TYPE_CHECKING:
    from contextlib import AbstractContextManager
    from decimal import Context

    from receiptpoints.models.receipt import Receipt
    from receiptpoints.services.receipt_store import ReceiptStore

logger = logging.getLogger(__name__)

# Rule constants
ROUND_DOLLAR_POINTS = 50
QUARTER_MULTIPLE_POINTS = 25
ITEM_PAIR_POINTS = 5
ODD_DAY_POINTS = 6
AFTERNOON_POINTS = 10
DESCRIPTION_LENGTH_DIVISOR = 3
DESCRIPTION_PRICE_MULTIPLIER = Decimal("0.2")
QUARTER = Decimal("0.25")
AFTERNOON_START = time(14, 0)
AFTERNOON_END = time(16, 0)
# Extra digits beyond the operands so products and remainders stay exact.
PRECISION_MARGIN = 4


class _Scoring:
    """Accumulates rule results and parse failures for one receipt."""

    def __init__(self, receipt: Receipt) -> None:
        self.receipt = receipt
        self.rules: list[RuleResult] = []
        self.errors: list[ParseError] = []

    def add(self, rule: str, points: int, reason: str) -> None:
        logger.debug("Rule %s: %d points (%s)", rule, points, reason)
        self.rules.append(RuleResult(rule=rule, points=points, reason=reason))

    def record(self, error: ParseError) -> None:
        self.errors.append(error)
        get_diagnostics_logger().warning(
            "Scoring %s as zero: %s",
            error.field,
            error,
            extra={"field": error.field, "value": error.value, "reason": error.reason},
        )

    def amount(self, field: str, text: str) -> Decimal | None:
        try:
            return parse_amount(field, text)
        except ParseError as e:
            self.record(e)
            return None

    def breakdown(self) -> PointsBreakdown:
        return PointsBreakdown(
            rules=tuple(self.rules),
            errors=tuple(error.to_field_error() for error in self.errors),
        )


def exact_context(amount: Decimal) -> AbstractContextManager[Context]:
    """Decimal context wide enough to work with ``amount`` without rounding."""
    digits = len(amount.as_tuple().digits) + PRECISION_MARGIN
    return localcontext(prec=max(getcontext().prec, digits))


def is_alphanumeric(char: str) -> bool:
    """Return True for ASCII letters and digits only."""
    return char.isascii() and char.isalnum()


def _retailer_name(scoring: _Scoring) -> None:
    count = sum(1 for char in scoring.receipt.retailer if is_alphanumeric(char))
    scoring.add(
        "retailer_name",
        count,
        f"{count} alphanumeric characters in {scoring.receipt.retailer!r}",
    )


def _total_rules(scoring: _Scoring) -> None:
    total = scoring.amount("total", scoring.receipt.total)

    round_dollar = False
    quarter = False
    if total is not None:
        with exact_context(total):
            round_dollar = total == total.to_integral_value()
            quarter = total > 0 and total % QUARTER == 0

    scoring.add(
        "round_dollar",
        ROUND_DOLLAR_POINTS if round_dollar else 0,
        "total is a round dollar amount"
        if round_dollar
        else "total has cents or did not parse",
    )
    scoring.add(
        "quarter_multiple",
        QUARTER_MULTIPLE_POINTS if quarter else 0,
        "total is a multiple of 0.25"
        if quarter
        else "total is not a positive multiple of 0.25",
    )


def _item_pairs(scoring: _Scoring) -> None:
    pairs = len(scoring.receipt.items) // 2
    scoring.add("item_pairs", pairs * ITEM_PAIR_POINTS, f"{pairs} pairs of items")


def _description_length(scoring: _Scoring) -> None:
    points = 0
    scored = 0
    for index, item in enumerate(scoring.receipt.items):
        length = len(item.short_description.strip())
        # An empty description is not a multiple of 3.
        if length == 0 or length % DESCRIPTION_LENGTH_DIVISOR != 0:
            continue
        price = scoring.amount(f"items[{index}].price", item.price)
        if price is None:
            continue
        with exact_context(price):
            bonus = (price * DESCRIPTION_PRICE_MULTIPLIER).to_integral_value(
                rounding=ROUND_CEILING
            )
        points += int(bonus)
        scored += 1
    scoring.add(
        "description_length",
        points,
        f"{scored} items with a description length that is a multiple of 3",
    )


def _odd_day(scoring: _Scoring) -> None:
    try:
        purchase_date = parse_purchase_date(scoring.receipt.purchase_date)
    except ParseError as e:
        scoring.record(e)
        scoring.add("odd_day", 0, "purchase date did not parse")
        return
    odd = purchase_date.day % 2 == 1
    scoring.add(
        "odd_day",
        ODD_DAY_POINTS if odd else 0,
        f"day {purchase_date.day} is {'odd' if odd else 'even'}",
    )


def _afternoon(scoring: _Scoring) -> None:
    try:
        purchase_time = parse_purchase_time(scoring.receipt.purchase_time)
    except ParseError as e:
        scoring.record(e)
        scoring.add("afternoon", 0, "purchase time did not parse")
        return
    inside = AFTERNOON_START < purchase_time < AFTERNOON_END
    scoring.add(
        "afternoon",
        AFTERNOON_POINTS if inside else 0,
        f"purchased at {purchase_time:%H:%M}, "
        f"{'inside' if inside else 'outside'} 14:00-16:00",
    )


RULES = (
    _retailer_name,
    _total_rules,
    _item_pairs,
    _description_length,
    _odd_day,
    _afternoon,
)


def score_receipt(receipt: Receipt) -> PointsBreakdown:
    """Score a receipt rule by rule.

    Every rule runs; none suppresses another. A field that does not parse is
    recorded in the breakdown and on the diagnostics logger, and the rules
    that depend on it contribute nothing.

    Args:
        receipt: Receipt to score

    Returns:
        Breakdown whose total is the receipt's points
    """
    scoring = _Scoring(receipt)
    for rule in RULES:
        rule(scoring)
    breakdown = scoring.breakdown()
    logger.debug("Scored receipt from %s: %d points", receipt.retailer, breakdown.total)
    return breakdown


def compute_points(receipt: Receipt) -> int:
    """Compute the points awarded for a receipt."""
    return score_receipt(receipt).total


class PointsService:
    """Looks receipts up in the store and scores them.

    Stored receipts never change, so breakdowns are memoized per id.
    """

    def __init__(self, store: ReceiptStore, cache_size: int = 1024) -> None:
        """Initialize the service.

        Args:
            store: Store the receipts are read from
            cache_size: Number of breakdowns to keep, 0 disables caching
        """
        self.store = store
        self._cache: LRUCache[str, PointsBreakdown] | None = (
            LRUCache(maxsize=cache_size) if cache_size > 0 else None
        )
        self._lock = threading.Lock()

    def breakdown(self, receipt_id: str) -> PointsBreakdown:
        """Per-rule breakdown for a stored receipt.

        Raises:
            ReceiptNotFoundError: If no receipt is stored under the id
        """
        if self._cache is not None:
            with self._lock:
                cached = self._cache.get(receipt_id)
            if cached is not None:
                logger.debug("Cache hit for receipt %s", receipt_id)
                return cached

        result = score_receipt(self.store.get(receipt_id))

        if self._cache is not None:
            with self._lock:
                self._cache[receipt_id] = result
        return result

    def points(self, receipt_id: str) -> int:
        """Points for a stored receipt."""
        return self.breakdown(receipt_id).total

    def cache_info(self) -> dict[str, int]:
        """Current cache occupancy."""
        if self._cache is None:
            return {"maxsize": 0, "currsize": 0}
        with self._lock:
            return {
                "maxsize": int(self._cache.maxsize),
                "currsize": self._cache.currsize,
            }
