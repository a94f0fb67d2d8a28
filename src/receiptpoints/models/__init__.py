"""Receipt points models package."""

from .points import FieldError, PointsBreakdown, RuleResult
from .receipt import Item, Receipt, ReceiptProcessResponse

__all__ = [
    "FieldError",
    "Item",
    "PointsBreakdown",
    "Receipt",
    "ReceiptProcessResponse",
    "RuleResult",
]
