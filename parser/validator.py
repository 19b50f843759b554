# parser/validator.py
"""
Advisory checks over a canonical receipt.

Nothing here blocks ingestion: callers get the full list of problems
(for display) and decide what to do with it.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from gst_core.models import UNKNOWN_ITEM, UNKNOWN_STORE, ParsedReceipt

# Allow 1 cent difference between line items and the printed total.
TOTAL_TOLERANCE = Decimal("0.01")
MAX_AGE_YEARS = 5


@dataclass
class ValidationResult:
    is_valid: bool
    errors: List[str] = field(default_factory=list)


def _money(x) -> Decimal:
    return Decimal(str(x if x is not None else 0))


def _fmt(d: Decimal) -> str:
    return format(d.normalize(), "f")


def _years_before(d: date, years: int) -> date:
    try:
        return d.replace(year=d.year - years)
    except ValueError:  # Feb 29
        return d.replace(year=d.year - years, day=28)


def _check_date(purchase_date, today: date, errors: List[str]) -> None:
    if isinstance(purchase_date, datetime):
        purchase_date = purchase_date.date()
    if not isinstance(purchase_date, date):
        errors.append("Invalid purchase date")
        return
    if purchase_date > today:
        errors.append("Purchase date cannot be in the future")
    if purchase_date < _years_before(today, MAX_AGE_YEARS):
        errors.append("Purchase date seems too old (more than 5 years ago)")


def validate_parsed_receipt(
    receipt: ParsedReceipt, today: Optional[date] = None
) -> ValidationResult:
    """Run every rule and collect all violations; never raises."""
    today = today or date.today()
    errors: List[str] = []

    if not receipt.store_name or receipt.store_name == UNKNOWN_STORE:
        errors.append("Store name is missing or could not be parsed")

    if receipt.total_amount is None or receipt.total_amount <= 0:
        errors.append("Total amount must be positive")

    _check_date(receipt.purchase_date, today, errors)

    if not receipt.items:
        errors.append("Receipt must have at least one item")
    else:
        for idx, item in enumerate(receipt.items, start=1):
            if not item.name or item.name == UNKNOWN_ITEM:
                errors.append(f"Item {idx}: Missing item name")
            if item.quantity <= 0:
                errors.append(f"Item {idx}: Quantity must be positive")
            if item.unit_price < 0:
                errors.append(f"Item {idx}: Unit price cannot be negative")
            if item.total_price < 0:
                errors.append(f"Item {idx}: Total price cannot be negative")

        items_total = sum((_money(i.total_price) for i in receipt.items), Decimal("0"))
        receipt_total = _money(receipt.total_amount)
        if abs(items_total - receipt_total) > TOTAL_TOLERANCE:
            errors.append(
                f"Items total ({_fmt(items_total)}) does not match "
                f"receipt total ({_fmt(receipt_total)})"
            )

    if receipt.confidence_score is not None:
        if receipt.confidence_score < 0 or receipt.confidence_score > 1:
            errors.append("Confidence score must be between 0 and 1")

    return ValidationResult(is_valid=not errors, errors=errors)
