# analytics/calculations.py
"""Small aggregate helpers over receipts/items, plus budget period windows."""
from __future__ import annotations

import calendar
from collections import defaultdict
from datetime import date, datetime, time, timedelta
from typing import Dict, Iterable, List, Optional, Tuple, Union

from gst_core.models import (
    BudgetPeriod,
    BudgetProgress,
    ProductCategory,
    Receipt,
    ReceiptItem,
)

DateLike = Union[date, datetime]


def as_date(d: DateLike) -> date:
    return d.date() if isinstance(d, datetime) else d


def as_datetime(d: DateLike) -> datetime:
    return d if isinstance(d, datetime) else datetime.combine(d, time.min)


def _end_of_day(d: date) -> datetime:
    return datetime.combine(d, time.max)


def get_budget_period_dates(
    period: Union[BudgetPeriod, str], start_date: Optional[DateLike] = None
) -> Tuple[datetime, datetime]:
    """
    Window containing `start_date` (default: today):
      weekly  -> Sunday 00:00 .. Saturday 23:59:59.999999
      monthly -> first .. last day of the calendar month
      yearly  -> Jan 1 .. Dec 31
    """
    anchor = as_date(start_date) if start_date is not None else date.today()
    period = BudgetPeriod(period)

    if period is BudgetPeriod.WEEKLY:
        days_since_sunday = (anchor.weekday() + 1) % 7
        start = anchor - timedelta(days=days_since_sunday)
        end = start + timedelta(days=6)
    elif period is BudgetPeriod.MONTHLY:
        start = anchor.replace(day=1)
        end = anchor.replace(day=calendar.monthrange(anchor.year, anchor.month)[1])
    else:
        start = date(anchor.year, 1, 1)
        end = date(anchor.year, 12, 31)

    return datetime.combine(start, time.min), _end_of_day(end)


def calculate_receipt_total(items: Iterable[ReceiptItem]) -> float:
    return sum(i.total_price for i in items)


def calculate_budget_progress(receipts: Iterable[Receipt], budget_amount: float) -> BudgetProgress:
    spent = sum(r.total_amount for r in receipts)
    percentage = min(spent / budget_amount * 100, 100.0) if budget_amount > 0 else 0.0
    return BudgetProgress(
        spent=spent,
        budget=budget_amount,
        percentage=percentage,
        remaining=max(budget_amount - spent, 0.0),
        is_exceeded=spent > budget_amount,
    )


def calculate_by_category(items: Iterable[ReceiptItem]) -> Dict[ProductCategory, float]:
    out: Dict[ProductCategory, float] = defaultdict(float)
    for i in items:
        out[ProductCategory(i.category)] += i.total_price
    return dict(out)


def calculate_by_store(receipts: Iterable[Receipt]) -> Dict[str, float]:
    out: Dict[str, float] = defaultdict(float)
    for r in receipts:
        out[r.store_name] += r.total_amount
    return dict(out)


def calculate_organic_percentage(items: Iterable[ReceiptItem]) -> float:
    items = list(items)
    total = sum(i.total_price for i in items)
    if not items or total <= 0:
        return 0.0
    organic = sum(i.total_price for i in items if i.is_organic)
    return organic / total * 100


def calculate_average_basket(receipts: Iterable[Receipt]) -> float:
    receipts = list(receipts)
    if not receipts:
        return 0.0
    return sum(r.total_amount for r in receipts) / len(receipts)


def calculate_carbon_footprint(items: Iterable[ReceiptItem]) -> float:
    """Grams of CO2e; items without a score count as zero."""
    return sum(i.carbon_score or 0 for i in items)


def group_receipts_by_date(receipts: Iterable[Receipt]) -> Dict[str, float]:
    out: Dict[str, float] = defaultdict(float)
    for r in receipts:
        out[as_date(r.purchase_date).isoformat()] += r.total_amount
    return dict(out)


def filter_receipts_by_date_range(
    receipts: Iterable[Receipt], start: DateLike, end: DateLike
) -> List[Receipt]:
    """Inclusive on both ends."""
    lo, hi = as_datetime(start), as_datetime(end)
    return [r for r in receipts if lo <= as_datetime(r.purchase_date) <= hi]


def get_current_month_receipts(
    receipts: Iterable[Receipt], today: Optional[date] = None
) -> List[Receipt]:
    start, end = get_budget_period_dates(BudgetPeriod.MONTHLY, today or date.today())
    return filter_receipts_by_date_range(receipts, start, end)
