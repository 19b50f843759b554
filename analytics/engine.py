# analytics/engine.py
"""
Analytics over normalized receipts, items and budgets.

All functions are pure: they take snapshots and recompute on every call.
Empty input never raises; it yields zeroed / neutral results.
"""
from __future__ import annotations

import logging
import math
from collections import Counter
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from analytics.calculations import as_date, as_datetime, get_budget_period_dates
from gst_core.models import (
    Budget,
    BudgetHealth,
    BudgetStatus,
    CategoryInsights,
    InsightType,
    PriceComparison,
    ProductCategory,
    Receipt,
    ReceiptItem,
    SpendingInsight,
    StorePrice,
    TopItem,
    TrendAnalysis,
    TrendDataPoint,
    TrendDirection,
    TrendPeriod,
)

log = logging.getLogger("analytics")

STABLE_THRESHOLD_PCT = 5.0
STATUS_MARGIN_PCT = 10.0
TOP_ITEMS_PER_CATEGORY = 5
EXPENSIVE_UNIT_PRICE = 50
FREQUENT_PURCHASE_COUNT = 5
MAX_LISTED = 3
SECONDS_PER_DAY = 86400


# ---------------- Spending trend ----------------


def _bucket(d: date, period: TrendPeriod) -> Tuple[str, date]:
    """(key, representative date) for the bucket containing `d`."""
    if period is TrendPeriod.DAILY:
        return d.isoformat(), d
    if period is TrendPeriod.WEEKLY:
        iso_year, iso_week, _ = d.isocalendar()
        return f"{iso_year}-W{iso_week:02d}", date.fromisocalendar(iso_year, iso_week, 1)
    return f"{d.year}-{d.month:02d}", d.replace(day=1)


def _trend_direction(amounts: Sequence[float]) -> Tuple[TrendDirection, float]:
    """Least-squares slope over bucket index + first-to-last change percentage."""
    n = len(amounts)
    if n < 2:
        return TrendDirection.STABLE, 0.0

    xs = range(n)
    sum_x = sum(xs)
    sum_y = sum(amounts)
    sum_xy = sum(x * y for x, y in zip(xs, amounts))
    sum_xx = sum(x * x for x in xs)
    slope = (n * sum_xy - sum_x * sum_y) / (n * sum_xx - sum_x * sum_x)

    first, last = amounts[0], amounts[-1]
    change = 0.0 if first == 0 else (last - first) / first * 100

    if abs(change) < STABLE_THRESHOLD_PCT:
        return TrendDirection.STABLE, 0.0
    direction = TrendDirection.INCREASING if slope > 0 else TrendDirection.DECREASING
    return direction, round(change, 1)


def calculate_spending_trend(
    receipts: Sequence[Receipt], period: Union[TrendPeriod, str]
) -> TrendAnalysis:
    period = TrendPeriod(period)
    if not receipts:
        return TrendAnalysis(
            period=period,
            data_points=[],
            average=0.0,
            trend=TrendDirection.STABLE,
            change_percentage=0.0,
        )

    totals: Dict[str, float] = {}
    bucket_dates: Dict[str, date] = {}
    for r in receipts:
        key, when = _bucket(as_date(r.purchase_date), period)
        totals[key] = totals.get(key, 0.0) + r.total_amount
        bucket_dates[key] = when

    data_points = sorted(
        (TrendDataPoint(date=bucket_dates[k], amount=v) for k, v in totals.items()),
        key=lambda dp: dp.date,
    )
    amounts = [dp.amount for dp in data_points]
    trend, change = _trend_direction(amounts)

    return TrendAnalysis(
        period=period,
        data_points=data_points,
        average=sum(amounts) / len(amounts),
        trend=trend,
        change_percentage=change,
    )


# ---------------- Category insights ----------------


def analyze_category_spending(items: Iterable[ReceiptItem]) -> List[CategoryInsights]:
    items = list(items)
    by_category: Dict[ProductCategory, List[ReceiptItem]] = {}
    for item in items:
        by_category.setdefault(ProductCategory(item.category), []).append(item)

    total_spent = sum(i.total_price for i in items)
    insights: List[CategoryInsights] = []

    for category, cat_items in by_category.items():
        cat_total = sum(i.total_price for i in cat_items)

        freq: Dict[str, List[float]] = {}
        for i in cat_items:
            freq.setdefault(i.name.lower(), []).append(i.total_price)
        top_items = sorted(
            (TopItem(name=n, frequency=len(p), total_spent=sum(p)) for n, p in freq.items()),
            key=lambda t: t.total_spent,
            reverse=True,
        )[:TOP_ITEMS_PER_CATEGORY]

        insights.append(
            CategoryInsights(
                category=category,
                total_spent=cat_total,
                percentage_of_budget=cat_total / total_spent * 100 if total_spent > 0 else 0.0,
                item_count=len(cat_items),
                average_item_price=cat_total / len(cat_items) if cat_items else 0.0,
                # no history to compare against yet
                trend=TrendDirection.STABLE,
                top_items=top_items,
            )
        )

    insights.sort(key=lambda c: c.total_spent, reverse=True)
    return insights


# ---------------- Budget health ----------------


def _days_between(start: datetime, end: datetime) -> int:
    return math.ceil((end - start).total_seconds() / SECONDS_PER_DAY)


def _status(spent_pct: float, progress_pct: float) -> BudgetStatus:
    if spent_pct <= progress_pct - STATUS_MARGIN_PCT:
        return BudgetStatus.EXCELLENT
    if spent_pct <= progress_pct + STATUS_MARGIN_PCT:
        return BudgetStatus.GOOD
    if spent_pct <= 100:
        return BudgetStatus.WARNING
    return BudgetStatus.CRITICAL


def assess_budget_health(
    budget: Budget,
    receipts: Iterable[Receipt],
    current_date: Optional[Union[date, datetime]] = None,
) -> BudgetHealth:
    now = as_datetime(current_date) if current_date is not None else datetime.now()
    total_spent = sum(r.total_amount for r in receipts)
    remaining = budget.amount - total_spent

    start, end = get_budget_period_dates(budget.period, budget.start_date)
    total_days = _days_between(start, end)
    days_elapsed = _days_between(start, now)
    days_remaining = max(0, total_days - days_elapsed)

    daily_budget_remaining = remaining / days_remaining if days_remaining > 0 else 0.0
    daily_average = total_spent / days_elapsed if days_elapsed > 0 else 0.0
    projected_overspend = max(0.0, daily_average * total_days - budget.amount)

    if budget.amount > 0:
        spent_pct = total_spent / budget.amount * 100
    else:
        spent_pct = 0.0 if total_spent <= 0 else math.inf
    progress_pct = days_elapsed / total_days * 100

    status = _status(spent_pct, progress_pct)

    recommendations: List[str] = []
    if status in (BudgetStatus.WARNING, BudgetStatus.CRITICAL):
        recommendations.append(f"Reduce daily spending to {daily_budget_remaining:.2f} or less")
    if projected_overspend > 0:
        recommendations.append(f"On track to exceed budget by {projected_overspend:.2f}")
    if status is BudgetStatus.EXCELLENT:
        recommendations.append("Great job staying under budget!")

    log.debug(
        "Budget %s: spent=%.2f (%.1f%%) elapsed=%d/%d days -> %s",
        budget.name,
        total_spent,
        spent_pct,
        days_elapsed,
        total_days,
        status.value,
    )
    return BudgetHealth(
        status=status,
        days_remaining=days_remaining,
        daily_budget_remaining=daily_budget_remaining,
        projected_overspend=projected_overspend,
        recommendations=recommendations,
        spent_percentage=spent_pct,
        progress_percentage=progress_pct,
    )


# ---------------- Price comparison ----------------


def compare_prices(
    item_name: str, items: Iterable[ReceiptItem], receipts: Iterable[Receipt]
) -> Optional[PriceComparison]:
    """
    Fuzzy, bidirectional substring match on item names.
    `current_price` is the last match in input order, not the most recent by date.
    """
    query = item_name.lower().strip()
    matches = [
        i for i in items if query in i.name.lower() or i.name.lower() in query
    ]
    if not matches:
        return None

    receipts_by_id: Dict[str, Receipt] = {}
    for r in receipts:
        receipts_by_id.setdefault(r.id, r)

    stores: List[StorePrice] = []
    for i in matches:
        r = receipts_by_id.get(i.receipt_id)
        stores.append(
            StorePrice(
                store_name=r.store_name if r and r.store_name else "Unknown",
                price=i.unit_price,
                date=r.purchase_date if r and r.purchase_date else datetime.now(),
            )
        )

    prices = [s.price for s in stores]
    return PriceComparison(
        item_name=matches[0].name,
        current_price=prices[-1],
        average_price=sum(prices) / len(prices),
        lowest_price=min(prices),
        highest_price=max(prices),
        stores=stores,
    )


# ---------------- Spending insights ----------------


def generate_spending_insights(
    receipts: Iterable[Receipt], items: Iterable[ReceiptItem], budget: Budget
) -> List[SpendingInsight]:
    """Independent heuristics; every one that applies is returned."""
    items = list(items)
    insights: List[SpendingInsight] = []

    expensive = sorted(
        (i for i in items if i.unit_price > EXPENSIVE_UNIT_PRICE),
        key=lambda i: i.unit_price,
        reverse=True,
    )[:MAX_LISTED]
    if expensive:
        insights.append(
            SpendingInsight(
                type=InsightType.TIP,
                title="High-value items detected",
                description="Consider price comparing: " + ", ".join(i.name for i in expensive),
            )
        )

    total_spent = sum(r.total_amount for r in receipts)
    if budget.amount > 0:
        usage = total_spent / budget.amount * 100
        if usage < 50:
            insights.append(
                SpendingInsight(
                    type=InsightType.ACHIEVEMENT,
                    title="Great budgeting!",
                    description=f"You've only used {usage:.0f}% of your budget",
                    amount=total_spent,
                )
            )

    counts = Counter(i.name.lower() for i in items)
    frequent = [name for name, n in counts.items() if n >= FREQUENT_PURCHASE_COUNT]
    if frequent:
        insights.append(
            SpendingInsight(
                type=InsightType.TIP,
                title="Frequent purchases",
                description="Consider buying in bulk: " + ", ".join(frequent[:MAX_LISTED]),
            )
        )

    return insights
