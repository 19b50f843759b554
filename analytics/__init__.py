"""
Analytics layer for the grocery spend tracker.

Trends, category insights, budget health, price comparison and
spending insights over normalized receipts and items.
"""

from .engine import (
    calculate_spending_trend,
    analyze_category_spending,
    assess_budget_health,
    compare_prices,
    generate_spending_insights,
)

from .calculations import (
    calculate_receipt_total,
    calculate_budget_progress,
    calculate_by_category,
    calculate_by_store,
    calculate_organic_percentage,
    calculate_average_basket,
    calculate_carbon_footprint,
    group_receipts_by_date,
    filter_receipts_by_date_range,
    get_current_month_receipts,
    get_budget_period_dates,
)

__all__ = [
    # Engine
    "calculate_spending_trend",
    "analyze_category_spending",
    "assess_budget_health",
    "compare_prices",
    "generate_spending_insights",
    # Aggregates
    "calculate_receipt_total",
    "calculate_budget_progress",
    "calculate_by_category",
    "calculate_by_store",
    "calculate_organic_percentage",
    "calculate_average_basket",
    "calculate_carbon_footprint",
    "group_receipts_by_date",
    "filter_receipts_by_date_range",
    "get_current_month_receipts",
    "get_budget_period_dates",
]
