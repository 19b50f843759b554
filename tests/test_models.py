from datetime import date

import pytest

from gst_core.models import (
    Budget,
    BudgetPeriod,
    CategoryPrediction,
    ProductCategory,
    Receipt,
    to_dict,
)


def test_receipt_from_dict_links_items():
    r = Receipt.from_dict(
        {
            "id": "r9",
            "store_name": "",
            "total_amount": "42.5",
            "purchase_date": "05.10.2025",
            "items": [{"id": "i1", "name": "Banana", "category": "fruits_vegetables"}],
        }
    )
    assert r.store_name == "Unknown Store"
    assert r.total_amount == 42.5
    assert r.purchase_date == date(2025, 10, 5)
    assert r.currency == "SEK"
    (item,) = r.items
    assert item.receipt_id == "r9"
    assert item.category is ProductCategory.FRUITS_VEGETABLES
    assert item.quantity == 1


def test_budget_from_dict():
    b = Budget.from_dict({"amount": 500, "period": "weekly", "start_date": date(2025, 10, 5)})
    assert b.period is BudgetPeriod.WEEKLY
    assert b.amount == 500.0
    with pytest.raises(KeyError):
        Budget.from_dict({"period": "weekly"})
    with pytest.raises(ValueError):
        Budget.from_dict({"amount": 1, "period": "daily"})


def test_to_dict_is_json_friendly():
    pred = CategoryPrediction(category=ProductCategory.PANTRY, confidence=0.5)
    assert to_dict([pred, date(2025, 10, 8)]) == [
        {"category": "pantry", "confidence": 0.5, "reasoning": None},
        "2025-10-08",
    ]
