# tests/conftest.py
from datetime import date

import pytest
import yaml

from gst_core.models import ParsedItem, ParsedReceipt, Receipt, ReceiptItem


@pytest.fixture
def veryfi_payload():
    return {
        "vendor": {"name": "ICA Maxi", "address": "Storgatan 1", "phone_number": "08-123 45"},
        "total": 72.5,
        "subtotal": 65.0,
        "tax": 7.5,
        "date": "2025-10-08",
        "time": "14:32",
        "payment": {"type": "card"},
        "currency_code": "SEK",
        "confidence": 0.92,
        "line_items": [
            {"description": "Banana", "quantity": 2, "price": 6.25, "total": 12.5, "sku": "4011"},
            {"description": "Chicken Breast", "quantity": 1, "price": 60, "total": 60},
        ],
    }


@pytest.fixture
def ocr_payload():
    return {
        "vendor": {"name": "Coop", "phone": "08-999"},
        "total": 25,
        "date": "08.10.2025",
        "payment_method": "cash",
        "line_items": [{"description": "Mjölk", "price": 25}],
    }


@pytest.fixture
def make_parsed_receipt():
    """Valid canonical receipt; override any field via kwargs."""

    def _make(**overrides):
        fields = dict(
            store_name="ICA Maxi",
            total_amount=72.5,
            purchase_date=date(2025, 10, 8),
            items=[
                ParsedItem(name="Banana", quantity=2, unit_price=6.25, total_price=12.5),
                ParsedItem(name="Chicken Breast", quantity=1, unit_price=60, total_price=60),
            ],
            confidence_score=0.9,
        )
        fields.update(overrides)
        return ParsedReceipt(**fields)

    return _make


@pytest.fixture
def banana_history():
    """Two receipts at different stores with a banana on each."""
    r1 = Receipt(
        id="r1",
        household_id="h1",
        store_name="ICA",
        total_amount=30,
        purchase_date=date(2025, 10, 1),
        items=[
            ReceiptItem(id="i1", receipt_id="r1", name="Banana", unit_price=10, total_price=10,
                        category="fruits_vegetables"),
            ReceiptItem(id="i2", receipt_id="r1", name="Milk", unit_price=20, total_price=20,
                        category="dairy_eggs"),
        ],
    )
    r2 = Receipt(
        id="r2",
        household_id="h1",
        store_name="Coop",
        total_amount=12,
        purchase_date=date(2025, 10, 5),
        items=[
            ReceiptItem(id="i3", receipt_id="r2", name="Organic Bananas", unit_price=12,
                        total_price=12, category="fruits_vegetables"),
        ],
    )
    receipts = [r1, r2]
    items = [i for r in receipts for i in r.items]
    return receipts, items


@pytest.fixture
def household_file(tmp_path):
    data = {
        "budget": {
            "id": "b1",
            "name": "Groceries",
            "amount": 1000,
            "period": "monthly",
            "start_date": "2025-10-01",
        },
        "receipts": [
            {
                "id": "r1",
                "store_name": "ICA",
                "total_amount": 30,
                "purchase_date": "2025-10-01",
                "items": [
                    {"id": "i1", "name": "Banana", "unit_price": 10, "total_price": 10,
                     "category": "fruits_vegetables", "is_organic": True, "carbon_score": 80},
                    {"id": "i2", "name": "Milk", "unit_price": 20, "total_price": 20,
                     "category": "dairy_eggs"},
                ],
            },
            {
                "id": "r2",
                "store_name": "Coop",
                "total_amount": 20,
                "purchase_date": "2025-10-05",
                "items": [
                    {"id": "i3", "name": "Banana", "unit_price": 12, "total_price": 12,
                     "category": "fruits_vegetables"},
                    {"id": "i4", "name": "Bread", "unit_price": 8, "total_price": 8,
                     "category": "bread_bakery"},
                ],
            },
        ],
    }
    p = tmp_path / "household.yaml"
    p.write_text(yaml.safe_dump(data, allow_unicode=True), encoding="utf-8")
    return p
