# adapters/base.py
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional

from gst_core.errors import InvalidDateError, MissingFieldsError
from gst_core.models import (
    DEFAULT_CURRENCY,
    UNKNOWN_ITEM,
    UNKNOWN_STORE,
    ParsedItem,
    ParsedReceipt,
)
from parser.dates import parse_receipt_date

log = logging.getLogger("adapters")


@dataclass
class RawLineItem:
    """A provider line item; every field may be missing."""

    description: Optional[str] = None
    quantity: Optional[float] = None
    price: Optional[float] = None
    total: Optional[float] = None
    sku: Optional[str] = None

    @classmethod
    def from_mapping(cls, m: Mapping[str, Any]) -> "RawLineItem":
        return cls(
            description=m.get("description"),
            quantity=m.get("quantity"),
            price=m.get("price"),
            total=m.get("total"),
            sku=m.get("sku"),
        )


@dataclass
class RawReceiptPayload:
    """Provider-neutral view of an OCR response, before presence checks."""

    vendor_name: Optional[str] = None
    vendor_address: Optional[str] = None
    vendor_phone: Optional[str] = None
    total: Optional[float] = None
    subtotal: Optional[float] = None
    tax: Optional[float] = None
    date: Optional[str] = None
    time: Optional[str] = None
    payment_method: Optional[str] = None
    currency_code: Optional[str] = None
    confidence: Optional[float] = None
    line_items: List[RawLineItem] = field(default_factory=list)


def _absent(v: Any) -> bool:
    return v is None or (isinstance(v, str) and not v.strip())


def _to_item(li: RawLineItem) -> ParsedItem:
    unit_price = li.price if li.price is not None else 0.0
    if li.total is not None:
        total_price = li.total
    else:
        total_price = unit_price
    return ParsedItem(
        name=li.description or UNKNOWN_ITEM,
        quantity=li.quantity if li.quantity is not None else 1.0,
        unit_price=unit_price,
        total_price=total_price,
        sku=li.sku,
    )


class BaseAdapter(ABC):
    """Turn a provider OCR payload into a canonical ParsedReceipt."""

    provider: str = "generic"

    def __init__(self, default_currency: str = DEFAULT_CURRENCY):
        self.default_currency = default_currency

    @abstractmethod
    def extract(self, payload: Mapping[str, Any]) -> RawReceiptPayload: ...

    def build(self, payload: Mapping[str, Any]) -> ParsedReceipt:
        raw = self.extract(payload)

        missing = [k for k in ("total", "date") if _absent(getattr(raw, k))]
        if missing:
            raise MissingFieldsError(missing)

        purchase_date = parse_receipt_date(raw.date)
        if purchase_date is None:
            raise InvalidDateError(raw.date)

        receipt = ParsedReceipt(
            store_name=raw.vendor_name or UNKNOWN_STORE,
            total_amount=raw.total,
            purchase_date=purchase_date,
            purchase_time=raw.time,
            currency=raw.currency_code or self.default_currency,
            payment_method=raw.payment_method,
            tax_amount=raw.tax,
            items=[_to_item(li) for li in raw.line_items],
            confidence_score=raw.confidence,
            subtotal=raw.subtotal,
            store_address=raw.vendor_address,
            store_phone=raw.vendor_phone,
            raw_data=payload,
        )
        log.debug(
            "%s receipt: store=%s total=%s items=%d",
            self.provider,
            receipt.store_name,
            receipt.total_amount,
            len(receipt.items),
        )
        return receipt


def _vendor(payload: Mapping[str, Any]) -> Mapping[str, Any]:
    v = payload.get("vendor")
    return v if isinstance(v, Mapping) else {}


def _line_items(payload: Mapping[str, Any]) -> List[RawLineItem]:
    return [
        RawLineItem.from_mapping(li)
        for li in payload.get("line_items") or []
        if isinstance(li, Mapping)
    ]


# ---------------- Store-specific post-processing ----------------

StoreParser = Callable[[ParsedReceipt], ParsedReceipt]
_STORE_PARSERS: Dict[str, StoreParser] = {}


def register_store_parser(key: str) -> Callable[[StoreParser], StoreParser]:
    """Register a post-processor for receipts whose store name contains `key`."""

    def decorator(fn: StoreParser) -> StoreParser:
        _STORE_PARSERS[key.lower()] = fn
        return fn

    return decorator


def unregister_store_parser(key: str) -> None:
    _STORE_PARSERS.pop(key.lower(), None)


def apply_store_specific_parsing(receipt: ParsedReceipt) -> ParsedReceipt:
    """First registered key found in the store name wins; else unchanged."""
    store = receipt.store_name.lower()
    for key, fn in _STORE_PARSERS.items():
        if key in store:
            log.debug("Applying store parser %r to %s", key, receipt.store_name)
            return fn(receipt)
    return receipt
