# adapters/generic.py
from __future__ import annotations

from typing import Any, Mapping

from adapters.base import BaseAdapter, RawReceiptPayload, _line_items, _vendor
from gst_core.models import DEFAULT_CURRENCY, ParsedReceipt


class GenericOCRAdapter(BaseAdapter):
    """Provider-neutral OCR shape: flat `payment_method`, vendor {name, address, phone}."""

    provider = "ocr"

    def extract(self, payload: Mapping[str, Any]) -> RawReceiptPayload:
        vendor = _vendor(payload)
        return RawReceiptPayload(
            vendor_name=vendor.get("name"),
            vendor_address=vendor.get("address"),
            vendor_phone=vendor.get("phone"),
            total=payload.get("total"),
            subtotal=payload.get("subtotal"),
            tax=payload.get("tax"),
            date=payload.get("date"),
            time=payload.get("time"),
            payment_method=payload.get("payment_method"),
            currency_code=payload.get("currency_code"),
            confidence=payload.get("confidence"),
            line_items=_line_items(payload),
        )


def parse_ocr_receipt(
    payload: Mapping[str, Any], default_currency: str = DEFAULT_CURRENCY
) -> ParsedReceipt:
    return GenericOCRAdapter(default_currency).build(payload)
