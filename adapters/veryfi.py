# adapters/veryfi.py
from __future__ import annotations

from typing import Any, Mapping

from adapters.base import BaseAdapter, RawReceiptPayload, _line_items, _vendor
from gst_core.models import DEFAULT_CURRENCY, ParsedReceipt


class VeryfiAdapter(BaseAdapter):
    """
    Veryfi document response:
    - vendor {name, address, phone_number}
    - payment {type}
    """

    provider = "veryfi"

    def extract(self, payload: Mapping[str, Any]) -> RawReceiptPayload:
        vendor = _vendor(payload)
        payment = payload.get("payment")
        return RawReceiptPayload(
            vendor_name=vendor.get("name"),
            vendor_address=vendor.get("address"),
            vendor_phone=vendor.get("phone_number"),
            total=payload.get("total"),
            subtotal=payload.get("subtotal"),
            tax=payload.get("tax"),
            date=payload.get("date"),
            time=payload.get("time"),
            payment_method=payment.get("type") if isinstance(payment, Mapping) else None,
            currency_code=payload.get("currency_code"),
            confidence=payload.get("confidence"),
            line_items=_line_items(payload),
        )


def parse_veryfi_receipt(
    payload: Mapping[str, Any], default_currency: str = DEFAULT_CURRENCY
) -> ParsedReceipt:
    return VeryfiAdapter(default_currency).build(payload)
