# gst_utils/formatters.py
from __future__ import annotations

import re
from typing import Optional

# ---------------- Currency ----------------

# symbol, placed before (True) or after (False) the amount
_CURRENCY_STYLE = {
    "SEK": ("kr", False),
    "NOK": ("kr", False),
    "DKK": ("kr", False),
    "EUR": ("€", False),
    "USD": ("$", True),
    "GBP": ("£", True),
}

_NON_NUMERIC_RX = re.compile(r"[^\d,.\-]")


def _group(amount: float, thousands: str, decimal: str) -> str:
    s = f"{abs(amount):,.2f}"
    s = s.replace(",", "\0").replace(".", decimal).replace("\0", thousands)
    return f"-{s}" if amount < 0 else s


def format_currency(amount: float, currency: str = "SEK") -> str:
    """
    Two-decimal money string.
      format_currency(1234.56)          -> "1 234,56 kr"
      format_currency(1234.56, "USD")   -> "$1,234.56"
    Unknown codes fall back to "1,234.56 XYZ".
    """
    code = (currency or "SEK").upper()
    style = _CURRENCY_STYLE.get(code)
    if style is None:
        return f"{_group(amount, ',', '.')} {code}"
    symbol, prefix = style
    if prefix:
        return f"{symbol}{_group(amount, ',', '.')}"
    return f"{_group(amount, ' ', ',')} {symbol}"


def parse_currency(text: Optional[str]) -> Optional[float]:
    """
    Lenient money parse: strips symbols/spaces, first comma becomes the decimal point.
    "45,90 kr" -> 45.9, "$12.50" -> 12.5. Returns None when nothing numeric remains.
    """
    if not text:
        return None
    cleaned = _NON_NUMERIC_RX.sub("", text).replace(",", ".", 1)
    try:
        return float(cleaned)
    except ValueError:
        return None


# ---------------- Text ----------------


def truncate(text: str, max_length: int, suffix: str = "...") -> str:
    if len(text) <= max_length:
        return text
    return text[: max_length - len(suffix)] + suffix


def capitalize(s: str) -> str:
    return s[:1].upper() + s[1:]


def snake_to_title(s: str) -> str:
    return " ".join(capitalize(w) for w in s.split("_"))
