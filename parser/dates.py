# parser/dates.py
from __future__ import annotations

import re
from datetime import date, datetime
from typing import Optional

# Fixed receipt formats, tried in order. Separators disambiguate field order:
# "10-08-2025" is always day-month-year, "10/08/2025" always month/day/year.
RECEIPT_DATE_FORMATS = [
    (re.compile(r"^(\d{4})-(\d{2})-(\d{2})$"), "YMD"),  # YYYY-MM-DD
    (re.compile(r"^(\d{2})/(\d{2})/(\d{4})$"), "MDY"),  # MM/DD/YYYY
    (re.compile(r"^(\d{2})-(\d{2})-(\d{4})$"), "DMY"),  # DD-MM-YYYY
    (re.compile(r"^(\d{2})\.(\d{2})\.(\d{4})$"), "DMY"),  # DD.MM.YYYY
]

# Free-form fallbacks for anything the fixed formats don't cover.
FALLBACK_FORMATS = (
    "%Y/%m/%d",
    "%b %d, %Y",
    "%B %d, %Y",
    "%b %d %Y",
    "%B %d %Y",
    "%d %b %Y",
    "%d %B %Y",
    "%a, %d %b %Y %H:%M:%S %Z",
)


def _build(order: str, m: re.Match) -> Optional[date]:
    a, b, c = (int(g) for g in m.groups())
    if order == "YMD":
        y, mon, d = a, b, c
    elif order == "MDY":
        mon, d, y = a, b, c
    else:
        d, mon, y = a, b, c
    try:
        return date(y, mon, d)
    except ValueError:
        return None


def _parse_free_form(s: str) -> Optional[date]:
    iso = s[:-1] + "+00:00" if s.endswith(("Z", "z")) else s
    try:
        return datetime.fromisoformat(iso).date()
    except ValueError:
        pass
    for fmt in FALLBACK_FORMATS:
        try:
            return datetime.strptime(s, fmt).date()
        except ValueError:
            continue
    return None


def parse_receipt_date(text: Optional[str]) -> Optional[date]:
    """
    Parse a loosely formatted receipt date.

    The first fixed format that matches *and* yields a real calendar date wins;
    otherwise fall back to free-form parsing of the whole string.
    Returns None instead of raising.
    """
    if not text or not isinstance(text, str):
        return None
    s = text.strip()

    for rx, order in RECEIPT_DATE_FORMATS:
        m = rx.match(s)
        if m:
            parsed = _build(order, m)
            if parsed is not None:
                return parsed

    return _parse_free_form(s)
