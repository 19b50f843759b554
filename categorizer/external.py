# categorizer/external.py
"""
Prompt building and response parsing for the external (LLM) predictor.

The predictor itself is a black box: it receives the prompt text and
returns text that should contain a JSON object
    {"categorizations": [{"item_name", "category", "confidence", "reasoning"}]}
optionally wrapped in a markdown code fence.
"""
from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from numbers import Real
from typing import Any, List, Optional

from categorizer.rules import item_name
from gst_core.errors import ParseError
from gst_core.models import (
    ALL_CATEGORIES,
    CategorizableItem,
    ExternalCategorization,
    ExternalCategorizationResponse,
    ProductCategory,
)

DEFAULT_STORE = "Unknown"
DEFAULT_COUNTRY = "Sweden"

_CODE_BLOCK_RX = re.compile(r"```(?:json)?\s*(\{[\s\S]*\})\s*```")
_VALID_CATEGORIES = {c.value for c in ALL_CATEGORIES}


@dataclass
class CategorizationRequest:
    items: List[CategorizableItem] = field(default_factory=list)
    store_name: Optional[str] = None
    country: Optional[str] = None


def _field(item: Any, key: str) -> Any:
    if isinstance(item, dict):
        return item.get(key)
    return getattr(item, key, None)


def _item_line(i: int, item: Any) -> str:
    details = []
    sku = _field(item, "sku")
    if sku:
        details.append(f"SKU: {sku}")
    price = _field(item, "unit_price")
    if price is not None:
        details.append(f"price: {float(price):.2f}")
    line = f"{i}. {item_name(item)}"
    return f"{line} ({', '.join(details)})" if details else line


def build_categorization_prompt(request: CategorizationRequest) -> str:
    categories = ", ".join(c.value for c in ALL_CATEGORIES)
    items_list = "\n".join(_item_line(i, it) for i, it in enumerate(request.items, start=1))

    return f"""You are a grocery item categorization expert. Categorize the following items from a grocery receipt into one of these categories: {categories}.

Store: {request.store_name or DEFAULT_STORE}
Country: {request.country or DEFAULT_COUNTRY}

Items to categorize:
{items_list}

For each item, provide:
1. The item name (exactly as given)
2. The most appropriate category
3. A confidence score (0.0 to 1.0)
4. Brief reasoning

Respond ONLY with a JSON object in this format:
{{
  "categorizations": [
    {{
      "item_name": "Item name",
      "category": "CATEGORY_NAME",
      "confidence": 0.95,
      "reasoning": "Brief explanation"
    }}
  ]
}}"""


def _extract_json_text(response_text: str) -> str:
    text = (response_text or "").strip()
    m = _CODE_BLOCK_RX.search(text)
    return m.group(1) if m else text


def _parse_entry(index: int, entry: Any) -> ExternalCategorization:
    if not isinstance(entry, dict) or not entry.get("item_name") or not entry.get("category"):
        raise ParseError(f"Invalid categorization at index {index}: missing required fields")

    category = entry["category"]
    if not isinstance(category, str) or category not in _VALID_CATEGORIES:
        raise ParseError(f"Invalid category at index {index}: {category}")

    confidence = entry.get("confidence")
    if (
        isinstance(confidence, bool)
        or not isinstance(confidence, Real)
        or confidence < 0
        or confidence > 1
    ):
        raise ParseError(f"Invalid confidence score at index {index}: {confidence}")

    reasoning = entry.get("reasoning")
    return ExternalCategorization(
        item_name=str(entry["item_name"]),
        category=ProductCategory(category),
        confidence=float(confidence),
        reasoning=str(reasoning) if reasoning is not None else None,
    )


def parse_categorization_response(response_text: str) -> ExternalCategorizationResponse:
    """Validate every entry; the first bad one raises ParseError naming its index."""
    try:
        data = json.loads(_extract_json_text(response_text))
    except json.JSONDecodeError as e:
        raise ParseError(f"Failed to parse categorization response: {e}") from e

    entries = data.get("categorizations") if isinstance(data, dict) else None
    if not isinstance(entries, list):
        raise ParseError("Invalid response structure: missing categorizations array")

    return ExternalCategorizationResponse(
        categorizations=[_parse_entry(i, e) for i, e in enumerate(entries)]
    )
