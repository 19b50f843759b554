# categorizer/rules.py
"""
Keyword rules engine for grocery item categorization.

Features:
- Static category -> keywords table (English + Swedish synonyms)
- Case-insensitive substring matching on the item name
- Score = number of matching keywords per category
- Ties resolved by table order (first highest wins)
- Confidence = winner's share of all matches, capped at 0.95
"""
from __future__ import annotations

from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Tuple

from gst_core.models import CategorizableItem, CategoryPrediction, ProductCategory

PC = ProductCategory

# Table order matters: it is the tie-break order. Repeated keywords are kept
# as listed and count once per listing.
CATEGORY_KEYWORDS: Mapping[ProductCategory, Tuple[str, ...]] = MappingProxyType(
    {
        PC.FRUITS_VEGETABLES: (
            "apple", "banana", "orange", "tomato", "potato", "onion", "carrot",
            "lettuce", "cucumber", "pepper", "broccoli", "spinach", "fruit",
            "vegetable", "salad",
            "äpple", "banan", "apelsin", "tomat", "potatis", "lök", "morot", "sallad",
        ),
        PC.MEAT_FISH: (
            "beef", "chicken", "pork", "lamb", "turkey", "steak", "ground",
            "sausage", "bacon", "ham", "fish", "salmon", "tuna", "shrimp", "cod",
            "seafood",
            "nötkött", "kyckling", "fläsk", "lamm", "kalkon", "korv", "fisk", "lax",
        ),
        PC.DAIRY_EGGS: (
            "milk", "cheese", "butter", "yogurt", "cream", "egg", "dairy",
            "mjölk", "ost", "smör", "yoghurt", "grädde", "ägg",
        ),
        PC.BREAD_BAKERY: (
            "bread", "baguette", "roll", "bagel", "muffin", "cake", "pastry",
            "croissant",
            "bröd", "bagett", "bulle", "kaka", "bakverk",
        ),
        PC.FROZEN: ("frozen", "ice cream", "pizza", "fryst", "glass"),
        PC.BEVERAGES: (
            "water", "juice", "soda", "coffee", "tea", "drink",
            "vatten", "juice", "läsk", "kaffe", "te", "dryck",
        ),
        PC.SNACKS_CANDY: (
            "chips", "crackers", "popcorn", "nuts", "candy", "chocolate", "snack",
            "godis", "choklad",
        ),
        PC.PANTRY: (
            "rice", "pasta", "flour", "sugar", "salt", "oil", "sauce", "spice",
            "ris", "mjöl", "socker", "olja", "sås", "krydda",
        ),
        PC.HOUSEHOLD: (
            "paper", "towel", "tissue", "soap", "detergent", "cleaner", "sponge",
            "papper", "handduk", "tvål", "diskmedel", "rengöring", "svamp",
        ),
        PC.PERSONAL_CARE: (
            "shampoo", "toothpaste", "deodorant", "lotion", "cosmetic", "razor",
            "schampo", "tandkräm", "deodorant", "kräm", "kosmetik", "rakhyvel",
        ),
        PC.BABY_KIDS: (
            "diaper", "baby food", "formula", "wipes", "baby", "infant",
            "blöja", "barnmat", "modersmjölksersättning", "våtservett",
        ),
        PC.PET_SUPPLIES: (
            "dog food", "cat food", "pet food", "cat litter", "pet",
            "hundmat", "kattmat", "kattströ",
        ),
        PC.ALCOHOL: (
            "beer", "wine", "liquor", "vodka", "whiskey", "rum", "gin",
            "öl", "vin", "sprit", "vodka", "whisky",
        ),
        PC.OTHER: (),
    }
)

NO_MATCH_CONFIDENCE = 0.3
MAX_RULE_CONFIDENCE = 0.95

CATEGORY_DISPLAY_NAMES: Mapping[ProductCategory, Dict[str, str]] = MappingProxyType(
    {
        PC.FRUITS_VEGETABLES: {"en": "Fruits & Vegetables", "sv": "Frukt & Grönt"},
        PC.MEAT_FISH: {"en": "Meat & Fish", "sv": "Kött & Fisk"},
        PC.DAIRY_EGGS: {"en": "Dairy & Eggs", "sv": "Mejeri & Ägg"},
        PC.BREAD_BAKERY: {"en": "Bread & Bakery", "sv": "Bröd & Bageri"},
        PC.FROZEN: {"en": "Frozen Foods", "sv": "Fryst"},
        PC.BEVERAGES: {"en": "Beverages", "sv": "Drycker"},
        PC.SNACKS_CANDY: {"en": "Snacks & Candy", "sv": "Snacks & Godis"},
        PC.PANTRY: {"en": "Pantry Staples", "sv": "Skafferi"},
        PC.HOUSEHOLD: {"en": "Household", "sv": "Hushåll"},
        PC.PERSONAL_CARE: {"en": "Personal Care", "sv": "Personvård"},
        PC.BABY_KIDS: {"en": "Baby & Kids", "sv": "Barn & Baby"},
        PC.PET_SUPPLIES: {"en": "Pet Supplies", "sv": "Djurmat"},
        PC.ALCOHOL: {"en": "Alcohol", "sv": "Alkohol"},
        PC.OTHER: {"en": "Other", "sv": "Övrigt"},
    }
)


def item_name(item: Any) -> str:
    """Accept a CategorizableItem, any object with `.name`, a mapping or a str."""
    if isinstance(item, str):
        return item
    if isinstance(item, Mapping):
        return str(item.get("name") or "")
    return str(getattr(item, "name", "") or "")


def score_categories(name: str) -> Dict[ProductCategory, int]:
    """Keyword hit counts per category; categories with no hits are omitted."""
    text = name.lower()
    scores: Dict[ProductCategory, int] = {}
    for category, keywords in CATEGORY_KEYWORDS.items():
        hits = sum(1 for k in keywords if k.lower() in text)
        if hits > 0:
            scores[category] = hits
    return scores


def classify_item_by_rules(item: CategorizableItem | Mapping[str, Any] | str) -> CategoryPrediction:
    scores = score_categories(item_name(item))
    if not scores:
        return CategoryPrediction(
            category=PC.OTHER,
            confidence=NO_MATCH_CONFIDENCE,
            reasoning="No keyword matches found",
        )

    best_category, best_score = None, 0
    for category, score in scores.items():
        if score > best_score:
            best_category, best_score = category, score

    total = sum(scores.values())
    return CategoryPrediction(
        category=best_category,
        confidence=min(best_score / total, MAX_RULE_CONFIDENCE),
        reasoning=f"Matched {best_score} keyword(s)",
    )


def classify_items(items: Iterable[Any]) -> List[CategoryPrediction]:
    return [classify_item_by_rules(i) for i in items]


def get_category_display_name(category: ProductCategory | str, locale: str = "en") -> str:
    names = CATEGORY_DISPLAY_NAMES[ProductCategory(category)]
    return names.get(locale) or names["en"]
