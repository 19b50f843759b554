from __future__ import annotations

from dataclasses import dataclass, field, fields, is_dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union


# ---------------- Enumerations ----------------


class ProductCategory(str, Enum):
    FRUITS_VEGETABLES = "fruits_vegetables"
    MEAT_FISH = "meat_fish"
    DAIRY_EGGS = "dairy_eggs"
    BREAD_BAKERY = "bread_bakery"
    PANTRY = "pantry"
    FROZEN = "frozen"
    BEVERAGES = "beverages"
    SNACKS_CANDY = "snacks_candy"
    ALCOHOL = "alcohol"
    HOUSEHOLD = "household"
    PERSONAL_CARE = "personal_care"
    BABY_KIDS = "baby_kids"
    PET_SUPPLIES = "pet_supplies"
    OTHER = "other"


class BudgetPeriod(str, Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class TrendPeriod(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class TrendDirection(str, Enum):
    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"


class BudgetStatus(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    WARNING = "warning"
    CRITICAL = "critical"


class InsightType(str, Enum):
    SAVINGS = "savings"
    WARNING = "warning"
    TIP = "tip"
    ACHIEVEMENT = "achievement"


class Currency(str, Enum):
    SEK = "SEK"
    DKK = "DKK"
    NOK = "NOK"
    EUR = "EUR"
    USD = "USD"
    GBP = "GBP"


ALL_CATEGORIES: List[ProductCategory] = list(ProductCategory)

# Sentinels double as "missing" markers; the validator compares against them.
UNKNOWN_STORE = "Unknown Store"
UNKNOWN_ITEM = "Unknown Item"
DEFAULT_CURRENCY = Currency.SEK.value


# ---------------- Canonical receipt ----------------


@dataclass
class ParsedItem:
    name: str
    quantity: float = 1.0
    unit_price: float = 0.0
    total_price: float = 0.0
    sku: Optional[str] = None


@dataclass
class ParsedReceipt:
    store_name: str
    total_amount: float
    purchase_date: Optional[date]
    purchase_time: Optional[str] = None
    currency: str = DEFAULT_CURRENCY
    payment_method: Optional[str] = None
    tax_amount: Optional[float] = None
    items: List[ParsedItem] = field(default_factory=list)
    confidence_score: Optional[float] = None
    subtotal: Optional[float] = None
    store_address: Optional[str] = None
    store_phone: Optional[str] = None
    # original provider payload, untouched
    raw_data: Any = None


# ---------------- Categorization ----------------


@dataclass
class CategoryPrediction:
    category: ProductCategory
    confidence: float
    reasoning: Optional[str] = None


@dataclass
class CategorizableItem:
    name: str
    sku: Optional[str] = None
    unit_price: Optional[float] = None


@dataclass
class ExternalCategorization:
    item_name: str
    category: ProductCategory
    confidence: float
    reasoning: Optional[str] = None

    def to_prediction(self) -> CategoryPrediction:
        return CategoryPrediction(
            category=self.category,
            confidence=self.confidence,
            reasoning=self.reasoning,
        )


@dataclass
class ExternalCategorizationResponse:
    categorizations: List[ExternalCategorization] = field(default_factory=list)


# ---------------- Storage-owned entities (read only here) ----------------


def _coerce_date(value: Any) -> Optional[date]:
    if value is None or isinstance(value, date):
        return value
    # late import: parser.dates depends on nothing in this module
    from parser.dates import parse_receipt_date

    return parse_receipt_date(str(value))


@dataclass
class ReceiptItem:
    id: str
    receipt_id: str
    name: str
    quantity: float = 1.0
    unit_price: float = 0.0
    total_price: float = 0.0
    category: ProductCategory = ProductCategory.OTHER
    is_organic: bool = False
    carbon_score: Optional[float] = None
    unit: Optional[str] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any], receipt_id: Optional[str] = None) -> "ReceiptItem":
        return cls(
            id=str(d.get("id", "")),
            receipt_id=str(d.get("receipt_id", receipt_id or "")),
            name=str(d.get("name", "")),
            quantity=float(d.get("quantity", 1) or 1),
            unit_price=float(d.get("unit_price", 0) or 0),
            total_price=float(d.get("total_price", 0) or 0),
            category=ProductCategory(d.get("category") or ProductCategory.OTHER.value),
            is_organic=bool(d.get("is_organic", False)),
            carbon_score=d.get("carbon_score"),
            unit=d.get("unit"),
        )


@dataclass
class Receipt:
    id: str
    household_id: str
    store_name: str
    total_amount: float
    purchase_date: Union[date, datetime]
    currency: str = DEFAULT_CURRENCY
    items: List[ReceiptItem] = field(default_factory=list)
    store_id: Optional[str] = None
    source: str = "manual"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Receipt":
        rid = str(d.get("id", ""))
        return cls(
            id=rid,
            household_id=str(d.get("household_id", "")),
            store_name=str(d.get("store_name") or UNKNOWN_STORE),
            total_amount=float(d.get("total_amount", 0) or 0),
            purchase_date=_coerce_date(d.get("purchase_date")),
            currency=d.get("currency") or DEFAULT_CURRENCY,
            items=[ReceiptItem.from_dict(i, receipt_id=rid) for i in d.get("items") or []],
            store_id=d.get("store_id"),
            source=d.get("source", "manual"),
        )


@dataclass
class Budget:
    id: str
    household_id: str
    name: str
    amount: float
    period: BudgetPeriod
    start_date: date
    category: Optional[ProductCategory] = None
    is_active: bool = True

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Budget":
        cat = d.get("category")
        return cls(
            id=str(d.get("id", "")),
            household_id=str(d.get("household_id", "")),
            name=str(d.get("name", "Budget")),
            amount=float(d["amount"]),
            period=BudgetPeriod(d.get("period", "monthly")),
            start_date=_coerce_date(d.get("start_date")) or date.today(),
            category=ProductCategory(cat) if cat else None,
            is_active=bool(d.get("is_active", True)),
        )


# ---------------- Analytics outputs ----------------


@dataclass
class TrendDataPoint:
    date: date
    amount: float
    category: Optional[ProductCategory] = None


@dataclass
class TrendAnalysis:
    period: TrendPeriod
    data_points: List[TrendDataPoint]
    average: float
    trend: TrendDirection
    change_percentage: float


@dataclass
class TopItem:
    name: str
    frequency: int
    total_spent: float


@dataclass
class CategoryInsights:
    category: ProductCategory
    total_spent: float
    percentage_of_budget: float
    item_count: int
    average_item_price: float
    trend: TrendDirection
    top_items: List[TopItem] = field(default_factory=list)


@dataclass
class BudgetHealth:
    status: BudgetStatus
    days_remaining: int
    daily_budget_remaining: float
    projected_overspend: float
    recommendations: List[str] = field(default_factory=list)
    spent_percentage: float = 0.0
    progress_percentage: float = 0.0


@dataclass
class StorePrice:
    store_name: str
    price: float
    date: Union[date, datetime]


@dataclass
class PriceComparison:
    item_name: str
    current_price: float
    average_price: float
    lowest_price: float
    highest_price: float
    stores: List[StorePrice] = field(default_factory=list)


@dataclass
class SpendingInsight:
    type: InsightType
    title: str
    description: str
    amount: Optional[float] = None


@dataclass
class BudgetProgress:
    spent: float
    budget: float
    percentage: float
    remaining: float
    is_exceeded: bool


def to_dict(obj: Any) -> Any:
    """
    JSON-friendly deep converter for the records above.
    Dates become ISO strings, enums their values; raw payloads pass through.
    """
    if is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: to_dict(getattr(obj, f.name)) for f in fields(obj)}
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (date, datetime)):
        return obj.isoformat()
    if isinstance(obj, (list, tuple)):
        return [to_dict(x) for x in obj]
    if isinstance(obj, dict):
        return {k: to_dict(v) for k, v in obj.items()}
    return obj
