# categorizer/service.py
"""
Categorizer service: keyword rules + optional external predictor.

Every item always gets a rule prediction. When a predictor is configured,
one batched prompt is sent for all items (with retry/backoff); its answers
are merged per item with the rule prediction. Any predictor failure falls
back to the rule predictions alone.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from categorizer.external import (
    DEFAULT_COUNTRY,
    CategorizationRequest,
    build_categorization_prompt,
    parse_categorization_response,
)
from categorizer.merge import merge_predictions
from categorizer.rules import classify_items, item_name
from config.loader import section
from gst_core.errors import (
    GroceryTrackerError,
    ParseError,
    PredictorError,
    RetryablePredictorError,
)
from gst_core.models import CategorizableItem, CategoryPrediction
from gst_utils.retry import call_with_backoff

log = logging.getLogger("categorizer")

Predictor = Callable[[str], str]


def _as_categorizable(item: Any) -> CategorizableItem:
    if isinstance(item, CategorizableItem):
        return item
    if isinstance(item, dict):
        return CategorizableItem(
            name=item_name(item), sku=item.get("sku"), unit_price=item.get("unit_price")
        )
    return CategorizableItem(
        name=item_name(item),
        sku=getattr(item, "sku", None),
        unit_price=getattr(item, "unit_price", None),
    )


class CategorizerService:
    """Categorize receipt items using rules, optionally refined by an LLM."""

    def __init__(
        self,
        predictor: Optional[Predictor] = None,
        *,
        country: str = DEFAULT_COUNTRY,
        max_attempts: int = 3,
        backoff_factor: float = 2.0,
    ):
        self.predictor = predictor
        self.country = country
        self.max_attempts = max_attempts
        self.backoff_factor = backoff_factor

    @classmethod
    def from_config(
        cls,
        cfg: Dict[str, Any],
        predictor: Optional[Predictor] = None,
        use_llm: bool = False,
    ) -> "CategorizerService":
        cat_cfg = section(cfg, "categorizer")
        retry_cfg = section(cfg, "retry")
        if predictor is None and use_llm:
            from categorizer.llm_client import AnthropicPredictor

            predictor = AnthropicPredictor(
                model=cat_cfg.get("model", "claude-haiku-4-5"),
                max_tokens=int(cat_cfg.get("max_tokens", 1024)),
            )
        return cls(
            predictor,
            country=cat_cfg.get("country", DEFAULT_COUNTRY),
            max_attempts=int(retry_cfg.get("max_attempts", 3)),
            backoff_factor=float(retry_cfg.get("backoff_factor", 2.0)),
        )

    def _invoke(self, prompt: str) -> str:
        try:
            return self.predictor(prompt)
        except GroceryTrackerError:
            raise
        except Exception as e:
            # unknown predictor failures are treated as transient
            raise RetryablePredictorError(str(e)) from e

    def predict_external(
        self, items: Sequence[CategorizableItem], store_name: Optional[str] = None
    ) -> List[Optional[CategoryPrediction]]:
        """
        Ask the predictor about all items at once.
        Returns one entry per item (None where the response had no answer).
        Raises PredictorError / ParseError on failure.
        """
        if self.predictor is None:
            raise PredictorError("No external predictor configured")

        prompt = build_categorization_prompt(
            CategorizationRequest(items=list(items), store_name=store_name, country=self.country)
        )
        text = call_with_backoff(
            self._invoke,
            prompt,
            max_attempts=self.max_attempts,
            backoff_factor=self.backoff_factor,
        )
        entries = parse_categorization_response(text).categorizations

        by_name = {}
        for e in entries:
            by_name.setdefault(e.item_name.strip().lower(), e)

        item_names = {item.name.strip().lower() for item in items}
        # positional fallback only for entries whose name answers no item
        claimed = {id(by_name[n]) for n in item_names if n in by_name}

        out: List[Optional[CategoryPrediction]] = []
        for idx, item in enumerate(items):
            entry = by_name.get(item.name.strip().lower())
            if entry is None and idx < len(entries):
                candidate = entries[idx]
                unanswered = candidate.item_name.strip().lower() not in item_names
                if unanswered and id(candidate) not in claimed:
                    entry = candidate
                    claimed.add(id(candidate))
            out.append(entry.to_prediction() if entry else None)
        return out

    def categorize_with_status(
        self, items: Sequence[Any], store_name: Optional[str] = None
    ) -> Tuple[List[CategoryPrediction], bool]:
        """
        Return (predictions, external_failed).
        external_failed is True when a configured predictor could not be used.
        """
        cat_items = [_as_categorizable(i) for i in items]
        rule_preds = classify_items(cat_items)
        if self.predictor is None or not cat_items:
            return rule_preds, False

        try:
            external = self.predict_external(cat_items, store_name)
        except ParseError as e:
            log.warning("Unusable predictor response, using rules only: %s", e)
            return rule_preds, True
        except GroceryTrackerError as e:
            log.warning("External predictor failed, using rules only: %s", e)
            return rule_preds, True

        merged = [merge_predictions(r, x) for r, x in zip(rule_preds, external)]
        log.info("Categorized %d item(s) with external predictor", len(merged))
        return merged, False

    def categorize(
        self, items: Sequence[Any], store_name: Optional[str] = None
    ) -> List[CategoryPrediction]:
        preds, _ = self.categorize_with_status(items, store_name)
        return preds
