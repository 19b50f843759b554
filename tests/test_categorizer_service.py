import json

import pytest

from categorizer.service import CategorizerService
from gst_core.errors import PredictorUnavailableError, RetryablePredictorError
from gst_core.models import CategorizableItem, ProductCategory

PC = ProductCategory


@pytest.fixture
def sleeps(monkeypatch):
    calls = []
    monkeypatch.setattr("gst_utils.retry.time.sleep", calls.append)
    return calls


class FakePredictor:
    """Replays scripted replies; an Exception instance is raised instead of returned."""

    def __init__(self, *replies):
        self.replies = list(replies)
        self.prompts = []

    def __call__(self, prompt):
        self.prompts.append(prompt)
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, Exception):
            raise reply
        return reply


def _reply(*entries):
    return "```json\n" + json.dumps({"categorizations": list(entries)}) + "\n```"


def _entry(name, category, confidence, reasoning="llm"):
    return {"item_name": name, "category": category, "confidence": confidence,
            "reasoning": reasoning}


def test_rules_only_without_predictor():
    svc = CategorizerService()
    preds, failed = svc.categorize_with_status(["Fresh Banana", "xyz-unknown-product-123"])
    assert failed is False
    assert [p.category for p in preds] == [PC.FRUITS_VEGETABLES, PC.OTHER]
    assert preds[1].confidence == 0.3


def test_external_predictions_are_merged(sleeps):
    predictor = FakePredictor(
        _reply(
            _entry("Fresh Banana", "fruits_vegetables", 0.6),
            _entry("xyz-unknown-product-123", "snacks_candy", 0.9),
        )
    )
    svc = CategorizerService(predictor, country="Norway")
    preds, failed = svc.categorize_with_status(
        [CategorizableItem(name="Fresh Banana", sku="4011"), {"name": "xyz-unknown-product-123"}],
        store_name="ICA",
    )
    assert failed is False
    # agreement: max(0.95 rule, 0.6 external), external reasoning
    assert preds[0].category == PC.FRUITS_VEGETABLES
    assert preds[0].confidence == 0.95
    assert preds[0].reasoning == "llm"
    # confident external override
    assert preds[1].category == PC.SNACKS_CANDY
    assert sleeps == []

    (prompt,) = predictor.prompts
    assert "1. Fresh Banana (SKU: 4011)" in prompt
    assert "Store: ICA" in prompt
    assert "Country: Norway" in prompt


def test_matches_response_entries_by_name_then_position(sleeps):
    predictor = FakePredictor(
        _reply(
            _entry("MILK", "dairy_eggs", 0.9),
            _entry("Banana", "fruits_vegetables", 0.9),
        )
    )
    preds = CategorizerService(predictor).categorize(["banana", "Milk", "Razor"])
    assert [p.category for p in preds] == [PC.FRUITS_VEGETABLES, PC.DAIRY_EGGS, PC.PERSONAL_CARE]


def test_transient_failures_are_retried(sleeps):
    predictor = FakePredictor(
        RetryablePredictorError("rate limited"),
        ConnectionError("reset"),
        _reply(_entry("Fresh Banana", "fruits_vegetables", 0.85)),
    )
    svc = CategorizerService(predictor, max_attempts=3, backoff_factor=2.0)
    preds, failed = svc.categorize_with_status(["Fresh Banana"])
    assert failed is False
    assert preds[0].confidence == 0.85
    assert len(predictor.prompts) == 3
    assert sleeps == [1.0, 2.0]


def test_total_failure_falls_back_to_rules(sleeps):
    predictor = FakePredictor(RetryablePredictorError("down"))
    svc = CategorizerService(predictor, max_attempts=3)
    preds, failed = svc.categorize_with_status(["Fresh Banana"])
    assert failed is True
    assert preds[0].category == PC.FRUITS_VEGETABLES
    assert preds[0].reasoning == "Matched 2 keyword(s)"
    assert len(predictor.prompts) == 3


def test_unusable_response_falls_back_without_retry(sleeps):
    predictor = FakePredictor("Sorry, I can't help with that.")
    preds, failed = CategorizerService(predictor).categorize_with_status(["Fresh Banana"])
    assert failed is True
    assert preds[0].reasoning == "Matched 2 keyword(s)"
    assert len(predictor.prompts) == 1
    assert sleeps == []


def test_unavailable_predictor_is_not_retried(sleeps):
    predictor = FakePredictor(PredictorUnavailableError("no key"))
    preds, failed = CategorizerService(predictor).categorize_with_status(["Banana"])
    assert failed is True
    assert len(predictor.prompts) == 1
    assert preds[0].category == PC.FRUITS_VEGETABLES


def test_empty_items_skip_predictor():
    predictor = FakePredictor(_reply())
    assert CategorizerService(predictor).categorize([]) == []
    assert predictor.prompts == []


def test_from_config_reads_tables():
    cfg = {
        "categorizer": {"country": "Denmark"},
        "retry": {"max_attempts": 5, "backoff_factor": 1.5},
    }
    svc = CategorizerService.from_config(cfg)
    assert svc.predictor is None
    assert svc.country == "Denmark"
    assert svc.max_attempts == 5
    assert svc.backoff_factor == 1.5


def test_from_config_builds_llm_predictor(monkeypatch):
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    cfg = {"categorizer": {"model": "claude-test", "max_tokens": 256}}
    svc = CategorizerService.from_config(cfg, use_llm=True)
    assert svc.predictor.model == "claude-test"
    assert svc.predictor.max_tokens == 256
    # no key: falls back to rules instead of raising
    preds, failed = svc.categorize_with_status(["Fresh Banana"])
    assert failed is True
    assert preds[0].category == PC.FRUITS_VEGETABLES


def test_reordered_reply_does_not_leak_another_items_answer(sleeps):
    # the LLM reorders its answers and respells one of the names
    predictor = FakePredictor(
        _reply(
            _entry("Banana", "fruits_vegetables", 0.95),
            _entry("Mjolk", "dairy_eggs", 0.95),
        )
    )
    svc = CategorizerService(predictor)
    items = [CategorizableItem(name="Mjölk 3%"), CategorizableItem(name="Banana")]

    external = svc.predict_external(items)
    assert external[0] is None
    assert external[1].category == PC.FRUITS_VEGETABLES

    preds = CategorizerService(predictor).categorize(items)
    assert preds[0].category == PC.DAIRY_EGGS
    assert preds[0].reasoning != "llm"
    assert preds[1].category == PC.FRUITS_VEGETABLES


def test_position_fallback_uses_unclaimed_entries(sleeps):
    predictor = FakePredictor(
        _reply(
            _entry("Mjolk", "dairy_eggs", 0.9),
            _entry("Banana", "fruits_vegetables", 0.9),
        )
    )
    external = CategorizerService(predictor).predict_external(
        [CategorizableItem(name="Mjölk 3%"), CategorizableItem(name="Banana")]
    )
    assert [p.category for p in external] == [PC.DAIRY_EGGS, PC.FRUITS_VEGETABLES]
