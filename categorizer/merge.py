# categorizer/merge.py
from __future__ import annotations

from dataclasses import replace
from typing import Optional

from gst_core.models import CategoryPrediction

# External predictions at or above this are trusted outright.
EXTERNAL_OVERRIDE_CONFIDENCE = 0.8


def merge_predictions(
    rule: CategoryPrediction, external: Optional[CategoryPrediction] = None
) -> CategoryPrediction:
    """
    Pick the final prediction. Branch order is significant:
      1. no external -> rule
      2. external confidence >= 0.8 -> external
      3. same category -> external, confidence = max of both
      4. otherwise the strictly more confident one; rule wins ties
    """
    if external is None:
        return rule

    if external.confidence >= EXTERNAL_OVERRIDE_CONFIDENCE:
        return external

    if external.category == rule.category:
        return replace(external, confidence=max(external.confidence, rule.confidence))

    if external.confidence > rule.confidence:
        return external
    return rule
