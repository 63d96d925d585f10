"""
Provider payload -> ClassificationResult.

Picks the single most probable prediction of the first record (first seen
wins ties), maps its label through the waste table and renders a display
label. An empty but well-formed payload gets the fixed "Unknown item" result.
"""
import math
import re
from typing import Any, List, Optional

from pydantic import ValidationError

from tapontama.orchestrator.contracts import ClassificationResult, RawPrediction, WasteCategory
from tapontama.orchestrator.errors import ClassificationPayloadError
from tapontama.orchestrator.waste_mapping import WASTE_MAPPING, GENERAL_WASTE
from tapontama.services.models import ProviderResponse

UNKNOWN_RESULT = ClassificationResult(
    category=WasteCategory.NON_BIODEGRADABLE,
    confidence=50,
    item_label="Unknown item",
    disposal_tip="Unable to classify this item. Please dispose of it responsibly.",
    source="empty_fallback",
)

_WORD_START = re.compile(r"\b\w")


def humanize_label(label: str) -> str:
    """plastic_bottle -> Plastic Bottle"""
    return _WORD_START.sub(lambda m: m.group(0).upper(), label.replace("_", " "))


def to_confidence(probability: float) -> int:
    # half-up, not banker's rounding
    return int(math.floor(probability * 100 + 0.5))


def select_top(predictions: List[RawPrediction]) -> Optional[RawPrediction]:
    top = None
    for current in predictions:
        # strict ">" keeps the first of equal probabilities; zero never wins
        if current.probability > (top.probability if top else 0.0):
            top = current
    return top


class ResultMapper:
    def __init__(self, mapping=WASTE_MAPPING, status_store=None):
        self._mapping = mapping
        self.status = status_store

    def extract_predictions(self, payload: Any) -> List[RawPrediction]:
        try:
            response = ProviderResponse.model_validate(payload)
        except ValidationError as e:
            raise ClassificationPayloadError(f"payload does not match the record shape: {e.error_count()} error(s)") from e
        if not response.records:
            return []
        return [RawPrediction(label=o.label, probability=o.prob) for o in response.records[0].outputs]

    def map(self, payload: Any) -> ClassificationResult:
        predictions = self.extract_predictions(payload)
        top = select_top(predictions)
        if top is None:
            self._log(f"mapper: no usable prediction in {len(predictions)} output(s), unknown item")
            return UNKNOWN_RESULT

        key = top.label.lower()
        entry = self._mapping.get(key)
        if entry is None:
            self._log(f"mapper: unmapped label '{key}', using {GENERAL_WASTE}")
            entry = self._mapping[GENERAL_WASTE]

        result = ClassificationResult(
            category=entry.category,
            confidence=to_confidence(top.probability),
            item_label=humanize_label(top.label),
            disposal_tip=entry.disposal_tip,
        )
        self._log(f"mapper: {top.label} p={top.probability:.2f} -> {result.category.value}")
        return result

    def _log(self, msg: str):
        if self.status is not None:
            self.status.log(msg)
