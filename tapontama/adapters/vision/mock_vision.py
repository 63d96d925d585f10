import random
from tapontama.adapters.vision.base import VisionAdapter
from tapontama.orchestrator.contracts import ClassificationResult, EncodedImage, WasteCategory

# Served when the proxy cannot be reached or answers garbage
MOCK_RESULTS = (
    ClassificationResult(
        category=WasteCategory.BIODEGRADABLE,
        confidence=92,
        item_label="Food waste",
        disposal_tip="Compost this organic material to create nutrient-rich soil for plants!",
        source="mock_fallback",
    ),
    ClassificationResult(
        category=WasteCategory.RECYCLABLE,
        confidence=88,
        item_label="Plastic bottle",
        disposal_tip="Clean and place in recycling bin. Check local recycling guidelines for proper disposal.",
        source="mock_fallback",
    ),
    ClassificationResult(
        category=WasteCategory.NON_BIODEGRADABLE,
        confidence=95,
        item_label="Styrofoam container",
        disposal_tip="This goes to general waste. Consider using reusable containers in the future!",
        source="mock_fallback",
    ),
)


def mock_result(rng: random.Random | None = None) -> ClassificationResult:
    return (rng or random).choice(MOCK_RESULTS)


class MockVision(VisionAdapter):
    def __init__(self, status_store, rng: random.Random | None = None):
        self.status = status_store
        self._rng = rng

    async def classify(self, image: EncodedImage) -> ClassificationResult:
        # Mock: ignore the image
        result = mock_result(self._rng)
        self.status.log(f"mock_vision: {result.item_label} ({result.confidence}%)")
        return result
