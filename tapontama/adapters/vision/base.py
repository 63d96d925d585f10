from tapontama.orchestrator.contracts import ClassificationResult, EncodedImage


class VisionAdapter:
    async def classify(self, image: EncodedImage) -> ClassificationResult:
        """Return a ClassificationResult for an encoded frame. Must not raise."""
        raise NotImplementedError
