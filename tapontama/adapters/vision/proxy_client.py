"""
Classification client: sends one captured frame to the classification proxy.

Never raises. Transport failures, non-2xx answers and unreadable bodies fall
back to a random result from MOCK_RESULTS (logged as degraded); a well-formed
but empty answer is ResultMapper's "Unknown item". An answer the proxy marked
with the degraded header is mapped as usual and tagged source="proxy_degraded".

CLASSIFY_ENDPOINT / CLASSIFY_TIMEOUT env vars override the defaults.
"""
import json
import os
import random
from dataclasses import replace
import httpx
from tapontama.adapters.vision.base import VisionAdapter
from tapontama.adapters.vision.mock_vision import mock_result
from tapontama.adapters.vision.result_mapper import ResultMapper
from tapontama.orchestrator.contracts import ClassificationResult, EncodedImage
from tapontama.orchestrator.errors import (
    ClassificationPayloadError, ClassificationTransportError,
)
from tapontama.services.models import DEGRADED_HEADER

DEFAULT_ENDPOINT = "http://127.0.0.1:8000/api/classify-waste"
DEFAULT_TIMEOUT = 30.0


def build_records_field(image: EncodedImage) -> str:
    """Single-record batch, JSON-encoded for the `records` form field."""
    return json.dumps([{"_base64": image.to_base64()}])


class ClassificationClient(VisionAdapter):
    def __init__(self, status_store, endpoint: str | None = None, timeout: float | None = None,
                 mapper: ResultMapper | None = None,
                 transport: httpx.AsyncBaseTransport | None = None,
                 rng: random.Random | None = None):
        self.status = status_store
        self.endpoint = endpoint or os.getenv("CLASSIFY_ENDPOINT", DEFAULT_ENDPOINT)
        self.timeout = timeout if timeout is not None else float(os.getenv("CLASSIFY_TIMEOUT", str(DEFAULT_TIMEOUT)))
        self.mapper = mapper or ResultMapper(status_store=status_store)
        self._transport = transport
        self._rng = rng

    async def classify(self, image: EncodedImage) -> ClassificationResult:
        self.status.log(f"classify: POST {self.endpoint} ({len(image.data)} bytes)")
        try:
            payload, degraded = await self._post(image)
            result = self.mapper.map(payload)
            if degraded and result.source == "provider":
                result = replace(result, source="proxy_degraded")
        except ClassificationTransportError as e:
            return self._fallback("transport", e)
        except ClassificationPayloadError as e:
            return self._fallback("payload", e)
        except Exception as e:
            return self._fallback("unexpected", e)

        self.status.log(f"classify: {result.item_label} -> {result.category.value} ({result.confidence}%) source={result.source}")
        return result

    async def _post(self, image: EncodedImage) -> tuple[dict, str | None]:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.post(self.endpoint, data={"records": build_records_field(image)})
        except httpx.HTTPError as e:
            raise ClassificationTransportError(f"{type(e).__name__}: {e}") from e

        if not resp.is_success:
            raise ClassificationTransportError(f"HTTP {resp.status_code}")

        degraded = resp.headers.get(DEGRADED_HEADER)
        if degraded:
            # proxy already substituted a synthetic prediction
            self.status.record_degraded("classify", f"proxy:{degraded}")

        if not resp.content:
            raise ClassificationPayloadError("empty response body")
        try:
            payload = resp.json()
        except (ValueError, RecursionError) as e:
            raise ClassificationPayloadError(f"response is not JSON: {e}") from e
        if not isinstance(payload, dict):
            raise ClassificationPayloadError(f"expected a JSON object, got {type(payload).__name__}")
        return payload, degraded

    def _fallback(self, reason: str, error: Exception) -> ClassificationResult:
        self.status.log(f"classify: {type(error).__name__}: {error}")
        self.status.record_degraded("classify", reason)
        result = mock_result(self._rng)
        self.status.log(f"classify: mock fallback -> {result.item_label} ({result.confidence}%)")
        return result
