"""Shared fixtures for pipeline tests."""

import json
import random

import httpx
import pytest

from tapontama.adapters.camera.frame_capturer import FrameCapturer
from tapontama.adapters.camera.mock_camera import MockCamera
from tapontama.orchestrator.contracts import ClassificationResult, EncodedImage, WasteCategory
from tapontama.services.status_store import StatusStore


class StubClassifier:
    """Records every image it gets and answers with a fixed result."""

    def __init__(self, result: ClassificationResult):
        self.result = result
        self.calls: list[EncodedImage] = []

    async def classify(self, image: EncodedImage) -> ClassificationResult:
        self.calls.append(image)
        return self.result


@pytest.fixture
def status() -> StatusStore:
    return StatusStore()


@pytest.fixture
def camera(status) -> MockCamera:
    return MockCamera(status)


@pytest.fixture
def capturer(status) -> FrameCapturer:
    return FrameCapturer(status)


@pytest.fixture
def bottle_result() -> ClassificationResult:
    return ClassificationResult(
        category=WasteCategory.RECYCLABLE,
        confidence=85,
        item_label="Plastic Bottle",
        disposal_tip="Clean and place in recycling bin.",
    )


@pytest.fixture
def classifier(bottle_result) -> StubClassifier:
    return StubClassifier(bottle_result)


@pytest.fixture
def image() -> EncodedImage:
    return EncodedImage(data=b"\xff\xd8\xff\xe0jpeg-bytes\xff\xd9", width=4, height=3)


@pytest.fixture
def rng() -> random.Random:
    return random.Random(7)


def provider_payload(*outputs: tuple[str, float]) -> dict:
    return {"records": [{"outputs": [{"label": label, "prob": prob} for label, prob in outputs]}]}


def json_handler(payload, status_code: int = 200, headers: dict | None = None):
    """httpx.MockTransport handler answering with a fixed JSON body."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, content=json.dumps(payload).encode(), headers={
            "content-type": "application/json", **(headers or {})})

    return handler
