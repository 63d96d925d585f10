"""
Wires camera, capturer and classifier into a CaptureStateMachine.

CAMERA_ADAPTER:     cv2 | mock    (default: cv2)
CLASSIFIER_ADAPTER: proxy | mock  (default: proxy)
"""
import os
from dotenv import load_dotenv
from tapontama.adapters.camera.frame_capturer import FrameCapturer
from tapontama.orchestrator.state_machine import CaptureStateMachine, Listener
from tapontama.services.status_store import StatusStore


def build_camera(status: StatusStore, kind: str | None = None):
    kind = (kind or os.getenv("CAMERA_ADAPTER", "cv2")).lower()
    if kind == "mock":
        from tapontama.adapters.camera.mock_camera import MockCamera
        camera = MockCamera(status)
    else:
        from tapontama.adapters.camera.cv2_camera import CV2Camera
        camera = CV2Camera(status)
    status.log(f"camera adapter: {type(camera).__name__}")
    return camera


def build_classifier(status: StatusStore, kind: str | None = None):
    kind = (kind or os.getenv("CLASSIFIER_ADAPTER", "proxy")).lower()
    if kind == "mock":
        from tapontama.adapters.vision.mock_vision import MockVision
        classifier = MockVision(status)
    else:
        from tapontama.adapters.vision.proxy_client import ClassificationClient
        classifier = ClassificationClient(status)
        status.log(f"classifier endpoint: {classifier.endpoint}")
    status.log(f"classifier adapter: {type(classifier).__name__}")
    return classifier


def build_state_machine(status: StatusStore | None = None, listener: Listener | None = None,
                        camera_kind: str | None = None, classifier_kind: str | None = None) -> CaptureStateMachine:
    load_dotenv(override=False)
    status = status or StatusStore()
    return CaptureStateMachine(
        camera=build_camera(status, camera_kind),
        capturer=FrameCapturer(status),
        classifier=build_classifier(status, classifier_kind),
        status_store=status,
        listener=listener,
    )
