"""Mock camera: serves synthetic frames, can be scripted to fail like a real device."""
import random
import numpy as np
from tapontama.adapters.camera.base import CameraAdapter, MediaStream
from tapontama.orchestrator.contracts import CameraConstraints
from tapontama.orchestrator.errors import CameraError, ConstraintsUnsatisfiable

# BGR fills, loosely "brown", "green", "blue", "grey"
_PALETTE = [(40, 90, 140), (60, 160, 60), (180, 120, 30), (128, 128, 128)]


class MockStream(MediaStream):
    def __init__(self, label: str, width: int, height: int, frames_ready: bool = True):
        super().__init__(label=label)
        self.width = width
        self.height = height
        self.frames_ready = frames_ready

    def read_frame(self):
        if not self.active or not self.frames_ready:
            return None
        frame = np.zeros((self.height, self.width, 3), dtype=np.uint8)
        frame[:, :] = random.choice(_PALETTE)
        return frame

    def _close(self):
        pass


class MockCamera(CameraAdapter):
    def __init__(self, status_store, fail_with: CameraError | None = None,
                 reject_preferred: bool = False, frame_size: tuple[int, int] = (640, 480),
                 frames_ready: bool = True):
        super().__init__(status_store)
        self.fail_with = fail_with
        self.reject_preferred = reject_preferred
        self.frame_size = frame_size
        self.frames_ready = frames_ready
        self.attempts: list[CameraConstraints] = []
        self.opened: list[MockStream] = []

    async def _open(self, constraints: CameraConstraints) -> MediaStream:
        self.attempts.append(constraints)
        if self.fail_with is not None:
            raise self.fail_with
        if self.reject_preferred and not constraints.is_minimal:
            raise ConstraintsUnsatisfiable(f"mock refuses {constraints.width}x{constraints.height}")

        width, height = self.frame_size
        if constraints.width and constraints.height:
            width, height = constraints.width, constraints.height
        stream = MockStream(f"mock:{len(self.opened)} {width}x{height}", width, height,
                            frames_ready=self.frames_ready)
        self.opened.append(stream)
        self.status.log(f"mock_camera: serving {stream.label}")
        return stream
