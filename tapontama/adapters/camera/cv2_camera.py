"""
OpenCV webcam adapter.
CAMERA_INDEX env var (default 0) selects the rear/default camera,
FRONT_CAMERA_INDEX the user-facing one (defaults to CAMERA_INDEX).
"""
import asyncio
import os
import cv2
from tapontama.adapters.camera.base import CameraAdapter, MediaStream
from tapontama.orchestrator.contracts import CameraConstraints
from tapontama.orchestrator.errors import (
    ConstraintsUnsatisfiable, DeviceNotFound, DeviceUnsupported, PermissionDenied,
)


class CV2Stream(MediaStream):
    def __init__(self, cap, index: int, width: int, height: int):
        super().__init__(label=f"cv2:{index} {width}x{height}")
        self._cap = cap

    def read_frame(self):
        if not self.active:
            return None
        ret, frame = self._cap.read()
        if not ret or frame is None:
            return None
        return frame

    def _close(self):
        self._cap.release()


class CV2Camera(CameraAdapter):
    def __init__(self, status_store, index: int | None = None, front_index: int | None = None):
        super().__init__(status_store)
        self._index = index if index is not None else int(os.getenv("CAMERA_INDEX", "0"))
        if front_index is None and os.getenv("FRONT_CAMERA_INDEX"):
            front_index = int(os.getenv("FRONT_CAMERA_INDEX"))
        self._front_index = front_index if front_index is not None else self._index

    def device_index(self, constraints: CameraConstraints) -> int:
        if constraints.facing_mode == "user":
            return self._front_index
        return self._index

    async def _open(self, constraints: CameraConstraints) -> MediaStream:
        # VideoCapture() blocks for hundreds of ms on some drivers
        return await asyncio.to_thread(self._open_blocking, constraints)

    def _open_blocking(self, constraints: CameraConstraints) -> CV2Stream:
        if not cv2.videoio_registry.getCameraBackends():
            raise DeviceUnsupported("no OpenCV camera backend available")

        index = self.device_index(constraints)
        node = f"/dev/video{index}"
        if os.path.exists(node) and not os.access(node, os.R_OK | os.W_OK):
            raise PermissionDenied(f"no read/write access to {node}")

        cap = cv2.VideoCapture(index)
        if not cap.isOpened():
            cap.release()
            raise DeviceNotFound(f"failed to open device {index}")

        if constraints.width and constraints.height:
            ok_w = cap.set(cv2.CAP_PROP_FRAME_WIDTH, constraints.width)
            ok_h = cap.set(cv2.CAP_PROP_FRAME_HEIGHT, constraints.height)
            if not (ok_w and ok_h):
                cap.release()
                raise ConstraintsUnsatisfiable(
                    f"device {index} refused {constraints.width}x{constraints.height}")

        width = int(cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        height = int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
        return CV2Stream(cap, index, width, height)
