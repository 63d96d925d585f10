import cv2
from tapontama.adapters.camera.base import MediaStream
from tapontama.orchestrator.contracts import EncodedImage
from tapontama.orchestrator.errors import EncodeFailure, FrameNotReady

JPEG_QUALITY = 80   # 0.8 on the 0..1 scale


class FrameCapturer:
    """Snapshot the current frame of a live stream as a JPEG. Never retries."""

    def __init__(self, status_store, quality: int = JPEG_QUALITY):
        self.status = status_store
        self.quality = quality

    def capture(self, stream: MediaStream) -> EncodedImage:
        if stream is None or not stream.active:
            raise FrameNotReady("stream is not live")

        frame = stream.read_frame()
        if frame is None or frame.ndim < 2 or frame.shape[0] == 0 or frame.shape[1] == 0:
            self.status.log("capture: frame not ready")
            raise FrameNotReady("no frame with non-zero size yet")

        height, width = frame.shape[:2]
        try:
            ok, buf = cv2.imencode(".jpg", frame, [cv2.IMWRITE_JPEG_QUALITY, self.quality])
        except cv2.error as e:
            raise EncodeFailure(str(e)) from e
        if not ok or buf is None or len(buf) == 0:
            raise EncodeFailure("JPEG encoder returned no data")

        image = EncodedImage(data=buf.tobytes(), width=width, height=height)
        self.status.log(f"capture: {width}x{height}, {len(image.data)} bytes")
        return image
