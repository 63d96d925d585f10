"""FrameCapturer tests."""

import base64

import numpy as np
import pytest

from tapontama.adapters.camera.base import MediaStream
from tapontama.adapters.camera.mock_camera import MockStream
from tapontama.orchestrator.errors import EncodeFailure, FrameNotReady


class FixedFrameStream(MediaStream):
    def __init__(self, frame):
        super().__init__(label="fixed")
        self.frame = frame

    def read_frame(self):
        return self.frame

    def _close(self):
        pass


class TestCapture:
    def test_encodes_jpeg(self, capturer):
        image = capturer.capture(MockStream("mock", 64, 48))

        assert image.data[:2] == b"\xff\xd8"      # JPEG SOI marker
        assert image.data[-2:] == b"\xff\xd9"     # JPEG EOI marker
        assert (image.width, image.height) == (64, 48)
        assert image.mime_type == "image/jpeg"

    def test_base64_has_no_prefix(self, capturer):
        image = capturer.capture(MockStream("mock", 32, 32))

        assert base64.b64decode(image.to_base64()) == image.data
        assert image.to_data_uri() == f"data:image/jpeg;base64,{image.to_base64()}"

    def test_no_frame_yet(self, capturer):
        with pytest.raises(FrameNotReady):
            capturer.capture(MockStream("mock", 64, 48, frames_ready=False))

    @pytest.mark.parametrize("shape", [(0, 64, 3), (48, 0, 3), (0, 0, 3)])
    def test_zero_sized_frame(self, capturer, shape):
        with pytest.raises(FrameNotReady):
            capturer.capture(FixedFrameStream(np.zeros(shape, dtype=np.uint8)))

    def test_stopped_stream(self, capturer):
        stream = MockStream("mock", 64, 48)
        stream.stop()
        with pytest.raises(FrameNotReady):
            capturer.capture(stream)

    def test_none_stream(self, capturer):
        with pytest.raises(FrameNotReady):
            capturer.capture(None)

    def test_encoder_refusal(self, capturer, monkeypatch):
        from tapontama.adapters.camera import frame_capturer

        monkeypatch.setattr(frame_capturer.cv2, "imencode", lambda *a, **k: (False, None))
        with pytest.raises(EncodeFailure):
            capturer.capture(MockStream("mock", 16, 16))

    def test_quality_is_fixed_at_80(self, capturer, monkeypatch):
        from tapontama.adapters.camera import frame_capturer

        seen = {}
        real = frame_capturer.cv2.imencode

        def spy(ext, frame, params):
            seen["ext"], seen["params"] = ext, params
            return real(ext, frame, params)

        monkeypatch.setattr(frame_capturer.cv2, "imencode", spy)
        capturer.capture(MockStream("mock", 16, 16))

        assert seen["ext"] == ".jpg"
        assert seen["params"] == [frame_capturer.cv2.IMWRITE_JPEG_QUALITY, 80]

    def test_does_not_stop_stream(self, capturer):
        stream = MockStream("mock", 16, 16)
        capturer.capture(stream)
        assert stream.active
