"""
Error codes and the exception taxonomy of the capture pipeline.

Camera and capture errors reach the user through CaptureSnapshot.error_code /
error_message. Classification errors never leave ClassificationClient.
"""

ERR_BUSY = "BUSY"
ERR_INVALID_STATE = "INVALID_STATE"
ERR_UNKNOWN = "UNKNOWN"


class PipelineError(Exception):
    code = ERR_UNKNOWN
    user_message = "Something went wrong. Please try again."

    def __init__(self, detail: str = ""):
        self.detail = detail
        super().__init__(detail or self.user_message)


# ── Camera ──────────────────────────────────────────────────────────────────

class CameraError(PipelineError):
    code = "CAMERA_UNKNOWN"
    user_message = "Unable to access camera. Please ensure you have granted camera permissions."


class PermissionDenied(CameraError):
    code = "CAMERA_PERMISSION_DENIED"
    user_message = "Camera access was denied. Please allow camera permissions and try again."


class DeviceNotFound(CameraError):
    code = "CAMERA_NOT_FOUND"
    user_message = "No camera found on this device."


class DeviceUnsupported(CameraError):
    code = "CAMERA_UNSUPPORTED"
    user_message = "Camera is not supported on this device."


class ConstraintsUnsatisfiable(CameraError):
    code = "CAMERA_CONSTRAINTS"
    user_message = "Unable to access camera even with basic settings."


class UnknownCameraError(CameraError):
    pass


# ── Capture ─────────────────────────────────────────────────────────────────

class CaptureError(PipelineError):
    code = "CAPTURE_FAILED"
    user_message = "Unable to capture an image. Please try again."


class FrameNotReady(CaptureError):
    code = "CAPTURE_FRAME_NOT_READY"
    user_message = "Video is not ready yet. Please wait and try again."


class EncodeFailure(CaptureError):
    code = "CAPTURE_ENCODE_FAILED"
    user_message = "Unable to encode the captured image. Please try again."


# ── Classification (absorbed by the client) ─────────────────────────────────

class ClassificationError(PipelineError):
    code = "CLASSIFICATION_FAILED"


class ClassificationTransportError(ClassificationError):
    code = "CLASSIFICATION_TRANSPORT"


class ClassificationPayloadError(ClassificationError):
    code = "CLASSIFICATION_PAYLOAD"
