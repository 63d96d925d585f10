import base64
from dataclasses import dataclass
from enum import Enum
from typing import Literal, Optional

FacingMode = Literal["environment", "user"]
ResultSource = Literal["provider", "proxy_degraded", "mock_fallback", "empty_fallback"]


class WasteCategory(str, Enum):
    BIODEGRADABLE = "biodegradable"
    RECYCLABLE = "recyclable"
    NON_BIODEGRADABLE = "non-biodegradable"


class CapturePhase(str, Enum):
    IDLE = "idle"
    INITIALIZING = "initializing"
    PREVIEWING = "previewing"
    ANALYZING = "captured_analyzing"
    DONE = "captured_done"


@dataclass(frozen=True)
class CategoryMappingEntry:
    category: WasteCategory
    disposal_tip: str


@dataclass(frozen=True)
class RawPrediction:
    label: str                 # provider vocabulary, e.g. "plastic_bottle"
    probability: float


@dataclass(frozen=True)
class ClassificationResult:
    category: WasteCategory
    confidence: int            # 0..100
    item_label: str
    disposal_tip: str
    source: ResultSource = "provider"

    @property
    def is_fallback(self) -> bool:
        return self.source != "provider"


@dataclass(frozen=True)
class CameraConstraints:
    facing_mode: Optional[FacingMode] = "environment"
    width: Optional[int] = 1280
    height: Optional[int] = 720

    @classmethod
    def preferred(cls) -> "CameraConstraints":
        return cls()

    @classmethod
    def minimal(cls) -> "CameraConstraints":
        """Any camera, no resolution hint."""
        return cls(facing_mode=None, width=None, height=None)

    @property
    def is_minimal(self) -> bool:
        return self.facing_mode is None and self.width is None and self.height is None


@dataclass(frozen=True)
class EncodedImage:
    data: bytes
    width: int
    height: int
    mime_type: str = "image/jpeg"

    def to_base64(self) -> str:
        # no data-URI prefix: this is what the proxy forwards as `_base64`
        return base64.b64encode(self.data).decode("ascii")

    def to_data_uri(self) -> str:
        return f"data:{self.mime_type};base64,{self.to_base64()}"


@dataclass
class CaptureSession:
    session_id: int
    stream: Optional[object] = None          # MediaStream while previewing
    image: Optional[EncodedImage] = None


@dataclass(frozen=True)
class CaptureSnapshot:
    """What the presentation layer gets to render."""
    phase: CapturePhase
    session_id: Optional[int] = None
    error_code: Optional[str] = None
    error_message: Optional[str] = None
    result: Optional[ClassificationResult] = None
    image: Optional[EncodedImage] = None

    @property
    def has_stream(self) -> bool:
        return self.phase is CapturePhase.PREVIEWING
