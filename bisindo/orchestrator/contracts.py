import math
import time
from dataclasses import dataclass, field
from typing import Literal, Optional

from bisindo.orchestrator.errors import InvalidResponse

CaptureSource = Literal["camera", "gallery"]

@dataclass(frozen=True)
class CaptureRequest:
    source: CaptureSource
    raw: bytes = field(repr=False)   # encoded image straight from the camera or picker
    request_id: str
    captured_at: float = field(default_factory=time.time)

@dataclass(frozen=True)
class PreprocessConfig:
    target_width: int
    quality: float                   # 0..1, mapped to JPEG quality 0..100

    def __post_init__(self):
        if self.target_width <= 0:
            raise ValueError(f"target_width must be positive, got {self.target_width}")
        if not 0.0 <= self.quality <= 1.0:
            raise ValueError(f"quality must be within [0, 1], got {self.quality}")

@dataclass(frozen=True)
class PreprocessedImage:
    payload: str = field(repr=False) # base64 JPEG
    target_width: int
    encoding_quality: float
    width: int
    height: int
    _sent: list = field(default_factory=list, repr=False, compare=False)

    @property
    def sent(self) -> bool:
        return bool(self._sent)

    def claim(self) -> str:
        """Hand the payload to a sender. A payload goes out at most once."""
        if self._sent:
            raise RuntimeError("preprocessed image was already sent")
        self._sent.append(True)
        return self.payload

@dataclass(frozen=True)
class InferenceResult:
    label: str
    confidence: float
    received_at: float = field(default_factory=time.time)

    def __post_init__(self):
        if not isinstance(self.label, str) or not self.label:
            raise InvalidResponse(f"label must be a non-empty string, got {self.label!r}")
        c = self.confidence
        if isinstance(c, bool) or not isinstance(c, (int, float)) or not math.isfinite(c):
            raise InvalidResponse(f"confidence must be a number, got {c!r}")
        if not 0.0 <= c <= 1.0:
            raise InvalidResponse(f"confidence {c} outside [0, 1]")

@dataclass(frozen=True)
class LoopConfig:
    interval_ms: int = 1000
    enabled: bool = True

    def __post_init__(self):
        if self.interval_ms < 0:
            raise ValueError(f"interval_ms must be >= 0, got {self.interval_ms}")

@dataclass
class CycleOutcome:
    ok: bool
    source: CaptureSource
    duration_ms: int
    error_code: Optional[str] = None
    status: Optional[int] = None
    result: Optional[InferenceResult] = None
