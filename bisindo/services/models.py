from pydantic import BaseModel, Field
from typing import Literal, Optional

from bisindo import config

class ResultOut(BaseModel):
    label: str
    confidence: float
    confidence_pct: float         # "Akurasi: 92.0%"
    color: Literal["green", "red"]

class ErrorOut(BaseModel):
    kind: str
    status: Optional[int] = None
    detail: str = ""

class StatusResponse(BaseModel):
    state: Literal["welcome", "ready", "capturing", "busy", "result", "error"]
    loading: bool
    has_preview: bool
    prompt: str
    pending_request_id: Optional[str] = None
    camera_permission: Optional[bool] = None
    camera_ready: bool = False
    loop_running: bool = False
    loop_cycles: int = 0
    result: Optional[ResultOut] = None
    error: Optional[ErrorOut] = None       # current Error state
    last_error: Optional[ErrorOut] = None  # most recent failure, kept until the next success
    logs: list[str]

class StartResponse(BaseModel):
    ok: bool
    state: str
    camera_permission: Optional[bool] = None
    camera_ready: bool = False

class CaptureResponse(BaseModel):
    ok: bool
    source: Literal["camera", "gallery"]
    duration_ms: int
    error_code: Optional[str] = None
    status: Optional[int] = None
    result: Optional[ResultOut] = None

class GalleryRequest(BaseModel):
    image: Optional[str] = None   # base64 image; null means the picker was cancelled

class LoopStartRequest(BaseModel):
    interval_ms: int = Field(default=config.LOOP_INTERVAL_MS, ge=0)
    enabled: bool = True

class LoopResponse(BaseModel):
    ok: bool
    running: bool
    interval_ms: Optional[int] = None
