"""
SessionStateMachine: the single source of UI state for one session.

  Welcome --begin--> Ready --start_capture--> Capturing --image_acquired--> Busy
  Busy --succeed--> Result | Busy --fail--> Error
  Result|Error --new_cycle / reset--> Ready
  Capturing --capture_aborted--> Ready,  Capturing|Busy --abandon--> Ready

Every transition returns True when applied. A trigger that does not fit the
current state is ignored (and logged), never raised: the interface layer may
fire buttons at any time and the session must stay interactive.
"""
from collections import deque
from dataclasses import dataclass
from typing import ClassVar, Optional, Union

from bisindo import config
from bisindo.orchestrator.contracts import CaptureRequest, InferenceResult
from bisindo.orchestrator.errors import ERR_USER_CANCELLED


@dataclass(frozen=True)
class Welcome:
    name: ClassVar[str] = "welcome"

@dataclass(frozen=True)
class Ready:
    name: ClassVar[str] = "ready"

@dataclass(frozen=True)
class Capturing:
    name: ClassVar[str] = "capturing"

@dataclass(frozen=True)
class Busy:
    request_id: str
    name: ClassVar[str] = "busy"

@dataclass(frozen=True)
class Result:
    result: InferenceResult
    name: ClassVar[str] = "result"

@dataclass(frozen=True)
class Error:
    kind: str
    status: Optional[int] = None
    detail: str = ""
    name: ClassVar[str] = "error"

SessionState = Union[Welcome, Ready, Capturing, Busy, Result, Error]


@dataclass(frozen=True)
class Display:
    state: str
    loading: bool
    has_preview: bool
    prompt: str
    label: Optional[str] = None
    confidence: Optional[float] = None
    confidence_pct: Optional[float] = None
    color: Optional[str] = None
    error_code: Optional[str] = None


PROMPT_IDLE = "Klik tombol untuk mengambil gambar atau dari galeri"
PROMPT_TAKEN = "Gambar berhasil diambil"


def confidence_color(confidence: float) -> str:
    # rounded so 0.7 reads as 70.0, not 70.00000000000001
    return "green" if round(confidence * 100, 6) > config.CONFIDENCE_GOOD_PCT else "red"


class SessionStateMachine:
    def __init__(self, status_store, history_size: int = 50):
        self.status = status_store
        self.state: SessionState = Welcome()
        self.preview: Optional[bytes] = None
        self.last_result: Optional[InferenceResult] = None
        self.last_error: Optional[Error] = None
        self.history: deque = deque(maxlen=history_size)
        self._pending: Optional[CaptureRequest] = None

    # ── derived ────────────────────────────────────────────────────────────

    @property
    def in_flight(self) -> bool:
        return isinstance(self.state, (Capturing, Busy))

    @property
    def loading(self) -> bool:
        return self.in_flight

    @property
    def pending_request_id(self) -> Optional[str]:
        return self.state.request_id if isinstance(self.state, Busy) else None

    def display(self) -> Display:
        r = self.last_result
        err = self.state.kind if isinstance(self.state, Error) else None
        return Display(
            state=self.state.name,
            loading=self.loading,
            has_preview=self.preview is not None,
            prompt=PROMPT_TAKEN if self.preview is not None else PROMPT_IDLE,
            label=r.label if r else None,
            confidence=r.confidence if r else None,
            confidence_pct=round(r.confidence * 100, 1) if r else None,
            color=confidence_color(r.confidence) if r else None,
            error_code=err,
        )

    # ── transitions ────────────────────────────────────────────────────────

    def _enter(self, new: SessionState, trigger: str) -> bool:
        old = self.state
        self.state = new
        self.history.append(f"{old.name} --{trigger}--> {new.name}")
        self.status.log(f"state: {old.name} --{trigger}--> {new.name}")
        return True

    def _ignore(self, trigger: str) -> bool:
        self.status.log(f"state: {trigger} ignored in {self.state.name}")
        return False

    def begin(self) -> bool:
        if not isinstance(self.state, Welcome):
            return self._ignore("begin")
        return self._enter(Ready(), "begin")

    def start_capture(self) -> bool:
        # reentrancy guard: the camera belongs to at most one cycle
        if not isinstance(self.state, Ready) or self.in_flight:
            return self._ignore("start_capture")
        return self._enter(Capturing(), "start_capture")

    def image_acquired(self, request: CaptureRequest) -> bool:
        if not isinstance(self.state, Capturing):
            return self._ignore("image_acquired")
        self._pending = request
        return self._enter(Busy(request.request_id), "image_acquired")

    def capture_aborted(self, kind: str, detail: str = "") -> bool:
        if not isinstance(self.state, Capturing):
            return self._ignore("capture_aborted")
        if kind != ERR_USER_CANCELLED:
            self.last_error = Error(kind=kind, detail=detail)
        return self._enter(Ready(), f"capture_aborted:{kind}")

    def _owns(self, request_id: Optional[str]) -> bool:
        """True when the machine is Busy with `request_id` (any request when None)."""
        if not isinstance(self.state, Busy):
            return False
        return request_id is None or request_id == self.state.request_id

    def succeed(self, result: InferenceResult, request_id: Optional[str] = None) -> bool:
        if not self._owns(request_id):
            return self._ignore("succeed")
        if self._pending is not None:
            self.preview = self._pending.raw
        self._pending = None
        self.last_result = result
        self.last_error = None
        return self._enter(Result(result), "succeed")

    def fail(self, kind: str, status: Optional[int] = None, detail: str = "",
             request_id: Optional[str] = None) -> bool:
        if not self._owns(request_id):
            return self._ignore("fail")
        # preview and last_result stay as they were
        self._pending = None
        err = Error(kind=kind, status=status, detail=detail)
        self.last_error = err
        return self._enter(err, f"fail:{kind}")

    def new_cycle(self) -> bool:
        if not isinstance(self.state, (Result, Error)):
            return self._ignore("new_cycle")
        return self._enter(Ready(), "new_cycle")

    def reset(self) -> bool:
        if not isinstance(self.state, (Ready, Result, Error)):
            return self._ignore("reset")
        self.preview = None
        self.last_result = None
        self.last_error = None
        return self._enter(Ready(), "reset")

    def abandon(self, request_id: Optional[str] = None) -> bool:
        if not self.in_flight:
            return False
        if request_id is not None and not self._owns(request_id):
            return False
        self._pending = None
        return self._enter(Ready(), "abandon")
