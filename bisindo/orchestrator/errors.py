"""Error codes and the exceptions that carry them through one capture cycle.

Every failure a cycle can hit is a PipelineError subclass with a stable
string `kind`. The state machine stores the kind in Error(kind); the HTTP
layer reports it as `error_code`.
"""
from typing import Optional

ERR_BUSY              = "BUSY"                # trigger ignored, a cycle is already in flight
ERR_PERMISSION_DENIED = "PERMISSION_DENIED"
ERR_DEVICE_NOT_READY  = "DEVICE_NOT_READY"
ERR_CAPTURE_FAILED    = "CAPTURE_FAILED"
ERR_USER_CANCELLED    = "USER_CANCELLED"
ERR_UNSUPPORTED       = "UNSUPPORTED_FORMAT"
ERR_NETWORK           = "NETWORK_ERROR"
ERR_SERVER            = "SERVER_ERROR"
ERR_INVALID_RESPONSE  = "INVALID_RESPONSE"
ERR_UNKNOWN           = "UNKNOWN"


class PipelineError(Exception):
    kind = ERR_UNKNOWN

    def __init__(self, detail: str = ""):
        super().__init__(detail or self.kind)
        self.detail = detail


# ── acquisition ────────────────────────────────────────────────────────────

class AcquisitionError(PipelineError):
    """Raised by ImageAcquirer; aborts the cycle before a request exists."""


class PermissionDenied(AcquisitionError):
    kind = ERR_PERMISSION_DENIED


class DeviceNotReady(AcquisitionError):
    kind = ERR_DEVICE_NOT_READY


class CaptureFailed(AcquisitionError):
    kind = ERR_CAPTURE_FAILED


class UserCancelled(AcquisitionError):
    kind = ERR_USER_CANCELLED


# ── preprocessing ──────────────────────────────────────────────────────────

class UnsupportedFormat(PipelineError):
    kind = ERR_UNSUPPORTED


# ── inference ──────────────────────────────────────────────────────────────

class InferenceError(PipelineError):
    """Raised by an InferenceClient."""


class NetworkError(InferenceError):
    kind = ERR_NETWORK


class ServerError(InferenceError):
    kind = ERR_SERVER

    def __init__(self, status: int, detail: str = ""):
        super().__init__(detail or f"HTTP {status}")
        self.status = status


class InvalidResponse(InferenceError):
    kind = ERR_INVALID_RESPONSE


def status_of(exc: BaseException) -> Optional[int]:
    return getattr(exc, "status", None)
