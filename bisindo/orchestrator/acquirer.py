"""
ImageAcquirer: the only way the pipeline gets a picture.

The camera handle is leased to one capture at a time and considered idle
between captures. Camera mode also needs the device's "ready" signal first.
"""
import asyncio
import uuid
from contextlib import contextmanager

from bisindo.orchestrator.contracts import CaptureRequest, CaptureSource
from bisindo.orchestrator.errors import CaptureFailed, DeviceNotReady, PermissionDenied, UserCancelled


def new_request_id() -> str:
    return str(uuid.uuid4())[:8]


class ImageAcquirer:
    def __init__(self, status_store, camera=None, gallery=None):
        self.status = status_store
        self.camera = camera
        self.gallery = gallery
        self._camera_ready = False
        self._camera_held = False

    @property
    def camera_is_ready(self) -> bool:
        return self._camera_ready

    @property
    def camera_held(self) -> bool:
        return self._camera_held

    def camera_ready(self):
        """Device reported ready (onCameraReady)."""
        self._camera_ready = True
        self.status.log("acquirer: camera ready")

    def camera_lost(self):
        self._camera_ready = False

    async def acquire(self, mode: CaptureSource) -> CaptureRequest:
        if mode == "camera":
            raw = await self._from_camera()
        elif mode == "gallery":
            raw = self._from_gallery()
        else:
            raise ValueError(f"unknown capture source {mode!r}")
        req = CaptureRequest(source=mode, raw=raw, request_id=new_request_id())
        self.status.log(f"acquirer: {mode} image {req.request_id} ({len(raw)} bytes)")
        return req

    @contextmanager
    def _camera_lease(self):
        if self.camera is None or not self._camera_ready:
            raise DeviceNotReady("camera has not signalled ready")
        if self._camera_held:
            raise DeviceNotReady("camera is held by another capture")
        self._camera_held = True
        try:
            yield self.camera
        finally:
            self._camera_held = False

    async def _from_camera(self) -> bytes:
        with self._camera_lease() as cam:
            try:
                # cv2 reads block; keep the event loop free while the shutter works
                frame = await asyncio.to_thread(cam.capture_bytes)
            except Exception as e:
                raise CaptureFailed(f"{type(e).__name__}: {e}") from e
        if not frame:
            raise CaptureFailed("camera returned no frame")
        return frame

    def _from_gallery(self) -> bytes:
        if self.gallery is None or not self.gallery.request_permission():
            raise PermissionDenied("gallery permission denied")
        picked = self.gallery.pick_image()
        if not picked:
            raise UserCancelled("no image selected")
        return picked
