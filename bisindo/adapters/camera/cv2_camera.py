"""
OpenCV webcam capture adapter.
CAMERA_INDEX selects the webcam device, CAMERA_JPEG_QUALITY the quality of the raw shot.
"""
import cv2
from bisindo import config
from bisindo.adapters.camera.base import CameraAdapter

class CV2Camera(CameraAdapter):
    def __init__(self, status_store, index: int | None = None, jpeg_quality: int | None = None):
        self.status = status_store
        self._index = index if index is not None else config.CAMERA_INDEX
        self._quality = jpeg_quality if jpeg_quality is not None else config.CAMERA_JPEG_QUALITY
        self._cap = None

    def open(self) -> bool:
        if self._cap is None or not self._cap.isOpened():
            self._cap = cv2.VideoCapture(self._index)
            if not self._cap.isOpened():
                self.status.warn(f"cv2_camera: failed to open device {self._index}")
                return False
            self.status.log(f"cv2_camera: device {self._index} open")
        return True

    def capture_bytes(self) -> bytes | None:
        if self._cap is None or not self._cap.isOpened():
            return None
        ret, frame = self._cap.read()
        if not ret or frame is None:
            self.status.warn("cv2_camera: frame capture failed")
            return None
        ok, buf = cv2.imencode(".jpg", frame, [cv2.IMWRITE_JPEG_QUALITY, self._quality])
        if not ok:
            return None
        return bytes(buf)

    def release(self):
        if self._cap and self._cap.isOpened():
            self._cap.release()
        self._cap = None
