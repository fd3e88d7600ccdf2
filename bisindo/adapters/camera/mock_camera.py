"""Mock camera: serves images from a directory, or a synthetic frame when there are none."""
import random
from pathlib import Path

import cv2
import numpy as np
from bisindo.adapters.camera.base import CameraAdapter

class MockCamera(CameraAdapter):
    def __init__(self, status_store, frames_dir: Path | None = None, size: tuple[int, int] = (480, 640),
                 permitted: bool = True, openable: bool = True):
        self.status = status_store
        self.frames_dir = frames_dir
        self.size = size                # (height, width)
        self.permitted = permitted
        self.openable = openable
        self.fail_next = False
        self.opened = False
        self.captures = 0

    def request_permission(self) -> bool:
        return self.permitted

    def open(self) -> bool:
        self.opened = self.openable
        return self.opened

    def capture_bytes(self) -> bytes | None:
        if self.fail_next:
            self.fail_next = False
            self.status.warn("mock_camera: simulated capture failure")
            return None
        self.captures += 1
        if self.frames_dir is not None:
            jpegs = sorted(self.frames_dir.glob("*.jpg"))
            if jpegs:
                chosen = random.choice(jpegs)
                self.status.log(f"mock_camera: serving {chosen.name}")
                return chosen.read_bytes()
        h, w = self.size
        frame = np.full((h, w, 3), 200, dtype=np.uint8)
        cv2.circle(frame, (w // 2, h // 2), min(h, w) // 4, (40, 120, 220), -1)
        ok, buf = cv2.imencode(".jpg", frame)
        return bytes(buf) if ok else None

    def release(self):
        self.opened = False
