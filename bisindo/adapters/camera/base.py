from abc import ABC, abstractmethod

class CameraAdapter(ABC):
    def request_permission(self) -> bool:
        """Ask the platform for camera access. Servers have nothing to ask."""
        return True

    @abstractmethod
    def open(self) -> bool:
        """Open the device. True means the camera is ready to take pictures."""
        ...

    @abstractmethod
    def capture_bytes(self) -> bytes | None:
        """Capture one frame. Returns JPEG bytes or None on failure."""
        ...

    def release(self):
        pass
