from abc import ABC, abstractmethod

class GalleryAdapter(ABC):
    @abstractmethod
    def request_permission(self) -> bool:
        ...

    @abstractmethod
    def pick_image(self) -> bytes | None:
        """Return the selected image, or None when the user cancelled the picker."""
        ...
