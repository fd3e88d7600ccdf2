"""
Gallery adapter for the HTTP interface: the client uploads the picked image
with the request, and the pipeline picks it up from here.
"""
from bisindo.adapters.gallery.base import GalleryAdapter

class UploadGallery(GalleryAdapter):
    def __init__(self, status_store, granted: bool = True):
        self.status = status_store
        self.granted = granted
        self._pending: bytes | None = None

    def offer(self, image_bytes: bytes | None):
        """Stage the next selection; None or empty stands for a cancelled picker."""
        self._pending = image_bytes or None

    def request_permission(self) -> bool:
        return self.granted

    def pick_image(self) -> bytes | None:
        picked, self._pending = self._pending, None
        if picked is None:
            self.status.log("upload_gallery: nothing selected")
        return picked
