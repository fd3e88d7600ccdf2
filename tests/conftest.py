import pytest

from bisindo.adapters.camera.mock_camera import MockCamera
from bisindo.adapters.gallery.upload_gallery import UploadGallery
from bisindo.adapters.imaging.preprocessor import ImagePreprocessor
from bisindo.orchestrator.session import CaptureSession
from bisindo.services.status_store import StatusStore
from helpers import ScriptedInference, make_jpeg


@pytest.fixture
def status():
    return StatusStore()


@pytest.fixture
def jpeg():
    return make_jpeg(640, 480)


@pytest.fixture
def camera(status):
    return MockCamera(status)


@pytest.fixture
def gallery(status):
    return UploadGallery(status)


@pytest.fixture
def inference():
    return ScriptedInference()


@pytest.fixture
def session(status, camera, gallery, inference):
    return CaptureSession(status, camera=camera, gallery=gallery,
                          preprocessor=ImagePreprocessor(status), client=inference)
