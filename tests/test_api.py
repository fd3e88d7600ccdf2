import base64

import pytest
from fastapi.testclient import TestClient

from bisindo.orchestrator.contracts import InferenceResult
from bisindo.orchestrator.errors import ServerError
from bisindo.services.api import create_app
from helpers import make_jpeg


@pytest.fixture
def client(session):
    with TestClient(create_app(session)) as c:
        yield c


@pytest.fixture
def started(client):
    assert client.post("/start").json()["state"] == "ready"
    return client


def b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def test_status_starts_on_welcome(client):
    data = client.get("/status").json()
    assert data["state"] == "welcome"
    assert data["loading"] is False
    assert data["result"] is None
    assert data["prompt"] == "Klik tombol untuk mengambil gambar atau dari galeri"


def test_capture_before_start_is_rejected(client):
    data = client.post("/capture").json()
    assert data["ok"] is False
    assert data["error_code"] == "BUSY"


def test_start_opens_camera(client):
    data = client.post("/start").json()
    assert data == {"ok": True, "state": "ready", "camera_permission": True, "camera_ready": True}


def test_capture_shows_result_and_preview(started):
    data = started.post("/capture").json()
    assert data["ok"] is True
    assert data["result"] == {"label": "A", "confidence": 0.92, "confidence_pct": 92.0, "color": "green"}

    status = started.get("/status").json()
    assert status["state"] == "result"
    assert status["has_preview"] is True
    assert status["prompt"] == "Gambar berhasil diambil"

    preview = started.get("/preview")
    assert preview.status_code == 200
    assert preview.headers["content-type"] == "image/jpeg"


def test_reset_clears_result(started):
    started.post("/capture")
    assert started.post("/reset").json() == {"ok": True, "state": "ready"}
    status = started.get("/status").json()
    assert status["result"] is None
    assert status["has_preview"] is False
    assert started.get("/preview").status_code == 404


def test_gallery_upload_low_confidence(started, inference):
    inference.replies = [InferenceResult("B", 0.45)]
    data = started.post("/gallery", json={"image": b64(make_jpeg(400, 300))}).json()
    assert data["source"] == "gallery"
    assert data["result"]["color"] == "red"
    assert data["result"]["confidence_pct"] == 45.0


def test_gallery_cancel(started, inference):
    data = started.post("/gallery", json={"image": None}).json()
    assert data["error_code"] == "USER_CANCELLED"
    assert started.get("/status").json()["state"] == "ready"
    assert inference.calls == 0


def test_gallery_bad_base64(started):
    data = started.post("/gallery", json={"image": "%%% not base64 %%%"}).json()
    assert data["ok"] is False
    assert data["error_code"] == "UNSUPPORTED_FORMAT"


def test_server_error_is_reported(started, inference):
    inference.replies = [ServerError(503)]
    data = started.post("/capture").json()
    assert data["ok"] is False
    assert data["error_code"] == "SERVER_ERROR"
    assert data["status"] == 503

    status = started.get("/status").json()
    assert status["state"] == "error"
    assert status["error"]["kind"] == "SERVER_ERROR"
    assert status["last_error"]["status"] == 503
    assert started.post("/dismiss").json() == {"ok": True, "state": "ready"}


def test_loop_start_and_stop(client):
    data = client.post("/loop/start", json={"interval_ms": 50}).json()
    assert data["ok"] is True and data["running"] is True
    assert client.get("/status").json()["loop_running"] is True

    data = client.post("/loop/stop").json()
    assert data["running"] is False
    assert client.post("/loop/stop").json()["running"] is False


def test_loop_rejects_negative_interval(client):
    assert client.post("/loop/start", json={"interval_ms": -5}).status_code == 422


def test_health(client):
    data = client.get("/health").json()
    assert data["api"] is True
    assert data["camera_adapter"] == "MockCamera"
    assert data["inference_adapter"] == "ScriptedInference"
