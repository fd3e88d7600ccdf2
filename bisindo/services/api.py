import base64
import binascii
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Response
from fastapi.responses import JSONResponse

from bisindo import config
from bisindo.adapters.gallery.upload_gallery import UploadGallery
from bisindo.adapters.imaging.preprocessor import ImagePreprocessor
from bisindo.orchestrator.contracts import CycleOutcome, LoopConfig
from bisindo.orchestrator.errors import ERR_UNSUPPORTED
from bisindo.orchestrator.session import CaptureSession
from bisindo.orchestrator.state_machine import Error, confidence_color
from bisindo.services.models import (
    CaptureResponse, ErrorOut, GalleryRequest, LoopResponse, LoopStartRequest,
    ResultOut, StartResponse, StatusResponse,
)
from bisindo.services.status_store import StatusStore

logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def build_session(status: StatusStore) -> CaptureSession:
    """Pick adapters from the environment (CAMERA_ADAPTER, INFERENCE_ADAPTER)."""
    if config.CAMERA_ADAPTER == "mock":
        from bisindo.adapters.camera.mock_camera import MockCamera
        camera = MockCamera(status)
    else:
        from bisindo.adapters.camera.cv2_camera import CV2Camera
        camera = CV2Camera(status)
    status.log(f"camera adapter: {type(camera).__name__}")

    if config.INFERENCE_ADAPTER == "mock":
        from bisindo.adapters.inference.mock_inference import MockInference
        client = MockInference(status)
    else:
        from bisindo.adapters.inference.http_inference import HttpInference
        client = HttpInference(status)
        status.log(f"inference adapter: http -> {client.url}")

    gallery = UploadGallery(status, granted=config.GALLERY_PERMISSION == "granted")
    return CaptureSession(status, camera=camera, gallery=gallery,
                          preprocessor=ImagePreprocessor(status), client=client)


def _result_out(result) -> ResultOut | None:
    if result is None:
        return None
    return ResultOut(
        label=result.label,
        confidence=result.confidence,
        confidence_pct=round(result.confidence * 100, 1),
        color=confidence_color(result.confidence),
    )


def _error_out(err: Error | None) -> ErrorOut | None:
    if err is None:
        return None
    return ErrorOut(kind=err.kind, status=err.status, detail=err.detail)


def _capture_response(out: CycleOutcome) -> CaptureResponse:
    return CaptureResponse(
        ok=out.ok, source=out.source, duration_ms=out.duration_ms,
        error_code=out.error_code, status=out.status,
        result=_result_out(out.result) if out.ok else None,
    )


def create_app(session: CaptureSession | None = None, status: StatusStore | None = None) -> FastAPI:
    status = status or (session.status if session is not None else StatusStore())
    session = session or build_session(status)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await session.close()

    app = FastAPI(title="bisindo capture", lifespan=lifespan)
    app.state.session = session

    @app.get("/status", response_model=StatusResponse)
    def get_status():
        m = session.machine
        view = m.display()
        return StatusResponse(
            state=view.state,
            loading=view.loading,
            has_preview=view.has_preview,
            prompt=view.prompt,
            pending_request_id=m.pending_request_id,
            camera_permission=session.camera_permission,
            camera_ready=session.acquirer.camera_is_ready,
            loop_running=session.loop.running,
            loop_cycles=session.loop.cycles,
            result=_result_out(m.last_result),
            error=_error_out(m.state if isinstance(m.state, Error) else None),
            last_error=_error_out(m.last_error),
            logs=status.logs,
        )

    @app.post("/start", response_model=StartResponse)
    async def start():
        """Welcome screen "Mulai": ask for the camera, open it, go to Ready."""
        await session.begin()
        return StartResponse(
            ok=session.machine.state.name != "welcome",
            state=session.machine.state.name,
            camera_permission=session.camera_permission,
            camera_ready=session.acquirer.camera_is_ready,
        )

    @app.post("/capture", response_model=CaptureResponse)
    async def capture():
        return _capture_response(await session.capture("camera"))

    @app.post("/gallery", response_model=CaptureResponse)
    async def gallery(req: GalleryRequest):
        image_bytes = None
        if req.image:
            try:
                image_bytes = base64.b64decode(req.image, validate=True)
            except (binascii.Error, ValueError):
                status.warn("GALLERY: base64 decode failed")
                return CaptureResponse(ok=False, source="gallery", duration_ms=0, error_code=ERR_UNSUPPORTED)
        session.gallery.offer(image_bytes)
        return _capture_response(await session.capture("gallery"))

    @app.post("/reset")
    def reset():
        ok = session.reset()
        return {"ok": ok, "state": session.machine.state.name}

    @app.post("/dismiss")
    def dismiss():
        ok = session.dismiss()
        return {"ok": ok, "state": session.machine.state.name}

    @app.post("/loop/start", response_model=LoopResponse)
    async def loop_start(req: LoopStartRequest):
        await session.open()
        ok = session.start_loop(LoopConfig(interval_ms=req.interval_ms, enabled=req.enabled))
        return LoopResponse(ok=ok, running=session.loop.running, interval_ms=req.interval_ms)

    @app.post("/loop/stop", response_model=LoopResponse)
    def loop_stop():
        session.stop_loop()
        return LoopResponse(ok=True, running=session.loop.running)

    @app.get("/preview")
    def preview():
        if session.machine.preview is None:
            return JSONResponse({"ok": False, "error": "no preview"}, status_code=404)
        return Response(content=session.machine.preview, media_type="image/jpeg")

    @app.get("/health")
    def health():
        return {
            "api": True,
            "camera_adapter": type(session.camera).__name__,
            "camera_ready": session.acquirer.camera_is_ready,
            "inference_adapter": type(session.client).__name__,
            "closed": session.closed,
        }

    return app


app = create_app()
