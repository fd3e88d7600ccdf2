import asyncio
from typing import Optional

from bisindo.orchestrator.acquirer import ImageAcquirer
from bisindo.orchestrator.contracts import CaptureSource, CycleOutcome, LoopConfig
from bisindo.orchestrator.errors import ERR_BUSY
from bisindo.orchestrator.liveness import Liveness
from bisindo.orchestrator.loop import LoopController
from bisindo.orchestrator.pipeline import CapturePipeline
from bisindo.orchestrator.profiles import INTERACTIVE
from bisindo.orchestrator.state_machine import SessionStateMachine, Welcome


class CaptureSession:
    """Everything one open app screen owns: state, camera, pipeline and loop."""

    def __init__(self, status_store, camera, gallery, preprocessor, client):
        self.status = status_store
        self.camera = camera
        self.gallery = gallery
        self.client = client
        self.machine = SessionStateMachine(status_store)
        self.acquirer = ImageAcquirer(status_store, camera=camera, gallery=gallery)
        self.pipeline = CapturePipeline(self.machine, self.acquirer, preprocessor, client, status_store)
        self.loop = LoopController(self.pipeline, self.machine, status_store)
        self.camera_permission: Optional[bool] = None
        self._alive = Liveness()

    @property
    def closed(self) -> bool:
        return not self._alive.alive

    async def open(self) -> bool:
        """Ask for the camera and open it. Returns whether the camera is usable."""
        if self.camera_permission is None:
            self.camera_permission = bool(self.camera is not None and self.camera.request_permission())
            self.status.log(f"session: camera permission {'granted' if self.camera_permission else 'denied'}")
        if not self.camera_permission:
            return False
        if not self.acquirer.camera_is_ready:
            opened = await asyncio.to_thread(self.camera.open)
            if opened:
                self.acquirer.camera_ready()
        return self.acquirer.camera_is_ready

    async def begin(self) -> bool:
        """Leave the welcome screen."""
        await self.open()
        return self.machine.begin()

    async def capture(self, source: CaptureSource = "camera") -> CycleOutcome:
        if self.loop.running:
            self.status.log(f"session: {source} capture ignored, loop is running")
            return CycleOutcome(ok=False, source=source, duration_ms=0, error_code=ERR_BUSY)
        return await self.pipeline.run_cycle(source, INTERACTIVE, self._alive)

    def reset(self) -> bool:
        return self.machine.reset()

    def dismiss(self) -> bool:
        """Back to Ready after a result or error, keeping what is on screen."""
        return self.machine.new_cycle()

    def start_loop(self, config: LoopConfig) -> bool:
        if self.closed:
            return False
        if self.machine.in_flight and not self.loop.running:
            # a single-shot cycle owns the camera until it resolves
            self.status.log("session: loop start ignored, a capture is in flight")
            return False
        if isinstance(self.machine.state, Welcome):
            self.machine.begin()
        self.loop.start(config)
        return True

    def stop_loop(self):
        self.loop.stop()

    async def close(self):
        if self.closed:
            return
        self._alive.kill()
        self.loop.stop()
        await self.loop.join()
        if self.camera is not None:
            self.camera.release()
        self.acquirer.camera_lost()
        await self.client.aclose()
        self.status.log("session: closed")
