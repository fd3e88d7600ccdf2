import time

from bisindo.orchestrator.contracts import CaptureSource, CycleOutcome
from bisindo.orchestrator.errors import (
    ERR_BUSY, ERR_UNKNOWN, AcquisitionError, PipelineError, UnsupportedFormat, status_of,
)
from bisindo.orchestrator.liveness import Liveness
from bisindo.orchestrator.profiles import Profile


class CapturePipeline:
    """One cycle: acquire → preprocess → infer → state update.

    Each await is a point where the session may have been torn down or the
    loop stopped, so liveness is checked before every state mutation after it.
    State writes carry the request id, so a cycle that was abandoned cannot
    land on a newer one.
    """

    def __init__(self, machine, acquirer, preprocessor, client, status_store):
        self.machine = machine
        self.acquirer = acquirer
        self.preprocessor = preprocessor
        self.client = client
        self.status = status_store

    async def run_cycle(self, source: CaptureSource, profile: Profile, alive: Liveness) -> CycleOutcome:
        t0 = time.time()

        def outcome(ok, error_code=None, status=None, result=None):
            dt = int((time.time() - t0) * 1000)
            return CycleOutcome(ok=ok, source=source, duration_ms=dt,
                                error_code=error_code, status=status, result=result)

        if not alive.alive or not self.machine.start_capture():
            return outcome(False, ERR_BUSY)

        # 1) acquire
        try:
            request = await self.acquirer.acquire(source)
        except AcquisitionError as e:
            self.status.warn(f"cycle: acquire {source} failed: {e.kind} {e.detail}")
            if alive.alive:
                self.machine.capture_aborted(e.kind, e.detail)
            return outcome(False, e.kind)
        except Exception as e:
            self.status.warn(f"cycle: acquire {source} crashed: {type(e).__name__}: {e}")
            if alive.alive:
                self.machine.capture_aborted(ERR_UNKNOWN, str(e))
            return outcome(False, ERR_UNKNOWN)

        rid = request.request_id
        if not alive.alive:
            self.status.log(f"cycle: {rid} dropped after acquire (stopped)")
            return outcome(False)
        if not self.machine.image_acquired(request):
            self.status.log(f"cycle: {rid} dropped after acquire (abandoned)")
            return outcome(False, ERR_BUSY)

        # 2) preprocess; a bad image costs this cycle only
        try:
            image = self.preprocessor.process(request.raw, profile.preprocess)
        except UnsupportedFormat as e:
            return self._failed(outcome, alive, rid, e.kind, None, str(e), recover=True)
        except Exception as e:
            return self._failed(outcome, alive, rid, ERR_UNKNOWN, None,
                                f"{type(e).__name__}: {e}", recover=profile.auto_recover)

        # 3) infer
        try:
            result = await self.client.infer(image)
        except PipelineError as e:
            return self._failed(outcome, alive, rid, e.kind, status_of(e), str(e),
                                recover=profile.auto_recover)
        except Exception as e:
            return self._failed(outcome, alive, rid, ERR_UNKNOWN, None,
                                f"{type(e).__name__}: {e}", recover=profile.auto_recover)

        # 4) state update
        if not alive.alive:
            self.status.log(f"cycle: {rid} result {result.label} discarded (stopped)")
            return outcome(False, result=result)
        if not self.machine.succeed(result, request_id=rid):
            self.status.log(f"cycle: {rid} result {result.label} discarded (abandoned)")
            return outcome(False, ERR_BUSY, result=result)
        self.status.log(f"cycle: {rid} → {result.label} conf={result.confidence:.2f}")
        return outcome(True, result=result)

    def _failed(self, outcome, alive, request_id, kind, status, detail, recover):
        self.status.warn(f"cycle: {request_id} failed {kind}: {detail}")
        if not alive.alive:
            return outcome(False, kind, status)
        if self.machine.fail(kind, status=status, detail=detail, request_id=request_id) and recover:
            self.machine.new_cycle()
        return outcome(False, kind, status)
