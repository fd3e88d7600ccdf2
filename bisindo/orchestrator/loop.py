"""
LoopController: continuous capture mode.

Cycles run back to back on one task: cycle, wait interval, cycle ... The next
cycle is only scheduled once the previous one has resolved, so two cycles
can never overlap. Persistent failures are retried forever at the same pace.
"""
import asyncio
from typing import Optional

from bisindo.orchestrator.contracts import LoopConfig
from bisindo.orchestrator.liveness import Liveness
from bisindo.orchestrator.profiles import CONTINUOUS, Profile
from bisindo.orchestrator.state_machine import Error, Result


class LoopController:
    def __init__(self, pipeline, machine, status_store, profile: Profile = CONTINUOUS):
        self.pipeline = pipeline
        self.machine = machine
        self.status = status_store
        self.profile = profile
        self.config: Optional[LoopConfig] = None
        self.cycles = 0
        self._token: Optional[Liveness] = None
        self._task: Optional[asyncio.Task] = None
        self._in_cycle = False

    @property
    def running(self) -> bool:
        return self._token is not None and self._token.alive

    def start(self, config: LoopConfig):
        """Tear down any previous loop and start a fresh one. Needs a running event loop."""
        previous = self._task
        self.stop()
        self.config = config
        if not config.enabled:
            self.status.log("loop: disabled, not starting")
            return
        token = Liveness()
        self._token = token
        self.cycles = 0
        self._task = asyncio.get_running_loop().create_task(self._run(config, token, previous))
        self.status.log(f"loop: started interval={config.interval_ms}ms")

    def stop(self):
        token = self._token
        if token is None or not token.alive:
            return
        token.kill()
        # only a cycle this loop started is abandoned; it may still finish,
        # but it can no longer write state
        if self._in_cycle:
            self.machine.abandon()
        self.status.log(f"loop: stopped after {self.cycles} cycles")

    async def restart(self, config: LoopConfig):
        previous = self._task
        self.stop()
        if previous is not None:
            await asyncio.gather(previous, return_exceptions=True)
        self.start(config)

    async def join(self):
        if self._task is not None:
            await asyncio.gather(self._task, return_exceptions=True)

    async def _run(self, config: LoopConfig, token: Liveness, previous: Optional[asyncio.Task]):
        if previous is not None and not previous.done():
            # old instance may be mid-cycle; let it drain before the first new cycle
            await asyncio.gather(previous, return_exceptions=True)
        interval_s = config.interval_ms / 1000.0
        while token.alive:
            if isinstance(self.machine.state, (Result, Error)):
                self.machine.new_cycle()
            self._in_cycle = True
            try:
                await self.pipeline.run_cycle("camera", self.profile, token)
            except Exception as e:
                self.status.warn(f"loop: cycle crashed {type(e).__name__}: {e}")
            finally:
                self._in_cycle = False
            if not token.alive:
                break
            self.cycles += 1
            if await token.wait_killed(interval_s):
                break
