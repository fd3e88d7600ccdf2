import asyncio


class Liveness:
    """Whether work started under this token may still touch session state.

    Killing is one-way. Waiters on `wait_killed` wake immediately, which is
    what makes the loop's inter-cycle delay interruptible.
    """

    def __init__(self):
        self._killed = asyncio.Event()

    @property
    def alive(self) -> bool:
        return not self._killed.is_set()

    def kill(self):
        self._killed.set()

    async def wait_killed(self, timeout: float) -> bool:
        """Sleep up to `timeout` seconds; True if killed meanwhile."""
        if timeout <= 0:
            await asyncio.sleep(0)
            return not self.alive
        try:
            await asyncio.wait_for(self._killed.wait(), timeout)
        except asyncio.TimeoutError:
            pass
        return not self.alive
