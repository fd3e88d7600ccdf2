import asyncio

import cv2
import numpy as np

from bisindo.adapters.inference.base import InferenceClient
from bisindo.orchestrator.contracts import InferenceResult


def make_jpeg(width: int, height: int, seed: int = 0, quality: int = 90) -> bytes:
    rng = np.random.default_rng(seed)
    frame = rng.integers(0, 256, size=(height, width, 3), dtype=np.uint8)
    ok, buf = cv2.imencode(".jpg", frame, [cv2.IMWRITE_JPEG_QUALITY, quality])
    assert ok
    return bytes(buf)


def decode(image_bytes: bytes):
    return cv2.imdecode(np.frombuffer(image_bytes, dtype=np.uint8), cv2.IMREAD_COLOR)


async def wait_until(predicate, timeout: float = 3.0):
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.005)


class ScriptedInference(InferenceClient):
    """Replies from a script (results or exceptions), then a default verdict.

    `gate` holds every call until set; `entered` fires once a call is inside.
    """

    def __init__(self, replies=None, default=None, delay_s: float = 0.0):
        self.replies = list(replies or [])
        self.default = default or InferenceResult(label="A", confidence=0.92)
        self.delay_s = delay_s
        self.gate: asyncio.Event | None = None
        self.entered = asyncio.Event()
        self.images = []
        self.calls = 0
        self.active = 0
        self.max_active = 0
        self.closed = False

    async def infer(self, image):
        image.claim()
        self.images.append(image)
        self.calls += 1
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        self.entered.set()
        try:
            if self.gate is not None:
                await self.gate.wait()
            if self.delay_s:
                await asyncio.sleep(self.delay_s)
            reply = self.replies.pop(0) if self.replies else self.default
            if isinstance(reply, BaseException):
                raise reply
            return reply
        finally:
            self.active -= 1

    async def aclose(self):
        self.closed = True
