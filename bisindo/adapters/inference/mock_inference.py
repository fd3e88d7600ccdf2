import asyncio
import random
import string

from bisindo.adapters.inference.base import InferenceClient
from bisindo.orchestrator.contracts import InferenceResult, PreprocessedImage

LABELS = list(string.ascii_uppercase)   # BISINDO alphabet


class MockInference(InferenceClient):
    def __init__(self, status_store, seed: int | None = None, delay_s: float = 0.0):
        self.status = status_store
        self.delay_s = delay_s
        self._rng = random.Random(seed)

    async def infer(self, image: PreprocessedImage) -> InferenceResult:
        image.claim()
        await asyncio.sleep(self.delay_s)
        label = self._rng.choice(LABELS)
        conf = round(self._rng.uniform(0.3, 1.0), 2)
        self.status.log(f"mock_inference: {label} ({conf:.2f})")
        return InferenceResult(label=label, confidence=conf)
