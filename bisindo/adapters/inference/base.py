from abc import ABC, abstractmethod
from typing import Any

from bisindo.orchestrator.contracts import InferenceResult, PreprocessedImage
from bisindo.orchestrator.errors import InvalidResponse


class InferenceClient(ABC):
    @abstractmethod
    async def infer(self, image: PreprocessedImage) -> InferenceResult:
        """Send one payload to the classifier and return its verdict."""
        ...

    async def aclose(self):
        pass


def parse_inference_response(data: Any) -> InferenceResult:
    """Validate a `{"result": str, "confidence": 0..1}` body. Nothing is coerced."""
    if not isinstance(data, dict):
        raise InvalidResponse(f"expected a JSON object, got {type(data).__name__}")
    if "result" not in data:
        raise InvalidResponse("missing 'result'")
    if "confidence" not in data:
        raise InvalidResponse("missing 'confidence'")
    return InferenceResult(label=data["result"], confidence=data["confidence"])
