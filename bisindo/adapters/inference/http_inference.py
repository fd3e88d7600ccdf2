"""
HTTP adapter for the remote gesture classifier.

Contract:
  Request:  POST <INFERENCE_URL>  {"image": "<base64 jpeg>"}
  Response: {"result": "A", "confidence": 0.92}

One request per call, bounded by a timeout; retrying is up to the caller.
"""
import httpx
from bisindo import config
from bisindo.adapters.inference.base import InferenceClient, parse_inference_response
from bisindo.orchestrator.contracts import InferenceResult, PreprocessedImage
from bisindo.orchestrator.errors import InvalidResponse, NetworkError, ServerError


class HttpInference(InferenceClient):
    def __init__(self, status_store, url: str | None = None, timeout: float | None = None,
                 client: httpx.AsyncClient | None = None):
        self.status = status_store
        self.url = url or config.INFERENCE_URL
        self.timeout = timeout if timeout is not None else config.INFERENCE_TIMEOUT_S
        self._client = client or httpx.AsyncClient(timeout=self.timeout)
        self._owns_client = client is None

    async def infer(self, image: PreprocessedImage) -> InferenceResult:
        payload = {"image": image.claim()}
        self.status.log(f"http_inference: POST {self.url} ({image.width}x{image.height})")
        try:
            resp = await self._client.post(self.url, json=payload, timeout=self.timeout)
        except httpx.TimeoutException as e:
            raise NetworkError(f"timeout after {self.timeout}s: {e}") from e
        except httpx.TransportError as e:
            raise NetworkError(f"{type(e).__name__}: {e}") from e

        if not resp.is_success:
            raise ServerError(resp.status_code, f"HTTP {resp.status_code}: {resp.text[:300]}")

        try:
            data = resp.json()
        except ValueError as e:
            raise InvalidResponse(f"body is not JSON: {resp.text[:100]!r}") from e

        result = parse_inference_response(data)
        self.status.log(f"http_inference: → {result.label} (conf={result.confidence:.2f})")
        return result

    async def aclose(self):
        if self._owns_client:
            await self._client.aclose()
