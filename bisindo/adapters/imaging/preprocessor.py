"""
Shrinks a raw capture into the payload sent to the classifier.

decode → downscale (longer side ≤ target_width, aspect kept) → JPEG at
`quality` → base64 text. Same bytes and config always give the same payload.
"""
import base64

import cv2
import numpy as np
from bisindo.orchestrator.contracts import PreprocessConfig, PreprocessedImage
from bisindo.orchestrator.errors import UnsupportedFormat


def _bytes_to_bgr(image_bytes: bytes):
    if not image_bytes:
        return None
    arr = np.frombuffer(image_bytes, dtype=np.uint8)
    try:
        return cv2.imdecode(arr, cv2.IMREAD_COLOR)
    except cv2.error:
        return None


def fit_within(width: int, height: int, limit: int) -> tuple[int, int]:
    longer = max(width, height)
    if longer <= limit:
        return width, height
    scale = limit / longer
    return max(1, round(width * scale)), max(1, round(height * scale))


class ImagePreprocessor:
    def __init__(self, status_store=None):
        self.status = status_store

    def process(self, raw: bytes, config: PreprocessConfig) -> PreprocessedImage:
        img = _bytes_to_bgr(raw)
        if img is None:
            raise UnsupportedFormat(f"cannot decode {len(raw or b'')} bytes as an image")

        h, w = img.shape[:2]
        new_w, new_h = fit_within(w, h, config.target_width)
        if (new_w, new_h) != (w, h):
            img = cv2.resize(img, (new_w, new_h), interpolation=cv2.INTER_AREA)

        quality = int(round(config.quality * 100))
        ok, buf = cv2.imencode(".jpg", img, [cv2.IMWRITE_JPEG_QUALITY, quality])
        if not ok:
            raise UnsupportedFormat("JPEG encoding failed")
        payload = base64.b64encode(buf.tobytes()).decode("ascii")

        if self.status is not None:
            self.status.log(f"preprocess: {w}x{h} -> {new_w}x{new_h} q={quality} ({len(payload)} chars)")
        return PreprocessedImage(
            payload=payload,
            target_width=config.target_width,
            encoding_quality=config.quality,
            width=new_w,
            height=new_h,
        )
