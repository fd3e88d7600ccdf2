"""
Fake gesture classifier for running the pipeline without the real service.

Mimics the /predict contract on port 9000. The reply can be pinned or broken
through env vars so every error path can be exercised by hand:

  FAKE_LABEL=A FAKE_CONFIDENCE=0.92   fixed verdict
  FAKE_MODE=error|garbage|slow        HTTP 500 / malformed body / 10s stall

Usage:
    python -m bisindo.scripts.fake_inference_server
    INFERENCE_URL=http://127.0.0.1:9000/predict uvicorn bisindo.services.api:app
"""
import asyncio
import base64
import binascii
import os
import random
import string

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

app = FastAPI(title="fake-inference-server")
app.state.requests = 0


@app.post("/predict")
async def predict(request: Request):
    app.state.requests += 1
    body = await request.json()
    mode = os.getenv("FAKE_MODE", "ok")

    try:
        image = base64.b64decode(body.get("image", ""), validate=True)
    except (binascii.Error, ValueError):
        return JSONResponse({"error": "image is not base64"}, status_code=400)
    if not image:
        return JSONResponse({"error": "missing image"}, status_code=400)

    if mode == "error":
        return JSONResponse({"error": "model crashed"}, status_code=500)
    if mode == "garbage":
        return {"prediction": "?"}
    if mode == "slow":
        await asyncio.sleep(10)

    label = os.getenv("FAKE_LABEL") or random.choice(string.ascii_uppercase)
    conf = float(os.getenv("FAKE_CONFIDENCE") or round(random.uniform(0.3, 1.0), 2))
    print(f"[predict] {len(image)} bytes -> {label} ({conf:.2f})")
    return {"result": label, "confidence": conf}


if __name__ == "__main__":
    print("Fake inference server starting on http://localhost:9000/predict")
    uvicorn.run(app, host="0.0.0.0", port=9000)
