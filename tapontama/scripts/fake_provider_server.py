"""
Fake classification provider for running the proxy without a real API key.

Simulates the provider on port 9000. FAKE_PROVIDER_MODE picks the behavior:
  ok     (default) random label from the waste table
  empty  well-formed answer with no outputs
  error  HTTP 503
  junk   200 with a non-JSON body

Usage:
    python -m tapontama.scripts.fake_provider_server       (terminal 1)
    PROVIDER_URL=http://localhost:9000/classify/ XIMILAR_API_TOKEN=dev \
        python -m tapontama.services.proxy                 (terminal 2)
"""

import asyncio
import os
import random
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from tapontama.orchestrator.waste_mapping import WASTE_MAPPING

app = FastAPI(title="fake-classification-provider")

MODE = os.getenv("FAKE_PROVIDER_MODE", "ok")
DELAY_S = float(os.getenv("FAKE_PROVIDER_DELAY", "0.3"))


@app.post("/classify/")
async def classify(request: Request):
    body = await request.json()
    auth = request.headers.get("authorization", "")
    records = body.get("records") if isinstance(body, dict) else None
    first = records[0] if isinstance(records, list) and records else {}
    b64 = first.get("_base64", "") if isinstance(first, dict) else ""
    print(f"[provider] mode={MODE} auth={'yes' if auth else 'no'} image={len(b64)} chars")
    await asyncio.sleep(DELAY_S)

    if MODE == "error":
        return JSONResponse({"detail": "service unavailable"}, status_code=503)
    if MODE == "junk":
        return PlainTextResponse("<html>oops</html>")
    if MODE == "empty":
        return {"records": [{"outputs": []}]}

    labels = random.sample(sorted(WASTE_MAPPING), k=3)
    outputs = [{"label": label, "prob": round(random.uniform(0.05, 0.95), 2)} for label in labels]
    print(f"[provider] -> {outputs}")
    return {"records": [{"outputs": outputs}]}


if __name__ == "__main__":
    print(f"Fake provider starting on http://localhost:9000 (mode={MODE})")
    uvicorn.run(app, host="0.0.0.0", port=9000)
