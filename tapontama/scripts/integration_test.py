"""
Integration check against a running proxy: hits every endpoint and verifies
the response shape, then runs the full capture pipeline with a mock camera.

Usage:
    python -m tapontama.scripts.fake_provider_server   (terminal 1)
    PROVIDER_URL=http://localhost:9000/classify/ XIMILAR_API_TOKEN=dev \
        python -m tapontama.services.proxy             (terminal 2)
    python -m tapontama.scripts.integration_test       (terminal 3)
"""

import asyncio
import base64
import json
import os
import sys
import httpx
from tapontama.orchestrator.contracts import CapturePhase
from tapontama.services.pipeline import build_state_machine
from tapontama.services.status_store import StatusStore

BASE = os.getenv("PROXY_BASE", "http://localhost:8000")
TIMEOUT = 60.0
passed = 0
failed = 0

# the fake provider never decodes the image
TINY_JPEG_B64 = base64.b64encode(b"\xff\xd8\xff\xe0 not really a jpeg \xff\xd9").decode("ascii")


def check(name: str, ok: bool, detail: str = ""):
    global passed, failed
    if ok:
        print(f"  OK    {name}")
        passed += 1
    else:
        print(f"  FAIL  {name}: {detail}")
        failed += 1


def has_record_shape(data) -> bool:
    try:
        outputs = data["records"][0]["outputs"]
        return all(isinstance(o["label"], str) and 0.0 <= o["prob"] <= 1.0 for o in outputs)
    except (KeyError, IndexError, TypeError):
        return False


def post_records(name: str, form: dict):
    try:
        r = httpx.post(f"{BASE}/api/classify-waste", data=form, timeout=TIMEOUT)
        degraded = r.headers.get("x-tapontama-degraded")
        check(name, r.status_code == 200 and has_record_shape(r.json()),
              f"HTTP {r.status_code} body={r.text[:120]}")
        print(f"        degraded={degraded}")
    except httpx.ConnectError:
        check(name, False, "connection refused (is the proxy running?)")


async def run_pipeline():
    status = StatusStore()
    async with build_state_machine(status=status, camera_kind="mock", classifier_kind="proxy") as machine:
        machine.classifier.endpoint = f"{BASE}/api/classify-waste"
        snap = await machine.start()
        check("pipeline start -> previewing", snap.phase is CapturePhase.PREVIEWING, str(snap))
        snap = await machine.capture()
        check("pipeline capture -> done", snap.phase is CapturePhase.DONE and snap.result is not None, str(snap))
        if snap.result:
            print(f"        {snap.result.item_label} -> {snap.result.category.value} "
                  f"({snap.result.confidence}%) source={snap.result.source}")
        snap = machine.reset()
        check("pipeline reset -> idle", snap.phase is CapturePhase.IDLE and snap.result is None, str(snap))


def main():
    print(f"\nIntegration checks against {BASE}\n")
    print("--- Health & Status ---")
    try:
        r = httpx.get(f"{BASE}/health", timeout=TIMEOUT)
        check("GET /health", r.status_code == 200 and r.json().get("ok") is True, r.text[:120])
        r = httpx.get(f"{BASE}/status", timeout=TIMEOUT)
        check("GET /status", r.status_code == 200 and "logs" in r.json(), r.text[:120])
    except httpx.ConnectError:
        check("GET /health", False, "connection refused (is the proxy running?)")

    print("\n--- Classify ---")
    post_records("POST /api/classify-waste", {"records": json.dumps([{"_base64": TINY_JPEG_B64}])})
    post_records("POST /api/classify-waste (no records)", {})
    post_records("POST /api/classify-waste (bad json)", {"records": "[{"})

    print("\n--- Pipeline ---")
    asyncio.run(run_pipeline())

    total = passed + failed
    print(f"\n{'='*40}")
    print(f"  {passed}/{total} passed, {failed} failed")
    print(f"{'='*40}\n")

    sys.exit(1 if failed else 0)


if __name__ == "__main__":
    main()
