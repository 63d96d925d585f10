"""
Classification proxy: relays one base64 image to the provider.

The answer is always {"records": [{"outputs": [...]}]}. Whatever goes wrong on
the way (bad request, no token, provider error, transport error, unexpected
provider body) turns into one synthetic low-confidence prediction plus the
X-Tapontama-Degraded header, so the client never has to tell the cases apart.

Run:
    python -m tapontama.services.proxy
"""
import json
import httpx
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from tapontama.services.config import ProxyConfig
from tapontama.services.models import (
    DEGRADED_HEADER, HealthResponse, ImageRecord, ProviderResponse, StatusResponse,
)
from tapontama.services.status_store import StatusStore


class ClassificationProxy:
    def __init__(self, config: ProxyConfig, status_store, transport: httpx.AsyncBaseTransport | None = None):
        self.config = config
        self.status = status_store
        self._transport = transport
        if config.token_configured and not config.api_token.isascii():
            self.status.log("proxy: XIMILAR_API_TOKEN is not ASCII, provider calls will be refused")
        elif config.token_configured:
            self.status.log(f"proxy: ready -> {config.provider_url}")
        else:
            self.status.log("proxy: XIMILAR_API_TOKEN not set, every request gets a degraded answer")

    def extract_image(self, records_field) -> str:
        """`records` form value -> base64 of the first record. Raises ValueError."""
        if not isinstance(records_field, str) or not records_field:
            raise ValueError("missing 'records' form field")
        parsed = json.loads(records_field)
        if not isinstance(parsed, list) or not parsed:
            raise ValueError("'records' must be a non-empty JSON array")
        return ImageRecord.model_validate(parsed[0]).base64_image

    async def forward(self, records_field) -> tuple[ProviderResponse, str | None]:
        """Returns (response body, degraded reason or None)."""
        try:
            image_b64 = self.extract_image(records_field)
        except (ValueError, RecursionError) as e:
            self.status.log(f"proxy: bad request: {type(e).__name__}")
            return self.degraded("bad_request")

        if not self.config.token_configured:
            return self.degraded("missing_token")

        body = {"records": [{"_base64": image_b64}]}
        headers = {**self.config.auth_header(), "Content-Type": "application/json"}
        try:
            async with httpx.AsyncClient(timeout=self.config.timeout, transport=self._transport) as client:
                resp = await client.post(self.config.provider_url, json=body, headers=headers)
        except httpx.HTTPError as e:
            self.status.log(f"proxy: provider transport error {type(e).__name__}")
            return self.degraded("transport_error")
        except (httpx.InvalidURL, UnicodeEncodeError) as e:
            # PROVIDER_URL or token cannot go on the wire
            self.status.log(f"proxy: cannot build provider request: {type(e).__name__}")
            return self.degraded("invalid_config")

        if not resp.is_success:
            self.status.log(f"proxy: provider HTTP {resp.status_code}")
            return self.degraded(f"provider_http_{resp.status_code}")

        try:
            result = ProviderResponse.model_validate(resp.json())
        except (ValueError, RecursionError) as e:
            self.status.log(f"proxy: provider body rejected: {type(e).__name__}")
            return self.degraded("malformed_provider_response")

        outputs = result.records[0].outputs if result.records else []
        self.status.log(f"proxy: provider ok, {len(outputs)} output(s)")
        return result, None

    def degraded(self, reason: str) -> tuple[ProviderResponse, str]:
        self.status.record_degraded("proxy", reason)
        self.status.last_error = reason
        return ProviderResponse.single(self.config.degraded_label, self.config.degraded_prob), reason


def create_app(config: ProxyConfig | None = None, transport: httpx.AsyncBaseTransport | None = None) -> FastAPI:
    config = config or ProxyConfig.from_env()
    status = StatusStore()
    proxy = ClassificationProxy(config, status, transport=transport)

    app = FastAPI(title="tapontama classification proxy")
    app.state.proxy = proxy
    app.state.status = status

    @app.post("/api/classify-waste", response_model=ProviderResponse)
    async def classify_waste(request: Request):
        try:
            form = await request.form()
            records_field = form.get("records")
        except Exception as e:
            # any unreadable body still gets the regular response shape
            status.log(f"proxy: unreadable form: {type(e).__name__}")
            records_field = None

        result, degraded = await proxy.forward(records_field)
        headers = {DEGRADED_HEADER: degraded} if degraded else None
        return JSONResponse(result.model_dump(), headers=headers)

    @app.get("/health", response_model=HealthResponse)
    def health():
        return HealthResponse(ok=True, token_configured=config.token_configured, provider_url=config.provider_url)

    @app.get("/status", response_model=StatusResponse)
    def get_status():
        return StatusResponse(degraded_count=status.degraded_count, last_error=status.last_error, logs=status.logs)

    return app


app = create_app()


if __name__ == "__main__":
    cfg = app.state.proxy.config
    print(f"Classification proxy on http://{cfg.host}:{cfg.port}")
    uvicorn.run(app, host=cfg.host, port=cfg.port)
