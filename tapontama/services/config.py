import os
from dataclasses import dataclass, field
from typing import Mapping, Optional
from dotenv import load_dotenv

XIMILAR_CLASSIFY_URL = "https://api.ximilar.com/recognition/v2/classify/"


@dataclass(frozen=True)
class ProxyConfig:
    """Read once at proxy start. The token never shows up in repr()."""
    provider_url: str = XIMILAR_CLASSIFY_URL
    api_token: Optional[str] = field(default=None, repr=False)
    auth_scheme: str = "Token"       # Ximilar expects "Token <key>"
    timeout: float = 30.0
    # synthetic prediction served whenever the provider result is unusable
    degraded_label: str = "general_waste"
    degraded_prob: float = 0.3
    host: str = "0.0.0.0"
    port: int = 8000

    @property
    def token_configured(self) -> bool:
        return bool(self.api_token)

    def auth_header(self) -> dict[str, str]:
        return {"Authorization": f"{self.auth_scheme} {self.api_token}"}

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None, dotenv_path: str | None = None) -> "ProxyConfig":
        if env is None:
            load_dotenv(dotenv_path=dotenv_path, override=False)
            env = os.environ
        return cls(
            provider_url=env.get("PROVIDER_URL", XIMILAR_CLASSIFY_URL),
            api_token=env.get("XIMILAR_API_TOKEN") or None,
            auth_scheme=env.get("PROVIDER_AUTH_SCHEME", "Token"),
            timeout=float(env.get("PROVIDER_TIMEOUT", "30")),
            host=env.get("PROXY_HOST", "0.0.0.0"),
            port=int(env.get("PROXY_PORT", "8000")),
        )
