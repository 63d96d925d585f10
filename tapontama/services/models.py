from pydantic import BaseModel, Field, field_validator
from typing import List, Optional

# Response header the proxy sets when it answered without a real provider result
DEGRADED_HEADER = "X-Tapontama-Degraded"

# Wire shape shared by provider, proxy and client:
#   {"records": [{"outputs": [{"label": "plastic_bottle", "prob": 0.85}]}]}

class ProviderOutput(BaseModel):
    label: str
    prob: float = Field(ge=0.0, le=1.0, allow_inf_nan=False)

class ProviderRecord(BaseModel):
    outputs: List[ProviderOutput] = Field(default_factory=list)

    @field_validator("outputs", mode="before")
    @classmethod
    def _null_outputs(cls, v):
        return [] if v is None else v

class ProviderResponse(BaseModel):
    records: List[ProviderRecord] = Field(default_factory=list)

    @field_validator("records", mode="before")
    @classmethod
    def _null_records(cls, v):
        if v is None:
            return []
        if isinstance(v, list):
            # a null record carries no outputs
            return [{} if r is None else r for r in v]
        return v

    @classmethod
    def single(cls, label: str, prob: float) -> "ProviderResponse":
        return cls(records=[ProviderRecord(outputs=[ProviderOutput(label=label, prob=prob)])])

class ImageRecord(BaseModel):
    # base64 JPEG without the data-URI prefix
    base64_image: str = Field(alias="_base64", min_length=1)

class HealthResponse(BaseModel):
    ok: bool
    token_configured: bool
    provider_url: str

class StatusResponse(BaseModel):
    degraded_count: int
    last_error: Optional[str] = None
    logs: List[str]
