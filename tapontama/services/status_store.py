from dataclasses import dataclass, field
from typing import Optional, List
from tapontama.orchestrator.contracts import ClassificationResult

MAX_LOG_LINES = 200

@dataclass
class StatusStore:
    phase: str = "idle"
    last_error: Optional[str] = None
    last_result: Optional[ClassificationResult] = None
    degraded_count: int = 0         # fallback results served so far
    logs: List[str] = field(default_factory=list)

    def log(self, msg: str):
        self.logs.append(msg)
        if len(self.logs) > MAX_LOG_LINES:
            self.logs = self.logs[-MAX_LOG_LINES:]

    def record_degraded(self, component: str, reason: str):
        self.degraded_count += 1
        self.log(f"{component}: DEGRADED reason={reason}")
