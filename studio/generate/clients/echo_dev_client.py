# Dummy model client for local dev and tests: no network, deterministic output.

from typing import Any, Dict, Tuple
from ..types import ModelParams


class EchoDevClient:
    def __init__(self):
        self.model = "echo-dev"

    def generate(self, prompt: str, params: ModelParams) -> Tuple[str, Dict[str, Any]]:
        lines = [ln for ln in prompt.strip().splitlines() if ln.strip()]
        text = f"[ECHO RESPONSE]\n{lines[-1] if lines else '(no user input)'}"
        meta = {"engine": "echo", "model": self.model, "temp": params.temperature, "max_tokens": params.max_tokens}
        return text, meta
