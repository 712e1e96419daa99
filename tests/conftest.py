# tests/conftest.py
from __future__ import annotations

import os
from typing import Any, Dict, List, Optional, Tuple

import pytest
from fastapi.testclient import TestClient

# Keep test runs off disk and off the network, whatever .env says.
os.environ["INTERACTION_LOG_PATH"] = ""
os.environ["GEMINI_API_KEY"] = ""

from studio.app import app, get_gateway, get_interaction_log, get_retry_manager  # noqa: E402
from studio.generate import Gateway, ModelParams  # noqa: E402
from studio.generate.retry import RetryConfig, RetryManager  # noqa: E402


class StubClient:
    """Model client test double: records prompts, replies with fixed text or raises."""

    def __init__(self, reply: str = "stub reply", error: Optional[Exception] = None):
        self.model = "stub"
        self.reply = reply
        self.error = error
        self.prompts: List[str] = []
        self.params: List[ModelParams] = []

    @property
    def calls(self) -> int:
        return len(self.prompts)

    def generate(self, prompt: str, params: ModelParams) -> Tuple[str, Dict[str, Any]]:
        self.prompts.append(prompt)
        self.params.append(params)
        if self.error is not None:
            raise self.error
        return self.reply, {"engine": "stub", "model": self.model}


@pytest.fixture
def stub_client() -> StubClient:
    return StubClient()


@pytest.fixture
def gateway(stub_client: StubClient) -> Gateway:
    return Gateway(model_client=stub_client, history_max_turns=4)


@pytest.fixture
def client(gateway: Gateway):
    """TestClient with the stub gateway injected and retries disabled."""
    app.dependency_overrides[get_gateway] = lambda: gateway
    app.dependency_overrides[get_retry_manager] = lambda: RetryManager(RetryConfig(max_attempts=1))
    app.dependency_overrides[get_interaction_log] = lambda: None
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
