from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[1]
API_DIR = ROOT / "API"
if str(API_DIR) not in sys.path:
    sys.path.insert(0, str(API_DIR))

# Test-mode runtime guards:
# - no real AI gateway traffic; every upstream call goes through FakeUpstream
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("AI_GATEWAY_URL", "http://gateway.test/v1/chat/completions")
os.environ.setdefault("AI_GATEWAY_API_KEY", "")
os.environ.setdefault("GATEWAY_AUTH_ENABLED", "false")

from tutor.core.gateway import AIGatewayClient, get_gateway  # noqa: E402
from tutor.main import app  # noqa: E402


class FakeUpstream:
    """Records what the relay sends and answers with whatever ``handler`` returns."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.handler = lambda request: httpx.Response(500)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    def last_json(self) -> dict:
        return json.loads(self.requests[-1].content)

    def client(self) -> AIGatewayClient:
        return AIGatewayClient(api_key="test-upstream-key", transport=httpx.MockTransport(self))


def sse_body(fragments: list[str], *, done: bool = True) -> bytes:
    lines = [
        "data: " + json.dumps({"choices": [{"index": 0, "delta": {"content": text}}]}, ensure_ascii=False) + "\n\n"
        for text in fragments
    ]
    if done:
        lines.append("data: [DONE]\n\n")
    return "".join(lines).encode("utf-8")


@pytest.fixture(scope="session")
def client() -> TestClient:
    with TestClient(app) as tc:
        yield tc


@pytest.fixture
def upstream():
    fake = FakeUpstream()
    app.dependency_overrides[get_gateway] = fake.client
    yield fake
    app.dependency_overrides.pop(get_gateway, None)
