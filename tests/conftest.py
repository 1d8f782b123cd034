import json

import httpx
import pytest
from fastapi.testclient import TestClient

import config
import gemini_client
from api.generate.router import get_http_client
from app import app
from config import Settings, get_settings


def gemini_body(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}], "role": "model"}, "finishReason": "STOP"}]}


class FakeGemini:
    """Scripted upstream: each call pops the next outcome.

    An outcome is an ``httpx.Response``, an ``(status, body)`` tuple or an
    exception instance to raise from the transport.
    """

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.requests: list[httpx.Request] = []

    @property
    def calls(self) -> int:
        return len(self.requests)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.outcomes:
            raise AssertionError("Unexpected upstream call")
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        if isinstance(outcome, httpx.Response):
            return outcome
        status, body = outcome
        if isinstance(body, (dict, list)):
            return httpx.Response(status, json=body)
        return httpx.Response(status, text=body)

    def payloads(self) -> list:
        return [json.loads(request.content) for request in self.requests]


@pytest.fixture
def settings() -> Settings:
    return Settings(gemini_api_key="test-key", api_base="https://upstream.test/models")


@pytest.fixture
def backoff_delays(monkeypatch) -> list[float]:
    delays: list[float] = []

    async def fake_backoff(delay: float) -> None:
        delays.append(delay)

    monkeypatch.setattr(gemini_client, "_backoff", fake_backoff)
    return delays


@pytest.fixture(autouse=True)
def reset_settings(monkeypatch):
    monkeypatch.setattr(config, "_settings", None)
    monkeypatch.setattr(config, "load_dotenv", lambda: False)


@pytest.fixture
def api_client(settings, backoff_delays):
    """Return a factory building a TestClient wired to a FakeGemini upstream."""

    def build(upstream: FakeGemini) -> TestClient:
        async def override_http_client():
            async with httpx.AsyncClient(transport=httpx.MockTransport(upstream)) as client:
                yield client

        app.dependency_overrides[get_settings] = lambda: settings
        app.dependency_overrides[get_http_client] = override_http_client
        return TestClient(app)

    yield build
    app.dependency_overrides.clear()
