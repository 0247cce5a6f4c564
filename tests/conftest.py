import json

import httpx
import pytest

from recipegen.config import Settings
from recipegen.services.providers import ProviderAdapter

NO_KEYS = {
    "gemini_api_key": None,
    "grok_api_key": None,
    "openrouter_api_key": None,
    "openai_api_key": None,
}

DAL_RICE = (
    '[{"title":"Dal Rice","time":"20 mins","ingredients":["rice","dal","onion"],'
    '"steps":["Cook rice","Cook dal","Mix"],"tips":"Add ghee"}]'
)


class FakeProvider(ProviderAdapter):
    """Provider that returns canned text (or raises) without any network."""

    def __init__(self, name: str, result, configured: bool = True):
        super().__init__(settings=None)
        self.name = name
        self.display_name = name.title()
        self.result = result
        self.configured = configured
        self.calls: list[str] = []

    @property
    def api_key(self):
        return "test-key" if self.configured else None

    @property
    def model(self):
        return "fake-model"

    async def call(self, prompt: str) -> str:
        self.calls.append(prompt)
        if isinstance(self.result, Exception):
            raise self.result
        return self.result


@pytest.fixture
def make_settings():
    """Settings isolated from the real environment and .env file."""
    def _make(**overrides) -> Settings:
        values = {**NO_KEYS, **overrides}
        return Settings(_env_file=None, **values)
    return _make


@pytest.fixture
def fake_provider():
    return FakeProvider


def gemini_body(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}], "role": "model"}}]}


def chat_body(text) -> dict:
    return {
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "created": 0,
        "model": "test-model",
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": text},
                "finish_reason": "stop",
            }
        ],
    }


@pytest.fixture
def recorded_transport():
    """
    Build an httpx.MockTransport from a handler and keep every request it saw.

    Usage: transport, requests = recorded_transport(handler)
    """
    def _make(handler):
        requests: list[httpx.Request] = []

        def _handle(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return handler(request)

        return httpx.MockTransport(_handle), requests
    return _make


def request_json(request: httpx.Request) -> dict:
    return json.loads(request.content)
