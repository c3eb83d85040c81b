# Shared fixtures for relay tests.

import os

# Credentials must exist before backend.main builds its module-level app
os.environ.setdefault("COHERE_API_KEY", "test-cohere-key")
os.environ.setdefault("HUGGING_FACE_API_KEY", "test-hf-key")

import httpx
import pytest
from fastapi.testclient import TestClient
from loguru import logger

from backend.config import Settings
from backend.main import create_app, get_providers


class FakeProviders:
    """Records upstream payloads and replays canned httpx responses."""

    def __init__(self, chat_response=None, image_response=None, error=None):
        self.chat_response = chat_response or httpx.Response(
            200, json={"message": {"content": [{"text": "You enter a dark hall."}]}}
        )
        self.image_response = image_response or httpx.Response(200, content=b"\x89PNG\r\n\x1a\n")
        self.error = error
        self.chat_calls = []
        self.image_calls = []

    async def chat(self, payload):
        self.chat_calls.append(payload)
        if self.error:
            raise self.error
        return self.chat_response

    async def text_to_image(self, payload):
        self.image_calls.append(payload)
        if self.error:
            raise self.error
        return self.image_response


def build_settings(**overrides):
    values = {"COHERE_API_KEY": "test-cohere-key", "HUGGING_FACE_API_KEY": "test-hf-key"}
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def settings():
    return build_settings()


@pytest.fixture
def make_providers():
    return FakeProviders


@pytest.fixture
def providers():
    return FakeProviders()


@pytest.fixture
def make_client():
    """Build a TestClient around a fresh app wired to the given fakes."""

    def _make(providers, settings=None):
        app = create_app(settings or build_settings())
        app.dependency_overrides[get_providers] = lambda: providers
        return TestClient(app)

    return _make


@pytest.fixture
def client(make_client, providers):
    return make_client(providers)


@pytest.fixture
def make_settings():
    return build_settings


@pytest.fixture
def log_records():
    """Collect loguru records emitted during the test."""
    records = []
    sink_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    logger.remove(sink_id)
