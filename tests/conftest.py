"""Shared pytest fixtures for RefinementEngine tests."""

import json
from typing import Any, Callable, Optional

import httpx
import pytest

from refinementengine.models.errors import RecoverableFailureExhausted
from refinementengine.models.requests import Attachment
from refinementengine.services.generation_client import GenerationClient


class MockTextGenerator:
    """Mock text generator recording every call."""

    def __init__(self, outputs: Optional[list[str]] = None, fail_on_call: Optional[int] = None):
        """
        Initialize mock generator.

        Args:
            outputs: Texts to return in order; defaults to "output N"
            fail_on_call: 1-based call number that raises instead of returning
        """
        self.outputs = outputs
        self.fail_on_call = fail_on_call
        self.calls: list[dict[str, Any]] = []

    async def generate_text(
        self,
        prompt: str,
        attachment: Optional[Attachment] = None,
        model: Optional[str] = None,
    ) -> str:
        """Mock generate_text method."""
        self.calls.append({"prompt": prompt, "attachment": attachment, "model": model})
        call_number = len(self.calls)

        if self.fail_on_call == call_number:
            raise RecoverableFailureExhausted(f"Mock failure (call {call_number})")

        if self.outputs is not None:
            return self.outputs[call_number - 1]
        return f"output {call_number}"


class SleepRecorder:
    """Stands in for asyncio.sleep and records the requested delays."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


def _text_body(text: str) -> dict[str, Any]:
    """Successful generateContent body."""
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def _image_body(b64: str) -> dict[str, Any]:
    """Successful predict body."""
    return {"predictions": [{"bytesBase64Encoded": b64, "mimeType": "image/png"}]}


def _request_json(request: httpx.Request) -> dict[str, Any]:
    return json.loads(request.content)


@pytest.fixture
def text_body() -> Callable[[str], dict[str, Any]]:
    """Builder for successful text response bodies."""
    return _text_body


@pytest.fixture
def image_body() -> Callable[[str], dict[str, Any]]:
    """Builder for successful image response bodies."""
    return _image_body


@pytest.fixture
def request_json() -> Callable[[httpx.Request], dict[str, Any]]:
    """Decoder for the JSON body of a captured request."""
    return _request_json


@pytest.fixture
def make_text_generator() -> Callable[..., MockTextGenerator]:
    """Factory for mock text generators with scripted outputs or failures."""
    return MockTextGenerator


@pytest.fixture
def mock_text_generator():
    """Fixture for a working mock text generator."""
    return MockTextGenerator()


@pytest.fixture
def sleep_recorder():
    """Fixture recording backoff waits instead of sleeping."""
    return SleepRecorder()


@pytest.fixture
def make_client(sleep_recorder) -> Callable[..., GenerationClient]:
    """Factory for a GenerationClient whose HTTP traffic goes to ``handler``."""

    def _make(handler: Callable[[httpx.Request], Any], **kwargs: Any) -> GenerationClient:
        kwargs.setdefault("sleep", sleep_recorder)
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return GenerationClient(
            api_key="test-key",
            base_url="https://api.example.com/v1beta",
            http_client=http_client,
            **kwargs,
        )

    return _make
