"""Tests for the generation client."""

import asyncio
import base64
import logging
from unittest.mock import patch

import httpx
import pytest

from refinementengine.interfaces import IImageGenerator, ITextGenerator
from refinementengine.models.errors import (
    NO_VALID_RESULT_MESSAGE,
    GenerationError,
    MalformedResponseError,
    RecoverableFailureExhausted,
)
from refinementengine.models.requests import Attachment, TargetOperation, TextModel
from refinementengine.services.generation_client import DEFAULT_BASE_URL, GenerationClient


@pytest.mark.asyncio
async def test_generate_text_success(make_client, request_json, text_body):
    """Text generation posts a single-part message and returns the first text part."""
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["key"] = request.url.params.get("key")
        seen["body"] = request_json(request)
        return httpx.Response(200, json=text_body("Generated text content"))

    client = make_client(handler)
    result = await client.generate_text("Write a haiku")

    assert result == "Generated text content"
    assert seen["path"] == "/v1beta/models/gemini-2.5-flash-preview-09-2025:generateContent"
    assert seen["key"] == "test-key"
    assert seen["body"] == {"contents": [{"parts": [{"text": "Write a haiku"}]}]}


@pytest.mark.asyncio
async def test_generate_text_with_attachment(make_client, request_json, text_body):
    """An attachment becomes a second inlineData part, base64 encoded."""
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["body"] = request_json(request)
        return httpx.Response(200, json=text_body("A cat"))

    client = make_client(handler)
    attachment = Attachment(data=b"\x89PNG", mime_type="image/png")

    await client.generate_text("What is this?", attachment=attachment)

    parts = seen["body"]["contents"][0]["parts"]
    assert parts[0] == {"text": "What is this?"}
    assert parts[1] == {
        "inlineData": {"mimeType": "image/png", "data": base64.b64encode(b"\x89PNG").decode("ascii")}
    }


@pytest.mark.asyncio
async def test_generate_text_model_override(make_client, text_body):
    """The model identifier is part of the endpoint path."""
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        return httpx.Response(200, json=text_body("ok"))

    client = make_client(handler)
    await client.generate_text("hi", model="gemini-custom")
    assert seen["path"].endswith("/models/gemini-custom:generateContent")

    await client.generate_text("hi", model=TextModel.GEMINI_2_5_FLASH)
    assert seen["path"].endswith(f"/models/{TextModel.GEMINI_2_5_FLASH.value}:generateContent")


@pytest.mark.asyncio
async def test_generate_text_explicit_error_field(make_client, sleep_recorder):
    """An error field in a 200 body is surfaced verbatim with the client label, without retry."""
    calls = {"count": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["count"] += 1
        return httpx.Response(200, json={"error": {"code": 400, "message": "Prompt blocked"}})

    client = make_client(handler, client_label="Studio")

    with pytest.raises(MalformedResponseError) as exc_info:
        await client.generate_text("Test prompt")

    assert exc_info.value.message == "Studio API error: Prompt blocked"
    assert calls["count"] == 1
    assert sleep_recorder.delays == []


@pytest.mark.asyncio
async def test_generate_text_missing_candidates(make_client):
    """A body without candidates is a MalformedResponseError."""
    client = make_client(lambda request: httpx.Response(200, json={"promptFeedback": {}}))

    with pytest.raises(MalformedResponseError) as exc_info:
        await client.generate_text("Test prompt")

    assert exc_info.value.message == NO_VALID_RESULT_MESSAGE


@pytest.mark.asyncio
async def test_generate_text_empty_text_part(make_client, text_body, caplog):
    """A candidate whose first part is empty is reported as missing text."""
    client = make_client(lambda request: httpx.Response(200, json=text_body("")))

    with caplog.at_level(logging.ERROR, logger="refinementengine.services.generation_client"):
        with pytest.raises(MalformedResponseError):
            await client.generate_text("Test prompt")

    assert "Response contained no text" in caplog.text


@pytest.mark.asyncio
async def test_generate_text_unexpected_shape(make_client):
    """A body that does not match the schema is a MalformedResponseError."""
    client = make_client(lambda request: httpx.Response(200, json={"candidates": "nope"}))

    with pytest.raises(MalformedResponseError):
        await client.generate_text("Test prompt")


@pytest.mark.asyncio
async def test_generate_text_exhausted_retries(make_client, sleep_recorder):
    """Persistent server errors surface as RecoverableFailureExhausted after 5 attempts."""
    calls = {"count": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["count"] += 1
        return httpx.Response(500, json={"error": {"message": "Internal"}})

    client = make_client(handler)

    with pytest.raises(RecoverableFailureExhausted) as exc_info:
        await client.generate_text("Test prompt")

    assert calls["count"] == 5
    assert sleep_recorder.delays == [1.0, 2.0, 4.0, 8.0]
    assert exc_info.value.message == "API error: Internal"


@pytest.mark.asyncio
async def test_generate_image_success(make_client, request_json, image_body):
    """Image generation uses fixed parameters and returns a PNG data URI."""
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["body"] = request_json(request)
        return httpx.Response(200, json=image_body("aW1hZ2U="))

    client = make_client(handler)
    result = await client.generate_image("A red dragon")

    assert result == "data:image/png;base64,aW1hZ2U="
    assert seen["path"] == "/v1beta/models/imagen-4.0-generate-001:predict"
    assert seen["body"] == {
        "instances": [{"prompt": "A red dragon"}],
        "parameters": {"sampleCount": 1, "outputMimeType": "image/png", "aspectRatio": "16:9"},
    }


@pytest.mark.asyncio
async def test_generate_image_without_predictions(make_client):
    """No prediction bytes is a GenerationError."""
    client = make_client(lambda request: httpx.Response(200, json={"predictions": []}))

    with pytest.raises(GenerationError):
        await client.generate_image("A red dragon")

    client = make_client(lambda request: httpx.Response(200, json={"predictions": [{"mimeType": "image/png"}]}))

    with pytest.raises(GenerationError):
        await client.generate_image("A red dragon")


@pytest.mark.asyncio
async def test_generate_images_preserves_input_order(make_client, request_json, image_body):
    """Batch results follow input order even when calls finish out of order."""
    delays = {"first": 0.03, "second": 0.0, "third": 0.01}

    async def handler(request: httpx.Request) -> httpx.Response:
        prompt = request_json(request)["instances"][0]["prompt"]
        await asyncio.sleep(delays[prompt])
        return httpx.Response(200, json=image_body(prompt))

    client = make_client(handler)
    results = await client.generate_images(["first", "second", "third"])

    assert results == [
        "data:image/png;base64,first",
        "data:image/png;base64,second",
        "data:image/png;base64,third",
    ]


@pytest.mark.asyncio
async def test_generate_images_all_or_nothing(make_client, request_json, image_body):
    """One failing frame fails the whole batch."""

    def handler(request: httpx.Request) -> httpx.Response:
        prompt = request_json(request)["instances"][0]["prompt"]
        if prompt == "second":
            return httpx.Response(200, json={"predictions": []})
        return httpx.Response(200, json=image_body(prompt))

    client = make_client(handler)

    with pytest.raises(GenerationError):
        await client.generate_images(["first", "second", "third"])


@pytest.mark.asyncio
async def test_failed_batch_stops_sibling_frames(make_client, request_json, image_body):
    """Frames still retrying are cancelled once another frame fails the batch."""
    calls = {"first": 0, "second": 0, "third": 0}

    async def yielding_sleep(seconds: float) -> None:
        await asyncio.sleep(0)

    def handler(request: httpx.Request) -> httpx.Response:
        prompt = request_json(request)["instances"][0]["prompt"]
        calls[prompt] += 1
        if prompt == "first":
            return httpx.Response(200, json={"predictions": []})
        if prompt == "second":
            return httpx.Response(500, json={"error": {"message": "overloaded"}})
        return httpx.Response(200, json=image_body(prompt))

    client = make_client(handler, sleep=yielding_sleep)

    with pytest.raises(GenerationError):
        await client.generate_images(["first", "second", "third"])

    calls_at_failure = calls["second"]
    for _ in range(20):
        await asyncio.sleep(0)

    assert calls["second"] == calls_at_failure
    assert calls_at_failure < client.retry_policy.max_attempts


def test_client_requires_api_key():
    """Client initialization fails without an API key."""
    with patch.dict("os.environ", {}, clear=True):
        with pytest.raises(ValueError, match="API key is required"):
            GenerationClient()


def test_client_reads_environment():
    """API key and base URL fall back to environment variables."""
    env = {"GEMINI_API_KEY": "env-key", "GENERATION_API_BASE_URL": "https://proxy.example.com/v1/"}
    with patch.dict("os.environ", env, clear=True):
        client = GenerationClient()

    assert client.base_url == "https://proxy.example.com/v1"
    assert client.endpoint_url("m", TargetOperation.TEXT_GENERATE) == "https://proxy.example.com/v1/models/m:generateContent"


def test_client_default_base_url():
    """Without configuration the public endpoint is used."""
    with patch.dict("os.environ", {}, clear=True):
        client = GenerationClient(api_key="k")

    assert client.base_url == DEFAULT_BASE_URL


def test_client_satisfies_generator_protocols(make_client, mock_text_generator, text_body):
    """GenerationClient serves as both text and image generator."""
    client = make_client(lambda request: httpx.Response(200, json=text_body("ok")))

    assert isinstance(client, ITextGenerator)
    assert isinstance(client, IImageGenerator)
    assert isinstance(mock_text_generator, ITextGenerator)
