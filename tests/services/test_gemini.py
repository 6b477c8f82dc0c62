"""Tests for the Gemini moderation client."""

import asyncio
import json
import time
from collections.abc import Callable, Iterator
from typing import Any

import httpx
import pytest

from trustboard.core.settings import settings
from trustboard.services.gemini import (
    GeminiConfig,
    GeminiModerationClient,
    ModerationNotConfiguredError,
    ModerationProviderError,
    _GeminiClientSingleton,
    build_prompt,
    get_gemini_client,
    parse_verdict,
    strip_code_fences,
)

API_KEY = "test-key"


def _config(api_key: str | None = API_KEY) -> GeminiConfig:
    return GeminiConfig(
        api_key=api_key,
        model="gemini-2.5-flash",
        base_url="https://gemini.test/v1beta",
        timeout_seconds=5.0,
    )


def _reply(text: str | None) -> dict[str, Any]:
    if text is None:
        return {"candidates": []}
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def _client(handler: Callable[[httpx.Request], httpx.Response]) -> GeminiModerationClient:
    return GeminiModerationClient(_config(), transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_classify_posts_prompt_to_generate_content() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=_reply('{"flagged": false, "reason": "Clean"}'))

    client = _client(handler)
    result = await client.classify("Lovely product")
    await client.aclose()

    assert result.flagged is False
    assert result.provider == "Google Gemini"
    assert len(seen) == 1
    request = seen[0]
    assert request.method == "POST"
    assert str(request.url) == "https://gemini.test/v1beta/models/gemini-2.5-flash:generateContent"
    assert request.headers["x-goog-api-key"] == API_KEY
    assert API_KEY not in str(request.url)
    body = json.loads(request.content)
    prompt = body["contents"][0]["parts"][0]["text"]
    assert "Lovely product" in prompt
    assert '"flagged"' in prompt


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "raw",
    [
        '{"flagged": true, "reason": "toxic"}',
        '```json\n{"flagged": true, "reason": "toxic"}\n```',
        '```\n{"flagged": true, "reason": "toxic"}\n```',
    ],
)
async def test_fenced_and_plain_json_parse_identically(raw: str) -> None:
    client = _client(lambda request: httpx.Response(200, json=_reply(raw)))

    result = await client.classify("some text")

    assert result.flagged is True
    assert result.provider == "Google Gemini"
    assert result.reason == "toxic"


@pytest.mark.asyncio
@pytest.mark.parametrize("raw", [None, ""])
async def test_empty_reply_is_clean(raw: str | None) -> None:
    client = _client(lambda request: httpx.Response(200, json=_reply(raw)))

    result = await client.classify("some text")

    assert result.flagged is False
    assert result.reason == "Gemini response empty, treated as clean"


@pytest.mark.asyncio
async def test_malformed_reply_is_clean() -> None:
    client = _client(lambda request: httpx.Response(200, json=_reply("I think it is fine")))

    result = await client.classify("some text")

    assert result.flagged is False
    assert result.reason == "Parsing error, treated as clean"


@pytest.mark.asyncio
async def test_non_json_body_is_treated_as_empty() -> None:
    client = _client(lambda request: httpx.Response(200, text="<html>oops</html>"))

    result = await client.classify("some text")

    assert result.flagged is False
    assert result.reason == "Gemini response empty, treated as clean"


@pytest.mark.asyncio
async def test_http_error_raises_with_status_code() -> None:
    client = _client(lambda request: httpx.Response(503, json={"error": "unavailable"}))

    with pytest.raises(ModerationProviderError) as exc_info:
        await client.classify("some text")

    assert exc_info.value.status_code == 503
    assert "status code 503" in str(exc_info.value)


@pytest.mark.asyncio
async def test_network_error_raises_without_status_code() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = _client(handler)

    with pytest.raises(ModerationProviderError) as exc_info:
        await client.classify("some text")

    assert exc_info.value.status_code is None
    assert "status code N/A" in str(exc_info.value)
    assert "connection refused" in str(exc_info.value)


@pytest.mark.asyncio
async def test_classify_without_key_raises() -> None:
    client = GeminiModerationClient(_config(api_key=None))

    assert client.configured is False
    with pytest.raises(ModerationNotConfiguredError):
        await client.classify("some text")


@pytest.mark.asyncio
async def test_client_uses_configured_timeout() -> None:
    client = GeminiModerationClient(
        GeminiConfig(api_key=API_KEY, model="m", base_url="https://gemini.test", timeout_seconds=2.0)
    )

    http_client = await client._ensure_client()

    assert http_client.timeout.read == 2.0
    await client.aclose()


def test_strip_code_fences_is_noop_on_plain_json() -> None:
    raw = '{"flagged": false}'

    assert strip_code_fences(raw) == raw


def test_parse_verdict_defaults_missing_reason() -> None:
    result = parse_verdict('{"flagged": 1}')

    assert result.flagged is True
    assert result.reason == "Clean (No specific reason provided)"


def test_parse_verdict_rejects_non_object() -> None:
    result = parse_verdict("[true]")

    assert result.flagged is False
    assert result.reason == "Parsing error, treated as clean"


def test_prompt_embeds_text() -> None:
    assert 'Message to analyze: """hello"""' in build_prompt("hello")


@pytest.mark.asyncio
async def test_slow_upstream_is_cut_off_at_timeout() -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(2.0)
        return httpx.Response(200, json=_reply('{"flagged": false, "reason": "Clean"}'))

    client = GeminiModerationClient(
        GeminiConfig(api_key=API_KEY, model="m", base_url="https://gemini.test", timeout_seconds=0.1),
        transport=httpx.MockTransport(handler),
    )

    started = time.monotonic()
    with pytest.raises(ModerationProviderError) as exc_info:
        await client.classify("some text")
    elapsed = time.monotonic() - started
    await client.aclose()

    assert elapsed < 1.0
    assert exc_info.value.status_code is None
    assert "timeout of 100ms exceeded" in str(exc_info.value)


@pytest.fixture
def fresh_gemini_client() -> Iterator[None]:
    _GeminiClientSingleton.reset()
    yield
    _GeminiClientSingleton.reset()


def test_shared_client_is_built_once_from_settings(fresh_gemini_client: None) -> None:
    client = get_gemini_client()

    assert get_gemini_client() is client
    assert client.config.model == settings.gemini_model
    assert client.config.timeout_seconds == settings.moderation_timeout_seconds
