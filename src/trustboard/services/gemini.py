"""Google Gemini client for AI content moderation.

This module provides the GeminiModerationClient class which asks a remote
generative-language model to classify feedback text. It includes:

- HTTP client with a bounded timeout
- Prompt construction requesting a strict JSON verdict
- Lenient parsing of the model output (Markdown fences, empty or malformed replies)

Every failure after the request succeeds degrades to a non-flagged result.
Transport failures raise ModerationProviderError so the caller decides.
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
from dataclasses import dataclass
from typing import Any

import httpx

from trustboard.core.settings import settings
from trustboard.services.moderation_result import ModerationResult

# Configure logger for this module
logger = logging.getLogger(__name__)

PROVIDER = "Google Gemini"

REASON_EMPTY = "Gemini response empty, treated as clean"
REASON_PARSE_ERROR = "Parsing error, treated as clean"
REASON_NO_REASON = "Clean (No specific reason provided)"

PROMPT_TEMPLATE = """
Analyze the following user message for safety, toxicity, and harmful content
(insults, hate speech, spam, etc.).
Your response must ONLY be a valid JSON object with the following keys:
{{
  "flagged": true or false,
  "reason": "A concise explanation of why it is flagged, or 'Clean' if not flagged."
}}

Message to analyze: \"\"\"{text}\"\"\"
"""

_LEADING_FENCE = re.compile(r"^\s*```(?:json)?\s*", re.IGNORECASE)
_TRAILING_FENCE = re.compile(r"\s*```\s*$")


class ModerationProviderError(RuntimeError):
    """Raised when the remote moderation provider cannot be reached.

    Attributes:
        status_code: HTTP status returned by the provider, if any.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        code = status_code if status_code is not None else "N/A"
        super().__init__(
            f"Gemini Moderation Failed: Request failed with status code {code}. {message}"
        )


class ModerationNotConfiguredError(ModerationProviderError):
    """Raised when classification is attempted without an API credential."""


@dataclass(frozen=True)
class GeminiConfig:
    """Immutable configuration for Gemini moderation calls."""

    api_key: str | None
    model: str
    base_url: str
    timeout_seconds: float

    @property
    def configured(self) -> bool:
        return bool(self.api_key)


def load_gemini_config() -> GeminiConfig:
    """Build configuration object from global settings."""

    return GeminiConfig(
        api_key=settings.gemini_api_key,
        model=settings.gemini_model,
        base_url=settings.gemini_base_url.rstrip("/"),
        timeout_seconds=settings.moderation_timeout_seconds,
    )


def build_prompt(text: str) -> str:
    """Return the classification instruction for *text*."""
    return PROMPT_TEMPLATE.format(text=text)


def strip_code_fences(raw: str) -> str:
    """Remove a Markdown code fence wrapping *raw*, if present."""
    cleaned = _LEADING_FENCE.sub("", raw, count=1)
    return _TRAILING_FENCE.sub("", cleaned, count=1)


def extract_response_text(payload: Any) -> str | None:
    """Pull ``candidates[0].content.parts[0].text`` out of a response body."""
    try:
        text = payload["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return None
    return text if isinstance(text, str) else None


def parse_verdict(raw: str) -> ModerationResult:
    """Interpret the model's free-text reply as a moderation verdict.

    Args:
        raw: Text returned by the model, possibly wrapped in a code fence

    Returns:
        ModerationResult; malformed output yields a non-flagged result
    """
    cleaned = strip_code_fences(raw)
    try:
        verdict = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        logger.error("Gemini output parsing failed: %s", exc)
        return ModerationResult(flagged=False, provider=PROVIDER, reason=REASON_PARSE_ERROR)

    if not isinstance(verdict, dict):
        logger.error("Gemini output parsing failed: expected an object, got %s", type(verdict).__name__)
        return ModerationResult(flagged=False, provider=PROVIDER, reason=REASON_PARSE_ERROR)

    reason = verdict.get("reason")
    return ModerationResult(
        flagged=bool(verdict.get("flagged")),
        provider=PROVIDER,
        reason=str(reason) if reason else REASON_NO_REASON,
    )


class GeminiModerationClient:
    """HTTP client wrapper for Gemini moderation requests."""

    def __init__(
        self,
        config: GeminiConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config or load_gemini_config()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._client_lock = asyncio.Lock()

    @property
    def configured(self) -> bool:
        """Return True if an API key is available."""
        return self.config.configured

    @property
    def endpoint(self) -> str:
        return f"{self.config.base_url}/models/{self.config.model}:generateContent"

    async def _ensure_client(self) -> httpx.AsyncClient:
        async with self._client_lock:
            if self._client is None:
                self._client = httpx.AsyncClient(
                    timeout=httpx.Timeout(self.config.timeout_seconds),
                    transport=self._transport,
                )
        return self._client

    async def classify(self, text: str) -> ModerationResult:
        """Ask the model whether *text* should be flagged.

        Args:
            text: Feedback text to classify

        Returns:
            ModerationResult from the model's verdict

        Raises:
            ModerationNotConfiguredError: If no API key is configured
            ModerationProviderError: On transport failure, a non-2xx response
                or when the call outlives ``timeout_seconds``
        """
        if not self.configured:
            raise ModerationNotConfiguredError("Gemini API key not configured")

        client = await self._ensure_client()
        body = {"contents": [{"parts": [{"text": build_prompt(text)}]}]}
        headers = {"x-goog-api-key": self.config.api_key or ""}

        # httpx timeouts apply per phase; the overall deadline covers the whole call.
        try:
            response = await asyncio.wait_for(
                client.post(self.endpoint, json=body, headers=headers),
                timeout=self.config.timeout_seconds,
            )
            response.raise_for_status()
        except asyncio.TimeoutError as exc:
            timeout_ms = round(self.config.timeout_seconds * 1000)
            raise ModerationProviderError(f"timeout of {timeout_ms}ms exceeded") from exc
        except httpx.HTTPStatusError as exc:
            raise ModerationProviderError(
                str(exc), status_code=exc.response.status_code
            ) from exc
        except httpx.HTTPError as exc:
            raise ModerationProviderError(str(exc) or type(exc).__name__) from exc

        try:
            payload = response.json()
        except ValueError:
            payload = None

        raw = extract_response_text(payload)
        if not raw:
            return ModerationResult(flagged=False, provider=PROVIDER, reason=REASON_EMPTY)

        return parse_verdict(raw)

    async def aclose(self) -> None:
        """Clean up underlying HTTP client resources."""

        async with self._client_lock:
            if self._client is not None:
                await self._client.aclose()
                self._client = None


class _GeminiClientSingleton:
    """Singleton wrapper for GeminiModerationClient."""

    _instance: GeminiModerationClient | None = None

    @classmethod
    def get_instance(cls) -> GeminiModerationClient:
        """Get or create the singleton GeminiModerationClient instance."""
        if cls._instance is None:
            cls._instance = GeminiModerationClient()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        cls._instance = None


def get_gemini_client() -> GeminiModerationClient:
    """Return a singleton Gemini moderation client instance."""
    return _GeminiClientSingleton.get_instance()
