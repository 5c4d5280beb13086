"""Generative-text client: one Messages API call in, parsed JSON (or a failure) out."""
import asyncio
import json
import logging
import re
from typing import Any

import httpx

from coursereel.core.config import Settings
from coursereel.core.errors import ContentSynthesisError

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)```")


def extract_json(text: str) -> Any:
    """Pull a JSON object or array out of a model reply.

    Handles code fences and chatty prefaces around the payload.
    """
    s = (text or "").strip()
    m = _FENCE_RE.search(s)
    if m and m.group(1).strip():
        s = m.group(1).strip()
    try:
        return json.loads(s)
    except ValueError:
        pass
    for opener, closer in (("{", "}"), ("[", "]")):
        start, end = s.find(opener), s.rfind(closer)
        if start == -1 or end <= start:
            continue
        try:
            return json.loads(s[start:end + 1])
        except ValueError:
            continue
    raise ContentSynthesisError("Response did not contain valid JSON")


class ContentSynthesisClient:
    """Anthropic Messages API over httpx. Every call is bounded by a timeout."""

    def __init__(
        self,
        api_key: str,
        *,
        model: str,
        api_url: str = "https://api.anthropic.com/v1/messages",
        api_version: str = "2023-06-01",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.api_url = api_url
        self.api_version = api_version
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings, *, model: str | None = None) -> "ContentSynthesisClient":
        return cls(
            settings.anthropic_api_key,
            model=model or settings.content_model,
            api_url=settings.anthropic_api_url,
            api_version=settings.anthropic_version,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def complete(
        self,
        prompt: str,
        *,
        max_tokens: int = 1000,
        timeout: float = 30.0,
        temperature: float | None = None,
    ) -> str:
        """Return the reply text, or raise ContentSynthesisError."""
        if not self.is_configured:
            raise ContentSynthesisError("Generative text API key is not configured")

        payload: dict[str, Any] = {
            "model": self.model,
            "max_tokens": max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }
        if temperature is not None:
            payload["temperature"] = temperature
        headers = {
            "content-type": "application/json",
            "x-api-key": self.api_key,
            "anthropic-version": self.api_version,
        }

        async def post() -> Any:
            async with httpx.AsyncClient(timeout=timeout, transport=self._transport) as client:
                r = await client.post(self.api_url, json=payload, headers=headers)
                r.raise_for_status()
                return r.json()

        # httpx bounds each phase; wait_for bounds the whole call
        try:
            data = await asyncio.wait_for(post(), timeout)
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise ContentSynthesisError(f"Generative text request timed out after {timeout}s") from e
        except (httpx.HTTPError, ValueError) as e:
            raise ContentSynthesisError(f"Generative text request failed: {e}") from e

        try:
            blocks = data["content"]
            text = "".join(b.get("text", "") for b in blocks if b.get("type") == "text")
        except (KeyError, TypeError, AttributeError) as e:
            raise ContentSynthesisError("Unexpected response shape from generative text API") from e
        if not text.strip():
            raise ContentSynthesisError("Empty response from generative text API")
        return text

    async def complete_json(
        self,
        prompt: str,
        *,
        max_tokens: int = 1000,
        timeout: float = 30.0,
        temperature: float | None = None,
    ) -> Any:
        """Return the reply parsed as JSON, or raise ContentSynthesisError."""
        text = await self.complete(prompt, max_tokens=max_tokens, timeout=timeout, temperature=temperature)
        return extract_json(text)
