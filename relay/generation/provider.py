"""
generation/provider.py — OpenAI chat-completions client
=======================================================
Single async call per generation, bounded by a timeout. Every failure
mode (missing key, transport error, timeout, non-2xx, unexpected body)
surfaces as ``ProviderError`` so the HTTP layer can map it to 503.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

import httpx

from ..config import Settings
from ..errors import ProviderError

logger = logging.getLogger("relay.generation")


class OpenAIProvider:
    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = "https://api.openai.com/v1",
        model: str = "gpt-4",
        max_tokens: int = 2000,
        temperature: float = 0.3,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "OpenAIProvider":
        return cls(
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url,
            model=settings.openai_model,
            max_tokens=settings.openai_max_tokens,
            temperature=settings.openai_temperature,
            timeout=settings.provider_timeout_seconds,
        )

    def _payload(self, system_prompt: str, user_prompt: str) -> Dict[str, Any]:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
        }

    @staticmethod
    def _error_message(resp: httpx.Response) -> str:
        try:
            message = resp.json()["error"]["message"]
        except (ValueError, KeyError, TypeError):
            return resp.reason_phrase or f"HTTP {resp.status_code}"
        return str(message)

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        """Return the first choice's message content."""
        if not self.api_key:
            raise ProviderError("OpenAI API key not configured")

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                # httpx times each phase separately; wait_for bounds the whole call.
                resp = await asyncio.wait_for(
                    client.post(
                        f"{self.base_url}/chat/completions",
                        headers={"Authorization": f"Bearer {self.api_key}"},
                        json=self._payload(system_prompt, user_prompt),
                    ),
                    self.timeout,
                )
        except (httpx.TimeoutException, asyncio.TimeoutError) as exc:
            raise ProviderError(f"OpenAI API timed out after {self.timeout:g}s") from exc
        except httpx.HTTPError as exc:
            raise ProviderError(f"OpenAI API request failed: {exc}") from exc

        if resp.status_code >= 400:
            raise ProviderError(f"OpenAI API error: {self._error_message(resp)}")

        try:
            content = resp.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise ProviderError("OpenAI API returned a malformed response") from exc
        if not isinstance(content, str):
            raise ProviderError("OpenAI API returned no message content")
        return content
