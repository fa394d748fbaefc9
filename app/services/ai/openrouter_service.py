"""
OpenRouter Service Implementation
Chat completions over plain HTTP (bearer key, OpenAI-compatible payload)
"""
import logging
from typing import Optional

import httpx

from app.config import settings
from .base import AIProvider, AIProviderError

logger = logging.getLogger(__name__)


class OpenRouterService(AIProvider):
    """OpenRouter API implementation (access to multiple models)"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key or settings.OPENROUTER_API_KEY
        self.base_url = (base_url or settings.OPENROUTER_BASE_URL).rstrip("/")
        self.chat_model = model or settings.ATS_MODEL
        self.timeout = timeout or settings.ATS_TIMEOUT_SECONDS
        self._transport = transport

    async def complete(self, prompt: str, *, max_tokens: int, temperature: float) -> str:
        """POST {base_url}/chat/completions and return choices[0].message.content."""
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                response = await client.post(
                    f"{self.base_url}/chat/completions",
                    headers={
                        "Authorization": f"Bearer {self.api_key}",
                        "Content-Type": "application/json",
                        "HTTP-Referer": settings.APP_URL,
                        "X-Title": settings.APP_NAME,
                    },
                    json={
                        "model": self.chat_model,
                        "messages": [{"role": "user", "content": prompt}],
                        "max_tokens": max_tokens,
                        "temperature": temperature,
                    },
                )
            except httpx.HTTPError as e:
                raise AIProviderError(f"OpenRouter request failed: {type(e).__name__}: {e}") from e

        if response.status_code < 200 or response.status_code >= 300:
            raise AIProviderError(f"HTTP error {response.status_code}: {response.text[:500]}")

        try:
            data = response.json()
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise AIProviderError(f"Malformed OpenRouter response: {e}") from e

        content = (content or "").strip()
        if not content:
            raise AIProviderError("No response from AI service")

        logger.debug(f"OpenRouter completion received ({len(content)} chars)")
        return content

    @property
    def name(self) -> str:
        return "openrouter"

    @property
    def model(self) -> str:
        return self.chat_model
