"""
OpenAI Service Implementation
Uses the official async client for chat completions
"""
import logging
from typing import Optional

from openai import AsyncOpenAI, OpenAIError

from app.config import settings
from .base import AIProvider, AIProviderError

logger = logging.getLogger(__name__)


class OpenAIService(AIProvider):
    """OpenAI API implementation"""

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None):
        self.client = AsyncOpenAI(
            api_key=api_key or settings.OPENAI_API_KEY,
            timeout=settings.ATS_TIMEOUT_SECONDS,
        )
        self.chat_model = model or settings.ATS_OPENAI_MODEL

    async def complete(self, prompt: str, *, max_tokens: int, temperature: float) -> str:
        """Single-turn chat completion"""
        try:
            response = await self.client.chat.completions.create(
                model=self.chat_model,
                messages=[{"role": "user", "content": prompt}],
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except OpenAIError as e:
            raise AIProviderError(f"OpenAI request failed: {type(e).__name__}: {e}") from e

        content = (response.choices[0].message.content or "").strip() if response.choices else ""
        if not content:
            raise AIProviderError("No response from AI service")
        return content

    @property
    def name(self) -> str:
        return "openai"

    @property
    def model(self) -> str:
        return self.chat_model
