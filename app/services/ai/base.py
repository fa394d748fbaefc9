"""
Base AI Provider Interface
Abstract class for chat-completion providers (OpenRouter, OpenAI)
"""
from abc import ABC, abstractmethod


class AIProviderError(Exception):
    """Completion request failed (transport error, non-2xx status, empty answer)."""


class AIProvider(ABC):
    """Base class for all AI providers"""

    @abstractmethod
    async def complete(self, prompt: str, *, max_tokens: int, temperature: float) -> str:
        """
        Send a single user prompt and return the completion text.

        Raises:
            AIProviderError: On HTTP failure or when the model returns nothing
        """
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name"""
        pass

    @property
    @abstractmethod
    def model(self) -> str:
        """Model identifier sent with each request"""
        pass
