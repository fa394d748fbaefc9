"""
AI Provider Factory
Picks the completion provider used for ATS scoring from AI_PROVIDER and
keeps one instance per provider for the life of the process.
"""
import logging
from typing import Dict, NamedTuple, Optional, Type

from app.config import settings
from .base import AIProvider
from .openai_service import OpenAIService
from .openrouter_service import OpenRouterService

logger = logging.getLogger(__name__)


class _Registration(NamedTuple):
    provider_class: Type[AIProvider]
    key_setting: str


class AIFactory:
    """Registry of completion providers keyed by AI_PROVIDER value"""

    _registry: Dict[str, _Registration] = {
        'openrouter': _Registration(OpenRouterService, 'OPENROUTER_API_KEY'),
        'openai': _Registration(OpenAIService, 'OPENAI_API_KEY'),
    }
    _instances: Dict[str, AIProvider] = {}

    @classmethod
    def _resolve(cls, provider_name: Optional[str]) -> tuple:
        name = (provider_name or settings.AI_PROVIDER).strip().lower()
        registration = cls._registry.get(name)
        if registration is None:
            raise ValueError(
                f"Unknown AI provider: {name}. Available providers: {', '.join(cls._registry)}"
            )
        return name, registration

    @classmethod
    def is_configured(cls, provider_name: Optional[str] = None) -> bool:
        """True when the provider is known and its API key is set"""
        try:
            _, registration = cls._resolve(provider_name)
        except ValueError:
            return False
        return bool(getattr(settings, registration.key_setting, None))

    @classmethod
    def get_provider(cls, provider_name: Optional[str] = None) -> AIProvider:
        """
        Shared provider instance.

        Raises:
            ValueError: unknown provider, or its API key is not set
        """
        name, registration = cls._resolve(provider_name)
        if name not in cls._instances:
            if not getattr(settings, registration.key_setting, None):
                raise ValueError(f"{name} requires {registration.key_setting} to be set in environment variables")
            cls._instances[name] = registration.provider_class()
            logger.info(f"Initialized AI provider: {name} ({cls._instances[name].model})")
        return cls._instances[name]

    @classmethod
    def reset(cls):
        """Drop cached instances (settings changed)"""
        cls._instances.clear()
