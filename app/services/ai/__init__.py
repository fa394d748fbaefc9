"""Completion providers for ATS scoring"""
from .base import AIProvider, AIProviderError
from .factory import AIFactory

__all__ = ['AIFactory', 'AIProvider', 'AIProviderError']
