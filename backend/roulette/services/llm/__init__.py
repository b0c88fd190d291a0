"""LLM provider registry used by the narrative service."""

from .registry import (
    UnknownLLMProviderError,
    available_providers,
    get_provider,
    register_provider,
)
from .base import LLMProvider, LLMProviderError, ProviderNotConfiguredError

__all__ = [
    "LLMProvider",
    "LLMProviderError",
    "ProviderNotConfiguredError",
    "UnknownLLMProviderError",
    "available_providers",
    "get_provider",
    "register_provider",
]
