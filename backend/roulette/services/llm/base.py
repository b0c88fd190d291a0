"""Provider contracts for LLM integrations."""

from __future__ import annotations

from typing import Any, Protocol

from roulette.core.config import Settings


class LLMProviderError(Exception):
    """Raised when a provider call fails after its own retries."""


class ProviderNotConfiguredError(LLMProviderError):
    """Raised when credentials for a provider are missing."""


class LLMProvider(Protocol):
    """Interface implemented by provider adapters."""

    name: str
    require_api_key: bool

    def ensure_ready(self, settings: Settings) -> None:
        """Validate credentials or raise :class:`ProviderNotConfiguredError`."""

    def build_client(self, settings: Settings) -> Any:
        """Return a provider client for the resolved settings."""

    def default_model(self) -> str:
        """Return the model used when settings do not override it."""

    def generate(
        self,
        client: Any,
        *,
        model: str,
        prompt: str,
        max_output_tokens: int,
    ) -> str:
        """Execute the model call and return the generated text."""


__all__ = ["LLMProvider", "LLMProviderError", "ProviderNotConfiguredError"]
