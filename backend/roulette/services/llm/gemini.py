"""Google Gemini provider hooks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import google.generativeai as genai
from loguru import logger

from roulette.core.config import Settings

from .base import LLMProvider, LLMProviderError, ProviderNotConfiguredError

_DEFAULT_MODEL = "gemini-2.5-flash"


def _response_text(response: Any) -> str | None:
    try:
        text = response.text
    except (ValueError, AttributeError):
        # Raised by the SDK when the candidate was blocked or empty.
        text = None
    if isinstance(text, str) and text.strip():
        return text.strip()
    return None


@dataclass(slots=True)
class GeminiProvider(LLMProvider):
    name: str = "gemini"
    require_api_key: bool = True

    def ensure_ready(self, settings: Settings) -> None:
        if self.require_api_key and not settings.gemini_api_key:
            raise ProviderNotConfiguredError("GEMINI_API_KEY is not configured")

    def build_client(self, settings: Settings) -> Any:
        self.ensure_ready(settings)
        genai.configure(api_key=settings.gemini_api_key)
        return genai

    def default_model(self) -> str:
        return _DEFAULT_MODEL

    def generate(
        self,
        client: Any,
        *,
        model: str,
        prompt: str,
        max_output_tokens: int,
    ) -> str:
        try:
            response = client.GenerativeModel(model).generate_content(
                prompt,
                generation_config={"max_output_tokens": max_output_tokens},
            )
        except Exception as exc:  # noqa: BLE001
            logger.warning("Gemini request failed model={}: {}", model, exc)
            raise LLMProviderError(f"Gemini request failed: {exc}") from exc

        text = _response_text(response)
        if text is None:
            raise LLMProviderError("Gemini response did not contain any text output")
        return text


__all__ = ["GeminiProvider"]
