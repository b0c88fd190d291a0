"""OpenAI provider hooks."""

from __future__ import annotations

import random
import time
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

import httpx
from loguru import logger
from openai import APIError, APIStatusError, APITimeoutError, OpenAI

from roulette.core.config import Settings

from .base import LLMProvider, LLMProviderError, ProviderNotConfiguredError

_DEFAULT_MODEL = "gpt-4.1-mini"
_MAX_ATTEMPTS = 3
_RETRY_BASE_SLEEP_SECONDS = 1.0
_RETRY_MAX_SLEEP_SECONDS = 4.0
_RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}


@lru_cache(maxsize=4)
def _cached_client(
    api_key: str,
    base_url: str | None,
    organization: str | None,
    project: str | None,
) -> OpenAI:
    kwargs: dict[str, Any] = {"api_key": api_key}
    if base_url:
        kwargs["base_url"] = base_url
    if organization:
        kwargs["organization"] = organization
    if project:
        kwargs["project"] = project
    return OpenAI(**kwargs)


def _should_retry_exception(exc: Exception) -> bool:
    if isinstance(exc, (httpx.RemoteProtocolError, APITimeoutError)):
        return True
    if isinstance(exc, APIStatusError):
        return exc.status_code in _RETRYABLE_STATUS_CODES
    if isinstance(exc, APIError):
        error_type = getattr(exc, "type", None)
        return isinstance(error_type, str) and error_type.lower() in {
            "api_error",
            "rate_limit_error",
            "server_error",
        }
    return False


def _retry_sleep_seconds(attempt: int) -> float:
    backoff = _RETRY_BASE_SLEEP_SECONDS * (2 ** max(attempt - 1, 0))
    return min(backoff, _RETRY_MAX_SLEEP_SECONDS) + random.uniform(0.0, 0.5)


@dataclass(slots=True)
class OpenAIProvider(LLMProvider):
    name: str = "openai"
    require_api_key: bool = True

    def ensure_ready(self, settings: Settings) -> None:
        if self.require_api_key and not settings.openai_api_key:
            raise ProviderNotConfiguredError("OPENAI_API_KEY is not configured")

    def build_client(self, settings: Settings) -> OpenAI:
        self.ensure_ready(settings)
        base_url = str(settings.openai_api_base) if settings.openai_api_base else None
        return _cached_client(
            settings.openai_api_key or "",
            base_url,
            settings.openai_org_id,
            settings.openai_project_id,
        )

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
        attempt = 0
        while True:
            attempt += 1
            try:
                response = client.responses.create(
                    model=model,
                    input=prompt,
                    max_output_tokens=max_output_tokens,
                )
                break
            except Exception as exc:  # noqa: BLE001
                if attempt >= _MAX_ATTEMPTS or not _should_retry_exception(exc):
                    raise LLMProviderError(f"OpenAI request failed: {exc}") from exc
                delay = _retry_sleep_seconds(attempt)
                logger.warning(
                    "OpenAI request failed (attempt {}/{}), retrying in {:.1f}s: {}",
                    attempt,
                    _MAX_ATTEMPTS,
                    delay,
                    exc,
                )
                time.sleep(delay)

        text = getattr(response, "output_text", None)
        if not isinstance(text, str) or not text.strip():
            raise LLMProviderError("OpenAI response did not contain any text output")
        return text.strip()


__all__ = ["OpenAIProvider"]
