from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field

import pytest

from roulette.core.config import Settings
from roulette.core.errors import InvalidStateError, NarrativeUnavailableError
from roulette.services.llm import LLMProviderError
from roulette.services.narrative_service import NarrativeService


@dataclass
class RecordingProvider:
    """Provider stub that records prompts and returns canned text."""

    reply: str = "Protocol X looks exposed."
    delay: float = 0.0
    error: Exception | None = None
    name: str = "recording"
    require_api_key: bool = False
    prompts: list[str] = field(default_factory=list)
    models: list[str] = field(default_factory=list)

    def ensure_ready(self, settings) -> None:
        return None

    def build_client(self, settings) -> object:
        return object()

    def default_model(self) -> str:
        return "stub-model"

    def generate(self, client, *, model, prompt, max_output_tokens) -> str:
        self.prompts.append(prompt)
        self.models.append(model)
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.reply


def _settings(**overrides) -> Settings:
    return Settings(_env_file=None, **{"narrative_timeout_seconds": 0.5, **overrides})


def test_risk_analysis_prompts_with_protocol_metrics(catalogue):
    provider = RecordingProvider()
    narratives = NarrativeService(_settings(), provider=provider)

    analysis = asyncio.run(narratives.risk_analysis(list(catalogue)))

    assert analysis == "Protocol X looks exposed."
    assert "Protocol X" in provider.prompts[0]
    assert "avgHealthFactor" in provider.prompts[0]
    assert provider.models == ["stub-model"]


def test_configured_model_overrides_provider_default(catalogue):
    provider = RecordingProvider()
    narratives = NarrativeService(_settings(narrative_model="custom"), provider=provider)

    asyncio.run(narratives.risk_analysis(list(catalogue)))

    assert provider.models == ["custom"]


def test_prediction_prompt_includes_book(service):
    round_ = service.create_round()
    service.place_bet(round_.id, "A", "X", 100)
    provider = RecordingProvider(reply="X, 60%")
    narratives = NarrativeService(_settings(), provider=provider)

    prediction = asyncio.run(narratives.predict_round(service.get_round(round_.id)))

    assert prediction == "X, 60%"
    assert round_.id in provider.prompts[0]
    assert "Protocol Y" in provider.prompts[0]


def test_post_mortem_requires_resolved_round(service):
    round_ = service.create_round()
    narratives = NarrativeService(_settings(), provider=RecordingProvider())

    with pytest.raises(InvalidStateError):
        asyncio.run(narratives.post_mortem(service.get_round(round_.id)))


def test_post_mortem_describes_result(service):
    round_ = service.create_round()
    service.place_bet(round_.id, "A", "Y", 40)
    resolution = service.resolve_round(round_.id, {"X": 2, "Y": 9})
    provider = RecordingProvider(reply="Cascade on Y.")
    narratives = NarrativeService(_settings(), provider=provider)

    analysis = asyncio.run(narratives.post_mortem(resolution.round))

    assert analysis == "Cascade on Y."
    assert "Protocol Y" in provider.prompts[0]
    assert '"Y": 9' in provider.prompts[0]


def test_slow_provider_times_out(catalogue):
    provider = RecordingProvider(delay=0.5)
    narratives = NarrativeService(_settings(narrative_timeout_seconds=0.05), provider=provider)

    with pytest.raises(NarrativeUnavailableError, match="timed out"):
        asyncio.run(narratives.risk_analysis(list(catalogue)))


def test_provider_errors_are_mapped(catalogue):
    provider = RecordingProvider(error=LLMProviderError("quota exceeded"))
    narratives = NarrativeService(_settings(), provider=provider)

    with pytest.raises(NarrativeUnavailableError, match="quota exceeded"):
        asyncio.run(narratives.risk_analysis(list(catalogue)))


def test_missing_credentials_are_mapped(catalogue):
    narratives = NarrativeService(_settings(llm_default_provider="openai", openai_api_key=None))

    with pytest.raises(NarrativeUnavailableError, match="OPENAI_API_KEY"):
        asyncio.run(narratives.risk_analysis(list(catalogue)))


def test_unknown_provider_is_mapped(catalogue):
    narratives = NarrativeService(_settings(llm_default_provider="nope"))

    with pytest.raises(NarrativeUnavailableError):
        asyncio.run(narratives.risk_analysis(list(catalogue)))
