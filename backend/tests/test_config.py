from __future__ import annotations

import pytest
from pydantic import ValidationError

from roulette.core.config import Settings


def test_defaults_match_round_rules():
    settings = Settings(_env_file=None)

    assert settings.default_round_duration_seconds == 3600
    assert settings.default_min_bet == 5
    assert settings.house_cut == pytest.approx(0.05)
    assert settings.round_id_bytes == 6
    assert settings.bet_id_bytes == 4


def test_provider_name_is_normalized():
    assert Settings(_env_file=None, llm_default_provider=" Gemini ").llm_default_provider == "gemini"


def test_blank_model_falls_back_to_provider_default():
    assert Settings(_env_file=None, narrative_model="  ").narrative_model is None


@pytest.mark.parametrize("house_cut", [-0.1, 1.0])
def test_house_cut_must_be_a_fraction(house_cut):
    with pytest.raises(ValidationError):
        Settings(_env_file=None, house_cut=house_cut)


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("DEFAULT_MIN_BET", "10")
    monkeypatch.setenv("NARRATIVE_TIMEOUT_SECONDS", "2.5")

    settings = Settings(_env_file=None)

    assert settings.default_min_bet == 10
    assert settings.narrative_timeout_seconds == 2.5
