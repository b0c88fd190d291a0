from functools import lru_cache

from pydantic import AnyUrl, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    debug: bool = Field(False, description="Enable FastAPI debug mode")
    environment: str = Field(
        default="development",
        description="Runtime environment (development|staging|production)",
    )
    default_round_duration_seconds: int = Field(
        default=3600,
        description="Round length applied when a creation request omits a duration",
        gt=0,
    )
    default_min_bet: float = Field(
        default=5.0,
        description="Minimum stake applied when a creation request omits minBet",
        gt=0,
    )
    house_cut: float = Field(
        default=0.05,
        description="Fraction of the total pool retained by the house at settlement",
        ge=0,
        lt=1,
    )
    round_id_bytes: int = Field(
        default=6,
        description="Random bytes used for round identifiers",
        ge=4,
    )
    bet_id_bytes: int = Field(
        default=4,
        description="Random bytes used for bet identifiers",
        ge=4,
    )
    llm_default_provider: str = Field(
        default="openai",
        description="Provider used for risk, prediction and post-mortem narratives",
    )
    narrative_model: str | None = Field(
        default=None,
        description="Optional model override; falls back to the provider default",
    )
    narrative_timeout_seconds: float = Field(
        default=20.0,
        description="Upper bound on a single narrative generation call",
        gt=0,
    )
    narrative_max_output_tokens: int = Field(
        default=500,
        description="Token budget for generated narratives",
        ge=16,
    )
    openai_api_key: str | None = Field(
        default=None,
        description="API key used for OpenAI-powered narratives",
    )
    openai_api_base: AnyUrl | str | None = Field(
        default=None,
        description="Optional override for the OpenAI API base URL (Azure/proxy support)",
    )
    openai_org_id: str | None = Field(
        default=None,
        description="Optional OpenAI organization identifier",
    )
    openai_project_id: str | None = Field(
        default=None,
        description="Optional OpenAI project identifier for usage scoping",
    )
    gemini_api_key: str | None = Field(
        default=None,
        description="API key used for Gemini-powered narratives",
    )

    @field_validator("llm_default_provider")
    @classmethod
    def _normalize_provider(cls, value: str) -> str:
        normalized = value.strip().lower()
        if not normalized:
            raise ValueError("LLM_DEFAULT_PROVIDER must not be blank")
        return normalized

    @field_validator("narrative_model", mode="before")
    @classmethod
    def _blank_model_is_default(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
