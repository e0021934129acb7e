"""Lutobot configuration schema — YAML + Pydantic + env override."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# ════════════════════════════════════════════════════════════
# SUB-CONFIGS (nested BaseModel)
# ════════════════════════════════════════════════════════════


class ProviderConfig(BaseModel):
    """Single LLM provider credentials."""

    api_key: str = ""
    api_base: str | None = None


class ProvidersConfig(BaseModel):
    """LLM provider credentials (LiteLLM multi-provider + OpenRouter)."""

    gemini: ProviderConfig = Field(default_factory=ProviderConfig)
    openai: ProviderConfig = Field(default_factory=ProviderConfig)
    anthropic: ProviderConfig = Field(default_factory=ProviderConfig)
    openrouter: ProviderConfig = Field(default_factory=ProviderConfig)


class LLMConfig(BaseModel):
    """Completion backend used by the agents.

    ``provider`` picks the implementation; both accept the same prompts
    and are interchangeable at runtime.
    """

    provider: Literal["litellm", "openrouter"] = "litellm"
    model: str = "gemini/gemini-2.5-pro"
    temperature: float = 0.7
    max_tokens: int = 2048


class AssistantConfig(BaseModel):
    """Assistant behaviour (assistant.*)."""

    name: str = "Lutobot"
    cuisine: str = "Filipino"
    history_limit: int = 20
    # Deadline applied by the API/CLI edge to a whole request; None = no limit
    request_timeout_s: float | None = 60.0
    history_window: int = 3


class StoreConfig(BaseModel):
    """Recipe document store."""

    backend: Literal["memory", "sqlite"] = "sqlite"
    path: str = "data/lutobot.db"
    seed_path: str | None = None


class RateLimitConfig(BaseModel):
    enabled: bool = True
    requests_per_minute: int = 60


class ApiConfig(BaseModel):
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])
    rate_limit: RateLimitConfig = Field(default_factory=RateLimitConfig)


# ════════════════════════════════════════════════════════════
# ROOT CONFIG (BaseSettings — env + .env support)
# ════════════════════════════════════════════════════════════


class Config(BaseSettings):
    """
    Root configuration.

    Priority: env vars > .env > YAML (init kwargs) > defaults

    Env override examples:
        LUTOBOT_LLM__PROVIDER=openrouter
        LUTOBOT_LLM__MODEL=openrouter/google/gemini-2.5-flash
        LUTOBOT_STORE__PATH=data/prod.db
        LUTOBOT_PROVIDERS__GEMINI__API_KEY=...
    """

    model_config = SettingsConfigDict(
        env_prefix="LUTOBOT_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    assistant: AssistantConfig = Field(default_factory=AssistantConfig)
    llm: LLMConfig = Field(default_factory=LLMConfig)
    providers: ProvidersConfig = Field(default_factory=ProvidersConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)

    # ── Computed properties ─────────────────────────────────

    @property
    def store_path(self) -> Path:
        return Path(self.store.path)

    # ── Provider helpers ────────────────────────────────────

    def get_api_key(self, model: str | None = None) -> str | None:
        """API key of the provider named in the model string, if configured."""
        model_name = (model or self.llm.model).lower()

        keyword_map: dict[str, ProviderConfig] = {
            "openrouter": self.providers.openrouter,
            "gemini": self.providers.gemini,
            "google": self.providers.gemini,
            "openai": self.providers.openai,
            "gpt": self.providers.openai,
            "anthropic": self.providers.anthropic,
            "claude": self.providers.anthropic,
        }
        for keyword, provider in keyword_map.items():
            if keyword in model_name and provider.api_key:
                return provider.api_key
        return None

    def get_api_base(self, model: str | None = None) -> str | None:
        """Get API base URL for model name."""
        model_name = (model or self.llm.model).lower()
        for name in ProvidersConfig.model_fields:
            p = getattr(self.providers, name)
            if isinstance(p, ProviderConfig) and name in model_name and p.api_base:
                return p.api_base
        return None
