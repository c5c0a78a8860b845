"""Pydantic Settings — typed configuration with .env auto-loading."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

from config.llm_config import LLMConfig

# Fallback chains, most preferred first.
OPENAI_MODEL_FALLBACK_CHAIN: list[str] = [
    "gpt-4o",
    "gpt-4o-mini",
    "gpt-4-turbo",
    "gpt-4",
    "gpt-3.5-turbo",
]

CLAUDE_MODEL_FALLBACK_CHAIN: list[str] = [
    "anthropic/claude-sonnet-4-20250514",
    "anthropic/claude-3-5-sonnet-20241022",
    "anthropic/claude-3-sonnet-20240229",
    "anthropic/claude-3-haiku-20240307",
]


class Settings(BaseSettings):
    """Application configuration loaded from environment / .env file."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # ── Service ──────────────────────────────────────────────
    service_port: int = 3000
    cors_origins: list[str] = ["*"]
    debug: bool = False
    log_level: str = "INFO"

    # ── LLM ──────────────────────────────────────────────────
    llm_provider: Literal["openai", "claude"] = "openai"
    # Preferred model per provider; empty = start at the head of the chain
    openai_model: str = ""
    claude_model: str = ""
    llm_max_tokens: int = 4096
    llm_temperature: float = 0.3
    llm_request_timeout: int = 60  # seconds, applied to LiteLLM globally

    # Provider API keys (read by LiteLLM automatically via env)
    openai_api_key: str = ""
    anthropic_api_key: str = ""

    # ── Generation ───────────────────────────────────────────
    mock_generation: bool = False  # deterministic offline pipeline, no LLM calls
    # Body language of generated documents; section headings stay English
    document_language: str = "Spanish"

    # ── Helpers ───────────────────────────────────────────────

    def preferred_model(self) -> str:
        """Configured preferred model for the active provider ('' if unset).

        A bare Claude name such as ``claude-sonnet-4-20250514`` gets the
        ``anthropic/`` prefix the fallback chain uses.
        """
        if self.llm_provider != "claude":
            return self.openai_model
        if self.claude_model and "/" not in self.claude_model:
            return f"anthropic/{self.claude_model}"
        return self.claude_model

    def fallback_chain(self) -> list[str]:
        """Fixed fallback chain for the active provider."""
        if self.llm_provider == "claude":
            return list(CLAUDE_MODEL_FALLBACK_CHAIN)
        return list(OPENAI_MODEL_FALLBACK_CHAIN)

    def provider_api_key(self) -> str:
        return self.anthropic_api_key if self.llm_provider == "claude" else self.openai_api_key

    def get_default_llm_config(self) -> LLMConfig:
        """Build an :class:`LLMConfig` from global .env defaults."""
        return LLMConfig(
            model=self.preferred_model() or None,
            max_tokens=self.llm_max_tokens,
            temperature=self.llm_temperature,
        )


@lru_cache
def get_settings() -> Settings:
    """Singleton accessor for application settings."""
    return Settings()
