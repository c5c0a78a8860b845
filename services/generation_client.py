"""Generation client — free-text completion with an ordered model fallback chain.

Resilience policy: each model in the chain is tried exactly once, in order.
The first success wins; a failure is recorded and the next model is tried
immediately (no backoff, no retry of the same model).  When the whole chain
fails a single :class:`GenerationError` lists every model and its error.

The client is constructed explicitly and handed to the pipeline, so tests
substitute a fake by subclassing :class:`GenerationClient`.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

import litellm

from config.llm_config import LLMConfig
from config.settings import Settings, get_settings
from errors import ConfigurationError, GenerationError

logger = logging.getLogger(__name__)

DEFAULT_TEMPERATURE = 0.3


def _model_name(model: str) -> str:
    return model.rsplit("/", 1)[-1]


def build_model_chain(preferred: str, fallback_chain: list[str]) -> list[str]:
    """Preferred model first, then the fallback chain without it.

    Models are compared without their provider prefix.
    """
    if not preferred:
        return list(fallback_chain)
    name = _model_name(preferred)
    return [preferred, *(m for m in fallback_chain if _model_name(m) != name)]


class GenerationClient(ABC):
    """Boundary to the text-generation provider."""

    @abstractmethod
    async def complete(
        self,
        prompt: str,
        *,
        system_prompt: str | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> str:
        """Return the completion text for *prompt* or raise."""
        ...


class LiteLLMGenerationClient(GenerationClient):
    """:class:`GenerationClient` backed by ``litellm.acompletion``.

    Model identifiers follow LiteLLM naming (``gpt-4o``,
    ``anthropic/claude-sonnet-4-20250514``).  The model list is fixed at
    construction and never mutated.
    """

    def __init__(
        self,
        provider: str,
        models: list[str],
        api_key: str,
        config: LLMConfig | None = None,
    ) -> None:
        if not models:
            raise ConfigurationError("Model fallback chain is empty")
        self._provider = provider
        self._models = tuple(models)
        self._api_key = api_key
        self._config = config or LLMConfig(temperature=DEFAULT_TEMPERATURE)

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> LiteLLMGenerationClient:
        settings = settings or get_settings()
        return cls(
            provider=settings.llm_provider,
            models=build_model_chain(settings.preferred_model(), settings.fallback_chain()),
            api_key=settings.provider_api_key(),
            config=settings.get_default_llm_config(),
        )

    @property
    def provider(self) -> str:
        return self._provider

    @property
    def models(self) -> list[str]:
        return list(self._models)

    async def complete(
        self,
        prompt: str,
        *,
        system_prompt: str | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> str:
        if not self._api_key:
            key_name = "ANTHROPIC_API_KEY" if self._provider == "claude" else "OPENAI_API_KEY"
            raise ConfigurationError(f"{key_name} environment variable is required")

        call_config = self._config.merge(
            LLMConfig(max_tokens=max_tokens, temperature=temperature)
        )
        messages: list[dict] = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        errors: list[tuple[str, str]] = []
        for model in self._models:
            logger.info("Trying %s (%s)...", self._provider, model)
            try:
                text = await self._complete_with_model(model, messages, call_config)
            except Exception as e:
                logger.warning("Model %s failed: %s", model, e)
                errors.append((model, str(e)))
                continue
            logger.info("Success with %s (%s)", self._provider, model)
            return text

        raise GenerationError(self._provider, errors)

    async def _complete_with_model(
        self,
        model: str,
        messages: list[dict],
        config: LLMConfig,
    ) -> str:
        response = await litellm.acompletion(
            model=model,
            messages=messages,
            api_key=self._api_key,
            **config.to_litellm_kwargs(),
        )
        if not response.choices:
            raise ValueError("No choices returned by provider")

        choice = response.choices[0]
        content = choice.message.content if choice.message else None
        if not content:
            finish_reason = choice.finish_reason
            if finish_reason == "length":
                raise ValueError("Response was truncated due to max_tokens limit")
            if finish_reason == "content_filter":
                raise ValueError("Response was filtered by content filter")
            raise ValueError(f"No content in response. Finish reason: {finish_reason or 'unknown'}")
        return content
