"""Reusable LLM generation parameters.

LLMConfig is a standalone Pydantic model that can be:
- built from Settings as the global default,
- declared per pipeline stage for stage-specific budgets,
- passed per-call for one-off overrides.

Priority chain (low → high):
    .env global defaults  →  stage-level LLMConfig  →  per-call overrides
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class LLMConfig(BaseModel):
    """LLM generation parameters.

    All fields are optional.  ``None`` means "use the next layer's value".
    """

    model: str | None = Field(default=None, description="LiteLLM model identifier")
    max_tokens: int | None = Field(default=None, ge=1, description="Max tokens to generate")
    temperature: float | None = Field(default=None, ge=0.0, le=2.0)

    def merge(self, overrides: LLMConfig) -> LLMConfig:
        """Return a new LLMConfig: *self* as base, *overrides* wins on non-None fields."""
        base = self.model_dump(exclude_none=True)
        base.update(overrides.model_dump(exclude_none=True))
        return LLMConfig(**base)

    def to_litellm_kwargs(self) -> dict:
        """Convert to ``litellm.acompletion()``-compatible keyword arguments."""
        kw: dict = {}
        for field in ("max_tokens", "temperature"):
            val = getattr(self, field)
            if val is not None:
                kw[field] = val
        return kw


# ── Per-stage budgets ────────────────────────────────────────

SEGMENTER_LLM_CONFIG = LLMConfig(max_tokens=2048)
EXTRACTOR_LLM_CONFIG = LLMConfig(max_tokens=2048)
RENDERER_LLM_CONFIG = LLMConfig(max_tokens=4096)
REFINER_LLM_CONFIG = LLMConfig(max_tokens=4096)
