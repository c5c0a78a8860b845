"""Per-stage request and outcome types for the documentation pipeline.

A stage whose structured output cannot be parsed does not fail the run:
it yields :class:`Degraded` carrying a well-typed default, so callers can
tell "the provider found nothing" (``Parsed`` with empty data) apart from
"the provider's answer was unusable".
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class StageRequest:
    """One outbound generation call."""
    stage: str
    system_prompt: str
    user_prompt: str
    max_tokens: int | None = None


@dataclass(frozen=True)
class StageOutcome(Generic[T]):
    value: T

    @property
    def degraded(self) -> bool:
        return False


@dataclass(frozen=True)
class Parsed(StageOutcome[T]):
    """Response matched the stage protocol."""


@dataclass(frozen=True)
class Degraded(StageOutcome[T]):
    """Response was structurally unusable; ``value`` is the stage default."""
    reason: str = ""

    @property
    def degraded(self) -> bool:
        return True
