"""Domain-specific exceptions for the task recorder backend.

These let the pipeline and API layers tell apart the failure modes that
matter: bad configuration (fatal, never retried), a provider that failed
on every model in the fallback chain, and a pipeline stage that aborted
the run.
"""

from __future__ import annotations


class TaskRecorderError(Exception):
    """Base class for all task recorder errors."""


class ConfigurationError(TaskRecorderError):
    """A required setting (typically an API key) is missing or invalid."""


class GenerationError(TaskRecorderError):
    """Every model in the fallback chain failed.

    ``attempts`` keeps ``(model, error message)`` pairs in the order the
    models were tried.
    """

    def __init__(self, provider: str, attempts: list[tuple[str, str]]) -> None:
        self.provider = provider
        self.attempts = list(attempts)
        summary = "\n  ".join(f"{model}: {error}" for model, error in self.attempts)
        super().__init__(f"All {provider} models failed:\n  {summary}")


class PipelineStageError(TaskRecorderError):
    """A documentation pipeline stage failed; the run was aborted."""

    def __init__(self, stage: str, cause: BaseException) -> None:
        self.stage = stage
        self.cause = cause
        super().__init__(f"Stage '{stage}' failed: {cause}")
