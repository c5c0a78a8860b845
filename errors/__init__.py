"""Custom exception hierarchy for the task recorder backend."""

from errors.exceptions import (
    ConfigurationError,
    GenerationError,
    PipelineStageError,
    TaskRecorderError,
)

__all__ = [
    "ConfigurationError",
    "GenerationError",
    "PipelineStageError",
    "TaskRecorderError",
]
