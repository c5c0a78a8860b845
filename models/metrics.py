"""Aggregate statistics derived from an action list."""

from __future__ import annotations

from pydantic import Field

from models.action import ActionType
from models.base import CamelModel


class PauseInfo(CamelModel):
    """Long idle gap before the action at ``index``."""
    index: int
    duration_ms: int


class BackForthPattern(CamelModel):
    """Revisit of a URL: earlier visit, intermediate visits, current visit."""
    indices: list[int] = Field(default_factory=list)


class RepeatedActionInfo(CamelModel):
    """Maximal run of consecutive actions sharing one type."""
    type: ActionType
    count: int
    indices: list[int] = Field(default_factory=list)


class ExtractionAction(CamelModel):
    """A copy event with a short human-readable context."""
    index: int
    context: str


class TaskMetrics(CamelModel):
    """Metrics for a whole action list.

    Always recomputed from scratch; every collection defaults to empty so
    an empty task still yields a fully populated object.
    """
    total_actions: int = 0
    total_duration_ms: int = 0
    long_pauses: list[PauseInfo] = Field(default_factory=list)
    back_forth_patterns: list[BackForthPattern] = Field(default_factory=list)
    repeated_actions: list[RepeatedActionInfo] = Field(default_factory=list)
    extraction_actions: list[ExtractionAction] = Field(default_factory=list)
    url_changes: int = 0
    unique_domains: list[str] = Field(default_factory=list)
