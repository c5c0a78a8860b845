"""Tacit knowledge extracted by the extractor stage."""

from __future__ import annotations

from pydantic import Field

from models.base import CamelModel


class DecisionCriterion(CamelModel):
    """A rule the user applied at a decision point.

    The extractor is instructed to drop anything below 0.7 confidence;
    that is a contract on the producer and is not re-checked here.
    """
    situation: str = ""
    criterion: str = ""
    source_pattern: str = ""
    confidence: float = 0.0


class CornerCase(CamelModel):
    situation: str = ""
    resolution: str = ""
    source_evidence: str = ""


class KnowHowExtraction(CamelModel):
    """Know-how for one task.  All lists default to empty."""
    decision_criteria: list[DecisionCriterion] = Field(default_factory=list)
    success_signals: list[str] = Field(default_factory=list)
    failure_signals: list[str] = Field(default_factory=list)
    critical_fields: list[str] = Field(default_factory=list)
    corner_cases: list[CornerCase] = Field(default_factory=list)
    expert_shortcuts: list[str] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return not any((
            self.decision_criteria,
            self.success_signals,
            self.failure_signals,
            self.critical_fields,
            self.corner_cases,
            self.expert_shortcuts,
        ))
