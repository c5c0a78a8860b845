"""Chunk models — deterministic pre-chunks and interpreted action chunks."""

from __future__ import annotations

from enum import Enum

from pydantic import Field

from models.action import Action
from models.base import CamelModel


class ChunkBoundary(str, Enum):
    """Why a pre-chunk was closed."""
    URL_CHANGE = "url_change"
    LONG_PAUSE = "long_pause"
    MODE_CHANGE = "mode_change"
    START = "start"  # label of the trailing chunk


class PatternType(str, Enum):
    """Behavioral patterns a chunk may be flagged with."""
    BACK_FORTH = "back_forth"
    LONG_PAUSE = "long_pause"
    REPEATED_ACTION = "repeated_action"
    EXPLORATION = "exploration"


class PreChunk(CamelModel):
    """Rule-based span proposal.  Advisory only."""
    start_index: int
    end_index: int
    actions: list[Action] = Field(default_factory=list)
    boundary: ChunkBoundary


class ActionChunk(CamelModel):
    """Semantically labeled span produced by the segmenter stage."""
    phase: str
    start_index: int
    end_index: int
    actions: list[Action] = Field(default_factory=list)
    patterns: list[str] = Field(default_factory=list)  # PatternType values; unknown labels are kept
    inferred_intent: str = ""
