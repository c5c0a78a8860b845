"""Deterministic pre-chunking of an action list.

The chunks produced here are hints for the segmenter stage, which is free
to disregard them.  Boundaries are decided by an ordered rule list; the
first rule that matches at an index wins, so reordering ``BOUNDARY_RULES``
changes the output.
"""

from __future__ import annotations

import logging
from typing import Callable

from models.action import Action, ActionType
from models.chunk import ChunkBoundary, PreChunk
from services.action_metrics import hostname

logger = logging.getLogger(__name__)

CHUNK_PAUSE_THRESHOLD_MS = 15_000

_MODE_BY_TYPE: dict[ActionType, str] = {
    ActionType.NAVIGATION: "navigation",
    ActionType.SCROLL: "navigation",
    ActionType.COPY: "extraction",
}


def action_mode(action_type: ActionType) -> str:
    """Coarse mode: ``navigation``, ``extraction`` or ``interaction``."""
    return _MODE_BY_TYPE.get(action_type, "interaction")


def _is_long_pause(previous: Action, current: Action) -> bool:
    return current.idle_ms >= CHUNK_PAUSE_THRESHOLD_MS


def _is_domain_change(previous: Action, current: Action) -> bool:
    if previous.url == current.url:
        return False
    before, after = hostname(previous.url), hostname(current.url)
    if before is None or after is None:
        return True
    return before != after


def _is_mode_change(previous: Action, current: Action) -> bool:
    return action_mode(previous.type) != action_mode(current.type)


BoundaryRule = tuple[ChunkBoundary, Callable[[Action, Action], bool]]

BOUNDARY_RULES: list[BoundaryRule] = [
    (ChunkBoundary.LONG_PAUSE, _is_long_pause),
    (ChunkBoundary.URL_CHANGE, _is_domain_change),
    (ChunkBoundary.MODE_CHANGE, _is_mode_change),
]


def boundary_before(previous: Action, current: Action) -> ChunkBoundary | None:
    """Return the boundary to insert before *current*, or None."""
    for boundary, matches in BOUNDARY_RULES:
        if matches(previous, current):
            return boundary
    return None


def pre_chunk(actions: list[Action]) -> list[PreChunk]:
    """Split *actions* into contiguous, covering pre-chunks.

    The trailing chunk is always labelled ``start`` whatever ends it.
    """
    if not actions:
        return []

    chunks: list[PreChunk] = []
    start = 0

    for i in range(1, len(actions)):
        boundary = boundary_before(actions[i - 1], actions[i])
        if boundary is None:
            continue
        chunks.append(PreChunk(
            start_index=start,
            end_index=i - 1,
            actions=actions[start:i],
            boundary=boundary,
        ))
        start = i

    chunks.append(PreChunk(
        start_index=start,
        end_index=len(actions) - 1,
        actions=actions[start:],
        boundary=ChunkBoundary.START,
    ))

    logger.debug("Pre-chunked %d actions into %d chunks", len(actions), len(chunks))
    return chunks
