"""Serialize actions, metrics, chunks and know-how into stage payloads.

All payloads are pretty-printed JSON.  Long free text is truncated so a
single verbose page cannot blow the prompt budget.
"""

from __future__ import annotations

import json
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from models.action import Action
from models.chunk import ActionChunk
from models.know_how import KnowHowExtraction
from models.metrics import TaskMetrics

ACTION_TEXT_MAX_CHARS = 50
SAMPLE_TEXT_MAX_CHARS = 30
SAMPLE_ACTIONS_PER_CHUNK = 3


def _dump(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)


def _round_half_up(value: float, digits: int = 0) -> float:
    # Halves round away from zero, not to the nearest even digit
    step = Decimal(1).scaleb(-digits)
    return float(Decimal(str(value)).quantize(step, rounding=ROUND_HALF_UP))


def format_actions(actions: list[Action]) -> str:
    return _dump([
        {
            "index": index,
            "type": action.type.value,
            "timestamp": action.timestamp,
            "url": action.url,
            "target": {
                "selector": action.target.selector,
                "text": action.target.text[:ACTION_TEXT_MAX_CHARS],
                "role": action.target.role,
            },
            "metadata": {
                "pageTitle": action.metadata.page_title,
                "h1": action.metadata.h1,
                "idleTimeBefore": action.metadata.idle_time_before,
            },
        }
        for index, action in enumerate(actions)
    ])


def format_metrics(metrics: TaskMetrics) -> str:
    return _dump({
        "totalActions": metrics.total_actions,
        "totalDurationMs": metrics.total_duration_ms,
        "totalDurationMinutes": _round_half_up(metrics.total_duration_ms / 60000, 1),
        "longPausesCount": len(metrics.long_pauses),
        "longPauses": [
            {"atAction": p.index, "durationSeconds": int(_round_half_up(p.duration_ms / 1000))}
            for p in metrics.long_pauses
        ],
        "backForthPatternsCount": len(metrics.back_forth_patterns),
        "repeatedActionsCount": len(metrics.repeated_actions),
        "repeatedActions": [
            {"type": r.type.value, "count": r.count}
            for r in metrics.repeated_actions
        ],
        "extractionsCount": len(metrics.extraction_actions),
        "extractions": [e.context for e in metrics.extraction_actions],
        "urlChanges": metrics.url_changes,
        "uniqueDomains": metrics.unique_domains,
    })


def format_chunks(chunks: list[ActionChunk]) -> str:
    """Chunks with at most ``SAMPLE_ACTIONS_PER_CHUNK`` representative actions."""
    return _dump([
        {
            "phase": chunk.phase,
            "startIndex": chunk.start_index,
            "endIndex": chunk.end_index,
            "patterns": chunk.patterns,
            "inferredIntent": chunk.inferred_intent,
            "actionCount": len(chunk.actions),
            "sampleActions": [
                {
                    "type": action.type.value,
                    "text": action.target.text[:SAMPLE_TEXT_MAX_CHARS],
                    "pageTitle": action.metadata.page_title,
                }
                for action in chunk.actions[:SAMPLE_ACTIONS_PER_CHUNK]
            ],
        }
        for chunk in chunks
    ])


def format_know_how(know_how: KnowHowExtraction) -> str:
    """Snake_case keys, the same shape the extractor stage emits."""
    return _dump(know_how.model_dump(by_alias=False))
