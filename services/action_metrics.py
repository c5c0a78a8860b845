"""Metrics engine — pattern detection over an ordered action list.

Everything here is pure and reentrant: the same list always yields the
same :class:`TaskMetrics`, and nothing is cached between calls.

Detected patterns:
- long pauses (idle ≥ 10s before an action, a decision point)
- back-and-forth navigation (revisiting a recent URL)
- repeated actions (3+ consecutive actions of one type)
- extraction actions (copy events)
- URL changes and the set of visited domains
"""

from __future__ import annotations

from collections import deque
from urllib.parse import urlsplit

from models.action import Action, ActionType
from models.metrics import (
    BackForthPattern,
    ExtractionAction,
    PauseInfo,
    RepeatedActionInfo,
    TaskMetrics,
)

LONG_PAUSE_THRESHOLD_MS = 10_000
REPEATED_ACTION_THRESHOLD = 3
URL_HISTORY_WINDOW = 10
EXTRACTION_CONTEXT_MAX_CHARS = 100


def hostname(url: str) -> str | None:
    """Return the lowercase hostname of *url*, or None if it cannot be parsed."""
    try:
        return urlsplit(url).hostname or None
    except ValueError:
        return None


def compute_metrics(actions: list[Action]) -> TaskMetrics:
    """Compute :class:`TaskMetrics` for *actions* (total, never raises)."""
    if not actions:
        return TaskMetrics()

    url_changes, unique_domains = analyze_urls(actions)
    return TaskMetrics(
        total_actions=len(actions),
        total_duration_ms=actions[-1].timestamp - actions[0].timestamp,
        long_pauses=detect_long_pauses(actions),
        back_forth_patterns=detect_back_forth(actions),
        repeated_actions=detect_repeated_actions(actions),
        extraction_actions=detect_extractions(actions),
        url_changes=url_changes,
        unique_domains=unique_domains,
    )


def detect_long_pauses(actions: list[Action]) -> list[PauseInfo]:
    return [
        PauseInfo(index=i, duration_ms=action.idle_ms)
        for i, action in enumerate(actions)
        if action.idle_ms >= LONG_PAUSE_THRESHOLD_MS
    ]


def detect_back_forth(actions: list[Action]) -> list[BackForthPattern]:
    """Find revisits of a URL seen within the last ``URL_HISTORY_WINDOW`` actions.

    The immediately preceding visit never counts (staying on a page is not
    a revisit).  Of the qualifying earlier visits only the nearest one is
    used; entries older than the window are forgotten.
    """
    patterns: list[BackForthPattern] = []
    history: deque[tuple[str, int]] = deque(maxlen=URL_HISTORY_WINDOW)

    for i, action in enumerate(actions):
        # Skip the last entry: it is the immediately preceding visit.
        for pos in range(len(history) - 2, -1, -1):
            if history[pos][0] == action.url:
                indices = [index for _, index in list(history)[pos:]]
                patterns.append(BackForthPattern(indices=[*indices, i]))
                break
        history.append((action.url, i))

    return patterns


def detect_repeated_actions(actions: list[Action]) -> list[RepeatedActionInfo]:
    """Report every maximal same-type run of length ≥ 3, once."""
    result: list[RepeatedActionInfo] = []
    run: list[int] = []

    for i, action in enumerate(actions):
        if run and actions[run[0]].type != action.type:
            _flush_run(actions, run, result)
            run = []
        run.append(i)
    _flush_run(actions, run, result)

    return result


def _flush_run(actions: list[Action], run: list[int], out: list[RepeatedActionInfo]) -> None:
    if len(run) >= REPEATED_ACTION_THRESHOLD:
        out.append(RepeatedActionInfo(
            type=actions[run[0]].type,
            count=len(run),
            indices=list(run),
        ))


def detect_extractions(actions: list[Action]) -> list[ExtractionAction]:
    return [
        ExtractionAction(
            index=i,
            context=(
                f"{action.metadata.page_title} - "
                f"{action.target.text[:EXTRACTION_CONTEXT_MAX_CHARS]}"
            ),
        )
        for i, action in enumerate(actions)
        if action.type == ActionType.COPY
    ]


def analyze_urls(actions: list[Action]) -> tuple[int, list[str]]:
    """Count URL changes and collect distinct hostnames (first-seen order).

    The first action always counts as a change.  Unparsable URLs still
    count as changes but contribute no domain.
    """
    url_changes = 0
    last_url = ""
    domains: dict[str, None] = {}

    for action in actions:
        if action.url != last_url:
            url_changes += 1
            last_url = action.url
        host = hostname(action.url)
        if host:
            domains.setdefault(host, None)

    return url_changes, list(domains)
