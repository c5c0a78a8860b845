"""Tests for services.pre_segmenter — rule-based boundary proposals."""

from __future__ import annotations

from models.action import ActionType
from models.chunk import ChunkBoundary
from services.pre_segmenter import action_mode, boundary_before, pre_chunk
from tests.conftest import build_action as act

SITE = "https://crm.example.com/"


def _spans(chunks):
    return [(c.start_index, c.end_index, c.boundary) for c in chunks]


# ── Modes ────────────────────────────────────────────────────


def test_action_modes():
    assert action_mode(ActionType.NAVIGATION) == "navigation"
    assert action_mode(ActionType.SCROLL) == "navigation"
    assert action_mode(ActionType.CLICK) == "interaction"
    assert action_mode(ActionType.INPUT) == "interaction"
    assert action_mode(ActionType.COPY) == "extraction"


# ── boundary_before ──────────────────────────────────────────


class TestBoundaryBefore:
    def test_long_pause(self):
        assert boundary_before(act(), act(idle=15_000)) == ChunkBoundary.LONG_PAUSE

    def test_pause_below_threshold(self):
        assert boundary_before(act(), act(idle=14_999)) is None

    def test_domain_change(self):
        prev = act(url="https://a.example.com/x")
        cur = act(url="https://b.example.com/x")
        assert boundary_before(prev, cur) == ChunkBoundary.URL_CHANGE

    def test_same_domain_different_path(self):
        prev = act(url="https://a.example.com/x")
        cur = act(url="https://a.example.com/y")
        assert boundary_before(prev, cur) is None

    def test_identical_unparsable_urls_are_not_a_change(self):
        assert boundary_before(act(url="about:blank"), act(url="about:blank")) is None

    def test_unparsable_url_is_a_change(self):
        prev = act(url="about:blank")
        cur = act(url="https://a.example.com/")
        assert boundary_before(prev, cur) == ChunkBoundary.URL_CHANGE

    def test_mode_change(self):
        assert boundary_before(act("click"), act("copy")) == ChunkBoundary.MODE_CHANGE

    def test_pause_takes_precedence_over_domain_and_mode(self):
        prev = act("click", url="https://a.example.com/")
        cur = act("copy", url="https://b.example.com/", idle=20_000)
        assert boundary_before(prev, cur) == ChunkBoundary.LONG_PAUSE

    def test_domain_takes_precedence_over_mode(self):
        prev = act("click", url="https://a.example.com/")
        cur = act("navigation", url="https://b.example.com/")
        assert boundary_before(prev, cur) == ChunkBoundary.URL_CHANGE


# ── pre_chunk ────────────────────────────────────────────────


class TestPreChunk:
    def test_empty(self):
        assert pre_chunk([]) == []

    def test_single_action(self):
        assert _spans(pre_chunk([act()])) == [(0, 0, ChunkBoundary.START)]

    def test_homogeneous_run_is_one_chunk(self):
        actions = [act("click", url=SITE) for _ in range(4)]
        assert _spans(pre_chunk(actions)) == [(0, 3, ChunkBoundary.START)]

    def test_boundaries_label_the_chunk_they_close(self):
        actions = [
            act("navigation", url=SITE),
            act("scroll", url=SITE),
            act("click", url=SITE),
            act("input", url=SITE),
            act("copy", url=SITE),
            act("click", url=SITE, idle=30_000),
        ]
        assert _spans(pre_chunk(actions)) == [
            (0, 1, ChunkBoundary.MODE_CHANGE),
            (2, 3, ChunkBoundary.MODE_CHANGE),
            (4, 4, ChunkBoundary.LONG_PAUSE),
            (5, 5, ChunkBoundary.START),
        ]

    def test_chunks_are_contiguous_and_cover_all_actions(self):
        actions = [
            act("navigation", url="https://a.example.com/"),
            act("click", url="https://a.example.com/"),
            act("click", url="https://b.example.com/"),
            act("copy", url="https://b.example.com/"),
            act("copy", url="https://b.example.com/", idle=16_000),
            act("scroll", url="https://b.example.com/"),
        ]
        chunks = pre_chunk(actions)
        assert chunks[0].start_index == 0
        assert chunks[-1].end_index == len(actions) - 1
        for before, after in zip(chunks, chunks[1:]):
            assert after.start_index == before.end_index + 1
        assert sum(len(c.actions) for c in chunks) == len(actions)
        for c in chunks:
            assert c.actions == actions[c.start_index:c.end_index + 1]
