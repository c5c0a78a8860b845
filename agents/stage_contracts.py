"""Stage contracts — request builders and response parsers for each stage.

Segmenter → Extractor → Renderer (plus the clarification Refiner).

Builders turn domain objects into a :class:`StageRequest`.  Parsers turn
the provider's free text back into domain objects and never raise on bad
structure: an unusable answer becomes :class:`Degraded` with the stage's
default value, and the pipeline decides what to do with it.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from pydantic import ValidationError

from config.llm_config import (
    EXTRACTOR_LLM_CONFIG,
    REFINER_LLM_CONFIG,
    RENDERER_LLM_CONFIG,
    SEGMENTER_LLM_CONFIG,
)
from config.prompts.extractor import EXTRACTOR_SYSTEM_PROMPT, build_extractor_user_prompt
from config.prompts.refiner import build_refiner_system_prompt, build_refiner_user_prompt
from config.prompts.renderer import build_renderer_system_prompt, build_renderer_user_prompt
from config.prompts.segmenter import SEGMENTER_SYSTEM_PROMPT, build_segmenter_user_prompt
from models.action import Action
from models.chunk import ActionChunk
from models.know_how import KnowHowExtraction
from models.output import GeneratedOutput
from models.stage import Degraded, Parsed, StageOutcome, StageRequest

logger = logging.getLogger(__name__)

SEGMENTER_STAGE = "segmenter"
EXTRACTOR_STAGE = "extractor"
RENDERER_STAGE = "renderer"
REFINER_STAGE = "refiner"

CHUNKS_TAG = "chunks"
KNOW_HOW_TAG = "know_how_extraction"

_REQUIRED_CHUNK_INT_KEYS = ("startIndex", "endIndex")
_CODE_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```")


# ── Response helpers ─────────────────────────────────────────


def extract_block(text: str, tag: str) -> str | None:
    """Inner text of the first ``<tag>…</tag>`` block, or ``None``."""
    match = re.search(rf"<{tag}>([\s\S]*?)</{tag}>", text)
    if not match:
        return None
    return match.group(1).strip()


def _load_json(block: str) -> Any:
    # Some models wrap the JSON in a code fence inside the tag
    fenced = _CODE_FENCE_RE.search(block)
    if fenced:
        block = fenced.group(1).strip()
    return json.loads(block)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


# ── Segmenter ────────────────────────────────────────────────


def build_segmenter_request(actions_json: str, metrics_json: str) -> StageRequest:
    return StageRequest(
        stage=SEGMENTER_STAGE,
        system_prompt=SEGMENTER_SYSTEM_PROMPT,
        user_prompt=build_segmenter_user_prompt(actions_json, metrics_json),
        max_tokens=SEGMENTER_LLM_CONFIG.max_tokens,
    )


def parse_segmenter_response(
    text: str,
    actions: list[Action],
) -> StageOutcome[list[ActionChunk]]:
    """Parse the ``<chunks>`` block into :class:`ActionChunk` objects.

    Only structure is checked: a JSON array of objects, each with a
    ``phase`` and integer ``startIndex``/``endIndex``.  Coverage and
    contiguity of the spans are not enforced.  Each chunk gets the slice
    of *actions* its indices cover.
    """
    block = extract_block(text, CHUNKS_TAG)
    if block is None:
        return Degraded([], reason=f"no <{CHUNKS_TAG}> block in response")

    try:
        data = _load_json(block)
    except (json.JSONDecodeError, RecursionError) as e:
        return Degraded([], reason=f"invalid chunks JSON: {e}")

    if not isinstance(data, list):
        return Degraded([], reason="chunks payload is not an array")

    chunks: list[ActionChunk] = []
    for position, item in enumerate(data):
        if not isinstance(item, dict) or "phase" not in item:
            return Degraded([], reason=f"chunk {position} is missing 'phase'")
        if not all(_is_int(item.get(key)) for key in _REQUIRED_CHUNK_INT_KEYS):
            return Degraded([], reason=f"chunk {position} has non-integer indices")

        start, end = item["startIndex"], item["endIndex"]
        patterns = item.get("patterns") or []
        chunks.append(
            ActionChunk(
                phase=str(item["phase"]),
                start_index=start,
                end_index=end,
                actions=actions[max(start, 0):end + 1],
                patterns=[str(p) for p in patterns] if isinstance(patterns, list) else [],
                inferred_intent=str(item.get("inferredIntent") or ""),
            )
        )
    return Parsed(chunks)


# ── Extractor ────────────────────────────────────────────────


def build_extractor_request(
    chunks_json: str,
    actions_json: str,
    metrics_json: str,
) -> StageRequest:
    return StageRequest(
        stage=EXTRACTOR_STAGE,
        system_prompt=EXTRACTOR_SYSTEM_PROMPT,
        user_prompt=build_extractor_user_prompt(chunks_json, actions_json, metrics_json),
        max_tokens=EXTRACTOR_LLM_CONFIG.max_tokens,
    )


def parse_extractor_response(text: str) -> StageOutcome[KnowHowExtraction]:
    """Parse the ``<know_how_extraction>`` block (snake_case keys)."""
    block = extract_block(text, KNOW_HOW_TAG)
    if block is None:
        return Degraded(KnowHowExtraction(), reason=f"no <{KNOW_HOW_TAG}> block in response")

    try:
        data = _load_json(block)
    except (json.JSONDecodeError, RecursionError) as e:
        return Degraded(KnowHowExtraction(), reason=f"invalid know-how JSON: {e}")

    if not isinstance(data, dict):
        return Degraded(KnowHowExtraction(), reason="know-how payload is not an object")

    try:
        return Parsed(KnowHowExtraction.model_validate(data))
    except ValidationError as e:
        return Degraded(KnowHowExtraction(), reason=f"know-how has the wrong shape: {e}")


# ── Renderer ─────────────────────────────────────────────────


def build_renderer_request(
    chunks_json: str,
    know_how_json: str,
    metrics_json: str,
    language: str = "Spanish",
) -> StageRequest:
    return StageRequest(
        stage=RENDERER_STAGE,
        system_prompt=build_renderer_system_prompt(language),
        user_prompt=build_renderer_user_prompt(chunks_json, know_how_json, metrics_json),
        max_tokens=RENDERER_LLM_CONFIG.max_tokens,
    )


def parse_renderer_response(text: str) -> StageOutcome[GeneratedOutput]:
    """Split the Markdown into its sections.

    The value is always built from the text.  It is only marked degraded
    when none of the three headings appears.
    """
    output = GeneratedOutput.from_markdown(text)
    if not output.has_any_section():
        return Degraded(output, reason="no recognised section heading in response")
    return Parsed(output)


# ── Refiner ──────────────────────────────────────────────────


def build_refiner_request(
    markdown: str,
    transcript: str,
    language: str = "Spanish",
) -> StageRequest:
    return StageRequest(
        stage=REFINER_STAGE,
        system_prompt=build_refiner_system_prompt(language),
        user_prompt=build_refiner_user_prompt(markdown, transcript),
        max_tokens=REFINER_LLM_CONFIG.max_tokens,
    )


parse_refiner_response = parse_renderer_response
