"""Documentation pipeline — Segmenter → Extractor → Renderer.

Turns a recorded action sequence into a three-section Markdown document:

Stage 1 (Segmenter): group actions into semantically labeled chunks
Stage 2 (Extractor): infer tacit know-how from the chunked behavior
Stage 3 (Renderer): write the Summary / Instructions / Know-How document

Stages run strictly in sequence, one generation call each.  A stage whose
answer cannot be parsed degrades to its default value and the run goes
on; a stage whose generation call raises aborts the run with
:class:`PipelineStageError`.
"""

from __future__ import annotations

import logging
from typing import Callable, TypeVar

from agents.stage_contracts import (
    build_extractor_request,
    build_refiner_request,
    build_renderer_request,
    build_segmenter_request,
    parse_extractor_response,
    parse_refiner_response,
    parse_renderer_response,
    parse_segmenter_response,
)
from config.settings import get_settings
from errors import PipelineStageError
from models.action import Action, ActionType
from models.chunk import ActionChunk, PatternType
from models.know_how import KnowHowExtraction
from models.metrics import TaskMetrics
from models.output import GeneratedOutput, GenerationResult
from models.stage import StageOutcome, StageRequest
from services.action_metrics import compute_metrics
from services.formatters import format_actions, format_chunks, format_know_how, format_metrics
from services.generation_client import GenerationClient, LiteLLMGenerationClient
from services.pre_segmenter import pre_chunk

logger = logging.getLogger(__name__)

T = TypeVar("T")

EMPTY_SUMMARY = "No actions were recorded."
EMPTY_INSTRUCTIONS = "No steps to document."
EMPTY_KNOW_HOW = "No know-how extracted."


def create_empty_result() -> GenerationResult:
    """Fixed result for a session with no actions."""
    output = GeneratedOutput(
        summary=EMPTY_SUMMARY,
        instructions=EMPTY_INSTRUCTIONS,
        know_how=EMPTY_KNOW_HOW,
    )
    output.raw_markdown = output.to_markdown()
    return GenerationResult(
        chunks=[],
        metrics=TaskMetrics(),
        know_how=KnowHowExtraction(),
        output=output,
    )


class DocumentationPipeline:
    """Three-stage generation pipeline over an injected :class:`GenerationClient`."""

    def __init__(self, client: GenerationClient, language: str | None = None) -> None:
        self.client = client
        self.language = language or get_settings().document_language

    async def generate_documentation(self, actions: list[Action]) -> GenerationResult:
        """Run all three stages over *actions*.

        Raises:
            PipelineStageError: a stage's generation call failed.
        """
        if not actions:
            logger.info("No actions recorded, returning empty documentation")
            return create_empty_result()

        metrics = compute_metrics(actions)
        logger.info(
            "Generating documentation: %d actions, %d long pauses, %d back-forth patterns",
            metrics.total_actions,
            len(metrics.long_pauses),
            len(metrics.back_forth_patterns),
        )

        hints = pre_chunk(actions)
        logger.info(
            "Pre-segmentation hints: %s",
            ", ".join(f"{c.start_index}-{c.end_index} ({c.boundary.value})" for c in hints),
        )

        actions_json = format_actions(actions)
        metrics_json = format_metrics(metrics)
        degraded_stages: list[str] = []

        # Stage 1: Segmenter
        segmented = await self._run_stage(
            build_segmenter_request(actions_json, metrics_json),
            lambda text: parse_segmenter_response(text, actions),
            degraded_stages,
        )
        chunks: list[ActionChunk] = segmented.value
        logger.info("Segmenter produced %d chunks", len(chunks))

        # Stage 2: Extractor
        chunks_json = format_chunks(chunks)
        extracted = await self._run_stage(
            build_extractor_request(chunks_json, actions_json, metrics_json),
            parse_extractor_response,
            degraded_stages,
        )
        know_how: KnowHowExtraction = extracted.value
        logger.info(
            "Extractor produced %d decision criteria, %d corner cases",
            len(know_how.decision_criteria),
            len(know_how.corner_cases),
        )

        # Stage 3: Renderer
        rendered = await self._run_stage(
            build_renderer_request(
                chunks_json,
                format_know_how(know_how),
                metrics_json,
                language=self.language,
            ),
            parse_renderer_response,
            degraded_stages,
        )

        return GenerationResult(
            chunks=chunks,
            metrics=metrics,
            know_how=know_how,
            output=rendered.value,
            degraded_stages=degraded_stages,
        )

    async def refine_documentation(
        self,
        output: GeneratedOutput,
        transcript: str,
    ) -> GeneratedOutput:
        """Fold a clarification transcript into *output*.

        A blank transcript leaves the document untouched.  Otherwise the
        refined document replaces the old one wholesale.
        """
        if not transcript.strip():
            return output

        markdown = output.raw_markdown or output.to_markdown()
        refined = await self._run_stage(
            build_refiner_request(markdown, transcript, language=self.language),
            parse_refiner_response,
            [],
        )
        return refined.value

    async def _run_stage(
        self,
        request: StageRequest,
        parse: Callable[[str], StageOutcome[T]],
        degraded_stages: list[str],
    ) -> StageOutcome[T]:
        logger.info("Stage '%s' started", request.stage)
        try:
            text = await self.client.complete(
                request.user_prompt,
                system_prompt=request.system_prompt,
                max_tokens=request.max_tokens,
            )
        except Exception as e:
            logger.exception("Stage '%s' failed", request.stage)
            raise PipelineStageError(request.stage, e) from e

        outcome = parse(text)
        if outcome.degraded:
            logger.warning(
                "Stage '%s' returned an unusable response, using default: %s",
                request.stage,
                outcome.reason,
            )
            degraded_stages.append(request.stage)
        logger.info("Stage '%s' finished", request.stage)
        return outcome


class MockDocumentationPipeline(DocumentationPipeline):
    """Deterministic offline pipeline.  Makes no generation calls.

    The whole session becomes one chunk, copied fields become critical
    fields, and the instructions list one step per action.
    """

    def __init__(self) -> None:
        self.client = None
        self.language = "English"

    async def generate_documentation(self, actions: list[Action]) -> GenerationResult:
        if not actions:
            return create_empty_result()

        metrics = compute_metrics(actions)
        chunk = ActionChunk(
            phase="Recorded Task",
            start_index=0,
            end_index=len(actions) - 1,
            actions=list(actions),
            patterns=_observed_patterns(metrics),
            inferred_intent="Replay the recorded session",
        )
        know_how = KnowHowExtraction(
            critical_fields=[e.context for e in metrics.extraction_actions],
        )

        steps = "\n".join(
            f"{i}. {_describe(action)}" for i, action in enumerate(actions, start=1)
        )
        fields = "\n".join(f"- {field}" for field in know_how.critical_fields)
        output = GeneratedOutput(
            summary=(
                f"Recorded task with {metrics.total_actions} actions across "
                f"{len(metrics.unique_domains)} domain(s)."
            ),
            instructions=steps,
            know_how=fields or EMPTY_KNOW_HOW,
        )
        output.raw_markdown = output.to_markdown()
        return GenerationResult(chunks=[chunk], metrics=metrics, know_how=know_how, output=output)

    async def refine_documentation(
        self,
        output: GeneratedOutput,
        transcript: str,
    ) -> GeneratedOutput:
        if not transcript.strip():
            return output
        refined = output.model_copy(
            update={"know_how": f"{output.know_how}\n\n## Clarifications\n\n{transcript.strip()}"}
        )
        refined.raw_markdown = refined.to_markdown()
        return refined


def _observed_patterns(metrics: TaskMetrics) -> list[str]:
    found = [
        (PatternType.LONG_PAUSE, metrics.long_pauses),
        (PatternType.BACK_FORTH, metrics.back_forth_patterns),
        (PatternType.REPEATED_ACTION, metrics.repeated_actions),
    ]
    return [pattern.value for pattern, hits in found if hits]


def _describe(action: Action) -> str:
    label = action.target.text or action.metadata.page_title or action.url
    if action.type == ActionType.NAVIGATION:
        return f"Open {action.url}"
    if action.type == ActionType.INPUT:
        return f"Enter a value in \"{label}\""
    if action.type == ActionType.COPY:
        return f"Copy \"{label}\""
    if action.type == ActionType.SCROLL:
        return f"Scroll through {action.metadata.page_title or action.url}"
    return f"Select \"{label}\""


def get_documentation_pipeline() -> DocumentationPipeline:
    """Pipeline for the current settings (FastAPI dependency)."""
    settings = get_settings()
    if settings.mock_generation:
        return MockDocumentationPipeline()
    return DocumentationPipeline(
        LiteLLMGenerationClient.from_settings(settings),
        language=settings.document_language,
    )
