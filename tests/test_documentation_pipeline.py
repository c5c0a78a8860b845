"""Tests for agents.documentation_pipeline — stage orchestration."""

from __future__ import annotations

import logging

import pytest

from agents.documentation_pipeline import (
    EMPTY_INSTRUCTIONS,
    EMPTY_KNOW_HOW,
    EMPTY_SUMMARY,
    DocumentationPipeline,
    MockDocumentationPipeline,
    create_empty_result,
    get_documentation_pipeline,
)
from config.settings import get_settings
from errors import GenerationError, PipelineStageError
from models.output import GeneratedOutput
from tests.conftest import ScriptedClient
from tests.conftest import build_action as act

ACTIONS = [
    act("navigation", 0, "https://dir.example.com/", page_title="Directory"),
    act("input", 2_000, "https://dir.example.com/", text="ACME"),
    act("click", 14_000, "https://dir.example.com/results", text="ACME Inc", idle=12_000),
    act("copy", 20_000, "https://dir.example.com/acme", text="info@acme.com", page_title="ACME"),
]

SEGMENTS = """\
<chunking_analysis>search, then extract</chunking_analysis>
<chunks>
[
  {"phase": "Search/Filter", "startIndex": 0, "endIndex": 2, "patterns": ["long_pause"],
   "inferredIntent": "Find ACME"},
  {"phase": "Data Extraction", "startIndex": 3, "endIndex": 3, "patterns": [],
   "inferredIntent": "Grab the contact email"}
]
</chunks>"""

KNOW_HOW = """\
<analysis>paused before choosing</analysis>
<know_how_extraction>
{"decision_criteria": [{"situation": "Several matches", "criterion": "Check the domain",
  "source_pattern": "long_pause", "confidence": 0.9}],
 "critical_fields": ["email"]}
</know_how_extraction>"""

DOCUMENT = """\
# Summary

Find a company's contact email.

# Instructions

1. Search the directory for the company.
2. Copy the email.

# Know-How

- Check the domain before choosing."""


@pytest.fixture
def pipeline_for():
    def _build(responses):
        client = ScriptedClient(responses)
        return DocumentationPipeline(client, language="English"), client
    return _build


# ── Empty input ──────────────────────────────────────────────


class TestEmptyInput:
    async def test_no_generation_call(self, pipeline_for):
        pipeline, client = pipeline_for([])
        result = await pipeline.generate_documentation([])
        assert client.calls == []
        assert result.chunks == []
        assert result.metrics.total_actions == 0
        assert result.know_how.is_empty()
        assert result.output.summary == EMPTY_SUMMARY
        assert result.output.instructions == EMPTY_INSTRUCTIONS
        assert result.output.know_how == EMPTY_KNOW_HOW
        assert result.degraded_stages == []

    def test_empty_result_markdown_round_trips(self):
        output = create_empty_result().output
        assert GeneratedOutput.from_markdown(output.raw_markdown) == output


# ── Happy path ───────────────────────────────────────────────


class TestGenerateDocumentation:
    async def test_three_stages_in_order(self, pipeline_for):
        pipeline, client = pipeline_for([SEGMENTS, KNOW_HOW, DOCUMENT])
        result = await pipeline.generate_documentation(ACTIONS)

        assert len(client.calls) == 3
        assert "<chunks>" in client.calls[0]["system_prompt"]
        assert "<know_how_extraction>" in client.calls[1]["system_prompt"]
        assert "# Summary" in client.calls[2]["system_prompt"]
        assert [c["max_tokens"] for c in client.calls] == [2048, 2048, 4096]

        assert [c.phase for c in result.chunks] == ["Search/Filter", "Data Extraction"]
        assert result.chunks[1].actions == ACTIONS[3:]
        assert result.know_how.critical_fields == ["email"]
        assert result.metrics.total_actions == 4
        assert result.metrics.long_pauses[0].index == 2
        assert result.output.summary == "Find a company's contact email."
        assert result.output.know_how == "- Check the domain before choosing."
        assert result.degraded_stages == []

    async def test_extractor_sees_chunks_and_renderer_sees_know_how(self, pipeline_for):
        pipeline, client = pipeline_for([SEGMENTS, KNOW_HOW, DOCUMENT])
        await pipeline.generate_documentation(ACTIONS)

        assert "Grab the contact email" in client.calls[1]["prompt"]
        assert '"info@acme.com"' in client.calls[1]["prompt"]
        assert "Check the domain" in client.calls[2]["prompt"]
        assert '"critical_fields"' in client.calls[2]["prompt"]

    async def test_result_serializes_camel_case(self, pipeline_for):
        pipeline, _ = pipeline_for([SEGMENTS, KNOW_HOW, DOCUMENT])
        result = await pipeline.generate_documentation(ACTIONS)
        data = result.model_dump(by_alias=True)
        assert set(data) == {"chunks", "metrics", "knowHow", "output", "degradedStages"}
        assert "rawMarkdown" in data["output"]


# ── Degraded stages ──────────────────────────────────────────


class TestDegradedStages:
    async def test_unparsable_segmenter_continues_with_no_chunks(self, pipeline_for, caplog):
        pipeline, client = pipeline_for(["no tags at all", KNOW_HOW, DOCUMENT])
        with caplog.at_level(logging.WARNING, logger="agents.documentation_pipeline"):
            result = await pipeline.generate_documentation(ACTIONS)

        assert result.chunks == []
        assert result.degraded_stages == ["segmenter"]
        assert len(client.calls) == 3
        assert "segmenter" in caplog.text

    async def test_every_stage_degraded(self, pipeline_for):
        pipeline, _ = pipeline_for(["?", "?", "plain prose"])
        result = await pipeline.generate_documentation(ACTIONS)

        assert result.degraded_stages == ["segmenter", "extractor", "renderer"]
        assert result.know_how.is_empty()
        assert result.output.raw_markdown == "plain prose"
        assert result.output.summary == ""


# ── Failures ─────────────────────────────────────────────────


class TestStageFailures:
    async def test_first_stage_failure_stops_the_run(self, pipeline_for):
        cause = GenerationError("openai", [("gpt-4o", "boom")])
        pipeline, client = pipeline_for([cause])

        with pytest.raises(PipelineStageError) as exc_info:
            await pipeline.generate_documentation(ACTIONS)

        assert exc_info.value.stage == "segmenter"
        assert exc_info.value.__cause__ is cause
        assert "Stage 'segmenter' failed" in str(exc_info.value)
        assert len(client.calls) == 1

    async def test_renderer_failure_names_renderer(self, pipeline_for):
        pipeline, client = pipeline_for([SEGMENTS, KNOW_HOW, RuntimeError("timeout")])

        with pytest.raises(PipelineStageError) as exc_info:
            await pipeline.generate_documentation(ACTIONS)

        assert exc_info.value.stage == "renderer"
        assert "timeout" in str(exc_info.value)
        assert len(client.calls) == 3


# ── Refinement ───────────────────────────────────────────────


class TestRefineDocumentation:
    async def test_blank_transcript_is_a_no_op(self, pipeline_for):
        pipeline, client = pipeline_for([])
        output = GeneratedOutput.from_markdown(DOCUMENT)
        assert await pipeline.refine_documentation(output, "   ") is output
        assert client.calls == []

    async def test_refined_document_replaces_output(self, pipeline_for):
        refined = DOCUMENT.replace("Check the domain", "Check the domain and the country")
        pipeline, client = pipeline_for([refined])
        output = GeneratedOutput.from_markdown(DOCUMENT)

        result = await pipeline.refine_documentation(output, "Q: anything else? A: country too")

        assert result.know_how == "- Check the domain and the country before choosing."
        assert "A: country too" in client.calls[0]["prompt"]
        assert "# Summary" in client.calls[0]["prompt"]

    async def test_refiner_failure_is_wrapped(self, pipeline_for):
        pipeline, _ = pipeline_for([RuntimeError("down")])
        with pytest.raises(PipelineStageError) as exc_info:
            await pipeline.refine_documentation(GeneratedOutput.from_markdown(DOCUMENT), "more")
        assert exc_info.value.stage == "refiner"


# ── Mock pipeline and factory ────────────────────────────────


class TestMockPipeline:
    async def test_single_chunk_covering_all_actions(self):
        result = await MockDocumentationPipeline().generate_documentation(ACTIONS)
        assert len(result.chunks) == 1
        assert result.chunks[0].start_index == 0
        assert result.chunks[0].end_index == 3
        assert result.chunks[0].patterns == ["long_pause"]
        assert result.know_how.critical_fields == ["ACME - info@acme.com"]
        assert result.output.instructions.startswith("1. Open https://dir.example.com/")
        assert GeneratedOutput.from_markdown(result.output.raw_markdown) == result.output

    async def test_empty_input(self):
        result = await MockDocumentationPipeline().generate_documentation([])
        assert result.output.summary == EMPTY_SUMMARY

    async def test_refine_appends_clarifications(self):
        output = GeneratedOutput.from_markdown(DOCUMENT)
        refined = await MockDocumentationPipeline().refine_documentation(output, "Use the EU site")
        assert "Use the EU site" in refined.know_how
        assert refined.raw_markdown.startswith("# Summary")


class TestFactory:
    def test_mock_setting_selects_mock_pipeline(self, monkeypatch):
        monkeypatch.setenv("MOCK_GENERATION", "true")
        get_settings.cache_clear()
        try:
            assert isinstance(get_documentation_pipeline(), MockDocumentationPipeline)
        finally:
            get_settings.cache_clear()

    def test_default_builds_litellm_pipeline(self, monkeypatch):
        monkeypatch.setenv("MOCK_GENERATION", "false")
        monkeypatch.setenv("LLM_PROVIDER", "openai")
        monkeypatch.setenv("OPENAI_MODEL", "")
        get_settings.cache_clear()
        try:
            pipeline = get_documentation_pipeline()
            assert not isinstance(pipeline, MockDocumentationPipeline)
            assert pipeline.client.models[0] == "gpt-4o"
        finally:
            get_settings.cache_clear()
