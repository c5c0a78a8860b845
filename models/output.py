"""Generated documentation and the overall pipeline result."""

from __future__ import annotations

import re

from pydantic import Field

from models.base import CamelModel
from models.chunk import ActionChunk
from models.know_how import KnowHowExtraction
from models.metrics import TaskMetrics

SUMMARY_HEADING = "Summary"
INSTRUCTIONS_HEADING = "Instructions"
KNOW_HOW_HEADING = "Know-How"

_HEADING_RE = re.compile(
    rf"^# ({SUMMARY_HEADING}|{INSTRUCTIONS_HEADING}|{KNOW_HOW_HEADING})[ \t]*$",
    re.MULTILINE,
)


def split_sections(markdown: str) -> dict[str, str]:
    """Slice *markdown* into the three top-level sections.

    Each section runs from its heading line to the next recognised heading
    (or end of text).  Only the first occurrence of a heading counts; a
    missing heading maps to ``""``.
    """
    matches = list(_HEADING_RE.finditer(markdown))
    sections = {SUMMARY_HEADING: "", INSTRUCTIONS_HEADING: "", KNOW_HOW_HEADING: ""}
    seen: set[str] = set()
    for pos, match in enumerate(matches):
        name = match.group(1)
        if name in seen:
            continue
        seen.add(name)
        end = matches[pos + 1].start() if pos + 1 < len(matches) else len(markdown)
        sections[name] = markdown[match.end():end].strip()
    return sections


class GeneratedOutput(CamelModel):
    """Final document.  ``raw_markdown`` is authoritative; the rest are views."""
    summary: str = ""
    instructions: str = ""
    know_how: str = ""
    raw_markdown: str = ""

    @classmethod
    def from_markdown(cls, markdown: str) -> GeneratedOutput:
        raw = markdown.strip()
        sections = split_sections(raw)
        return cls(
            summary=sections[SUMMARY_HEADING],
            instructions=sections[INSTRUCTIONS_HEADING],
            know_how=sections[KNOW_HOW_HEADING],
            raw_markdown=raw,
        )

    def has_any_section(self) -> bool:
        return bool(_HEADING_RE.search(self.raw_markdown))

    def to_markdown(self) -> str:
        """Render the three sections back into a document."""
        return (
            f"# {SUMMARY_HEADING}\n\n{self.summary}\n\n"
            f"# {INSTRUCTIONS_HEADING}\n\n{self.instructions}\n\n"
            f"# {KNOW_HOW_HEADING}\n\n{self.know_how}"
        )


class GenerationResult(CamelModel):
    """What ``generate_documentation`` hands back for persistence and display."""
    chunks: list[ActionChunk] = Field(default_factory=list)
    metrics: TaskMetrics = Field(default_factory=TaskMetrics)
    know_how: KnowHowExtraction = Field(default_factory=KnowHowExtraction)
    output: GeneratedOutput = Field(default_factory=GeneratedOutput)
    degraded_stages: list[str] = Field(default_factory=list)
