"""Task session and HTTP request/response models."""

from __future__ import annotations

import time
from enum import Enum
from typing import Any

from pydantic import Field

from models.action import Action
from models.base import CamelModel
from models.chunk import ActionChunk
from models.know_how import KnowHowExtraction
from models.metrics import TaskMetrics
from models.output import GeneratedOutput


class SessionStatus(str, Enum):
    RECORDING = "recording"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"


def _now_ms() -> int:
    return int(time.time() * 1000)


class TaskSession(CamelModel):
    """A recording session and, once stopped, its generated artefacts."""
    id: str
    status: SessionStatus = SessionStatus.RECORDING
    start_ts: int = Field(default_factory=_now_ms)
    end_ts: int | None = None
    actions: list[Action] = Field(default_factory=list)
    chunks: list[ActionChunk] | None = None
    metrics: TaskMetrics | None = None
    know_how_extraction: KnowHowExtraction | None = None
    output: GeneratedOutput | None = None
    error: str | None = None
    clarification_transcript: str | None = None


# ── API payloads ─────────────────────────────────────────────


class CreateTaskResponse(CamelModel):
    task_id: str
    status: SessionStatus


class AddActionsRequest(CamelModel):
    """Raw action batch; entries are validated one by one by the route."""
    actions: list[dict[str, Any]] = Field(default_factory=list)


class AddActionsResponse(CamelModel):
    received: int
    total: int


class StopTaskResponse(CamelModel):
    status: SessionStatus
    output: GeneratedOutput | None = None
    degraded_stages: list[str] = Field(default_factory=list)
    error: str | None = None


class GetTaskResponse(CamelModel):
    task: TaskSession


class TaskListItem(TaskSession):
    action_count: int = 0


class ListTasksResponse(CamelModel):
    tasks: list[TaskListItem] = Field(default_factory=list)


class ClarificationRequest(CamelModel):
    transcript: str = ""


class ClarificationResponse(CamelModel):
    success: bool
    updated_markdown: str | None = None
    error: str | None = None
