"""Task recording API — session lifecycle and documentation generation.

Endpoints:
- ``POST   /tasks``                     — start a recording session
- ``POST   /tasks/{task_id}/actions``   — append captured actions
- ``POST   /tasks/{task_id}/stop``      — stop recording and generate docs
- ``GET    /tasks/{task_id}``           — full session
- ``DELETE /tasks/{task_id}``           — drop a session
- ``GET    /tasks``                     — all sessions without their actions
- ``POST   /tasks/{task_id}/clarification`` — refine docs with user answers
"""

from __future__ import annotations

import logging
import time
import uuid

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from agents.documentation_pipeline import DocumentationPipeline, get_documentation_pipeline
from errors import PipelineStageError
from models.action import Action
from models.task import (
    AddActionsRequest,
    AddActionsResponse,
    ClarificationRequest,
    ClarificationResponse,
    CreateTaskResponse,
    GetTaskResponse,
    ListTasksResponse,
    SessionStatus,
    StopTaskResponse,
    TaskListItem,
    TaskSession,
)
from services.task_store import TaskStore, get_task_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tasks", tags=["tasks"])


def generate_task_id() -> str:
    """Generate a new server-side task ID."""
    return f"task-{uuid.uuid4().hex[:12]}"


async def _get_task_or_404(store: TaskStore, task_id: str) -> TaskSession:
    task = await store.get(task_id)
    if task is None:
        raise HTTPException(status_code=404, detail="Task not found")
    return task


def _error_response(payload: StopTaskResponse | ClarificationResponse) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content=payload.model_dump(mode="json", by_alias=True),
    )


@router.post("", response_model=CreateTaskResponse, status_code=201)
async def create_task(store: TaskStore = Depends(get_task_store)):
    task = TaskSession(id=generate_task_id())
    await store.set(task.id, task)
    logger.info("Task created: %s", task.id)
    return CreateTaskResponse(task_id=task.id, status=task.status)


@router.post("/{task_id}/actions", response_model=AddActionsResponse)
async def add_actions(
    task_id: str,
    req: AddActionsRequest,
    store: TaskStore = Depends(get_task_store),
):
    """Append a batch of actions.  Malformed entries are dropped, not rejected."""
    task = await _get_task_or_404(store, task_id)
    if task.status != SessionStatus.RECORDING:
        raise HTTPException(status_code=400, detail="Task is not recording")

    received: list[Action] = []
    for raw in req.actions:
        try:
            received.append(Action.model_validate(raw))
        except ValidationError as e:
            logger.debug("Dropping invalid action for %s: %s", task_id, e.errors()[:1])

    task.actions.extend(received)
    await store.set(task_id, task)
    return AddActionsResponse(received=len(received), total=len(task.actions))


@router.post("/{task_id}/stop", response_model=StopTaskResponse)
async def stop_task(
    task_id: str,
    store: TaskStore = Depends(get_task_store),
    pipeline: DocumentationPipeline = Depends(get_documentation_pipeline),
):
    task = await _get_task_or_404(store, task_id)
    if task.status != SessionStatus.RECORDING:
        raise HTTPException(status_code=400, detail="Task is not recording")

    task.status = SessionStatus.PROCESSING
    task.end_ts = int(time.time() * 1000)
    await store.set(task_id, task)
    logger.info("Task %s stopped with %d actions, generating documentation", task_id, len(task.actions))

    try:
        result = await pipeline.generate_documentation(task.actions)
    except PipelineStageError as e:
        logger.error("Documentation failed for %s: %s", task_id, e)
        task.status = SessionStatus.ERROR
        task.error = str(e)
        await store.set(task_id, task)
        return _error_response(StopTaskResponse(status=task.status, error=task.error))
    except Exception as e:
        logger.exception("Unexpected error generating documentation for %s", task_id)
        task.status = SessionStatus.ERROR
        task.error = str(e) or type(e).__name__
        await store.set(task_id, task)
        return _error_response(StopTaskResponse(status=task.status, error=task.error))

    task.chunks = result.chunks
    task.metrics = result.metrics
    task.know_how_extraction = result.know_how
    task.output = result.output
    task.status = SessionStatus.COMPLETED
    await store.set(task_id, task)

    return StopTaskResponse(
        status=task.status,
        output=task.output,
        degraded_stages=result.degraded_stages,
    )


@router.get("/{task_id}", response_model=GetTaskResponse)
async def get_task(task_id: str, store: TaskStore = Depends(get_task_store)):
    task = await _get_task_or_404(store, task_id)
    return GetTaskResponse(task=task)


@router.delete("/{task_id}")
async def delete_task(task_id: str, store: TaskStore = Depends(get_task_store)):
    if not await store.delete(task_id):
        raise HTTPException(status_code=404, detail="Task not found")
    return {"deleted": True}


@router.get("", response_model=ListTasksResponse)
async def list_tasks(store: TaskStore = Depends(get_task_store)):
    tasks = await store.list()
    return ListTasksResponse(
        tasks=[
            TaskListItem.model_validate(
                {**task.model_dump(), "actions": [], "action_count": len(task.actions)}
            )
            for task in tasks
        ]
    )


@router.post("/{task_id}/clarification", response_model=ClarificationResponse)
async def clarify_task(
    task_id: str,
    req: ClarificationRequest,
    store: TaskStore = Depends(get_task_store),
    pipeline: DocumentationPipeline = Depends(get_documentation_pipeline),
):
    """Refine a finished document with answers from a clarification conversation."""
    task = await _get_task_or_404(store, task_id)
    if task.output is None:
        raise HTTPException(status_code=400, detail="Task has no generated output")

    task.clarification_transcript = req.transcript
    try:
        task.output = await pipeline.refine_documentation(task.output, req.transcript)
    except PipelineStageError as e:
        logger.error("Refinement failed for %s: %s", task_id, e)
        await store.set(task_id, task)
        return _error_response(ClarificationResponse(success=False, error=str(e)))
    except Exception as e:
        logger.exception("Unexpected error refining %s", task_id)
        await store.set(task_id, task)
        return _error_response(ClarificationResponse(success=False, error=str(e) or type(e).__name__))

    await store.set(task_id, task)
    return ClarificationResponse(success=True, updated_markdown=task.output.raw_markdown)
