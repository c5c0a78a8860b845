"""Task session store — keeps recording sessions between API calls.

Provides:
- ``TaskStore`` abstract interface
- ``InMemoryTaskStore`` for single-instance deployments
- ``get_task_store()`` process-wide accessor
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from models.task import TaskSession

logger = logging.getLogger(__name__)


# ── Abstract Interface ───────────────────────────────────────


class TaskStore(ABC):
    """Where task sessions live between API calls."""

    @abstractmethod
    async def get(self, task_id: str) -> TaskSession | None:
        """Retrieve a session by ID.  Returns None if not found."""
        ...

    @abstractmethod
    async def set(self, task_id: str, task: TaskSession) -> None:
        """Persist a session (create or update)."""
        ...

    @abstractmethod
    async def delete(self, task_id: str) -> bool:
        """Remove a session.  Returns whether it existed."""
        ...

    @abstractmethod
    async def list(self) -> list[TaskSession]:
        """All sessions, oldest first."""
        ...


# ── In-Memory Implementation ────────────────────────────────


class InMemoryTaskStore(TaskStore):
    """Dict-backed store.  Sessions live as long as the process."""

    def __init__(self) -> None:
        self._store: dict[str, TaskSession] = {}

    async def get(self, task_id: str) -> TaskSession | None:
        return self._store.get(task_id)

    async def set(self, task_id: str, task: TaskSession) -> None:
        self._store[task_id] = task

    async def delete(self, task_id: str) -> bool:
        existed = self._store.pop(task_id, None) is not None
        if existed:
            logger.debug("Task deleted: %s", task_id)
        return existed

    async def list(self) -> list[TaskSession]:
        return sorted(self._store.values(), key=lambda t: t.start_ts)

    @property
    def size(self) -> int:
        return len(self._store)


# ── Factory ──────────────────────────────────────────────────

_store: TaskStore | None = None


def get_task_store() -> TaskStore:
    """Return the process-wide task store, creating it on first use."""
    global _store
    if _store is None:
        _store = InMemoryTaskStore()
        logger.info("Using in-memory task store")
    return _store
