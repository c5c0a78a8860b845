"""Tests for the task session store."""

from __future__ import annotations

from models.task import TaskSession
from services.task_store import InMemoryTaskStore, get_task_store


class TestInMemoryTaskStore:
    async def test_set_and_get(self):
        store = InMemoryTaskStore()
        task = TaskSession(id="task-1")
        await store.set("task-1", task)
        assert await store.get("task-1") is task

    async def test_get_unknown(self):
        assert await InMemoryTaskStore().get("nope") is None

    async def test_delete(self):
        store = InMemoryTaskStore()
        await store.set("task-1", TaskSession(id="task-1"))
        assert await store.delete("task-1") is True
        assert await store.get("task-1") is None
        assert await store.delete("task-1") is False

    async def test_list_oldest_first(self):
        store = InMemoryTaskStore()
        await store.set("b", TaskSession(id="b", start_ts=2_000))
        await store.set("a", TaskSession(id="a", start_ts=1_000))
        assert [t.id for t in await store.list()] == ["a", "b"]
        assert store.size == 2

    async def test_set_overwrites(self):
        store = InMemoryTaskStore()
        await store.set("t", TaskSession(id="t"))
        await store.set("t", TaskSession(id="t", error="x"))
        assert (await store.get("t")).error == "x"
        assert store.size == 1


def test_get_task_store_singleton():
    assert get_task_store() is get_task_store()
