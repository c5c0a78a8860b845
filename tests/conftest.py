"""Shared test helpers for task recorder tests.

Provides:
- ``build_action``: factory for :class:`Action` objects with sensible defaults
- ``ScriptedClient``: fake :class:`GenerationClient` replaying canned answers
"""

from __future__ import annotations

from models.action import Action, ActionMetadata, ActionTarget, ActionType
from services.generation_client import GenerationClient


def build_action(
    type: str | ActionType = ActionType.CLICK,
    timestamp: int = 0,
    url: str = "https://example.com/",
    text: str = "",
    page_title: str = "",
    idle: int | None = None,
    selector: str = "",
) -> Action:
    return Action(
        type=ActionType(type),
        timestamp=timestamp,
        url=url,
        target=ActionTarget(selector=selector, text=text),
        metadata=ActionMetadata(page_title=page_title, idle_time_before=idle),
    )


class ScriptedClient(GenerationClient):
    """Returns queued responses in order and records every call.

    A queued exception instance is raised instead of returned.
    """

    def __init__(self, responses: list[str | Exception]) -> None:
        self._responses = list(responses)
        self.calls: list[dict] = []

    async def complete(
        self,
        prompt: str,
        *,
        system_prompt: str | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> str:
        self.calls.append({
            "prompt": prompt,
            "system_prompt": system_prompt,
            "max_tokens": max_tokens,
            "temperature": temperature,
        })
        if not self._responses:
            raise AssertionError("ScriptedClient ran out of responses")
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

