"""Captured browser interaction events.

An :class:`Action` is recorded once by the extension and never modified
afterwards.  Order is the capture sequence (list index), not the timestamp.
"""

from __future__ import annotations

from enum import Enum

from pydantic import Field

from models.base import FrozenCamelModel


class ActionType(str, Enum):
    """Interaction kinds emitted by the content script."""
    CLICK = "click"
    INPUT = "input"
    NAVIGATION = "navigation"
    COPY = "copy"
    SCROLL = "scroll"


class ActionTarget(FrozenCamelModel):
    """DOM element the user interacted with."""
    selector: str = ""
    text: str = ""
    role: str | None = None


class ActionMetadata(FrozenCamelModel):
    """Page context at capture time."""
    page_title: str = ""
    h1: str | None = None
    idle_time_before: int | None = None  # ms since previous action


class Action(FrozenCamelModel):
    """A single captured interaction."""
    type: ActionType
    timestamp: int  # epoch ms
    url: str
    target: ActionTarget = Field(default_factory=ActionTarget)
    metadata: ActionMetadata = Field(default_factory=ActionMetadata)

    @property
    def idle_ms(self) -> int:
        """Idle time before this action, 0 when not reported."""
        return self.metadata.idle_time_before or 0
