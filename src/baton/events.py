"""Run lifecycle events.

Events are pydantic models delivered synchronously, in order, to the
``on_event`` callback of a run. Every event type follows the
``run_start`` / ``tool_call_end`` naming of the wire stream.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field


class RunEventType(str, Enum):
    RUN_START = "run_start"
    LLM_CALL_START = "llm_call_start"
    LLM_CALL_END = "llm_call_end"
    TOOL_CALL_START = "tool_call_start"
    TOOL_CALL_END = "tool_call_end"
    HANDOFF = "handoff"
    RUN_END = "run_end"


class RunEvent(BaseModel):
    """Base class for all run events."""

    event_type: ClassVar[RunEventType]

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    @property
    def type(self) -> str:
        return self.event_type.value

    def to_record(self) -> dict[str, Any]:
        """Render the event as ``{"type": ..., "data": {...}}``."""
        return {"type": self.type, "data": self.model_dump(mode="json", by_alias=True)}


class RunStartEvent(RunEvent):
    event_type = RunEventType.RUN_START

    run_id: str
    trace_id: str


class LLMCallStartEvent(RunEvent):
    event_type = RunEventType.LLM_CALL_START

    agent_name: str
    model: str


class LLMCallEndEvent(RunEvent):
    event_type = RunEventType.LLM_CALL_END

    choice: Any


class ToolCallStartEvent(RunEvent):
    event_type = RunEventType.TOOL_CALL_START

    tool_name: str
    args: Any = None


class ToolCallEndEvent(RunEvent):
    event_type = RunEventType.TOOL_CALL_END

    tool_name: str
    result: str
    tool_result: dict[str, Any] | None = None
    status: str | None = None


class HandoffEvent(RunEvent):
    event_type = RunEventType.HANDOFF

    from_agent: str = Field(serialization_alias="from")
    to_agent: str = Field(serialization_alias="to")


class RunEndEvent(RunEvent):
    event_type = RunEventType.RUN_END

    outcome: Any


type EventHandler = Callable[[RunEvent], None]


class EventEmitter:
    """Deliver events to an optional handler."""

    def __init__(self, handler: EventHandler | None = None) -> None:
        self._handler = handler

    def __call__(self, event: RunEvent) -> None:
        if self._handler is not None:
            self._handler(event)


def compose_handlers(*handlers: EventHandler | None) -> EventHandler:
    """Fan one event stream out to several handlers, in the given order."""
    active = [handler for handler in handlers if handler is not None]

    def _handle(event: RunEvent) -> None:
        for handler in active:
            handler(event)

    return _handle
