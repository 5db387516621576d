"""Turn the run event stream into log records."""

from __future__ import annotations

import json
from typing import Any

from loguru import logger

from .events import (
    HandoffEvent,
    LLMCallEndEvent,
    LLMCallStartEvent,
    RunEndEvent,
    RunEvent,
    RunStartEvent,
    ToolCallEndEvent,
    ToolCallStartEvent,
)
from .types import Completed, Failed
from .utils import shorten_text


class LoggingEventSink:
    """Event handler that logs every lifecycle event through loguru.

    Pass an instance as ``RunConfig.on_event`` (or compose it with other
    handlers) to get one log line per event without touching control flow.
    """

    def __init__(self, *, level: str = "INFO", preview_width: int = 30) -> None:
        self._level = level
        self._preview_width = preview_width

    def __call__(self, event: RunEvent) -> None:
        match event:
            case RunStartEvent():
                self._log("run.start run_id={} trace_id={}", event.run_id, event.trace_id)
            case LLMCallStartEvent():
                self._log("llm.call.start agent={} model={}", event.agent_name, event.model)
            case LLMCallEndEvent():
                self._log("llm.call.end {}", self._describe_choice(event.choice))
            case ToolCallStartEvent():
                self._log("tool.call.start name={} {{ {} }}", event.tool_name, self._render_args(event.args))
            case ToolCallEndEvent():
                self._log(
                    "tool.call.end name={} status={} result={}",
                    event.tool_name,
                    event.status or "-",
                    self._preview(event.result),
                )
            case HandoffEvent():
                self._log("handoff from={} to={}", event.from_agent, event.to_agent)
            case RunEndEvent():
                self._log("run.end {}", self._describe_outcome(event.outcome))
            case _:
                self._log("event type={}", event.type)

    def _log(self, message: str, *args: Any) -> None:
        logger.log(self._level, message, *args)

    def _preview(self, text: str) -> str:
        return shorten_text(text.replace("\n", " | "), width=self._preview_width)

    def _render_args(self, args: Any) -> str:
        if not isinstance(args, dict):
            return self._preview(str(args))
        params: list[str] = []
        for key, value in args.items():
            try:
                rendered = json.dumps(value, ensure_ascii=False)
            except TypeError:
                rendered = repr(value)
            params.append(f"{key}={shorten_text(rendered, width=self._preview_width)}")
        return ", ".join(params)

    @staticmethod
    def _describe_choice(choice: Any) -> str:
        message = getattr(choice, "message", None)
        if message is None:
            return "message=none"
        return f"tool_calls={len(message.tool_calls)} content_chars={len(message.content)}"

    @staticmethod
    def _describe_outcome(outcome: Any) -> str:
        if isinstance(outcome, Completed):
            return "status=completed"
        if isinstance(outcome, Failed):
            return f"status=error error={outcome.error.describe()}"
        return f"outcome={outcome!r}"
