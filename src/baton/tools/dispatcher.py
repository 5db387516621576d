"""Concurrent tool-call dispatch for one turn."""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Sequence
from typing import Any

from loguru import logger

from ..events import EventHandler, ToolCallEndEvent, ToolCallStartEvent
from ..handoff import detect_handoff
from ..types import Agent, Message, RunState, ToolCall, ToolCallResult
from ..utils import parse_json_lenient, to_json
from .results import ToolResult, tool_result_to_string

TOOL_NOT_FOUND = "tool_not_found"
VALIDATION_ERROR = "validation_error"
EXECUTION_ERROR = "execution_error"


class ToolDispatcher:
    """Resolve, validate and execute the tool calls of one assistant message.

    Calls run concurrently and every tool failure, serialization of its
    output included, is folded into a tool-role message, so the returned list
    always matches the requests one-to-one and in order. An event handler
    that raises is re-raised only after every sibling call has settled.
    """

    def __init__(self, emit: EventHandler, *, legacy_handoff_detection: bool = True) -> None:
        self._emit = emit
        self._legacy_handoff_detection = legacy_handoff_detection

    async def dispatch(
        self,
        tool_calls: Sequence[ToolCall],
        agent: Agent[Any, Any],
        state: RunState[Any],
    ) -> list[ToolCallResult]:
        # Every call settles before an event-handler error reaches the engine.
        outcomes = await asyncio.gather(
            *(self._dispatch_one(call, agent, state) for call in tool_calls),
            return_exceptions=True,
        )
        results: list[ToolCallResult] = []
        for outcome in outcomes:
            if isinstance(outcome, BaseException):
                raise outcome
            results.append(outcome)
        return results

    async def _dispatch_one(self, call: ToolCall, agent: Agent[Any, Any], state: RunState[Any]) -> ToolCallResult:
        name = call.function.name
        args = parse_json_lenient(call.function.arguments)
        self._emit(ToolCallStartEvent(tool_name=name, args=args))

        try:
            tool = agent.tool(name)
            if tool is None:
                return self._failure(
                    call,
                    {
                        "error": TOOL_NOT_FOUND,
                        "message": f"Tool {name} not found",
                        "tool_name": name,
                    },
                )

            parsed = tool.schema.parameters.safe_parse(args)
            if not parsed.success:
                return self._failure(
                    call,
                    {
                        "error": VALIDATION_ERROR,
                        "message": f"Invalid arguments for {name}: {parsed.message}",
                        "tool_name": name,
                        "validation_errors": list(parsed.issues),
                    },
                )

            output = tool.execute(parsed.data, state.context)
            if inspect.isawaitable(output):
                output = await output

            structured = output if isinstance(output, ToolResult) else None
            result = tool_result_to_string(structured) if structured is not None else _stringify(output)
            end_event = ToolCallEndEvent(
                tool_name=name,
                result=result,
                tool_result=structured.model_dump(mode="json") if structured is not None else None,
                status=structured.status if structured is not None else "success",
            )
            target = detect_handoff(result, structured, legacy=self._legacy_handoff_detection)
        except Exception as exc:
            logger.exception("tool.call.error name={} call_id={}", name, call.id)
            return self._failure(
                call,
                {
                    "error": EXECUTION_ERROR,
                    "message": str(exc) or exc.__class__.__name__,
                    "tool_name": name,
                },
            )

        self._emit(end_event)
        return ToolCallResult(
            message=Message.tool(result, call.id),
            is_handoff=target is not None,
            target_agent=target,
        )

    def _failure(self, call: ToolCall, payload: dict[str, Any]) -> ToolCallResult:
        result = to_json(payload)
        self._emit(ToolCallEndEvent(tool_name=call.function.name, result=result))
        return ToolCallResult(message=Message.tool(result, call.id))


def _stringify(output: Any) -> str:
    if isinstance(output, str):
        return output
    if output is None:
        return ""
    return to_json(output)
