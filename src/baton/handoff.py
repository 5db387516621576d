"""Handoff detection and allow-list validation."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, Field

from .tools.base import ToolSchema
from .tools.function import FunctionTool
from .tools.results import HANDOFF_WIRE_KEY, HANDOFF_WIRE_VERSION, ToolResponse, ToolResult
from .types import Agent, ToolCallResult
from .utils import parse_json_lenient

__all__ = [
    "HANDOFF_WIRE_KEY",
    "HANDOFF_WIRE_VERSION",
    "HandoffArgs",
    "HandoffDecision",
    "detect_handoff",
    "handoff_tool",
    "resolve_handoff",
    "select_handoff",
]


def detect_handoff(result: str, structured: ToolResult | None = None, *, legacy: bool = True) -> str | None:
    """Return the handoff target signalled by one tool result, if any.

    The typed ``ToolResult.handoff_to`` signal wins. With ``legacy`` enabled a
    result string that parses to an object carrying ``HANDOFF_WIRE_KEY`` is
    honoured as well.
    """
    if structured is not None and structured.handoff_to:
        return structured.handoff_to
    if not legacy:
        return None
    payload = parse_json_lenient(result)
    if not isinstance(payload, dict) or HANDOFF_WIRE_KEY not in payload:
        return None
    target = payload[HANDOFF_WIRE_KEY]
    if isinstance(target, str) and target:
        return target
    return None


def select_handoff(results: Iterable[ToolCallResult]) -> ToolCallResult | None:
    """First handoff-signalling result in request order; later ones are ignored."""
    for result in results:
        if result.is_handoff:
            return result
    return None


@dataclass(frozen=True)
class HandoffDecision:
    source: str
    target: str
    allowed: bool

    @property
    def detail(self) -> str:
        if self.allowed:
            return f"Agent {self.source} hands off to {self.target}"
        return f"Agent {self.source} cannot handoff to {self.target}"


def resolve_handoff(result: ToolCallResult, agent: Agent[Any, Any]) -> HandoffDecision:
    target = result.target_agent or ""
    return HandoffDecision(source=agent.name, target=target, allowed=bool(target) and agent.can_handoff_to(target))


class HandoffArgs(BaseModel):
    agent_name: str = Field(description="Name of the agent to transfer the conversation to")
    reason: str | None = Field(default=None, description="Why the conversation is being transferred")


def handoff_tool(
    *,
    name: str = "handoff_to_agent",
    description: str = "Transfer the conversation to another agent.",
) -> FunctionTool:
    """Build a tool the model can call to request a handoff."""

    def _handler(args: HandoffArgs, context: Any) -> ToolResult:
        return ToolResponse.handoff(args.agent_name, args.reason)

    return FunctionTool(schema=ToolSchema(name=name, parameters=HandoffArgs, description=description), handler=_handler)
