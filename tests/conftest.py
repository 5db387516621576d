from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest
from pydantic import BaseModel

from baton import Agent, AgentRegistry, RunConfig, RunState, function_tool
from baton.events import RunEvent
from baton.tools import FunctionTool


class ScriptedProvider:
    """Model provider replaying canned responses, then an optional fallback."""

    def __init__(
        self,
        *responses: Any,
        fallback: Callable[[RunState[Any], Agent[Any, Any]], Any] | None = None,
    ) -> None:
        self._responses = list(responses)
        self._fallback = fallback
        self.calls: list[tuple[str, int, int]] = []

    async def get_completion(self, state: RunState[Any], agent: Agent[Any, Any], config: RunConfig[Any]) -> Any:
        self.calls.append((agent.name, state.turn_count, len(state.messages)))
        if self._responses:
            response = self._responses.pop(0)
            if isinstance(response, BaseException):
                raise response
            return response
        if self._fallback is not None:
            return self._fallback(state, agent)
        raise AssertionError("model provider called more times than scripted")


class EventRecorder:
    def __init__(self) -> None:
        self.events: list[RunEvent] = []

    def __call__(self, event: RunEvent) -> None:
        self.events.append(event)

    @property
    def types(self) -> list[str]:
        return [event.type for event in self.events]

    def of_type(self, event_type: str) -> list[RunEvent]:
        return [event for event in self.events if event.type == event_type]


class EchoArgs(BaseModel):
    text: str


@function_tool(parameters=EchoArgs, name="echo")
def _echo(args: EchoArgs, context: Any) -> str:
    """Echo the given text."""
    return args.text


@pytest.fixture
def scripted_provider() -> type[ScriptedProvider]:
    return ScriptedProvider


@pytest.fixture
def recorder() -> EventRecorder:
    return EventRecorder()


@pytest.fixture
def echo_tool() -> FunctionTool:
    return _echo


@pytest.fixture
def make_config(recorder: EventRecorder) -> Callable[..., RunConfig[Any]]:
    def _make(provider: Any, *agents: Agent[Any, Any], **overrides: Any) -> RunConfig[Any]:
        overrides.setdefault("on_event", recorder)
        return RunConfig(agent_registry=AgentRegistry(agents), model_provider=provider, **overrides)

    return _make
