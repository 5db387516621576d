"""Conversation, agent and run data types."""

from __future__ import annotations

import uuid
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, ClassVar, Literal, Protocol

from pydantic import BaseModel, ConfigDict, field_validator

from .codecs import Validator, as_validator

if TYPE_CHECKING:
    from .tools.base import Tool

Role = Literal["system", "user", "assistant", "tool"]


class FunctionCall(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    arguments: str = ""

    @field_validator("arguments", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class ToolCall(BaseModel):
    """A model-issued request to invoke a named tool."""

    model_config = ConfigDict(frozen=True)

    id: str
    type: Literal["function"] = "function"
    function: FunctionCall

    @property
    def name(self) -> str:
        return self.function.name

    @classmethod
    def create(cls, name: str, arguments: str = "{}", *, call_id: str | None = None) -> ToolCall:
        return cls(id=call_id or f"call_{uuid.uuid4().hex[:12]}", function=FunctionCall(name=name, arguments=arguments))


class Message(BaseModel):
    """One chat message.

    Tool-role messages carry ``tool_call_id`` pointing back at a tool call of
    the assistant message that precedes them in the same turn.
    """

    model_config = ConfigDict(frozen=True)

    role: Role
    content: str = ""
    tool_calls: tuple[ToolCall, ...] | None = None
    tool_call_id: str | None = None

    @field_validator("content", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @classmethod
    def system(cls, content: str) -> Message:
        return cls(role="system", content=content)

    @classmethod
    def user(cls, content: str) -> Message:
        return cls(role="user", content=content)

    @classmethod
    def assistant(cls, content: str = "", tool_calls: Iterable[ToolCall] | None = None) -> Message:
        calls = tuple(tool_calls) if tool_calls else None
        return cls(role="assistant", content=content, tool_calls=calls)

    @classmethod
    def tool(cls, content: str, tool_call_id: str) -> Message:
        return cls(role="tool", content=content, tool_call_id=tool_call_id)


@dataclass(frozen=True)
class RunState[Ctx]:
    """Immutable snapshot of one run; every turn yields a new value."""

    run_id: str
    trace_id: str
    context: Ctx
    messages: tuple[Message, ...]
    current_agent_name: str
    turn_count: int = 0

    def __post_init__(self) -> None:
        if not isinstance(self.messages, tuple):
            object.__setattr__(self, "messages", tuple(self.messages))

    @classmethod
    def start(
        cls,
        agent_name: str,
        messages: Iterable[Message],
        context: Ctx = None,  # type: ignore[assignment]
        *,
        run_id: str | None = None,
        trace_id: str | None = None,
    ) -> RunState[Ctx]:
        return cls(
            run_id=run_id or uuid.uuid4().hex,
            trace_id=trace_id or uuid.uuid4().hex,
            context=context,
            messages=tuple(messages),
            current_agent_name=agent_name,
        )

    def with_messages(self, *messages: Message) -> RunState[Ctx]:
        return replace(self, messages=(*self.messages, *messages))

    def replace(self, **changes: Any) -> RunState[Ctx]:
        return replace(self, **changes)


@dataclass(frozen=True)
class ModelConfig:
    name: str | None = None
    temperature: float | None = None
    max_tokens: int | None = None


type Instructions = str | Callable[[RunState[Any]], str]


@dataclass(frozen=True)
class Agent[Ctx, Out]:
    """Immutable agent definition looked up by name from a registry."""

    name: str
    instructions: Instructions = ""
    model_config: ModelConfig = field(default_factory=ModelConfig)
    tools: tuple[Tool, ...] = ()
    handoffs: frozenset[str] = frozenset()
    output_codec: Validator | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "tools", tuple(self.tools))
        object.__setattr__(self, "handoffs", frozenset(self.handoffs))
        if self.output_codec is not None:
            object.__setattr__(self, "output_codec", as_validator(self.output_codec))

    def tool(self, name: str) -> Tool | None:
        for tool in self.tools:
            if tool.schema.name == name:
                return tool
        return None

    @property
    def tool_names(self) -> list[str]:
        return [tool.schema.name for tool in self.tools]

    def can_handoff_to(self, name: str) -> bool:
        return name in self.handoffs

    def render_instructions(self, state: RunState[Ctx]) -> str:
        if callable(self.instructions):
            return self.instructions(state)
        return self.instructions


class AgentLookup(Protocol):
    def get(self, name: str, /) -> Agent[Any, Any] | None: ...


@dataclass(frozen=True)
class ToolCallResult:
    """Result of one dispatched tool call, consumed within the same turn."""

    message: Message
    is_handoff: bool = False
    target_agent: str | None = None


# ---------------------------------------------------------------------------
# Run outcomes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RunError:
    kind: ClassVar[str] = "RunError"

    def describe(self) -> str:
        return self.kind


@dataclass(frozen=True)
class InputGuardrailTripwire(RunError):
    kind: ClassVar[str] = "InputGuardrailTripwire"
    reason: str = ""

    def describe(self) -> str:
        return f"{self.kind}: {self.reason}"


@dataclass(frozen=True)
class OutputGuardrailTripwire(RunError):
    kind: ClassVar[str] = "OutputGuardrailTripwire"
    reason: str = ""

    def describe(self) -> str:
        return f"{self.kind}: {self.reason}"


@dataclass(frozen=True)
class MaxTurnsExceeded(RunError):
    kind: ClassVar[str] = "MaxTurnsExceeded"
    turns: int = 0

    def describe(self) -> str:
        return f"{self.kind}: turns={self.turns}"


@dataclass(frozen=True)
class AgentNotFound(RunError):
    kind: ClassVar[str] = "AgentNotFound"
    agent_name: str = ""

    def describe(self) -> str:
        return f"{self.kind}: {self.agent_name}"


@dataclass(frozen=True)
class HandoffError(RunError):
    kind: ClassVar[str] = "HandoffError"
    detail: str = ""

    def describe(self) -> str:
        return f"{self.kind}: {self.detail}"


@dataclass(frozen=True)
class DecodeError(RunError):
    kind: ClassVar[str] = "DecodeError"
    errors: tuple[dict[str, Any], ...] = ()

    def describe(self) -> str:
        return f"{self.kind}: {len(self.errors)} issue(s)"


@dataclass(frozen=True)
class ModelBehaviorError(RunError):
    kind: ClassVar[str] = "ModelBehaviorError"
    detail: str = ""

    def describe(self) -> str:
        return f"{self.kind}: {self.detail}"


@dataclass(frozen=True)
class Completed[Out]:
    output: Out
    status: ClassVar[str] = "completed"


@dataclass(frozen=True)
class Failed:
    error: RunError
    status: ClassVar[str] = "error"


type RunOutcome[Out] = Completed[Out] | Failed


@dataclass(frozen=True)
class RunResult[Out]:
    """Terminal result of a run."""

    final_state: RunState[Any]
    outcome: RunOutcome[Out]

    @property
    def status(self) -> str:
        return self.outcome.status

    @property
    def ok(self) -> bool:
        return isinstance(self.outcome, Completed)

    @property
    def output(self) -> Out | None:
        if isinstance(self.outcome, Completed):
            return self.outcome.output
        return None

    @property
    def error(self) -> RunError | None:
        if isinstance(self.outcome, Failed):
            return self.outcome.error
        return None
