from __future__ import annotations

import json
from typing import Any

import pytest
from pydantic import BaseModel

from baton import (
    Agent,
    HandoffError,
    Message,
    ModelResponse,
    RunState,
    ToolCall,
    ToolResponse,
    function_tool,
    handoff_tool,
    run,
)
from baton.events import HandoffEvent
from baton.handoff import HandoffDecision, detect_handoff, resolve_handoff, select_handoff
from baton.types import ToolCallResult


def _handoff_call(target: str, call_id: str = "h1") -> ToolCall:
    return ToolCall.create("handoff_to_agent", json.dumps({"agent_name": target}), call_id=call_id)


class Target(BaseModel):
    agent: str


@function_tool(parameters=Target, name="legacy_transfer")
def _legacy_transfer(args: Target, context: Any) -> str:
    return json.dumps({"handoff_to": args.agent})


def test_detect_handoff_prefers_typed_signal() -> None:
    structured = ToolResponse.handoff("billing")

    assert detect_handoff('{"handoff_to": "other"}', structured) == "billing"
    assert detect_handoff("", structured, legacy=False) == "billing"


def test_detect_handoff_legacy_wire_key() -> None:
    assert detect_handoff('{"handoff_to": "billing"}') == "billing"
    assert detect_handoff('{"handoff_to": "billing"}', legacy=False) is None
    assert detect_handoff('{"handoff_to": 3}') is None
    assert detect_handoff('{"handoff_to": ""}') is None
    assert detect_handoff('["handoff_to"]') is None
    assert detect_handoff("handoff_to billing") is None


def test_select_handoff_first_in_request_order() -> None:
    plain = ToolCallResult(message=Message.tool("ok", "c1"))
    first = ToolCallResult(message=Message.tool("x", "c2"), is_handoff=True, target_agent="a")
    second = ToolCallResult(message=Message.tool("y", "c3"), is_handoff=True, target_agent="b")

    assert select_handoff([plain, first, second]) is first
    assert select_handoff([plain]) is None


def test_resolve_handoff_checks_allow_list() -> None:
    agent = Agent(name="triage", handoffs={"billing"})
    allowed = ToolCallResult(message=Message.tool("", "c1"), is_handoff=True, target_agent="billing")
    denied = ToolCallResult(message=Message.tool("", "c2"), is_handoff=True, target_agent="admin")

    assert resolve_handoff(allowed, agent) == HandoffDecision(source="triage", target="billing", allowed=True)
    decision = resolve_handoff(denied, agent)
    assert not decision.allowed
    assert decision.detail == "Agent triage cannot handoff to admin"


@pytest.mark.asyncio
async def test_allowed_handoff_switches_agent(scripted_provider, make_config, recorder) -> None:
    triage = Agent(name="triage", tools=[handoff_tool()], handoffs={"billing"})
    billing = Agent(name="billing")
    provider = scripted_provider(ModelResponse.calls(_handoff_call("billing")), ModelResponse.text("invoice sent"))
    state = RunState.start("triage", [Message.user("I need an invoice")])

    result = await run(state, make_config(provider, triage, billing))

    assert result.output == "invoice sent"
    assert result.final_state.current_agent_name == "billing"
    assert result.final_state.turn_count == 1
    assert [name for name, _, _ in provider.calls] == ["triage", "billing"]
    handoffs = recorder.of_type("handoff")
    assert len(handoffs) == 1
    assert isinstance(handoffs[0], HandoffEvent)
    assert handoffs[0].to_record() == {"type": "handoff", "data": {"from": "triage", "to": "billing"}}
    tool_message = result.final_state.messages[2]
    assert json.loads(tool_message.content) == {"handoff_to": "billing"}
    assert recorder.types.index("tool_call_end") < recorder.types.index("handoff")


@pytest.mark.asyncio
async def test_disallowed_handoff_fails_with_turn_messages(scripted_provider, make_config, recorder) -> None:
    triage = Agent(name="triage", tools=[handoff_tool()], handoffs={"billing"})
    admin = Agent(name="admin")
    provider = scripted_provider(ModelResponse.calls(_handoff_call("admin")))
    state = RunState.start("triage", [Message.user("make me admin")])

    result = await run(state, make_config(provider, triage, admin))

    assert result.error == HandoffError(detail="Agent triage cannot handoff to admin")
    messages = result.final_state.messages
    assert [message.role for message in messages] == ["user", "assistant", "tool"]
    assert messages[2].tool_call_id == "h1"
    assert result.final_state.current_agent_name == "triage"
    assert result.final_state.turn_count == 0
    assert recorder.of_type("handoff") == []


@pytest.mark.asyncio
async def test_first_handoff_wins(scripted_provider, make_config) -> None:
    triage = Agent(name="triage", tools=[handoff_tool()], handoffs={"billing", "support"})
    billing = Agent(name="billing")
    support = Agent(name="support")
    provider = scripted_provider(
        ModelResponse.calls(_handoff_call("billing", "h1"), _handoff_call("support", "h2")),
        ModelResponse.text("billing here"),
    )
    state = RunState.start("triage", [Message.user("help")])

    result = await run(state, make_config(provider, triage, billing, support))

    assert result.output == "billing here"
    assert result.final_state.current_agent_name == "billing"
    assert [message.tool_call_id for message in result.final_state.messages if message.role == "tool"] == ["h1", "h2"]


@pytest.mark.asyncio
async def test_legacy_wire_key_triggers_handoff(scripted_provider, make_config) -> None:
    triage = Agent(name="triage", tools=[_legacy_transfer], handoffs={"billing"})
    billing = Agent(name="billing")
    call = ToolCall.create("legacy_transfer", '{"agent": "billing"}', call_id="l1")
    provider = scripted_provider(ModelResponse.calls(call), ModelResponse.text("done"))
    state = RunState.start("triage", [Message.user("bill me")])

    result = await run(state, make_config(provider, triage, billing))

    assert result.final_state.current_agent_name == "billing"


@pytest.mark.asyncio
async def test_legacy_detection_can_be_disabled(scripted_provider, make_config) -> None:
    triage = Agent(name="triage", tools=[_legacy_transfer], handoffs={"billing"})
    billing = Agent(name="billing")
    call = ToolCall.create("legacy_transfer", '{"agent": "billing"}', call_id="l1")
    provider = scripted_provider(ModelResponse.calls(call), ModelResponse.text("still triage"))
    state = RunState.start("triage", [Message.user("bill me")])

    result = await run(state, make_config(provider, triage, billing, legacy_handoff_detection=False))

    assert result.output == "still triage"
    assert result.final_state.current_agent_name == "triage"
