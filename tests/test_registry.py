import pytest
from pydantic import BaseModel

from baton import Agent, AgentRegistry, function_tool
from baton.errors import DuplicateAgentError


class Empty(BaseModel):
    pass


@function_tool(parameters=Empty, name="ping")
def _ping(args: Empty, context: object) -> str:
    return "pong"


def test_register_and_lookup() -> None:
    registry = AgentRegistry([Agent(name="b"), Agent(name="a")])

    assert registry.names() == ["a", "b"]
    assert registry.has("a")
    assert "b" in registry
    assert registry.get("missing") is None
    assert len(registry) == 2


def test_duplicate_registration_requires_replace() -> None:
    registry = AgentRegistry([Agent(name="a")])

    with pytest.raises(DuplicateAgentError):
        registry.register(Agent(name="a"))

    replacement = Agent(name="a", instructions="new")
    registry.register(replacement, replace=True)
    assert registry.get("a") is replacement


def test_compact_rows() -> None:
    registry = AgentRegistry([Agent(name="triage", tools=[_ping], handoffs={"billing"}), Agent(name="billing")])

    assert registry.compact_rows() == [
        "billing: tools=- handoffs=-",
        "triage: tools=ping handoffs=billing",
    ]


def test_validate_reports_unknown_targets_and_duplicate_tools() -> None:
    registry = AgentRegistry(
        [
            Agent(name="triage", tools=[_ping, _ping], handoffs={"billing", "ghost"}),
            Agent(name="billing"),
        ]
    )

    assert registry.validate() == [
        "triage: handoff target 'ghost' is not registered",
        "triage: duplicate tool name 'ping'",
    ]
