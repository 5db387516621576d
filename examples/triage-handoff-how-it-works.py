"""Baton Run Engine Examples - Tools, Handoffs and Memory.

This module walks through a few complete runs against a scripted model:
1. A tool round trip
2. A handoff from a triage agent to a specialist
3. A refused handoff and an input guardrail tripwire
4. Conversation memory across two runs
"""

from __future__ import annotations

import asyncio
import json
from typing import Any

from pydantic import BaseModel

from baton import (
    Agent,
    AgentRegistry,
    GuardrailResult,
    MemoryConfig,
    Message,
    ModelResponse,
    RunConfig,
    RunResult,
    RunState,
    ToolCall,
    function_tool,
    handoff_tool,
    run,
)
from baton.logging_utils import configure_logging
from baton.memory import InMemoryProvider
from baton.observability import LoggingEventSink

# ============================================================================
# SCRIPTED MODEL
# ============================================================================


class ScriptedModel:
    """Replays canned responses so the demo runs without network access."""

    def __init__(self, *responses: ModelResponse) -> None:
        self._responses = list(responses)

    async def get_completion(self, state: RunState[Any], agent: Agent[Any, Any], config: RunConfig[Any]) -> Any:
        return self._responses.pop(0)


# ============================================================================
# TOOLS AND AGENTS
# ============================================================================


class InvoiceArgs(BaseModel):
    customer: str


@function_tool(parameters=InvoiceArgs, name="lookup_invoice")
def lookup_invoice(args: InvoiceArgs, context: Any) -> str:
    """Look up the latest invoice of a customer."""
    return json.dumps({"customer": args.customer, "amount": 42, "currency": "EUR"})


TRIAGE = Agent(
    name="triage",
    instructions="Route the customer to the right specialist.",
    tools=[handoff_tool()],
    handoffs={"billing"},
)
BILLING = Agent(name="billing", instructions="Answer billing questions.", tools=[lookup_invoice])
ADMIN = Agent(name="admin", instructions="Administer accounts.")


def build_config(model: ScriptedModel, **overrides: Any) -> RunConfig[Any]:
    overrides.setdefault("on_event", LoggingEventSink(level="DEBUG"))
    return RunConfig(agent_registry=AgentRegistry([TRIAGE, BILLING, ADMIN]), model_provider=model, **overrides)


def show(result: RunResult[Any]) -> None:
    for message in result.final_state.messages:
        print(f"  {message.role:<9} {message.content or message.tool_calls}")
    if result.ok:
        print(f"  -> completed by {result.final_state.current_agent_name}: {result.output}")
    else:
        print(f"  -> failed: {result.error.describe()}")


def handoff_call(target: str) -> ToolCall:
    return ToolCall.create("handoff_to_agent", json.dumps({"agent_name": target}))


# ============================================================================
# DEMONSTRATIONS
# ============================================================================


async def demonstrate_tool_round_trip() -> None:
    print("\nTool Round Trip")
    print("=" * 30)

    model = ScriptedModel(
        ModelResponse.calls(ToolCall.create("lookup_invoice", '{"customer": "acme"}')),
        ModelResponse.text("Your latest invoice is 42 EUR."),
    )
    state = RunState.start("billing", [Message.user("How much do I owe?")])
    show(await run(state, build_config(model)))


async def demonstrate_handoff() -> None:
    print("\nHandoff")
    print("=" * 30)

    model = ScriptedModel(
        ModelResponse.calls(handoff_call("billing")),
        ModelResponse.text("Billing here, how can I help?"),
    )
    state = RunState.start("triage", [Message.user("I have a question about my bill")])
    show(await run(state, build_config(model)))


async def demonstrate_refusals() -> None:
    print("\nRefused Handoff and Guardrail")
    print("=" * 30)

    model = ScriptedModel(ModelResponse.calls(handoff_call("admin")))
    state = RunState.start("triage", [Message.user("Make me an admin")])
    show(await run(state, build_config(model)))

    def no_shouting(text: str) -> GuardrailResult:
        if text.isupper():
            return GuardrailResult.failed("Please do not shout")
        return GuardrailResult.passed()

    state = RunState.start("triage", [Message.user("WHERE IS MY REFUND")])
    show(await run(state, build_config(ScriptedModel(), initial_input_guardrails=[no_shouting])))


async def demonstrate_memory() -> None:
    print("\nConversation Memory")
    print("=" * 30)

    memory = MemoryConfig(provider=InMemoryProvider(), auto_store=True)
    first = ScriptedModel(ModelResponse.text("Noted, your name is Ada."))
    await run(
        RunState.start("billing", [Message.user("My name is Ada")], {"user_id": "ada"}),
        build_config(first, memory=memory, conversation_id="ada-1"),
    )

    second = ScriptedModel(ModelResponse.text("You told me your name is Ada."))
    result = await run(
        RunState.start("billing", [Message.user("What is my name?")], {"user_id": "ada"}),
        build_config(second, memory=memory, conversation_id="ada-1"),
    )
    show(result)


# ============================================================================
# MAIN DEMONSTRATION
# ============================================================================


async def run_simple_demo() -> None:
    """Run every demonstration in order."""
    print("Baton Run Engine - Simple Examples")
    print("=" * 50)

    await demonstrate_tool_round_trip()
    await demonstrate_handoff()
    await demonstrate_refusals()
    await demonstrate_memory()

    print("\nAll demonstrations completed!")


if __name__ == "__main__":
    configure_logging(profile="rich", level="DEBUG")
    asyncio.run(run_simple_demo())
