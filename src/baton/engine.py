"""Turn-execution engine.

One run is a sequence of turns: resolve the current agent, ask the model
provider for a completion, then either dispatch the requested tool calls
(possibly handing off to another agent) or validate and return the final
output. Every failure is reported through the returned ``RunResult``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from loguru import logger

from .config import RunConfig
from .events import (
    EventEmitter,
    HandoffEvent,
    LLMCallEndEvent,
    LLMCallStartEvent,
    RunEndEvent,
    RunStartEvent,
)
from .guardrails import check_guardrails, first_user_message
from .handoff import resolve_handoff, select_handoff
from .logging_utils import bind_run
from .memory.bridge import MemoryBridge
from .model import ModelResponse, normalize_response
from .tools.dispatcher import ToolDispatcher
from .types import (
    Agent,
    AgentNotFound,
    Completed,
    DecodeError,
    Failed,
    HandoffError,
    InputGuardrailTripwire,
    MaxTurnsExceeded,
    Message,
    ModelBehaviorError,
    OutputGuardrailTripwire,
    RunError,
    RunResult,
    RunState,
)
from .utils import parse_json_lenient

NO_MESSAGE_DETAIL = "No message in model response"
EMPTY_REPLY_DETAIL = "Model produced neither content nor tool calls"


@dataclass
class _Progress:
    """Last state at a turn boundary, kept for the failure path."""

    state: RunState[Any]


class RunEngine[Ctx, Out]:
    """Drives one run at a time over a fixed ``RunConfig``."""

    def __init__(self, config: RunConfig[Ctx]) -> None:
        self._config = config
        self._emit = EventEmitter(config.on_event)
        self._dispatcher = ToolDispatcher(self._emit, legacy_handoff_detection=config.legacy_handoff_detection)
        self._memory = MemoryBridge(config.memory, config.conversation_id)

    async def run(self, initial: RunState[Ctx]) -> RunResult[Out]:
        progress = _Progress(state=initial)
        with bind_run(initial.run_id):
            try:
                self._emit(RunStartEvent(run_id=initial.run_id, trace_id=initial.trace_id))
                if self._memory.active:
                    progress.state = await self._memory.load(initial)
                result = await self._run_turns(progress)
                if self._memory.active and len(result.final_state.messages) > len(initial.messages):
                    await self._memory.store(result.final_state)
            except Exception as exc:
                logger.exception("engine.run.error run_id={}", initial.run_id)
                detail = str(exc) or exc.__class__.__name__
                result = self._fail(progress.state, ModelBehaviorError(detail=detail))
            return self._finish(result)

    async def _run_turns(self, progress: _Progress) -> RunResult[Out]:
        config = self._config
        state = progress.state

        if state.turn_count == 0 and config.initial_input_guardrails:
            user_message = first_user_message(state.messages)
            if user_message is not None:
                verdict = await check_guardrails(config.initial_input_guardrails, user_message.content)
                if not verdict.is_valid:
                    return self._fail(state, InputGuardrailTripwire(reason=verdict.error_message))

        while True:
            if state.turn_count >= config.max_turns:
                return self._fail(state, MaxTurnsExceeded(turns=state.turn_count))

            agent = config.agent_registry.get(state.current_agent_name)
            if agent is None:
                return self._fail(state, AgentNotFound(agent_name=state.current_agent_name))

            response = await self._invoke_model(state, agent)
            reply = response.message
            if reply is None:
                return self._fail(state, ModelBehaviorError(detail=NO_MESSAGE_DETAIL))

            turn_state = state.with_messages(Message.assistant(reply.content, reply.tool_calls))

            if reply.tool_calls:
                results = await self._dispatcher.dispatch(reply.tool_calls, agent, state)
                turn_state = turn_state.with_messages(*(result.message for result in results))
                handoff = select_handoff(results)
                if handoff is None:
                    state = turn_state.replace(turn_count=state.turn_count + 1)
                else:
                    decision = resolve_handoff(handoff, agent)
                    if not decision.allowed:
                        return self._fail(turn_state, HandoffError(detail=decision.detail))
                    self._emit(HandoffEvent(from_agent=decision.source, to_agent=decision.target))
                    state = turn_state.replace(current_agent_name=decision.target, turn_count=state.turn_count + 1)
                progress.state = state
                continue

            if reply.content:
                return await self._finalize(turn_state, agent, reply.content)

            return self._fail(turn_state, ModelBehaviorError(detail=EMPTY_REPLY_DETAIL))

    async def _invoke_model(self, state: RunState[Ctx], agent: Agent[Ctx, Any]) -> ModelResponse:
        config = self._config
        self._emit(LLMCallStartEvent(agent_name=agent.name, model=config.resolve_model(agent)))
        raw = await config.model_provider.get_completion(state, agent, config)
        response = normalize_response(raw)
        self._emit(LLMCallEndEvent(choice=response))
        return response

    async def _finalize(self, state: RunState[Ctx], agent: Agent[Ctx, Any], content: str) -> RunResult[Out]:
        output: Any = content
        if agent.output_codec is not None:
            parsed = agent.output_codec.safe_parse(parse_json_lenient(content))
            if not parsed.success:
                return self._fail(state, DecodeError(errors=parsed.issues))
            output = parsed.data

        verdict = await check_guardrails(self._config.final_output_guardrails, output)
        if not verdict.is_valid:
            return self._fail(state, OutputGuardrailTripwire(reason=verdict.error_message))
        return RunResult(final_state=state, outcome=Completed(output))

    @staticmethod
    def _fail(state: RunState[Any], error: RunError) -> RunResult[Out]:
        return RunResult(final_state=state, outcome=Failed(error))

    def _finish(self, result: RunResult[Out]) -> RunResult[Out]:
        try:
            self._emit(RunEndEvent(outcome=result.outcome))
        except Exception:
            logger.exception("engine.event.error type=run_end")
        return result


async def run[Ctx, Out](initial_state: RunState[Ctx], config: RunConfig[Ctx]) -> RunResult[Out]:
    """Execute a run to completion. Never raises for run-level failures."""
    engine: RunEngine[Ctx, Out] = RunEngine(config)
    return await engine.run(initial_state)
