"""Load conversation history before a run and persist it afterwards."""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from typing import Any

from loguru import logger

from ..config import MemoryConfig
from ..types import Message, RunState
from .types import Err

COMPRESSION_HEAD_RATIO = 0.2


def compress_messages(messages: Sequence[Message], threshold: int | None) -> tuple[Message, ...]:
    """Drop interior history once ``messages`` exceeds ``threshold``.

    The first ``floor(threshold * 0.2)`` messages and the most recent
    ``threshold - floor(threshold * 0.2)`` messages are retained.
    """
    if not threshold or threshold <= 0 or len(messages) <= threshold:
        return tuple(messages)
    keep_first = math.floor(threshold * COMPRESSION_HEAD_RATIO)
    keep_recent = threshold - keep_first
    return (*messages[:keep_first], *messages[len(messages) - keep_recent :])


def context_user_id(context: Any) -> Any:
    if isinstance(context, Mapping):
        return context.get("user_id", context.get("userId"))
    return getattr(context, "user_id", None)


def build_metadata(state: RunState[Any]) -> dict[str, Any]:
    return {
        "user_id": context_user_id(state.context),
        "trace_id": state.trace_id,
        "run_id": state.run_id,
        "agent_name": state.current_agent_name,
        "turn_count": state.turn_count,
    }


class MemoryBridge:
    """Conversation-memory integration for one run.

    Provider failures never fail the run: they are logged and the run
    continues with (or finishes on) the state it already has.
    """

    def __init__(self, memory: MemoryConfig, conversation_id: str | None) -> None:
        self._memory = memory
        self._conversation_id = conversation_id

    @property
    def active(self) -> bool:
        return bool(self._memory.auto_store and self._conversation_id)

    async def load(self, state: RunState[Any]) -> RunState[Any]:
        provider = self._memory.provider
        conversation_id = self._conversation_id
        if provider is None or not conversation_id:
            return state

        try:
            result = await provider.get_conversation(conversation_id)
        except Exception as exc:
            logger.warning("memory.load.error conversation_id={} error={}", conversation_id, exc)
            return state
        if isinstance(result, Err):
            logger.warning("memory.load.error conversation_id={} error={}", conversation_id, result.error.message)
            return state

        stored = result.value
        if stored is None:
            logger.debug("memory.load.empty conversation_id={}", conversation_id)
            return state

        history = tuple(stored.messages)
        if self._memory.max_messages:
            history = history[-self._memory.max_messages :]
        logger.info(
            "memory.load conversation_id={} loaded={} new={}",
            conversation_id,
            len(history),
            len(state.messages),
        )
        return state.replace(messages=(*history, *state.messages))

    async def store(self, state: RunState[Any]) -> bool:
        """Persist the final history. Returns whether the provider accepted it."""
        provider = self._memory.provider
        conversation_id = self._conversation_id
        if provider is None or not conversation_id:
            return False

        messages = compress_messages(state.messages, self._memory.compression_threshold)
        if len(messages) < len(state.messages):
            logger.info(
                "memory.compress conversation_id={} from={} to={}",
                conversation_id,
                len(state.messages),
                len(messages),
            )

        try:
            result = await provider.store_messages(conversation_id, messages, build_metadata(state))
        except Exception as exc:
            logger.warning("memory.store.error conversation_id={} error={}", conversation_id, exc)
            return False
        if isinstance(result, Err):
            logger.warning("memory.store.error conversation_id={} error={}", conversation_id, result.error.message)
            return False

        logger.info("memory.store conversation_id={} stored={}", conversation_id, len(messages))
        return True
