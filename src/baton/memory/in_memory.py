"""In-process memory provider."""

from __future__ import annotations

import threading
from collections import OrderedDict
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from loguru import logger

from ..types import Message
from .types import ConversationMemory, Err, MemoryResult, Ok

PROVIDER_NAME = "memory"


@dataclass
class _Conversation:
    messages: list[Message]
    metadata: dict[str, Any]
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def snapshot(self, conversation_id: str) -> ConversationMemory:
        metadata = {
            **self.metadata,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "total_messages": len(self.messages),
        }
        return ConversationMemory(conversation_id=conversation_id, messages=tuple(self.messages), metadata=metadata)


class InMemoryProvider:
    """Keeps conversations in a process-local, size-bounded map.

    The least recently written conversation is evicted once
    ``max_conversations`` is exceeded; each conversation keeps at most
    ``max_messages_per_conversation`` of its most recent messages.
    """

    def __init__(self, *, max_conversations: int = 1000, max_messages_per_conversation: int = 1000) -> None:
        self._max_conversations = max_conversations
        self._max_messages = max_messages_per_conversation
        self._conversations: OrderedDict[str, _Conversation] = OrderedDict()
        self._lock = threading.Lock()

    async def get_conversation(self, conversation_id: str) -> MemoryResult[ConversationMemory | None]:
        with self._lock:
            conversation = self._conversations.get(conversation_id)
            if conversation is None:
                return Ok(None)
            return Ok(conversation.snapshot(conversation_id))

    async def store_messages(
        self,
        conversation_id: str,
        messages: Sequence[Message],
        metadata: Mapping[str, Any] | None = None,
    ) -> MemoryResult[None]:
        with self._lock:
            existing = self._conversations.get(conversation_id)
            now = datetime.now(UTC)
            conversation = _Conversation(
                messages=self._truncate(list(messages)),
                metadata=dict(metadata or {}),
                created_at=existing.created_at if existing is not None else now,
                updated_at=now,
            )
            self._conversations[conversation_id] = conversation
            self._conversations.move_to_end(conversation_id)
            self._evict_locked()
        return Ok(None)

    async def append_messages(
        self,
        conversation_id: str,
        messages: Sequence[Message],
        metadata: Mapping[str, Any] | None = None,
    ) -> MemoryResult[None]:
        with self._lock:
            conversation = self._conversations.get(conversation_id)
            if conversation is None:
                return Err.of(f"Conversation not found: {conversation_id}", provider=PROVIDER_NAME)
            conversation.messages = self._truncate([*conversation.messages, *messages])
            conversation.metadata.update(metadata or {})
            conversation.updated_at = datetime.now(UTC)
            self._conversations.move_to_end(conversation_id)
        return Ok(None)

    async def delete_conversation(self, conversation_id: str) -> MemoryResult[bool]:
        with self._lock:
            return Ok(self._conversations.pop(conversation_id, None) is not None)

    async def clear_user_conversations(self, user_id: str) -> MemoryResult[int]:
        with self._lock:
            doomed = [key for key, value in self._conversations.items() if value.metadata.get("user_id") == user_id]
            for key in doomed:
                del self._conversations[key]
        return Ok(len(doomed))

    async def health_check(self) -> MemoryResult[dict[str, Any]]:
        with self._lock:
            return Ok({"healthy": True, "provider": PROVIDER_NAME, "conversations": len(self._conversations)})

    async def close(self) -> MemoryResult[None]:
        with self._lock:
            self._conversations.clear()
        return Ok(None)

    def _truncate(self, messages: list[Message]) -> list[Message]:
        if self._max_messages and len(messages) > self._max_messages:
            return messages[-self._max_messages :]
        return messages

    def _evict_locked(self) -> None:
        while self._max_conversations and len(self._conversations) > self._max_conversations:
            evicted, _ = self._conversations.popitem(last=False)
            logger.debug("memory.evict provider={} conversation_id={}", PROVIDER_NAME, evicted)
