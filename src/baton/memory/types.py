"""Memory provider contract."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, ClassVar, Protocol

from ..errors import MemoryProviderError
from ..types import Message


@dataclass(frozen=True)
class ConversationMemory:
    """Stored history of one conversation."""

    conversation_id: str
    messages: tuple[Message, ...]
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Ok[T]:
    value: T
    success: ClassVar[bool] = True


@dataclass(frozen=True)
class Err:
    error: MemoryProviderError
    success: ClassVar[bool] = False

    @classmethod
    def of(cls, message: str, *, provider: str | None = None) -> Err:
        return cls(MemoryProviderError(message, provider=provider))


type MemoryResult[T] = Ok[T] | Err


class MemoryProvider(Protocol):
    async def get_conversation(self, conversation_id: str) -> MemoryResult[ConversationMemory | None]: ...

    async def store_messages(
        self,
        conversation_id: str,
        messages: Sequence[Message],
        metadata: Mapping[str, Any] | None = None,
    ) -> MemoryResult[None]: ...
