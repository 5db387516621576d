"""Input and output guardrails."""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from .types import Message


@dataclass(frozen=True)
class GuardrailResult:
    is_valid: bool
    error_message: str = ""

    @classmethod
    def passed(cls) -> GuardrailResult:
        return cls(is_valid=True)

    @classmethod
    def failed(cls, error_message: str) -> GuardrailResult:
        return cls(is_valid=False, error_message=error_message)


type Guardrail = Callable[[Any], GuardrailResult | Awaitable[GuardrailResult]]


async def check_guardrails(guardrails: Sequence[Guardrail], value: Any) -> GuardrailResult:
    """Run guardrails in order and stop at the first failure."""
    for guardrail in guardrails:
        result = guardrail(value)
        if inspect.isawaitable(result):
            result = await result
        if not result.is_valid:
            return result
    return GuardrailResult.passed()


def first_user_message(messages: Iterable[Message]) -> Message | None:
    for message in messages:
        if message.role == "user":
            return message
    return None
