"""Model provider contract and response normalization."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Protocol

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from .errors import ModelResponseError
from .types import ToolCall

if TYPE_CHECKING:
    from .config import RunConfig
    from .types import Agent, RunState


class AssistantReply(BaseModel):
    model_config = ConfigDict(frozen=True)

    content: str = ""
    tool_calls: tuple[ToolCall, ...] = ()

    @field_validator("content", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("tool_calls", mode="before")
    @classmethod
    def _none_to_tuple(cls, value: Any) -> Any:
        return () if value is None else value


class ModelResponse(BaseModel):
    """Closed shape of one completion: an assistant reply, or nothing."""

    model_config = ConfigDict(frozen=True)

    message: AssistantReply | None = None

    @classmethod
    def text(cls, content: str) -> ModelResponse:
        return cls(message=AssistantReply(content=content))

    @classmethod
    def calls(cls, *tool_calls: ToolCall, content: str = "") -> ModelResponse:
        return cls(message=AssistantReply(content=content, tool_calls=tool_calls))


class ModelProvider(Protocol):
    async def get_completion(
        self,
        state: RunState[Any],
        agent: Agent[Any, Any],
        config: RunConfig[Any],
    ) -> ModelResponse | Mapping[str, Any] | Any: ...


def normalize_response(raw: Any) -> ModelResponse:
    """Coerce a provider response into :class:`ModelResponse`.

    Accepts the closed model itself, ``{"message": {...}}`` mappings,
    chat-completion shaped ``{"choices": [{"message": {...}}]}`` payloads and
    attribute-style objects. Anything else raises ``ModelResponseError``.
    """
    if isinstance(raw, ModelResponse):
        return raw
    if raw is None:
        raise ModelResponseError("Model provider returned no response")
    if isinstance(raw, BaseModel):
        raw = raw.model_dump()
    try:
        if isinstance(raw, Mapping):
            return ModelResponse.model_validate(_unwrap_choices(raw))
        return ModelResponse.model_validate(raw, from_attributes=True)
    except ValidationError as exc:
        raise ModelResponseError(f"Malformed model response: {exc.error_count()} validation error(s)") from exc


def _unwrap_choices(raw: Mapping[str, Any]) -> Mapping[str, Any]:
    if "message" in raw or "choices" not in raw:
        return raw
    choices = raw.get("choices") or []
    if not choices:
        return {"message": None}
    first = choices[0]
    message = first.get("message") if isinstance(first, Mapping) else getattr(first, "message", None)
    return {"message": message}
