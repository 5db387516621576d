"""Tool contract."""

from __future__ import annotations

from collections.abc import Awaitable
from dataclasses import dataclass
from typing import Any, Protocol

from ..codecs import Validator, as_validator
from .results import ToolResult

type ToolOutput = str | ToolResult


@dataclass(frozen=True)
class ToolSchema:
    """Name, description and argument validator of one tool."""

    name: str
    parameters: Validator
    description: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "parameters", as_validator(self.parameters))

    def json_schema(self) -> dict[str, Any] | None:
        build = getattr(self.parameters, "json_schema", None)
        if build is None:
            return None
        return build()

    def to_function_spec(self) -> dict[str, Any]:
        """Render the schema in the function-calling shape most providers accept."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.json_schema() or {"type": "object", "properties": {}},
            },
        }


class Tool(Protocol):
    @property
    def schema(self) -> ToolSchema: ...

    def execute(self, args: Any, context: Any) -> ToolOutput | Awaitable[ToolOutput]: ...
