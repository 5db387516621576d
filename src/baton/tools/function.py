"""Function-backed tools."""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from .base import ToolOutput, ToolSchema

type ToolHandler = Callable[[Any, Any], ToolOutput | Awaitable[ToolOutput]]


@dataclass(frozen=True)
class FunctionTool:
    """Tool wrapping a ``handler(args, context)`` callable, sync or async."""

    schema: ToolSchema
    handler: ToolHandler

    @property
    def name(self) -> str:
        return self.schema.name

    def execute(self, args: Any, context: Any) -> ToolOutput | Awaitable[ToolOutput]:
        return self.handler(args, context)


def function_tool(
    *,
    parameters: Any,
    name: str | None = None,
    description: str | None = None,
) -> Callable[[ToolHandler], FunctionTool]:
    """Decorator turning ``handler(args, context)`` into a :class:`FunctionTool`.

    ``parameters`` is a pydantic model (or any ``safe_parse`` validator) used
    to validate the model-supplied arguments before the handler runs.
    """

    def decorator(handler: ToolHandler) -> FunctionTool:
        tool_name = name or handler.__name__
        tool_description = description if description is not None else (inspect.getdoc(handler) or "")
        return FunctionTool(
            schema=ToolSchema(name=tool_name, parameters=parameters, description=tool_description),
            handler=handler,
        )

    return decorator
