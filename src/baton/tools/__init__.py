"""Tool contract, structured results and function-backed tools."""

from .base import Tool, ToolOutput, ToolSchema
from .function import FunctionTool, ToolHandler, function_tool
from .results import (
    HANDOFF_WIRE_KEY,
    HANDOFF_WIRE_VERSION,
    ToolErrorInfo,
    ToolResponse,
    ToolResult,
    ToolResultStatus,
    tool_result_to_string,
)

__all__ = [
    "HANDOFF_WIRE_KEY",
    "HANDOFF_WIRE_VERSION",
    "FunctionTool",
    "Tool",
    "ToolErrorInfo",
    "ToolHandler",
    "ToolOutput",
    "ToolResponse",
    "ToolResult",
    "ToolResultStatus",
    "ToolSchema",
    "function_tool",
    "tool_result_to_string",
]
