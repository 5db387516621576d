"""baton - pass the conversation, keep the turn."""

from .config import MemoryConfig, RunConfig, Settings, get_settings
from .engine import RunEngine, run
from .events import RunEvent, RunEventType, compose_handlers
from .guardrails import Guardrail, GuardrailResult
from .handoff import handoff_tool
from .model import AssistantReply, ModelProvider, ModelResponse
from .registry import AgentRegistry
from .tools import FunctionTool, ToolResponse, ToolResult, ToolSchema, function_tool
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
    ModelConfig,
    OutputGuardrailTripwire,
    RunError,
    RunResult,
    RunState,
    ToolCall,
)

__version__ = "0.1.0"

__all__ = [
    "Agent",
    "AgentNotFound",
    "AgentRegistry",
    "AssistantReply",
    "Completed",
    "DecodeError",
    "Failed",
    "FunctionTool",
    "Guardrail",
    "GuardrailResult",
    "HandoffError",
    "InputGuardrailTripwire",
    "MaxTurnsExceeded",
    "MemoryConfig",
    "Message",
    "ModelBehaviorError",
    "ModelConfig",
    "ModelProvider",
    "ModelResponse",
    "OutputGuardrailTripwire",
    "RunConfig",
    "RunEngine",
    "RunError",
    "RunEvent",
    "RunEventType",
    "RunResult",
    "RunState",
    "Settings",
    "ToolCall",
    "ToolResponse",
    "ToolResult",
    "ToolSchema",
    "compose_handlers",
    "function_tool",
    "get_settings",
    "handoff_tool",
    "run",
]
