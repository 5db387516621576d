"""Structured tool results and their canonical string form."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from ..utils import to_json

# Wire contract v1: a tool result that parses to a JSON object carrying this key
# requests a handoff to the named agent.
HANDOFF_WIRE_KEY = "handoff_to"
HANDOFF_WIRE_VERSION = 1

ToolResultStatus = Literal["success", "error", "validation_error", "permission_denied", "not_found"]


class ToolErrorInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    details: Any = None


class ToolResult(BaseModel):
    """Structured tool output.

    ``handoff_to`` is the typed control signal for transferring the run to
    another agent; it travels alongside the textual result.
    """

    model_config = ConfigDict(frozen=True)

    status: ToolResultStatus = "success"
    data: Any = None
    error: ToolErrorInfo | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    handoff_to: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == "success"


class ToolResponse:
    """Constructors for common ``ToolResult`` shapes."""

    @staticmethod
    def success(data: Any = None, *, metadata: dict[str, Any] | None = None) -> ToolResult:
        return ToolResult(status="success", data=data, metadata=metadata or {})

    @staticmethod
    def error(code: str, message: str, details: Any = None) -> ToolResult:
        return ToolResult(status="error", error=ToolErrorInfo(code=code, message=message, details=details))

    @staticmethod
    def validation_error(message: str, details: Any = None) -> ToolResult:
        return ToolResult(
            status="validation_error",
            error=ToolErrorInfo(code="INVALID_INPUT", message=message, details=details),
        )

    @staticmethod
    def permission_denied(message: str, required_permissions: list[str] | None = None) -> ToolResult:
        return ToolResult(
            status="permission_denied",
            error=ToolErrorInfo(
                code="PERMISSION_DENIED",
                message=message,
                details={"required_permissions": required_permissions or []},
            ),
        )

    @staticmethod
    def not_found(resource: str, identifier: str | None = None) -> ToolResult:
        message = f"{resource} not found" if identifier is None else f"{resource} not found: {identifier}"
        return ToolResult(
            status="not_found",
            error=ToolErrorInfo(code="NOT_FOUND", message=message, details={"resource": resource, "id": identifier}),
        )

    @staticmethod
    def handoff(agent_name: str, reason: str | None = None) -> ToolResult:
        data: dict[str, Any] = {HANDOFF_WIRE_KEY: agent_name}
        if reason:
            data["reason"] = reason
        return ToolResult(status="success", data=data, handoff_to=agent_name)


def tool_result_to_string(result: ToolResult) -> str:
    """Serialize a ``ToolResult`` into the text placed in the tool message."""
    if result.status == "success":
        if isinstance(result.data, str):
            return result.data
        return to_json(_plain(result.data))

    payload: dict[str, Any] = {"error": result.status}
    if result.error is not None:
        payload["code"] = result.error.code
        payload["message"] = result.error.message
        if result.error.details is not None:
            payload["details"] = _plain(result.error.details)
    if result.metadata:
        payload["metadata"] = result.metadata
    return to_json(payload)


def _plain(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    return value
