"""Validators for tool arguments and agent outputs.

Anything exposing ``safe_parse(value) -> ParseResult`` can act as a tool
parameter schema or an agent output codec. Pydantic models and plain types
are adapted through :class:`PydanticCodec`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from pydantic import TypeAdapter, ValidationError


@dataclass(frozen=True)
class ParseResult[T]:
    """Outcome of a safe parse: either data or a list of issues."""

    success: bool
    data: T | None = None
    issues: tuple[dict[str, Any], ...] = ()
    message: str = ""

    @classmethod
    def ok(cls, data: T) -> ParseResult[T]:
        return cls(success=True, data=data)

    @classmethod
    def failure(cls, issues: list[dict[str, Any]] | tuple[dict[str, Any], ...], message: str) -> ParseResult[T]:
        return cls(success=False, issues=tuple(issues), message=message)


@runtime_checkable
class Validator(Protocol):
    def safe_parse(self, value: Any) -> ParseResult[Any]: ...


class PydanticCodec[T]:
    """Adapt a pydantic model (or any type pydantic understands) to ``safe_parse``."""

    def __init__(self, target: type[T] | Any) -> None:
        self._target = target
        self._adapter: TypeAdapter[T] = TypeAdapter(target)

    @property
    def target(self) -> type[T] | Any:
        return self._target

    def safe_parse(self, value: Any) -> ParseResult[T]:
        try:
            data = self._adapter.validate_python(value)
        except ValidationError as exc:
            return ParseResult.failure(validation_issues(exc), str(exc))
        return ParseResult.ok(data)

    def json_schema(self) -> dict[str, Any]:
        return self._adapter.json_schema()

    def __repr__(self) -> str:
        name = getattr(self._target, "__name__", repr(self._target))
        return f"PydanticCodec({name})"


def validation_issues(exc: ValidationError) -> list[dict[str, Any]]:
    """Flatten pydantic errors into JSON-safe issue records."""
    return [
        {
            "path": list(error["loc"]),
            "message": error["msg"],
            "code": error["type"],
        }
        for error in exc.errors()
    ]


def as_validator(target: Any) -> Validator:
    if isinstance(target, Validator):
        return target
    return PydanticCodec(target)
