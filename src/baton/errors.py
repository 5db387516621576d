"""Library-level exception types for baton.

Run-fatal conditions are reported as outcome values on ``RunResult`` and are
never raised from ``run()``. The exceptions below cover misuse and
collaborator failures outside of that contract.
"""

from __future__ import annotations


class BatonError(Exception):
    """Base exception for baton."""


class ConfigurationError(BatonError):
    """Base exception for configuration and wiring errors."""


class UnknownMemoryProviderError(ConfigurationError):
    """Raised when the configured memory provider type is not supported."""

    def __init__(self, memory_type: str) -> None:
        super().__init__(f"Unknown memory provider type: {memory_type}")
        self.memory_type = memory_type


class DuplicateAgentError(ConfigurationError):
    """Raised when an agent name is registered twice."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Agent '{name}' is already registered")
        self.name = name


class ModelResponseError(BatonError):
    """Raised when a model provider returns a response of unusable shape."""


class MemoryProviderError(BatonError):
    """Error carried by a failed memory provider result."""

    def __init__(self, message: str, *, provider: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.provider = provider
