"""Configuration management for baton."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

if TYPE_CHECKING:
    from .events import EventHandler
    from .guardrails import Guardrail
    from .memory.types import MemoryProvider
    from .model import ModelProvider
    from .types import Agent, AgentLookup

DEFAULT_MODEL = "gpt-4o"
DEFAULT_MAX_TURNS = 50


class Settings(BaseSettings):
    """Environment-driven defaults."""

    # Engine Configuration
    default_model: str = Field(default=DEFAULT_MODEL, description="Fallback model when no override or agent model")
    max_turns: int = Field(default=DEFAULT_MAX_TURNS, description="Maximum number of turns per run")
    legacy_handoff_detection: bool = Field(default=True, description="Honour the handoff_to key in tool output")

    # Memory Configuration
    memory_type: str = Field(default="memory", description="Memory provider type (memory, file)")
    memory_home: Optional[Path] = Field(None, description="Root directory of the file memory provider")
    memory_auto_store: bool = Field(default=False, description="Load and store conversation history automatically")
    memory_max_conversations: int = Field(default=1000, description="In-memory provider conversation limit")
    memory_max_messages: int = Field(default=1000, description="Messages kept per stored conversation")
    memory_max_history: Optional[int] = Field(None, description="Messages loaded from memory before a run")
    memory_compression_threshold: Optional[int] = Field(None, description="Message count that triggers compression")
    memory_max_snapshots: int = Field(default=20, description="Snapshots a conversation file keeps before compaction")

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Log level")
    log_profile: Literal["default", "rich"] = Field(default="default", description="Log profile (default, rich)")

    model_config = SettingsConfigDict(
        env_prefix="BATON_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def resolve_memory_home(self) -> Path:
        if self.memory_home is not None:
            return self.memory_home.expanduser()
        return Path.home() / ".baton"


def get_settings() -> Settings:
    """Get application settings.

    Returns:
        Settings instance
    """
    return Settings()


@dataclass(frozen=True)
class MemoryConfig:
    provider: MemoryProvider | None = None
    auto_store: bool = False
    max_messages: int | None = None
    compression_threshold: int | None = None

    @classmethod
    def from_settings(cls, settings: Settings, provider: MemoryProvider | None) -> MemoryConfig:
        return cls(
            provider=provider,
            auto_store=settings.memory_auto_store,
            max_messages=settings.memory_max_history,
            compression_threshold=settings.memory_compression_threshold,
        )


@dataclass(frozen=True)
class RunConfig[Ctx]:
    """Collaborators and limits for one run."""

    agent_registry: AgentLookup
    model_provider: ModelProvider
    max_turns: int = DEFAULT_MAX_TURNS
    initial_input_guardrails: Sequence[Guardrail] = ()
    final_output_guardrails: Sequence[Guardrail] = ()
    model_override: str | None = None
    memory: MemoryConfig = field(default_factory=MemoryConfig)
    conversation_id: str | None = None
    on_event: EventHandler | None = None
    legacy_handoff_detection: bool = True
    default_model: str = DEFAULT_MODEL

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        agent_registry: AgentLookup,
        model_provider: ModelProvider,
        **overrides: Any,
    ) -> RunConfig[Ctx]:
        values: dict[str, Any] = {
            "max_turns": settings.max_turns,
            "legacy_handoff_detection": settings.legacy_handoff_detection,
            "default_model": settings.default_model,
        }
        values.update(overrides)
        return cls(agent_registry=agent_registry, model_provider=model_provider, **values)

    def resolve_model(self, agent: Agent[Any, Any]) -> str:
        return self.model_override or agent.model_config.name or self.default_model
