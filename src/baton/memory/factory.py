"""Build memory providers from settings."""

from __future__ import annotations

from loguru import logger

from ..config import Settings, get_settings
from ..errors import UnknownMemoryProviderError
from .file import FileMemoryProvider
from .in_memory import InMemoryProvider
from .types import MemoryProvider

SUPPORTED_MEMORY_TYPES = ("memory", "file")


def create_memory_provider(settings: Settings | None = None) -> MemoryProvider:
    """Create the memory provider named by ``settings.memory_type``."""
    settings = settings or get_settings()
    memory_type = settings.memory_type.strip().casefold()
    if memory_type == "memory":
        provider: MemoryProvider = InMemoryProvider(
            max_conversations=settings.memory_max_conversations,
            max_messages_per_conversation=settings.memory_max_messages,
        )
    elif memory_type == "file":
        provider = FileMemoryProvider(settings.resolve_memory_home(), max_snapshots=settings.memory_max_snapshots)
    else:
        raise UnknownMemoryProviderError(settings.memory_type)
    logger.info("memory.provider.created type={}", memory_type)
    return provider
