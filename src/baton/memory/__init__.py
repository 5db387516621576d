"""Conversation memory: provider contract, bridge and bundled providers."""

from .bridge import COMPRESSION_HEAD_RATIO, MemoryBridge, build_metadata, compress_messages
from .factory import SUPPORTED_MEMORY_TYPES, create_memory_provider
from .file import FileMemoryProvider
from .in_memory import InMemoryProvider
from .types import ConversationMemory, Err, MemoryProvider, MemoryResult, Ok

__all__ = [
    "COMPRESSION_HEAD_RATIO",
    "SUPPORTED_MEMORY_TYPES",
    "ConversationMemory",
    "Err",
    "FileMemoryProvider",
    "InMemoryProvider",
    "MemoryBridge",
    "MemoryProvider",
    "MemoryResult",
    "Ok",
    "build_metadata",
    "compress_messages",
    "create_memory_provider",
]
