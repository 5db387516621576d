"""JSONL memory provider with snapshot compaction."""

from __future__ import annotations

import json
import threading
import time
from collections.abc import Mapping, Sequence
from datetime import UTC, datetime
from pathlib import Path
from typing import Any
from urllib.parse import quote, unquote

from loguru import logger
from pydantic import ValidationError

from ..types import Message
from ..utils import to_json
from .types import ConversationMemory, Err, MemoryResult, Ok

CONVERSATION_FILE_SUFFIX = ".jsonl"
SNAPSHOT_KIND = "snapshot"
PROVIDER_NAME = "file"
DEFAULT_MAX_SNAPSHOTS = 20


class ConversationFile:
    """One conversation file; the newest valid snapshot line wins.

    Once the file holds ``max_snapshots`` snapshots the next append rewrites
    it to that single new snapshot, keeping the id sequence.
    """

    def __init__(self, path: Path, *, max_snapshots: int = DEFAULT_MAX_SNAPSHOTS) -> None:
        self.path = path
        self.max_snapshots = max(1, max_snapshots)
        self._lock = threading.Lock()
        self._latest: dict[str, Any] | None = None
        self._last_id = 0
        self._read_offset = 0
        self._snapshot_count = 0

    def _reset(self) -> None:
        self._latest = None
        self._last_id = 0
        self._read_offset = 0
        self._snapshot_count = 0

    def latest(self) -> dict[str, Any] | None:
        with self._lock:
            return self._read_locked()

    def _read_locked(self) -> dict[str, Any] | None:
        if not self.path.exists():
            self._reset()
            return None

        file_size = self.path.stat().st_size
        if file_size < self._read_offset:
            # The file was truncated or replaced, so the cached snapshot is stale.
            self._reset()

        with self.path.open("r", encoding="utf-8") as handle:
            handle.seek(self._read_offset)
            for raw_line in handle:
                line = raw_line.strip()
                if not line:
                    continue
                try:
                    payload = json.loads(line)
                except json.JSONDecodeError:
                    continue
                if not self._is_snapshot(payload):
                    continue
                self._latest = payload
                self._last_id = max(self._last_id, payload["id"])
                self._snapshot_count += 1
            self._read_offset = handle.tell()

        return self._latest

    @staticmethod
    def _is_snapshot(payload: object) -> bool:
        if not isinstance(payload, dict):
            return False
        if payload.get("kind") != SNAPSHOT_KIND:
            return False
        if not isinstance(payload.get("id"), int):
            return False
        return isinstance(payload.get("messages"), list)

    def append(self, messages: Sequence[Message], metadata: Mapping[str, Any]) -> None:
        with self._lock:
            # Keep cache and offset in sync before allocating the next id.
            self._read_locked()
            payload = {
                "id": self._last_id + 1,
                "kind": SNAPSHOT_KIND,
                "messages": [message.model_dump(mode="json") for message in messages],
                "metadata": dict(metadata),
                "timestamp": time.time(),
            }
            line = to_json(payload) + "\n"
            self.path.parent.mkdir(parents=True, exist_ok=True)
            if self._snapshot_count >= self.max_snapshots:
                self._compact_locked(line)
            else:
                with self.path.open("a", encoding="utf-8") as handle:
                    handle.write(line)
                    self._read_offset = handle.tell()
                self._snapshot_count += 1
            self._latest = payload
            self._last_id = payload["id"]

    def _compact_locked(self, line: str) -> None:
        staging = self.path.with_suffix(f"{CONVERSATION_FILE_SUFFIX}.tmp")
        with staging.open("w", encoding="utf-8") as handle:
            handle.write(line)
            self._read_offset = handle.tell()
        staging.replace(self.path)
        logger.debug("memory.file.compacted path={} dropped={}", self.path, self._snapshot_count)
        self._snapshot_count = 1

    def archive(self) -> Path | None:
        with self._lock:
            if not self.path.exists():
                return None
            stamp = datetime.now(UTC).strftime("%Y%m%dT%H%M%SZ")
            archive_file = self.path.with_suffix(f"{CONVERSATION_FILE_SUFFIX}.{stamp}.bak")
            self.path.replace(archive_file)
            self._reset()
            return archive_file

    def delete(self) -> bool:
        with self._lock:
            existed = self.path.exists()
            self.path.unlink(missing_ok=True)
            self._reset()
            return existed


class FileMemoryProvider:
    """Memory provider persisting each conversation to its own JSONL file.

    Every store appends a full snapshot and the last complete line is the
    current history. A file is compacted to one snapshot once it holds
    ``max_snapshots`` of them.

    File I/O is synchronous, so every async method blocks the event loop
    while it reads or writes its file.
    """

    def __init__(self, home: Path, *, max_snapshots: int = DEFAULT_MAX_SNAPSHOTS) -> None:
        self._root = (home / "conversations").resolve()
        self._max_snapshots = max_snapshots
        self._root.mkdir(parents=True, exist_ok=True)
        self._files: dict[str, ConversationFile] = {}
        self._lock = threading.Lock()

    @property
    def root(self) -> Path:
        return self._root

    def list_conversations(self) -> list[str]:
        names = [
            unquote(path.name.removesuffix(CONVERSATION_FILE_SUFFIX))
            for path in self._root.glob(f"*{CONVERSATION_FILE_SUFFIX}")
        ]
        return sorted(names)

    async def get_conversation(self, conversation_id: str) -> MemoryResult[ConversationMemory | None]:
        try:
            payload = self._file(conversation_id).latest()
        except OSError as exc:
            return Err.of(f"Failed to read conversation {conversation_id}: {exc}", provider=PROVIDER_NAME)
        if payload is None:
            return Ok(None)
        try:
            messages = tuple(Message.model_validate(item) for item in payload["messages"])
        except ValidationError as exc:
            logger.warning("memory.file.corrupt conversation_id={} errors={}", conversation_id, exc.error_count())
            return Err.of(f"Stored conversation {conversation_id} is corrupt", provider=PROVIDER_NAME)
        metadata = payload.get("metadata")
        return Ok(
            ConversationMemory(
                conversation_id=conversation_id,
                messages=messages,
                metadata=dict(metadata) if isinstance(metadata, dict) else {},
            )
        )

    async def store_messages(
        self,
        conversation_id: str,
        messages: Sequence[Message],
        metadata: Mapping[str, Any] | None = None,
    ) -> MemoryResult[None]:
        try:
            self._file(conversation_id).append(messages, metadata or {})
        except OSError as exc:
            return Err.of(f"Failed to store conversation {conversation_id}: {exc}", provider=PROVIDER_NAME)
        return Ok(None)

    async def delete_conversation(self, conversation_id: str) -> MemoryResult[bool]:
        try:
            with self._lock:
                conversation_file = self._files.pop(conversation_id, None)
            if conversation_file is None:
                conversation_file = self._new_file(conversation_id)
            return Ok(conversation_file.delete())
        except OSError as exc:
            return Err.of(f"Failed to delete conversation {conversation_id}: {exc}", provider=PROVIDER_NAME)

    def archive(self, conversation_id: str) -> Path | None:
        with self._lock:
            conversation_file = self._files.pop(conversation_id, None)
        if conversation_file is None:
            conversation_file = self._new_file(conversation_id)
        return conversation_file.archive()

    async def health_check(self) -> MemoryResult[dict[str, Any]]:
        return Ok({"healthy": self._root.is_dir(), "provider": PROVIDER_NAME, "root": str(self._root)})

    async def close(self) -> MemoryResult[None]:
        with self._lock:
            self._files.clear()
        return Ok(None)

    def _file(self, conversation_id: str) -> ConversationFile:
        with self._lock:
            if conversation_id not in self._files:
                self._files[conversation_id] = self._new_file(conversation_id)
            return self._files[conversation_id]

    def _path_for(self, conversation_id: str) -> Path:
        return self._root / f"{quote(conversation_id, safe='')}{CONVERSATION_FILE_SUFFIX}"

    def _new_file(self, conversation_id: str) -> ConversationFile:
        return ConversationFile(self._path_for(conversation_id), max_snapshots=self._max_snapshots)
