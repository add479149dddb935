"""
Local Storage Implementations

JsonFileStorage keeps one JSON document per key in a data directory
(`hostel-members` and `calculation-history` by default).
InMemoryStorage holds everything in process and is used by tests and
when no storage is configured.
"""

import os
from pathlib import Path
from typing import Optional, Union

from pydantic import TypeAdapter, ValidationError

from messbill.models.audit import AuditEvent
from messbill.models.mess import HistoryEntry, Member
from messbill.services.storage.interface import (
    AuditStorageInterface,
    MessStorageInterface,
    StorageError,
)


_members_adapter = TypeAdapter(list[Member])
_history_adapter = TypeAdapter(list[HistoryEntry])


class JsonFileStorage(MessStorageInterface):
    """
    File-backed key-value store.

    Writes go to a temporary file first and are then renamed over the
    old one, so a crash mid-write never leaves half a document behind.
    """

    def __init__(
        self,
        data_dir: Union[str, Path],
        members_key: str = "hostel-members",
        history_key: str = "calculation-history",
    ):
        self._data_dir = Path(data_dir).expanduser()
        self._members_path = self._data_dir / f"{members_key}.json"
        self._history_path = self._data_dir / f"{history_key}.json"

    @classmethod
    def from_settings(cls, settings) -> "JsonFileStorage":
        return cls(
            data_dir=settings.data_path,
            members_key=settings.members_key,
            history_key=settings.history_key,
        )

    @property
    def members_path(self) -> Path:
        return self._members_path

    @property
    def history_path(self) -> Path:
        return self._history_path

    def _read(self, path: Path) -> Optional[bytes]:
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageError(f"Failed to read {path.name}: {e}")

    def _write(self, path: Path, payload: bytes) -> None:
        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
            tmp_path = path.with_suffix(path.suffix + ".tmp")
            tmp_path.write_bytes(payload)
            os.replace(tmp_path, path)
        except OSError as e:
            raise StorageError(f"Failed to write {path.name}: {e}")

    async def load_members(self) -> list[Member]:
        raw = self._read(self._members_path)
        if raw is None:
            return []
        try:
            return _members_adapter.validate_json(raw)
        except ValidationError as e:
            raise StorageError(f"Saved member list is corrupt: {e}")

    async def save_members(self, members: list[Member]) -> bool:
        payload = _members_adapter.dump_json(members, by_alias=True, indent=2)
        self._write(self._members_path, payload)
        return True

    async def load_history(self) -> list[HistoryEntry]:
        raw = self._read(self._history_path)
        if raw is None:
            return []
        try:
            return _history_adapter.validate_json(raw)
        except ValidationError as e:
            raise StorageError(f"Saved history is corrupt: {e}")

    async def save_history(self, entries: list[HistoryEntry]) -> bool:
        payload = _history_adapter.dump_json(entries, by_alias=True, indent=2)
        self._write(self._history_path, payload)
        return True


class InMemoryStorage(MessStorageInterface, AuditStorageInterface):
    """Process-local storage. Nothing survives a restart."""

    def __init__(self):
        self._members: list[Member] = []
        self._history: list[HistoryEntry] = []
        self._events: list[AuditEvent] = []

    async def load_members(self) -> list[Member]:
        return list(self._members)

    async def save_members(self, members: list[Member]) -> bool:
        self._members = list(members)
        return True

    async def load_history(self) -> list[HistoryEntry]:
        return list(self._history)

    async def save_history(self, entries: list[HistoryEntry]) -> bool:
        self._history = list(entries)
        return True

    async def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    async def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        events = sorted(self._events, key=lambda e: e.timestamp, reverse=True)
        return events[:limit]

