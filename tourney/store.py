"""Key-value snapshot stores.

A store holds opaque bytes under string keys.  The session layer uses one
key per tournament mode, so only one tournament of each mode is resumable
at a time.  FileStore keeps each key in its own file inside a directory.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from pathlib import Path

from tourney.errors import PersistenceError

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """Async load / save / remove contract used by tournament sessions."""

    @abstractmethod
    async def load(self, key: str) -> bytes | None:
        """Return the stored bytes, or None when the key is absent."""
        ...

    @abstractmethod
    async def save(self, key: str, data: bytes) -> None:
        ...

    @abstractmethod
    async def remove(self, key: str) -> None:
        """Delete the key.  Removing an absent key is not an error."""
        ...


class MemoryStore(KeyValueStore):
    def __init__(self) -> None:
        self._data: dict[str, bytes] = {}

    async def load(self, key: str) -> bytes | None:
        return self._data.get(key)

    async def save(self, key: str, data: bytes) -> None:
        self._data[key] = bytes(data)

    async def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._data


class FileStore(KeyValueStore):
    """One `<key>.json` file per key; writes go through a temp file + replace."""

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        safe = "".join(c if c.isalnum() or c in "_-" else "_" for c in key)
        if not safe:
            raise PersistenceError(key, "Store keys must contain at least one usable character.")
        return self.directory / f"{safe}.json"

    async def load(self, key: str) -> bytes | None:
        path = self.path_for(key)
        try:
            return await asyncio.to_thread(_read_bytes, path)
        except OSError as exc:
            raise PersistenceError(key, f"Could not read {path}: {exc}", exc) from exc

    async def save(self, key: str, data: bytes) -> None:
        path = self.path_for(key)
        try:
            await asyncio.to_thread(_write_bytes, path, data)
        except OSError as exc:
            raise PersistenceError(key, f"Could not write {path}: {exc}", exc) from exc
        logger.debug("Saved %d bytes to %s", len(data), path)

    async def remove(self, key: str) -> None:
        path = self.path_for(key)
        try:
            await asyncio.to_thread(path.unlink, missing_ok=True)
        except OSError as exc:
            raise PersistenceError(key, f"Could not remove {path}: {exc}", exc) from exc


def _read_bytes(path: Path) -> bytes | None:
    if not path.exists():
        return None
    return path.read_bytes()


def _write_bytes(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_bytes(data)
    tmp.replace(path)
