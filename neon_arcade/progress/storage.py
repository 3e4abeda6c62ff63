"""
Key-Value Storage - The persistence collaborator.

The engine never decides where progress lives. It talks to a
KeyValueStore holding JSON-compatible values:
- InMemoryKeyValueStore: tests and throwaway sessions
- JsonFileKeyValueStore: a single JSON file on local disk

Design decisions:
- Simple file-based storage, no database
- Whole-file rewrite through a temp file + rename, so a crash mid-write
  leaves the previous file intact
- A missing file is an empty store
"""

from __future__ import annotations
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Protocol

from ..errors import StorageError

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Durable mapping of string keys to JSON-compatible values."""

    def get(self, key: str) -> Any | None: ...

    def set(self, key: str, value: Any) -> None: ...

    def delete(self, key: str) -> None: ...


class InMemoryKeyValueStore:
    """Dict-backed store. Values are copied through JSON like the file store."""

    def __init__(self, initial: dict[str, Any] | None = None):
        self._data: dict[str, str] = {}
        for key, value in (initial or {}).items():
            self.set(key, value)

    def get(self, key: str) -> Any | None:
        raw = self._data.get(key)
        return None if raw is None else json.loads(raw)

    def set(self, key: str, value: Any):
        self._data[key] = json.dumps(value)

    def delete(self, key: str):
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)


class JsonFileKeyValueStore:
    """
    Store backed by one JSON object on disk.

    Usage:
        store = JsonFileKeyValueStore("~/.neon_arcade/progress.json")
        store.set("progress", {...})
    """

    def __init__(self, path: str | Path):
        self.path = Path(path).expanduser()

    def get(self, key: str) -> Any | None:
        return self._read().get(key)

    def set(self, key: str, value: Any):
        data = self._read()
        data[key] = value
        self._write(data)

    def delete(self, key: str):
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)

    def keys(self) -> list[str]:
        return list(self._read())

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError:
            logger.warning("progress file %s is not valid JSON, treating as empty", self.path)
            return {}
        except OSError as e:
            raise StorageError(f"cannot read {self.path}: {e}") from e

        if not isinstance(data, dict):
            logger.warning("progress file %s does not hold an object, treating as empty", self.path)
            return {}
        return data

    def _write(self, data: dict[str, Any]):
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=self.path.parent, prefix=self.path.name, suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, indent=2, sort_keys=True)
                os.replace(tmp_path, self.path)
            except BaseException:
                Path(tmp_path).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageError(f"cannot write {self.path}: {e}") from e
