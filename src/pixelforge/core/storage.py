"""
Local key/value storage for pixelforge.

A small string-to-string store persisted as one JSON object file, used to
keep the generation history between sessions.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Protocol

from pixelforge.logging_config import get_logger
from pixelforge.utils.exceptions import PersistenceParseError

logger = get_logger(__name__)


class KeyValueStorage(Protocol):
    """String key/value store with get/set/remove, modelled on browser localStorage."""

    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryStorage:
    """In-process storage; nothing survives the process."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class JsonFileStorage:
    """
    Storage backed by a JSON object file.

    The file is created on first write. Every write replaces the whole file
    atomically (temp file in the same directory, then os.replace).
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path).expanduser()

    def _read_all(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except (OSError, ValueError) as e:
            raise PersistenceParseError(f"Storage file {self.path} is unreadable: {e}") from e
        if not isinstance(data, dict):
            raise PersistenceParseError(f"Storage file {self.path} does not hold a JSON object")
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _write_all(self, items: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(prefix=".storage_", suffix=".json", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(items, f)
            os.replace(tmp, self.path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise
        logger.debug("Wrote storage file path=%s keys=%d", self.path, len(items))

    def _read_for_update(self) -> dict[str, str]:
        # A corrupt file is replaced rather than blocking every later write
        try:
            return self._read_all()
        except PersistenceParseError as e:
            logger.warning("Discarding unreadable storage file: %s", e)
            return {}

    def get_item(self, key: str) -> str | None:
        """Return the stored string, or None. Raises PersistenceParseError if the file is corrupt."""
        return self._read_all().get(key)

    def set_item(self, key: str, value: str) -> None:
        items = self._read_for_update()
        items[key] = value
        self._write_all(items)

    def remove_item(self, key: str) -> None:
        items = self._read_for_update()
        if key in items:
            del items[key]
            self._write_all(items)
