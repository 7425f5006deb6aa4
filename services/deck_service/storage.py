"""Key/value backends for the persisted state snapshot.

Both backends expose the ``get_item`` / ``set_item`` / ``remove_item`` trio of
browser local storage. Callers treat storage as a best-effort cache; errors are
caught and logged one level up in the codec.
"""

import os
import re
import tempfile
from pathlib import Path
from typing import Optional, Protocol

from libs.common.config import Settings
from libs.common.logging import get_logger

logger = get_logger(__name__)

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


class KeyValueStorage(Protocol):
    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryStorage:
    """Process-local storage, used by tests and by ``STATE_BACKEND=memory``."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._items


class FileStorage:
    """One UTF-8 file per key under ``directory``.

    Writes go to a temp file in the same directory and are swapped in with
    ``os.replace`` so a crash never leaves a half-written snapshot.
    """

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{_UNSAFE_KEY_CHARS.sub('_', key)}.json"

    def get_item(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set_item(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.directory, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(value)
            os.replace(tmp_path, self._path(key))
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def remove_item(self, key: str) -> None:
        path = self._path(key)
        if path.exists():
            path.unlink()


def build_storage(settings: Settings) -> KeyValueStorage:
    """Pick the storage backend named by ``STATE_BACKEND``."""
    backend = settings.STATE_BACKEND.lower()
    if backend == "memory":
        return MemoryStorage()
    if backend == "file":
        logger.info("Persisting app state under %s", settings.STATE_DIR)
        return FileStorage(settings.STATE_DIR)
    raise ValueError(f"Unknown STATE_BACKEND: {settings.STATE_BACKEND}")
