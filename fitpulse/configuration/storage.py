import json
import os
import tempfile
from pathlib import Path
from typing import Dict, Optional
from fitpulse.configuration.config import Config
from fitpulse.configuration.monitor import log_warning

class StorageBackend:
    """Key/value persistence with browser local-storage semantics.

    Values are always strings; callers serialize their own records.
    """

    def get_item(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set_item(self, key: str, value: str) -> None:
        raise NotImplementedError

    def remove_item(self, key: str) -> None:
        raise NotImplementedError

class MemoryStorage(StorageBackend):
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

class FileStorage(StorageBackend):
    """Local storage kept in a single JSON document on disk."""

    def __init__(self, path):
        self.path = Path(path)

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            log_warning("Local storage file is unreadable, starting empty", {
                "path": str(self.path),
                "error": str(e)
            })
            return {}
        if not isinstance(data, dict):
            log_warning("Local storage file is not a JSON object, starting empty", {"path": str(self.path)})
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _write(self, items: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=str(self.path.parent), prefix=".fitpulse-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as tmp:
                json.dump(items, tmp)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def get_item(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        items = self._read()
        items[key] = value
        self._write(items)

    def remove_item(self, key: str) -> None:
        items = self._read()
        if key in items:
            del items[key]
            self._write(items)

def get_storage(backend: Optional[str] = None) -> StorageBackend:
    """
    Build the storage backend selected by configuration
    Args:
        backend (str): "file" or "memory"; defaults to Config.STORAGE_BACKEND
    Returns:
        A StorageBackend instance
    """
    backend = backend or Config.STORAGE_BACKEND
    if backend == "memory":
        return MemoryStorage()
    if backend == "file":
        return FileStorage(Config.STORAGE_PATH)
    raise ValueError(f"Storage backend {backend} not found")
