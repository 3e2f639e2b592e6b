from pathlib import Path
from typing import Dict, Optional, Protocol

from ..domain.errors import StorageError


class KeyValueStore(Protocol):
    """durable string store addressed by key."""

    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class FileKeyValueStore:
    """one file per key inside a data directory."""

    def __init__(self, data_dir: Path):
        self.data_dir = data_dir

    def _path(self, key: str) -> Path:
        return self.data_dir / key

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None

        try:
            with open(path, "r", encoding="utf-8") as f:
                return f.read()
        except (IOError, PermissionError, OSError, UnicodeDecodeError):
            # unreadable, treat as missing
            return None

    def set(self, key: str, value: str) -> None:
        # write then rename so a crash never leaves half a record
        tmp_path = self._path(key).with_suffix(".tmp")
        try:
            # ensure data directory exists
            self.data_dir.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                f.write(value)
            tmp_path.replace(self._path(key))
        except (IOError, PermissionError, OSError) as e:
            raise StorageError(key, str(e)) from e

    def delete(self, key: str) -> None:
        path = self._path(key)
        try:
            path.unlink(missing_ok=True)
        except (PermissionError, OSError) as e:
            raise StorageError(key, str(e)) from e


class MemoryKeyValueStore:
    """in-process store, nothing survives the process."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.values: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value

    def delete(self, key: str) -> None:
        self.values.pop(key, None)
