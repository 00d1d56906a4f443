"""
Durable media behind the KeyValueStore.

Each backend stores opaque text values by key and signals exhaustion with
:class:`StorageFullError` so the store above can remediate and retry.
"""
import errno
import os
from typing import Dict, List, Optional, Protocol

from .exceptions import StorageError, StorageFullError

# EDQUOT is missing on some platforms
_FULL_ERRNOS = {errno.ENOSPC, getattr(errno, "EDQUOT", errno.ENOSPC)}


class StorageBackend(Protocol):
    """Abstract text key/value medium - supports DIP."""

    def get_item(self, key: str) -> Optional[str]:
        """Return the stored text or None."""
        ...

    def set_item(self, key: str, value: str) -> None:
        """Store text, raising StorageFullError when out of room."""
        ...

    def remove_item(self, key: str) -> None:
        """Delete a key if present."""
        ...

    def keys(self) -> List[str]:
        """List stored keys."""
        ...

    def clear(self) -> None:
        """Delete everything."""
        ...


def _fits(sizes: Dict[str, int], key: str, value: str, quota: Optional[int]) -> bool:
    if quota is None:
        return True
    used = sum(size for k, size in sizes.items() if k != key)
    return used + len(key) + len(value) <= quota


class MemoryStorageBackend:
    """In-process backend with an optional byte quota."""

    def __init__(self, quota_bytes: Optional[int] = None):
        self.quota_bytes = quota_bytes
        self._items: Dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        sizes = {k: len(k) + len(v) for k, v in self._items.items()}
        if not _fits(sizes, key, value, self.quota_bytes):
            raise StorageFullError(f"Quota of {self.quota_bytes} bytes exceeded writing {key}")
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> List[str]:
        return list(self._items.keys())

    def clear(self) -> None:
        self._items.clear()


class FileStorageBackend:
    """
    Backend keeping one UTF-8 file per key inside a data directory.

    Writes go to a temporary file first and are moved into place, so a crash
    mid-write never leaves a truncated value behind.
    """

    SUFFIX = ".json"

    def __init__(self, directory: str, quota_bytes: Optional[int] = None):
        self.directory = directory
        self.quota_bytes = quota_bytes
        if not os.path.exists(directory):
            os.makedirs(directory)

    def _path(self, key: str) -> str:
        return os.path.join(self.directory, f"{key}{self.SUFFIX}")

    def get_item(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not os.path.exists(path):
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                return f.read()
        except OSError as e:
            raise StorageError(f"Failed to read {key}: {e}") from e

    def set_item(self, key: str, value: str) -> None:
        if not _fits(self._sizes(), key, value, self.quota_bytes):
            raise StorageFullError(f"Quota of {self.quota_bytes} bytes exceeded writing {key}")

        path = self._path(key)
        tmp_path = f"{path}.tmp"
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp_path, path)
        except OSError as e:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            if e.errno in _FULL_ERRNOS:
                raise StorageFullError(f"No space left writing {key}") from e
            raise StorageError(f"Failed to write {key}: {e}") from e

    def remove_item(self, key: str) -> None:
        path = self._path(key)
        if os.path.exists(path):
            os.remove(path)

    def keys(self) -> List[str]:
        if not os.path.exists(self.directory):
            return []
        return [
            filename[: -len(self.SUFFIX)]
            for filename in os.listdir(self.directory)
            if filename.endswith(self.SUFFIX)
        ]

    def clear(self) -> None:
        for key in self.keys():
            self.remove_item(key)

    def _sizes(self) -> Dict[str, int]:
        sizes = {}
        for key in self.keys():
            try:
                sizes[key] = len(key) + os.path.getsize(self._path(key))
            except OSError:
                continue
        return sizes
