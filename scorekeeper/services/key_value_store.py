"""
Key/value persistence for the Reload-Proof Scorekeeper application.

This module is the only place that touches the durable medium. Values are
stored as JSON text; reads never raise and writes degrade gracefully when
the medium is full.
"""
import json
import logging
from dataclasses import dataclass
from typing import Any, Optional

from .exceptions import StorageError, StorageFullError
from .storage_backends import StorageBackend
from ..models import RosterCache
from ..utils import STORAGE_KEYS, now_ms
from ..utils.constants import SESSION_STALE_MS

logger = logging.getLogger(__name__)


@dataclass
class StorageUsage:
    """Summary of what the store currently holds."""
    total_bytes: int
    item_count: int
    last_save_timestamp: Optional[int]

    def to_json(self) -> dict:
        return {
            "total_bytes": self.total_bytes,
            "item_count": self.item_count,
            "last_save_timestamp": self.last_save_timestamp,
        }


class KeyValueStore:
    """
    Store for JSON values on top of a :class:`StorageBackend`.

    A write that hits a full medium triggers one remediation pass that drops
    an expired roster cache and a stale session snapshot, followed by exactly
    one retry.
    """

    def __init__(self, backend: StorageBackend):
        self.backend = backend

    def put(self, key: str, value: Any) -> bool:
        """
        Serialize and store a value.

        Args:
            key: Storage key
            value: Any JSON-serializable value

        Returns:
            True if the value was written, False if it could not be stored
        """
        try:
            serialized = json.dumps(value)
        except (TypeError, ValueError) as e:
            logger.error("Cannot serialize value for %s: %s", key, e)
            return False

        try:
            self.backend.set_item(key, serialized)
        except StorageFullError as e:
            logger.warning("Storage full saving %s (%s); cleaning up and retrying", key, e)
            self.remediate()
            try:
                self.backend.set_item(key, serialized)
            except StorageError as retry_error:
                logger.error("Retry failed for %s: %s", key, retry_error)
                return False
        except StorageError as e:
            logger.error("Failed to save %s: %s", key, e)
            return False

        if key != STORAGE_KEYS["LAST_SAVE"]:
            self._record_last_save()
        return True

    def get(self, key: str, fallback: Any = None) -> Any:
        """
        Load and deserialize a value.

        Returns:
            The stored value, or ``fallback`` if the key is missing, holds
            null, or cannot be read or decoded
        """
        try:
            raw = self.backend.get_item(key)
        except StorageError as e:
            logger.warning("Failed to load %s: %s", key, e)
            return fallback

        if raw is None:
            return fallback
        try:
            value = json.loads(raw)
        except ValueError as e:
            logger.warning("Discarding corrupt value for %s: %s", key, e)
            return fallback
        return fallback if value is None else value

    def remove(self, key: str) -> None:
        try:
            self.backend.remove_item(key)
        except (StorageError, OSError) as e:
            logger.warning("Failed to remove %s: %s", key, e)

    def usage_info(self) -> StorageUsage:
        """Get storage usage info."""
        total = 0
        count = 0
        for key in self.backend.keys():
            try:
                raw = self.backend.get_item(key)
            except StorageError:
                continue
            if raw is None:
                continue
            total += len(key) + len(raw)
            count += 1

        last_save = self.get(STORAGE_KEYS["LAST_SAVE"])
        return StorageUsage(
            total_bytes=total,
            item_count=count,
            last_save_timestamp=last_save if isinstance(last_save, int) else None,
        )

    def clear_all(self) -> None:
        """Remove every application key."""
        for key in STORAGE_KEYS.values():
            self.remove(key)

    def remediate(self) -> None:
        """Drop an expired roster cache and a session snapshot older than 7 days."""
        now = now_ms()

        teams = self.get(STORAGE_KEYS["TEAMS_DATA"])
        if teams is not None:
            cache = RosterCache.from_json(teams)
            if cache is None or cache.is_expired(now):
                logger.info("Removing expired roster cache")
                self.remove(STORAGE_KEYS["TEAMS_DATA"])

        state = self.get(STORAGE_KEYS["GAME_STATE"])
        if isinstance(state, dict):
            saved_at = state.get("saved_at")
            if isinstance(saved_at, (int, float)) and now - saved_at > SESSION_STALE_MS:
                logger.info("Removing stale session snapshot")
                self.remove(STORAGE_KEYS["GAME_STATE"])

    def _record_last_save(self) -> None:
        try:
            self.backend.set_item(STORAGE_KEYS["LAST_SAVE"], json.dumps(now_ms()))
        except StorageError as e:
            logger.warning("Could not record last save time: %s", e)
