"""Bookkeeping of directories the watch engine created itself."""

import logging
import threading
from pathlib import Path
from typing import Set, Union

from .paths import normalize_case

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 1000


class SuppressionCache:
    """
    Bounded, thread-safe set of absolute paths about to be (or just) created.

    A filesystem event whose path is in the cache was caused by our own
    mirroring and must not be mirrored back. When the cache is full it is
    cleared entirely; a lost entry only costs one redundant, idempotent
    creation.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        """
        Initialize the cache.

        Args:
            capacity: Number of entries kept before the cache is cleared
        """
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")
        self.capacity = capacity
        self._entries: Set[str] = set()
        self._lock = threading.Lock()
        self.clear_count = 0

    @staticmethod
    def _key(path: Union[str, Path]) -> str:
        return normalize_case(Path(path))

    def insert(self, path: Union[str, Path]) -> None:
        """
        Register a path before creating it.

        Args:
            path: Absolute path of the directory about to be created
        """
        key = self._key(path)
        with self._lock:
            if key not in self._entries and len(self._entries) >= self.capacity:
                logger.debug(f"Clearing suppression cache (capacity {self.capacity} reached)")
                self._entries.clear()
                self.clear_count += 1
            self._entries.add(key)

    def consume(self, path: Union[str, Path]) -> bool:
        """
        Check for a path and remove it if present.

        Args:
            path: Absolute path from a filesystem event

        Returns:
            True if the event was self-caused and should be skipped
        """
        key = self._key(path)
        with self._lock:
            if key in self._entries:
                self._entries.discard(key)
                return True
            return False

    def discard(self, path: Union[str, Path]) -> None:
        """Remove a path without reporting whether it was present."""
        with self._lock:
            self._entries.discard(self._key(path))

    def clear(self) -> int:
        """
        Remove all entries.

        Returns:
            Number of entries removed
        """
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
            return count

    def __contains__(self, path: Union[str, Path]) -> bool:
        with self._lock:
            return self._key(path) in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
