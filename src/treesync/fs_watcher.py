"""Recursive change subscriptions on root folders, backed by watchdog."""

import logging
import threading
import time
from pathlib import Path
from typing import Dict, List

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .channel import EventChannel
from .exceptions import ChannelClosedError, WatchSubscriptionError
from .models import FSEvent

logger = logging.getLogger(__name__)

# Access notifications (opened/closed) carry no structural change.
FORWARDED_EVENT_TYPES = frozenset({"created", "deleted", "modified", "moved"})

OBSERVER_JOIN_TIMEOUT = 5.0


class FSEventHandler(FileSystemEventHandler):
    """Forwards watchdog notifications for one root into an event channel."""

    def __init__(self, channel: EventChannel, root: Path):
        super().__init__()
        self.channel = channel
        self.root = root

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.event_type not in FORWARDED_EVENT_TYPES:
            return

        dest_path = getattr(event, "dest_path", "") or None
        fs_event = FSEvent(
            event_type=event.event_type,
            src_path=Path(event.src_path),
            dest_path=Path(dest_path) if dest_path else None,
            is_directory=event.is_directory,
            timestamp=time.time(),
        )
        try:
            self.channel.put(fs_event)
        except ChannelClosedError:
            logger.debug(f"Channel closed, dropping {event.event_type} event for {event.src_path}")


class FSWatcherPool:
    """
    One watchdog observer per subscribed root.

    Every observer writes into the same channel, so notifications from
    all roots reach the consumer as a single stream.
    """

    def __init__(self, channel: EventChannel):
        """
        Initialize the pool.

        Args:
            channel: Destination of events from every subscribed root
        """
        self.channel = channel
        self._observers: Dict[Path, Observer] = {}
        self._lock = threading.Lock()

    def subscribe(self, root: Path) -> bool:
        """
        Start a recursive subscription on a root folder.

        Args:
            root: Existing directory to observe

        Returns:
            False if the root was already subscribed

        Raises:
            WatchSubscriptionError: If the root is missing or the OS refuses the watch
        """
        root = Path(root)

        with self._lock:
            if root in self._observers:
                return False
            if not root.is_dir():
                raise WatchSubscriptionError(f"Cannot watch {root}: not an existing directory", root)

            observer = Observer()
            try:
                observer.schedule(FSEventHandler(self.channel, root), str(root), recursive=True)
                observer.start()
            except OSError as e:
                raise WatchSubscriptionError(f"Failed to watch {root}: {e.strerror or e}", root) from e

            self._observers[root] = observer

        logger.debug(f"Subscribed to {root}")
        return True

    def unsubscribe(self, root: Path) -> bool:
        """
        End the subscription on a root folder.

        Returns:
            False if the root was not subscribed
        """
        with self._lock:
            observer = self._observers.pop(Path(root), None)
        if observer is None:
            return False

        observer.stop()
        observer.join(timeout=OBSERVER_JOIN_TIMEOUT)
        return True

    def close(self) -> int:
        """
        End every subscription.

        Returns:
            Number of subscriptions ended
        """
        with self._lock:
            observers = list(self._observers.values())
            self._observers.clear()

        for observer in observers:
            observer.stop()
        for observer in observers:
            observer.join(timeout=OBSERVER_JOIN_TIMEOUT)
        return len(observers)

    @property
    def roots(self) -> List[Path]:
        with self._lock:
            return list(self._observers)

    def __contains__(self, root: Path) -> bool:
        with self._lock:
            return Path(root) in self._observers

    def __len__(self) -> int:
        with self._lock:
            return len(self._observers)
