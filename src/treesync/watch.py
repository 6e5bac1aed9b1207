"""Live mirroring of newly created directories between two roots."""

import logging
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional

from .channel import EventChannel
from .exceptions import ChannelClosedError, TreeSyncError
from .filter import ExclusionFilter
from .fs_watcher import FSWatcherPool
from .models import FSEvent
from .retry import CreateWithRetry, RetryPolicy
from .roots import RootPair
from .suppression import DEFAULT_CAPACITY, SuppressionCache

logger = logging.getLogger(__name__)

DEFAULT_POLL_TIMEOUT = 0.1


@dataclass
class WatchStats:
    """Counters kept by the watch loop."""
    mirrored: int = 0
    suppressed: int = 0
    excluded: int = 0
    ignored: int = 0
    errors: List[str] = field(default_factory=list)


class WatchEngine:
    """
    Mirrors directory creations between the two roots of a pair.

    Watchdog observers on both roots push events into one bounded channel;
    a single consumer loop handles them in delivery order. Only directory
    creations are acted on. Every mirrored target is registered in the
    suppression cache before it is created, so the event that creation
    raises on the opposite root is recognized and dropped instead of being
    mirrored back.
    """

    def __init__(
        self,
        roots: RootPair,
        exclusion_filter: Optional[ExclusionFilter] = None,
        dry_run: bool = False,
        policy: Optional[RetryPolicy] = None,
        poll_timeout: float = DEFAULT_POLL_TIMEOUT,
        suppression_capacity: int = DEFAULT_CAPACITY,
        queue_size: int = 10000,
        log: Optional[logging.Logger] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the engine.

        Args:
            roots: The mirrored root pair
            exclusion_filter: Filter applied to root-relative paths
            dry_run: Log intended mirrors without touching the filesystem
            policy: Retry policy for mirrored creations
            poll_timeout: Seconds between cancellation checks
            suppression_capacity: Echo cache size before it is cleared
            queue_size: Bound of the event channel
            log: Logger receiving the engine's log lines
            sleep: Delay function used between retries
        """
        self.roots = roots
        self.exclusion_filter = exclusion_filter or ExclusionFilter()
        self.dry_run = dry_run
        self.policy = policy or RetryPolicy()
        self.poll_timeout = poll_timeout
        self.log = log or logger
        self.cache = SuppressionCache(suppression_capacity)
        self.channel = EventChannel(queue_size)
        self.stats = WatchStats()
        self._sleep = sleep
        self._pool = FSWatcherPool(self.channel)

    def start(self) -> None:
        """
        Subscribe to change notifications on both roots.

        Raises:
            WatchSubscriptionError: If either root cannot be watched
        """
        try:
            for root in self.roots:
                self._pool.subscribe(root)
        except TreeSyncError:
            self._pool.close()
            raise

    def stop(self) -> None:
        """Stop all observers and close the channel."""
        self._pool.close()
        self.channel.close()

    def handle_event(self, event: FSEvent) -> Optional[Path]:
        """
        Handle one filesystem event.

        Args:
            event: Event from the channel

        Returns:
            The mirrored target path if a directory was created, else None
        """
        if not event.is_dir_created:
            self.stats.ignored += 1
            return None

        source = Path(event.src_path)
        mirrored = self.roots.mirror(source)
        if mirrored is None:
            self.stats.ignored += 1
            return None
        side, relative, target = mirrored

        if self.exclusion_filter.should_exclude(relative):
            self.log.debug(f"Excluding directory: {relative}")
            self.stats.excluded += 1
            return None

        if self.cache.consume(source):
            self.log.debug(f"Skipping self-created directory (echo prevention): {source}")
            self.stats.suppressed += 1
            return None

        if self.dry_run:
            self.log.info(f"[DRY RUN] Would mirror: {source} -> {target}")
            return None

        self.log.info(f"Mirroring ({side.value} -> {side.opposite.value}): {source} -> {target}")
        self.cache.insert(target)
        result = CreateWithRetry(target, self.policy, self._sleep).run()

        if not result.succeeded:
            self.cache.discard(target)
            self.stats.errors.append(result.error)
            self.log.error(f"Failed to mirror {source}: {result.error}")
            return None

        if not result.created:
            # No creation event will follow for a directory that already existed
            self.cache.discard(target)
            return None

        self.stats.mirrored += 1
        return target

    def run(self, cancel: Optional[threading.Event] = None) -> None:
        """
        Consume events until cancelled or the channel closes.

        Args:
            cancel: Event checked at every poll timeout
        """
        cancel = cancel or threading.Event()

        while not cancel.is_set():
            try:
                event = self.channel.get(timeout=self.poll_timeout)
            except ChannelClosedError:
                self.log.info("Watch channel disconnected, stopping")
                break

            if event is None:
                continue

            try:
                self.handle_event(event)
            except (TreeSyncError, OSError) as e:
                self.stats.errors.append(str(e))
                self.log.error(f"Error handling event for {event.src_path}: {e}")

    def watch(self, cancel: Optional[threading.Event] = None) -> None:
        """
        Subscribe, run the loop, and unsubscribe on exit.

        Args:
            cancel: Cooperative cancellation signal

        Raises:
            WatchSubscriptionError: If notifications cannot be established
        """
        self.log.info("Starting watch mode")
        self.log.info(f"  Left:    {self.roots.left}")
        self.log.info(f"  Right:   {self.roots.right}")
        self.log.info(f"  Dry run: {self.dry_run}")

        self.start()
        self.log.info("Watching for directory changes... (Press Ctrl+C to stop)")
        try:
            self.run(cancel)
        finally:
            self.stop()
            self.log.info(
                f"Watch stopped: {self.stats.mirrored} mirrored, "
                f"{self.stats.suppressed} echoes suppressed, {len(self.stats.errors)} error(s)"
            )

