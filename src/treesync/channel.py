"""Bounded in-memory channel between watcher threads and the watch loop."""

import queue
import threading
from typing import Optional

from .exceptions import ChannelClosedError
from .models import FSEvent

_CLOSED = object()


class EventChannel:
    """
    Bounded FIFO channel of filesystem events.

    Features:
    - Many producers (one watchdog observer thread per root)
    - A single consumer draining with a poll timeout
    - Explicit close so the consumer can tell disconnect from idle
    - Thread-safe operations
    """

    def __init__(self, maxsize: int = 10000):
        """
        Initialize the channel.

        Args:
            maxsize: Maximum number of buffered events; producers block when full
        """
        self.maxsize = maxsize
        self._queue: "queue.Queue" = queue.Queue(maxsize=maxsize)
        self._closed = threading.Event()

    def put(self, event: FSEvent, timeout: Optional[float] = None) -> None:
        """
        Add an event to the channel.

        Args:
            event: Event to enqueue
            timeout: Seconds to block when full (None blocks until space)

        Raises:
            ChannelClosedError: If the channel is closed
            queue.Full: If the timeout expires
        """
        if self._closed.is_set():
            raise ChannelClosedError("Channel is closed")
        self._queue.put(event, timeout=timeout)

    def get(self, timeout: float) -> Optional[FSEvent]:
        """
        Wait for the next event.

        Args:
            timeout: Seconds to wait

        Returns:
            The next event, or None if the timeout expired

        Raises:
            ChannelClosedError: If the channel is closed and drained
        """
        try:
            item = self._queue.get(timeout=timeout)
        except queue.Empty:
            if self._closed.is_set():
                raise ChannelClosedError("Channel is closed") from None
            return None

        if item is _CLOSED:
            raise ChannelClosedError("Channel is closed")
        return item

    def close(self) -> None:
        """Close the channel; the consumer sees ChannelClosedError once drained."""
        if self._closed.is_set():
            return
        self._closed.set()
        try:
            self._queue.put_nowait(_CLOSED)
        except queue.Full:
            pass

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def size(self) -> int:
        """Approximate number of buffered events."""
        return self._queue.qsize()

    def __len__(self) -> int:
        return self.size()
