"""Tests for filesystem watcher module."""

import pytest
import time
from pathlib import Path

from watchdog.events import DirCreatedEvent, DirMovedEvent, FileCreatedEvent, FileDeletedEvent

from src.treesync.channel import EventChannel
from src.treesync.exceptions import WatchSubscriptionError
from src.treesync.fs_watcher import FSEventHandler, FSWatcherPool


def collect(channel: EventChannel, timeout: float = 0.05) -> list:
    events = []
    while True:
        event = channel.get(timeout=timeout)
        if event is None:
            return events
        events.append(event)


class TestFSWatcherPool:
    """Tests for FSWatcherPool class."""

    def test_empty_pool(self):
        pool = FSWatcherPool(EventChannel())
        assert len(pool) == 0
        assert pool.roots == []

    def test_subscribe(self, tmp_path):
        pool = FSWatcherPool(EventChannel())

        try:
            assert pool.subscribe(tmp_path) is True
            assert tmp_path in pool
            assert pool.roots == [tmp_path]
        finally:
            pool.close()

    def test_subscribe_twice(self, tmp_path):
        pool = FSWatcherPool(EventChannel())

        try:
            pool.subscribe(tmp_path)
            assert pool.subscribe(tmp_path) is False
            assert len(pool) == 1
        finally:
            pool.close()

    def test_subscribe_missing_root(self, tmp_path):
        pool = FSWatcherPool(EventChannel())

        with pytest.raises(WatchSubscriptionError) as exc_info:
            pool.subscribe(tmp_path / "missing")

        assert exc_info.value.root == tmp_path / "missing"
        assert "missing" in str(exc_info.value)
        assert len(pool) == 0

    def test_unsubscribe(self, tmp_path):
        pool = FSWatcherPool(EventChannel())
        pool.subscribe(tmp_path)

        assert pool.unsubscribe(tmp_path) is True
        assert tmp_path not in pool
        assert pool.unsubscribe(tmp_path) is False

    def test_close(self, tmp_path):
        pool = FSWatcherPool(EventChannel())
        (tmp_path / "a").mkdir()
        (tmp_path / "b").mkdir()
        pool.subscribe(tmp_path / "a")
        pool.subscribe(tmp_path / "b")

        assert pool.close() == 2
        assert len(pool) == 0
        assert pool.close() == 0

    def test_reports_directory_creation(self, tmp_path):
        channel = EventChannel()
        pool = FSWatcherPool(channel)
        pool.subscribe(tmp_path)
        time.sleep(0.1)

        try:
            (tmp_path / "outer" / "inner").mkdir(parents=True)
            time.sleep(0.5)
        finally:
            pool.close()

        created = {e.src_path.name for e in collect(channel) if e.is_dir_created}
        assert "outer" in created


class TestFSEventHandler:
    """Tests for FSEventHandler class."""

    def test_dir_created(self, tmp_path):
        channel = EventChannel()
        handler = FSEventHandler(channel, tmp_path)

        handler.dispatch(DirCreatedEvent(str(tmp_path / "a")))

        event = channel.get(timeout=0.1)
        assert event.event_type == "created"
        assert event.is_dir_created is True
        assert event.src_path == tmp_path / "a"
        assert event.dest_path is None

    def test_file_created(self, tmp_path):
        channel = EventChannel()
        handler = FSEventHandler(channel, tmp_path)

        handler.dispatch(FileCreatedEvent(str(tmp_path / "f.txt")))

        event = channel.get(timeout=0.1)
        assert event.is_directory is False
        assert event.is_dir_created is False

    def test_deleted(self, tmp_path):
        channel = EventChannel()
        handler = FSEventHandler(channel, tmp_path)

        handler.dispatch(FileDeletedEvent(str(tmp_path / "f.txt")))

        assert channel.get(timeout=0.1).event_type == "deleted"

    def test_moved_keeps_destination(self, tmp_path):
        channel = EventChannel()
        handler = FSEventHandler(channel, tmp_path)

        handler.dispatch(DirMovedEvent(str(tmp_path / "old"), str(tmp_path / "new")))

        event = channel.get(timeout=0.1)
        assert event.event_type == "moved"
        assert event.dest_path == tmp_path / "new"
        assert event.is_directory is True

    def test_closed_channel_drops_event(self, tmp_path):
        channel = EventChannel()
        channel.close()
        handler = FSEventHandler(channel, tmp_path)

        handler.dispatch(DirCreatedEvent(str(tmp_path / "a")))

        assert channel.closed is True
