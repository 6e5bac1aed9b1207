"""Tests for watch engine module."""

import threading
import time

import pytest
from pathlib import Path

from src.treesync.exceptions import WatchSubscriptionError
from src.treesync.filter import ExclusionFilter
from src.treesync.models import FSEvent
from src.treesync.retry import RetryPolicy
from src.treesync.roots import RootPair
from src.treesync import watch as watch_module
from src.treesync.watch import WatchEngine


def dir_created(path: Path) -> FSEvent:
    return FSEvent(event_type="created", src_path=Path(path), is_directory=True)


@pytest.fixture
def pair(tmp_path):
    (tmp_path / "left").mkdir()
    (tmp_path / "right").mkdir()
    return RootPair(tmp_path / "left", tmp_path / "right")


@pytest.fixture
def engine(pair):
    return WatchEngine(pair, ExclusionFilter(), policy=RetryPolicy(max_retries=1), sleep=lambda _: None)


class TestHandleEvent:
    """Tests for WatchEngine.handle_event."""

    def test_mirrors_left_to_right(self, engine, pair):
        (pair.left / "x").mkdir()

        target = engine.handle_event(dir_created(pair.left / "x"))

        assert target == pair.right / "x"
        assert (pair.right / "x").is_dir()
        assert engine.stats.mirrored == 1
        assert pair.right / "x" in engine.cache

    def test_mirrors_right_to_left_nested(self, engine, pair):
        (pair.right / "a" / "b").mkdir(parents=True)

        target = engine.handle_event(dir_created(pair.right / "a" / "b"))

        assert target == pair.left / "a" / "b"
        assert (pair.left / "a" / "b").is_dir()

    def test_echo_suppressed(self, engine, pair):
        (pair.left / "x").mkdir()
        engine.handle_event(dir_created(pair.left / "x"))

        # The creation on the right comes back as an event
        result = engine.handle_event(dir_created(pair.right / "x"))

        assert result is None
        assert engine.stats.suppressed == 1
        assert engine.stats.mirrored == 1
        assert pair.right / "x" not in engine.cache

    def test_echo_never_creates_on_source_side(self, engine, pair, monkeypatch):
        attempted = []
        real_create = watch_module.CreateWithRetry

        def recording_create(path, *args, **kwargs):
            attempted.append(Path(path))
            return real_create(path, *args, **kwargs)

        monkeypatch.setattr(watch_module, "CreateWithRetry", recording_create)
        (pair.left / "x").mkdir()

        engine.handle_event(dir_created(pair.left / "x"))
        engine.handle_event(dir_created(pair.right / "x"))

        assert attempted == [pair.right / "x"]

    def test_file_events_ignored(self, engine, pair):
        event = FSEvent(event_type="created", src_path=pair.left / "f.txt", is_directory=False)

        assert engine.handle_event(event) is None
        assert engine.stats.ignored == 1
        assert not (pair.right / "f.txt").exists()

    def test_non_create_events_ignored(self, engine, pair):
        for event_type in ("deleted", "modified", "moved"):
            engine.handle_event(FSEvent(event_type=event_type, src_path=pair.left / "x", is_directory=True))

        assert engine.stats.ignored == 3
        assert not (pair.right / "x").exists()

    def test_root_and_outside_paths_ignored(self, engine, pair, tmp_path):
        assert engine.handle_event(dir_created(pair.left)) is None
        assert engine.handle_event(dir_created(tmp_path / "elsewhere")) is None
        assert engine.stats.ignored == 2

    def test_excluded_directory_skipped(self, engine, pair):
        (pair.left / "proj" / ".git").mkdir(parents=True)

        assert engine.handle_event(dir_created(pair.left / "proj" / ".git")) is None
        assert engine.stats.excluded == 1
        assert not (pair.right / "proj").exists()

    def test_dry_run(self, pair):
        engine = WatchEngine(pair, dry_run=True)
        (pair.left / "x").mkdir()

        assert engine.handle_event(dir_created(pair.left / "x")) is None
        assert not (pair.right / "x").exists()
        assert len(engine.cache) == 0

    def test_target_already_exists(self, engine, pair):
        (pair.left / "x").mkdir()
        (pair.right / "x").mkdir()

        assert engine.handle_event(dir_created(pair.left / "x")) is None
        assert engine.stats.mirrored == 0
        assert len(engine.cache) == 0

    def test_failed_creation_recorded(self, engine, pair):
        (pair.right / "x").write_text("file in the way")
        (pair.left / "x").mkdir()

        assert engine.handle_event(dir_created(pair.left / "x")) is None
        assert len(engine.stats.errors) == 1
        assert len(engine.cache) == 0


class TestRunLoop:
    """Tests for WatchEngine.run."""

    def test_processes_queued_events_until_closed(self, engine, pair):
        (pair.left / "a").mkdir()
        (pair.left / "b").mkdir()
        engine.channel.put(dir_created(pair.left / "a"))
        engine.channel.put(dir_created(pair.left / "b"))
        engine.channel.close()

        engine.run()

        assert (pair.right / "a").is_dir()
        assert (pair.right / "b").is_dir()
        assert engine.stats.mirrored == 2

    def test_cancel_stops_loop(self, pair):
        engine = WatchEngine(pair, poll_timeout=0.01)
        cancel = threading.Event()
        thread = threading.Thread(target=engine.run, args=(cancel,))
        thread.start()

        cancel.set()
        thread.join(timeout=2.0)

        assert not thread.is_alive()

    def test_start_fails_for_missing_root(self, tmp_path):
        (tmp_path / "left").mkdir()
        engine = WatchEngine(RootPair(tmp_path / "left", tmp_path / "missing"))

        with pytest.raises(WatchSubscriptionError):
            engine.start()

        assert len(engine._pool) == 0
        assert engine.channel.closed is False


class TestLiveWatch:
    """End-to-end tests with real watchdog observers."""

    def test_mirrors_without_echo(self, pair, monkeypatch):
        attempted = []
        real_create = watch_module.CreateWithRetry

        def recording_create(path, *args, **kwargs):
            attempted.append(Path(path))
            return real_create(path, *args, **kwargs)

        monkeypatch.setattr(watch_module, "CreateWithRetry", recording_create)
        engine = WatchEngine(pair, ExclusionFilter(), poll_timeout=0.05)
        cancel = threading.Event()
        thread = threading.Thread(target=engine.watch, args=(cancel,))
        thread.start()
        time.sleep(0.3)

        try:
            (pair.left / "x").mkdir()
            deadline = time.monotonic() + 5.0
            while not (pair.right / "x").is_dir() and time.monotonic() < deadline:
                time.sleep(0.05)
            time.sleep(0.5)
        finally:
            cancel.set()
            thread.join(timeout=5.0)

        assert (pair.right / "x").is_dir()
        assert engine.stats.mirrored == 1
        assert engine.stats.suppressed == 1
        assert attempted == [pair.right / "x"]
        assert engine.stats.errors == []
        assert engine.channel.closed is True

    def test_excluded_not_mirrored(self, pair):
        engine = WatchEngine(pair, ExclusionFilter(), poll_timeout=0.05)
        cancel = threading.Event()
        thread = threading.Thread(target=engine.watch, args=(cancel,))
        thread.start()
        time.sleep(0.3)

        try:
            (pair.left / ".git").mkdir()
            time.sleep(0.5)
        finally:
            cancel.set()
            thread.join(timeout=5.0)

        assert not (pair.right / ".git").exists()
