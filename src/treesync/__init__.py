"""
Tree Sync Package

Keeps the directory structure (not file contents) of two folder trees
mirrored, leaving out version-control, editor and OS artifacts.

Features:
- One-shot reconciliation creating missing directories on both sides
- Read-only diff reporting
- Live mirroring of new directories via watchdog
- Subtree-pruning glob exclusions
- Bounded worker pool with per-path retry of transient errors
- Echo suppression between the two watched roots
"""

from .models import (
    CreateState,
    CreateResult,
    DiffResult,
    SyncOutcome,
    EnsureOutcome,
    FSEvent,
)

from .config import SyncConfig

from .exceptions import (
    TreeSyncError,
    ConfigError,
    InvalidPathError,
    RootError,
    RootUnavailableError,
    RootOverlapError,
    IOFailure,
    TransientIOFailure,
    PermanentIOFailure,
    WatchSubscriptionError,
    ChannelClosedError,
)

from .filter import ExclusionFilter, is_symlink_or_reparse_point
from .walker import TreeWalker, WalkResult, enumerate_directories
from .diff import compute_diff
from .retry import RetryPolicy, CreateWithRetry, classify_os_error, create_directory
from .reconcile import ReconciliationEngine, create_gitkeep_files
from .roots import RootPair, Side
from .suppression import SuppressionCache
from .channel import EventChannel
from .fs_watcher import FSWatcherPool, FSEventHandler
from .watch import WatchEngine
from .output import ExitCode


__all__ = [
    # Models
    "CreateState",
    "CreateResult",
    "DiffResult",
    "SyncOutcome",
    "EnsureOutcome",
    "FSEvent",
    # Config
    "SyncConfig",
    # Exceptions
    "TreeSyncError",
    "ConfigError",
    "InvalidPathError",
    "RootError",
    "RootUnavailableError",
    "RootOverlapError",
    "IOFailure",
    "TransientIOFailure",
    "PermanentIOFailure",
    "WatchSubscriptionError",
    "ChannelClosedError",
    # Components
    "ExclusionFilter",
    "is_symlink_or_reparse_point",
    "TreeWalker",
    "WalkResult",
    "enumerate_directories",
    "compute_diff",
    "RetryPolicy",
    "CreateWithRetry",
    "classify_os_error",
    "create_directory",
    "ReconciliationEngine",
    "create_gitkeep_files",
    "RootPair",
    "Side",
    "SuppressionCache",
    "EventChannel",
    "FSWatcherPool",
    "FSEventHandler",
    # Engines
    "WatchEngine",
    "ExitCode",
]

__version__ = "0.1.0"
