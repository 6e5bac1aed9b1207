"""Data models for the treesync package."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import FrozenSet, List, Optional
import time

DirectorySet = FrozenSet[str]


class CreateState(Enum):
    """States of a single create-with-retry attempt."""
    PENDING = "pending"
    RETRYING = "retrying"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class CreateResult:
    """
    Final outcome of creating one directory.

    Attributes:
        path: Absolute directory path
        state: SUCCEEDED or FAILED
        created: True if this attempt made the directory (and any parents)
        attempts: Number of creation attempts made
        error: Error text when the state is FAILED
    """
    path: Path
    state: CreateState
    created: bool = False
    attempts: int = 0
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.state == CreateState.SUCCEEDED

    @property
    def already_existed(self) -> bool:
        return self.succeeded and not self.created


@dataclass(frozen=True)
class DiffResult:
    """
    Structural difference between two directory sets.

    Attributes:
        missing_in_right: Directories present on the left only
        missing_in_left: Directories present on the right only
        warnings: Non-fatal notes from enumeration (e.g. a missing root)
    """
    missing_in_right: DirectorySet
    missing_in_left: DirectorySet
    warnings: tuple = ()

    @property
    def has_differences(self) -> bool:
        return bool(self.missing_in_right or self.missing_in_left)

    @property
    def total_differences(self) -> int:
        return len(self.missing_in_right) + len(self.missing_in_left)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "ok": not self.has_differences,
            "missing_in_right": sorted(self.missing_in_right),
            "missing_in_left": sorted(self.missing_in_left),
            "total_differences": self.total_differences,
            "warnings": list(self.warnings),
        }


@dataclass
class SyncOutcome:
    """
    Aggregated result of a reconciliation.

    Overall success means the error list is empty; warnings do not count.
    """
    created_left: int = 0
    created_right: int = 0
    existing_left: int = 0
    existing_right: int = 0
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    planned_left: List[str] = field(default_factory=list)
    planned_right: List[str] = field(default_factory=list)
    gitkeep_created: int = 0
    duration_ms: int = 0
    left_root: Optional[Path] = None
    right_root: Optional[Path] = None

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def created_total(self) -> int:
        return self.created_left + self.created_right

    @property
    def existing_total(self) -> int:
        return self.existing_left + self.existing_right

    @property
    def has_changes(self) -> bool:
        return self.created_total > 0 or self.gitkeep_created > 0

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "ok": self.ok,
            "created_left": self.created_left,
            "created_right": self.created_right,
            "created_total": self.created_total,
            "existing_left": self.existing_left,
            "existing_right": self.existing_right,
            "existing_total": self.existing_total,
            "planned_left": sorted(self.planned_left),
            "planned_right": sorted(self.planned_right),
            "gitkeep_created": self.gitkeep_created,
            "duration_ms": self.duration_ms,
            "left_root": str(self.left_root) if self.left_root else None,
            "right_root": str(self.right_root) if self.right_root else None,
            "warnings": list(self.warnings),
            "errors": list(self.errors),
        }


@dataclass
class EnsureOutcome:
    """
    Result of ensuring one relative path on both roots.

    A multi-segment chain counts as one unit per side.
    """
    relative_path: str
    created_left: int = 0
    created_right: int = 0
    left_root: Optional[Path] = None
    right_root: Optional[Path] = None
    duration_ms: int = 0
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def as_tuple(self) -> tuple:
        return self.created_left, self.created_right

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "ok": self.ok,
            "ensured_relative": self.relative_path,
            "ensured_left_path": str(self.left_root / self.relative_path) if self.left_root else None,
            "ensured_right_path": str(self.right_root / self.relative_path) if self.right_root else None,
            "created_left": self.created_left,
            "created_right": self.created_right,
            "duration_ms": self.duration_ms,
            "warnings": list(self.warnings),
            "errors": list(self.errors),
        }


@dataclass
class FSEvent:
    """
    Raw change notification from the filesystem watcher.

    Attributes:
        event_type: Raw event type string (created, deleted, modified, moved)
        src_path: Source path of the event
        dest_path: Destination path (for move events)
        is_directory: Whether this is a directory event
        timestamp: Unix timestamp when the event occurred
    """
    event_type: str
    src_path: Path
    dest_path: Optional[Path] = None
    is_directory: bool = False
    timestamp: float = field(default_factory=time.time)

    @property
    def is_dir_created(self) -> bool:
        return self.event_type == "created" and self.is_directory
