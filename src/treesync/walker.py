"""Directory enumeration with subtree pruning."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet, List, Optional

from .exceptions import RootUnavailableError
from .filter import ExclusionFilter, is_symlink_or_reparse_point
from .paths import normalize_root

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WalkResult:
    """
    Directories found under a root.

    Attributes:
        root: The enumerated root
        directories: Root-relative POSIX paths, root itself excluded
        warnings: Non-fatal notes (missing root, unreadable subtrees)
    """
    root: Path
    directories: FrozenSet[str]
    warnings: tuple = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.directories)

    def __contains__(self, relative_path: str) -> bool:
        return relative_path in self.directories


class TreeWalker:
    """
    Depth-first directory enumerator.

    Every directory's relative path is tested against the exclusion filter
    before descending, so an excluded directory contributes none of its
    descendants. Symlinks and reparse points are never followed or listed.
    """

    def __init__(self, exclusion_filter: Optional[ExclusionFilter] = None):
        self.exclusion_filter = exclusion_filter or ExclusionFilter()

    def walk(self, root: Path) -> WalkResult:
        """
        Enumerate every non-excluded directory under a root.

        Args:
            root: Root directory

        Returns:
            WalkResult; empty with a warning if the root does not exist

        Raises:
            RootUnavailableError: If the root exists but is not a directory
        """
        root = normalize_root(root)

        if not root.exists():
            message = f"Root path does not exist: {root}"
            logger.warning(message)
            return WalkResult(root=root, directories=frozenset(), warnings=(message,))

        if not root.is_dir():
            raise RootUnavailableError(f"Root path is not a directory: {root}", root)

        directories = set()
        warnings: List[str] = []
        # Explicit stack keeps deep trees clear of the recursion limit
        stack = [(str(root), "")]

        while stack:
            abs_dir, rel_dir = stack.pop()
            try:
                with os.scandir(abs_dir) as entries:
                    children = []
                    for entry in entries:
                        if is_symlink_or_reparse_point(entry):
                            continue
                        try:
                            if not entry.is_dir(follow_symlinks=False):
                                continue
                        except OSError:
                            continue
                        children.append(entry)
            except OSError as e:
                message = f"Cannot read directory {abs_dir}: {e.strerror or e}"
                logger.warning(message)
                warnings.append(message)
                continue

            for entry in children:
                rel_path = f"{rel_dir}/{entry.name}" if rel_dir else entry.name
                if self.exclusion_filter.should_exclude(rel_path):
                    logger.debug(f"Excluding directory: {rel_path}")
                    continue
                directories.add(rel_path)
                stack.append((entry.path, rel_path))

        logger.info(f"Found {len(directories)} directories in {root}")
        return WalkResult(root=root, directories=frozenset(directories), warnings=tuple(warnings))


def enumerate_directories(root: Path, exclusion_filter: Optional[ExclusionFilter] = None) -> WalkResult:
    """
    Enumerate every non-excluded directory under a root.

    Args:
        root: Root directory
        exclusion_filter: Filter to prune subtrees with

    Returns:
        WalkResult with the directory set and any warnings
    """
    return TreeWalker(exclusion_filter).walk(root)
