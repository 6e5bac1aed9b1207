"""Exclusion rules deciding which directories are left out of mirroring."""

import os
import stat
from pathlib import Path, PurePosixPath
from typing import Iterable, List, Optional, Union

from pathspec import PathSpec

# Names that exclude the component carrying them and everything beneath it.
RESERVED_NAMES = frozenset({
    # Version control
    ".git",
    ".svn",
    ".hg",
    # Editor / IDE state
    ".Rproj.user",
    ".ipynb_checkpoints",
    ".idea",
    ".vscode",
    "__pycache__",
    # OS metadata
    ".DS_Store",
    "Thumbs.db",
    "desktop.ini",
    # R session files
    ".Rhistory",
    ".Renviron",
})

# Reserved name patterns: cloud-sync temp folders, office lock files, backups.
RESERVED_PATTERNS = [
    ".OneDrive*",
    "~$*",
    "*.tmp",
    "*~",
]

DEFAULT_EXCLUDE_PATTERNS = [
    ".git/**",
    ".Rproj.user/**",
    ".ipynb_checkpoints/**",
]

_FILE_ATTRIBUTE_REPARSE_POINT = getattr(stat, "FILE_ATTRIBUTE_REPARSE_POINT", 0x400)


def is_symlink_or_reparse_point(path: Union[str, Path, os.DirEntry]) -> bool:
    """
    Check whether a filesystem entry is a symlink, junction or reparse point.

    Args:
        path: Path or directory entry to check

    Returns:
        True if the entry must not be followed
    """
    if isinstance(path, os.DirEntry):
        if path.is_symlink():
            return True
        is_junction = getattr(path, "is_junction", None)
        if is_junction is not None and is_junction():
            return True
        try:
            st = path.stat(follow_symlinks=False)
        except OSError:
            return False
    else:
        path = Path(path)
        if path.is_symlink():
            return True
        try:
            st = os.lstat(path)
        except OSError:
            return False

    attributes = getattr(st, "st_file_attributes", 0)
    return bool(attributes & _FILE_ATTRIBUTE_REPARSE_POINT)


class ExclusionFilter:
    """
    Decides whether a root-relative directory path is pruned.

    A path is excluded when the whole relative path matches a pattern, or
    when any single component is a reserved name or matches a pattern.
    The per-component check means a match anywhere in the ancestry
    excludes the entire subtree. Patterns use gitignore-style wildcards
    (``*``, ``**``, ``?`` and character classes).
    """

    def __init__(
        self,
        patterns: Optional[Iterable[str]] = None,
        reserved_names: Optional[Iterable[str]] = None,
    ):
        """
        Initialize the filter.

        Args:
            patterns: Glob patterns; defaults to DEFAULT_EXCLUDE_PATTERNS
            reserved_names: Exact component names; defaults to RESERVED_NAMES
        """
        self.patterns: List[str] = list(DEFAULT_EXCLUDE_PATTERNS if patterns is None else patterns)
        self.reserved_names = frozenset(RESERVED_NAMES if reserved_names is None else reserved_names)
        self._spec = PathSpec.from_lines("gitwildmatch", self.patterns)
        self._reserved_spec = PathSpec.from_lines("gitwildmatch", RESERVED_PATTERNS)

    @classmethod
    def with_defaults(cls, extra_patterns: Optional[Iterable[str]] = None) -> "ExclusionFilter":
        """
        Build a filter from the default rules plus caller-supplied patterns.

        Args:
            extra_patterns: Additional glob patterns, unioned with the defaults

        Returns:
            A new ExclusionFilter
        """
        patterns = list(DEFAULT_EXCLUDE_PATTERNS)
        for pattern in extra_patterns or []:
            if pattern and pattern not in patterns:
                patterns.append(pattern)
        return cls(patterns)

    def should_exclude(self, relative_path: Union[str, Path]) -> bool:
        """
        Check whether a relative directory path must be pruned.

        The root itself ('' or '.') is never excluded.

        Args:
            relative_path: Path relative to an enumeration root

        Returns:
            True if the path or any of its ancestors is excluded
        """
        posix = PurePosixPath(str(relative_path).replace("\\", "/"))
        parts = [p for p in posix.parts if p not in ("", ".", "/")]
        if not parts:
            return False

        full = "/".join(parts)
        if self._spec.match_file(full) or self._spec.match_file(full + "/"):
            return True

        for name in parts:
            if self._is_reserved(name):
                return True
            if self._spec.match_file(name):
                return True

        return False

    def should_include(self, relative_path: Union[str, Path]) -> bool:
        """Inverse of should_exclude."""
        return not self.should_exclude(relative_path)

    def _is_reserved(self, name: str) -> bool:
        if name in self.reserved_names:
            return True
        return self._reserved_spec.match_file(name)

    def __repr__(self) -> str:
        return f"ExclusionFilter(patterns={self.patterns!r})"
