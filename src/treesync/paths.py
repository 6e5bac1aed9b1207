"""Path helpers shared by the walker, reconciliation and watch engines."""

import os
import sys
from pathlib import Path, PurePosixPath, PureWindowsPath
from typing import Union

from .exceptions import InvalidPathError


def normalize_root(path: Union[str, Path]) -> Path:
    """
    Resolve a root to an absolute path.

    Roots that do not exist yet are made absolute without failing,
    because reconciliation may be about to create them.

    Args:
        path: Root path as given by the caller

    Returns:
        Absolute path
    """
    path = Path(path).expanduser()
    try:
        return path.resolve(strict=True)
    except (OSError, RuntimeError):
        return Path(os.path.abspath(path))


def validate_relative_path(relative_path: Union[str, Path]) -> str:
    """
    Validate a root-relative directory path and return its canonical form.

    This is the traversal boundary: it runs before any filesystem access.

    Args:
        relative_path: Path relative to a root

    Returns:
        The path with '/' separators and no '.' components

    Raises:
        InvalidPathError: If the path is empty, absolute, contains '..' or a null byte
    """
    raw = str(relative_path)
    if not raw.strip():
        raise InvalidPathError("Relative path must not be empty", relative_path)
    if "\x00" in raw:
        raise InvalidPathError(f"Path must not contain null bytes: {raw!r}", relative_path)

    # Check both flavours so a Windows drive path is rejected on POSIX too
    if PurePosixPath(raw).is_absolute() or PureWindowsPath(raw).is_absolute() or PureWindowsPath(raw).drive:
        raise InvalidPathError(f"Path must be relative, got absolute path: {raw}", relative_path)

    parts = [p for p in raw.replace("\\", "/").split("/") if p not in ("", ".")]
    if ".." in parts:
        raise InvalidPathError(f"Path must not contain '..' components: {raw}", relative_path)
    if not parts:
        raise InvalidPathError(f"Relative path resolves to the root itself: {raw}", relative_path)

    return "/".join(parts)


def to_relative(root: Path, path: Path) -> str:
    """
    Express an absolute path relative to a root.

    Args:
        root: Absolute root path
        path: Absolute path under the root

    Returns:
        POSIX-style relative path ('' for the root itself)

    Raises:
        ValueError: If the path is not under the root
    """
    relative = Path(path).relative_to(root)
    return relative.as_posix() if relative.parts else ""


def is_under_root(root: Path, path: Path) -> bool:
    """Check whether a path is the root or lies beneath it."""
    try:
        Path(path).relative_to(root)
        return True
    except ValueError:
        return False


def normalize_case(path: Union[str, Path]) -> str:
    """Case-fold a path for comparisons on case-insensitive platforms."""
    text = str(path)
    if sys.platform == "win32":
        return text.lower()
    return text
