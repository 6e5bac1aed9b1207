"""Custom exceptions for the treesync package."""

from pathlib import Path
from typing import Optional, Union


class TreeSyncError(Exception):
    """Base exception for all treesync errors."""
    pass


class ConfigError(TreeSyncError):
    """Invalid configuration value."""
    pass


class InvalidPathError(TreeSyncError):
    """Relative path is absolute or escapes its root."""

    def __init__(self, message: str, path: Union[str, Path, None] = None):
        super().__init__(message)
        self.path = path


class RootError(TreeSyncError):
    """Error related to a mirrored root folder."""
    pass


class RootUnavailableError(RootError):
    """Root cannot be made to exist or is not a directory."""

    def __init__(self, message: str, root: Optional[Path] = None):
        super().__init__(message)
        self.root = root


class RootOverlapError(RootError):
    """Left and right roots are the same folder or nested inside each other."""
    pass


class IOFailure(TreeSyncError):
    """Directory creation failed at the filesystem level."""

    def __init__(self, path: Path, os_error: OSError, attempts: int = 1):
        super().__init__(f"Failed to create directory {path}: {os_error.strerror or os_error}")
        self.path = path
        self.os_error = os_error
        self.attempts = attempts


class TransientIOFailure(IOFailure):
    """Retryable contention error (permission race, sharing/lock violation)."""
    pass


class PermanentIOFailure(IOFailure):
    """Non-retryable filesystem error."""
    pass


class WatchSubscriptionError(TreeSyncError):
    """Change notifications could not be established on a root."""

    def __init__(self, message: str, root: Optional[Path] = None):
        super().__init__(message)
        self.root = root


class ChannelClosedError(TreeSyncError):
    """The event channel was closed by its producer side."""
    pass
