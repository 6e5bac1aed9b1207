"""Configuration for the treesync package."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Mapping, Optional

from .exceptions import ConfigError
from .filter import ExclusionFilter
from .retry import RetryPolicy

LOG_LEVELS = ("debug", "info", "warning", "warn", "error")


@dataclass
class SyncConfig:
    """
    Configuration options for sync, check and watch.

    Attributes:
        left_root: First root of the mirrored pair
        right_root: Second root of the mirrored pair
        exclude_patterns: Extra glob patterns, unioned with the defaults
        max_workers: Size of the directory-creation worker pool
        max_retries: Retries after a transient creation failure
        initial_delay_ms: Delay before the first retry
        backoff_multiplier: Factor applied to the delay after each retry
        poll_timeout_ms: Watch loop wake-up interval for shutdown checks
        suppression_capacity: Entries kept before the echo cache is cleared
        event_queue_size: Bound of the watcher-to-loop event channel
        gitkeep: Write .gitkeep files into empty left-side directories
        dry_run: Report actions without touching the filesystem
        json_output: Render results as JSON
        log_level: Logging level name
    """
    left_root: Optional[Path] = None
    right_root: Optional[Path] = None
    exclude_patterns: List[str] = field(default_factory=list)
    max_workers: int = 4
    max_retries: int = 3
    initial_delay_ms: int = 50
    backoff_multiplier: float = 2.0
    poll_timeout_ms: int = 100
    suppression_capacity: int = 1000
    event_queue_size: int = 10000
    gitkeep: bool = False
    dry_run: bool = False
    json_output: bool = False
    log_level: str = "info"

    def __post_init__(self):
        if isinstance(self.left_root, str):
            self.left_root = Path(self.left_root)
        if isinstance(self.right_root, str):
            self.right_root = Path(self.right_root)
        if self.max_workers < 1:
            raise ConfigError(f"max_workers must be at least 1, got {self.max_workers}")
        if self.max_retries < 0:
            raise ConfigError(f"max_retries must not be negative, got {self.max_retries}")
        if self.suppression_capacity < 1:
            raise ConfigError(f"suppression_capacity must be at least 1, got {self.suppression_capacity}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> "SyncConfig":
        """
        Build a config from TREESYNC_* environment variables.

        Keyword overrides that are not None take precedence.

        Args:
            environ: Environment mapping (defaults to os.environ)

        Returns:
            A new SyncConfig
        """
        env = os.environ if environ is None else environ
        values = {}

        if env.get("TREESYNC_LEFT"):
            values["left_root"] = Path(env["TREESYNC_LEFT"])
        if env.get("TREESYNC_RIGHT"):
            values["right_root"] = Path(env["TREESYNC_RIGHT"])
        if env.get("TREESYNC_EXCLUDE"):
            values["exclude_patterns"] = [p.strip() for p in env["TREESYNC_EXCLUDE"].split(",") if p.strip()]
        if env.get("TREESYNC_WORKERS"):
            values["max_workers"] = _parse_int("TREESYNC_WORKERS", env["TREESYNC_WORKERS"])
        if env.get("TREESYNC_MAX_RETRIES"):
            values["max_retries"] = _parse_int("TREESYNC_MAX_RETRIES", env["TREESYNC_MAX_RETRIES"])
        if env.get("TREESYNC_LOG_LEVEL"):
            values["log_level"] = env["TREESYNC_LOG_LEVEL"]

        for key, value in overrides.items():
            if value is not None:
                values[key] = value

        return cls(**values)

    def retry_policy(self) -> RetryPolicy:
        """Build the create-with-retry policy from this config."""
        return RetryPolicy(
            max_retries=self.max_retries,
            initial_delay=self.initial_delay_ms / 1000.0,
            multiplier=self.backoff_multiplier,
        )

    def build_filter(self) -> ExclusionFilter:
        """Build the exclusion filter from the defaults plus extra patterns."""
        return ExclusionFilter.with_defaults(self.exclude_patterns)


def _parse_int(name: str, raw: str) -> int:
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None
