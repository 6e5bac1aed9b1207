"""Concurrent, idempotent creation of missing directories on both roots."""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from itertools import groupby
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Tuple, Union

from .diff import compute_diff
from .exceptions import InvalidPathError, RootUnavailableError
from .filter import ExclusionFilter
from .models import CreateResult, DiffResult, EnsureOutcome, SyncOutcome
from .paths import normalize_root, validate_relative_path
from .retry import CreateWithRetry, RetryPolicy
from .roots import RootPair
from .walker import TreeWalker

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 4

GITKEEP_NAME = ".gitkeep"


@dataclass(frozen=True)
class PathResult:
    """Creation results for one relative path on both roots."""
    relative_path: str
    left: CreateResult
    right: CreateResult


class ReconciliationEngine:
    """
    Creates every directory of a union set on both roots.

    Work is dispatched to a fixed-size thread pool (4 workers by default,
    independent of the CPU count) to keep metadata traffic steady on
    network and cloud-synced folders. Paths are processed one depth level
    at a time, so parents are settled before their children. Each worker
    returns its own result; results are merged after the pool drains.
    """

    def __init__(
        self,
        policy: Optional[RetryPolicy] = None,
        max_workers: int = DEFAULT_MAX_WORKERS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the engine.

        Args:
            policy: Retry policy for each creation
            max_workers: Size of the worker pool
            sleep: Delay function used between retries
        """
        self.policy = policy or RetryPolicy()
        self.max_workers = max(1, max_workers)
        self._sleep = sleep

    def _create(self, path: Path) -> CreateResult:
        return CreateWithRetry(path, self.policy, self._sleep).run()

    def ensure_root(self, root: Union[str, Path]) -> bool:
        """
        Make sure a root folder exists.

        Args:
            root: Root folder

        Returns:
            True if the root was created by this call

        Raises:
            RootUnavailableError: If the root is not a directory or cannot be created
        """
        root = normalize_root(root)
        if root.exists() and not root.is_dir():
            raise RootUnavailableError(f"Root path is not a directory: {root}", root)

        result = self._create(root)
        if not result.succeeded:
            raise RootUnavailableError(f"Root cannot be created: {result.error}", root)
        if result.created:
            logger.info(f"Created root: {root}")
        return result.created

    def _ensure_both(self, left_root: Path, right_root: Path, relative_path: str) -> PathResult:
        return PathResult(
            relative_path=relative_path,
            left=self._create(left_root / relative_path),
            right=self._create(right_root / relative_path),
        )

    def reconcile(
        self,
        left_root: Union[str, Path],
        right_root: Union[str, Path],
        union: Iterable[str],
    ) -> SyncOutcome:
        """
        Create every directory of the union on both roots.

        Missing roots are created first. A failure on one path is recorded
        in the outcome and does not stop the others.

        Args:
            left_root: Left root folder
            right_root: Right root folder
            union: Relative directory paths to ensure on both sides

        Returns:
            SyncOutcome with per-side created/existing counts and errors

        Raises:
            RootUnavailableError: If a root cannot be made to exist
        """
        start = time.monotonic()
        left_root = normalize_root(left_root)
        right_root = normalize_root(right_root)
        outcome = SyncOutcome(left_root=left_root, right_root=right_root)

        self.ensure_root(left_root)
        self.ensure_root(right_root)

        work: List[str] = []
        for raw in union:
            try:
                work.append(validate_relative_path(raw))
            except InvalidPathError as e:
                outcome.errors.append(str(e))
        work = sorted(set(work), key=lambda p: (p.count("/"), p))

        results: List[PathResult] = []
        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="treesync-mkdir") as executor:
            for _, level in groupby(work, key=lambda p: p.count("/")):
                batch = tuple(level)
                results.extend(executor.map(
                    lambda rel: self._ensure_both(left_root, right_root, rel),
                    batch,
                ))

        for result in results:
            _tally(outcome, result)

        outcome.duration_ms = int((time.monotonic() - start) * 1000)
        logger.info(
            f"Reconciled {len(work)} directories in {outcome.duration_ms}ms: "
            f"created {outcome.created_left} left / {outcome.created_right} right, "
            f"{len(outcome.errors)} error(s)"
        )
        return outcome

    def ensure_single_path(
        self,
        left_root: Union[str, Path],
        right_root: Union[str, Path],
        relative_path: Union[str, Path],
    ) -> EnsureOutcome:
        """
        Ensure one relative path exists on both roots.

        The path is validated before any filesystem access. A chain of
        several new segments counts as one creation per side.

        Args:
            left_root: Left root folder
            right_root: Right root folder
            relative_path: Path relative to both roots

        Returns:
            EnsureOutcome; ``as_tuple()`` gives (created_left, created_right)

        Raises:
            InvalidPathError: If the path is absolute, contains '..' or a null byte
            RootUnavailableError: If a root cannot be made to exist
        """
        start = time.monotonic()
        relative = validate_relative_path(relative_path)

        left_root = normalize_root(left_root)
        right_root = normalize_root(right_root)
        self.ensure_root(left_root)
        self.ensure_root(right_root)

        result = self._ensure_both(left_root, right_root, relative)
        outcome = EnsureOutcome(relative_path=relative, left_root=left_root, right_root=right_root)
        if result.left.succeeded:
            outcome.created_left = int(result.left.created)
        else:
            outcome.errors.append(result.left.error)
        if result.right.succeeded:
            outcome.created_right = int(result.right.created)
        else:
            outcome.errors.append(result.right.error)

        outcome.duration_ms = int((time.monotonic() - start) * 1000)
        return outcome

    def sync(
        self,
        left_root: Union[str, Path],
        right_root: Union[str, Path],
        exclusion_filter: Optional[ExclusionFilter] = None,
        dry_run: bool = False,
        gitkeep: bool = False,
    ) -> SyncOutcome:
        """
        One-shot synchronization of the directory structure of two roots.

        Args:
            left_root: Left root folder
            right_root: Right root folder
            exclusion_filter: Filter applied to both trees
            dry_run: Only report what would be created
            gitkeep: Write .gitkeep into empty left-side directories

        Returns:
            SyncOutcome (in dry-run mode with planned_* lists filled)

        Raises:
            RootOverlapError: If the roots are the same or nested
            RootUnavailableError: If a root cannot be made to exist
        """
        start = time.monotonic()
        pair = RootPair(left_root, right_root)
        logger.info("Starting directory synchronization")
        logger.info(f"  Left:    {pair.left}")
        logger.info(f"  Right:   {pair.right}")
        logger.info(f"  Dry run: {dry_run}")

        if not dry_run:
            self.ensure_root(pair.left)
            self.ensure_root(pair.right)

        walker = TreeWalker(exclusion_filter)
        left_walk = walker.walk(pair.left)
        right_walk = walker.walk(pair.right)
        warnings = list(left_walk.warnings) + list(right_walk.warnings)

        if dry_run:
            diff = compute_diff(left_walk.directories, right_walk.directories)
            outcome = SyncOutcome(
                existing_left=len(left_walk.directories),
                existing_right=len(right_walk.directories),
                planned_left=sorted(diff.missing_in_left),
                planned_right=sorted(diff.missing_in_right),
                warnings=warnings,
                left_root=pair.left,
                right_root=pair.right,
            )
            for rel in outcome.planned_right:
                logger.info(f"[DRY RUN] Would create: {pair.right / rel}")
            for rel in outcome.planned_left:
                logger.info(f"[DRY RUN] Would create: {pair.left / rel}")
            if gitkeep:
                logger.info("[DRY RUN] Would create .gitkeep files in empty directories")
        else:
            union = left_walk.directories | right_walk.directories
            outcome = self.reconcile(pair.left, pair.right, union)
            outcome.warnings[:0] = warnings
            if gitkeep:
                count, errors = create_gitkeep_files(pair.left, union)
                outcome.gitkeep_created = count
                outcome.errors.extend(errors)

        outcome.duration_ms = int((time.monotonic() - start) * 1000)
        return outcome

    def check(
        self,
        left_root: Union[str, Path],
        right_root: Union[str, Path],
        exclusion_filter: Optional[ExclusionFilter] = None,
    ) -> DiffResult:
        """
        Report directories missing on each side without changing anything.

        Args:
            left_root: Left root folder
            right_root: Right root folder
            exclusion_filter: Filter applied to both trees

        Returns:
            DiffResult carrying enumeration warnings
        """
        pair = RootPair(left_root, right_root)
        walker = TreeWalker(exclusion_filter)
        left_walk = walker.walk(pair.left)
        right_walk = walker.walk(pair.right)

        diff = compute_diff(
            left_walk.directories,
            right_walk.directories,
            left_walk.warnings + right_walk.warnings,
        )
        if diff.has_differences:
            logger.info(
                f"Found {diff.total_differences} differences "
                f"({len(diff.missing_in_right)} missing in right, {len(diff.missing_in_left)} missing in left)"
            )
        else:
            logger.info("No differences found")
        return diff


def _tally(outcome: SyncOutcome, result: PathResult) -> None:
    if not result.left.succeeded:
        outcome.errors.append(result.left.error)
    elif result.left.created:
        outcome.created_left += 1
    else:
        outcome.existing_left += 1

    if not result.right.succeeded:
        outcome.errors.append(result.right.error)
    elif result.right.created:
        outcome.created_right += 1
    else:
        outcome.existing_right += 1


def create_gitkeep_files(root: Path, directories: Iterable[str]) -> Tuple[int, List[str]]:
    """
    Write an empty .gitkeep into every empty directory.

    Existing .gitkeep files are left alone. Paths that are not directories
    (e.g. a creation that failed) are skipped.

    Args:
        root: Root folder
        directories: Relative directory paths under the root

    Returns:
        (number of files created, error messages)
    """
    count = 0
    errors: List[str] = []

    for relative in sorted(directories):
        directory = Path(root) / relative
        if not directory.is_dir():
            continue
        try:
            if any(directory.iterdir()):
                continue
            (directory / GITKEEP_NAME).touch(exist_ok=False)
            logger.debug(f"Created .gitkeep: {directory / GITKEEP_NAME}")
            count += 1
        except FileExistsError:
            continue
        except OSError as e:
            errors.append(f"Failed to create .gitkeep in {directory}: {e.strerror or e}")

    return count, errors
