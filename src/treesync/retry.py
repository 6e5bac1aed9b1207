"""Create-with-retry state machine for directory creation."""

import errno
import logging
import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Union

from .exceptions import IOFailure, PermanentIOFailure, TransientIOFailure
from .models import CreateResult, CreateState

logger = logging.getLogger(__name__)

# Permission races and busy/locked entries reported while another process
# (or a cloud sync client) is touching the same folder.
TRANSIENT_ERRNOS = frozenset(
    code for code in (
        errno.EACCES,
        errno.EPERM,
        errno.EBUSY,
        errno.EAGAIN,
        getattr(errno, "ETXTBSY", None),
    ) if code is not None
)

# ERROR_ACCESS_DENIED, ERROR_SHARING_VIOLATION, ERROR_LOCK_VIOLATION
TRANSIENT_WINERRORS = frozenset({5, 32, 33})


def is_transient(exc: OSError) -> bool:
    """Check whether an OS error is expected to clear up on its own."""
    winerror = getattr(exc, "winerror", None)
    if winerror is not None:
        return winerror in TRANSIENT_WINERRORS
    return exc.errno in TRANSIENT_ERRNOS


def classify_os_error(path: Path, exc: Union[OSError, ValueError], attempts: int = 1) -> IOFailure:
    """
    Wrap an OS error into a transient or permanent failure.

    A ValueError (e.g. an embedded null byte) is a permanent EINVAL.

    Args:
        path: Directory that could not be created
        exc: The underlying error
        attempts: Attempts made so far

    Returns:
        TransientIOFailure or PermanentIOFailure
    """
    if isinstance(exc, ValueError):
        return PermanentIOFailure(path, OSError(errno.EINVAL, str(exc)), attempts)
    if is_transient(exc):
        return TransientIOFailure(path, exc, attempts)
    return PermanentIOFailure(path, exc, attempts)


@dataclass(frozen=True)
class RetryPolicy:
    """
    Bounded exponential backoff.

    Attributes:
        max_retries: Retries allowed after the first attempt
        initial_delay: Seconds to wait before the first retry
        multiplier: Factor applied to the delay after each retry
    """
    max_retries: int = 3
    initial_delay: float = 0.05
    multiplier: float = 2.0

    def delay_for(self, retry: int) -> float:
        """Delay in seconds before the given retry (1-based)."""
        return self.initial_delay * (self.multiplier ** (retry - 1))


def _make_directory(path: Path) -> None:
    os.makedirs(path, exist_ok=True)


class CreateWithRetry:
    """
    Creates one directory chain, retrying transient failures.

    States: PENDING -> RETRYING* -> SUCCEEDED | FAILED. A directory that
    already exists counts as success with ``created=False``.
    """

    def __init__(
        self,
        path: Path,
        policy: Optional[RetryPolicy] = None,
        sleep: Callable[[float], None] = time.sleep,
        mkdir: Callable[[Path], None] = _make_directory,
    ):
        """
        Initialize the state machine.

        Args:
            path: Absolute directory path to create
            policy: Retry policy (defaults to 3 retries, 50ms, x2)
            sleep: Delay function, injectable for tests
            mkdir: Directory creation function, injectable for tests
        """
        self.path = Path(path)
        self.policy = policy or RetryPolicy()
        self._sleep = sleep
        self._mkdir = mkdir
        self.state = CreateState.PENDING
        self.attempts = 0
        self.retries = 0
        self.history: List[CreateState] = [CreateState.PENDING]
        self.failure: Optional[IOFailure] = None

    def _transition(self, state: CreateState) -> None:
        self.state = state
        self.history.append(state)

    def _attempt(self) -> bool:
        if self.path.is_dir():
            return False
        self._mkdir(self.path)
        return True

    def run(self) -> CreateResult:
        """
        Drive the state machine to a terminal state.

        Returns:
            CreateResult in state SUCCEEDED or FAILED
        """
        if self.state in (CreateState.SUCCEEDED, CreateState.FAILED):
            raise RuntimeError(f"CreateWithRetry for {self.path} already finished")

        while True:
            self.attempts += 1
            try:
                created = self._attempt()
            except (OSError, ValueError) as e:
                failure = classify_os_error(self.path, e, self.attempts)
                if isinstance(failure, TransientIOFailure) and self.retries < self.policy.max_retries:
                    self.retries += 1
                    delay = self.policy.delay_for(self.retries)
                    self._transition(CreateState.RETRYING)
                    logger.warning(
                        f"Transient error creating {self.path} "
                        f"(retry {self.retries}/{self.policy.max_retries} in {delay * 1000:.0f}ms): {e}"
                    )
                    self._sleep(delay)
                    continue

                self.failure = failure
                self._transition(CreateState.FAILED)
                logger.error(f"{failure} (after {self.attempts} attempt(s))")
                return CreateResult(
                    path=self.path,
                    state=CreateState.FAILED,
                    attempts=self.attempts,
                    error=str(failure),
                )

            self._transition(CreateState.SUCCEEDED)
            if created:
                logger.info(f"Created directory: {self.path}")
            return CreateResult(
                path=self.path,
                state=CreateState.SUCCEEDED,
                created=created,
                attempts=self.attempts,
            )


def create_directory(
    path: Path,
    policy: Optional[RetryPolicy] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> CreateResult:
    """
    Create a directory (and parents) with bounded retry.

    Args:
        path: Absolute directory path
        policy: Retry policy
        sleep: Delay function

    Returns:
        CreateResult describing the terminal state
    """
    return CreateWithRetry(path, policy, sleep).run()
