"""Set difference between two enumerated directory trees."""

from typing import AbstractSet, Iterable

from .models import DiffResult


def compute_diff(left: AbstractSet[str], right: AbstractSet[str], warnings: Iterable[str] = ()) -> DiffResult:
    """
    Compare two directory sets.

    Args:
        left: Relative directory paths under the left root
        right: Relative directory paths under the right root
        warnings: Enumeration warnings to carry along

    Returns:
        DiffResult with (left - right, right - left)
    """
    left = frozenset(left)
    right = frozenset(right)
    return DiffResult(
        missing_in_right=left - right,
        missing_in_left=right - left,
        warnings=tuple(warnings),
    )
