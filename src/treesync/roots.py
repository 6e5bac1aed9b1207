"""The pair of mirrored root folders."""

from enum import Enum
from pathlib import Path
from typing import Optional, Tuple, Union

from .exceptions import RootOverlapError
from .paths import is_under_root, normalize_root, to_relative


class Side(Enum):
    """Which root of the pair a path belongs to."""
    LEFT = "left"
    RIGHT = "right"

    @property
    def opposite(self) -> "Side":
        return Side.RIGHT if self is Side.LEFT else Side.LEFT


class RootPair:
    """
    Left and right roots of a mirrored pair.

    Provides lookups of which root a path belongs to and the mirrored
    location of a path on the opposite root.
    """

    def __init__(self, left: Union[str, Path], right: Union[str, Path]):
        """
        Initialize the pair.

        Args:
            left: Left root folder
            right: Right root folder

        Raises:
            RootOverlapError: If the roots are the same or nested
        """
        self.left = normalize_root(left)
        self.right = normalize_root(right)

        if self.left == self.right:
            raise RootOverlapError(f"Left and right roots must differ: {self.left}")
        if is_under_root(self.left, self.right):
            raise RootOverlapError(f"'{self.right}' is inside the left root '{self.left}'")
        if is_under_root(self.right, self.left):
            raise RootOverlapError(f"'{self.left}' is inside the right root '{self.right}'")

    def root(self, side: Side) -> Path:
        """Get the root folder for a side."""
        return self.left if side is Side.LEFT else self.right

    def side_for_path(self, path: Path) -> Optional[Side]:
        """
        Find which root contains the given path.

        Args:
            path: Absolute path to check

        Returns:
            The side whose root is an ancestor of the path, or None
        """
        path = Path(path)
        if is_under_root(self.left, path):
            return Side.LEFT
        if is_under_root(self.right, path):
            return Side.RIGHT
        return None

    def mirror(self, path: Path) -> Optional[Tuple[Side, str, Path]]:
        """
        Map a path under one root onto the opposite root.

        Args:
            path: Absolute path under either root

        Returns:
            (source side, relative path, mirrored absolute path), or None
            for paths outside both roots or equal to a root
        """
        side = self.side_for_path(path)
        if side is None:
            return None
        relative = to_relative(self.root(side), Path(path))
        if not relative:
            return None
        return side, relative, self.root(side.opposite) / relative

    def __iter__(self):
        return iter((self.left, self.right))

    def __contains__(self, path: Path) -> bool:
        return self.side_for_path(path) is not None

    def __repr__(self) -> str:
        return f"RootPair(left={str(self.left)!r}, right={str(self.right)!r})"
