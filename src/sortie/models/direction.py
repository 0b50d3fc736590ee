"""Swipe directions."""

from __future__ import annotations

from enum import Enum


class Direction(str, Enum):
    """The four directions a clip can be swiped in."""

    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"

    @property
    def is_horizontal(self) -> bool:
        return self in (Direction.LEFT, Direction.RIGHT)

    @property
    def sign(self) -> int:
        """+1 for right/down (screen coordinates grow that way), -1 otherwise."""
        return 1 if self in (Direction.RIGHT, Direction.DOWN) else -1
