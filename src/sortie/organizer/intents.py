"""Intents: input-agnostic commands for a review session.

Pointer gestures and key presses both end up as one of these, and a
single handler set consumes them. The queue never learns where a
decision came from.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from sortie.models.direction import Direction


@dataclass(frozen=True)
class SwipeIntent:
    """Decide the current clip by swiping it in ``direction``."""

    direction: Direction


@dataclass(frozen=True)
class TogglePlayPause:
    pass


@dataclass(frozen=True)
class SetPlaybackRate:
    rate: float


@dataclass(frozen=True)
class UndoIntent:
    pass


@dataclass(frozen=True)
class ToggleHelp:
    pass


Intent = Union[SwipeIntent, TogglePlayPause, SetPlaybackRate, UndoIntent, ToggleHelp]
