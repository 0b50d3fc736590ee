"""Keyboard shortcuts for a review session.

Maps key presses onto the same intents a swipe gesture produces. Keys
typed into an editable control (a text field in a settings dialog, say)
never reach the session.

    Arrows      swipe up/down/left/right
    Space       play/pause
    1-5         playback speed 0.25x, 0.5x, 1x, 1.5x, 2x
    Z, Cmd/Ctrl+Z  undo
    ?           show/hide shortcut help
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

from sortie.logging import get_logger
from sortie.models.direction import Direction
from sortie.organizer.intents import (
    Intent,
    SetPlaybackRate,
    SwipeIntent,
    ToggleHelp,
    TogglePlayPause,
    UndoIntent,
)

logger = get_logger(__name__)

EDITABLE_TAGS = frozenset({"input", "textarea", "select"})

KEY_TO_SPEED = {
    "1": 0.25,
    "2": 0.5,
    "3": 1.0,
    "4": 1.5,
    "5": 2.0,
}

ARROW_TO_DIRECTION = {
    "ArrowUp": Direction.UP,
    "ArrowDown": Direction.DOWN,
    "ArrowLeft": Direction.LEFT,
    "ArrowRight": Direction.RIGHT,
}

# (keys, description) rows for the shortcut help overlay
SHORTCUT_ROWS = [
    (("↑", "↓", "←", "→"), "Swipe the current clip"),
    (("Space",), "Play / pause"),
    (("1-5",), "Playback speed"),
    (("Z", "Cmd/Ctrl+Z"), "Undo last decision"),
    (("?",), "Show / hide shortcuts"),
]


@dataclass
class KeyTarget:
    """The element a key event was aimed at, with its ancestor chain."""

    tag: str = ""
    content_editable: bool = False
    parent: "KeyTarget | None" = None


@dataclass
class KeyEvent:
    """A key-down event.

    Attributes:
        key: Key value, e.g. "a", "Z", " ", "ArrowLeft", "?"
        target: Focused element, None for the window itself
        meta: Cmd key held
        ctrl: Control key held
    """

    key: str
    target: KeyTarget | None = None
    meta: bool = False
    ctrl: bool = False
    default_prevented: bool = field(default=False, init=False)

    def prevent_default(self) -> None:
        self.default_prevented = True


def is_editable_target(target: KeyTarget | None) -> bool:
    """Check whether ``target`` or any ancestor accepts typed text."""
    node = target
    while node is not None:
        if node.content_editable or node.tag.lower() in EDITABLE_TAGS:
            return True
        node = node.parent
    return False


def map_key(event: KeyEvent) -> Intent | None:
    """Map a key event to an intent, or None if the key is not a shortcut.

    Undo accepts both the bare key and the Cmd/Ctrl form.
    """
    key = event.key

    if key.lower() == "z":
        return UndoIntent()
    if key == "?":
        return ToggleHelp()
    if key == " ":
        return TogglePlayPause()
    if key in KEY_TO_SPEED:
        return SetPlaybackRate(KEY_TO_SPEED[key])
    if key in ARROW_TO_DIRECTION:
        return SwipeIntent(ARROW_TO_DIRECTION[key])
    return None


class KeyboardRouter:
    """Dispatches shortcut keys to a single intent handler."""

    def __init__(self, on_intent: Callable[[Intent], None], enabled: bool = True):
        self.on_intent = on_intent
        self.enabled = enabled

    def handle(self, event: KeyEvent) -> bool:
        """Handle a key-down event.

        Returns:
            True if the key was a shortcut (and its default was prevented)
        """
        if not self.enabled or is_editable_target(event.target):
            return False

        intent = map_key(event)
        if intent is None:
            return False

        event.prevent_default()
        logger.debug("Key shortcut", extra={"key": event.key, "intent": type(intent).__name__})
        self.on_intent(intent)
        return True
