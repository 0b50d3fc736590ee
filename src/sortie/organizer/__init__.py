"""Organizer module: the interactive decision pipeline.

Gesture recognition, keyboard shortcuts, the swipe card animation and the
review queue with its undo stack.
"""

from sortie.organizer.card import CardAnimationController, CardState, Viewport
from sortie.organizer.gestures import GestureRecognizer, Offset, PointerEvent, classify_direction
from sortie.organizer.intents import (
    Intent,
    SetPlaybackRate,
    SwipeIntent,
    ToggleHelp,
    TogglePlayPause,
    UndoIntent,
)
from sortie.organizer.keyboard import KeyboardRouter, KeyEvent, KeyTarget
from sortie.organizer.session import OrganizerSession
from sortie.organizer.store import OrganizerStore, QueueState, UndoEntry
from sortie.organizer.timers import AsyncioScheduler, Scheduler

__all__ = [
    "AsyncioScheduler",
    "CardAnimationController",
    "CardState",
    "GestureRecognizer",
    "Intent",
    "KeyboardRouter",
    "KeyEvent",
    "KeyTarget",
    "Offset",
    "OrganizerSession",
    "OrganizerStore",
    "PointerEvent",
    "QueueState",
    "Scheduler",
    "SetPlaybackRate",
    "SwipeIntent",
    "ToggleHelp",
    "TogglePlayPause",
    "UndoEntry",
    "UndoIntent",
    "Viewport",
    "classify_direction",
]
