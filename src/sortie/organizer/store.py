"""Review queue and undo stack.

The store is the single source of truth for which clip is current and how
to reverse each decision. The queue is consumed from the front: deciding
a clip removes it and the next one slides into the current slot. Undo
puts the clip back at the position it was removed from, so applying a
decision and undoing it leaves the queue exactly as it was.

Only the most recent decision can be undone; there is no redo.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Callable

from sortie.logging import get_logger
from sortie.models.action import SwipeAction
from sortie.models.clip import VideoClip

logger = get_logger(__name__)

DEFAULT_PLAYBACK_RATE = 1.0
PRELOAD_COUNT = 2


@dataclass(frozen=True)
class UndoEntry:
    """Everything needed to reverse one decision.

    Attributes:
        clip: The clip that was decided
        action: The action applied to it
        original_path: Where the file was before the action ran
        removed_index: Queue position the clip was removed from
        current_path: Where the file is now (same as original_path for Skip)
    """

    clip: VideoClip
    action: SwipeAction
    original_path: str
    removed_index: int
    current_path: str = ""

    def __post_init__(self):
        if not self.current_path:
            object.__setattr__(self, "current_path", self.original_path)

    @property
    def moved(self) -> bool:
        """True if the file was physically relocated by the decision."""
        return self.current_path != self.original_path


@dataclass(frozen=True)
class QueueState:
    """Immutable snapshot of the store."""

    clips: tuple[VideoClip, ...] = ()
    current_index: int = 0
    processed_count: int = 0
    undo_stack: tuple[UndoEntry, ...] = ()
    playback_rate: float = DEFAULT_PLAYBACK_RATE
    is_playing: bool = False
    source_dir: str | None = None

    @property
    def current_clip(self) -> VideoClip | None:
        if self.current_index < len(self.clips):
            return self.clips[self.current_index]
        return None

    @property
    def is_exhausted(self) -> bool:
        """True when every clip has been decided ("all caught up")."""
        return self.current_index >= len(self.clips)

    @property
    def remaining(self) -> int:
        return len(self.clips) - self.current_index

    @property
    def total(self) -> int:
        return self.processed_count + len(self.clips)

    @property
    def progress_percent(self) -> float:
        if self.total <= 0:
            return 0.0
        return min(100.0, max(0.0, self.processed_count / self.total * 100))

    @property
    def preload_next(self) -> tuple[VideoClip, ...]:
        """Clips after the current one, worth warming up for playback."""
        start = self.current_index + 1
        return self.clips[start : start + PRELOAD_COUNT]

    @property
    def can_undo(self) -> bool:
        return bool(self.undo_stack)


StoreListener = Callable[[str, QueueState], None]


@dataclass
class _Session:
    clips: list[VideoClip] = field(default_factory=list)
    current_index: int = 0
    processed_count: int = 0
    undo_stack: list[UndoEntry] = field(default_factory=list)


class OrganizerStore:
    """Owns the review queue, the current-clip pointer and the undo stack.

    Every operation is atomic: it runs under a lock and listeners are
    notified with the resulting snapshot only once it is complete.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._session = _Session()
        self._playback_rate = DEFAULT_PLAYBACK_RATE
        self._is_playing = False
        self._source_dir: str | None = None
        self._listeners: list[StoreListener] = []

    @property
    def state(self) -> QueueState:
        with self._lock:
            return self._snapshot()

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        """Register ``listener(action_name, state)`` for every mutation.

        Returns:
            Function that removes the listener
        """
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def set_clips(self, clips: list[VideoClip]) -> None:
        """Start a fresh review of ``clips``; clears progress and undo history."""
        with self._lock:
            self._session = _Session(clips=list(clips))
            state = self._snapshot()
        logger.info(f"Queue loaded with {len(clips)} clips")
        self._emit("set_clips", state)

    def set_source_dir(self, path: str) -> None:
        with self._lock:
            self._source_dir = path
            state = self._snapshot()
        self._emit("set_source_dir", state)

    def apply_decision(
        self,
        action: SwipeAction,
        original_path: str | None = None,
        current_path: str | None = None,
    ) -> UndoEntry | None:
        """Remove the current clip and record how to reverse it.

        Args:
            action: Action that was applied to the clip
            original_path: Where the file was before the action; defaults
                to the clip's path
            current_path: Where the file is now; defaults to original_path

        Returns:
            The new undo entry, or None when there is no current clip
        """
        with self._lock:
            session = self._session
            if session.current_index >= len(session.clips):
                return None

            removed_index = session.current_index
            clip = session.clips[removed_index]
            resolved_original = original_path if original_path is not None else clip.path
            entry = UndoEntry(
                clip=clip,
                action=action,
                original_path=resolved_original,
                removed_index=removed_index,
                current_path=current_path or resolved_original,
            )

            del session.clips[removed_index]
            session.current_index = min(removed_index, len(session.clips))
            session.processed_count += 1
            session.undo_stack.append(entry)
            state = self._snapshot()

        logger.info(
            "Decision applied",
            extra={"clip": clip.filename, "action": action.type, "processed": state.processed_count},
        )
        self._emit("apply_decision", state)
        return entry

    def peek_undo(self) -> UndoEntry | None:
        """The entry the next undo would reverse, without removing it."""
        with self._lock:
            stack = self._session.undo_stack
            return stack[-1] if stack else None

    def undo(self) -> UndoEntry | None:
        """Reverse the most recent decision.

        The clip is reinserted where it was removed from (clamped to the
        current queue length) and becomes current again.

        Returns:
            The reversed entry, or None when there is nothing to undo
        """
        with self._lock:
            session = self._session
            if not session.undo_stack:
                return None

            entry = session.undo_stack.pop()
            insert_index = min(entry.removed_index, len(session.clips))
            session.clips.insert(insert_index, entry.clip)
            session.current_index = insert_index
            session.processed_count = max(session.processed_count - 1, 0)
            state = self._snapshot()

        logger.info(
            "Decision undone",
            extra={"clip": entry.clip.filename, "action": entry.action.type, "processed": state.processed_count},
        )
        self._emit("undo", state)
        return entry

    def set_playback_rate(self, rate: float) -> None:
        with self._lock:
            self._playback_rate = rate
            state = self._snapshot()
        self._emit("set_playback_rate", state)

    def set_playing(self, playing: bool) -> None:
        with self._lock:
            self._is_playing = playing
            state = self._snapshot()
        self._emit("set_playing", state)

    def reset(self) -> None:
        """Clear the queue, progress, undo history and source folder."""
        with self._lock:
            self._session = _Session()
            self._is_playing = False
            self._source_dir = None
            state = self._snapshot()
        self._emit("reset", state)

    def _snapshot(self) -> QueueState:
        session = self._session
        return QueueState(
            clips=tuple(session.clips),
            current_index=session.current_index,
            processed_count=session.processed_count,
            undo_stack=tuple(session.undo_stack),
            playback_rate=self._playback_rate,
            is_playing=self._is_playing,
            source_dir=self._source_dir,
        )

    def _emit(self, action_name: str, state: QueueState) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            listener(action_name, state)
