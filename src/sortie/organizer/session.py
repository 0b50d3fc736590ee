"""Review session: wires input, animation, file operations and the queue.

Swipes and key presses become intents. A directional intent goes through
the card animation, then the file operation, and only a successful file
operation changes the queue. Undo reverses the file operation first and
pops the undo stack only if that worked, so the queue always matches what
is on disk.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Callable, Protocol

from sortie.config import ConfigProvider
from sortie.errors import ConfigurationError
from sortie.logging import (
    get_logger,
    log_operation_complete,
    log_operation_failed,
    log_operation_start,
)
from sortie.models.action import SwipeAction
from sortie.models.clip import VideoClip
from sortie.models.direction import Direction
from sortie.models.result import OperationResult
from sortie.organizer.card import CardAnimationController, Viewport
from sortie.organizer.intents import (
    Intent,
    SetPlaybackRate,
    SwipeIntent,
    ToggleHelp,
    TogglePlayPause,
    UndoIntent,
)
from sortie.organizer.keyboard import KeyboardRouter
from sortie.organizer.store import OrganizerStore, QueueState, UndoEntry
from sortie.organizer.timers import Scheduler

logger = get_logger(__name__)


class EffectExecutor(Protocol):
    """File operations a session delegates to."""

    async def load(self, directory: str | Path) -> OperationResult[list[VideoClip]]: ...

    async def process(self, clip: VideoClip, action: SwipeAction) -> OperationResult[str]: ...

    async def undo(self, current_path: str, original_path: str) -> OperationResult[None]: ...


# notifier(level, message) with level in {"info", "success", "error"}
Notifier = Callable[[str, str], None]


def _silent(level: str, message: str) -> None:
    pass


class OrganizerSession:
    """One review session over a folder of clips.

    Attributes:
        store: Queue and undo stack
        config_provider: Source of the direction-to-action mapping
        executor: File operations
        card: Swipe card animation controller
        keyboard: Keyboard shortcut router
        help_visible: Whether the shortcut help overlay is shown
    """

    def __init__(
        self,
        store: OrganizerStore,
        config_provider: ConfigProvider,
        executor: EffectExecutor,
        scheduler: Scheduler,
        notifier: Notifier | None = None,
        viewport: Viewport | None = None,
    ):
        self.store = store
        self.config_provider = config_provider
        self.executor = executor
        self.scheduler = scheduler
        self.notify = notifier or _silent
        self.help_visible = False
        self.card = CardAnimationController(
            on_swipe=self.handle_swipe,
            scheduler=scheduler,
            viewport=viewport,
            disabled=store.state.current_clip is None,
        )
        self.keyboard = KeyboardRouter(on_intent=self.handle_intent)
        self._unsubscribe = store.subscribe(self._on_store_change)
        self._closed = False
        # File operation plus queue update run one at a time
        self._pipeline = asyncio.Lock()

    @property
    def state(self) -> QueueState:
        return self.store.state

    def close(self) -> None:
        """Detach from the store and stop the card's timers."""
        self._closed = True
        self.keyboard.enabled = False
        self.card.close()
        self._unsubscribe()

    def _on_store_change(self, action_name: str, state: QueueState) -> None:
        self.card.disabled = state.current_clip is None

    async def load_folder(self, directory: str | Path) -> bool:
        """Load a folder into the queue.

        Returns:
            True if the queue now holds clips to review
        """
        directory = str(directory)
        log_operation_start(logger, "load folder", path=directory)
        result = await self.executor.load(directory)

        if not result.ok:
            log_operation_failed(logger, "load folder", result.error, path=directory)
            self.notify("error", f"Failed to load videos: {result.error}")
            return False

        clips = result.data or []
        if not clips:
            self.notify("info", "No videos found in this folder.")
            return False

        self.store.set_source_dir(directory)
        self.store.set_clips(clips)
        log_operation_complete(logger, "load folder", path=directory, clips=len(clips))
        return True

    def handle_intent(self, intent: Intent) -> None:
        """Single entry point for keyboard (and any other) intents."""
        if self._closed:
            return

        if isinstance(intent, SwipeIntent):
            self.card.commit(intent.direction)
        elif isinstance(intent, TogglePlayPause):
            self.store.set_playing(not self.store.state.is_playing)
        elif isinstance(intent, SetPlaybackRate):
            self.store.set_playback_rate(intent.rate)
        elif isinstance(intent, UndoIntent):
            self.scheduler.spawn(self.undo())
        elif isinstance(intent, ToggleHelp):
            self.help_visible = not self.help_visible
        else:
            raise TypeError(f"Unknown intent: {intent!r}")

    def resolve_action(self, direction: Direction) -> SwipeAction | None:
        try:
            return self.config_provider.action_for(direction)
        except ConfigurationError as e:
            logger.error(f"Cannot resolve action for {direction.value}: {e}")
            self.notify("error", f"Organizer settings are unreadable: {e.message}")
            return None

    async def handle_swipe(self, direction: Direction) -> UndoEntry | None:
        """Decide the current clip; the card's decision callback.

        The queue is changed only after the file operation succeeds. On
        failure the clip stays current so the user can try again.
        """
        async with self._pipeline:
            if self._closed:
                return None

            clip = self.store.state.current_clip
            if clip is None:
                return None

            action = self.resolve_action(direction)
            if action is None:
                return None

            log = logger.with_context(clip=clip.filename, direction=direction.value)
            result = await self.executor.process(clip, action)
            if not result.ok:
                log_operation_failed(log, "process clip", result.error, action=action.type)
                self.notify("error", f"Could not process {clip.filename}: {result.error}")
                return None

            if self._closed:
                log.warning("Session closed before the decision was recorded")
                return None

            return self.store.apply_decision(action, clip.path, result.data or clip.path)

    async def undo(self) -> UndoEntry | None:
        """Reverse the last decision, on disk first and then in the queue.

        If the file cannot be moved back the entry stays on the stack and
        the undo can be retried.
        """
        async with self._pipeline:
            entry = self.store.peek_undo()
            if entry is None:
                self.notify("info", "Nothing to undo.")
                return None

            if entry.moved:
                result = await self.executor.undo(entry.current_path, entry.original_path)
                if not result.ok:
                    log_operation_failed(
                        logger.with_context(clip=entry.clip.filename), "undo", result.error
                    )
                    self.notify("error", f"Undo failed: {result.error}")
                    return None

            undone = self.store.undo()
            self.notify("success", f"Restored {entry.clip.filename}")
            return undone
