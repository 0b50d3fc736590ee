"""Swipe card animation state machine.

The card follows the pointer while it is dragged, flies off screen when a
swipe commits, and shakes when a drag is released short of the threshold.
The decision callback runs once the exit animation has had time to play:

    IDLE --down--> DRAGGING --swipe--> EXIT_ANIMATING --200ms + callback--> IDLE
                       |
                       +--released short--> IDLE (shaking for 180ms)

A swipe that lands while an earlier card is still leaving starts its own
exit and its own decision; the card returns to IDLE once the last pending
exit has finished. Pointer movement does not move a leaving card.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable

from sortie.logging import get_logger
from sortie.models.direction import Direction
from sortie.organizer.gestures import (
    DEFAULT_SWIPE_THRESHOLD,
    ZERO_OFFSET,
    GestureRecognizer,
    Offset,
    PointerBindings,
)
from sortie.organizer.timers import EXIT_DELAY, SHAKE_DURATION, Scheduler, TimerHandle

logger = get_logger(__name__)

EXIT_DISTANCE_X = 0.85  # fraction of viewport width
EXIT_DISTANCE_Y = 0.65  # fraction of viewport height
MIN_OPACITY = 0.7
OPACITY_FALLOFF_DISTANCE = 520.0
ROTATION_PER_PIXEL = 0.035  # degrees

SwipeCallback = Callable[[Direction], "Awaitable[None] | None"]


class CardState(str, Enum):
    """Visual state of the swipe card."""

    IDLE = "idle"
    DRAGGING = "dragging"
    EXIT_ANIMATING = "exit_animating"


@dataclass(frozen=True)
class Viewport:
    """Size of the area the card can fly out of."""

    width: float = 1280.0
    height: float = 720.0


def compute_exit_offset(direction: Direction, offset: Offset, viewport: Viewport) -> Offset:
    """Off-screen offset for a card leaving in ``direction``.

    The axis of travel goes off screen; the other axis keeps where the
    gesture ended so a diagonal fling leaves diagonally.
    """
    if direction.is_horizontal:
        return Offset(direction.sign * viewport.width * EXIT_DISTANCE_X, offset.y)
    return Offset(offset.x, direction.sign * viewport.height * EXIT_DISTANCE_Y)


def card_opacity(offset: Offset) -> float:
    return max(MIN_OPACITY, 1 - min(offset.distance / OPACITY_FALLOFF_DISTANCE, 1 - MIN_OPACITY))


def card_rotation(offset: Offset) -> float:
    return offset.x * ROTATION_PER_PIXEL


class CardAnimationController:
    """Drives the swipe card and sequences the decision callback.

    Attributes:
        on_swipe: Decision callback, sync or async, awaited after the exit delay
        scheduler: Owner of the exit and shake timers
        viewport: Size used to compute the exit offset
        recognizer: Gesture recognizer feeding this card
    """

    def __init__(
        self,
        on_swipe: SwipeCallback,
        scheduler: Scheduler,
        viewport: Viewport | None = None,
        threshold: float = DEFAULT_SWIPE_THRESHOLD,
        disabled: bool = False,
    ):
        self.on_swipe = on_swipe
        self.scheduler = scheduler
        self.viewport = viewport or Viewport()
        self.recognizer = GestureRecognizer(
            threshold=threshold,
            on_gesture_end=self._on_gesture_end,
            on_gesture_start=self._on_gesture_start,
            on_offset_change=self._on_offset_change,
        )
        self._disabled = disabled
        self._state = CardState.IDLE
        self._shaking = False
        self._display_offset = ZERO_OFFSET
        self._exit_timers: list[TimerHandle] = []
        self._pending_exits = 0
        self._shake_timer: TimerHandle | None = None
        self._listeners: list[Callable[["CardAnimationController"], None]] = []

    @property
    def state(self) -> CardState:
        return self._state

    @property
    def is_shaking(self) -> bool:
        return self._shaking

    @property
    def is_animating_out(self) -> bool:
        return self._state == CardState.EXIT_ANIMATING

    @property
    def pending_exits(self) -> int:
        """Exits started whose decision callback has not finished yet."""
        return self._pending_exits

    @property
    def display_offset(self) -> Offset:
        return self._display_offset

    @property
    def opacity(self) -> float:
        return card_opacity(self._display_offset)

    @property
    def rotation(self) -> float:
        return card_rotation(self._display_offset)

    @property
    def active_direction(self) -> Direction | None:
        return self.recognizer.active_direction

    @property
    def bindings(self) -> PointerBindings | None:
        """Pointer handlers for the surface; None while disabled."""
        if self._disabled:
            return None
        return self.recognizer.bindings

    @property
    def disabled(self) -> bool:
        return self._disabled

    @disabled.setter
    def disabled(self, value: bool) -> None:
        if value == self._disabled:
            return
        self._disabled = value
        if value and self.recognizer.is_dragging:
            # Surface detached mid-drag: no release will arrive
            self.recognizer.abandon()
            self._settle_unless_exiting()

    def subscribe(self, listener: Callable[["CardAnimationController"], None]) -> Callable[[], None]:
        """Register a listener called after every visual change.

        Returns:
            Function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def commit(self, direction: Direction) -> bool:
        """Swipe programmatically, as the keyboard does.

        A pointer still held down is forgotten, so its release cannot
        decide a second time.

        Returns:
            True if the exit animation started
        """
        if self._disabled:
            self._start_shake()
            return False
        if self.recognizer.is_dragging:
            self.recognizer.abandon()
        offset = ZERO_OFFSET if self.is_animating_out else self._display_offset
        self._start_exit(direction, offset)
        return True

    def close(self) -> None:
        """Cancel pending timers when the card goes away."""
        for timer in [*self._exit_timers, self._shake_timer]:
            if timer is not None:
                timer.cancel()
        self._exit_timers.clear()
        self._shake_timer = None
        self._listeners.clear()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    def _on_gesture_start(self) -> None:
        if self._disabled or self._state == CardState.EXIT_ANIMATING:
            return
        self._state = CardState.DRAGGING
        self._notify()

    def _on_offset_change(self, offset: Offset) -> None:
        if self._disabled or self._state == CardState.EXIT_ANIMATING:
            return
        self._display_offset = offset
        self._notify()

    def _on_gesture_end(self, direction: Direction | None, offset: Offset) -> None:
        if self._disabled:
            self.recognizer.reset()
            self._settle_unless_exiting()
            return

        if direction is None:
            self.recognizer.reset()
            self._settle_unless_exiting()
            self._start_shake()
            return

        self._start_exit(direction, offset)

    def _start_exit(self, direction: Direction, offset: Offset) -> None:
        self._pending_exits += 1
        self._state = CardState.EXIT_ANIMATING
        self._display_offset = compute_exit_offset(direction, offset, self.viewport)
        logger.debug(
            "Card exiting",
            extra={"direction": direction.value, "pending_exits": self._pending_exits},
        )
        self._notify()

        timer: TimerHandle | None = None

        def on_timeout() -> None:
            if timer in self._exit_timers:
                self._exit_timers.remove(timer)
            self.scheduler.spawn(self._complete_exit(direction))

        timer = self.scheduler.call_later(EXIT_DELAY, on_timeout)
        self._exit_timers.append(timer)

    async def _complete_exit(self, direction: Direction) -> None:
        try:
            result: Any = self.on_swipe(direction)
            if inspect.isawaitable(result):
                await result
        finally:
            self._pending_exits -= 1
            if self._pending_exits == 0:
                self.recognizer.reset()
                self._settle()

    def _settle_unless_exiting(self) -> None:
        if self._pending_exits == 0:
            self._settle()

    def _settle(self) -> None:
        self._display_offset = ZERO_OFFSET
        # A drag started while the last card was leaving takes over
        if self.recognizer.is_dragging and not self._disabled:
            self._state = CardState.DRAGGING
        else:
            self._state = CardState.IDLE
        self._notify()

    def _start_shake(self) -> None:
        if self._shake_timer is not None:
            self._shake_timer.cancel()
        self._shaking = True
        self._notify()

        def on_timeout() -> None:
            self._shake_timer = None
            self._shaking = False
            self._notify()

        self._shake_timer = self.scheduler.call_later(SHAKE_DURATION, on_timeout)
