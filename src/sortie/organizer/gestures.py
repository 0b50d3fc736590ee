"""Swipe gesture recognition.

Tracks one pointer from press to release and classifies how far, and in
which direction, it travelled. Only the first (primary) pointer counts;
a second finger on a touch screen is ignored until the first lifts.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, NamedTuple

from sortie.logging import get_logger
from sortie.models.direction import Direction

logger = get_logger(__name__)

DEFAULT_SWIPE_THRESHOLD = 100.0


@dataclass(frozen=True)
class PointerEvent:
    """A pointer (mouse, pen or touch) event in surface coordinates."""

    pointer_id: int
    x: float
    y: float
    is_primary: bool = True


@dataclass(frozen=True)
class Offset:
    """Displacement from where the gesture started."""

    x: float = 0.0
    y: float = 0.0

    @property
    def distance(self) -> float:
        return math.hypot(self.x, self.y)


ZERO_OFFSET = Offset()

GestureEndCallback = Callable[["Direction | None", Offset], None]


def classify_direction(
    dx: float,
    dy: float,
    threshold: float = DEFAULT_SWIPE_THRESHOLD,
) -> Direction | None:
    """Classify a displacement as a swipe.

    The dominant axis wins; equal magnitudes count as horizontal.

    Args:
        dx: Horizontal displacement (positive = right)
        dy: Vertical displacement (positive = down)
        threshold: Minimum distance for a swipe

    Returns:
        The swipe direction, or None if the pointer did not travel far enough
    """
    if math.hypot(dx, dy) < threshold:
        return None
    if abs(dx) >= abs(dy):
        return Direction.RIGHT if dx > 0 else Direction.LEFT
    return Direction.DOWN if dy > 0 else Direction.UP


class PointerBindings(NamedTuple):
    """Handlers to attach to the interactive surface."""

    down: Callable[[PointerEvent], None]
    move: Callable[[PointerEvent], None]
    up: Callable[[PointerEvent], None]
    cancel: Callable[[PointerEvent], None]


@dataclass(frozen=True)
class _PointerStart:
    pointer_id: int
    x: float
    y: float


class GestureRecognizer:
    """Turns a pointer press-move-release sequence into a swipe.

    Attributes:
        threshold: Minimum travel distance for a swipe
        on_gesture_start: Called when a tracked gesture begins
        on_offset_change: Called with the live offset on every tracked move
        on_gesture_end: Called once per gesture with (direction, final offset)
    """

    def __init__(
        self,
        threshold: float = DEFAULT_SWIPE_THRESHOLD,
        on_gesture_end: GestureEndCallback | None = None,
        on_gesture_start: Callable[[], None] | None = None,
        on_offset_change: Callable[[Offset], None] | None = None,
    ):
        self.threshold = threshold
        self.on_gesture_end = on_gesture_end
        self.on_gesture_start = on_gesture_start
        self.on_offset_change = on_offset_change
        self._start: _PointerStart | None = None
        self._offset = ZERO_OFFSET
        self._dragging = False

    @property
    def offset(self) -> Offset:
        return self._offset

    @property
    def is_dragging(self) -> bool:
        return self._dragging

    @property
    def active_direction(self) -> Direction | None:
        """Direction the live offset would commit to if released now."""
        return classify_direction(self._offset.x, self._offset.y, self.threshold)

    @property
    def bindings(self) -> PointerBindings:
        return PointerBindings(
            down=self.pointer_down,
            move=self.pointer_move,
            up=self.pointer_up,
            cancel=self.pointer_cancel,
        )

    def classify(self, offset: Offset) -> Direction | None:
        return classify_direction(offset.x, offset.y, self.threshold)

    def pointer_down(self, event: PointerEvent) -> None:
        if not event.is_primary or self._start is not None:
            return

        self._start = _PointerStart(event.pointer_id, event.x, event.y)
        self._dragging = True
        logger.debug("Gesture started", extra={"pointer_id": event.pointer_id})
        if self.on_gesture_start:
            self.on_gesture_start()

    def pointer_move(self, event: PointerEvent) -> None:
        start = self._start
        if start is None or start.pointer_id != event.pointer_id:
            return

        self._set_offset(Offset(event.x - start.x, event.y - start.y))

    def pointer_up(self, event: PointerEvent) -> None:
        self._finish(event)

    def pointer_cancel(self, event: PointerEvent) -> None:
        self._finish(event)

    def reset(self) -> None:
        """Zero the offset without ending the gesture or firing callbacks."""
        self._offset = ZERO_OFFSET

    def abandon(self) -> None:
        """Forget the tracked pointer without firing ``on_gesture_end``."""
        self._start = None
        self._dragging = False
        self._offset = ZERO_OFFSET

    def _set_offset(self, offset: Offset) -> None:
        self._offset = offset
        if self.on_offset_change:
            self.on_offset_change(offset)

    def _finish(self, event: PointerEvent) -> None:
        start = self._start
        if start is None or start.pointer_id != event.pointer_id:
            return

        final = Offset(event.x - start.x, event.y - start.y)
        direction = self.classify(final)

        self._start = None
        self._dragging = False
        logger.debug(
            "Gesture ended",
            extra={
                "pointer_id": event.pointer_id,
                "direction": direction.value if direction else None,
                "distance": round(final.distance, 1),
            },
        )
        if self.on_gesture_end:
            self.on_gesture_end(direction, final)
