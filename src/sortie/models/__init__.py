"""Data models for sortie.

Pydantic models for clips and swipe actions, plus the result type used by
file system operations.
"""

from __future__ import annotations

from sortie.models.action import (
    DeleteAction,
    MoveAction,
    SkipAction,
    SwipeAction,
    action_from_dict,
    action_label,
    parse_action,
)
from sortie.models.direction import Direction
from sortie.models.clip import VideoClip, format_duration, format_file_size
from sortie.models.result import OperationResult

__all__ = [
    # Clip models
    "VideoClip",
    "format_duration",
    "format_file_size",
    # Directions
    "Direction",
    # Action models
    "DeleteAction",
    "MoveAction",
    "SkipAction",
    "SwipeAction",
    "action_from_dict",
    "action_label",
    "parse_action",
    # Results
    "OperationResult",
]
