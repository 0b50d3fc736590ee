"""Video clip model for sortie.

A VideoClip is one file waiting for a decision. Clips are created by the
folder loader and never modified afterwards; a decision removes the clip
from the queue, it does not change it.
"""

from __future__ import annotations

import math
from pathlib import Path

from pydantic import BaseModel, ConfigDict

VIDEO_EXTENSIONS = ("mp4", "mov")


class VideoClip(BaseModel):
    """A video file discovered in the review folder."""

    model_config = ConfigDict(frozen=True)

    id: str
    path: str
    filename: str
    size: int = 0  # File size in bytes
    duration_secs: float = 0.0  # 0.0 when unknown
    format: str = ""  # Lowercase extension, e.g. "mp4"

    @classmethod
    def from_path(cls, path: Path, size: int = 0, duration_secs: float = 0.0) -> "VideoClip":
        """Build a clip whose identity is its absolute path."""
        path_str = str(path)
        return cls(
            id=path_str,
            path=path_str,
            filename=path.name,
            size=size,
            duration_secs=duration_secs,
            format=path.suffix.lstrip(".").lower(),
        )


def format_file_size(size: int) -> str:
    """Format a byte count, e.g. ``1536 -> "1.50 KB"``."""
    if size <= 0:
        return "0 B"
    units = ["B", "KB", "MB", "GB"]
    exponent = min(int(math.log(size, 1024)), len(units) - 1)
    return f"{size / 1024 ** exponent:.2f} {units[exponent]}"


def format_duration(seconds: float) -> str:
    """Format seconds as ``m:ss`` or ``h:mm:ss``."""
    if seconds <= 0:
        return "0:00"
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(seconds % 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"
