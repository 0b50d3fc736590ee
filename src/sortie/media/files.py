"""File system side of a review session.

Three operations, each reporting an OperationResult instead of raising:
- load_videos: list the clips in a folder
- process_clip: carry out a swipe action on disk
- undo_action: move a processed clip back where it came from

None of them touch the review queue; the session applies the queue change
only after the file operation succeeded.
"""

from __future__ import annotations

import asyncio
import os
import shutil
import sys
from pathlib import Path

from sortie.errors import SortieError, wrap_os_error
from sortie.logging import get_logger
from sortie.models.action import TRASH_FOLDER, DeleteAction, MoveAction, SkipAction, SwipeAction
from sortie.models.clip import VIDEO_EXTENSIONS, VideoClip
from sortie.models.result import OperationResult

logger = get_logger(__name__)

# Source folders the user may not review
if sys.platform == "win32":
    BLOCKED_PATH_PREFIXES = ("C:\\Windows", "C:\\Program Files", "C:\\Program Files (x86)")
else:
    BLOCKED_PATH_PREFIXES = ("/usr", "/etc", "/bin", "/sbin", "/lib", "/System")


def is_blocked_directory(path: Path) -> bool:
    """Check whether ``path`` lies in a system directory."""
    return str(path).startswith(BLOCKED_PATH_PREFIXES)


def has_video_extension(path: Path) -> bool:
    return path.suffix.lstrip(".").lower() in VIDEO_EXTENSIONS


def load_videos(directory: str | Path) -> OperationResult[list[VideoClip]]:
    """Load the video clips directly inside ``directory``.

    Subfolders (including destination folders and the trash) are not
    scanned. Clips are sorted by filename.

    Args:
        directory: Folder to review

    Returns:
        Success with the clips (possibly none), or failure with a message
    """
    path = Path(directory)
    if not path.is_dir():
        return OperationResult.failure("Path is not a directory")
    if is_blocked_directory(path):
        return OperationResult.failure("Access to system directories is not allowed")

    clips = []
    try:
        for entry in path.iterdir():
            if not entry.is_file() or not has_video_extension(entry):
                continue
            try:
                size = entry.stat().st_size
            except OSError:
                size = 0
            clips.append(VideoClip.from_path(entry.absolute(), size=size))
    except OSError as e:
        return OperationResult.failure(f"Failed to read directory: {e}")

    clips.sort(key=lambda c: c.filename)
    logger.info(f"Loaded {len(clips)} video clips from {path}")
    return OperationResult.success(clips)


def resolve_target_dir(clip: VideoClip, action: SwipeAction) -> Path | None:
    """Folder the clip ends up in, or None when the action leaves it alone."""
    parent_dir = Path(clip.path).parent
    if isinstance(action, SkipAction):
        return None
    if isinstance(action, DeleteAction):
        return parent_dir / TRASH_FOLDER
    if isinstance(action, MoveAction):
        target = Path(action.target).expanduser()
        return target if target.is_absolute() else parent_dir / target
    raise TypeError(f"Unsupported action: {action!r}")


def process_clip(clip: VideoClip, action: SwipeAction) -> OperationResult[str]:
    """Carry out ``action`` on the clip's file.

    Returns:
        Success with the file's new path (unchanged for Skip), or failure
    """
    source_path = Path(clip.path)
    if not source_path.exists():
        return OperationResult.failure("Source file not found")

    target_dir = resolve_target_dir(clip, action)
    if target_dir is None:
        return OperationResult.success(clip.path)

    target_path = target_dir / source_path.name
    if target_path.exists():
        return OperationResult.failure(f"Target file already exists: {target_path}")

    try:
        target_dir.mkdir(parents=True, exist_ok=True)
        shutil.move(str(source_path), str(target_path))
    except OSError as e:
        error = wrap_os_error(e, "move file", str(source_path))
        logger.warning(error.message, extra=error.context)
        return OperationResult.failure(error.message)

    logger.info(f"Moved {source_path} to {target_path}")
    return OperationResult.success(str(target_path))


def undo_action(current_path: str, original_path: str) -> OperationResult[None]:
    """Move a processed clip from ``current_path`` back to ``original_path``."""
    current = Path(current_path)
    original = Path(original_path)

    if not current.exists():
        return OperationResult.failure(f"File not found at current path: {current}")
    if original.exists():
        return OperationResult.failure(f"File already exists at original path: {original}")

    try:
        original.parent.mkdir(parents=True, exist_ok=True)
        shutil.move(str(current), str(original))
    except OSError as e:
        error: SortieError = wrap_os_error(e, "move file back", str(current))
        logger.warning(error.message, extra=error.context)
        return OperationResult.failure(error.message)

    logger.info(f"Restored {current} to {original}")
    return OperationResult.success()


class FileEffectExecutor:
    """Runs the file operations off the event loop.

    A review session awaits these so the interface stays responsive
    while a large file is being moved across drives.
    """

    async def load(self, directory: str | Path) -> OperationResult[list[VideoClip]]:
        return await asyncio.to_thread(load_videos, os.fspath(directory))

    async def process(self, clip: VideoClip, action: SwipeAction) -> OperationResult[str]:
        return await asyncio.to_thread(process_clip, clip, action)

    async def undo(self, current_path: str, original_path: str) -> OperationResult[None]:
        return await asyncio.to_thread(undo_action, current_path, original_path)
