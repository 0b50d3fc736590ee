"""Media module.

File system operations behind a review session: loading a folder of
clips, moving clips to their destination and moving them back on undo.
"""

from sortie.media.files import (
    FileEffectExecutor,
    load_videos,
    process_clip,
    undo_action,
)

__all__ = [
    "FileEffectExecutor",
    "load_videos",
    "process_clip",
    "undo_action",
]
