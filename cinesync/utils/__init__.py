"""
Utilitaires et constantes pour CineSync.
"""

from cinesync.utils.constants import (
    SUBTITLE_EXTENSIONS,
    VIDEO_EXTENSIONS,
    is_subtitle_file,
    is_video_file,
)

__all__ = [
    "VIDEO_EXTENSIONS",
    "SUBTITLE_EXTENSIONS",
    "is_video_file",
    "is_subtitle_file",
]
