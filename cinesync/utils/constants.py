"""
Constantes globales pour CineSync.

Ce module contient:
- Extensions video reconnues
- Extensions de sous-titres reconnues
- Helpers de classification par extension (insensibles a la casse)

Tout fichier dont l'extension n'appartient a aucune des deux listes
est ignore par le scan, la synchronisation et la surveillance.
"""

from pathlib import Path

# Extensions video reconnues
VIDEO_EXTENSIONS = frozenset({
    ".mkv",
    ".mp4",
    ".m4p",
    ".m4v",
    ".mpg",
    ".mp2",
    ".mpeg",
    ".mpe",
    ".mpv",
    ".m2v",
    ".avi",
    ".webm",
    ".flv",
    ".f4v",
    ".f4p",
    ".f4a",
    ".f4b",
    ".vob",
    ".ogv",
    ".ogg",
    ".mts",
    ".m2ts",
    ".ts",
    ".mov",
    ".wmv",
    ".yuv",
    ".asf",
})

# Extensions de sous-titres reconnues
SUBTITLE_EXTENSIONS = frozenset({
    ".srt",
    ".ssa",
    ".ass",
    ".sub",
    ".idx",
    ".smi",
    ".sami",
    ".smil",
    ".usf",
    ".psb",
    ".ssd",
    ".vtt",
})


def is_video_file(path: Path | str) -> bool:
    """Vérifie si le fichier a une extension video."""
    return Path(path).suffix.lower() in VIDEO_EXTENSIONS


def is_subtitle_file(path: Path | str) -> bool:
    """Vérifie si le fichier a une extension de sous-titres."""
    return Path(path).suffix.lower() in SUBTITLE_EXTENSIONS


def is_media_file(path: Path | str) -> bool:
    """Vérifie si le fichier est une video ou un sous-titre."""
    return is_video_file(path) or is_subtitle_file(path)
