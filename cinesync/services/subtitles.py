"""
Correlation entre fichiers video et sous-titres externes.

Convention de nommage : un sous-titre appartient a une video s'il se
trouve dans le meme repertoire et si son nom commence par le nom de la
video sans extension. Ce qui separe ce prefixe de l'extension du
sous-titre est le code langue (ex: "Movie.mkv" et "Movie.en.srt").
"""

from pathlib import Path

from loguru import logger

from cinesync.core.entities import Subtitle
from cinesync.utils.constants import is_subtitle_file, is_video_file

_LANGUAGE_SEPARATORS = frozenset(".-_ ")


def _language_tag(remainder: str, extension: str) -> str:
    """Extrait le code langue du reste du nom (prefixe video retire)."""
    if remainder == extension:
        return ""
    tag = remainder[: len(remainder) - len(extension)]
    if tag and tag[0] in _LANGUAGE_SEPARATORS:
        tag = tag[1:]
    return tag


def subtitles_for(media_path: Path, candidates: list[Path]) -> list[Subtitle]:
    """
    Selectionne les sous-titres rattaches a une video.

    Args:
        media_path: Chemin du fichier video
        candidates: Chemins de sous-titres candidats

    Returns:
        Sous-titres du meme repertoire dont le nom commence par celui de la video
    """
    media_stem = media_path.stem
    subtitles: list[Subtitle] = []

    for candidate in candidates:
        if candidate.parent != media_path.parent:
            continue
        if not candidate.name.startswith(media_stem):
            continue
        remainder = candidate.name[len(media_stem):]
        subtitles.append(
            Subtitle(path=candidate, language=_language_tag(remainder, candidate.suffix))
        )

    return subtitles


def _list_directory(directory: Path) -> list[Path]:
    """Liste les fichiers d'un repertoire, vide si illisible."""
    try:
        return sorted(entry for entry in directory.iterdir() if entry.is_file())
    except OSError as e:
        logger.warning(f"Lecture impossible de {directory}: {e}")
        return []


def related_subtitle_files(media_path: Path) -> list[Path]:
    """
    Liste les fichiers de sous-titres voisins d'une video.

    Args:
        media_path: Chemin du fichier video

    Returns:
        Sous-titres du meme repertoire dont le nom commence par celui de la video
    """
    media_stem = media_path.stem
    return [
        path
        for path in _list_directory(media_path.parent)
        if path.name.startswith(media_stem) and is_subtitle_file(path)
    ]


def related_media_for(subtitle_path: Path) -> list[tuple[Path, Subtitle]]:
    """
    Trouve les videos auxquelles un sous-titre se rattache.

    Les candidats sont les videos du meme repertoire partageant le prefixe du
    sous-titre (jusqu'au premier point). Plusieurs videos peuvent
    correspondre (ex: meme nom en deux qualites).

    Args:
        subtitle_path: Chemin du fichier de sous-titres

    Returns:
        Liste de tuples (chemin video, sous-titre avec sa langue)
    """
    prefix = subtitle_path.name.split(".", 1)[0]
    related: list[tuple[Path, Subtitle]] = []

    for path in _list_directory(subtitle_path.parent):
        if not path.name.startswith(prefix) or not is_video_file(path):
            continue
        for subtitle in subtitles_for(path, [subtitle_path]):
            related.append((path, subtitle))

    return related
