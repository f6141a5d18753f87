"""
Service de scan des volumes.

Liste les fichiers video et sous-titres d'un volume, recursivement ou non.
Les fichiers d'un autre type sont ignores.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

from loguru import logger

from cinesync.core.entities import Volume
from cinesync.core.errors import VolumeScanError
from cinesync.utils.constants import is_subtitle_file, is_video_file


@dataclass
class ScanResult:
    """
    Contenu d'un volume, partitionne par type.

    Attributs:
        videos: Chemins des fichiers video, tries
        subtitles: Chemins des fichiers de sous-titres, tries
    """

    videos: list[Path] = field(default_factory=list)
    subtitles: list[Path] = field(default_factory=list)


class VolumeScanner:
    """
    Service listant le contenu d'un volume.

    Une racine illisible leve VolumeScanError : un echec de lecture n'est
    jamais confondu avec un volume vide.
    """

    def list_files(self, volume: Volume) -> ScanResult:
        """
        Liste les videos et sous-titres d'un volume.

        Args:
            volume: Volume a parcourir (recursivement si is_recursive)

        Returns:
            ScanResult avec les chemins tries

        Raises:
            VolumeScanError: Si la racine ou un sous-repertoire est illisible
        """
        if volume.is_recursive:
            paths = self._walk(volume.path)
        else:
            paths = self._list_flat(volume.path)

        result = ScanResult()
        for path in sorted(paths):
            if is_video_file(path):
                result.videos.append(path)
            elif is_subtitle_file(path):
                result.subtitles.append(path)

        logger.debug(
            f"Volume {volume.name}: {len(result.videos)} videos, "
            f"{len(result.subtitles)} sous-titres"
        )
        return result

    def _list_flat(self, root: Path) -> list[Path]:
        """Liste les fichiers directement sous la racine."""
        try:
            with os.scandir(root) as entries:
                return [Path(entry.path) for entry in entries if entry.is_file()]
        except OSError as e:
            raise VolumeScanError(root, str(e)) from e

    def _walk(self, root: Path) -> list[Path]:
        """Liste les fichiers de toute l'arborescence."""
        if not root.is_dir():
            raise VolumeScanError(root, "repertoire introuvable")

        def on_error(error: OSError) -> None:
            raise VolumeScanError(error.filename or root, str(error)) from error

        paths: list[Path] = []
        for dirpath, _dirnames, filenames in os.walk(root, onerror=on_error):
            directory = Path(dirpath)
            paths.extend(directory / name for name in filenames)
        return paths
