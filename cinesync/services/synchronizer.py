"""
Synchronisation d'un volume avec le catalogue.

Reconcilie le contenu disque d'un volume avec les entrees stockees :
ajout des videos et sous-titres absents du catalogue, retrait des copies
et sous-titres qui n'existent plus sur le disque. Une seconde execution
sans changement sur le disque ne modifie rien.
"""

from dataclasses import dataclass

from loguru import logger

from cinesync.core.entities import Volume
from cinesync.core.errors import CineSyncError
from cinesync.core.ports.repositories import ICatalogStore
from cinesync.services.file_handler import FileHandler
from cinesync.services.scanner import VolumeScanner


@dataclass
class SyncReport:
    """
    Bilan d'une synchronisation.

    Attributs:
        videos_added: Videos ajoutees au catalogue
        subtitles_added: Sous-titres rattaches a une copie
        videos_removed: Copies retirees (fichier disparu)
        subtitles_removed: Sous-titres retires (fichier disparu)
        errors: Fichiers dont le traitement a echoue
    """

    videos_added: int = 0
    subtitles_added: int = 0
    videos_removed: int = 0
    subtitles_removed: int = 0
    errors: int = 0

    @property
    def changes(self) -> int:
        return (
            self.videos_added
            + self.subtitles_added
            + self.videos_removed
            + self.subtitles_removed
        )


class VolumeSynchronizer:
    """
    Service de synchronisation volume / catalogue.

    Utilise les memes pipelines (FileHandler) que la surveillance en direct.
    """

    def __init__(
        self,
        scanner: VolumeScanner,
        catalog_store: ICatalogStore,
        file_handler: FileHandler,
    ) -> None:
        self._scanner = scanner
        self._store = catalog_store
        self._file_handler = file_handler

    async def sync(self, volume: Volume) -> SyncReport:
        """
        Synchronise un volume avec le catalogue.

        Args:
            volume: Volume a synchroniser

        Returns:
            SyncReport avec le detail des changements

        Raises:
            VolumeScanError: Si le volume est illisible (aucune suppression n'est faite)
        """
        logger.info(f"Synchronisation du volume {volume.name} ({volume.path})")
        scan = self._scanner.list_files(volume)
        report = SyncReport()

        for path in scan.videos:
            if self._store.is_path_present(path):
                continue
            try:
                await self._file_handler.handle_create(path, volume)
                if self._store.is_path_present(path):
                    report.videos_added += 1
            except CineSyncError as e:
                logger.error(f"Echec de l'ajout de {path}: {e}")
                report.errors += 1
            except Exception as e:
                logger.exception(f"Echec de l'ajout de {path}: {e}")
                report.errors += 1

        for path in scan.subtitles:
            if self._store.is_subtitle_path_present(path):
                continue
            try:
                await self._file_handler.handle_create(path, volume)
                if self._store.is_subtitle_path_present(path):
                    report.subtitles_added += 1
            except CineSyncError as e:
                logger.error(f"Echec de l'ajout de {path}: {e}")
                report.errors += 1
            except Exception as e:
                logger.exception(f"Echec de l'ajout de {path}: {e}")
                report.errors += 1

        self._remove_stale(volume, set(scan.videos), set(scan.subtitles), report)

        logger.info(
            f"Volume {volume.name} synchronise: +{report.videos_added} videos, "
            f"+{report.subtitles_added} sous-titres, -{report.videos_removed} videos, "
            f"-{report.subtitles_removed} sous-titres, {report.errors} erreurs"
        )
        return report

    def _remove_stale(
        self,
        volume: Volume,
        videos: set,
        subtitles: set,
        report: SyncReport,
    ) -> None:
        """Retire les copies et sous-titres du volume absents du disque."""
        for film in self._store.get_by_volume(volume.id):
            for volume_file in film.volume_files:
                if volume_file.volume_id != volume.id:
                    continue

                if volume_file.path not in videos:
                    try:
                        self._store.delete_volume_file(volume_file.path)
                        logger.info(f"Copie disparue retiree: {volume_file.path}")
                        report.videos_removed += 1
                    except CineSyncError as e:
                        logger.error(f"Retrait impossible de {volume_file.path}: {e}")
                        report.errors += 1
                    except Exception as e:
                        logger.exception(f"Retrait impossible de {volume_file.path}: {e}")
                        report.errors += 1
                    continue

                for subtitle in volume_file.subtitles:
                    if subtitle.path in subtitles:
                        continue
                    try:
                        self._store.remove_subtitle(volume_file.path, subtitle.path)
                        logger.info(f"Sous-titre disparu retire: {subtitle.path}")
                        report.subtitles_removed += 1
                    except CineSyncError as e:
                        logger.error(f"Retrait impossible de {subtitle.path}: {e}")
                        report.errors += 1
                    except Exception as e:
                        logger.exception(f"Retrait impossible de {subtitle.path}: {e}")
                        report.errors += 1
