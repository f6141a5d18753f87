"""
Service de gestion des volumes.

Creation (avec scan initial detache), suppression et consultation des
volumes. Le scan initial enrichit les fichiers avec un pool borne de
workers asyncio ; les entrees produites sont ajoutees au catalogue une par
une par l'orchestrateur.
"""

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from loguru import logger

from cinesync.core.entities import Film, MediaKind, Volume
from cinesync.core.errors import CineSyncError, InvalidVolumeError, NotFoundError
from cinesync.core.ports.repositories import ICatalogStore, IVolumeRepository
from cinesync.services.enricher import MetadataEnricher
from cinesync.services.film_manager import FilmManager
from cinesync.services.scanner import VolumeScanner
from cinesync.services.subtitles import related_subtitle_files
from cinesync.services.watcher import FileWatcher

MIN_NAME_LENGTH = 3
DEFAULT_SCAN_WORKERS = 20


@dataclass
class ScanReport:
    """
    Bilan du scan initial d'un volume.

    Attributs:
        total: Videos trouvees et absentes du catalogue
        added: Entrees ajoutees au catalogue
        failed: Videos dont le traitement a echoue
    """

    total: int = 0
    added: int = 0
    failed: int = 0


class VolumeManager:
    """
    Service de creation, scan et suppression des volumes.

    Les scans lances par create_volume sont detaches : la reference des
    taches est conservee jusqu'a leur fin.
    """

    def __init__(
        self,
        volume_repository: IVolumeRepository,
        catalog_store: ICatalogStore,
        scanner: VolumeScanner,
        enricher: MetadataEnricher,
        film_manager: FilmManager,
        watcher: Optional[FileWatcher] = None,
        scan_workers: int = DEFAULT_SCAN_WORKERS,
    ) -> None:
        """
        Initialise le service.

        Args:
            volume_repository: Stockage des volumes
            catalog_store: Stockage des entrees
            scanner: Listing des fichiers d'un volume
            enricher: Construction et enrichissement des entrees
            film_manager: Ajout des entrees au catalogue
            watcher: Surveillance en direct (None si inactive)
            scan_workers: Taille du pool de workers du scan initial
        """
        self._volumes = volume_repository
        self._store = catalog_store
        self._scanner = scanner
        self._enricher = enricher
        self._film_manager = film_manager
        self._watcher = watcher
        self._scan_workers = max(1, scan_workers)
        self._scan_tasks: set[asyncio.Task] = set()

    def list_volumes(self) -> list[Volume]:
        """Liste les volumes enregistres."""
        return self._volumes.get_all()

    def get_volume(self, volume_id: str) -> Volume:
        """
        Recupere un volume.

        Raises:
            NotFoundError: Si le volume n'existe pas
        """
        volume = self._volumes.get_by_id(volume_id)
        if volume is None:
            raise NotFoundError(f"Volume inconnu : {volume_id}")
        return volume

    def _validate(self, name: str, path: Path) -> None:
        if len(name) < MIN_NAME_LENGTH:
            raise InvalidVolumeError(
                f"Le nom du volume doit faire au moins {MIN_NAME_LENGTH} caracteres"
            )
        if not path.exists():
            raise InvalidVolumeError(f"Chemin introuvable : {path}")
        if not path.is_dir():
            raise InvalidVolumeError(f"Le chemin n'est pas un repertoire : {path}")
        if any(volume.path == path for volume in self._volumes.get_all()):
            raise InvalidVolumeError(f"Un volume existe deja pour {path}")

    async def create_volume(
        self,
        name: str,
        path: Path,
        is_recursive: bool = False,
        media_kind: MediaKind = MediaKind.MOVIE,
    ) -> tuple[Volume, asyncio.Task]:
        """
        Enregistre un volume et lance son scan initial en arriere-plan.

        Le volume est ajoute a la surveillance une fois le scan termine.

        Args:
            name: Nom d'affichage (au moins 3 caracteres)
            path: Racine du volume (repertoire existant)
            is_recursive: Parcourir les sous-repertoires
            media_kind: Type de medias du volume

        Returns:
            Le volume enregistre et la tache du scan initial

        Raises:
            InvalidVolumeError: Si le nom ou le chemin est invalide
        """
        path = path.expanduser().resolve()
        self._validate(name, path)

        volume = self._volumes.save(
            Volume(name=name, path=path, is_recursive=is_recursive, media_kind=media_kind)
        )
        logger.info(f"Volume cree: {volume.name} ({volume.path})")

        task = asyncio.create_task(self._initial_scan(volume))
        self._scan_tasks.add(task)
        task.add_done_callback(self._scan_tasks.discard)
        return volume, task

    async def _initial_scan(self, volume: Volume) -> ScanReport:
        try:
            report = await self.scan_volume(volume)
        except CineSyncError as e:
            logger.error(f"Scan initial du volume {volume.name} impossible: {e}")
            report = ScanReport()

        if self._watcher is not None and self._watcher.is_running:
            self._watcher.add_volume(volume)
        return report

    async def scan_volume(self, volume: Volume) -> ScanReport:
        """
        Scanne un volume et ajoute ses videos absentes du catalogue.

        Les workers construisent et enrichissent les entrees en parallele ;
        l'ajout au catalogue reste sequentiel.

        Args:
            volume: Volume a scanner

        Returns:
            ScanReport du scan

        Raises:
            VolumeScanError: Si le volume est illisible
        """
        scan = self._scanner.list_files(volume)
        paths = [p for p in scan.videos if not self._store.is_path_present(p)]
        report = ScanReport(total=len(paths))
        if not paths:
            logger.info(f"Volume {volume.name}: aucune nouvelle video")
            return report

        work: asyncio.Queue[Path] = asyncio.Queue()
        for path in paths:
            work.put_nowait(path)
        results: asyncio.Queue[tuple[Path, Optional[Film]]] = asyncio.Queue(
            maxsize=self._scan_workers
        )

        workers = [
            asyncio.create_task(self._scan_worker(volume, work, results))
            for _ in range(min(self._scan_workers, len(paths)))
        ]

        try:
            for _ in range(len(paths)):
                path, film = await results.get()
                if film is None:
                    report.failed += 1
                    continue
                try:
                    await self._film_manager.add_film(film)
                    report.added += 1
                except CineSyncError as e:
                    logger.error(f"Ajout impossible de {path}: {e}")
                    report.failed += 1
                except Exception as e:
                    logger.exception(f"Ajout impossible de {path}: {e}")
                    report.failed += 1
        finally:
            for worker in workers:
                worker.cancel()
            await asyncio.gather(*workers, return_exceptions=True)

        logger.info(
            f"Scan du volume {volume.name} termine: {report.added}/{report.total} "
            f"ajoutees, {report.failed} echecs"
        )
        return report

    async def _scan_worker(
        self,
        volume: Volume,
        work: asyncio.Queue[Path],
        results: asyncio.Queue[tuple[Path, Optional[Film]]],
    ) -> None:
        while True:
            try:
                path = work.get_nowait()
            except asyncio.QueueEmpty:
                return

            try:
                film = await self._enricher.create_film(
                    path, volume.id, related_subtitle_files(path)
                )
                await self._enricher.enrich(film)
            except Exception as e:
                logger.exception(f"Traitement impossible de {path}: {e}")
                film = None
            await results.put((path, film))

    def delete_volume(self, volume_id: str) -> int:
        """
        Supprime un volume et ses copies du catalogue.

        Les entrees sans autre copie sont supprimees.

        Args:
            volume_id: ID du volume

        Returns:
            Nombre de copies retirees

        Raises:
            NotFoundError: Si le volume n'existe pas
        """
        volume = self.get_volume(volume_id)
        removed = self._store.delete_volume_files(volume_id)
        self._volumes.delete(volume_id)
        if self._watcher is not None and self._watcher.is_running:
            self._watcher.remove_volume(volume_id)

        logger.info(f"Volume supprime: {volume.name} ({removed} copies retirees)")
        return removed
