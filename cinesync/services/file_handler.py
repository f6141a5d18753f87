"""
Traitement des creations, renommages et suppressions de fichiers.

Logique commune a la synchronisation des volumes et a la surveillance en
direct. Chaque operation est bornee a un fichier : ses erreurs sont
journalisees et ne remontent pas, pour qu'un fichier en echec
n'interrompe jamais le traitement des suivants.
"""

from pathlib import Path
from typing import Optional

from loguru import logger

from cinesync.core.entities import Film, Volume
from cinesync.core.errors import (
    CineSyncError,
    ConflictError,
    NotFoundError,
    PathNotFoundError,
    UnavailableError,
)
from cinesync.core.ports.repositories import ICatalogStore
from cinesync.services.enricher import MetadataEnricher
from cinesync.services.film_manager import FilmManager
from cinesync.services.subtitles import related_media_for, related_subtitle_files
from cinesync.utils.constants import is_subtitle_file, is_video_file


class FileHandler:
    """
    Pipelines de creation, renommage et suppression d'un fichier.

    Les videos passent par l'enrichissement puis le FilmManager ; les
    sous-titres sont rattaches aux videos voisines qui partagent leur nom.
    """

    def __init__(
        self,
        catalog_store: ICatalogStore,
        enricher: MetadataEnricher,
        film_manager: FilmManager,
    ) -> None:
        self._store = catalog_store
        self._enricher = enricher
        self._film_manager = film_manager

    async def handle_create(self, path: Path, volume: Optional[Volume]) -> None:
        """
        Ajoute un fichier au catalogue selon son extension.

        Args:
            path: Chemin du fichier cree
            volume: Volume proprietaire (None si hors de tout volume)
        """
        if is_video_file(path):
            await self._create_video(path, volume)
        elif is_subtitle_file(path):
            self._create_subtitle(path)

    async def _build_film(self, path: Path, volume: Optional[Volume]) -> Film:
        return await self._enricher.create_film(
            path,
            volume.id if volume else None,
            related_subtitle_files(path),
        )

    async def _create_video(self, path: Path, volume: Optional[Volume]) -> None:
        if self._store.is_path_present(path):
            logger.debug(f"Deja catalogue: {path}")
            return

        film = await self._build_film(path, volume)
        await self._enricher.enrich(film)
        await self._store_film(film)

    async def _store_film(self, film: Film) -> None:
        try:
            await self._film_manager.add_film(film)
        except CineSyncError as e:
            logger.error(f"Ajout impossible de {film.volume_files[0].path}: {e}")

    def _create_subtitle(self, path: Path) -> None:
        related = related_media_for(path)
        if not related:
            logger.debug(f"Aucune video associee au sous-titre {path}")

        for media_path, subtitle in related:
            try:
                self._store.add_subtitle(media_path, subtitle)
                logger.info(f"Sous-titre {path.name} ajoute a {media_path.name}")
            except (NotFoundError, ConflictError) as e:
                logger.error(f"Sous-titre {path} non rattache a {media_path}: {e}")

    async def handle_rename(
        self, old_path: Path, new_path: Path, volume: Optional[Volume]
    ) -> None:
        """
        Reporte un renommage dans le catalogue.

        Video : si le nouveau chemin resout le meme ID TMDB que l'entree de
        l'ancien, la copie est remplacee sur place ; sinon l'ancienne copie
        est supprimee et le nouveau chemin suit le pipeline de creation.
        Sous-titre : retrait de l'ancien chemin puis ajout du nouveau.
        Changement de type (video <-> sous-titre) : retrait de l'ancien
        chemin puis creation du nouveau.

        Args:
            old_path: Ancien chemin
            new_path: Nouveau chemin
            volume: Volume proprietaire du nouveau chemin
        """
        if is_video_file(old_path) and is_video_file(new_path):
            await self._rename_video(old_path, new_path, volume)
            return

        await self.handle_remove(old_path)
        await self.handle_create(new_path, volume)

    async def _rename_video(
        self, old_path: Path, new_path: Path, volume: Optional[Volume]
    ) -> None:
        new_film = await self._build_film(new_path, volume)
        try:
            await self._enricher.resolve_external_id(new_film)
        except (NotFoundError, UnavailableError) as e:
            logger.warning(f"Renommage {new_path}: ID TMDB non resolu ({e})")

        try:
            old_film = self._store.get_by_path(old_path)
        except PathNotFoundError:
            old_film = None

        if old_film is not None and (old_film.tmdb_id or 0) == (new_film.tmdb_id or 0):
            try:
                self._store.replace_volume_file(old_film, old_path, new_film.volume_files[0])
                logger.info(f"Copie renommee: {old_path} -> {new_path}")
            except CineSyncError as e:
                logger.error(f"Renommage impossible de {old_path}: {e}")
            return

        if old_film is not None:
            self._delete_video(old_path)
        else:
            logger.warning(f"Renommage: {old_path} absent du catalogue")

        if self._store.is_path_present(new_path):
            logger.debug(f"Deja catalogue: {new_path}")
            return
        await self._enricher.enrich(new_film)
        await self._store_film(new_film)

    async def handle_remove(self, path: Path) -> None:
        """
        Retire un fichier du catalogue selon son extension.

        Video : suppression de la copie (et de l'entree si c'etait la derniere).
        Sous-titre : retrait de chaque video associee.
        """
        if is_video_file(path):
            self._delete_video(path)
        elif is_subtitle_file(path):
            self._remove_subtitle(path)

    def _delete_video(self, path: Path) -> None:
        try:
            self._store.delete_volume_file(path)
            logger.info(f"Copie supprimee: {path}")
        except PathNotFoundError:
            logger.debug(f"Suppression ignoree, absent du catalogue: {path}")

    def _remove_subtitle(self, path: Path) -> None:
        for media_path, _subtitle in related_media_for(path):
            self.remove_subtitle(media_path, path)

    def remove_subtitle(self, media_path: Path, subtitle_path: Path) -> None:
        """Detache un sous-titre d'une copie, sans erreur s'il est absent."""
        try:
            self._store.remove_subtitle(media_path, subtitle_path)
            logger.info(f"Sous-titre {subtitle_path.name} retire de {media_path.name}")
        except PathNotFoundError:
            logger.debug(f"Sous-titre {subtitle_path} absent de {media_path}")
