"""
Service d'enrichissement des entrees du catalogue.

Transforme un chemin de fichier en entree du catalogue : parsing du nom,
sonde technique, correlation des sous-titres, puis resolution de
l'identifiant TMDB et recuperation des details, du casting et des notes.

Tout echec externe est non fatal : l'entree poursuit son chemin avec les
champs concernes vides (titre = nom devine si la resolution echoue).
"""

import asyncio
from pathlib import Path
from typing import Optional

from loguru import logger
from rapidfuzz.distance import Levenshtein

from cinesync.core.entities import Character, Film, VolumeFile
from cinesync.core.errors import (
    CineSyncError,
    ExternalIdNotFoundError,
    NotFoundError,
    ProviderUnavailableError,
    UnavailableError,
)
from cinesync.core.ports.api_clients import (
    CountryReleases,
    Credits,
    IMetadataProvider,
    IRatingsProvider,
    SearchResult,
)
from cinesync.core.ports.parser import IMediaInfoExtractor
from cinesync.core.value_objects import MediaInfo
from cinesync.services.filename_parser import parse_filename
from cinesync.services.subtitles import subtitles_for

CLASSIFICATION_COUNTRY = "US"


def select_best_candidate(name: str, candidates: list[SearchResult]) -> Optional[SearchResult]:
    """
    Choisit le candidat le plus populaire proche du nom devine.

    Le premier candidat est toujours retenu comme plancher. Un candidat
    suivant le remplace s'il est strictement plus populaire ET si sa
    distance de Levenshtein au nom est inferieure au tiers de la longueur
    du nom. A popularite egale, le premier vu l'emporte.

    Args:
        name: Nom devine depuis le fichier
        candidates: Resultats de recherche dans l'ordre du fournisseur

    Returns:
        Le candidat retenu, ou None si la liste est vide
    """
    max_distance = len(name) // 3
    best: Optional[SearchResult] = None

    for candidate in candidates:
        if best is None:
            best = candidate
            continue
        if candidate.popularity <= best.popularity:
            continue
        if Levenshtein.distance(name, candidate.title) < max_distance:
            best = candidate

    return best


def us_classification(releases: list[CountryReleases]) -> str:
    """Certification de la premiere sortie du premier enregistrement US."""
    for record in releases:
        if record.country == CLASSIFICATION_COUNTRY:
            return record.certifications[0] if record.certifications else ""
    return ""


def _unique(ids: list[int]) -> list[int]:
    seen: set[int] = set()
    unique = []
    for person_id in ids:
        if person_id not in seen:
            seen.add(person_id)
            unique.append(person_id)
    return unique


class MetadataEnricher:
    """
    Service construisant et enrichissant les entrees du catalogue.

    Coordonne:
    - Le parsing du nom de fichier et la correlation des sous-titres
    - La sonde technique (IMediaInfoExtractor), executee hors de la boucle
    - Le fournisseur de metadonnees (IMetadataProvider)
    - Les sources de notes publiques (IRatingsProvider)

    Le fournisseur et les notes sont optionnels : sans cle TMDB,
    les entrees restent au titre devine.
    """

    def __init__(
        self,
        media_info_extractor: IMediaInfoExtractor,
        metadata_provider: Optional[IMetadataProvider] = None,
        ratings_provider: Optional[IRatingsProvider] = None,
    ) -> None:
        """
        Initialise le service d'enrichissement.

        Args:
            media_info_extractor: Sonde technique
            metadata_provider: Fournisseur de metadonnees (None si desactive)
            ratings_provider: Sources de notes (None si desactivees)
        """
        self._extractor = media_info_extractor
        self._provider = metadata_provider
        self._ratings = ratings_provider

    async def _probe(self, path: Path) -> Optional[MediaInfo]:
        """Execute la sonde technique dans un thread ; None si elle echoue."""
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, self._extractor.extract, path)
        except Exception as e:
            logger.warning(f"Sonde technique en echec pour {path}: {e}")
            return None

    async def create_film(
        self,
        path: Path,
        volume_id: Optional[str],
        subtitle_paths: list[Path],
    ) -> Film:
        """
        Construit une entree non enrichie pour un fichier video.

        Args:
            path: Chemin du fichier video
            volume_id: ID du volume proprietaire
            subtitle_paths: Sous-titres candidats (filtres par convention de nom)

        Returns:
            Film avec exactement une copie et les champs devines
        """
        parsed = parse_filename(path.name)
        media_info = await self._probe(path)

        resolution = parsed.resolution
        if not resolution and media_info is not None:
            resolution = media_info.resolution

        return Film(
            guessed_name=parsed.name,
            guessed_year=parsed.year,
            guessed_resolution=resolution,
            volume_files=[
                VolumeFile(
                    path=path,
                    volume_id=volume_id,
                    media_info=media_info,
                    subtitles=subtitles_for(path, subtitle_paths),
                )
            ],
        )

    def _require_provider(self) -> IMetadataProvider:
        if self._provider is None:
            raise ProviderUnavailableError("tmdb", "cle API non configuree")
        return self._provider

    async def resolve_external_id(self, film: Film) -> int:
        """
        Resout l'ID TMDB d'une entree depuis son nom devine.

        Args:
            film: Entree a resoudre (tmdb_id est renseigne en cas de succes)

        Returns:
            L'ID TMDB retenu

        Raises:
            ExternalIdNotFoundError: Si la recherche ne retourne aucun candidat
            UnavailableError: Si le fournisseur est indisponible
        """
        provider = self._require_provider()
        year = film.guessed_year or None
        candidates = await provider.search(film.guessed_name, year=year)

        best = select_best_candidate(film.guessed_name, candidates)
        if best is None:
            raise ExternalIdNotFoundError(film.guessed_name, year)

        film.tmdb_id = best.id
        logger.debug(f"'{film.guessed_name}' resolu en TMDB {best.id} ({best.title})")
        return best.id

    async def fill_details(self, film: Film) -> Film:
        """
        Renseigne les details TMDB, le casting et les notes d'une entree resolue.

        Les credits, dates de sortie et notes sont non fatals : un echec
        laisse les champs correspondants vides.

        Args:
            film: Entree avec un tmdb_id resolu

        Returns:
            La meme entree, enrichie

        Raises:
            ExternalIdNotFoundError: Si TMDB ne connait pas l'ID
            UnavailableError: Si les details ne peuvent pas etre recuperes
        """
        provider = self._require_provider()
        details = await provider.get_details(film.tmdb_id)
        if details is None:
            raise ExternalIdNotFoundError(film.guessed_name, film.guessed_year or None)

        film.imdb_id = details.imdb_id
        film.title = details.title
        film.original_title = details.original_title
        film.year = details.year
        film.runtime = details.runtime
        film.tagline = details.tagline
        film.overview = details.overview
        film.poster_path = details.poster_path
        film.backdrop_path = details.backdrop_path
        film.genres = list(details.genres)
        film.countries = list(details.production_countries)

        credits, releases = await asyncio.gather(
            provider.get_credits(film.tmdb_id),
            provider.get_release_dates(film.tmdb_id),
            return_exceptions=True,
        )

        if isinstance(credits, UnavailableError):
            logger.warning(f"Credits indisponibles pour TMDB {film.tmdb_id}: {credits}")
        elif isinstance(credits, BaseException):
            raise credits
        else:
            self._apply_credits(film, credits)

        if isinstance(releases, UnavailableError):
            logger.warning(f"Dates de sortie indisponibles pour TMDB {film.tmdb_id}: {releases}")
        elif isinstance(releases, BaseException):
            raise releases
        else:
            film.classification = us_classification(releases)

        await self._fill_ratings(film)
        return film

    def _apply_credits(self, film: Film, credits: Credits) -> None:
        """Reporte realisateurs, scenaristes et casting sur l'entree."""
        film.directors = _unique([m.id for m in credits.crew if m.job == "Director"])
        film.writers = _unique([m.id for m in credits.crew if m.department == "Writing"])
        film.cast = [
            Character(name=member.character, person_tmdb_id=member.id)
            for member in credits.cast
        ]

    async def _fill_ratings(self, film: Film) -> None:
        """Recupere les notes IMDb et Letterboxd en parallele."""
        if self._ratings is None or not film.imdb_id:
            return

        imdb, letterboxd = await asyncio.gather(
            self._ratings.get_imdb_rating(film.imdb_id),
            self._ratings.get_letterboxd_rating(film.imdb_id),
            return_exceptions=True,
        )

        if isinstance(imdb, BaseException):
            logger.warning(f"Note IMDb indisponible pour {film.imdb_id}: {imdb}")
        else:
            film.imdb_rating = imdb

        if isinstance(letterboxd, BaseException):
            logger.warning(f"Note Letterboxd indisponible pour {film.imdb_id}: {letterboxd}")
        else:
            film.letterboxd_rating = letterboxd

    async def enrich(self, film: Film) -> Film:
        """
        Resout puis enrichit une entree, sans jamais echouer.

        La resolution est sautee si l'entree a deja un ID TMDB. Si elle
        echoue, le titre prend la valeur du nom devine.

        Args:
            film: Entree construite par create_film

        Returns:
            La meme entree, enrichie autant que possible
        """
        if not film.has_external_id:
            try:
                await self.resolve_external_id(film)
            except NotFoundError as e:
                logger.warning(f"{e}, titre devine conserve")
                film.title = film.guessed_name
                return film
            except UnavailableError as e:
                logger.error(f"Resolution impossible pour '{film.guessed_name}': {e}")
                film.title = film.guessed_name
                return film

        try:
            await self.fill_details(film)
        except CineSyncError as e:
            logger.error(f"Details TMDB {film.tmdb_id} indisponibles: {e}")
            if not film.title:
                film.title = film.guessed_name

        return film
