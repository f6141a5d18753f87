"""
Service de gestion des entrees du catalogue.

Ajoute les entrees enrichies au stockage en fusionnant les copies d'un
meme film (meme ID TMDB), cree paresseusement les personnes du casting
et permet de corriger l'identification d'une entree depuis un lien
TMDB, IMDb ou Letterboxd.
"""

import re
from typing import Optional
from urllib.parse import urlparse

from loguru import logger

from cinesync.core.entities import Film, Person
from cinesync.core.errors import NotFoundError, UnavailableError
from cinesync.core.ports.api_clients import IMetadataProvider, IRatingsProvider
from cinesync.core.ports.repositories import ICatalogStore, IPersonRepository
from cinesync.services.enricher import MetadataEnricher
from cinesync.services.filters import CatalogFilters

TMDB_HOSTS = frozenset({"www.themoviedb.org", "themoviedb.org"})
IMDB_HOSTS = frozenset({"www.imdb.com", "imdb.com", "m.imdb.com"})
LETTERBOXD_HOSTS = frozenset({"letterboxd.com", "www.letterboxd.com"})

_TMDB_PATH = re.compile(r"^/movie/(\d+)(?:-[^/]*)?/?$")
_IMDB_PATH = re.compile(r"^/title/(tt\d+)/?")


def parse_tmdb_link(url: str) -> Optional[int]:
    """
    Extrait l'ID TMDB d'une URL themoviedb.org.

    Formats acceptes : /movie/1817, /movie/1817/ et /movie/1817-phone-booth.
    """
    match = _TMDB_PATH.match(urlparse(url).path)
    return int(match.group(1)) if match else None


def parse_imdb_link(url: str) -> Optional[str]:
    """Extrait l'ID IMDb (ttXXXXXXX) d'une URL imdb.com."""
    match = _IMDB_PATH.match(urlparse(url).path)
    return match.group(1) if match else None


class FilmManager:
    """
    Service d'ajout et de correction des entrees du catalogue.

    Detient l'agregat CatalogFilters et le met a jour a chaque nouvelle entree.
    """

    def __init__(
        self,
        catalog_store: ICatalogStore,
        person_repository: IPersonRepository,
        enricher: MetadataEnricher,
        filters: CatalogFilters,
        metadata_provider: Optional[IMetadataProvider] = None,
        ratings_provider: Optional[IRatingsProvider] = None,
    ) -> None:
        """
        Initialise le service.

        Args:
            catalog_store: Stockage des entrees
            person_repository: Stockage des personnes
            enricher: Service d'enrichissement (pour la correction par lien)
            filters: Agregat des filtres du catalogue
            metadata_provider: Fournisseur TMDB (None si desactive)
            ratings_provider: Source Letterboxd pour la correction par lien
        """
        self._store = catalog_store
        self._people = person_repository
        self._enricher = enricher
        self._filters = filters
        self._provider = metadata_provider
        self._ratings = ratings_provider

    @property
    def filters(self) -> CatalogFilters:
        """Agregat des filtres maintenu par ce service."""
        return self._filters

    async def add_film(self, film: Film, update: bool = False) -> Film:
        """
        Ajoute une entree au catalogue.

        Une nouvelle entree est creee (ou remplacee si update) quand l'ID TMDB
        est absent ou inconnu du stockage ; sinon la copie est rattachee a
        l'entree existante. Les personnes referencees sont ensuite creees.

        Args:
            film: Entree enrichie
            update: Remplacer l'entree stockee de meme ID

        Returns:
            L'entree stockee

        Raises:
            ConflictError: Si la copie est deja cataloguee
        """
        if update or not film.has_external_id or not self._store.is_present(film.tmdb_id):
            stored = self._store.add(film)
            self._filters.add_film(stored)
            logger.info(f"Film ajoute: {stored.display_title} (id={stored.id})")
        else:
            stored = self._store.add_volume_file_to_existing(film)
            logger.info(
                f"Copie ajoutee a {stored.display_title}: "
                f"{', '.join(str(vf.path) for vf in film.volume_files)}"
            )

        await self._ensure_people(film)
        return stored

    async def _ensure_people(self, film: Film) -> None:
        """Cree les personnes du casting et de l'equipe encore inconnues."""
        for person_id in film.cast_and_crew_ids():
            if self._people.is_present(person_id):
                continue
            person = await self._fetch_person(person_id)
            self._people.save(person)

    async def _fetch_person(self, person_id: int) -> Person:
        """Recupere une personne ; en cas d'echec, seul son ID TMDB est conserve."""
        if self._provider is None:
            return Person(tmdb_id=person_id)
        try:
            person = await self._provider.get_person(person_id)
        except UnavailableError as e:
            logger.warning(f"Personne TMDB {person_id} indisponible: {e}")
            return Person(tmdb_id=person_id)
        return person if person is not None else Person(tmdb_id=person_id)

    async def resolve_link(self, url: str) -> int:
        """
        Resout un ID TMDB depuis un lien TMDB, IMDb ou Letterboxd.

        Args:
            url: Lien vers la page du film

        Returns:
            ID TMDB

        Raises:
            NotFoundError: Lien non reconnu ou film introuvable
            UnavailableError: Source indisponible
        """
        host = urlparse(url).netloc.lower()

        if host in TMDB_HOSTS:
            tmdb_id = parse_tmdb_link(url)
        elif host in IMDB_HOSTS:
            imdb_id = parse_imdb_link(url)
            if imdb_id is None or self._provider is None:
                tmdb_id = None
            else:
                tmdb_id = await self._provider.find_by_imdb_id(imdb_id)
        elif host in LETTERBOXD_HOSTS and self._ratings is not None:
            tmdb_id = await self._ratings.get_tmdb_id_from_letterboxd(url)
        else:
            raise NotFoundError(f"Lien non reconnu : {url}")

        if tmdb_id is None:
            raise NotFoundError(f"Aucun film TMDB pour le lien : {url}")
        return tmdb_id

    async def relink_film(self, film_id: str, url: str) -> Film:
        """
        Corrige l'identification d'une entree depuis un lien.

        Args:
            film_id: ID interne de l'entree
            url: Lien TMDB, IMDb ou Letterboxd du bon film

        Returns:
            L'entree mise a jour

        Raises:
            NotFoundError: Entree inconnue, lien non reconnu ou film introuvable
        """
        tmdb_id = await self.resolve_link(url)

        film = self._store.get_by_id(film_id)
        if film is None:
            raise NotFoundError(f"Film inconnu : {film_id}")

        film.tmdb_id = tmdb_id
        await self._enricher.fill_details(film)
        return await self.add_film(film, update=True)
