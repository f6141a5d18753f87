"""
Interfaces ports pour les sources de métadonnées externes.

Interfaces abstraites (ports) définissant les contrats pour le fournisseur
de métadonnées (TMDB) et les sources de notes publiques (IMDb, Letterboxd).

Toutes les méthodes peuvent lever UnavailableError : les services traitent
chaque échec comme récupérable à l'endroit de l'appel.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from cinesync.core.entities.person import Person


@dataclass
class SearchResult:
    """
    Candidat retourné par une recherche par titre.

    Attributs :
        id : ID TMDB
        title : Titre localisé
        popularity : Score de popularité TMDB
        year : Année de sortie (None si inconnue)
    """

    id: int
    title: str
    popularity: float = 0.0
    year: Optional[int] = None


@dataclass
class FilmDetails:
    """
    Détails d'un film depuis le fournisseur.

    Attributs :
        id : ID TMDB
        imdb_id : ID IMDb (ttXXXXXXX)
        title : Titre localisé
        original_title : Titre en langue originale
        release_date : Date de sortie (YYYY-MM-DD, vide si inconnue)
        runtime : Durée en minutes
        tagline : Accroche
        overview : Résumé
        poster_path, backdrop_path : Clés d'image
        genres : Noms des genres
        production_countries : Codes ISO 3166-1
    """

    id: int
    title: str
    imdb_id: Optional[str] = None
    original_title: Optional[str] = None
    release_date: str = ""
    runtime: Optional[int] = None
    tagline: Optional[str] = None
    overview: Optional[str] = None
    poster_path: Optional[str] = None
    backdrop_path: Optional[str] = None
    genres: tuple[str, ...] = ()
    production_countries: tuple[str, ...] = ()

    @property
    def year(self) -> Optional[int]:
        """Année extraite de la date de sortie."""
        if len(self.release_date) >= 4 and self.release_date[:4].isdigit():
            return int(self.release_date[:4])
        return None


@dataclass
class CastMember:
    """Membre du casting : ID de la personne et personnage joué."""

    id: int
    character: str = ""


@dataclass
class CrewMember:
    """Membre de l'équipe : ID de la personne, poste et département."""

    id: int
    job: str = ""
    department: str = ""


@dataclass
class Credits:
    """Casting et équipe d'un film."""

    cast: tuple[CastMember, ...] = ()
    crew: tuple[CrewMember, ...] = ()


@dataclass
class CountryReleases:
    """
    Dates de sortie d'un pays.

    Attributs :
        country : Code ISO 3166-1 (ex: "US")
        certifications : Certifications des sorties, dans l'ordre du fournisseur
    """

    country: str
    certifications: tuple[str, ...] = ()


class IMetadataProvider(ABC):
    """
    Interface du fournisseur de métadonnées de films.

    Les implémentations gèrent le cache, le retry et la traduction des
    erreurs réseau en UnavailableError.
    """

    @abstractmethod
    async def search(
        self,
        query: str,
        year: Optional[int] = None,
    ) -> list[SearchResult]:
        """
        Recherche des films par titre.

        Args :
            query : Titre à rechercher
            year : Indice d'année optionnel

        Retourne :
            Candidats dans l'ordre du fournisseur (vide si aucun)
        """
        ...

    @abstractmethod
    async def get_details(self, tmdb_id: int) -> Optional[FilmDetails]:
        """Récupère les détails d'un film, ou None si inconnu."""
        ...

    @abstractmethod
    async def get_credits(self, tmdb_id: int) -> Credits:
        """Récupère le casting et l'équipe d'un film."""
        ...

    @abstractmethod
    async def get_release_dates(self, tmdb_id: int) -> list[CountryReleases]:
        """Récupère les dates de sortie par pays."""
        ...

    @abstractmethod
    async def get_person(self, person_id: int) -> Optional[Person]:
        """Récupère les détails d'une personne, ou None si inconnue."""
        ...

    @abstractmethod
    async def find_by_imdb_id(self, imdb_id: str) -> Optional[int]:
        """Retourne l'ID TMDB du film correspondant à un ID IMDb."""
        ...

    @property
    @abstractmethod
    def source(self) -> str:
        """Retourne l'identifiant de la source (ex: 'tmdb')."""
        ...


class IRatingsProvider(ABC):
    """
    Interface des sources de notes publiques.

    Chaque méthode lève ProviderUnavailableError en cas d'échec.
    """

    @abstractmethod
    async def get_imdb_rating(self, imdb_id: str) -> Optional[float]:
        """Note IMDb du film (sur 10)."""
        ...

    @abstractmethod
    async def get_letterboxd_rating(self, imdb_id: str) -> Optional[float]:
        """Note Letterboxd du film (sur 5)."""
        ...

    @abstractmethod
    async def get_tmdb_id_from_letterboxd(self, url: str) -> Optional[int]:
        """ID TMDB référencé par une page film Letterboxd."""
        ...
