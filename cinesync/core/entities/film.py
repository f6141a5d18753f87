"""
Entités du catalogue de films.

Un Film représente une oeuvre unique, potentiellement présente sur plusieurs
volumes : chaque copie physique est un VolumeFile, avec ses sous-titres
externes. Les champs devinés (guessed_*) viennent du nom de fichier, les
champs enrichis de TMDB une fois l'identifiant résolu.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from cinesync.core.value_objects import MediaInfo


@dataclass
class Subtitle:
    """
    Fichier de sous-titres externe associé à une copie.

    Attributs :
        path : Chemin du fichier de sous-titres
        language : Code langue extrait du nom (vide si absent, non validé)
    """

    path: Path
    language: str = ""


@dataclass
class VolumeFile:
    """
    Copie physique d'un film sur un volume.

    Attributs :
        path : Chemin du fichier vidéo
        volume_id : ID du volume propriétaire
        media_info : Informations techniques (None si la sonde a échoué)
        subtitles : Sous-titres externes, chemins uniques
    """

    path: Path
    volume_id: Optional[str] = None
    media_info: Optional[MediaInfo] = None
    subtitles: list[Subtitle] = field(default_factory=list)


@dataclass
class Character:
    """Rôle tenu par une personne dans un film."""

    name: str
    person_tmdb_id: int


@dataclass
class Film:
    """
    Entrée du catalogue représentant un film.

    Invariant : un Film sans volume_files n'existe pas (il est supprimé).

    Attributs :
        id : Identifiant attribué par le stockage
        tmdb_id : ID TMDB (None ou 0 tant que non résolu)
        imdb_id : ID IMDb (format ttXXXXXXX)
        guessed_name : Titre deviné depuis le nom de fichier
        guessed_year : Année devinée (0 si absente)
        guessed_resolution : Résolution devinée ou sondée
        title, original_title, year, runtime, tagline, overview : Détails TMDB
        poster_path, backdrop_path : Clés d'image TMDB
        classification : Certification US (vide si absente)
        genres : Noms des genres
        countries : Codes ISO 3166-1 des pays de production
        directors, writers : IDs TMDB des réalisateurs et scénaristes
        cast : Rôles (nom du personnage, ID TMDB de la personne)
        imdb_rating, letterboxd_rating : Notes publiques scrapées
        volume_files : Copies physiques, dans l'ordre d'ajout
    """

    id: Optional[str] = None
    tmdb_id: Optional[int] = None
    imdb_id: Optional[str] = None
    guessed_name: str = ""
    guessed_year: int = 0
    guessed_resolution: str = ""
    title: Optional[str] = None
    original_title: Optional[str] = None
    year: Optional[int] = None
    runtime: Optional[int] = None
    tagline: Optional[str] = None
    overview: Optional[str] = None
    poster_path: Optional[str] = None
    backdrop_path: Optional[str] = None
    classification: str = ""
    genres: list[str] = field(default_factory=list)
    countries: list[str] = field(default_factory=list)
    directors: list[int] = field(default_factory=list)
    writers: list[int] = field(default_factory=list)
    cast: list[Character] = field(default_factory=list)
    imdb_rating: Optional[float] = None
    letterboxd_rating: Optional[float] = None
    volume_files: list[VolumeFile] = field(default_factory=list)

    @property
    def has_external_id(self) -> bool:
        """Vérifie si l'identifiant TMDB est résolu."""
        return bool(self.tmdb_id)

    @property
    def display_title(self) -> str:
        """Titre TMDB, ou nom deviné tant que non résolu."""
        return self.title or self.guessed_name

    def cast_and_crew_ids(self) -> list[int]:
        """Retourne les IDs TMDB des personnes référencées, sans doublon."""
        ids: list[int] = []
        seen: set[int] = set()
        for person_id in (
            *self.directors,
            *self.writers,
            *(character.person_tmdb_id for character in self.cast),
        ):
            if person_id not in seen:
                seen.add(person_id)
                ids.append(person_id)
        return ids
