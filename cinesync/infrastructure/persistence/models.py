"""
Modeles SQLModel pour la base de donnees CineSync.

Ces modeles representent les tables de la base de donnees SQLite.
Ils sont distincts des entites de domaine (dataclass dans core/entities/)
selon l'architecture hexagonale.

Tables:
- volumes: Racines de fichiers surveillees
- films: Entrees du catalogue avec metadonnees TMDB
- volume_files: Copies physiques d'un film (ordonnees par position)
- subtitles: Sous-titres externes d'une copie
- people: Personnes du casting et de l'equipe

Les champs JSON (*_json) permettent de stocker des listes (genres, pays,
casting) et les informations techniques de maniere serialisee dans SQLite.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    """Horodatage UTC avec fuseau."""
    return datetime.now(timezone.utc)


class VolumeModel(SQLModel, table=True):
    """Modele representant un volume."""

    __tablename__ = "volumes"

    id: int | None = Field(default=None, primary_key=True)
    name: str
    path: str = Field(unique=True, index=True)
    is_recursive: bool = Field(default=False)
    media_kind: str = Field(default="movie")
    created_at: datetime | None = Field(default_factory=utcnow)


class FilmModel(SQLModel, table=True):
    """
    Modele representant une entree du catalogue.

    Les champs guessed_* viennent du nom de fichier, les autres de TMDB.
    """

    __tablename__ = "films"

    id: int | None = Field(default=None, primary_key=True)
    tmdb_id: int | None = Field(default=None, index=True)
    imdb_id: str | None = Field(default=None, index=True)
    guessed_name: str = ""
    guessed_year: int = 0
    guessed_resolution: str = ""
    title: str | None = Field(default=None, index=True)
    original_title: str | None = None
    year: int | None = None
    runtime: int | None = None
    tagline: str | None = None
    overview: str | None = None
    poster_path: str | None = None
    backdrop_path: str | None = None
    classification: str = ""
    genres_json: str | None = None  # JSON: ["Action", "Drama"]
    countries_json: str | None = None  # JSON: ["US", "FR"]
    directors_json: str | None = None  # JSON: [525]
    writers_json: str | None = None  # JSON: [525, 1223]
    cast_json: str | None = None  # JSON: [{"name": "Neo", "person_tmdb_id": 6384}]
    imdb_rating: float | None = None
    letterboxd_rating: float | None = None
    created_at: datetime | None = Field(default_factory=utcnow)
    updated_at: datetime | None = Field(default_factory=utcnow)


class VolumeFileModel(SQLModel, table=True):
    """
    Modele representant une copie physique d'un film.

    Un chemin n'appartient qu'a une seule copie.
    """

    __tablename__ = "volume_files"

    id: int | None = Field(default=None, primary_key=True)
    film_id: int = Field(foreign_key="films.id", index=True)
    position: int = 0
    path: str = Field(unique=True, index=True)
    volume_id: int | None = Field(default=None, foreign_key="volumes.id", index=True)
    media_info_json: str | None = None


class SubtitleModel(SQLModel, table=True):
    """Modele representant un sous-titre externe d'une copie."""

    __tablename__ = "subtitles"
    __table_args__ = (UniqueConstraint("volume_file_id", "path"),)

    id: int | None = Field(default=None, primary_key=True)
    volume_file_id: int = Field(foreign_key="volume_files.id", index=True)
    path: str = Field(index=True)
    language: str = ""


class PersonModel(SQLModel, table=True):
    """Modele representant une personne (dedoublonnee par tmdb_id)."""

    __tablename__ = "people"

    id: int | None = Field(default=None, primary_key=True)
    tmdb_id: int = Field(unique=True, index=True)
    name: str = ""
    photo_path: str | None = None
    biography: str | None = None
    birthday: str | None = None
    deathday: str | None = None
    imdb_id: str | None = None
