"""
Interfaces ports pour la persistance du catalogue.

Interfaces abstraites (ports) définissant les contrats de stockage des films,
volumes et personnes. L'implémentation fournie utilise SQLite via SQLModel ;
les tests peuvent utiliser une base en mémoire.

Le contrat est synchrone et ne garantit l'atomicité qu'à l'échelle de la
mise à jour d'une seule entrée.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from cinesync.core.entities import Film, Person, Subtitle, Volume, VolumeFile


class ICatalogStore(ABC):
    """
    Interface de stockage des entrées du catalogue.

    Les chemins sont indexés : un chemin vidéo appartient au plus à une
    entrée, un chemin de sous-titre au plus à une copie.
    """

    @abstractmethod
    def is_path_present(self, path: Path) -> bool:
        """Vérifie si un chemin vidéo est référencé par une entrée."""
        ...

    @abstractmethod
    def is_subtitle_path_present(self, path: Path) -> bool:
        """Vérifie si un chemin de sous-titres est référencé par une copie."""
        ...

    @abstractmethod
    def get_by_path(self, path: Path) -> Film:
        """
        Récupère l'entrée possédant une copie à ce chemin.

        Lève :
            PathNotFoundError : si aucune copie ne correspond
        """
        ...

    @abstractmethod
    def get_by_volume(self, volume_id: str) -> list[Film]:
        """Liste les entrées ayant au moins une copie sur ce volume."""
        ...

    @abstractmethod
    def get_by_id(self, film_id: str) -> Optional[Film]:
        """Récupère une entrée par son ID interne."""
        ...

    @abstractmethod
    def get_all(self) -> list[Film]:
        """Liste toutes les entrées du catalogue."""
        ...

    @abstractmethod
    def is_present(self, tmdb_id: int) -> bool:
        """Vérifie si une entrée porte cet ID TMDB."""
        ...

    @abstractmethod
    def add(self, film: Film) -> Film:
        """
        Insère une entrée, ou la remplace si son ID existe déjà.

        Retourne :
            L'entrée stockée, avec son ID
        """
        ...

    @abstractmethod
    def add_volume_file_to_existing(self, film: Film) -> Film:
        """
        Ajoute les copies de film à l'entrée portant le même ID TMDB.

        Lève :
            NotFoundError : si aucune entrée ne porte cet ID TMDB
            ConflictError : si une copie est déjà présente
        """
        ...

    @abstractmethod
    def replace_volume_file(
        self, film: Film, old_path: Path, volume_file: VolumeFile
    ) -> Film:
        """
        Remplace sur place la copie old_path de l'entrée film.

        Lève :
            InvariantViolationError : si old_path n'appartient pas à l'entrée
        """
        ...

    @abstractmethod
    def delete_volume_file(self, path: Path) -> None:
        """
        Supprime la copie à ce chemin, et l'entrée si c'était la dernière.

        Lève :
            PathNotFoundError : si aucune copie ne correspond
        """
        ...

    @abstractmethod
    def add_subtitle(self, media_path: Path, subtitle: Subtitle) -> None:
        """
        Rattache un sous-titre à la copie media_path.

        Lève :
            PathNotFoundError : si la copie est absente
            ConflictError : si le sous-titre est déjà rattaché
        """
        ...

    @abstractmethod
    def remove_subtitle(self, media_path: Path, subtitle_path: Path) -> None:
        """
        Détache un sous-titre de la copie media_path.

        Lève :
            PathNotFoundError : si la copie ou le sous-titre est absent
        """
        ...

    @abstractmethod
    def delete_volume_files(self, volume_id: str) -> int:
        """
        Supprime toutes les copies d'un volume et les entrées laissées vides.

        Retourne :
            Nombre de copies supprimées
        """
        ...


class IVolumeRepository(ABC):
    """Interface de stockage des volumes."""

    @abstractmethod
    def get_by_id(self, volume_id: str) -> Optional[Volume]:
        """Récupère un volume par son ID."""
        ...

    @abstractmethod
    def get_all(self) -> list[Volume]:
        """Liste tous les volumes."""
        ...

    @abstractmethod
    def save(self, volume: Volume) -> Volume:
        """Sauvegarde un volume (insertion ou mise à jour)."""
        ...

    @abstractmethod
    def delete(self, volume_id: str) -> bool:
        """Supprime un volume par ID. Retourne True si supprimé."""
        ...


class IPersonRepository(ABC):
    """Interface de stockage des personnes."""

    @abstractmethod
    def is_present(self, tmdb_id: int) -> bool:
        """Vérifie si une personne porte cet ID TMDB."""
        ...

    @abstractmethod
    def get_by_tmdb_id(self, tmdb_id: int) -> Optional[Person]:
        """Récupère une personne par son ID TMDB."""
        ...

    @abstractmethod
    def save(self, person: Person) -> Person:
        """Sauvegarde une personne (dédoublonnée par ID TMDB)."""
        ...
