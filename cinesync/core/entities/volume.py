"""
Entité volume : racine de fichiers enregistrée par un administrateur.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional


class MediaKind(Enum):
    """Type de médias contenus dans un volume."""

    MOVIE = "movie"


@dataclass
class Volume:
    """
    Volume surveillé.

    Immutable une fois le scan démarré, sauf suppression.

    Attributs :
        id : Identifiant attribué par le stockage
        name : Nom d'affichage (au moins 3 caractères)
        path : Racine du volume
        is_recursive : Parcourir les sous-répertoires
        media_kind : Type de médias du volume
    """

    name: str
    path: Path
    is_recursive: bool = False
    media_kind: MediaKind = MediaKind.MOVIE
    id: Optional[str] = None

    def contains(self, path: Path) -> bool:
        """Vérifie si le chemin se trouve sous la racine du volume."""
        return path == self.path or self.path in path.parents
