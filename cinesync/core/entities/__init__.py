"""
Entités métier du catalogue.

Exports:
- Film: Entrée du catalogue (une oeuvre, une ou plusieurs copies)
- VolumeFile: Copie physique d'un film sur un volume
- Subtitle: Sous-titre externe d'une copie
- Character: Rôle dans un film
- Volume, MediaKind: Racine de fichiers surveillée
- Person: Personne du casting ou de l'équipe
"""

from cinesync.core.entities.film import Character, Film, Subtitle, VolumeFile
from cinesync.core.entities.person import Person
from cinesync.core.entities.volume import MediaKind, Volume

__all__ = [
    "Film",
    "VolumeFile",
    "Subtitle",
    "Character",
    "Volume",
    "MediaKind",
    "Person",
]
